# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_fm_router

from typing import Any, Dict, Mapping, Optional, Tuple

from coreason_fm_router.catalog import DEFAULT_CATALOG, ModelCatalog
from coreason_fm_router.config import RouterSettings
from coreason_fm_router.constants import PROXY_REMEDIATION
from coreason_fm_router.controller import RoutingController
from coreason_fm_router.dispatcher import LiteLLMDispatcher
from coreason_fm_router.fallback import DEFAULT_FALLBACK_CHAINS, FallbackChainTable
from coreason_fm_router.health import HealthCache, HealthGate
from coreason_fm_router.interfaces import ModelDispatcher
from coreason_fm_router.models import HealthVerdict
from coreason_fm_router.presets import DEFAULT_RESOLVER, PresetResolver
from coreason_fm_router.routing_config import apply_routing_config
from coreason_fm_router.utils.logger import logger


class RoutingEngine:
    """
    Owns the lookup tables, the health gate and its cache, and the dispatcher,
    and hands out controllers bound to a preset.
    """

    def __init__(
        self,
        settings: Optional[RouterSettings] = None,
        catalog: ModelCatalog = DEFAULT_CATALOG,
        resolver: Optional[PresetResolver] = None,
        chains: Optional[FallbackChainTable] = None,
        health_gate: Optional[HealthGate] = None,
    ) -> None:
        self.settings = settings or RouterSettings()
        logger.info(f"Initializing RoutingEngine for proxy {self.settings.proxy_url}")

        # The built-in presets and chains only fit the built-in catalog
        if resolver is None:
            if catalog is not DEFAULT_CATALOG:
                raise ValueError("A custom catalog needs a PresetResolver built on it")
            resolver = DEFAULT_RESOLVER
        if resolver.catalog is not catalog:
            raise ValueError("PresetResolver was built on a different catalog")
        if chains is None and catalog is not DEFAULT_CATALOG:
            raise ValueError("A custom catalog needs a FallbackChainTable built on it")
        if chains is not None and chains.catalog is not catalog:
            raise ValueError("FallbackChainTable was built on a different catalog")

        self.catalog = catalog
        self.resolver = resolver
        if chains is None:
            chains = DEFAULT_FALLBACK_CHAINS
            if self.settings.max_fallback_hops != chains.max_hops:
                chains = FallbackChainTable(
                    catalog, {m: chains.chain_for(m) for m in catalog.model_ids()}, self.settings.max_fallback_hops
                )
        self.chains = chains
        self.health_gate = health_gate or HealthGate(
            HealthCache(ttl_seconds=self.settings.health_cache_ttl_seconds),
            timeout_seconds=self.settings.probe_timeout_seconds,
        )

        # Dependency to be injected via configure
        self.dispatcher: Optional[ModelDispatcher] = None

    @property
    def endpoint(self) -> str:
        return self.settings.proxy_url

    def configure(self, dispatcher: ModelDispatcher) -> None:
        """
        Injects the dispatcher used to reach concrete models.
        """
        self.dispatcher = dispatcher
        logger.info(f"RoutingEngine configured with {type(dispatcher).__name__}")

    def get_controller(self, preset_id: Optional[str] = None) -> RoutingController:
        """
        Builds a controller for the given preset (default: the configured one).

        Raises:
            PresetNotFound: If the preset identifier is unknown.
        """
        preset = self.resolver.require(preset_id or self.settings.default_preset)
        if self.dispatcher is None:
            logger.warning("RoutingEngine not configured with a dispatcher. Using LiteLLMDispatcher.")
            self.dispatcher = LiteLLMDispatcher(self.endpoint, model_prefix=self.settings.model_prefix)
        return RoutingController(preset, self.health_gate, self.chains, self.dispatcher, self.endpoint)

    async def apply_preset(
        self, config: Mapping[str, Any], preset_id: str
    ) -> Tuple[Dict[str, Any], HealthVerdict]:
        """
        Writes the routing for a preset into `config` and runs a preflight probe.

        An unreachable proxy is reported in the logs but does not fail the call;
        the proxy may simply not be started yet.

        Returns:
            The updated config and the preflight health verdict.

        Raises:
            PresetNotFound: If the preset identifier is unknown.
        """
        preset = self.resolver.require(preset_id)
        logger.info(f"Applying preset {preset_id!r} ({preset.label})")
        updated = apply_routing_config(config, preset, self.endpoint)

        verdict = await self.health_gate.probe_health(self.endpoint)
        if not verdict.ok:
            logger.warning(
                f"Proxy is not yet reachable at {self.endpoint}. "
                f"Error: {verdict.error_detail or 'unknown'}. {PROXY_REMEDIATION}"
            )
        return updated, verdict
