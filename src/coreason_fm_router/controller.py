# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_fm_router

from typing import Any, Dict, List, Optional

from coreason_fm_router.exceptions import ModelDispatchError, ModelUnavailable
from coreason_fm_router.fallback import FallbackChainTable
from coreason_fm_router.health import HealthGate
from coreason_fm_router.interfaces import ModelDispatcher
from coreason_fm_router.models import DispatchResult, Preset, Tier
from coreason_fm_router.utils.logger import logger


class RoutingController:
    """
    Dispatches requests for a tier to the model the active preset binds to it.

    Every dispatch follows the same sequence:
    1. Health gate: if the proxy is down, TransportUnavailable is raised and
       no model is tried.
    2. The tier's model is tried, then each substitute from its fallback
       chain, in order, at the same tier.
    3. If every candidate fails, ModelUnavailable is raised for the tier.
    """

    def __init__(
        self,
        preset: Preset,
        health_gate: HealthGate,
        chains: FallbackChainTable,
        dispatcher: ModelDispatcher,
        endpoint: str,
    ) -> None:
        self.preset = preset
        self.health_gate = health_gate
        self.chains = chains
        self.dispatcher = dispatcher
        self.endpoint = endpoint

    async def dispatch(self, tier: Tier, messages: List[Dict[str, Any]], **kwargs: Any) -> DispatchResult:
        """
        Sends the request to the model bound to `tier`, walking its fallback chain on failure.

        Raises:
            TransportUnavailable: If the proxy fails its health check.
            ModelUnavailable: If the model and all of its substitutes failed.
        """
        await self.health_gate.ensure_healthy(self.endpoint)

        requested = self.preset.model_for(tier)
        candidates = (requested,) + self.chains.chain_for(requested)

        attempts: List[str] = []
        last_error: Optional[ModelDispatchError] = None

        for model_id in candidates:
            attempts.append(model_id)
            try:
                response = await self.dispatcher.dispatch(model_id, messages, **kwargs)
            except ModelDispatchError as e:
                last_error = e
                logger.warning(f"Model {model_id} failed for tier {tier.value} (attempt {len(attempts)}): {e.detail}")
                continue

            if model_id != requested:
                logger.info(f"Tier {tier.value} served by substitute {model_id} (requested {requested})")
            else:
                logger.info(f"Tier {tier.value} served by {model_id}")
            return DispatchResult(
                tier=tier,
                requested_model=requested,
                model_id=model_id,
                attempts=tuple(attempts),
                response=response,
            )

        logger.error(f"Fallback chain exhausted for tier {tier.value}: {attempts}")
        raise ModelUnavailable(tier, attempts, last_error) from last_error

    async def dispatch_with_tier_fallback(
        self,
        messages: List[Dict[str, Any]],
        start: Tier = Tier.BIG,
        **kwargs: Any,
    ) -> DispatchResult:
        """
        Tries `start`, then each lower tier, moving down only on ModelUnavailable.

        TransportUnavailable is never caught here: a dead proxy fails every
        tier the same way, so it ends the whole request.
        """
        tiers = [start] + start.lower_tiers()
        last_error: Optional[ModelUnavailable] = None

        for index, tier in enumerate(tiers):
            try:
                result = await self.dispatch(tier, messages, **kwargs)
            except ModelUnavailable as e:
                last_error = e
                logger.warning(f"Tier {tier.value} unavailable, falling back: {list(e.exhausted_chain)}")
                continue
            return result.model_copy(update={"tier_fallbacks": index})

        if last_error is None:
            raise RuntimeError(f"No tiers to try starting from {start.value}")
        logger.error(f"All tiers exhausted starting from {start.value}")
        raise last_error
