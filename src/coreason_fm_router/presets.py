# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_fm_router

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from coreason_fm_router.catalog import DEFAULT_CATALOG, ModelCatalog
from coreason_fm_router.exceptions import PresetNotFound
from coreason_fm_router.fallback import DEFAULT_FALLBACK_CHAINS, FallbackChainTable
from coreason_fm_router.models import Preset, Tier, TierMapping
from coreason_fm_router.utils.logger import logger


def _build_default_presets(catalog: ModelCatalog) -> Dict[str, Preset]:
    return {
        "flagship-full": Preset(
            big=catalog["flagship"],
            middle=catalog["flagship-fast"],
            small=catalog["flagship-economy"],
            label="GLM-4.7 (Full)",
            is_free_tier=False,
        ),
        "flagship-free": Preset(
            big=catalog["flagship-economy"],
            middle=catalog["flagship-economy"],
            small=catalog["flagship-economy"],
            label="GLM-4.7-Flash (Free)",
            is_free_tier=True,
        ),
        "code-specialist": Preset(
            big=catalog["code-specialist"],
            middle=catalog["flagship-fast"],
            small=catalog["flagship-economy"],
            label="Qwen3-Coder-480B",
            is_free_tier=False,
        ),
    }


# Auth-choice identifiers surfaced by the onboarding menu
PRESET_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "cloudru-fm-glm47": "flagship-full",
        "cloudru-fm-flash": "flagship-free",
        "cloudru-fm-qwen": "code-specialist",
    }
)


class PresetResolver:
    """
    Maps user-facing preset identifiers to {big, middle, small} model assignments.

    Presets are validated when the resolver is built:
    - every tier must name a model from the catalog
    - the small tier must be the catalog's economy model
    """

    def __init__(
        self,
        catalog: ModelCatalog,
        presets: Mapping[str, Preset],
        aliases: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.catalog = catalog

        for preset_id, preset in presets.items():
            for tier in Tier:
                model_id = preset.model_for(tier)
                if not catalog.is_known_model(model_id):
                    raise ValueError(
                        f"Preset {preset_id!r} binds {tier.value} tier to {model_id}, which is not in the catalog"
                    )
            if preset.small != catalog.economy_model:
                raise ValueError(
                    f"Preset {preset_id!r} binds small tier to {preset.small}, expected {catalog.economy_model}"
                )

        alias_map = dict(aliases or {})
        for alias, target in alias_map.items():
            if target not in presets:
                raise ValueError(f"Preset alias {alias!r} points to unknown preset {target!r}")

        self._presets: Mapping[str, Preset] = MappingProxyType(dict(presets))
        self._aliases: Mapping[str, str] = MappingProxyType(alias_map)

    def resolve(self, preset_id: str) -> Optional[Preset]:
        """
        Returns the preset for an identifier or alias, or None when unknown.
        Never raises; interactive callers treat None as "no preset selected".
        """
        canonical = self._aliases.get(preset_id, preset_id)
        preset = self._presets.get(canonical)
        if preset is None:
            logger.debug(f"No preset registered for {preset_id!r}")
        return preset

    def require(self, preset_id: str) -> Preset:
        preset = self.resolve(preset_id)
        if preset is None:
            raise PresetNotFound(preset_id)
        return preset

    def is_known_preset(self, preset_id: str) -> bool:
        return self.resolve(preset_id) is not None

    def preset_ids(self) -> Tuple[str, ...]:
        return tuple(self._presets)


def describe_tiers(preset: Preset, chains: FallbackChainTable = DEFAULT_FALLBACK_CHAINS) -> List[TierMapping]:
    """
    Lists the tier -> model assignment of a preset, with each model's first
    fallback substitute and whether it runs on the free tier.
    """
    free_model = chains.catalog.economy_model
    mappings = []
    for tier in Tier:
        model_id = preset.model_for(tier)
        chain = chains.chain_for(model_id)
        mappings.append(
            TierMapping(
                tier=tier,
                alias=tier.alias,
                model_id=model_id,
                fallback=chain[0] if chain else None,
                is_free=model_id == free_model,
            )
        )
    return mappings


DEFAULT_PRESETS: Mapping[str, Preset] = MappingProxyType(_build_default_presets(DEFAULT_CATALOG))
DEFAULT_RESOLVER = PresetResolver(DEFAULT_CATALOG, DEFAULT_PRESETS, PRESET_ALIASES)


def resolve_preset(preset_id: str) -> Optional[Preset]:
    """Resolves a preset identifier against the built-in presets."""
    return DEFAULT_RESOLVER.resolve(preset_id)
