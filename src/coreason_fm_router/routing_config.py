# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_fm_router

import copy
from typing import Any, Dict, List, Mapping

from coreason_fm_router.constants import (
    CLOUDRU_CLEAR_ENV,
    CLOUDRU_CLI_BACKEND,
    CLOUDRU_PROVIDER_ID,
    CLOUDRU_PROXY_SENTINEL_KEY,
)
from coreason_fm_router.models import Preset, Tier

CONTEXT_WINDOW = 128_000
MAX_TOKENS = 16_384


def _tier_model_entry(tier: Tier, preset: Preset) -> Dict[str, Any]:
    return {
        "id": tier.alias,
        "name": f"{preset.model_for(tier)} (via proxy)",
        "contextWindow": CONTEXT_WINDOW,
        "maxTokens": MAX_TOKENS,
        "input": ["text"],
        "cost": {"input": 0, "output": 0, "cacheRead": 0, "cacheWrite": 0},
        "reasoning": False,
    }


def tier_order(primary: Tier = Tier.BIG) -> Dict[str, Any]:
    """Primary/fallback model ordering, expressed as CLI backend model refs."""
    return {
        "primary": f"{CLOUDRU_CLI_BACKEND}/{primary.alias}",
        "fallbacks": [f"{CLOUDRU_CLI_BACKEND}/{t.alias}" for t in primary.lower_tiers()],
    }


def apply_routing_config(config: Mapping[str, Any], preset: Preset, proxy_url: str) -> Dict[str, Any]:
    """
    Returns a copy of `config` with the proxy routing for `preset` written in.

    Writes:
    - `models.providers["cloudru-fm"]`: proxy base URL and one model per tier alias
    - `agents.defaults.cliBackends["claude-cli"]`: proxy env and the cleared credentials
    - `agents.defaults.model`: big tier first, then middle, then small

    Unrelated keys are preserved; the input is not modified.
    """
    proxy_url = proxy_url.rstrip("/")
    result: Dict[str, Any] = copy.deepcopy(dict(config))

    models = result.setdefault("models", {})
    models.setdefault("mode", "merge")
    providers = models.setdefault("providers", {})
    providers[CLOUDRU_PROVIDER_ID] = {
        "baseUrl": f"{proxy_url}/v1",
        "api": "anthropic-messages",
        "models": [_tier_model_entry(tier, preset) for tier in Tier],
    }

    defaults = result.setdefault("agents", {}).setdefault("defaults", {})
    backend = defaults.setdefault("cliBackends", {}).setdefault(CLOUDRU_CLI_BACKEND, {})
    backend.setdefault("command", "claude")
    env = backend.setdefault("env", {})
    env["ANTHROPIC_BASE_URL"] = proxy_url
    env["ANTHROPIC_API_KEY"] = CLOUDRU_PROXY_SENTINEL_KEY
    clear_env: List[str] = list(CLOUDRU_CLEAR_ENV)
    backend["clearEnv"] = clear_env

    defaults["model"] = tier_order(Tier.BIG)
    return result
