# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_fm_router

from coreason_fm_router.catalog import DEFAULT_CATALOG, ModelCatalog
from coreason_fm_router.config import RouterSettings
from coreason_fm_router.controller import RoutingController
from coreason_fm_router.engine import RoutingEngine
from coreason_fm_router.exceptions import (
    ErrorKind,
    InvalidFallbackChain,
    ModelDispatchError,
    ModelUnavailable,
    PresetNotFound,
    RoutingError,
    TransportUnavailable,
    UnknownCatalogKey,
)
from coreason_fm_router.fallback import FallbackChainTable, fallback_chain_for
from coreason_fm_router.health import HealthCache, HealthGate
from coreason_fm_router.models import DispatchResult, HealthVerdict, Preset, Tier
from coreason_fm_router.presets import PresetResolver, resolve_preset

__all__ = [
    "DEFAULT_CATALOG",
    "DispatchResult",
    "ErrorKind",
    "FallbackChainTable",
    "HealthCache",
    "HealthGate",
    "HealthVerdict",
    "InvalidFallbackChain",
    "ModelCatalog",
    "ModelDispatchError",
    "ModelUnavailable",
    "Preset",
    "PresetNotFound",
    "PresetResolver",
    "RouterSettings",
    "RoutingController",
    "RoutingEngine",
    "RoutingError",
    "Tier",
    "TransportUnavailable",
    "UnknownCatalogKey",
    "fallback_chain_for",
    "resolve_preset",
]
