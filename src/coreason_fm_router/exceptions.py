# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_fm_router

from enum import Enum
from typing import Optional, Sequence, Tuple

from coreason_fm_router.models import Tier


class ErrorKind(str, Enum):
    UNKNOWN_CATALOG_KEY = "unknown_catalog_key"
    PRESET_NOT_FOUND = "preset_not_found"
    INVALID_FALLBACK_CHAIN = "invalid_fallback_chain"
    TRANSPORT_UNAVAILABLE = "transport_unavailable"
    MODEL_UNAVAILABLE = "model_unavailable"
    MODEL_DISPATCH_FAILED = "model_dispatch_failed"


class RoutingError(Exception):
    """
    Base class for every error raised by the router.

    Each subclass carries a fixed `kind` so callers can discriminate either
    with `except` clauses or by matching on `error.kind`.
    """

    kind: ErrorKind


class UnknownCatalogKey(RoutingError, KeyError):
    kind = ErrorKind.UNKNOWN_CATALOG_KEY

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Unknown model catalog key: {key!r}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class PresetNotFound(RoutingError):
    kind = ErrorKind.PRESET_NOT_FOUND

    def __init__(self, preset_id: str) -> None:
        self.preset_id = preset_id
        super().__init__(f"Unknown model preset: {preset_id!r}")


class InvalidFallbackChain(RoutingError):
    kind = ErrorKind.INVALID_FALLBACK_CHAIN

    def __init__(self, model_id: str, reason: str) -> None:
        self.model_id = model_id
        self.reason = reason
        super().__init__(f"Invalid fallback chain for {model_id}: {reason}")


class TransportUnavailable(RoutingError):
    """
    The proxy in front of every model is unreachable.

    Never retried by tier fallback: every tier shares the same transport.
    """

    kind = ErrorKind.TRANSPORT_UNAVAILABLE

    def __init__(self, endpoint: str, detail: Optional[str], remediation: str) -> None:
        self.endpoint = endpoint
        self.detail = detail or "unknown"
        self.remediation = remediation
        super().__init__(
            f"Cloud.ru FM proxy is not reachable at {endpoint}. Error: {self.detail}. {remediation}"
        )


class ModelUnavailable(RoutingError):
    """
    The model bound to a tier and all of its fallback substitutes failed.
    """

    kind = ErrorKind.MODEL_UNAVAILABLE

    def __init__(
        self,
        tier: Tier,
        exhausted_chain: Sequence[str],
        last_error: Optional[BaseException] = None,
    ) -> None:
        self.tier = tier
        self.exhausted_chain: Tuple[str, ...] = tuple(exhausted_chain)
        self.last_error = last_error
        super().__init__(
            f"No model available for tier '{tier.value}'. "
            f"Exhausted chain: {list(self.exhausted_chain)}. Last error: {last_error}"
        )


class ModelDispatchError(RoutingError):
    """
    A single model failed to serve a request. Raised by dispatchers; the
    controller answers it by moving to the next model in the fallback chain.
    """

    kind = ErrorKind.MODEL_DISPATCH_FAILED

    def __init__(self, model_id: str, detail: str) -> None:
        self.model_id = model_id
        self.detail = detail
        super().__init__(f"Model {model_id} failed: {detail}")
