# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_fm_router

import asyncio
import threading
import time
from typing import Callable, NamedTuple, Optional

import httpx

from coreason_fm_router.constants import (
    DEFAULT_PROBE_TIMEOUT_SECONDS,
    HEALTH_CACHE_TTL_SECONDS,
    HEALTH_PATH,
    PROXY_REMEDIATION,
)
from coreason_fm_router.exceptions import TransportUnavailable
from coreason_fm_router.models import HealthVerdict
from coreason_fm_router.utils.logger import logger


class _CachedVerdict(NamedTuple):
    endpoint: str
    verdict: HealthVerdict
    expires_at: float


class HealthCache:
    """
    Holds at most one live health verdict, keyed by endpoint.

    A new verdict always replaces the previous one, whatever its endpoint.
    Concurrent probes on a cold cache are not deduplicated: the last write wins.
    """

    def __init__(
        self,
        ttl_seconds: float = HEALTH_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entry: Optional[_CachedVerdict] = None

    def get(self, endpoint: str) -> Optional[HealthVerdict]:
        """
        Returns the cached verdict for `endpoint` if it has not expired.
        """
        with self._lock:
            entry = self._entry
        if entry is None or entry.endpoint != endpoint:
            return None
        if self._clock() >= entry.expires_at:
            return None
        return entry.verdict

    def put(self, endpoint: str, verdict: HealthVerdict) -> None:
        with self._lock:
            self._entry = _CachedVerdict(endpoint, verdict, self._clock() + self.ttl_seconds)

    def clear(self) -> None:
        """
        Drops the cached verdict so the next probe hits the network (useful for testing).
        """
        with self._lock:
            self._entry = None
        logger.debug("HealthCache cleared")


class HealthGate:
    """
    Probes the proxy in front of all models and guards dispatch on its verdict.

    `probe_health` never raises: timeouts, refused connections, DNS failures
    and non-2xx answers all come back as an unhealthy verdict.
    `ensure_healthy` turns an unhealthy verdict into TransportUnavailable.
    """

    def __init__(
        self,
        cache: Optional[HealthCache] = None,
        timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.cache = cache if cache is not None else HealthCache()
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def probe_health(self, endpoint: str, timeout_seconds: Optional[float] = None) -> HealthVerdict:
        """
        Checks `GET {endpoint}/health`, serving from the cache while the last
        verdict for this endpoint is fresh.

        Args:
            endpoint: Base URL of the proxy, e.g. "http://localhost:8082".
            timeout_seconds: Probe timeout; defaults to the gate's timeout.

        Returns:
            The health verdict. Never raises for transport errors: anything the
            probe raises becomes an unhealthy verdict.

        Cancelling the calling task propagates CancelledError instead of
        producing a verdict; the cache is left as it was before the probe.
        """
        cached = self.cache.get(endpoint)
        if cached is not None:
            logger.debug(f"Health cache hit for {endpoint} (ok={cached.ok})")
            return cached

        timeout = timeout_seconds if timeout_seconds is not None else self.timeout_seconds
        health_url = endpoint.rstrip("/") + HEALTH_PATH

        start = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await asyncio.wait_for(client.get(health_url), timeout=timeout)
            latency_ms = (time.monotonic() - start) * 1000
            if response.is_success:
                verdict = HealthVerdict(ok=True, latency_ms=latency_ms, status_code=response.status_code)
            else:
                verdict = HealthVerdict(
                    ok=False,
                    latency_ms=latency_ms,
                    status_code=response.status_code,
                    error_detail=f"HTTP {response.status_code}",
                )
        except (httpx.TimeoutException, asyncio.TimeoutError):
            verdict = HealthVerdict(ok=False, latency_ms=(time.monotonic() - start) * 1000, error_detail="timeout")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            verdict = HealthVerdict(
                ok=False,
                latency_ms=(time.monotonic() - start) * 1000,
                error_detail=str(e) or type(e).__name__,
            )
        except Exception as e:
            # Bad ports, OS-level socket errors and the like
            verdict = HealthVerdict(
                ok=False,
                latency_ms=(time.monotonic() - start) * 1000,
                error_detail=str(e) or type(e).__name__,
            )

        if verdict.ok:
            logger.info(f"Proxy at {endpoint} is healthy ({verdict.latency_ms:.0f}ms)")
        else:
            logger.warning(f"Proxy at {endpoint} is unhealthy: {verdict.error_detail}")

        self.cache.put(endpoint, verdict)
        return verdict

    async def ensure_healthy(self, endpoint: str) -> None:
        """
        Verifies the proxy is reachable before any model is tried.

        Raises:
            TransportUnavailable: If the probe reports the proxy unhealthy.
        """
        verdict = await self.probe_health(endpoint)
        if not verdict.ok:
            logger.error(f"Proxy unreachable at {endpoint}: {verdict.error_detail}")
            raise TransportUnavailable(endpoint, verdict.error_detail, PROXY_REMEDIATION)

    def clear(self) -> None:
        self.cache.clear()
