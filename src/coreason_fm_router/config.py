# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_fm_router

import os
from typing import Any, Dict

from pydantic import BaseModel, Field

from coreason_fm_router.constants import (
    CLOUDRU_PROXY_HOST_DEFAULT,
    CLOUDRU_PROXY_PORT_DEFAULT,
    DEFAULT_PROBE_TIMEOUT_SECONDS,
    HEALTH_CACHE_TTL_SECONDS,
    MAX_FALLBACK_HOPS,
)

# Environment variable -> settings field
ENV_VARS: Dict[str, str] = {
    "CLOUDRU_PROXY_HOST": "proxy_host",
    "CLOUDRU_PROXY_PORT": "proxy_port",
    "CLOUDRU_PROBE_TIMEOUT": "probe_timeout_seconds",
    "CLOUDRU_HEALTH_TTL": "health_cache_ttl_seconds",
    "CLOUDRU_PRESET": "default_preset",
    "CLOUDRU_MODEL_PREFIX": "model_prefix",
}


class RouterSettings(BaseModel):
    proxy_host: str = Field(CLOUDRU_PROXY_HOST_DEFAULT, min_length=1)
    proxy_port: int = Field(CLOUDRU_PROXY_PORT_DEFAULT, gt=0, lt=65536)
    probe_timeout_seconds: float = Field(DEFAULT_PROBE_TIMEOUT_SECONDS, gt=0.0)
    health_cache_ttl_seconds: float = Field(HEALTH_CACHE_TTL_SECONDS, ge=0.0)
    default_preset: str = "flagship-full"
    # LiteLLM route prefix; the proxy speaks the OpenAI chat API
    model_prefix: str = "openai/"
    max_fallback_hops: int = Field(MAX_FALLBACK_HOPS, ge=1)

    @property
    def proxy_url(self) -> str:
        return f"http://{self.proxy_host}:{self.proxy_port}"

    @classmethod
    def from_env(cls) -> "RouterSettings":
        """
        Builds settings from CLOUDRU_* environment variables.
        Unset variables keep their defaults; malformed values raise ValidationError.
        """
        values: Dict[str, Any] = {}
        for env_var, field_name in ENV_VARS.items():
            raw = os.environ.get(env_var)
            if raw is not None and raw.strip():
                values[field_name] = raw.strip()
        return cls(**values)
