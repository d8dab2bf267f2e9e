# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_fm_router

from typing import Tuple

# The proxy listens on localhost only
CLOUDRU_PROXY_HOST_DEFAULT = "localhost"
CLOUDRU_PROXY_PORT_DEFAULT = 8082

CLOUDRU_COMPOSE_FILENAME = "docker-compose.cloudru-proxy.yml"

# The proxy ignores the API key, but the CLI refuses to start without one.
CLOUDRU_PROXY_SENTINEL_KEY = "not-a-real-key-proxy-only"

CLOUDRU_PROVIDER_ID = "cloudru-fm"
CLOUDRU_CLI_BACKEND = "claude-cli"

# Credentials cleared from the CLI backend environment when routing via the proxy
CLOUDRU_CLEAR_ENV: Tuple[str, ...] = (
    "ANTHROPIC_API_KEY",
    "ANTHROPIC_API_KEY_OLD",
    "OPENAI_API_KEY",
    "GOOGLE_API_KEY",
    "GEMINI_API_KEY",
    "AWS_SECRET_ACCESS_KEY",
    "AZURE_OPENAI_API_KEY",
    "CLOUDRU_API_KEY",
)

HEALTH_PATH = "/health"
DEFAULT_PROBE_TIMEOUT_SECONDS = 5.0
HEALTH_CACHE_TTL_SECONDS = 30.0

MAX_FALLBACK_HOPS = 3

PROXY_REMEDIATION = (
    f"Please ensure the proxy container is running: docker compose -f {CLOUDRU_COMPOSE_FILENAME} up -d"
)
