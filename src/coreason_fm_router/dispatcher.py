# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_fm_router

from typing import Any, Dict, List

from litellm import acompletion
from litellm.exceptions import (
    InternalServerError,
    NotFoundError,
    RateLimitError,
    ServiceUnavailableError,
    Timeout,
)

from coreason_fm_router.constants import CLOUDRU_PROXY_SENTINEL_KEY
from coreason_fm_router.exceptions import ModelDispatchError
from coreason_fm_router.utils.logger import logger

# Errors that mean this model cannot serve right now; another model might.
MODEL_FAILURE_ERRORS = (NotFoundError, RateLimitError, ServiceUnavailableError, InternalServerError, Timeout)


class LiteLLMDispatcher:
    """Sends completions to a concrete model through the local proxy via `litellm`."""

    def __init__(
        self,
        proxy_url: str,
        model_prefix: str = "openai/",
        api_key: str = CLOUDRU_PROXY_SENTINEL_KEY,
    ) -> None:
        self.api_base = proxy_url.rstrip("/") + "/v1"
        self.model_prefix = model_prefix
        self.api_key = api_key

    async def dispatch(self, model_id: str, messages: List[Dict[str, Any]], **kwargs: Any) -> Any:
        route = f"{self.model_prefix}{model_id}"
        logger.debug(f"Dispatching to {route} via {self.api_base}")
        try:
            return await acompletion(
                model=route,
                messages=messages,
                api_base=self.api_base,
                api_key=self.api_key,
                **kwargs,
            )
        except MODEL_FAILURE_ERRORS as e:
            raise ModelDispatchError(model_id, str(e)) from e
