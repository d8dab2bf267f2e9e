# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_fm_router

from typing import Any, Dict, List, Protocol, runtime_checkable


@runtime_checkable
class ModelDispatcher(Protocol):
    """
    Protocol for sending a request to one concrete model through the proxy.
    """

    async def dispatch(self, model_id: str, messages: List[Dict[str, Any]], **kwargs: Any) -> Any:
        """
        Sends the messages to `model_id` and returns the provider response.

        Raises:
            ModelDispatchError: If the model itself failed to serve the request.
        """
        ...
