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
from typing import Dict, Iterator, Mapping, Tuple

from coreason_fm_router.exceptions import UnknownCatalogKey
from coreason_fm_router.utils.logger import logger

# Short semantic key -> full model ID as it appears in the FM API
CLOUDRU_FM_MODELS: Mapping[str, str] = MappingProxyType(
    {
        "flagship": "zai-org/GLM-4.7",
        "flagship-fast": "zai-org/GLM-4.7-FlashX",
        "flagship-economy": "zai-org/GLM-4.7-Flash",
        "code-specialist": "Qwen/Qwen3-Coder-480B-A35B-Instruct",
    }
)

# The free model; every preset binds its small tier to it
ECONOMY_KEY = "flagship-economy"


class ModelCatalog:
    """
    Immutable lookup from semantic keys to concrete model IDs.
    Built once at startup; unknown keys are programming errors.
    """

    def __init__(self, models: Mapping[str, str], economy_key: str = ECONOMY_KEY) -> None:
        entries: Dict[str, str] = {}
        for key, model_id in models.items():
            if not key or not model_id:
                raise ValueError(f"Catalog entries need a key and a model ID, got {key!r} -> {model_id!r}")
            entries[key] = model_id
        if economy_key not in entries:
            raise UnknownCatalogKey(economy_key)

        self._models: Mapping[str, str] = MappingProxyType(entries)
        self._economy_key = economy_key
        logger.debug(f"ModelCatalog built with {len(entries)} models")

    def get(self, key: str) -> str:
        """
        Returns the model ID for a catalog key.

        Raises:
            UnknownCatalogKey: If the key is not in the catalog.
        """
        try:
            return self._models[key]
        except KeyError:
            raise UnknownCatalogKey(key) from None

    def __getitem__(self, key: str) -> str:
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._models

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)

    def model_ids(self) -> Tuple[str, ...]:
        return tuple(self._models.values())

    def is_known_model(self, model_id: str) -> bool:
        return model_id in self._models.values()

    @property
    def economy_model(self) -> str:
        return self._models[self._economy_key]


DEFAULT_CATALOG = ModelCatalog(CLOUDRU_FM_MODELS)
