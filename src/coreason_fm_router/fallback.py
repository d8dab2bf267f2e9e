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
from typing import Dict, Mapping, Sequence, Set, Tuple

from coreason_fm_router.catalog import DEFAULT_CATALOG, ModelCatalog
from coreason_fm_router.constants import MAX_FALLBACK_HOPS
from coreason_fm_router.exceptions import InvalidFallbackChain
from coreason_fm_router.utils.logger import logger


def _build_default_chains(catalog: ModelCatalog) -> Dict[str, Sequence[str]]:
    return {
        catalog["flagship"]: [catalog["flagship-fast"], catalog["flagship-economy"]],
        catalog["code-specialist"]: [catalog["flagship"], catalog["flagship-economy"]],
        catalog["flagship-fast"]: [catalog["flagship-economy"]],
        catalog["flagship-economy"]: [],  # terminal
    }


class FallbackChainTable:
    """
    Per-model substitute lists, tried in order before a tier's model is
    declared unavailable. These chains operate on concrete model IDs and
    are independent of the big -> middle -> small tier fallback.

    The table is validated eagerly:
    - keys and substitutes must be catalog models
    - no chain lists its own key or repeats an entry
    - following chains transitively is acyclic and ends within `max_hops`
    """

    def __init__(
        self,
        catalog: ModelCatalog,
        chains: Mapping[str, Sequence[str]],
        max_hops: int = MAX_FALLBACK_HOPS,
    ) -> None:
        self.catalog = catalog
        self.max_hops = max_hops

        table: Dict[str, Tuple[str, ...]] = {}
        for model_id, substitutes in chains.items():
            if not catalog.is_known_model(model_id):
                raise InvalidFallbackChain(model_id, "not a catalog model")
            chain = tuple(substitutes)
            for substitute in chain:
                if substitute == model_id:
                    raise InvalidFallbackChain(model_id, "chain lists the model itself")
                if not catalog.is_known_model(substitute):
                    raise InvalidFallbackChain(model_id, f"substitute {substitute} is not a catalog model")
            if len(set(chain)) != len(chain):
                raise InvalidFallbackChain(model_id, "chain repeats a substitute")
            table[model_id] = chain

        self._chains: Mapping[str, Tuple[str, ...]] = MappingProxyType(table)
        self._depths: Dict[str, int] = {}
        for model_id in table:
            depth = self._measure(model_id, set())
            if depth > max_hops:
                raise InvalidFallbackChain(model_id, f"chain needs {depth} hops to terminate (max {max_hops})")

        logger.debug(f"FallbackChainTable built for {len(table)} models (max depth {max(self._depths.values(), default=0)})")

    def _measure(self, model_id: str, visiting: Set[str]) -> int:
        if model_id in self._depths:
            return self._depths[model_id]
        if model_id in visiting:
            raise InvalidFallbackChain(model_id, "fallback chains form a cycle")

        visiting.add(model_id)
        chain = self._chains.get(model_id, ())
        depth = 1 + max(self._measure(s, visiting) for s in chain) if chain else 0
        visiting.discard(model_id)

        self._depths[model_id] = depth
        return depth

    def chain_for(self, model_id: str) -> Tuple[str, ...]:
        """
        Returns the ordered substitutes for a model.
        An unknown model and a terminal model both yield an empty tuple.
        """
        return self._chains.get(model_id, ())

    def depth(self, model_id: str) -> int:
        """Number of hops needed to reach a terminal model from `model_id`."""
        return self._depths.get(model_id, 0)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._chains


DEFAULT_FALLBACK_CHAINS = FallbackChainTable(DEFAULT_CATALOG, _build_default_chains(DEFAULT_CATALOG))


def fallback_chain_for(model_id: str) -> Tuple[str, ...]:
    """Looks up the built-in fallback chain for a model ID."""
    return DEFAULT_FALLBACK_CHAINS.chain_for(model_id)
