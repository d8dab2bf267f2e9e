# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_fm_router

import pytest
from conftest import FakeClock, FakeDispatcher, healthy_transport, timeout_transport

from coreason_fm_router.catalog import ModelCatalog
from coreason_fm_router.config import RouterSettings
from coreason_fm_router.dispatcher import LiteLLMDispatcher
from coreason_fm_router.engine import RoutingEngine
from coreason_fm_router.exceptions import InvalidFallbackChain, PresetNotFound, TransportUnavailable
from coreason_fm_router.fallback import DEFAULT_FALLBACK_CHAINS, FallbackChainTable
from coreason_fm_router.health import HealthCache, HealthGate
from coreason_fm_router.models import Preset, Tier
from coreason_fm_router.presets import PresetResolver


def _engine(transport=None, settings=None) -> RoutingEngine:  # type: ignore[no-untyped-def]
    gate = HealthGate(HealthCache(clock=FakeClock()), transport=transport or healthy_transport())
    return RoutingEngine(settings=settings, health_gate=gate)


def test_engines_are_independent() -> None:
    first = RoutingEngine()
    second = RoutingEngine()
    assert first is not second
    assert first.health_gate.cache is not second.health_gate.cache


def test_default_wiring() -> None:
    engine = RoutingEngine()
    assert engine.endpoint == "http://localhost:8082"
    assert engine.chains is DEFAULT_FALLBACK_CHAINS
    assert engine.health_gate.timeout_seconds == 5.0
    assert engine.health_gate.cache.ttl_seconds == 30.0
    assert engine.dispatcher is None


def test_settings_flow_into_health_gate() -> None:
    engine = RoutingEngine(RouterSettings(probe_timeout_seconds=1.5, health_cache_ttl_seconds=10.0, proxy_port=9000))
    assert engine.health_gate.timeout_seconds == 1.5
    assert engine.health_gate.cache.ttl_seconds == 10.0
    assert engine.endpoint == "http://localhost:9000"


def test_hop_limit_below_default_chains_fails_fast() -> None:
    with pytest.raises(InvalidFallbackChain):
        RoutingEngine(RouterSettings(max_fallback_hops=2))


def test_get_controller_default_preset() -> None:
    engine = _engine()
    dispatcher = FakeDispatcher()
    engine.configure(dispatcher)

    controller = engine.get_controller()
    assert controller.preset.big == "zai-org/GLM-4.7"
    assert controller.dispatcher is dispatcher
    assert controller.endpoint == engine.endpoint


def test_get_controller_by_alias() -> None:
    engine = _engine()
    engine.configure(FakeDispatcher())
    controller = engine.get_controller("cloudru-fm-qwen")
    assert controller.preset.big == "Qwen/Qwen3-Coder-480B-A35B-Instruct"


def test_get_controller_unknown_preset() -> None:
    with pytest.raises(PresetNotFound):
        _engine().get_controller("nonexistent")


def test_get_controller_without_dispatcher_uses_litellm() -> None:
    engine = _engine(settings=RouterSettings(model_prefix="anthropic/"))
    controller = engine.get_controller()
    assert isinstance(controller.dispatcher, LiteLLMDispatcher)
    assert controller.dispatcher.model_prefix == "anthropic/"
    assert controller.dispatcher.api_base == "http://localhost:8082/v1"


@pytest.mark.asyncio
async def test_end_to_end_dispatch() -> None:
    engine = _engine()
    dispatcher = FakeDispatcher(failing=["zai-org/GLM-4.7"])
    engine.configure(dispatcher)

    result = await engine.get_controller("flagship-full").dispatch(Tier.BIG, [{"role": "user", "content": "hi"}])
    assert result.model_id == "zai-org/GLM-4.7-FlashX"
    assert dispatcher.calls == ["zai-org/GLM-4.7", "zai-org/GLM-4.7-FlashX"]


@pytest.mark.asyncio
async def test_end_to_end_dead_proxy() -> None:
    engine = _engine(transport=timeout_transport())
    dispatcher = FakeDispatcher()
    engine.configure(dispatcher)

    with pytest.raises(TransportUnavailable):
        await engine.get_controller().dispatch_with_tier_fallback([{"role": "user", "content": "hi"}])
    assert dispatcher.calls == []


@pytest.mark.asyncio
async def test_apply_preset_with_healthy_proxy() -> None:
    engine = _engine()
    config, verdict = await engine.apply_preset({}, "cloudru-fm-glm47")
    assert verdict.ok is True
    assert config["models"]["providers"]["cloudru-fm"]["baseUrl"] == "http://localhost:8082/v1"


@pytest.mark.asyncio
async def test_apply_preset_with_dead_proxy_does_not_fail() -> None:
    engine = _engine(transport=timeout_transport())
    config, verdict = await engine.apply_preset({"theme": "dark"}, "flagship-free")
    assert verdict.ok is False
    assert verdict.error_detail == "timeout"
    assert config["theme"] == "dark"
    assert config["agents"]["defaults"]["model"]["primary"] == "claude-cli/opus"


@pytest.mark.asyncio
async def test_apply_unknown_preset() -> None:
    with pytest.raises(PresetNotFound):
        await _engine().apply_preset({}, "bogus")


def _custom_tables():  # type: ignore[no-untyped-def]
    catalog = ModelCatalog({"flagship": "x/big", "flagship-economy": "x/small"})
    resolver = PresetResolver(catalog, {"custom": Preset(big="x/big", middle="x/big", small="x/small", label="Custom")})
    chains = FallbackChainTable(catalog, {"x/big": ["x/small"]})
    return catalog, resolver, chains


def test_custom_catalog_without_resolver_rejected() -> None:
    catalog, _, chains = _custom_tables()
    with pytest.raises(ValueError, match="PresetResolver"):
        RoutingEngine(catalog=catalog, chains=chains)


def test_custom_catalog_without_chains_rejected() -> None:
    catalog, resolver, _ = _custom_tables()
    with pytest.raises(ValueError, match="FallbackChainTable"):
        RoutingEngine(catalog=catalog, resolver=resolver)


def test_resolver_from_other_catalog_rejected() -> None:
    _, resolver, _ = _custom_tables()
    with pytest.raises(ValueError, match="different catalog"):
        RoutingEngine(resolver=resolver)


def test_custom_tables_wired_together() -> None:
    catalog, resolver, chains = _custom_tables()
    engine = RoutingEngine(RouterSettings(default_preset="custom"), catalog=catalog, resolver=resolver, chains=chains)
    engine.configure(FakeDispatcher())
    controller = engine.get_controller()
    assert controller.preset.big == "x/big"
    assert controller.chains is chains
