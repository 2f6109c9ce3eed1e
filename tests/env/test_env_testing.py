"""Tests for _testing.py — override_env and override_runtime_context."""

import pytest

from envgate.env._context import get_context_detector, set_context_detector
from envgate.env._sources import EnvSources, get_sources, set_sources
from envgate.env._testing import override_env, override_runtime_context
from envgate.env._types import AccessDeniedError, RuntimeContext
from envgate.env._validator import create_env


@pytest.fixture(autouse=True)
def _reset_module_state():
    set_sources(None)
    set_context_detector(None)
    yield
    set_sources(None)
    set_context_detector(None)


class TestOverrideEnv:
    def test_replaces_sources(self):
        with override_env({"API_KEY": "overridden"}):
            env = create_env(server={"API_KEY": str}, runtime_context="node").parse()
            assert env.API_KEY == "overridden"

    def test_restores_previous_sources(self):
        original = EnvSources(process={"API_KEY": "original"})
        set_sources(original)

        with override_env({"API_KEY": "temp"}):
            assert get_sources().process == {"API_KEY": "temp"}

        assert get_sources() is original

    def test_nested(self):
        with override_env({"K": "outer"}):
            with override_env({"K": "inner"}):
                assert get_sources().process == {"K": "inner"}
            assert get_sources().process == {"K": "outer"}

    def test_other_layers(self):
        with override_env({"K": "process"}, fallback={"K": "fallback"}):
            env = create_env(server={"K": str}, runtime_context="node").parse()
            assert env.K == "fallback"


class TestOverrideRuntimeContext:
    def test_pins_context(self):
        with override_runtime_context("browser"), override_env({"API_KEY": "k"}):
            env = create_env(server={"API_KEY": str}).parse()
            with pytest.raises(AccessDeniedError):
                env.API_KEY

    def test_restores_detector(self):
        with override_runtime_context(RuntimeContext.EDGE) as pinned:
            assert pinned is RuntimeContext.EDGE
            assert get_context_detector()() is RuntimeContext.EDGE
        assert get_context_detector() is None
