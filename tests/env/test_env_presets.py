"""Tests for _presets.py — registry lookup and override merging."""

import pytest

from envgate.env._presets import (
    FRAMEWORK_PRESETS,
    EnvSourceKind,
    FrameworkOverride,
    WorkspaceConfig,
    lookup,
    resolve_preset,
)
from envgate.env._types import ALL_CONTEXTS, ConfigurationError, RuntimeContext

S, E, B, I = (
    RuntimeContext.SERVER,
    RuntimeContext.EDGE,
    RuntimeContext.BROWSER,
    RuntimeContext.ISOLATE,
)


class TestLookup:
    def test_known_names(self):
        assert lookup("next").client_prefix == "NEXT_PUBLIC_"
        assert lookup("vue").source_kind is EnvSourceKind.BUNDLER
        assert lookup("react").allowed_environments == frozenset({B})

    def test_custom_is_maximal_and_unprefixed(self):
        custom = lookup("custom")
        assert custom.client_prefix == ""
        assert custom.allowed_environments == ALL_CONTEXTS

    def test_unknown_name_raises(self):
        with pytest.raises(ConfigurationError, match="Unknown framework preset 'gatsby'"):
            lookup("gatsby")

    def test_registry_is_closed_set(self):
        assert set(FRAMEWORK_PRESETS) == {
            "next",
            "remix",
            "react",
            "vue",
            "solid",
            "nx",
            "nuxt",
            "custom",
        }


class TestResolvePreset:
    def test_none(self):
        assert resolve_preset(None) is None

    def test_bare_name_verbatim(self):
        assert resolve_preset("remix") == FRAMEWORK_PRESETS["remix"]

    def test_override_replaces_scalars(self):
        preset = resolve_preset(FrameworkOverride("next", client_prefix="PUB_"))
        assert preset.client_prefix == "PUB_"
        assert preset.source_kind is EnvSourceKind.PROCESS

    def test_override_unions_allowed_environments(self):
        preset = resolve_preset(FrameworkOverride("next", allowed_environments=[B]))
        assert preset.allowed_environments == frozenset({S, E, B})

    def test_override_cannot_narrow(self):
        preset = resolve_preset(FrameworkOverride("remix", allowed_environments=[S]))
        assert preset.allowed_environments == frozenset({S, B})

    def test_override_accepts_string_contexts(self):
        preset = resolve_preset(FrameworkOverride("react", allowed_environments=["deno"]))
        assert preset.allowed_environments == frozenset({B, I})

    def test_override_workspace(self):
        ws = WorkspaceConfig(workspace_root="/repo", project_path="/repo/app")
        assert resolve_preset(FrameworkOverride("nx", workspace=ws)).workspace is ws

    def test_override_unknown_name(self):
        with pytest.raises(ConfigurationError):
            resolve_preset(FrameworkOverride("gatsby"))

    def test_rejects_other_types(self):
        with pytest.raises(ConfigurationError, match="framework must be"):
            resolve_preset({"name": "next"})
