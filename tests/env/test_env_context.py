"""Tests for _context.py — runtime-context detection and injection."""

import sys

import pytest

from envgate.env import _context
from envgate.env._context import (
    as_detector,
    detect_runtime_context,
    get_context_detector,
    set_context_detector,
)
from envgate.env._types import RuntimeContext


@pytest.fixture(autouse=True)
def _reset_detector():
    set_context_detector(None)
    yield
    set_context_detector(None)


class TestDetect:
    def test_plain_interpreter_is_server(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.delenv("EDGE_RUNTIME", raising=False)
        assert detect_runtime_context() is RuntimeContext.SERVER

    def test_emscripten_is_browser(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "emscripten")
        monkeypatch.delenv("EDGE_RUNTIME", raising=False)
        assert detect_runtime_context() is RuntimeContext.BROWSER

    def test_wasi_is_isolate(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "wasi")
        assert detect_runtime_context() is RuntimeContext.ISOLATE

    def test_edge_runtime_variable(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.setenv("EDGE_RUNTIME", "vercel")
        assert detect_runtime_context() is RuntimeContext.EDGE

    def test_isolate_probe_wins_over_edge(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "wasi")
        monkeypatch.setenv("EDGE_RUNTIME", "vercel")
        assert detect_runtime_context() is RuntimeContext.ISOLATE


class TestAsDetector:
    def test_fixed_value(self):
        assert as_detector(RuntimeContext.EDGE)() is RuntimeContext.EDGE

    def test_string_value(self):
        assert as_detector("browser")() is RuntimeContext.BROWSER

    def test_callable_passthrough(self):
        def detector():
            return RuntimeContext.ISOLATE

        assert as_detector(detector) is detector

    def test_none_follows_module_detector(self):
        detector = as_detector(None)
        set_context_detector(lambda: RuntimeContext.BROWSER)
        assert detector() is RuntimeContext.BROWSER
        set_context_detector(None)
        probed = _context.detect_runtime_context()
        assert detector() is probed

    def test_get_context_detector(self):
        assert get_context_detector() is None
        set_context_detector(lambda: RuntimeContext.EDGE)
        assert get_context_detector()() is RuntimeContext.EDGE
