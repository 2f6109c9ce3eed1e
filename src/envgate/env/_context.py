"""Runtime-context detection.

The default detector probes the interpreter platform and the process
environment. Validators take an explicit context or detector; everything else
falls back to the module-level detector, which tests can swap out.
"""

from __future__ import annotations

import os
import sys
from typing import Callable, Union

from ._types import RuntimeContext

ContextDetector = Callable[[], RuntimeContext]
ContextOption = Union[RuntimeContext, ContextDetector]


def in_isolate() -> bool:
    """Return True when running on a WASI host (isolate-style runtimes)."""

    return sys.platform == "wasi"


def in_edge_runtime() -> bool:
    """Return True when the host advertises an edge runtime."""

    return bool(os.environ.get("EDGE_RUNTIME"))


def in_browser() -> bool:
    """Return True under Pyodide / Emscripten, i.e. inside a browser tab."""

    return sys.platform == "emscripten"


def detect_runtime_context() -> RuntimeContext:
    if in_isolate():
        return RuntimeContext.ISOLATE
    if in_edge_runtime():
        return RuntimeContext.EDGE
    if in_browser():
        return RuntimeContext.BROWSER
    return RuntimeContext.SERVER


# ---------------------------------------------------------------------------
# Module-level detector management
# ---------------------------------------------------------------------------

_active_detector: ContextDetector | None = None


def set_context_detector(detector: ContextDetector | None) -> None:
    """Set the module-level detector (``None`` restores the default probe)."""
    global _active_detector
    _active_detector = detector


def get_context_detector() -> ContextDetector | None:
    """Return the module-level detector override (may be ``None``)."""
    return _active_detector


def as_detector(option: ContextOption | None) -> ContextDetector:
    """Normalise a ``runtime_context=`` option into a zero-argument callable."""
    if option is None:
        return _current_context
    if isinstance(option, RuntimeContext):
        fixed = option
        return lambda: fixed
    if isinstance(option, str):
        fixed = RuntimeContext(option)
        return lambda: fixed
    return option


def _current_context() -> RuntimeContext:
    detector = _active_detector or detect_runtime_context
    return detector()
