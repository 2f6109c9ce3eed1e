"""Test utilities for the env module."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping

from ._context import get_context_detector, set_context_detector
from ._sources import EnvSources, get_sources, set_sources
from ._types import RuntimeContext


@contextmanager
def override_env(
    process: Mapping[str, Any] | None = None,
    *,
    bundler: Mapping[str, Any] | None = None,
    platform: Callable[[], Mapping[str, Any]] | None = None,
    fallback: Mapping[str, Any] | None = None,
) -> Iterator[EnvSources]:
    """Temporarily replace the module-level env sources.

    Usage::

        with override_env({"API_KEY": "test"}):
            env = create_env(server={"API_KEY": str}).parse()
    """
    previous = get_sources()
    fake = EnvSources(
        process=dict(process or {}),
        bundler=bundler,
        platform=platform,
        fallback=fallback,
    )
    set_sources(fake)
    try:
        yield fake
    finally:
        set_sources(previous)


@contextmanager
def override_runtime_context(context: RuntimeContext | str) -> Iterator[RuntimeContext]:
    """Temporarily pin the module-level runtime context."""
    previous = get_context_detector()
    pinned = RuntimeContext(context)
    set_context_detector(lambda: pinned)
    try:
        yield pinned
    finally:
        set_context_detector(previous)
