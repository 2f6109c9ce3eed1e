"""Ready-made validators for variables injected by hosting platforms.

Each factory takes the same keyword options as ``create_env`` (minus the
schema tiers)::

    env = vercel().parse()
    env.VERCEL_ENV   # "production" | "preview" | "development" | None
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional

from pydantic import StringConstraints

from .env import EnvValidator, create_env

_HttpUrl = Annotated[str, StringConstraints(pattern=r"^https?://\S+$")]


def _optional(annotation: Any) -> tuple[Any, None]:
    return (Optional[annotation], None)


VERCEL_SCHEMA = {
    "VERCEL": _optional(str),
    "VERCEL_ENV": _optional(Literal["development", "preview", "production"]),
    "VERCEL_URL": _optional(str),
    "VERCEL_GIT_COMMIT_SHA": _optional(str),
}

UPLOADTHING_SCHEMA = {
    "UPLOADTHING_SECRET": str,
    "UPLOADTHING_APP_ID": _optional(str),
}

RENDER_SCHEMA = {
    "RENDER": _optional(str),
    "RENDER_SERVICE_TYPE": _optional(Literal["web", "pserv", "cron", "worker", "static"]),
    "RENDER_EXTERNAL_URL": _optional(_HttpUrl),
    "RENDER_GIT_COMMIT": _optional(str),
}

RAILWAY_SCHEMA = {
    "RAILWAY_PROJECT_ID": _optional(str),
    "RAILWAY_ENVIRONMENT_NAME": _optional(str),
    "RAILWAY_PUBLIC_DOMAIN": _optional(str),
    "RAILWAY_SERVICE_NAME": _optional(str),
}

FLY_SCHEMA = {
    "FLY_APP_NAME": _optional(str),
    "FLY_REGION": _optional(str),
    "FLY_ALLOC_ID": _optional(str),
    "FLY_VM_MEMORY_MB": _optional(str),
}


def _platform(schema: dict[str, Any], options: dict[str, Any]) -> EnvValidator:
    for tier in ("server", "client", "shared"):
        if tier in options:
            raise TypeError(f"platform presets define their own schema; got '{tier}='")
    return create_env(server=schema, **options)


def vercel(**options: Any) -> EnvValidator:
    return _platform(VERCEL_SCHEMA, options)


def uploadthing(**options: Any) -> EnvValidator:
    return _platform(UPLOADTHING_SCHEMA, options)


def render(**options: Any) -> EnvValidator:
    return _platform(RENDER_SCHEMA, options)


def railway(**options: Any) -> EnvValidator:
    return _platform(RAILWAY_SCHEMA, options)


def fly(**options: Any) -> EnvValidator:
    return _platform(FLY_SCHEMA, options)
