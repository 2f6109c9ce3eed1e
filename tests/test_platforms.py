"""Tests for platforms.py — hosting platform validators."""

import pytest

from envgate.env import AccessDeniedError, RuntimeContext, SchemaValidationError
from envgate.platforms import fly, railway, render, uploadthing, vercel


def _parse(factory, raw):
    return factory(runtime_env=raw, runtime_context=RuntimeContext.SERVER).parse()


class TestVercel:
    def test_valid(self):
        env = _parse(
            vercel,
            {"VERCEL": "1", "VERCEL_ENV": "production", "VERCEL_URL": "my-app.vercel.app"},
        )
        assert env.VERCEL == "1"
        assert env.VERCEL_ENV == "production"
        assert env.VERCEL_URL == "my-app.vercel.app"
        assert env.VERCEL_GIT_COMMIT_SHA is None

    def test_invalid_env(self):
        with pytest.raises(SchemaValidationError):
            _parse(vercel, {"VERCEL_ENV": "invalid-env"})


class TestUploadthing:
    def test_secret_required(self):
        assert _parse(uploadthing, {"UPLOADTHING_SECRET": "s"}).UPLOADTHING_SECRET == "s"

    def test_missing_secret(self):
        with pytest.raises(SchemaValidationError):
            _parse(uploadthing, {})

    def test_secret_is_server_only(self):
        env = uploadthing(
            runtime_env={"UPLOADTHING_SECRET": "s"},
            runtime_context=RuntimeContext.BROWSER,
        ).parse()
        with pytest.raises(AccessDeniedError, match="UPLOADTHING_SECRET"):
            env.UPLOADTHING_SECRET


class TestRender:
    def test_valid(self):
        env = _parse(
            render,
            {
                "RENDER": "1",
                "RENDER_SERVICE_TYPE": "web",
                "RENDER_EXTERNAL_URL": "https://my-app.onrender.com",
            },
        )
        assert env.RENDER_SERVICE_TYPE == "web"
        assert env.RENDER_EXTERNAL_URL == "https://my-app.onrender.com"

    def test_invalid_service_type(self):
        with pytest.raises(SchemaValidationError):
            _parse(render, {"RENDER_SERVICE_TYPE": "invalid-type"})

    def test_invalid_url(self):
        with pytest.raises(SchemaValidationError):
            _parse(render, {"RENDER_EXTERNAL_URL": "not-a-url"})


class TestRailwayAndFly:
    def test_railway(self):
        env = _parse(
            railway, {"RAILWAY_PROJECT_ID": "proj_123", "RAILWAY_ENVIRONMENT_NAME": "production"}
        )
        assert env.RAILWAY_PROJECT_ID == "proj_123"
        assert env.RAILWAY_ENVIRONMENT_NAME == "production"

    def test_fly(self):
        env = _parse(fly, {"FLY_APP_NAME": "my-app", "FLY_REGION": "iad", "FLY_VM_MEMORY_MB": "512"})
        assert env.FLY_APP_NAME == "my-app"
        assert env.FLY_VM_MEMORY_MB == "512"


class TestOptions:
    def test_schema_tiers_rejected(self):
        with pytest.raises(TypeError, match="server="):
            vercel(server={"X": str})
