"""Validation engine and the ``EnvValidator`` facade.

Typical use::

    env = create_env(
        server={"DATABASE_URL": str, "PORT": (int, 8000)},
        client={"PUBLIC_API_URL": str},
        client_prefix="PUBLIC_",
    ).parse()

    env.DATABASE_URL     # validated; denied when read from a browser context
    env["PUBLIC_API_URL"]

States: unvalidated -> valid | invalid. The outcome is memoized until
``set_runtime_env`` replaces the raw input.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

import structlog

from ._resolver import EffectiveConfig, resolve_config
from ._schema import ComposedSchema, validate_against
from ._sources import collect_env
from ._types import (
    UNDEFINED,
    EnvironmentPolicyError,
    FieldError,
    RuntimeContext,
    SchemaValidationError,
    _Undefined,
)
from ._view import EnvView

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ValidationOutcome:
    """Memoized result of one validation run."""

    values: Mapping[str, Any] | None = None
    errors: tuple[FieldError, ...] = ()
    cause: Exception | None = None

    @property
    def success(self) -> bool:
        return self.values is not None


@dataclass(frozen=True)
class ValidationState:
    """Non-raising summary returned by ``get_validation_state``."""

    success: bool
    errors: tuple[FieldError, ...] | None = None


class EnvValidator:
    """Validates env values against three tiered schemas and gates reads."""

    def __init__(self, config: EffectiveConfig) -> None:
        self.config = config
        self.schema = ComposedSchema.compose(config.server, config.client, config.shared)
        self._outcome: ValidationOutcome | None = None
        self._outcome_context: RuntimeContext | None = None
        self._view: EnvView | None = None

    # -- engine ---------------------------------------------------------------

    def current_context(self) -> RuntimeContext:
        return RuntimeContext(self.config.context_detector())

    def _check_policy(self) -> RuntimeContext:
        context = self.current_context()
        if context not in self.config.allowed_environments:
            logger.error(
                "env_policy_violation",
                context=context.value,
                allowed=sorted(c.value for c in self.config.allowed_environments),
            )
            raise EnvironmentPolicyError(context, self.config.allowed_environments)
        return context

    def _raw_env(self) -> Mapping[str, Any]:
        if self.config.raw_env is not None:
            return self.config.raw_env
        return collect_env(self.config.sources, workspace=self.config.workspace)

    def _transform(self, raw: Mapping[str, Any]) -> tuple[dict[str, Any], list[FieldError]]:
        data: dict[str, Any] = {}
        for key, value in raw.items():
            if self.config.empty_string_as_undefined and value == "":
                continue
            data[key] = value

        errors: list[FieldError] = []
        for name in self.config.declared_fields:
            transform = self.config.transforms.get(name)
            if transform is None:
                continue
            try:
                result = transform(data.get(name, UNDEFINED))
            except (ValueError, TypeError) as exc:
                errors.append(FieldError(path=(name,), message=str(exc)))
                data.pop(name, None)
                continue
            if isinstance(result, _Undefined):
                data.pop(name, None)
            else:
                data[name] = result
        return data, errors

    def _run(self, context: RuntimeContext) -> ValidationOutcome:
        data, transform_errors = self._transform(self._raw_env())

        if self.config.skip_validation:
            if transform_errors:
                return ValidationOutcome(errors=tuple(transform_errors))
            return ValidationOutcome(values=data)

        schema = self.schema.for_context(context)
        values, schema_errors, cause = validate_against(schema, data)

        if transform_errors:
            # Schema errors for a field whose transform already failed are noise.
            failed = {error.field for error in transform_errors}
            errors = tuple(transform_errors) + tuple(
                e for e in schema_errors if e.field not in failed
            )
            return ValidationOutcome(errors=errors, cause=cause)

        if values is None:
            return ValidationOutcome(errors=schema_errors, cause=cause)

        logger.debug(
            "env_validated",
            fields=len(values),
            context=context.value,
            source=self.config.source_kind.value,
        )
        return ValidationOutcome(values=values)

    def _validate(self) -> tuple[ValidationOutcome, RuntimeContext]:
        context = self._check_policy()
        if self._outcome_context is not context:
            # The schema and the gate both depend on the context.
            self._outcome = None
            self._view = None
        if self._outcome is None:
            self._outcome = self._run(context)
            self._outcome_context = context
        return self._outcome, context

    # -- public API -------------------------------------------------------------

    def parse(self) -> EnvView:
        """Validate (once) and return the access-controlled view.

        Raises ``EnvironmentPolicyError`` when the runtime context is not
        allowed, and ``SchemaValidationError`` (via ``on_validation_error``)
        when validation fails.
        """
        outcome, context = self._validate()

        if not outcome.success:
            error = SchemaValidationError(outcome.errors)
            if outcome.cause is not None:
                error.__cause__ = outcome.cause
            self.config.on_validation_error(error)
            # Handler returned instead of raising.
            raise SchemaValidationError(outcome.errors)

        if self._view is None:
            self._view = EnvView(
                outcome.values or {},
                server=self.config.server,
                client=self.config.client,
                shared=self.config.shared,
                context=context,
                on_invalid_access=self.config.on_invalid_access,
            )
        return self._view

    def get_validation_state(self) -> ValidationState:
        """Report validity without raising."""
        try:
            outcome, _ = self._validate()
        except Exception as exc:
            return ValidationState(success=False, errors=(FieldError(path=(), message=str(exc)),))

        if outcome.success:
            return ValidationState(success=True)
        return ValidationState(success=False, errors=outcome.errors)

    def set_runtime_env(self, runtime_env: Mapping[str, Any]) -> None:
        """Replace the raw input and drop memoized state. Does not revalidate."""
        self.config = dataclasses.replace(
            self.config, raw_env=MappingProxyType(dict(runtime_env))
        )
        self._outcome = None
        self._outcome_context = None
        self._view = None
        logger.debug("env_runtime_replaced", variables=len(runtime_env))


def create_env(**options: Any) -> EnvValidator:
    """Build an ``EnvValidator``; keyword options as in ``resolve_config``."""
    return EnvValidator(resolve_config(**options))
