"""Schema composition on top of Pydantic models.

Each tier is a mapping of variable name to a field declaration in the form
``create_model`` understands: a bare annotation (required) or an
``(annotation, default)`` tuple::

    server = {"API_KEY": Secret[str], "PORT": (int, 8000)}
    client = {"PUBLIC_URL": Annotated[str, Field(pattern=r"^https?://")]}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, ValidationError, create_model

from ._types import FieldError, RuntimeContext, VisibilityTier

FieldSpecs = Mapping[str, Any]


class EnvSchema(BaseModel):
    """Base for composed env models. Unknown variables are ignored."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore", frozen=True)


def _field_definition(spec: Any) -> tuple[Any, Any]:
    if isinstance(spec, tuple):
        return spec
    return (spec, ...)


def merge_schemas(name: str, *tiers: FieldSpecs) -> type[EnvSchema]:
    """Build one model from several tiers; on a name clash the later tier wins."""
    fields: dict[str, Any] = {}
    for tier in tiers:
        for field_name, spec in tier.items():
            fields[field_name] = _field_definition(spec)
    return create_model(name, __base__=EnvSchema, **fields)


def tier_of(
    name: str,
    server: FieldSpecs,
    client: FieldSpecs,
    shared: FieldSpecs,
) -> VisibilityTier | None:
    """Tier that declared *name*; client/shared take priority over server."""
    if name in client:
        return VisibilityTier.CLIENT
    if name in shared:
        return VisibilityTier.SHARED
    if name in server:
        return VisibilityTier.SERVER
    return None


def duplicate_fields(
    server: FieldSpecs, client: FieldSpecs, shared: FieldSpecs
) -> list[tuple[str, list[VisibilityTier]]]:
    """Names declared in more than one tier, in declaration order."""
    seen: dict[str, list[VisibilityTier]] = {}
    for tier, specs in (
        (VisibilityTier.SERVER, server),
        (VisibilityTier.CLIENT, client),
        (VisibilityTier.SHARED, shared),
    ):
        for field_name in specs:
            seen.setdefault(field_name, []).append(tier)
    return [(name, tiers) for name, tiers in seen.items() if len(tiers) > 1]


@dataclass(frozen=True)
class ComposedSchema:
    """Full (server+client+shared) and restricted (client+shared) models."""

    full: type[EnvSchema]
    restricted: type[EnvSchema]

    @classmethod
    def compose(
        cls, server: FieldSpecs, client: FieldSpecs, shared: FieldSpecs
    ) -> "ComposedSchema":
        return cls(
            full=merge_schemas("FullEnv", server, client, shared),
            restricted=merge_schemas("RestrictedEnv", client, shared),
        )

    def for_context(self, context: RuntimeContext) -> type[EnvSchema]:
        return self.full if context.is_trusted else self.restricted


def validate_against(
    schema: type[EnvSchema], data: Mapping[str, Any]
) -> tuple[dict[str, Any] | None, tuple[FieldError, ...], ValidationError | None]:
    """Run *schema* over *data*.

    Returns ``(values, (), None)`` on success and ``(None, errors, exc)`` on
    failure. ``values`` holds the validated field objects, not a serialized
    dump, so ``Secret`` fields stay wrapped.
    """
    try:
        model = schema.model_validate(dict(data))
    except ValidationError as exc:
        errors = tuple(
            FieldError(path=tuple(str(part) for part in err["loc"]), message=err["msg"])
            for err in exc.errors(include_url=False)
        )
        return None, errors, exc
    return dict(model), (), None
