"""Per-field transform helpers.

A transform runs on the raw value before schema validation. It receives
``UNDEFINED`` when the variable is absent and may return ``UNDEFINED`` to
keep it absent, which lets the schema default apply. Boolean spellings need
no transform: the schema's ``bool`` annotation already accepts "yes", "off",
"1" and friends.
"""

from __future__ import annotations

from typing import Any, Callable, Literal, Sequence

from pydantic import TypeAdapter, ValidationError

from ._types import UNDEFINED, _Undefined

Transform = Callable[[Any], Any]


def _first_message(exc: ValidationError) -> str:
    return exc.errors(include_url=False)[0]["msg"]


class Csv:
    """Split a delimited string into a list validated as ``list[item_type]``.

    Blank items are dropped; a value with no items left counts as absent.

    >>> Csv()("a, b, c")
    ['a', 'b', 'c']
    >>> Csv(int)("1,2,3")
    [1, 2, 3]
    """

    def __init__(self, item_type: Any = str, delimiter: str = ",", strip: bool = True) -> None:
        self.item_type = item_type
        self.delimiter = delimiter
        self.strip = strip
        self._adapter = TypeAdapter(list[item_type])

    def __call__(self, value: Any) -> Any:
        if isinstance(value, _Undefined):
            return value

        if isinstance(value, (list, tuple)):
            parts = list(value)
        else:
            parts = str(value).split(self.delimiter)
            if self.strip:
                parts = [p.strip() for p in parts]
            parts = [p for p in parts if p]

        if not parts:
            return UNDEFINED

        try:
            return self._adapter.validate_python(parts)
        except ValidationError as exc:
            raise ValueError(f"Invalid item in {value!r}: {_first_message(exc)}") from exc


class Choices:
    """Reject values outside a fixed set of literals.

    With ``case_sensitive=False`` a string matching a choice in any case is
    replaced by the declared spelling.

    >>> Choices(["debug", "info"], case_sensitive=False)("INFO")
    'info'
    """

    def __init__(self, choices: Sequence[Any], case_sensitive: bool = True) -> None:
        if not choices:
            raise ValueError("Choices needs at least one choice")
        self.choices = tuple(choices)
        self.case_sensitive = case_sensitive
        self._adapter = TypeAdapter(Literal[self.choices])

    def _canonical(self, value: Any) -> Any:
        if self.case_sensitive or not isinstance(value, str):
            return value
        folded = value.casefold()
        for choice in self.choices:
            if isinstance(choice, str) and choice.casefold() == folded:
                return choice
        return value

    def __call__(self, value: Any) -> Any:
        if isinstance(value, _Undefined):
            return value
        try:
            return self._adapter.validate_python(self._canonical(value))
        except ValidationError as exc:
            raise ValueError(
                f"{value!r} is not a valid choice. Must be one of {list(self.choices)}"
            ) from exc
