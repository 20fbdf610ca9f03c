"""Field building blocks for sync schemas.

Store blobs are written by hand, by templates and by other scripts, so
numbers arrive as strings, enums arrive misspelled and ranges get
exceeded. These helpers build pydantic ``Annotated`` types that absorb
that noise instead of rejecting the whole blob:

- :func:`clamped` — numeric coercion, then clamping into ``[lo, hi]``.
- :func:`choice` — closed string set with a fallback for unknown values.
- :func:`tiered` — threshold lookup used by derived fields.

Usage::

    class Pet(BaseModel):
        affection: clamped(0, 100, default=50)
        mood: choice("happy", "sad", fallback="happy")
"""

from __future__ import annotations

import functools
import math
from collections.abc import Sequence
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BeforeValidator, Field

from varsync.errors import SchemaDefinitionError

_MISSING: Any = object()


def coerce_number(value: Any) -> int | float:
    """Coerce loosely typed input to a number.

    Booleans become 0/1, numeric strings are parsed (integers stay
    integers), and the empty string is 0. NaN is rejected.

    Examples:
        >>> coerce_number("42")
        42
        >>> coerce_number(" 2.5 ")
        2.5
        >>> coerce_number(True)
        1

    Raises:
        ValueError: If *value* has no numeric reading.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value):
            msg = "number must not be NaN"
            raise ValueError(msg)
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            msg = f"cannot read {value!r} as a number"
            raise ValueError(msg) from None
        if math.isnan(number):
            msg = "number must not be NaN"
            raise ValueError(msg)
        return number
    msg = f"expected a number, got {type(value).__name__}"
    raise ValueError(msg)


def clamp(value: int | float, lo: int | float, hi: int | float) -> int | float:
    """Clamp *value* into ``[lo, hi]``."""
    if value < lo:
        return lo
    if value > hi:
        return hi
    return value


def clamped(lo: int | float, hi: int | float, *, default: Any = _MISSING) -> Any:
    """Annotated number type coerced with :func:`coerce_number` and clamped.

    Without *default* the field is required.

    Raises:
        SchemaDefinitionError: If the range is empty or the default lies
            outside it.
    """
    if lo > hi:
        msg = f"Empty range [{lo}, {hi}]"
        raise SchemaDefinitionError(msg)
    metadata: list[Any] = [
        BeforeValidator(coerce_number),
        AfterValidator(functools.partial(clamp, lo=lo, hi=hi)),
    ]
    if default is not _MISSING:
        if not lo <= default <= hi:
            msg = f"Default {default!r} outside range [{lo}, {hi}]"
            raise SchemaDefinitionError(msg)
        metadata.append(Field(default=default))
    return Annotated[int | float, *metadata]


def choice(*values: str, fallback: str) -> Any:
    """Annotated closed string set; unknown or missing values become *fallback*.

    Raises:
        SchemaDefinitionError: If no values are given or *fallback* is not
            one of them.
    """
    if not values:
        msg = "choice() needs at least one value"
        raise SchemaDefinitionError(msg)
    if fallback not in values:
        msg = f"Fallback {fallback!r} is not one of {list(values)}"
        raise SchemaDefinitionError(msg)
    allowed = frozenset(values)

    def _coerce(value: Any) -> Any:
        if isinstance(value, str) and value in allowed:
            return value
        return fallback

    return Annotated[Literal[values], BeforeValidator(_coerce), Field(default=fallback)]


def tiered(value: float, thresholds: Sequence[tuple[float, str]], top: str) -> str:
    """Return the label of the first threshold *value* lies below, else *top*.

    *thresholds* must be ordered by ascending bound.

    Examples:
        >>> tiered(35, [(20, "distant"), (40, "warming_up")], "devoted")
        'warming_up'
        >>> tiered(95, [(20, "distant"), (40, "warming_up")], "devoted")
        'devoted'
    """
    for bound, label in thresholds:
        if value < bound:
            return label
    return top


def derived(type_: Any, default: Any, *, alias: str | None = None) -> Any:
    """Annotated type for a field computed from its siblings.

    Whatever the blob holds for the field is discarded on input; a
    ``model_validator(mode="after")`` on the owning model recomputes it on
    every validation pass.
    """
    return Annotated[
        type_,
        BeforeValidator(lambda _stored: default),
        Field(default=default, alias=alias),
    ]


# Common shapes.
Number = Annotated[int | float, BeforeValidator(coerce_number)]
Percent = clamped(0, 100)
