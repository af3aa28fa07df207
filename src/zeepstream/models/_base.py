"""Base model and float32 helpers for wire-facing models.

Every wire model inherits from :class:`ZeepBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase wire keys map
  automatically to snake_case fields.
* Frozen instances; a decoded payload is a value, never mutated.

Numeric fields travel as 32-bit floats.  :func:`to_f32` rounds a Python
float to the nearest float32 so a value compares equal before and after
a trip through the wire.
"""

from __future__ import annotations

import math
import struct
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

_F32 = struct.Struct("<f")


def to_f32(value: float) -> float:
    """Round *value* to float32 precision.

    Raises :class:`ValueError` when *value* is outside the float32 range.
    """
    try:
        return float(_F32.unpack(_F32.pack(value))[0])
    except (OverflowError, struct.error) as exc:
        raise ValueError(f"{value!r} does not fit in a 32-bit float") from exc


def coerce_float(value: Any) -> float:
    """Convert *value* to a finite float; ``None`` and NaN become ``0.0``."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    try:
        result = float(value)
    except (TypeError, OverflowError) as exc:
        raise ValueError(f"expected a finite number, got {type(value).__name__}") from exc
    if math.isnan(result):
        return 0.0
    return result


def _coerce_vec3(value: Any) -> tuple[float, float, float]:
    if all(hasattr(value, axis) for axis in ("x", "y", "z")):
        components = (value.x, value.y, value.z)
    elif isinstance(value, (list, tuple)):
        if len(value) != 3:
            raise ValueError(f"vector must have 3 components, got {len(value)}")
        components = tuple(value)
    else:
        raise ValueError(f"expected a 3-component vector, got {type(value).__name__}")
    x, y, z = (to_f32(coerce_float(c)) for c in components)
    return (x, y, z)


Vec3 = Annotated[tuple[float, float, float], BeforeValidator(_coerce_vec3)]
"""(x, y, z) vector; accepts any 3-sequence or an object with ``x``/``y``/``z``."""


class ZeepBaseModel(BaseModel):
    """Base for models that cross the wire."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
