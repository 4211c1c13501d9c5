"""Model base class and the coordinate type shared by all pyspeedtrap models.

:class:`TrapBaseModel` gives every model:

* immutability, so published snapshots can cross threads freely.
* placeholder stripping before validation: keys whose value is ``None``,
  blank, ``"--"`` or NaN are dropped and the field default applies.
* per-class sentinel rules applied after validation (``_SENTINEL_RULES``).
"""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import Any, ClassVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

_PLACEHOLDER_TEXT = frozenset({"", "--", "nan"})


def is_negative(value: int | float) -> bool:
    """Sentinel predicate for fields where a negative value means "unknown"."""
    return value < 0


def _is_placeholder(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() in _PLACEHOLDER_TEXT
    return isinstance(value, float) and math.isnan(value)


class TrapBaseModel(BaseModel):
    """Base for pyspeedtrap models."""

    # {"field": predicate}; a field whose value satisfies its predicate is
    # replaced by None once the model is built.
    _SENTINEL_RULES: ClassVar[dict[str, Callable[..., bool]]] = {}

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_placeholders(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if not _is_placeholder(value)}
        return data

    @model_validator(mode="after")
    def _apply_sentinel_rules(self) -> TrapBaseModel:
        for name, is_sentinel in self._SENTINEL_RULES.items():
            current = getattr(self, name)
            if current is not None and is_sentinel(current):
                # Frozen model: bypass the validating __setattr__.
                object.__setattr__(self, name, None)
        return self


class GeoPoint(TrapBaseModel):
    """A WGS84 latitude/longitude pair in decimal degrees."""

    latitude: float = Field(ge=-90.0, le=90.0, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(ge=-180.0, le=180.0, validation_alias=AliasChoices("longitude", "lon", "lng"))

    @classmethod
    def of(cls, latitude: float, longitude: float) -> GeoPoint:
        return cls(latitude=latitude, longitude=longitude)
