"""Trap record model."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field

from pyspeedtrap._constants import DEDUP_COORDINATE_PRECISION
from pyspeedtrap.models._base import GeoPoint, TrapBaseModel


class SpeedUnit(StrEnum):
    KPH = "km/h"
    MPH = "mph"


class TrapRecord(TrapBaseModel):
    """A fixed speed-enforcement camera, normalized from any dataset schema.

    Parameters
    ----------
    position : GeoPoint
        Camera location.
    speed_limit_kph : float
        Posted limit converted to km/h. ``0`` means the limit is unknown.
    speed_limit_display : str
        Limit as published by the dataset, with its original unit
        (e.g. ``"60 km/h"`` or ``"45 mph"``). Empty when unknown.
    address : str
        Free-text road or location description, in the dataset's language.
    direction : str
        Free-text or coded direction of travel the camera enforces.
    source : str
        Name of the dataset the record was loaded from.
    raw : dict
        Original record payload.
    """

    position: GeoPoint
    speed_limit_kph: float = Field(default=0.0, ge=0.0)
    speed_limit_display: str = ""
    address: str = ""
    direction: str = ""
    source: str = ""
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    @property
    def has_speed_limit(self) -> bool:
        return self.speed_limit_kph > 0

    @property
    def dedup_key(self) -> tuple[float, float, str, str]:
        return (
            round(self.position.latitude, DEDUP_COORDINATE_PRECISION),
            round(self.position.longitude, DEDUP_COORDINATE_PRECISION),
            self.address.strip(),
            self.direction.strip(),
        )
