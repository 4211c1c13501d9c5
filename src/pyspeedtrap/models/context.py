"""Driving context model (one location sample)."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, ClassVar

from pydantic import AliasChoices, Field, field_validator

from pyspeedtrap._constants import MPS_TO_KPH, STREET_NAME_PLACEHOLDERS
from pyspeedtrap.models._base import GeoPoint, TrapBaseModel, is_negative


class DrivingContext(TrapBaseModel):
    """A single position/heading/speed/street sample from the location layer.

    Parameters
    ----------
    position : GeoPoint
        Current position.
    heading_deg : float or None
        Course over ground in degrees, wrapped into ``[0, 360)``. The
        location layer reports ``-1`` when the course is unknown; any
        negative value becomes ``None``.
    speed_mps : float
        Speed in m/s. Negative (invalid) speeds become ``0``.
    street_name : str or None
        Reverse-geocoded street name. ``None`` while the name is not yet
        resolved (empty or a placeholder such as ``"Unknown Street"``).
    """

    _SENTINEL_RULES: ClassVar[dict[str, Callable[..., bool]]] = {
        "heading_deg": is_negative,
    }

    position: GeoPoint
    heading_deg: float | None = Field(default=None, validation_alias=AliasChoices("heading_deg", "heading", "course"))
    speed_mps: float = Field(default=0.0, validation_alias=AliasChoices("speed_mps", "speed"))
    street_name: str | None = Field(default=None, validation_alias=AliasChoices("street_name", "street"))

    @field_validator("heading_deg")
    @classmethod
    def _wrap_heading(cls, value: float | None) -> float | None:
        if value is None or value < 0:
            return value
        return value % 360.0

    @field_validator("speed_mps")
    @classmethod
    def _clamp_speed(cls, value: float) -> float:
        return max(0.0, value)

    @field_validator("street_name", mode="before")
    @classmethod
    def _drop_placeholder_street(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        if not text or text.lower() in STREET_NAME_PLACEHOLDERS:
            return None
        return text

    @classmethod
    def from_sample(
        cls,
        latitude: float,
        longitude: float,
        *,
        heading_deg: float = -1.0,
        speed_mps: float = 0.0,
        street_name: str = "",
    ) -> DrivingContext:
        """Build a context from raw location-layer values."""
        return cls(
            position=GeoPoint(latitude=latitude, longitude=longitude),
            heading_deg=heading_deg,
            speed_mps=speed_mps,
            street_name=street_name,
        )

    @property
    def has_heading(self) -> bool:
        return self.heading_deg is not None

    @property
    def speed_kph(self) -> float:
        return self.speed_mps * MPS_TO_KPH
