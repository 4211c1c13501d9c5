"""Detector output models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from pyspeedtrap.models._base import TrapBaseModel
from pyspeedtrap.models.trap import TrapRecord


class ScanOutcome(StrEnum):
    """What a single ``evaluate`` call did.

    Only ``SCANNED`` and ``FAILED`` publish a new state. ``SKIPPED_BUSY``
    and ``THROTTLED`` are silent no-ops, not errors.
    """

    SCANNED = "scanned"
    SKIPPED_BUSY = "skipped_busy"
    THROTTLED = "throttled"
    FAILED = "failed"


class NearbyTrap(TrapBaseModel):
    """A trap paired with its plain distance from a position."""

    trap: TrapRecord
    distance_m: float = Field(ge=0.0)


class MatchResult(NearbyTrap):
    """The trap selected by a scan, with its distance and match score."""

    score: int


class DetectorState(TrapBaseModel):
    """Published detector snapshot. Replaced wholesale on every scan."""

    closest_trap: MatchResult | None = None
    is_within_range: bool = False
    is_speeding: bool = False
    speeding_amount_kph: float = 0.0

    @classmethod
    def empty(cls) -> DetectorState:
        """The "no trap" state."""
        return cls()
