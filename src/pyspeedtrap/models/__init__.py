"""Data models for trap records, driving samples and detector output."""

from pyspeedtrap.models._base import GeoPoint, TrapBaseModel, is_negative
from pyspeedtrap.models.context import DrivingContext
from pyspeedtrap.models.result import DetectorState, MatchResult, NearbyTrap, ScanOutcome
from pyspeedtrap.models.trap import SpeedUnit, TrapRecord

__all__ = [
    "DetectorState",
    "DrivingContext",
    "GeoPoint",
    "MatchResult",
    "NearbyTrap",
    "ScanOutcome",
    "SpeedUnit",
    "TrapBaseModel",
    "TrapRecord",
    "is_negative",
]
