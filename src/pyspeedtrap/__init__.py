"""pyspeedtrap - Speed trap proximity and directional-matching engine."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyspeedtrap")
except PackageNotFoundError:
    __version__ = "0+local"
from pyspeedtrap.config import DetectorConfig, ScoringWeights
from pyspeedtrap.detector import ProximityDetector
from pyspeedtrap.exceptions import (
    DataLoadError,
    MalformedRecordError,
    SpeedTrapConfigError,
    SpeedTrapError,
)
from pyspeedtrap.geo import angular_difference, bearing, haversine_distance
from pyspeedtrap.models import (
    DetectorState,
    DrivingContext,
    GeoPoint,
    MatchResult,
    NearbyTrap,
    ScanOutcome,
    SpeedUnit,
    TrapRecord,
)
from pyspeedtrap.scoring import MatchScorer, ScoreBreakdown
from pyspeedtrap.store import DatasetSchema, DatasetSource, TrapStore

__all__ = [
    "__version__",
    "DataLoadError",
    "DatasetSchema",
    "DatasetSource",
    "DetectorConfig",
    "DetectorState",
    "DrivingContext",
    "GeoPoint",
    "MalformedRecordError",
    "MatchResult",
    "MatchScorer",
    "NearbyTrap",
    "ProximityDetector",
    "ScanOutcome",
    "ScoreBreakdown",
    "ScoringWeights",
    "SpeedTrapConfigError",
    "SpeedTrapError",
    "SpeedUnit",
    "TrapRecord",
    "TrapStore",
    "angular_difference",
    "bearing",
    "haversine_distance",
]
