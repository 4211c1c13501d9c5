"""Detector configuration for pyspeedtrap."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from pyspeedtrap._constants import (
    DEFAULT_ALERT_DISTANCE_M,
    DEFAULT_RESCAN_DISTANCE_M,
    DEFAULT_SEARCH_RADIUS_M,
)
from pyspeedtrap.exceptions import SpeedTrapConfigError

_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})
_FALSY = frozenset({"0", "false", "no", "n", "off"})

_ENV_DISTANCES = {
    "SPEEDTRAP_ALERT_DISTANCE_M": "alert_distance_m",
    "SPEEDTRAP_SEARCH_RADIUS_M": "search_radius_m",
    "SPEEDTRAP_RESCAN_DISTANCE_M": "rescan_distance_m",
}
_ENV_PATHS = {
    "SPEEDTRAP_GEOJSON_PATH": "geojson_path",
    "SPEEDTRAP_FLAT_PATH": "flat_path",
}


def _env_bool(value: str | None, default: bool) -> bool:
    """Parse a boolean env value; unrecognized words fall back to *default*."""
    word = (value or "").strip().lower()
    if word in _TRUTHY:
        return True
    if word in _FALSY:
        return False
    return default


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise SpeedTrapConfigError(f"{env_key} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class ScoringWeights:
    """Weights and thresholds of the trap match score.

    The values are empirically tuned; they are kept configurable so that
    callers can experiment without touching the scoring code.

    Parameters
    ----------
    road_match : int
        Bonus when the current street name matches the trap address.
    direction_match : int
        Bonus when the heading matches the trap's enforced direction.
    direction_mismatch : int
        Penalty when the heading is more than ``direction_tolerance_deg``
        away from the trap's enforced direction.
    ahead : int
        Bonus when the trap lies ahead of the vehicle.
    passed : int
        Penalty when the trap lies behind the vehicle and farther than
        ``passed_min_distance_m``.
    direction_tolerance_deg : float
        Maximum heading deviation still counted as a direction match.
    ahead_max_deg : float
        Bearing deviation below which a trap counts as ahead.
    passed_min_deg : float
        Bearing deviation above which a trap counts as passed.
    passed_min_distance_m : float
        Traps closer than this are never counted as passed.
    decay_radius_m : float
        Distance at which the proximity bonus reaches zero.
    decay_divisor : float
        Divisor applied to ``decay_radius_m - distance``.
    """

    road_match: int = 1200
    direction_match: int = 500
    direction_mismatch: int = -1000
    ahead: int = 400
    passed: int = -2000
    direction_tolerance_deg: float = 45.0
    ahead_max_deg: float = 60.0
    passed_min_deg: float = 120.0
    passed_min_distance_m: float = 50.0
    decay_radius_m: float = 2000.0
    decay_divisor: float = 10.0

    def __post_init__(self) -> None:
        if self.decay_divisor <= 0:
            raise SpeedTrapConfigError(f"decay_divisor must be positive, got {self.decay_divisor}")
        if self.ahead_max_deg > self.passed_min_deg:
            raise SpeedTrapConfigError("ahead_max_deg must not exceed passed_min_deg")


@dataclasses.dataclass(frozen=True)
class DetectorConfig:
    """Detector configuration.

    Parameters
    ----------
    alert_distance_m : float
        Distance at or below which the selected trap is reported as in range.
    infinite_proximity : bool
        Disable both the search radius cutoff and the movement throttle.
    search_radius_m : float
        Traps farther than this are never considered (unless
        ``infinite_proximity`` is set).
    rescan_distance_m : float
        Minimum movement since the last evaluated position before a new
        scan runs (unless ``infinite_proximity`` is set).
    geojson_path : Path or None
        Override for the bundled GeoJSON trap dataset.
    flat_path : Path or None
        Override for the bundled flat (mph) camera dataset.
    weights : ScoringWeights
        Match score weights and thresholds.
    """

    alert_distance_m: float = DEFAULT_ALERT_DISTANCE_M
    infinite_proximity: bool = False
    search_radius_m: float = DEFAULT_SEARCH_RADIUS_M
    rescan_distance_m: float = DEFAULT_RESCAN_DISTANCE_M
    geojson_path: Path | None = None
    flat_path: Path | None = None
    weights: ScoringWeights = dataclasses.field(default_factory=ScoringWeights)

    def __post_init__(self) -> None:
        for field_name in ("alert_distance_m", "search_radius_m", "rescan_distance_m"):
            value = getattr(self, field_name)
            if value < 0:
                raise SpeedTrapConfigError(f"{field_name} must be non-negative, got {value}")

    @classmethod
    def from_env(cls, **overrides: Any) -> DetectorConfig:
        """Create configuration from environment variables.

        Reads optional ``SPEEDTRAP_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        DetectorConfig
            Populated configuration.
        """
        kwargs: dict[str, Any] = {}

        for env_key, field_name in _ENV_DISTANCES.items():
            raw = os.getenv(env_key)
            if raw is not None and field_name not in overrides:
                kwargs[field_name] = _env_float(env_key, raw)

        for env_key, field_name in _ENV_PATHS.items():
            raw = os.getenv(env_key)
            if raw and field_name not in overrides:
                kwargs[field_name] = Path(raw).expanduser()

        if "infinite_proximity" not in overrides:
            kwargs["infinite_proximity"] = _env_bool(os.getenv("SPEEDTRAP_INFINITE_PROXIMITY"), False)

        return cls(**{**kwargs, **overrides})
