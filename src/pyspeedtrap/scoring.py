"""Trap match scoring.

A candidate trap is scored against the current :class:`DrivingContext`
with four additive factors:

* road-name match between the current street and the trap address
* direction match between the heading and the direction the camera enforces
* whether the trap lies ahead of the vehicle or has already been passed
* a mild proximity bonus that decays to zero at ``decay_radius_m``

Negative totals are strong disqualifications but never hard exclusions;
the search radius pre-filter in the detector is the only exclusion.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from pyspeedtrap.config import ScoringWeights
from pyspeedtrap.geo import angular_difference, bearing, normalize_heading
from pyspeedtrap.ingestion.normalize import safe_float
from pyspeedtrap.models.context import DrivingContext
from pyspeedtrap.models.result import MatchResult
from pyspeedtrap.models.trap import TrapRecord

# ------------------------------------------------------------------
# Road names
# ------------------------------------------------------------------

_ROAD_SYNONYMS: tuple[tuple[str, str], ...] = (
    ("road", "rd"),
    ("street", "st"),
    ("highway", "hwy"),
    ("avenue", "ave"),
    ("boulevard", "blvd"),
    ("drive", "dr"),
)
_SYNONYM_RES = tuple((re.compile(rf"\b{long}\b"), short) for long, short in _ROAD_SYNONYMS)
_PUNCTUATION_RE = re.compile(r"[^\w\s]")
_NUMBER_RE = re.compile(r"\d+")
_WORD_RE = re.compile(r"[a-z]+")

_HIGHWAY_WORDS = frozenset(
    {"hwy", "freeway", "fwy", "expressway", "expy", "interstate", "i", "route", "rte", "motorway", "us", "sr"}
)
# Chinese highway markers match anywhere (no word boundaries in CJK text).
# Provincial routes are 台<number> (台1線, 台 61); a bare 台 is part of city names (台北, 台中).
_HIGHWAY_MARKER_RE = re.compile(r"國道|国道|省道|快速|台\s*\d")

_MIN_STREET_LENGTH = 2


def normalize_road_name(text: str) -> str:
    """Lower-case, strip punctuation and collapse common road-type synonyms."""
    lowered = _PUNCTUATION_RE.sub(" ", text.lower())
    for pattern, short in _SYNONYM_RES:
        lowered = pattern.sub(short, lowered)
    return " ".join(lowered.split())


def _first_number(text: str) -> str | None:
    match = _NUMBER_RE.search(text)
    if match is None:
        return None
    return match.group(0).lstrip("0") or "0"


def _has_highway_keyword(normalized: str) -> bool:
    if _HIGHWAY_MARKER_RE.search(normalized):
        return True
    return any(word in _HIGHWAY_WORDS for word in _WORD_RE.findall(normalized))


def is_road_matching(street_name: str, trap_address: str) -> bool:
    """Return True when the street name and trap address name the same road.

    Matches on substring containment in either direction after
    normalization, or on an equal route number when the street name is a
    highway (``"National Highway 1"`` vs ``"國道1號"``).
    """
    street = normalize_road_name(street_name)
    address = normalize_road_name(trap_address)
    if len(street) < _MIN_STREET_LENGTH or len(address) < _MIN_STREET_LENGTH:
        return False
    if street in address or address in street:
        return True

    street_number = _first_number(street)
    address_number = _first_number(address)
    if street_number is None or address_number is None:
        return False
    return street_number == address_number and _has_highway_keyword(street)


# ------------------------------------------------------------------
# Directions
# ------------------------------------------------------------------


class DirectionKind(StrEnum):
    HEADING = "heading"
    BIDIRECTIONAL = "bidirectional"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class DirectionTarget:
    kind: DirectionKind
    heading: float | None = None


_UNKNOWN_DIRECTION = DirectionTarget(DirectionKind.UNKNOWN)
_BIDIRECTIONAL = DirectionTarget(DirectionKind.BIDIRECTIONAL)

_BIDIRECTIONAL_MARKERS: tuple[str, ...] = ("雙向", "双向", "two-way", "two way", "both directions", "all directions")
_BIDIRECTIONAL_WORDS = frozenset({"bidirectional", "both", "bi"})
_UNKNOWN_WORDS = frozenset({"n/a", "na", "none", "unknown"})

# "<from>向<to>" (from X toward Y) plus the freeway terms 北上/南下.
_CJK_HEADINGS: tuple[tuple[str, float], ...] = (
    ("南向北", 0.0),
    ("北向南", 180.0),
    ("西向東", 90.0),
    ("西向东", 90.0),
    ("東向西", 270.0),
    ("东向西", 270.0),
    ("北上", 0.0),
    ("南下", 180.0),
)

_ENGLISH_HEADINGS: dict[str, float] = {
    "northbound": 0.0,
    "nb": 0.0,
    "north": 0.0,
    "n": 0.0,
    "eastbound": 90.0,
    "eb": 90.0,
    "east": 90.0,
    "e": 90.0,
    "southbound": 180.0,
    "sb": 180.0,
    "south": 180.0,
    "s": 180.0,
    "westbound": 270.0,
    "wb": 270.0,
    "west": 270.0,
    "w": 270.0,
}


def parse_direction(text: str) -> DirectionTarget:
    """Parse a trap's free-text direction into a target heading.

    Understands the Chinese ``南向北`` style (and ``雙向`` for both
    directions), English bound/compass words, and plain numeric headings.
    Anything else is ``UNKNOWN``.
    """
    cleaned = text.strip()
    if not cleaned:
        return _UNKNOWN_DIRECTION

    lowered = cleaned.lower()
    if lowered in _UNKNOWN_WORDS:
        return _UNKNOWN_DIRECTION
    if any(marker in lowered for marker in _BIDIRECTIONAL_MARKERS):
        return _BIDIRECTIONAL
    for marker, heading in _CJK_HEADINGS:
        if marker in cleaned:
            return DirectionTarget(DirectionKind.HEADING, heading)

    words = _WORD_RE.findall(lowered)
    if any(word in _BIDIRECTIONAL_WORDS for word in words):
        return _BIDIRECTIONAL
    for word in words:
        heading = _ENGLISH_HEADINGS.get(word)
        if heading is not None:
            return DirectionTarget(DirectionKind.HEADING, heading)

    numeric = safe_float(cleaned)
    if numeric is not None and 0 <= numeric <= 360:
        return DirectionTarget(DirectionKind.HEADING, normalize_heading(numeric))
    return _UNKNOWN_DIRECTION


# ------------------------------------------------------------------
# Scorer
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ScoreBreakdown:
    """Per-factor score components."""

    road: int = 0
    direction: int = 0
    ahead: int = 0
    proximity: int = 0

    @property
    def total(self) -> int:
        return self.road + self.direction + self.ahead + self.proximity


class MatchScorer:
    """Score trap candidates against a driving context. Higher is better."""

    def __init__(self, weights: ScoringWeights | None = None) -> None:
        self._weights = weights or ScoringWeights()

    @property
    def weights(self) -> ScoringWeights:
        return self._weights

    def road_component(self, context: DrivingContext, trap: TrapRecord) -> int:
        # An unresolved street name never counts against a candidate.
        if context.street_name is None:
            return 0
        if is_road_matching(context.street_name, trap.address):
            return self._weights.road_match
        return 0

    def direction_component(self, context: DrivingContext, trap: TrapRecord) -> int:
        if context.heading_deg is None:
            return 0
        target = parse_direction(trap.direction)
        if target.kind == DirectionKind.BIDIRECTIONAL:
            return self._weights.direction_match
        if target.kind == DirectionKind.UNKNOWN or target.heading is None:
            return 0
        if angular_difference(context.heading_deg, target.heading) > self._weights.direction_tolerance_deg:
            return self._weights.direction_mismatch
        return self._weights.direction_match

    def ahead_component(self, context: DrivingContext, trap: TrapRecord, distance_m: float) -> int:
        if context.heading_deg is None:
            return 0
        offset = angular_difference(context.heading_deg, bearing(context.position, trap.position))
        if offset < self._weights.ahead_max_deg:
            return self._weights.ahead
        if offset > self._weights.passed_min_deg and distance_m > self._weights.passed_min_distance_m:
            return self._weights.passed
        return 0

    def proximity_component(self, distance_m: float) -> int:
        return int(max(0.0, self._weights.decay_radius_m - distance_m) / self._weights.decay_divisor)

    def breakdown(self, context: DrivingContext, trap: TrapRecord, distance_m: float) -> ScoreBreakdown:
        return ScoreBreakdown(
            road=self.road_component(context, trap),
            direction=self.direction_component(context, trap),
            ahead=self.ahead_component(context, trap, distance_m),
            proximity=self.proximity_component(distance_m),
        )

    def score(self, context: DrivingContext, trap: TrapRecord, distance_m: float) -> int:
        return self.breakdown(context, trap, distance_m).total


def is_better(candidate: MatchResult, incumbent: MatchResult | None) -> bool:
    """Higher score wins; equal scores go to the strictly closer trap."""
    if incumbent is None:
        return True
    if candidate.score != incumbent.score:
        return candidate.score > incumbent.score
    return candidate.distance_m < incumbent.distance_m
