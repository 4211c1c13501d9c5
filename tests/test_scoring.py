from __future__ import annotations

import pytest

from pyspeedtrap.config import ScoringWeights
from pyspeedtrap.geo import haversine_distance
from pyspeedtrap.models import DrivingContext, GeoPoint, MatchResult, TrapRecord
from pyspeedtrap.scoring import (
    DirectionKind,
    MatchScorer,
    is_better,
    is_road_matching,
    normalize_road_name,
    parse_direction,
)

ORIGIN = GeoPoint(latitude=25.0, longitude=121.5)
_METERS_PER_DEGREE = 111_194.93


def _north_of(point: GeoPoint, meters: float) -> GeoPoint:
    return GeoPoint(latitude=point.latitude + meters / _METERS_PER_DEGREE, longitude=point.longitude)


def _trap(position: GeoPoint, *, address: str = "", direction: str = "", limit: float = 50.0) -> TrapRecord:
    return TrapRecord(position=position, speed_limit_kph=limit, address=address, direction=direction)


def _context(*, heading: float = -1.0, street: str = "", speed: float = 0.0) -> DrivingContext:
    return DrivingContext.from_sample(
        ORIGIN.latitude,
        ORIGIN.longitude,
        heading_deg=heading,
        speed_mps=speed,
        street_name=street,
    )


# ------------------------------------------------------------------
# Road names
# ------------------------------------------------------------------


def test_normalize_road_name_collapses_synonyms() -> None:
    assert normalize_road_name("Main Street") == "main st"
    assert normalize_road_name("Zhongshan  Road, Sec. 1") == "zhongshan rd sec 1"
    assert normalize_road_name("Pacific Coast Highway") == "pacific coast hwy"
    # Only whole words are rewritten.
    assert normalize_road_name("Broadway") == "broadway"


@pytest.mark.parametrize(
    ("street", "address"),
    [
        ("Main St", "Main Street"),
        ("Zhongshan Rd", "Zhongshan Road North, Sec. 1"),
        ("Main Street North", "Main St"),
        ("中山北路一段", "中山北路一段與南京西路口"),
        ("National Highway 1", "國道1號北向14.2公里"),
        ("Route 64", "台64線快速道路"),
        ("I-10", "Interstate 10 westbound"),
        ("台61線", "西濱快速道路61K"),
        ("台 1", "縱貫公路1號"),
    ],
)
def test_road_matches(street: str, address: str) -> None:
    assert is_road_matching(street, address)


@pytest.mark.parametrize(
    ("street", "address"),
    [
        ("Elm St", "Main St"),
        ("Main St 1", "Elm St 1"),
        ("A", "A Street"),
        ("Main St", ""),
        ("Highway 2", "國道1號"),
        ("台北市信義路5段", "基隆路5號"),
        ("台中市中港路3段", "台灣大道3段"),
    ],
)
def test_road_mismatches(street: str, address: str) -> None:
    assert not is_road_matching(street, address)


# ------------------------------------------------------------------
# Directions
# ------------------------------------------------------------------


@pytest.mark.parametrize(
    ("text", "heading"),
    [
        ("南向北", 0.0),
        ("北向南", 180.0),
        ("西向東", 90.0),
        ("東向西", 270.0),
        ("东向西", 270.0),
        ("北上", 0.0),
        ("南下", 180.0),
        ("Northbound", 0.0),
        ("SB", 180.0),
        ("eastbound lanes", 90.0),
        ("W", 270.0),
        ("135", 135.0),
    ],
)
def test_parse_direction_headings(text: str, heading: float) -> None:
    target = parse_direction(text)
    assert target.kind == DirectionKind.HEADING
    assert target.heading == heading


@pytest.mark.parametrize("text", ["南北雙向", "東西双向", "Bidirectional", "both", "Two-way"])
def test_parse_direction_bidirectional(text: str) -> None:
    assert parse_direction(text).kind == DirectionKind.BIDIRECTIONAL


@pytest.mark.parametrize("text", ["", "順向", "N/A", "unknown", "999"])
def test_parse_direction_unknown(text: str) -> None:
    assert parse_direction(text).kind == DirectionKind.UNKNOWN


# ------------------------------------------------------------------
# Scorer components
# ------------------------------------------------------------------


class TestMatchScorer:
    def setup_method(self) -> None:
        self.scorer = MatchScorer()

    def test_road_match_bonus(self) -> None:
        trap = _trap(_north_of(ORIGIN, 100), address="Main Street")
        assert self.scorer.road_component(_context(street="Main St"), trap) == 1200

    def test_unresolved_street_contributes_nothing(self) -> None:
        trap = _trap(_north_of(ORIGIN, 100), address="Unknown Street")
        assert self.scorer.road_component(_context(street="Unknown Street"), trap) == 0
        assert self.scorer.road_component(_context(street=""), trap) == 0

    def test_direction_unknown_heading(self) -> None:
        trap = _trap(_north_of(ORIGIN, 100), direction="南向北")
        assert self.scorer.direction_component(_context(heading=-1), trap) == 0

    def test_direction_match_and_mismatch(self) -> None:
        trap = _trap(_north_of(ORIGIN, 100), direction="南向北")
        assert self.scorer.direction_component(_context(heading=30), trap) == 500
        assert self.scorer.direction_component(_context(heading=315), trap) == 500
        assert self.scorer.direction_component(_context(heading=46), trap) == -1000
        assert self.scorer.direction_component(_context(heading=180), trap) == -1000

    def test_direction_bidirectional_always_matches(self) -> None:
        trap = _trap(_north_of(ORIGIN, 100), direction="南北雙向")
        assert self.scorer.direction_component(_context(heading=123), trap) == 500

    def test_direction_unparseable_is_neutral(self) -> None:
        trap = _trap(_north_of(ORIGIN, 100), direction="順向")
        assert self.scorer.direction_component(_context(heading=180), trap) == 0

    def test_ahead(self) -> None:
        trap = _trap(_north_of(ORIGIN, 300))
        assert self.scorer.ahead_component(_context(heading=20), trap, 300) == 400

    def test_passed_and_far(self) -> None:
        trap = _trap(_north_of(ORIGIN, 300))
        assert self.scorer.ahead_component(_context(heading=180), trap, 300) == -2000

    def test_passed_but_close_is_neutral(self) -> None:
        trap = _trap(_north_of(ORIGIN, 30))
        assert self.scorer.ahead_component(_context(heading=180), trap, 30) == 0

    def test_abeam_is_neutral(self) -> None:
        trap = _trap(_north_of(ORIGIN, 300))
        assert self.scorer.ahead_component(_context(heading=90), trap, 300) == 0

    def test_ahead_needs_heading(self) -> None:
        trap = _trap(_north_of(ORIGIN, 300))
        assert self.scorer.ahead_component(_context(heading=-1), trap, 300) == 0

    @pytest.mark.parametrize(("distance", "expected"), [(0.0, 200), (200.0, 180), (1999.0, 0), (2500.0, 0)])
    def test_proximity_decay(self, distance: float, expected: int) -> None:
        assert self.scorer.proximity_component(distance) == expected

    def test_custom_weights(self) -> None:
        scorer = MatchScorer(ScoringWeights(road_match=10, decay_divisor=100))
        trap = _trap(_north_of(ORIGIN, 100), address="Main St")
        assert scorer.road_component(_context(street="Main St"), trap) == 10
        assert scorer.proximity_component(0.0) == 20


def test_main_street_southbound_scenario() -> None:
    trap = _trap(_north_of(ORIGIN, 200), address="Main St", direction="southbound", limit=100)
    context = _context(heading=0, street="Main St", speed=30)
    distance = haversine_distance(context.position, trap.position)

    breakdown = MatchScorer().breakdown(context, trap, distance)

    assert breakdown.road == 1200
    assert breakdown.direction == -1000
    assert breakdown.ahead == 400
    assert 179 <= breakdown.proximity <= 180
    assert breakdown.total == 600 + breakdown.proximity
    assert MatchScorer().score(context, trap, distance) == breakdown.total


def test_negative_score_still_comparable() -> None:
    trap = _trap(_north_of(ORIGIN, 300), direction="北向南")
    score = MatchScorer().score(_context(heading=180), trap, 300)
    # Heading matches 北向南 (+500) but the trap is behind the vehicle (-2000).
    assert score == 500 - 2000 + 170


class TestIsBetter:
    def test_first_candidate_wins(self) -> None:
        candidate = MatchResult(trap=_trap(ORIGIN), distance_m=10, score=-5000)
        assert is_better(candidate, None)

    def test_higher_score_wins(self) -> None:
        far = MatchResult(trap=_trap(ORIGIN), distance_m=1500, score=1300)
        near = MatchResult(trap=_trap(ORIGIN), distance_m=10, score=199)
        assert is_better(far, near)
        assert not is_better(near, far)

    def test_tie_goes_to_strictly_closer(self) -> None:
        a = MatchResult(trap=_trap(ORIGIN), distance_m=100, score=500)
        b = MatchResult(trap=_trap(ORIGIN), distance_m=99.5, score=500)
        assert is_better(b, a)
        assert not is_better(a, b)
        assert not is_better(a, a)
