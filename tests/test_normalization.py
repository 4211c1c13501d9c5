from __future__ import annotations

import math

import pytest

from pyspeedtrap.exceptions import DataLoadError
from pyspeedtrap.ingestion.flat import parse_flat_records
from pyspeedtrap.ingestion.geojson import parse_feature_collection
from pyspeedtrap.ingestion.normalize import (
    display_speed_limit,
    format_speed_limit,
    parse_speed_limit,
    safe_float,
    safe_str,
    to_kph,
)
from pyspeedtrap.models import SpeedUnit


def _feature(coordinates: list[float], **properties: object) -> dict[str, object]:
    return {"type": "Feature", "geometry": {"type": "Point", "coordinates": coordinates}, "properties": properties}


def test_safe_float_rejects_placeholders() -> None:
    assert safe_float(None) is None
    assert safe_float("") is None
    assert safe_float("--") is None
    assert safe_float("abc") is None
    assert safe_float(float("nan")) is None
    assert safe_float(True) is None
    assert safe_float(10**400) is None
    assert safe_float("1e400") is None
    assert safe_float("12.5") == 12.5


def test_safe_str_strips() -> None:
    assert safe_str("  Main St ") == "Main St"
    assert safe_str("   ") is None
    assert safe_str(None) is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("50", 50.0),
        ("50.0", 50.0),
        (60, 60.0),
        ("60 km/h", 60.0),
        ("45mph", 45.0),
        ("限速70", 70.0),
        ("", 0.0),
        (None, 0.0),
        ("--", 0.0),
        ("fast", None),
        (-5, None),
        (10**400, None),
        ("9" * 400, None),
    ],
)
def test_parse_speed_limit(value: object, expected: float | None) -> None:
    assert parse_speed_limit(value) == expected


def test_mph_conversion() -> None:
    assert to_kph(60, SpeedUnit.MPH) == pytest.approx(96.5604)
    assert to_kph(60, SpeedUnit.KPH) == 60


def test_format_speed_limit_keeps_original_unit() -> None:
    assert format_speed_limit(50.0, SpeedUnit.KPH) == "50 km/h"
    assert format_speed_limit(45.0, SpeedUnit.MPH) == "45 mph"
    assert format_speed_limit(27.5, SpeedUnit.MPH) == "27.5 mph"
    assert format_speed_limit(0.0, SpeedUnit.KPH) == ""


@pytest.mark.parametrize(
    ("raw", "unit", "expected"),
    [
        ("50.0", SpeedUnit.KPH, "50.0 km/h"),
        (" 60 ", SpeedUnit.KPH, "60 km/h"),
        ("限速60", SpeedUnit.KPH, "限速60"),
        ("45 mph", SpeedUnit.MPH, "45 mph"),
        (25, SpeedUnit.MPH, "25 mph"),
        (27.5, SpeedUnit.MPH, "27.5 mph"),
        ("", SpeedUnit.KPH, ""),
    ],
)
def test_display_speed_limit_keeps_dataset_text(raw: object, unit: SpeedUnit, expected: str) -> None:
    value = parse_speed_limit(raw)
    assert value is not None
    assert display_speed_limit(raw, value, unit) == expected


class TestGeoJsonParser:
    def test_localized_properties(self) -> None:
        payload = {
            "type": "FeatureCollection",
            "features": [_feature([121.5225, 25.0531], name="50.0", 設置地址="中山北路一段", 拍攝方向="南向北")],
        }

        records = parse_feature_collection(payload, source="tw")

        assert len(records) == 1
        record = records[0]
        assert record.position.latitude == 25.0531
        assert record.position.longitude == 121.5225
        assert record.speed_limit_kph == 50.0
        assert record.speed_limit_display == "50.0 km/h"
        assert record.address == "中山北路一段"
        assert record.direction == "南向北"
        assert record.source == "tw"
        assert record.raw["properties"]["name"] == "50.0"

    def test_direction_is_optional(self) -> None:
        payload = {"features": [_feature([121.5, 25.0], name="60", 設置地址="基隆路")]}
        (record,) = parse_feature_collection(payload, source="tw")
        assert record.direction == ""

    def test_malformed_features_are_skipped(self) -> None:
        payload = {
            "features": [
                _feature([121.5], name="50", 設置地址="one coordinate"),
                _feature([121.5, 25.0], name="fast", 設置地址="bad limit"),
                _feature([500.0, 25.0], name="50", 設置地址="out of range"),
                {"type": "Feature", "properties": {"name": "50"}},
                "not a feature",
                _feature([121.5, 25.0], name="", 設置地址="unknown limit"),
                _feature([121.6, 25.1, 12.0], name="40", 設置地址="with altitude"),
            ]
        }

        records = parse_feature_collection(payload, source="tw")

        assert [r.address for r in records] == ["unknown limit", "with altitude"]
        assert records[0].speed_limit_kph == 0.0
        assert not records[0].has_speed_limit

    def test_textual_limit_kept_for_display(self) -> None:
        payload = {"features": [_feature([121.5, 25.0], name="限速60", 設置地址="基隆路")]}
        (record,) = parse_feature_collection(payload, source="tw")
        assert record.speed_limit_kph == 60.0
        assert record.speed_limit_display == "限速60"

    def test_oversized_numbers_skip_only_their_feature(self) -> None:
        payload = {
            "features": [
                _feature([121.5, 25.0], name=10**400, 設置地址="huge limit"),
                _feature([10**400, 25.0], name="50", 設置地址="huge longitude"),
                _feature([121.6, 25.1], name="50", 設置地址="fine"),
            ]
        }

        records = parse_feature_collection(payload, source="tw")

        assert [r.address for r in records] == ["fine"]

    @pytest.mark.parametrize("payload", [[], {"type": "FeatureCollection"}, "text", {"features": {}}])
    def test_wrong_shape_raises_data_load_error(self, payload: object) -> None:
        with pytest.raises(DataLoadError):
            parse_feature_collection(payload, source="tw")


class TestFlatParser:
    def test_mph_records_are_converted(self) -> None:
        payload = [
            {"latitude": 40.758, "longitude": -73.9855, "speed_limit": 25, "address": "7th Ave", "direction": "SB"},
        ]

        (record,) = parse_flat_records(payload, source="us")

        assert record.speed_limit_kph == pytest.approx(25 * 1.60934)
        assert record.speed_limit_display == "25 mph"
        assert record.address == "7th Ave"
        assert record.direction == "SB"

    def test_records_container_and_aliases(self) -> None:
        payload = {
            "records": [{"Latitude": "41.8781", "Longitude": "-87.6298", "SpeedLimit": "30", "Location": "State St"}],
        }
        (record,) = parse_flat_records(payload, source="us")
        assert record.position.latitude == pytest.approx(41.8781)
        assert record.address == "State St"

    def test_arcgis_features(self) -> None:
        payload = {"features": [{"attributes": {"lat": 34.05, "lng": -118.24, "speed": 65, "street": "US-101"}}]}
        (record,) = parse_flat_records(payload, source="us")
        assert math.isclose(record.speed_limit_kph, 65 * 1.60934)
        assert record.address == "US-101"

    def test_explicit_unit_override(self) -> None:
        payload = [{"lat": 1.0, "lon": 2.0, "speed_limit": 80}]
        (record,) = parse_flat_records(payload, source="eu", unit=SpeedUnit.KPH)
        assert record.speed_limit_kph == 80
        assert record.speed_limit_display == "80 km/h"

    def test_missing_coordinates_skipped(self) -> None:
        payload = [{"speed_limit": 30, "address": "nowhere"}, {"lat": 1.0, "lon": 2.0, "speed_limit": 30}, 42]
        records = parse_flat_records(payload, source="us")
        assert len(records) == 1

    def test_oversized_numbers_skip_only_their_record(self) -> None:
        payload = [
            {"lat": 1.0, "lon": 2.0, "speed_limit": 10**400, "address": "huge limit"},
            {"lat": 10**400, "lon": 2.0, "speed_limit": 30, "address": "huge latitude"},
            {"lat": 1.0, "lon": 2.0, "speed_limit": 1e308, "address": "overflows in km/h"},
            {"lat": 1.5, "lon": 2.0, "speed_limit": 30, "address": "fine"},
        ]

        records = parse_flat_records(payload, source="us")

        assert [r.address for r in records] == ["fine"]

    def test_no_record_list(self) -> None:
        with pytest.raises(DataLoadError):
            parse_flat_records({"rows": []}, source="us")
