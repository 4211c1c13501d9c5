"""Flat attribute-record camera dataset parser.

Records carry English field names and a numeric limit in mph. Three
container shapes are accepted::

    [{"latitude": 40.71, "longitude": -74.00, "speed_limit": 25, ...}, ...]
    {"records": [...]}
    {"features": [{"attributes": {...}}, ...]}      # ArcGIS export
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from pyspeedtrap.exceptions import DataLoadError, MalformedRecordError
from pyspeedtrap.ingestion.records import build_trap_record, collect_records
from pyspeedtrap.models.trap import SpeedUnit, TrapRecord


class _FlatRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    latitude: Any = Field(default=None, validation_alias=AliasChoices("latitude", "lat", "Latitude", "LATITUDE", "y"))
    longitude: Any = Field(
        default=None,
        validation_alias=AliasChoices("longitude", "lon", "lng", "Longitude", "LONGITUDE", "x"),
    )
    speed_limit: Any = Field(
        default=None,
        validation_alias=AliasChoices("speed_limit", "speed", "speedLimit", "SpeedLimit", "SPEED_LIMIT", "posted_speed"),
    )
    address: Any = Field(
        default=None,
        validation_alias=AliasChoices("address", "location", "street", "Address", "Location", "LOCATION"),
    )
    direction: Any = Field(default=None, validation_alias=AliasChoices("direction", "Direction", "DIRECTION"))


def _unwrap_records(payload: Any, source: str) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        records = payload.get("records")
        if isinstance(records, list):
            return records
        features = payload.get("features")
        if isinstance(features, list):
            return [f.get("attributes") if isinstance(f, dict) else f for f in features]
    raise DataLoadError("flat dataset has no record list", dataset=source)


def _flat_to_record(item: Any, *, source: str, unit: SpeedUnit) -> TrapRecord:
    if not isinstance(item, dict):
        raise MalformedRecordError("record is not an object", dataset=source)
    record = _FlatRecord.model_validate(item)
    return build_trap_record(
        latitude=record.latitude,
        longitude=record.longitude,
        limit=record.speed_limit,
        address=record.address,
        direction=record.direction,
        source=source,
        unit=unit,
        raw=item,
    )


def parse_flat_records(
    payload: Any,
    *,
    source: str,
    unit: SpeedUnit = SpeedUnit.MPH,
) -> list[TrapRecord]:
    """Parse a flat camera dataset into trap records.

    Raises
    ------
    DataLoadError
        If no record list can be found in *payload*. Malformed individual
        records are skipped.
    """
    items = _unwrap_records(payload, source)
    return collect_records(
        items,
        lambda item: _flat_to_record(item, source=source, unit=unit),
        source=source,
    )
