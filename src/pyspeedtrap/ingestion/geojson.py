"""GeoJSON trap dataset parser.

The dataset is a FeatureCollection of Point features published with
localized (Traditional Chinese) property names::

    {
      "type": "Feature",
      "geometry": {"type": "Point", "coordinates": [121.5168, 25.0478]},
      "properties": {"name": "50", "設置地址": "中山北路一段", "拍攝方向": "南向北"}
    }

``name`` carries the limit in km/h. ``拍攝方向`` (camera direction) is
optional.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from pyspeedtrap.exceptions import DataLoadError, MalformedRecordError
from pyspeedtrap.ingestion.records import build_trap_record, collect_records
from pyspeedtrap.models.trap import SpeedUnit, TrapRecord


class _Geometry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    # Checked per component by build_trap_record.
    coordinates: list[Any] = Field(default_factory=list)


class _Properties(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    speed_limit: Any = Field(default=None, validation_alias=AliasChoices("name", "限速", "speed_limit"))
    address: Any = Field(default=None, validation_alias=AliasChoices("設置地址", "设置地址", "address"))
    direction: Any = Field(default=None, validation_alias=AliasChoices("拍攝方向", "拍摄方向", "direction"))


class _Feature(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    geometry: _Geometry
    properties: _Properties = Field(default_factory=_Properties)


def _feature_to_record(item: Any, *, source: str, unit: SpeedUnit) -> TrapRecord:
    if not isinstance(item, dict):
        raise MalformedRecordError("feature is not an object", dataset=source)
    feature = _Feature.model_validate(item)
    coordinates = feature.geometry.coordinates
    if len(coordinates) < 2:
        raise MalformedRecordError(f"expected [lon, lat], got {coordinates!r}", dataset=source)
    props = feature.properties
    return build_trap_record(
        latitude=coordinates[1],
        longitude=coordinates[0],
        limit=props.speed_limit,
        address=props.address,
        direction=props.direction,
        source=source,
        unit=unit,
        raw=item,
    )


def parse_feature_collection(
    payload: Any,
    *,
    source: str,
    unit: SpeedUnit = SpeedUnit.KPH,
) -> list[TrapRecord]:
    """Parse a GeoJSON FeatureCollection into trap records.

    Raises
    ------
    DataLoadError
        If *payload* is not a FeatureCollection-shaped object. Malformed
        individual features are skipped.
    """
    if not isinstance(payload, dict):
        raise DataLoadError("GeoJSON payload is not an object", dataset=source)
    features = payload.get("features")
    if not isinstance(features, list):
        raise DataLoadError("GeoJSON payload has no 'features' list", dataset=source)

    return collect_records(
        features,
        lambda item: _feature_to_record(item, source=source, unit=unit),
        source=source,
    )
