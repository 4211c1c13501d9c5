"""Record building helpers shared by the dataset parsers.

Both schemas end up here:

- read the limit and convert it to km/h
- validate the coordinates into a :class:`GeoPoint`
- build the unified :class:`TrapRecord`

and :func:`collect_records` runs a per-record converter over a dataset,
skipping malformed records instead of failing the whole dataset.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import ValidationError

from pyspeedtrap.exceptions import MalformedRecordError
from pyspeedtrap.ingestion.normalize import display_speed_limit, parse_speed_limit, safe_float, safe_str, to_kph
from pyspeedtrap.models._base import GeoPoint
from pyspeedtrap.models.trap import SpeedUnit, TrapRecord

_logger = logging.getLogger(__name__)


def build_trap_record(
    *,
    latitude: Any,
    longitude: Any,
    limit: Any,
    address: Any,
    direction: Any,
    source: str,
    unit: SpeedUnit,
    raw: dict[str, Any],
) -> TrapRecord:
    """Build a :class:`TrapRecord` from loosely typed field values.

    Raises
    ------
    MalformedRecordError
        If the coordinates are missing or out of range, or the limit is
        present but not a non-negative number.
    """
    lat = safe_float(latitude)
    lon = safe_float(longitude)
    if lat is None or lon is None:
        raise MalformedRecordError("record has no usable coordinates", dataset=source)
    try:
        position = GeoPoint(latitude=lat, longitude=lon)
    except ValidationError as exc:
        raise MalformedRecordError(f"coordinates out of range: {lat}, {lon}", dataset=source) from exc

    limit_value = parse_speed_limit(limit)
    if limit_value is None:
        raise MalformedRecordError(f"unparseable speed limit: {limit!r}", dataset=source)
    limit_kph = to_kph(limit_value, unit)
    if not math.isfinite(limit_kph):
        raise MalformedRecordError(f"speed limit out of range: {limit_value!r}", dataset=source)

    return TrapRecord(
        position=position,
        speed_limit_kph=limit_kph,
        speed_limit_display=display_speed_limit(limit, limit_value, unit),
        address=safe_str(address) or "",
        direction=safe_str(direction) or "",
        source=source,
        raw=raw,
    )


def collect_records(
    items: Iterable[Any],
    convert: Callable[[Any], TrapRecord],
    *,
    source: str,
) -> list[TrapRecord]:
    """Convert every item, skipping (and logging) malformed ones."""
    records: list[TrapRecord] = []
    skipped = 0
    for index, item in enumerate(items):
        try:
            records.append(convert(item))
        except MalformedRecordError as exc:
            skipped += 1
            _logger.debug("Skipping record %d of %s: %s", index, source, exc)
        except ValidationError as exc:
            skipped += 1
            _logger.debug("Skipping record %d of %s: %s", index, source, exc.errors(include_url=False))
    if skipped:
        _logger.debug("Skipped %d malformed records in %s", skipped, source)
    return records
