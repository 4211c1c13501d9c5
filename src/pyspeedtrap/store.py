"""Trap record store.

Loads every configured dataset once, normalizes them into one
de-duplicated tuple of :class:`TrapRecord` and caches it for the lifetime
of the store. The cached tuple is immutable and may be shared between
concurrent scans without locking; only the one-time load is guarded.
"""

from __future__ import annotations

import asyncio
import dataclasses
import importlib.resources
import json
import logging
import threading
from collections.abc import Callable, Sequence
from enum import StrEnum
from pathlib import Path
from typing import Any

from pyspeedtrap._constants import FLAT_DATASET, GEOJSON_DATASET
from pyspeedtrap.config import DetectorConfig
from pyspeedtrap.exceptions import DataLoadError
from pyspeedtrap.ingestion.flat import parse_flat_records
from pyspeedtrap.ingestion.geojson import parse_feature_collection
from pyspeedtrap.models.trap import SpeedUnit, TrapRecord

_logger = logging.getLogger(__name__)


class DatasetSchema(StrEnum):
    GEOJSON = "geojson"
    FLAT = "flat"


_PARSERS: dict[DatasetSchema, Callable[..., list[TrapRecord]]] = {
    DatasetSchema.GEOJSON: parse_feature_collection,
    DatasetSchema.FLAT: parse_flat_records,
}

_DEFAULT_UNITS: dict[DatasetSchema, SpeedUnit] = {
    DatasetSchema.GEOJSON: SpeedUnit.KPH,
    DatasetSchema.FLAT: SpeedUnit.MPH,
}


@dataclasses.dataclass(frozen=True)
class DatasetSource:
    """A trap dataset and how to parse it.

    Parameters
    ----------
    name : str
        Dataset name. Used as the record ``source`` and, when *path* is
        ``None``, as the file name inside the bundled ``pyspeedtrap/data``.
    schema : DatasetSchema
        Which parser to use.
    path : Path or None
        Explicit file location. ``None`` reads the bundled copy.
    unit : SpeedUnit or None
        Unit of the published limits. Defaults to km/h for GeoJSON and
        mph for flat datasets.
    """

    name: str
    schema: DatasetSchema
    path: Path | None = None
    unit: SpeedUnit | None = None

    @property
    def effective_unit(self) -> SpeedUnit:
        return self.unit or _DEFAULT_UNITS[self.schema]

    def read_bytes(self) -> bytes:
        if self.path is not None:
            _logger.debug("Loading trap dataset %s from %s", self.name, self.path)
            try:
                return self.path.read_bytes()
            except OSError as exc:
                raise DataLoadError(f"Dataset file not readable: {self.path} ({exc})", dataset=self.name) from exc

        _logger.debug("Loading trap dataset %s from package data", self.name)
        try:
            ref = importlib.resources.files("pyspeedtrap").joinpath(f"data/{self.name}")
            return ref.read_bytes()
        except OSError as exc:
            raise DataLoadError(f"{self.name} not found in package data", dataset=self.name) from exc


DEFAULT_SOURCES: tuple[DatasetSource, ...] = (
    DatasetSource(GEOJSON_DATASET, DatasetSchema.GEOJSON),
    DatasetSource(FLAT_DATASET, DatasetSchema.FLAT),
)


def load_dataset(source: DatasetSource) -> list[TrapRecord]:
    """Read and parse one dataset.

    Raises
    ------
    DataLoadError
        If the file is missing, not JSON, or not in the expected schema.
    """
    raw = source.read_bytes()
    try:
        payload: Any = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        # ValueError covers JSONDecodeError, UnicodeDecodeError and over-long integer literals.
        raise DataLoadError(f"Dataset is not valid JSON: {exc}", dataset=source.name) from exc
    parser = _PARSERS[source.schema]
    return parser(payload, source=source.name, unit=source.effective_unit)


class TrapStore:
    """Load-once cache of trap records from one or more datasets."""

    def __init__(self, sources: Sequence[DatasetSource] | None = None) -> None:
        self._sources: tuple[DatasetSource, ...] = tuple(sources) if sources is not None else DEFAULT_SOURCES
        self._records: tuple[TrapRecord, ...] | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: DetectorConfig) -> TrapStore:
        """Bundled datasets, with any file overrides from *config* applied."""
        return cls(
            (
                DatasetSource(GEOJSON_DATASET, DatasetSchema.GEOJSON, path=config.geojson_path),
                DatasetSource(FLAT_DATASET, DatasetSchema.FLAT, path=config.flat_path),
            )
        )

    @property
    def sources(self) -> tuple[DatasetSource, ...]:
        return self._sources

    @property
    def is_loaded(self) -> bool:
        return self._records is not None

    def load_all(self) -> tuple[TrapRecord, ...]:
        """Return every trap record, loading the datasets on first use.

        A dataset that cannot be loaded contributes no records; this never
        raises.
        """
        records = self._records
        if records is not None:
            return records
        with self._lock:
            if self._records is None:
                self._records = self._load_sources()
            return self._records

    async def async_load_all(self) -> tuple[TrapRecord, ...]:
        """:meth:`load_all` run in the default executor."""
        if self._records is not None:
            return self._records
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.load_all)

    def reload(self) -> tuple[TrapRecord, ...]:
        """Drop the cache and read every dataset again."""
        with self._lock:
            self._records = self._load_sources()
            return self._records

    def _load_sources(self) -> tuple[TrapRecord, ...]:
        seen: set[tuple[float, float, str, str]] = set()
        merged: list[TrapRecord] = []
        for source in self._sources:
            try:
                records = load_dataset(source)
            except DataLoadError as exc:
                _logger.warning("Trap dataset %s unavailable: %s", source.name, exc)
                continue

            duplicates = 0
            for record in records:
                key = record.dedup_key
                if key in seen:
                    duplicates += 1
                    continue
                seen.add(key)
                merged.append(record)
            _logger.debug(
                "Loaded %d trap records from %s (%d duplicates dropped)",
                len(records) - duplicates,
                source.name,
                duplicates,
            )
        return tuple(merged)
