"""Ingestion layer.

This package contains one parse-and-normalize adapter per trap dataset
schema. Every adapter emits the unified :class:`pyspeedtrap.models.TrapRecord`.
"""

from pyspeedtrap.ingestion.flat import parse_flat_records
from pyspeedtrap.ingestion.geojson import parse_feature_collection

__all__ = ["parse_feature_collection", "parse_flat_records"]
