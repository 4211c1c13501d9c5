"""Internal constants shared across the library."""

# ------------------------------------------------------------------
# Units
# ------------------------------------------------------------------

MPH_TO_KPH = 1.60934
MPS_TO_KPH = 3.6
EARTH_RADIUS_M = 6_371_000.0

# ------------------------------------------------------------------
# Detector defaults
# ------------------------------------------------------------------

DEFAULT_ALERT_DISTANCE_M = 500.0
DEFAULT_SEARCH_RADIUS_M = 2000.0
DEFAULT_RESCAN_DISTANCE_M = 100.0
DEFAULT_NEAREST_COUNT = 10

# ------------------------------------------------------------------
# Bundled datasets (package data under ``pyspeedtrap/data``)
# ------------------------------------------------------------------

GEOJSON_DATASET = "speedtraps.geojson"
FLAT_DATASET = "speed_cameras.json"

# Street names the location layer reports before reverse geocoding resolves.
# Compared case-insensitively after stripping.
STREET_NAME_PLACEHOLDERS: frozenset[str] = frozenset(
    {
        "finding your location...",
        "unknown street",
        "location unavailable",
        "location permission needed",
    }
)

# Positions are rounded to this many decimals when de-duplicating records
# across datasets (~0.1 m).
DEDUP_COORDINATE_PRECISION = 6
