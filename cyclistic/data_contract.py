"""
cyclistic/data_contract.py

Single Source of Truth for the trip schema and data quality rules.
"""

# Versioning allows us to track which rules were active
# for a specific pipeline run.
CONTRACT_VERSION = "1.0.0"


# -------------------------------------------------------------------
# Canonical Schema
# -------------------------------------------------------------------
# Column order here is the column order of every normalized frame.
CANONICAL_DTYPES = {
    "ride_id": "string",
    "started_at": "datetime64[ns]",
    "ended_at": "datetime64[ns]",
    "start_station_id": "string",
    "end_station_id": "string",
    "start_station_name": "string",
    "end_station_name": "string",
    "member_casual": "string",
}
CANONICAL_COLUMNS = list(CANONICAL_DTYPES)

TIMESTAMP_COLUMNS = ["started_at", "ended_at"]
IDENTIFIER_COLUMNS = ["ride_id", "start_station_id", "end_station_id"]

# Derived by the feature engine, never trusted from a source.
DERIVED_COLUMNS = ["ride_length", "day_of_week", "hour_of_day"]
SNAPSHOT_COLUMNS = CANONICAL_COLUMNS + DERIVED_COLUMNS

# ISO-8601 covers both "2019-01-01 08:00:00" and minute-resolution stamps.
TIMESTAMP_FORMAT = "ISO8601"

# Trailing "Z" / "+hh:mm" / "-hhmm" after a time; pipeline times are naive.
UTC_OFFSET_PATTERN = r"(?<=\d)(?:Z|[+-]\d{2}:?\d{2})$"


# -------------------------------------------------------------------
# Source Variants
# -------------------------------------------------------------------
# Divvy 2019 and earlier exports.
LEGACY_COLUMN_MAP = {
    "trip_id": "ride_id",
    "start_time": "started_at",
    "end_time": "ended_at",
    "from_station_id": "start_station_id",
    "to_station_id": "end_station_id",
    "from_station_name": "start_station_name",
    "to_station_name": "end_station_name",
    "usertype": "member_casual",
}

CANONICAL_COLUMN_MAP = {col: col for col in CANONICAL_COLUMNS}

VARIANT_LEGACY = "legacy"
VARIANT_CANONICAL = "canonical"
VARIANT_AUTO = "auto"

SOURCE_VARIANTS = {
    VARIANT_LEGACY: LEGACY_COLUMN_MAP,
    VARIANT_CANONICAL: CANONICAL_COLUMN_MAP,
}

# Some canonical exports ship their own pre-computed figures.
PRECOMPUTED_COLUMNS = ["ride_length", "day_of_week"]


# -------------------------------------------------------------------
# Categorical Rules
# -------------------------------------------------------------------
RIDER_TYPE_CASUAL = "casual"
RIDER_TYPE_MEMBER = "member"
RIDER_TYPES = [RIDER_TYPE_CASUAL, RIDER_TYPE_MEMBER]

# Legacy "usertype" tokens. Anything else passes through unchanged.
LEGACY_RIDER_TYPE_MAP = {
    "Customer": RIDER_TYPE_CASUAL,
    "Subscriber": RIDER_TYPE_MEMBER,
}

# Sunday first, matching the weekly reporting layout.
WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


# -------------------------------------------------------------------
# Domain Rules
# -------------------------------------------------------------------
# A ride must survive both checks below.
REQUIRED_NON_NULL_COLUMNS = [
    "ride_id",
    "start_station_name",
    "end_station_name",
    "start_station_id",
    "end_station_id",
]

# Ride Length (minutes): exclusive lower bound, inclusive upper bound.
# Anything over 24 hours is a dock/data-entry error, not a ride.
RIDE_LENGTH_MIN = 0.0
RIDE_LENGTH_MAX = 1440.0

# Rows written to the dropped-rows audit sample.
DROPPED_SAMPLE_SIZE = 100
