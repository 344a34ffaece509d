import logging
from typing import Iterable

import pandas as pd

import cyclistic.data_contract as dc
from cyclistic.errors import ConfigError, SchemaError, TimestampParseError

logger = logging.getLogger(__name__)


def detect_variant(columns: Iterable[str]) -> str:
    """Pick the source variant whose expected columns are all present."""
    present = set(columns)
    for variant in (dc.VARIANT_CANONICAL, dc.VARIANT_LEGACY):
        if set(dc.SOURCE_VARIANTS[variant]).issubset(present):
            return variant
    raise SchemaError(
        f"Schema Violation: columns {sorted(present)} match no known source variant "
        f"({', '.join(dc.SOURCE_VARIANTS)})"
    )


def coerce_identifier(values: pd.Series) -> pd.Series:
    """Render identifiers as strings, keeping integer ids free of a '.0' suffix."""
    if pd.api.types.is_float_dtype(values):
        # Integer ids read alongside nulls arrive as float64.
        non_null = values.dropna()
        if (non_null == non_null.round()).all():
            values = values.astype("Int64")
    return values.astype("string")


def parse_timestamps(values: pd.Series, column: str) -> pd.Series:
    if not pd.api.types.is_datetime64_any_dtype(values):
        # Exports crossing a DST change mix offsets (-06:00 / -05:00) in one
        # column; drop them textually so every row keeps its wall-clock time.
        values = values.astype("string").str.replace(dc.UTC_OFFSET_PATTERN, "", regex=True)

    try:
        parsed = pd.to_datetime(values, format=dc.TIMESTAMP_FORMAT)
    except (ValueError, TypeError) as e:
        raise TimestampParseError(
            f"Failed to parse timestamp column '{column}': {e}"
        ) from e

    # Keep wall-clock time, drop the offset.
    if parsed.dt.tz is not None:
        parsed = parsed.dt.tz_localize(None)
    return parsed.astype("datetime64[ns]")


class SchemaNormalizer:
    """
    Maps one raw source frame onto the canonical trip schema:
    - Renames columns via the variant's static lookup table
    - Translates legacy rider-type tokens (unknown tokens pass through)
    - Coerces identifiers to strings and timestamps to naive datetimes
    - Drops every column outside the mapping, including pre-computed
      ride_length/day_of_week, so derived values are computed exactly once
    """

    def __init__(self, variant: str = dc.VARIANT_AUTO):
        if variant != dc.VARIANT_AUTO and variant not in dc.SOURCE_VARIANTS:
            raise ConfigError(
                f"Unknown source variant '{variant}'. "
                f"Expected one of: {', '.join([*dc.SOURCE_VARIANTS, dc.VARIANT_AUTO])}"
            )
        self.variant = variant

    def normalize(self, df: pd.DataFrame, source_name: str = "source") -> pd.DataFrame:
        variant = self.variant
        if variant == dc.VARIANT_AUTO:
            variant = detect_variant(df.columns)
            logger.info(f"Detected '{variant}' schema for {source_name}")

        column_map = dc.SOURCE_VARIANTS[variant]

        # 1) Critical schema check (fail fast)
        missing_cols = [c for c in column_map if c not in df.columns]
        if missing_cols:
            logger.error(f"{source_name}: missing {variant} columns {missing_cols}")
            raise SchemaError(
                f"Schema Violation: {source_name} ({variant}) missing columns {missing_cols}"
            )

        extra_cols = [c for c in df.columns if c not in column_map]
        if extra_cols:
            stale = [c for c in extra_cols if c in dc.PRECOMPUTED_COLUMNS]
            if stale:
                logger.info(f"{source_name}: discarding pre-computed columns {stale}")
            logger.debug(f"{source_name}: dropping non-canonical columns {extra_cols}")

        # 2) Rename to canonical names and order
        out = df.loc[:, list(column_map)].rename(columns=column_map)
        out = out[dc.CANONICAL_COLUMNS].copy()

        # 3) Type enforcement
        for col in dc.IDENTIFIER_COLUMNS:
            out[col] = coerce_identifier(out[col])
        for col in dc.TIMESTAMP_COLUMNS:
            out[col] = parse_timestamps(out[col], col)
        for col in ("start_station_name", "end_station_name"):
            out[col] = out[col].astype("string")

        # 4) Categorical value mapping
        rider_type = out["member_casual"].astype("string")
        if variant == dc.VARIANT_LEGACY:
            rider_type = rider_type.replace(dc.LEGACY_RIDER_TYPE_MAP)
        out["member_casual"] = rider_type

        unmapped = rider_type[~rider_type.isin(dc.RIDER_TYPES)]
        if len(unmapped) > 0:
            counts = unmapped.value_counts(dropna=False).to_dict()
            logger.warning(
                f"{source_name}: {len(unmapped)} rows with unmapped rider types {counts} "
                "passed through unchanged"
            )

        logger.info(f"Normalized {len(out)} rows from {source_name} ({variant})")
        return out
