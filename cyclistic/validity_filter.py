import logging
import os
from datetime import datetime, timezone

import pandas as pd

import cyclistic.data_contract as dc

logger = logging.getLogger(__name__)


def summarize_ride_length(ride_length: pd.Series) -> dict:
    """min/median/mean/max of the non-null durations; empty when there are none."""
    values = ride_length.dropna()
    if values.empty:
        return {}
    return {
        "min": float(values.min()),
        "median": float(values.median()),
        "mean": float(values.mean()),
        "max": float(values.max()),
    }


class ValidityFilter:
    """
    Two-stage record filter:
    - Stage 1 drops rows missing any required identity/station field
    - Stage 2 keeps rows with RIDE_LENGTH_MIN < ride_length <= RIDE_LENGTH_MAX
    - Counts (never guesses about) rider types outside casual/member
    - Writes a sample of dropped rows to a writable artifact dir, if given
    - Attaches stats on df.attrs for main.py to log
    """

    def __init__(
        self,
        min_ride_length: float = dc.RIDE_LENGTH_MIN,
        max_ride_length: float = dc.RIDE_LENGTH_MAX,
        drop_unmapped_rider_types: bool = False,
        artifact_dir: str | None = None,
    ):
        self.min_ride_length = min_ride_length
        self.max_ride_length = max_ride_length
        self.drop_unmapped_rider_types = drop_unmapped_rider_types
        self.artifact_dir = artifact_dir

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        initial_count = len(df)
        logger.info(f"Filtering {initial_count} rows...")

        # 1) Required fields
        missing_masks = {col: df[col].isna() for col in dc.REQUIRED_NON_NULL_COLUMNS}
        mask_missing = pd.Series(False, index=df.index)
        for mask in missing_masks.values():
            mask_missing |= mask

        df_present = df[~mask_missing]
        after_null_drop = len(df_present)
        logger.info(
            f"Dropped {initial_count - after_null_drop} rows missing required fields "
            f"({initial_count} -> {after_null_drop})"
        )

        # 2) Ride length range
        ride_length = df_present["ride_length"]
        mask_no_length = ride_length.isna()
        mask_non_positive = ride_length <= self.min_ride_length
        mask_over_max = ride_length > self.max_ride_length
        mask_in_range = (ride_length > self.min_ride_length) & (ride_length <= self.max_ride_length)

        df_clean = df_present[mask_in_range]
        after_range_drop = len(df_clean)
        summary_before = summarize_ride_length(ride_length)
        summary_after = summarize_ride_length(df_clean["ride_length"])
        logger.info(
            f"Dropped {after_null_drop - after_range_drop} rows outside "
            f"({self.min_ride_length}, {self.max_ride_length}] minutes "
            f"({after_null_drop} -> {after_range_drop})"
        )
        logger.info(f"ride_length before range filter: {summary_before}")
        logger.info(f"ride_length after range filter: {summary_after}")

        # 3) Rider types outside the two known values
        mask_unmapped = ~df_clean["member_casual"].isin(dc.RIDER_TYPES)
        unmapped_count = int(mask_unmapped.sum())
        if unmapped_count:
            logger.warning(
                f"{unmapped_count} cleaned rows carry rider types outside {dc.RIDER_TYPES}: "
                f"{df_clean.loc[mask_unmapped, 'member_casual'].value_counts(dropna=False).to_dict()}"
            )
        dropped_unmapped = 0
        if self.drop_unmapped_rider_types and unmapped_count:
            df_clean = df_clean[~mask_unmapped]
            dropped_unmapped = unmapped_count
            logger.info(f"Dropped {dropped_unmapped} rows with unmapped rider types")

        df_clean = df_clean.copy()

        # 4) Stats
        clean_rows = len(df_clean)
        dropped_rows = initial_count - clean_rows
        cleaning_ratio = (dropped_rows / initial_count) if initial_count > 0 else 0.0

        stats = {
            "initial_rows": initial_count,
            "after_null_drop_rows": after_null_drop,
            "after_range_drop_rows": after_range_drop,
            "clean_rows": clean_rows,
            "dropped_rows": dropped_rows,
            "cleaning_ratio": cleaning_ratio,
        }
        for col, mask in missing_masks.items():
            stats[f"missing_{col}"] = int(mask.sum())
        stats["violation_missing_ride_length"] = int(mask_no_length.sum())
        stats["violation_non_positive"] = int(mask_non_positive.sum())
        stats["violation_over_max"] = int(mask_over_max.sum())
        stats["unmapped_rider_types"] = unmapped_count
        stats["dropped_unmapped_rider_types"] = dropped_unmapped
        for name, value in summary_before.items():
            stats[f"ride_length_{name}_before_range"] = value
        for name, value in summary_after.items():
            stats[f"ride_length_{name}_after_range"] = value

        logger.info(f"Cleaned data stats: {stats}")

        # 5) Save dropped sample for audit
        dropped_sample_path = None
        if dropped_rows > 0 and self.artifact_dir:
            dropped_sample_path = self._write_dropped_sample(
                df, mask_missing, mask_no_length | mask_non_positive, mask_over_max, df_clean.index
            )

        df_clean.attrs["stats"] = stats
        df_clean.attrs["dropped_sample_path"] = dropped_sample_path

        return df_clean

    def _write_dropped_sample(
        self,
        df: pd.DataFrame,
        mask_missing: pd.Series,
        mask_bad_length: pd.Series,
        mask_over_max: pd.Series,
        kept_index: pd.Index,
    ) -> str | None:
        reasons = pd.Series("unmapped_rider_type", index=df.index)
        reasons[mask_over_max.reindex(df.index, fill_value=False)] = "over_max_ride_length"
        reasons[mask_bad_length.reindex(df.index, fill_value=False)] = "invalid_ride_length"
        reasons[mask_missing] = "missing_required_field"

        dropped = df.loc[~df.index.isin(kept_index)].copy()
        dropped["drop_reason"] = reasons.loc[dropped.index]

        try:
            os.makedirs(self.artifact_dir, exist_ok=True)
            ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
            path = os.path.join(self.artifact_dir, f"dropped_trips_sample_{ts}.csv")
            dropped.head(dc.DROPPED_SAMPLE_SIZE).to_csv(path, index=False)
            logger.info(f"Saved dropped rows sample to: {path}")
            return path
        except OSError as e:
            # The sample is an audit aid; its absence must not fail the run.
            logger.warning(f"Could not write dropped sample CSV: {e}")
            return None
