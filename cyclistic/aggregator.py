import logging

import pandas as pd

from cyclistic.feature_engineering import derive_hour_of_day

logger = logging.getLogger(__name__)

RIDER_TYPE = "member_casual"

BY_RIDER_TYPE = "by_rider_type"
BY_RIDER_TYPE_AND_DAY = "by_rider_type_and_day"
BY_RIDER_TYPE_AND_HOUR = "by_rider_type_and_hour"


class Aggregator:
    """
    Descriptive statistics over the cleaned trip frame.

    Groups are sorted by key (day_of_week in weekday order), only observed
    key combinations are emitted, and null keys form their own group, so the
    number_of_rides column of every table sums to the input row count.
    """

    def _grouped(self, df: pd.DataFrame, keys: list[str]):
        return df.groupby(keys, sort=True, observed=True, dropna=False)["ride_length"]

    def by_rider_type(self, df: pd.DataFrame) -> pd.DataFrame:
        return (
            self._grouped(df, [RIDER_TYPE])
            .agg(
                number_of_rides="size",
                mean_ride_length_mins="mean",
                median_ride_length_mins="median",
            )
            .reset_index()
        )

    def by_rider_type_and_day(self, df: pd.DataFrame) -> pd.DataFrame:
        return (
            self._grouped(df, [RIDER_TYPE, "day_of_week"])
            .agg(number_of_rides="size", mean_ride_length_mins="mean")
            .reset_index()
        )

    def by_rider_type_and_hour(self, df: pd.DataFrame) -> pd.DataFrame:
        if "hour_of_day" not in df.columns:
            logger.info("hour_of_day missing from input; deriving from started_at")
            df = df.assign(hour_of_day=derive_hour_of_day(df["started_at"]))
        return (
            self._grouped(df, [RIDER_TYPE, "hour_of_day"])
            .agg(number_of_rides="size", mean_ride_length_mins="mean")
            .reset_index()
        )

    def summarize(self, df: pd.DataFrame) -> dict[str, pd.DataFrame]:
        if df.empty:
            logger.warning("Aggregating an empty dataset; summary tables will be empty")

        tables = {
            BY_RIDER_TYPE: self.by_rider_type(df),
            BY_RIDER_TYPE_AND_DAY: self.by_rider_type_and_day(df),
            BY_RIDER_TYPE_AND_HOUR: self.by_rider_type_and_hour(df),
        }
        for name, table in tables.items():
            logger.info(f"{name}: {len(table)} groups over {int(table['number_of_rides'].sum())} rides")
        return tables
