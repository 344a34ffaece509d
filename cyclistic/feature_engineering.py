import logging

import pandas as pd

import cyclistic.data_contract as dc

logger = logging.getLogger(__name__)

# pandas counts Monday as 0.
_WEEKDAY_BY_PANDAS_INDEX = {
    i: dc.WEEKDAY_LABELS[(i + 1) % 7] for i in range(7)
}


def derive_day_of_week(started_at: pd.Series) -> pd.Series:
    labels = started_at.dt.dayofweek.map(_WEEKDAY_BY_PANDAS_INDEX)
    return pd.Series(
        pd.Categorical(labels, categories=dc.WEEKDAY_LABELS, ordered=True),
        index=started_at.index,
        name="day_of_week",
    )


def derive_hour_of_day(started_at: pd.Series) -> pd.Series:
    return started_at.dt.hour.astype("Int64").rename("hour_of_day")


class FeatureEngineer:
    """Derives ride duration and calendar attributes from the raw timestamps."""

    def create_features(self, df: pd.DataFrame) -> pd.DataFrame:
        """Return a copy of df with ride_length, day_of_week and hour_of_day.

        ride_length is (ended_at - started_at) in minutes and is deliberately
        left unfiltered: zero and negative durations are the validity filter's
        concern.
        """
        logger.info(f"Engineering features for {len(df)} rows...")

        df = df.copy()
        duration = df["ended_at"] - df["started_at"]
        df["ride_length"] = (duration.dt.total_seconds() / 60.0).astype("float64")
        df["day_of_week"] = derive_day_of_week(df["started_at"])
        df["hour_of_day"] = derive_hour_of_day(df["started_at"])

        return df
