import pytest
import pandas as pd
import numpy as np

from cyclistic.feature_engineering import FeatureEngineer
from cyclistic.schema_normalizer import SchemaNormalizer


@pytest.fixture
def legacy_raw():
    """Provides a raw DataFrame mimicking a Divvy 2019 Q1 export."""
    data = {
        'trip_id': [42, 43, 44, 45],
        'start_time': ['2019-01-01 08:00:00', '2019-01-05 17:30:00', '2019-01-02 23:10:00', '2019-01-03 09:00:00'],
        'end_time': ['2019-01-01 08:15:00', '2019-01-05 18:00:00', '2019-01-02 23:05:00', '2019-01-03 09:20:00'],
        'bikeid': [2167, 4386, 1524, 252],  # Not part of the canonical schema
        'tripduration': [900.0, 1800.0, -300.0, 1200.0],
        'from_station_id': [199, 44, 15, 123],
        'from_station_name': ['Wabash Ave & Grand Ave', 'State St & Randolph St', 'Racine Ave & 18th St', 'California Ave & Milwaukee Ave'],
        'to_station_id': [84, 624, 644, 176],
        'to_station_name': ['Milwaukee Ave & Grand Ave', 'Dearborn St & Van Buren St', 'Western Ave & Fillmore St', np.nan],
        'usertype': ['Subscriber', 'Customer', 'Subscriber', 'Subscriber'],
        'gender': ['Male', np.nan, 'Female', 'Male'],
        'birthyear': [1989.0, np.nan, 1994.0, 1993.0],
    }
    return pd.DataFrame(data)


@pytest.fixture
def canonical_raw_factory():
    """Builds raw Divvy 2020-style frames of n valid 10-minute rides."""

    def build(n, start='2020-01-06 08:00:00', id_prefix='A'):
        started = pd.date_range(start, periods=n, freq='37min')
        ended = started + pd.Timedelta(minutes=10)
        return pd.DataFrame({
            'ride_id': [f'{id_prefix}{i:05d}' for i in range(n)],
            'rideable_type': ['docked_bike'] * n,
            'started_at': started.strftime('%Y-%m-%d %H:%M:%S'),
            'ended_at': ended.strftime('%Y-%m-%d %H:%M:%S'),
            'start_station_name': ['Broadway & Belmont Ave'] * n,
            'start_station_id': [296] * n,
            'end_station_name': ['Sheffield Ave & Wellington Ave'] * n,
            'end_station_id': [115] * n,
            'start_lat': [41.9401] * n,
            'start_lng': [-87.6455] * n,
            'end_lat': [41.9363] * n,
            'end_lng': [-87.6527] * n,
            'member_casual': ['member', 'casual'] * (n // 2) + ['member'] * (n % 2),
            # Stale pre-computed figures that must not survive normalization
            'ride_length': ['99:99:99'] * n,
            'day_of_week': [9] * n,
        })

    return build


@pytest.fixture
def canonical_raw(canonical_raw_factory):
    return canonical_raw_factory(6)


@pytest.fixture
def normalized_legacy(legacy_raw):
    return SchemaNormalizer('legacy').normalize(legacy_raw)


@pytest.fixture
def trips_factory():
    """Builds feature-engineered canonical frames from (start, end, rider) tuples."""

    def build(rows):
        n = len(rows)
        df = pd.DataFrame({
            'ride_id': pd.array([f'R{i}' for i in range(n)], dtype='string'),
            'started_at': pd.to_datetime([r[0] for r in rows]),
            'ended_at': pd.to_datetime([r[1] for r in rows]),
            'start_station_id': pd.array(['1'] * n, dtype='string'),
            'end_station_id': pd.array(['2'] * n, dtype='string'),
            'start_station_name': pd.array(['Start St'] * n, dtype='string'),
            'end_station_name': pd.array(['End St'] * n, dtype='string'),
            'member_casual': pd.array([r[2] for r in rows], dtype='string'),
        })
        return FeatureEngineer().create_features(df)

    return build
