import pytest
import pandas as pd

import cyclistic.data_contract as dc
from cyclistic.errors import SchemaError, TimestampParseError
from cyclistic.pipeline import SourceSpec, TripPipeline
from cyclistic.snapshot import read_snapshot, write_snapshot


def _write(df, path):
    df.to_csv(path, index=False)
    return str(path)


def test_two_canonical_sources_filter_to_140_rows(canonical_raw_factory, tmp_path):
    first = canonical_raw_factory(100, id_prefix='A')
    second = canonical_raw_factory(50, start='2020-03-01 06:00:00', id_prefix='B')

    # 10 invalid rows in total across both sources
    first.loc[0:3, 'end_station_name'] = None
    first.loc[4:5, 'ended_at'] = first.loc[4:5, 'started_at']
    second.loc[0:1, 'ended_at'] = '2020-03-05 06:00:00'
    second.loc[2:3, 'start_station_id'] = None

    pipeline = TripPipeline([
        SourceSpec(_write(first, tmp_path / 'q1.csv'), 'canonical'),
        SourceSpec(_write(second, tmp_path / 'q2.csv'), 'canonical'),
    ])
    clean = pipeline.process()

    assert len(clean) == 140
    stats = clean.attrs['stats']
    assert stats['merged_rows'] == 150
    assert stats['source_0_rows'] == 100
    assert stats['source_1_rows'] == 50
    assert stats['after_null_drop_rows'] == 144
    assert stats['violation_non_positive'] == 2
    assert stats['violation_over_max'] == 2


def test_legacy_and_canonical_sources_end_to_end(legacy_raw, canonical_raw, tmp_path):
    pipeline = TripPipeline([
        SourceSpec(_write(legacy_raw, tmp_path / 'Divvy_Trips_2019_Q1.csv'), 'legacy'),
        SourceSpec(_write(canonical_raw, tmp_path / 'Divvy_Trips_2020_Q1.csv')),
    ])

    clean = pipeline.process()
    snapshot_path = write_snapshot(clean, str(tmp_path / 'trips_cleaned.parquet'))
    tables = pipeline.analyze(read_snapshot(snapshot_path))

    assert list(clean.columns) == dc.SNAPSHOT_COLUMNS
    assert len(clean) == 2 + len(canonical_raw)
    legacy_row = clean.iloc[0]
    assert legacy_row['ride_id'] == '42'
    assert legacy_row['member_casual'] == 'member'
    assert legacy_row['ride_length'] == 15.0
    assert legacy_row['hour_of_day'] == 8

    for table in tables.values():
        assert table['number_of_rides'].sum() == len(clean)


def test_timestamp_failure_aborts_before_output(legacy_raw, canonical_raw, tmp_path):
    canonical_raw.loc[3, 'started_at'] = '06/01/2020 8am'
    pipeline = TripPipeline([
        SourceSpec(_write(legacy_raw, tmp_path / 'q1.csv'), 'legacy'),
        SourceSpec(_write(canonical_raw, tmp_path / 'q2.csv'), 'canonical'),
    ])

    with pytest.raises(TimestampParseError):
        pipeline.process()


def test_misdeclared_variant_is_schema_error(legacy_raw, canonical_raw, tmp_path):
    pipeline = TripPipeline([
        SourceSpec(_write(legacy_raw, tmp_path / 'q1.csv'), 'canonical'),
        SourceSpec(_write(canonical_raw, tmp_path / 'q2.csv'), 'canonical'),
    ])

    with pytest.raises(SchemaError):
        pipeline.process()


def test_dropped_sample_written_to_artifact_dir(legacy_raw, canonical_raw, tmp_path):
    artifact_dir = tmp_path / 'artifacts'
    pipeline = TripPipeline(
        [
            SourceSpec(_write(legacy_raw, tmp_path / 'q1.csv'), 'legacy'),
            SourceSpec(_write(canonical_raw, tmp_path / 'q2.csv'), 'canonical'),
        ],
        artifact_dir=str(artifact_dir),
    )

    clean = pipeline.process()

    sample = pd.read_csv(clean.attrs['dropped_sample_path'])
    assert sorted(sample['ride_id'].astype(str)) == ['44', '45']
