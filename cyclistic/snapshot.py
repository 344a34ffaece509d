"""Parquet snapshot of the cleaned trip dataset.

The snapshot is the only artifact handed from the processing stage to the
analysis stage, so it must round-trip dtypes exactly: float durations,
string identifiers, the ordered weekday category, nullable integer hours
and naive datetimes all survive via pyarrow's pandas metadata.
"""

import logging
import os
from pathlib import Path

import pandas as pd

import cyclistic.data_contract as dc
from cyclistic.errors import SchemaError

logger = logging.getLogger(__name__)


def write_snapshot(df: pd.DataFrame, path: str) -> str:
    """Write df to path atomically; a failed write leaves no partial file."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = target.with_name(f".{target.name}.tmp")

    logger.info(f"Saving cleaned data ({len(df)} rows) to {target}...")
    try:
        df.reset_index(drop=True).to_parquet(tmp_path, engine="pyarrow", index=False)
        os.replace(tmp_path, target)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.info("Snapshot saved successfully.")
    return str(target)


def read_snapshot(path: str) -> pd.DataFrame:
    logger.info(f"Loading cleaned snapshot from {path}...")
    df = pd.read_parquet(path, engine="pyarrow")

    missing_cols = [c for c in dc.SNAPSHOT_COLUMNS if c not in df.columns]
    # hour_of_day can be re-derived downstream; everything else cannot.
    missing_cols = [c for c in missing_cols if c != "hour_of_day"]
    if missing_cols:
        raise SchemaError(f"Schema Violation: snapshot {path} missing columns {missing_cols}")

    logger.info(f"Loaded {len(df)} rows")
    return df
