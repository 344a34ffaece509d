import logging
from typing import Sequence

import pandas as pd

import cyclistic.data_contract as dc
from cyclistic.errors import SchemaError

logger = logging.getLogger(__name__)


def empty_canonical_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {col: pd.Series(dtype=dtype) for col, dtype in dc.CANONICAL_DTYPES.items()}
    )


def merge_datasets(frames: Sequence[pd.DataFrame]) -> pd.DataFrame:
    """Concatenate normalized frames in the given order.

    Every row is kept; overlapping ride_ids across sources are not reconciled.

    Raises:
        SchemaError: if any frame's columns differ from the canonical set.
    """
    expected = set(dc.CANONICAL_COLUMNS)
    for position, frame in enumerate(frames):
        present = set(frame.columns)
        if present != expected:
            missing = sorted(expected - present)
            extra = sorted(present - expected)
            logger.error(f"Merge input #{position} schema mismatch: missing={missing} extra={extra}")
            raise SchemaError(
                f"Schema Violation: merge input #{position} has missing columns {missing} "
                f"and extra columns {extra}"
            )

    if not frames:
        logger.warning("No datasets to merge; returning empty frame")
        return empty_canonical_frame()

    merged = pd.concat(
        [frame[dc.CANONICAL_COLUMNS] for frame in frames],
        ignore_index=True,
    )

    sizes = [len(frame) for frame in frames]
    logger.info(f"Merged {len(frames)} datasets {sizes} into {len(merged)} rows")
    return merged
