import logging
from pathlib import Path

import pandas as pd

from cyclistic.errors import ConfigError

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".csv", ".parquet")


class DataLoader:
    """
    Raw source reader:
    - Reads one quarterly export (CSV with header row, or parquet)
    - Fails fast on missing/unreadable files
    - Leaves column names and encodings untouched (normalization is next)
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def load_data(self) -> pd.DataFrame:
        logger.info(f"Loading data from {self.path}...")

        suffix = self.path.suffix.lower()
        if suffix not in SUPPORTED_SUFFIXES:
            raise ConfigError(
                f"Unsupported source file type '{suffix}' for {self.path}. "
                f"Supported: {', '.join(SUPPORTED_SUFFIXES)}"
            )

        try:
            if suffix == ".parquet":
                df = pd.read_parquet(self.path)
            else:
                df = pd.read_csv(self.path)
        except Exception as e:
            logger.error(f"Failed to read source file {self.path}: {e}")
            raise

        logger.info(f"Read {len(df)} rows, {len(df.columns)} columns from {self.path.name}")
        return df
