"""
Trip pipeline orchestration.

Coordinates the flow: load -> normalize -> merge -> derive features -> filter,
then aggregate the cleaned frame on demand. Each stage returns a new frame;
nothing is written here, so a fatal error never leaves partial output.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import pandas as pd

import cyclistic.data_contract as dc
from cyclistic.aggregator import Aggregator
from cyclistic.data_loader import DataLoader
from cyclistic.dataset_merger import merge_datasets
from cyclistic.feature_engineering import FeatureEngineer
from cyclistic.schema_normalizer import SchemaNormalizer
from cyclistic.validity_filter import ValidityFilter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceSpec:
    """One raw input file and the schema variant it is exported in."""

    path: str
    variant: str = dc.VARIANT_AUTO


class TripPipeline:
    def __init__(
        self,
        sources: Sequence[SourceSpec],
        drop_unmapped_rider_types: bool = False,
        artifact_dir: str | None = None,
    ):
        self.sources = list(sources)
        self.engineer = FeatureEngineer()
        self.validity_filter = ValidityFilter(
            drop_unmapped_rider_types=drop_unmapped_rider_types,
            artifact_dir=artifact_dir,
        )
        self.aggregator = Aggregator()

    def normalize_sources(self) -> list[pd.DataFrame]:
        frames = []
        for source in self.sources:
            raw = DataLoader(source.path).load_data()
            normalizer = SchemaNormalizer(source.variant)
            frames.append(normalizer.normalize(raw, source_name=source.path))
        return frames

    def process(self) -> pd.DataFrame:
        """Run every processing stage and return the cleaned frame.

        Filter stats are attached to the result's ``attrs["stats"]``.
        """
        logger.info(f"Processing {len(self.sources)} sources...")

        frames = self.normalize_sources()
        merged = merge_datasets(frames)
        featured = self.engineer.create_features(merged)
        cleaned = self.validity_filter.apply(featured)

        stats = cleaned.attrs.get("stats", {})
        stats["merged_rows"] = len(merged)
        for position, frame in enumerate(frames):
            stats[f"source_{position}_rows"] = len(frame)

        logger.info(f"Processing complete: {len(merged)} merged -> {len(cleaned)} cleaned rows")
        return cleaned

    def analyze(self, df: pd.DataFrame) -> dict[str, pd.DataFrame]:
        return self.aggregator.summarize(df)
