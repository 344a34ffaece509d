import logging
import pandas as pd
import great_expectations as gx
import great_expectations.expectations as gxe
from great_expectations.core.expectation_suite import ExpectationSuite
import cyclistic.data_contract as dc

logger = logging.getLogger(__name__)

class DataValidator:
    """Last gate before the cleaned snapshot is written."""

    def __init__(self, df: pd.DataFrame, enforce_rider_types: bool = False):
        self.df = df
        # Unmapped rider types are kept unless the run drops them.
        self.enforce_rider_types = enforce_rider_types
        # Ephemeral Context: In-memory configuration suitable for automated pipelines.
        self.context = gx.get_context(mode="ephemeral")
        self.datasource_name = "pandas_datasource"
        self.asset_name = "trips_dataframe"
        self.suite_name = "trips_quality_suite"
        self.validation_results = None
        self.violations: list[str] = []

    def build_suite(self) -> ExpectationSuite:
        suite = ExpectationSuite(name=self.suite_name)

        # --- Rule A: Structural Integrity ---
        for col in dc.SNAPSHOT_COLUMNS:
            suite.add_expectation(gxe.ExpectColumnToExist(column=col))

        for col in dc.REQUIRED_NON_NULL_COLUMNS:
            suite.add_expectation(gxe.ExpectColumnValuesToNotBeNull(column=col))

        # --- Rule B: Duration Domain (exclusive min, inclusive max) ---
        suite.add_expectation(
            gxe.ExpectColumnValuesToBeBetween(
                column="ride_length",
                min_value=dc.RIDE_LENGTH_MIN,
                max_value=dc.RIDE_LENGTH_MAX,
                strict_min=True,
            )
        )

        # --- Rule C: Calendar Features ---
        suite.add_expectation(
            gxe.ExpectColumnValuesToBeBetween(column="hour_of_day", min_value=0, max_value=23)
        )
        suite.add_expectation(
            gxe.ExpectColumnValuesToBeInSet(column="day_of_week", value_set=dc.WEEKDAY_LABELS)
        )

        # --- Rule D: Categorical Safety ---
        if self.enforce_rider_types:
            suite.add_expectation(
                gxe.ExpectColumnValuesToBeInSet(column="member_casual", value_set=dc.RIDER_TYPES)
            )

        return suite

    def _trips_asset(self):
        try:
            ds = self.context.data_sources.get(self.datasource_name)
        except KeyError:
            ds = self.context.data_sources.add_pandas(self.datasource_name)

        try:
            return ds.get_asset(self.asset_name)
        except LookupError:
            return ds.add_dataframe_asset(name=self.asset_name)

    def validate(self) -> bool:
        logger.info(
            f"Validating {len(self.df)} cleaned trips against contract "
            f"v{dc.CONTRACT_VERSION} (rider types enforced: {self.enforce_rider_types})..."
        )

        suite = self.build_suite()
        batch_def = self._trips_asset().add_batch_definition_whole_dataframe("cleaned_trips")
        batch = batch_def.get_batch(batch_parameters={"dataframe": self.df})
        self.validation_results = batch.validate(suite)

        # Each violation as "column: expectation (unexpected count)"
        self.violations = []
        for res in self.validation_results.results:
            if res.success:
                continue
            col = res.expectation_config.kwargs.get("column", "table")
            unexpected = res.result.get("unexpected_count")
            detail = f" ({unexpected} rows)" if unexpected is not None else ""
            self.violations.append(f"{col}: {res.expectation_config.type}{detail}")

        if not self.validation_results.success:
            logger.error(f"❌ Cleaned trips broke {len(self.violations)} expectations:")
            for violation in self.violations:
                logger.error(f"   - {violation}")

            raise ValueError(
                "Critical Data Validation Failed for cleaned trips; snapshot not written. "
                f"Violations: {'; '.join(self.violations)}"
            )

        logger.info(f"✅ All {len(suite.expectations)} trip expectations passed.")
        return True
