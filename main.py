import argparse
import logging
import os

import mlflow
import yaml

from cyclistic.data_validation import DataValidator
from cyclistic.errors import ConfigError
from cyclistic.pipeline import SourceSpec, TripPipeline
from cyclistic.snapshot import read_snapshot, write_snapshot
import cyclistic.data_contract as dc


# Logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logging.getLogger("great_expectations").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

STAGES = ("process", "analyze", "all")


def load_params(params_path: str) -> dict:
    with open(params_path, "r") as f:
        return yaml.safe_load(f)


def parse_sources(params: dict) -> list[SourceSpec]:
    try:
        raw_sources = params["data"]["sources"]
    except (KeyError, TypeError) as e:
        raise ConfigError(f"Config is missing data.sources: {e}") from e

    if not raw_sources or len(raw_sources) < 2:
        raise ConfigError("Config must list at least two data.sources to merge")

    sources = []
    for entry in raw_sources:
        if "path" not in entry:
            raise ConfigError(f"Source entry {entry} has no 'path'")
        sources.append(SourceSpec(path=entry["path"], variant=entry.get("variant", dc.VARIANT_AUTO)))
    return sources


def safe_log_artifact(path: str, artifact_path: str | None = None) -> None:
    """Log file to MLflow if it exists (no crash if missing)."""
    if path and os.path.exists(path):
        mlflow.log_artifact(path, artifact_path=artifact_path)


def run_processing(pipeline: TripPipeline, snapshot_path: str, drop_unmapped: bool) -> None:
    # 1) Load, normalize, merge, derive, filter
    try:
        df = pipeline.process()

        stats = df.attrs.get("stats", {})
        for k, v in stats.items():
            mlflow.log_metric(f"filter_{k}", float(v) if isinstance(v, (int, float)) else 0.0)

        safe_log_artifact(df.attrs.get("dropped_sample_path"), artifact_path="audit")

    except Exception as e:
        mlflow.set_tag("status", "process_failed")
        logger.exception(f"Processing failed: {e}")
        raise

    # 2) Validate with Great Expectations before anything is written
    validator = DataValidator(df, enforce_rider_types=drop_unmapped)
    try:
        validator.validate()
        mlflow.set_tag("data_quality", "passed")
    except Exception as e:
        mlflow.set_tag("data_quality", "failed")
        logger.exception(f"Validation failed: {e}")
        raise

    # 3) Persist the single cleaned snapshot
    write_snapshot(df, snapshot_path)
    safe_log_artifact(snapshot_path, artifact_path="snapshot")


def run_analysis(pipeline: TripPipeline, snapshot_path: str, artifact_dir: str) -> None:
    df = read_snapshot(snapshot_path)
    tables = pipeline.analyze(df)

    os.makedirs(artifact_dir, exist_ok=True)
    for name, table in tables.items():
        logger.info(f"{name}:\n{table.to_string(index=False)}")
        table_path = os.path.join(artifact_dir, f"{name}.csv")
        table.to_csv(table_path, index=False)
        safe_log_artifact(table_path, artifact_path="summaries")


def run_pipeline(params_path: str, stage: str = "all") -> None:
    params = load_params(params_path)

    # --- Read config ---
    sources = parse_sources(params)
    snapshot_path = params["data"].get("snapshot_path", "data/processed/trips_cleaned.parquet")
    drop_unmapped = bool(params.get("filter", {}).get("drop_unmapped_rider_types", False))
    exp_name = params.get("mlflow", {}).get("experiment_name", "Cyclistic_Trip_Pipeline")

    # Write temp artifacts to a writable place in containers
    artifact_dir = os.environ.get("LOCAL_ARTIFACT_DIR", "/tmp/cyclistic_artifacts")

    pipeline = TripPipeline(
        sources,
        drop_unmapped_rider_types=drop_unmapped,
        artifact_dir=artifact_dir,
    )

    # --- MLflow ---
    mlflow.set_experiment(exp_name)

    with mlflow.start_run() as run:
        logger.info(f"Starting Run: {run.info.run_id} (stage={stage})")

        # Log pipeline configuration
        mlflow.log_param("contract_version", dc.CONTRACT_VERSION)
        mlflow.log_param("stage", stage)
        mlflow.log_param("sources", ",".join(s.path for s in sources))
        mlflow.log_param("variants", ",".join(s.variant for s in sources))
        mlflow.log_param("snapshot_path", snapshot_path)
        mlflow.log_param("drop_unmapped_rider_types", drop_unmapped)

        if stage in ("process", "all"):
            run_processing(pipeline, snapshot_path, drop_unmapped)

        if stage in ("analyze", "all"):
            run_analysis(pipeline, snapshot_path, artifact_dir)

        mlflow.set_tag("status", "succeeded")
        logger.info("Pipeline finished successfully.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", default="params.yaml", help="Path to config file")
    parser.add_argument("--stage", default="all", choices=STAGES, help="Pipeline stage to run")
    args = parser.parse_args()
    run_pipeline(args.config, args.stage)
