"""
Batch processing pipeline orchestration.

Coordinates the flow: parse → clean → clear → ensure schema → load → verify
"""

import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, TextIO

from src.batch.readers import CSVReader
from src.batch.transforms import RecordCleaner
from src.core.errors import PipelineError
from src.core.models import PipelineResult, Stage
from src.observability.logger import get_logger, log_operation, run_context
from src.observability.metrics import (
    increment_counter,
    observe_histogram,
    record_run_summary,
    stage_duration_seconds,
    stage_failures_total,
)
from src.warehouse.movie_store import MovieStore


logger = get_logger(__name__)


class StageFailed(Exception):
    """Internal signal carrying the stage that raised."""

    def __init__(self, stage: Stage, error: PipelineError):
        self.stage = stage
        self.error = error
        super().__init__(f"{stage.value}: {error}")


class BatchPipeline:
    """
    Orchestrates one run of the movie ETL pipeline.

    Flow:
    1. Parse the CSV file into RawRecords
    2. Clean: fill defaults, drop rows without a positive primary_id
    3. Clear: drop the destination table (full replace)
    4. Ensure the destination table exists
    5. Upsert the clean records
    6. Verify by reading back a sample and counting the stored rows

    Stages run strictly in sequence. The first PipelineError stops the run;
    effects of completed stages (e.g. a dropped table) are not undone and
    nothing is retried.
    """

    def __init__(
        self,
        store: MovieStore,
        reader: CSVReader | None = None,
        cleaner: RecordCleaner | None = None,
        sample_limit: int = 2,
        clear_before_load: bool = True,
        source_id: str = "filmtv",
    ):
        """
        Initialize batch pipeline.

        Args:
            store: Destination movie store
            reader: CSV reader (default: comma-delimited UTF-8)
            cleaner: Record cleaner (default column defaults)
            sample_limit: Rows read back in the verify stage
            clear_before_load: Drop the table before loading
            source_id: Label used in logs and metrics
        """
        self.store = store
        self.reader = reader or CSVReader()
        self.cleaner = cleaner or RecordCleaner()
        self.sample_limit = sample_limit
        self.clear_before_load = clear_before_load
        self.source_id = source_id

    def run(self, source: str | Path | TextIO) -> PipelineResult:
        """
        Process a source through the complete pipeline.

        Args:
            source: Path to the CSV file, or an open text stream

        Returns:
            PipelineResult with status "succeeded", or "failed" plus the
            failing stage and its error
        """
        with run_context(self.source_id) as run_id:
            result = PipelineResult(status="failed", run_id=run_id)
            logger.info(f"Starting batch processing for source: {source}")
            self._execute(result, source)
            self._log_summary(result)

        record_run_summary(
            source_id=self.source_id,
            status=result.status,
            parsed=result.parsed_records,
            clean=result.clean_records,
            dropped=result.dropped_records,
            loaded=result.loaded_records,
        )
        return result

    def _execute(self, result: PipelineResult, source: str | Path | TextIO) -> None:
        try:
            raw_records = self._run_stage(result, Stage.PARSE, self.reader.parse, source)
            result.parsed_records = len(raw_records)
            logger.info(f"Read {result.parsed_records} records")
            if raw_records:
                logger.info(f"First row: {raw_records[0].model_dump()}")

            clean_records = self._run_stage(result, Stage.CLEAN, self.cleaner.clean, raw_records)
            result.clean_records = len(clean_records)
            result.dropped_records = self.cleaner.last_dropped
            logger.info(
                f"Cleaning complete: {result.clean_records} kept, "
                f"{result.dropped_records} dropped"
            )
            if clean_records:
                logger.info(f"First clean record: {clean_records[0].model_dump()}")

            if self.clear_before_load:
                self._run_stage(result, Stage.CLEAR, self.store.clear)

            self._run_stage(result, Stage.ENSURE_SCHEMA, self.store.ensure_schema)

            result.loaded_records = self._run_stage(
                result, Stage.LOAD, self.store.upsert, clean_records
            )
            logger.info(f"Loaded {result.loaded_records} records into {self.store.table_name}")

            result.sample, result.stored_records = self._run_stage(result, Stage.VERIFY, self._verify)
            logger.info(f"First {len(result.sample)} records from the database: {result.sample}")

            result.status = "succeeded"
        except StageFailed as failure:
            result.failed_stage = failure.stage
            result.error = str(failure.error)
            result.error_type = type(failure.error).__name__
            logger.error(
                f"Pipeline failed at stage '{failure.stage.value}': {failure.error}",
                extra={"stage": failure.stage.value, "error_type": result.error_type},
            )
        finally:
            result.finished_at = datetime.now(timezone.utc)

    def _verify(self) -> tuple[list[dict[str, Any]], int]:
        """Read back a sample and the total row count of the destination table."""
        return self.store.sample(self.sample_limit), self.store.count()

    def _run_stage(self, result: PipelineResult, stage: Stage, func: Callable[..., Any], *args: Any) -> Any:
        """
        Run one stage, timing it and recording completion.

        Raises:
            StageFailed: If the stage raises a PipelineError
        """
        start = time.perf_counter()
        try:
            with log_operation(stage.value, logger=logger):
                value = func(*args)
        except PipelineError as e:
            increment_counter(
                stage_failures_total,
                source_id=self.source_id,
                stage=stage.value,
                error_type=type(e).__name__,
            )
            raise StageFailed(stage, e) from e
        finally:
            observe_histogram(
                stage_duration_seconds,
                time.perf_counter() - start,
                source_id=self.source_id,
                stage=stage.value,
            )

        result.completed_stages.append(stage)
        return value

    def _log_summary(self, result: PipelineResult) -> None:
        logger.info("=" * 60)
        logger.info("PROCESSING COMPLETE" if result.succeeded else "PROCESSING FAILED")
        logger.info("=" * 60)
        logger.info(f"Total records parsed: {result.parsed_records}")
        logger.info(f"Clean records: {result.clean_records}")
        logger.info(f"Dropped records (no valid primary_id): {result.dropped_records}")
        logger.info(f"Records loaded: {result.loaded_records}")
        logger.info(f"Rows in {self.store.table_name}: {result.stored_records}")
        if not result.succeeded:
            logger.info(f"Failed stage: {result.failed_stage.value} ({result.error_type})")
        logger.info("=" * 60)
