"""
PipelineResult model describing the outcome of one pipeline run.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


class Stage(str, Enum):
    """Pipeline stages, in execution order."""

    PARSE = "parse"
    CLEAN = "clean"
    CLEAR = "clear"
    ENSURE_SCHEMA = "ensure_schema"
    LOAD = "load"
    VERIFY = "verify"


class PipelineResult(BaseModel):
    """
    Terminal state of a pipeline run.

    Attributes:
        status: "succeeded" or "failed"
        run_id: Identifier tagging the log records of the run
        completed_stages: Stages that finished, in order
        failed_stage: Stage that raised, when status is "failed"
        error: Message of the error that stopped the run
        error_type: Class name of that error
        parsed_records: Rows read from the source
        clean_records: Rows that survived cleaning
        dropped_records: Rows dropped for a non-positive primary_id
        loaded_records: Rows upserted into the warehouse
        sample: Rows read back during verification
        stored_records: Rows in the destination table after loading
    """

    status: Literal["succeeded", "failed"]
    run_id: str | None = None
    completed_stages: list[Stage] = Field(default_factory=list)
    failed_stage: Stage | None = None
    error: str | None = None
    error_type: str | None = None
    parsed_records: int = 0
    clean_records: int = 0
    dropped_records: int = 0
    loaded_records: int = 0
    sample: list[dict[str, Any]] = Field(default_factory=list)
    stored_records: int = 0
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"
