"""
Core data models for the movie ETL pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .clean_record import CleanRecord
from .pipeline_result import PipelineResult, Stage
from .raw_record import RawRecord

__all__ = [
    "RawRecord",
    "CleanRecord",
    "PipelineResult",
    "Stage",
]
