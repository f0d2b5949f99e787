"""
Batch movie processing module.
"""

from .pipeline import BatchPipeline
from .readers import CSVReader
from .transforms import RecordCleaner

__all__ = [
    "BatchPipeline",
    "CSVReader",
    "RecordCleaner",
]
