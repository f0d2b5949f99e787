"""
Batch record transforms.
"""

from .cleaner import RecordCleaner

__all__ = [
    "RecordCleaner",
]
