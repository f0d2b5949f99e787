"""
Record cleaner: fills absent values with column defaults and drops rows
without a usable primary_id.
"""

from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from src.core.errors import TransformError
from src.core.models import CleanRecord, RawRecord
from src.core.schema import COLUMN_DEFAULTS, SCHEMA_COLUMNS
from src.observability.logger import get_logger


logger = get_logger(__name__)


class RecordCleaner:
    """
    Turns RawRecord rows into CleanRecord rows.

    Defaults are applied before filtering, so a row whose primary_id was
    absent gets 0 and is always dropped. Dropped rows are not errors.
    Present-but-empty strings are kept as "".
    """

    def __init__(self, defaults: Mapping[str, Any] | None = None):
        """
        Initialize record cleaner.

        Args:
            defaults: Per-column replacement for absent values

        Attributes:
            last_dropped: Rows dropped by the most recent clean() call
        """
        self.defaults = dict(COLUMN_DEFAULTS if defaults is None else defaults)
        self.last_dropped = 0

    def clean(self, records: Iterable[RawRecord]) -> list[CleanRecord]:
        """
        Clean a batch of raw records.

        Args:
            records: RawRecord rows in source order

        Returns:
            CleanRecord rows with primary_id > 0, input order preserved

        Raises:
            TransformError: If a column cannot be resolved or a clean record
                cannot be built after defaulting
        """
        cleaned = []
        dropped = 0

        for raw in records:
            values = self.fill_defaults(raw)
            if values["primary_id"] <= 0:
                dropped += 1
                logger.debug(f"Dropping record without a positive primary_id: {raw.model_dump()}")
                continue
            cleaned.append(self._build(values))

        self.last_dropped = dropped
        if dropped:
            logger.info(f"Dropped {dropped} records without a positive primary_id")

        return cleaned

    def fill_defaults(self, raw: RawRecord) -> dict[str, Any]:
        """
        Replace absent schema columns of a raw record with their defaults.

        Returns:
            Dictionary with every schema column present
        """
        values = {}
        for column in SCHEMA_COLUMNS:
            try:
                value = getattr(raw, column)
            except AttributeError as e:
                raise TransformError("column missing from raw record", column=column) from e

            if value is None:
                try:
                    value = self.defaults[column]
                except KeyError as e:
                    raise TransformError("no default declared", column=column) from e

            values[column] = value
        return values

    def _build(self, values: dict[str, Any]) -> CleanRecord:
        try:
            return CleanRecord.model_validate(values)
        except ValidationError as e:
            raise TransformError(f"cannot build clean record: {e}") from e
