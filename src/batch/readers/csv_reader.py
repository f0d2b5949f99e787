"""
CSV reader producing RawRecord rows from the FilmTV movie export.
"""

import csv
from pathlib import Path
from typing import Iterable, TextIO

from pydantic import ValidationError

from src.core.errors import IngestionError, IngestionErrorKind
from src.core.models import RawRecord
from src.core.schema import canonical_column_name, coerce_column
from src.observability.logger import get_logger


logger = get_logger(__name__)


class CSVReader:
    """
    Reads a delimited file with a header row into RawRecord instances.

    Columns are matched by header name, not position. Each cell is coerced
    with the type declared for its column; unknown columns are read as text
    and ignored by the record model. Parsing is fail-fast: the first
    malformed row aborts the whole read.
    """

    def __init__(self, delimiter: str = ",", encoding: str = "utf-8"):
        """
        Initialize CSV reader.

        Args:
            delimiter: Field delimiter
            encoding: Text encoding of the source file
        """
        self.delimiter = delimiter
        self.encoding = encoding

    def parse(self, source: str | Path | TextIO) -> list[RawRecord]:
        """
        Read every data row of a CSV source.

        Args:
            source: Path to the file, or an open text stream

        Returns:
            RawRecord list in source row order

        Raises:
            IngestionError: If the source cannot be opened or read, or a row
                cannot be assembled into a RawRecord
        """
        if not isinstance(source, (str, Path)):
            return self._parse_stream(source)

        try:
            with open(source, newline="", encoding=self.encoding) as stream:
                return self._parse_stream(stream)
        except OSError as e:
            raise IngestionError(
                IngestionErrorKind.IO, f"cannot open {source}: {e}"
            ) from e

    def _parse_stream(self, stream: Iterable[str]) -> list[RawRecord]:
        reader = csv.reader(stream, delimiter=self.delimiter)
        row_number = 0

        try:
            # blank lines before the header are skipped like blank data lines
            header = next((row for row in reader if row), None)
            if header is None:
                raise IngestionError(IngestionErrorKind.CSV, "source has no header row")

            columns = [canonical_column_name(name) for name in header]
            logger.debug(f"CSV header resolved to columns: {columns}")

            records = []
            for cells in reader:
                if not cells:
                    # blank line
                    continue
                row_number += 1
                records.append(self._assemble(columns, cells, row_number))
        except csv.Error as e:
            raise IngestionError(
                IngestionErrorKind.CSV, str(e), row=row_number + 1
            ) from e
        except UnicodeDecodeError as e:
            raise IngestionError(
                IngestionErrorKind.IO, f"source is not valid {self.encoding}: {e}"
            ) from e
        except OSError as e:
            raise IngestionError(
                IngestionErrorKind.IO, f"cannot read source: {e}", row=row_number + 1
            ) from e

        return records

    def _assemble(self, columns: list[str], cells: list[str], row_number: int) -> RawRecord:
        """
        Coerce one row and build its RawRecord.

        Cells missing at the end of a short row are absent (None). A row with
        more cells than the header is malformed.
        """
        if len(cells) > len(columns):
            raise IngestionError(
                IngestionErrorKind.CSV,
                f"row has {len(cells)} fields but the header has {len(columns)}",
                row=row_number,
            )

        values = {}
        for position, name in enumerate(columns):
            if position < len(cells):
                values[name] = coerce_column(name, cells[position])
            else:
                values[name] = None

        try:
            return RawRecord.model_validate(values)
        except ValidationError as e:
            logger.error(f"Error parsing row {row_number}: {e}")
            raise IngestionError(
                IngestionErrorKind.DESERIALIZATION, str(e), row=row_number
            ) from e
