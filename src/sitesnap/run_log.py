"""Append-only CSV log of every page visit in a phase."""

import csv
import logging
from pathlib import Path
from typing import List

from sitesnap.constants import RUN_LOG_ENCODING, RUN_LOG_HEADER
from sitesnap.models import LogRecord
from sitesnap.output_manager import OutputSinkError

logger = logging.getLogger(__name__)


class RunLog:
    """
    One CSV file per phase: a header, then one quoted row per processed task.

    Rows are appended and flushed one at a time so the log stays useful if a
    run dies halfway.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.records_written = 0

    def start(self) -> None:
        """Truncate the log and write the header.

        Raises:
            OutputSinkError: If the file cannot be created
        """
        try:
            with open(self.path, "w", newline="", encoding=RUN_LOG_ENCODING) as f:
                csv.writer(f, lineterminator="\n").writerow(RUN_LOG_HEADER)
        except OSError as e:
            raise OutputSinkError(f"Cannot create run log {self.path}: {e}") from e

        self.records_written = 0
        logger.debug(f"Run log started at {self.path}")

    def append(self, record: LogRecord) -> None:
        """Append one record. Write failures propagate."""
        with open(self.path, "a", newline="", encoding=RUN_LOG_ENCODING) as f:
            csv.writer(f, quoting=csv.QUOTE_ALL, lineterminator="\n").writerow(record.as_row())
        self.records_written += 1


def read_records(path: Path) -> List[LogRecord]:
    """Parse a run log back into records, skipping the header."""
    with open(path, "r", newline="", encoding=RUN_LOG_ENCODING) as f:
        reader = csv.reader(f)
        header = next(reader, None)
        if header != RUN_LOG_HEADER:
            raise ValueError(f"Not a run log: {path}")
        return [LogRecord(*row) for row in reader if row]
