"""
Repository pattern for the in-memory usage dataset.

Owns the base collection of usage records and replaces it wholesale on
every ingestion.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, List, Optional, Tuple, Union

from .models import UsageRecord
from .parser import parse_line

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 1000

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class IngestResult:
    """Summary of one ingestion run."""
    records_loaded: int
    failed_lines: int
    total_bytes: int
    cancelled: bool = False


class UsageRepository:
    """In-memory store of usage records.

    Records are loaded from newline-delimited JSON. A new collection is
    built off to the side and only swapped in once the whole stream has
    been processed, so readers never see a half-loaded dataset.

    The repository performs no locking: a single owner must serialize
    ingestion and must not query while an ingestion is in flight.
    """

    def __init__(self, records: Optional[List[UsageRecord]] = None):
        """Initialize the repository.

        Args:
            records: Optional initial records
        """
        self._records: Tuple[UsageRecord, ...] = tuple(records or ())

    @property
    def records(self) -> Tuple[UsageRecord, ...]:
        """Current base collection."""
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def ingest(
        self,
        stream: BinaryIO,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> IngestResult:
        """Replace the dataset with the records read from a stream.

        Malformed lines are dropped without failing the load. Progress is
        reported every 1000 lines as (records parsed so far, estimated bytes
        processed), followed by one final report with the exact total.

        Args:
            stream: Binary (or text) stream of NDJSON usage records
            on_progress: Optional callback receiving (records, bytes)
            cancel_event: Optional event; when set, processing stops and the
                previous dataset is kept

        Returns:
            IngestResult describing the run
        """
        if _is_cancelled(cancel_event):
            logger.info("Ingestion cancelled before reading")
            return IngestResult(records_loaded=0, failed_lines=0, total_bytes=0, cancelled=True)

        raw = stream.read()
        if isinstance(raw, str):
            raw = raw.encode("utf-8")
        total_bytes = len(raw)

        content = raw.decode("utf-8", errors="replace")
        lines = [line for line in content.split("\n") if line]
        total_lines = len(lines)

        records: List[UsageRecord] = []
        failed = 0

        for index, line in enumerate(lines):
            if _is_cancelled(cancel_event):
                logger.info(
                    "Ingestion cancelled at line %d of %d; keeping %d existing records",
                    index, total_lines, len(self._records)
                )
                return IngestResult(
                    records_loaded=len(records),
                    failed_lines=failed,
                    total_bytes=total_bytes,
                    cancelled=True
                )

            line = line.strip()
            if line:
                result = parse_line(line)
                if result.ok:
                    records.append(result.record)
                else:
                    failed += 1
                    logger.debug("Skipping line %d: %s", index + 1, result.error)

            if on_progress is not None and index % PROGRESS_INTERVAL == 0:
                estimated_bytes = int(index / total_lines * total_bytes)
                on_progress(len(records), estimated_bytes)

        self._records = tuple(records)

        if on_progress is not None:
            on_progress(len(records), total_bytes)

        logger.info(
            "Loaded %d usage records (%d lines skipped, %d bytes)",
            len(records), failed, total_bytes
        )
        return IngestResult(
            records_loaded=len(records),
            failed_lines=failed,
            total_bytes=total_bytes
        )

    def load_file(
        self,
        path: Union[str, Path],
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> IngestResult:
        """Replace the dataset with the records of an NDJSON file.

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Usage file not found: {path}")

        with open(file_path, "rb") as f:
            return self.ingest(f, on_progress=on_progress, cancel_event=cancel_event)


def _is_cancelled(cancel_event: Optional[threading.Event]) -> bool:
    return cancel_event is not None and cancel_event.is_set()
