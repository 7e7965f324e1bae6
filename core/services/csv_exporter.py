"""CSV export of the full Record Store."""

import csv
import io
from collections.abc import Sequence
from pathlib import Path

import structlog

from core.domain.errors import EmptyStoreError
from core.domain.models import PatientRecord

logger = structlog.get_logger(__name__)

CSV_HEADER = ("Name", "Gender", "Age", "Condition", "Added")
CSV_FILENAME = "patients.csv"
CSV_MEDIA_TYPE = "text/csv"


def to_csv(records: Sequence[PatientRecord]) -> bytes:
    """
    Serialize records as UTF-8 CSV.

    Every field is quoted and inner quotes are doubled; rows end with a newline.

    Raises:
        EmptyStoreError: when there is nothing to export.
    """
    if not records:
        raise EmptyStoreError()

    buffer = io.StringIO(newline="")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for record in records:
        writer.writerow(
            [record.name, record.gender.value, record.age, record.condition.value, record.added]
        )
    return buffer.getvalue().encode("utf-8")


def export_csv(records: Sequence[PatientRecord], directory: str | Path = ".") -> Path:
    """Write `patients.csv` into `directory`; nothing is written for an empty store."""
    payload = to_csv(records)
    target = Path(directory) / CSV_FILENAME
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(payload)
    logger.info("csv_exported", path=str(target), rows=len(records))
    return target
