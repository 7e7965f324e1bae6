"""
Record Store: the owned, ordered collection of patient records.

Key patterns:
- Protocol-based key-value collaborator (in-memory for tests, JSON file on disk)
- Validation at the boundary; everything stored is already normalized
- Whole-collection writes after every mutation
"""

import json
import os
import tempfile
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol

import structlog
from pydantic import ValidationError as PydanticValidationError

from core.domain.errors import NotFoundError, ValidationError
from core.domain.models import PatientFields, PatientRecord, new_record_id

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = ("name", "gender", "age", "condition")


class KeyValueStore(Protocol):
    """
    Persistent string slots, the way a browser profile's local storage works.

    Writes replace the whole value of a slot.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryKeyValueStore:
    """Dictionary-backed slots, used for tests and throwaway sessions."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._slots: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._slots.get(key)

    def set(self, key: str, value: str) -> None:
        self._slots[key] = value


class JsonFileKeyValueStore:
    """
    All slots kept in one JSON object on disk.

    Each write rewrites the file through a temporary sibling and os.replace,
    so a crash mid-write leaves the previous file intact.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.logger = logger.bind(component="kv_store", path=str(self.path))

    def _read_all(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            self.logger.warning("kv_store_corrupt")
            return {}
        if not isinstance(data, dict):
            self.logger.warning("kv_store_unexpected_shape", type=type(data).__name__)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        slots = self._read_all()
        slots[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(slots, fh, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def validate_fields(fields: Mapping[str, Any]) -> PatientFields:
    """
    Presence and type check for user-entered fields.

    Raises:
        ValidationError: naming every missing or unusable field.
    """

    def _blank(value: Any) -> bool:
        return value is None or (isinstance(value, str) and not value.strip())

    missing = [name for name in REQUIRED_FIELDS if _blank(fields.get(name))]
    if missing:
        raise ValidationError(missing)

    try:
        return PatientFields(**{name: fields[name] for name in REQUIRED_FIELDS})
    except PydanticValidationError as e:
        bad = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise ValidationError(bad, message="Invalid value") from e


class RecordStore:
    """
    Sole owner of the patient list.

    Every mutating call persists the full collection to the key-value slot
    before returning. Readers get tuples of immutable records, never the
    internal list.
    """

    def __init__(self, kv: KeyValueStore, key: str = "patients") -> None:
        self.kv = kv
        self.key = key
        self.logger = logger.bind(component="record_store")
        self._records: list[PatientRecord] = self._load()

    def _load(self) -> list[PatientRecord]:
        raw = self.kv.get(self.key)
        if not raw:
            return []
        try:
            rows = json.loads(raw)
        except json.JSONDecodeError:
            self.logger.warning("stored_patients_corrupt", key=self.key)
            return []
        if not isinstance(rows, list):
            self.logger.warning("stored_patients_unexpected_shape", key=self.key)
            return []

        records: list[PatientRecord] = []
        seen: set[str] = set()
        for index, row in enumerate(rows):
            # A stored row must already carry its identity; defaults would mint new ones.
            missing = [k for k in ("id", "added") if not isinstance(row, dict) or not row.get(k)]
            if missing:
                self.logger.warning("stored_patient_skipped", index=index, missing=missing)
                continue
            try:
                record = PatientRecord.model_validate(row)
            except PydanticValidationError as e:
                self.logger.warning("stored_patient_skipped", index=index, error=str(e))
                continue
            if record.id in seen:
                self.logger.warning("stored_patient_duplicate_id", index=index, id=record.id)
                continue
            seen.add(record.id)
            records.append(record)

        self.logger.info("patients_loaded", count=len(records), skipped=len(rows) - len(records))
        return records

    def _persist(self) -> None:
        payload = json.dumps([r.model_dump(mode="json") for r in self._records], ensure_ascii=False)
        self.kv.set(self.key, payload)

    def _index_of(self, record_id: str) -> int:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        return -1

    def _fresh_id(self, taken: set[str] | None = None) -> str:
        existing = taken if taken is not None else {r.id for r in self._records}
        record_id = new_record_id()
        while record_id in existing:
            record_id = new_record_id()
        return record_id

    def add(self, fields: Mapping[str, Any]) -> str:
        """Validate, stamp and append a new record. Returns its id."""
        valid = validate_fields(fields)
        record = PatientRecord(id=self._fresh_id(), **valid.model_dump())
        self._records.append(record)
        self._persist()
        self.logger.info("patient_added", id=record.id, condition=record.condition.value)
        return record.id

    def update(self, record_id: str, fields: Mapping[str, Any]) -> None:
        """Replace every field except id and added."""
        index = self._index_of(record_id)
        if index < 0:
            raise NotFoundError(record_id)
        valid = validate_fields(fields)
        self._records[index] = self._records[index].with_fields(valid)
        self._persist()
        self.logger.info("patient_updated", id=record_id)

    def remove(self, record_id: str) -> None:
        """Excise a record. Unknown ids are ignored."""
        index = self._index_of(record_id)
        if index < 0:
            return
        del self._records[index]
        self._persist()
        self.logger.info("patient_removed", id=record_id)

    def get(self, record_id: str) -> PatientRecord:
        index = self._index_of(record_id)
        if index < 0:
            raise NotFoundError(record_id)
        return self._records[index]

    def import_records(self, records: Iterable[PatientRecord], prepend: bool = True) -> int:
        """
        Bulk insert already-built records.

        Records whose id collides with a stored one get a fresh id.
        Returns the number of records inserted.
        """
        existing = {r.id for r in self._records}
        incoming: list[PatientRecord] = []
        for record in records:
            if record.id in existing:
                record = record.model_copy(update={"id": self._fresh_id(existing)})
            existing.add(record.id)
            incoming.append(record)

        if prepend:
            self._records[:0] = incoming
        else:
            self._records.extend(incoming)
        self._persist()
        self.logger.info("patients_imported", count=len(incoming), prepend=prepend)
        return len(incoming)

    def all(self) -> tuple[PatientRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)
