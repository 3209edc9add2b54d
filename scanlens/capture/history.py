"""Persistent, newest-first scan history."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator, Sequence

from ..config import constants
from .models import ContentType, ScanRecord

logger = logging.getLogger(__name__)


class JsonHistoryFile:
    """Single JSON document holding the full ordered record list."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read(self) -> list[ScanRecord]:
        with self.path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, list):
            raise ValueError(f"history file {self.path} does not hold a list")
        return [ScanRecord.from_dict(entry) for entry in payload]

    def write(self, records: Sequence[ScanRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        contents = json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False)
        tmp = tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", delete=False, dir=str(self.path.parent), suffix=".tmp"
        )
        temp_path = Path(tmp.name)
        try:
            with tmp:
                tmp.write(contents)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(temp_path, self.path)
        finally:
            if temp_path.exists():
                temp_path.unlink()


def load_history(backing: JsonHistoryFile) -> list[ScanRecord]:
    """Records from ``backing``; empty when the file is absent or unreadable."""

    if not backing.path.exists():
        return []
    try:
        return backing.read()
    except (OSError, ValueError, KeyError, TypeError) as exc:
        logger.error("history load failed for %s: %s", backing.path, exc)
        return []


@dataclass(frozen=True)
class HistoryEvent:
    kind: str
    record_id: str | None


HistoryListener = Callable[[HistoryEvent], None]


def derive_title(text: str, now: datetime | None = None) -> str:
    lines = text.splitlines()
    first_line = lines[0].strip() if lines else ""
    if not first_line:
        stamp = (now or datetime.now()).astimezone().strftime("%x %H:%M")
        first_line = f"Scan {stamp}"
    return first_line[: constants.MAX_TITLE_LENGTH]


class HistoryStore:
    """Ordered scan records with a single selection pointer.

    Every mutation rewrites the backing file while holding the store lock, so
    snapshots land on disk in mutation order. A failed write is logged and the
    in-memory change stands; the next mutation writes the full state again.
    """

    def __init__(
        self,
        backing: JsonHistoryFile,
        records: Sequence[ScanRecord] = (),
        selected_id: str | None = None,
    ) -> None:
        self._backing = backing
        self._records: list[ScanRecord] = list(records)
        if selected_id is not None and not any(r.id == selected_id for r in self._records):
            selected_id = None
        self._selected_id = selected_id
        self._lock = threading.Lock()
        self._listeners: list[HistoryListener] = []

    @classmethod
    def load(cls, path: str | Path) -> "HistoryStore":
        backing = JsonHistoryFile(path)
        records = load_history(backing)
        selected = records[0].id if records else None
        logger.info("loaded %d scan records from %s", len(records), backing.path)
        return cls(backing, records, selected)

    @property
    def path(self) -> Path:
        return self._backing.path

    @property
    def records(self) -> tuple[ScanRecord, ...]:
        with self._lock:
            return tuple(self._records)

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def selected(self) -> ScanRecord | None:
        with self._lock:
            return self._find(self._selected_id)

    def get(self, record_id: str) -> ScanRecord | None:
        with self._lock:
            return self._find(record_id)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ScanRecord]:
        return iter(self.records)

    def subscribe(self, listener: HistoryListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def insert(
        self,
        text: str,
        source_app: str,
        source_app_id: str | None = None,
        image_ref: str | None = None,
        content_type: ContentType = ContentType.TEXT,
        *,
        title_text: str | None = None,
    ) -> ScanRecord:
        """Prepend a new record and select it.

        ``title_text`` overrides the text the title is derived from.
        """

        record = ScanRecord(
            id=uuid.uuid4().hex,
            title=derive_title(text if title_text is None else title_text),
            timestamp=datetime.now(timezone.utc),
            content=text,
            source_app=source_app or constants.UNKNOWN_SOURCE_APP,
            source_app_id=source_app_id,
            image_ref=image_ref,
            content_type=content_type,
        )
        with self._lock:
            self._records.insert(0, record)
            self._selected_id = record.id
            self._persist()
        self._notify(HistoryEvent("inserted", record.id))
        return record

    def delete(self, record_id: str) -> bool:
        with self._lock:
            index = next((i for i, r in enumerate(self._records) if r.id == record_id), None)
            if index is None:
                return False
            del self._records[index]
            if self._selected_id == record_id:
                self._selected_id = self._records[0].id if self._records else None
            self._persist()
        self._notify(HistoryEvent("deleted", record_id))
        return True

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
            self._selected_id = None
            self._persist()
        self._notify(HistoryEvent("cleared", None))

    def select(self, record_id: str | None) -> None:
        """User-driven navigation; ``None`` deselects."""

        with self._lock:
            if record_id is not None and self._find(record_id) is None:
                raise KeyError(record_id)
            self._selected_id = record_id
        self._notify(HistoryEvent("selected", record_id))

    def _find(self, record_id: str | None) -> ScanRecord | None:
        if record_id is None:
            return None
        return next((r for r in self._records if r.id == record_id), None)

    def _persist(self) -> None:
        try:
            self._backing.write(self._records)
        except (OSError, TypeError, ValueError):
            logger.exception("history save failed for %s", self._backing.path)

    def _notify(self, event: HistoryEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("history listener failed on %s", event.kind)
