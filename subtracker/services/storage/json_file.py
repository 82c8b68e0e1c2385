"""
JSON File Storage Implementation

DESIGN DECISION: Each collection is one JSON file in the data directory,
rewritten in full on every save. Writes go to a temporary file first
and are moved into place, so a crash mid-write leaves the previous
version intact.

TRADEOFFS:
- Every mutation rewrites the whole collection (fine for personal use)
- No transactions across collections (we handle this with careful ordering)
"""

import json
import os
import tempfile
from collections import deque
from pathlib import Path
from typing import Optional

from subtracker.config import StorageSettings, get_settings
from subtracker.models.audit import AuditEvent
from subtracker.services.storage.interface import (
    CATEGORIES,
    SUBSCRIPTIONS,
    TAGS,
    AuditStorageInterface,
    CollectionStorageInterface,
    CorruptDataError,
    StorageError,
)


class JsonFileStorage(CollectionStorageInterface):
    """
    Stores each collection as a JSON array in its own file.

    A missing file is an empty collection. A file that is not a JSON
    array raises CorruptDataError.
    """

    def __init__(self, settings: Optional[StorageSettings] = None):
        self._settings = settings or get_settings().storage
        self._paths = {
            SUBSCRIPTIONS: self._settings.data_dir / self._settings.subscriptions_file,
            CATEGORIES: self._settings.data_dir / self._settings.categories_file,
            TAGS: self._settings.data_dir / self._settings.tags_file,
        }

    def path_for(self, collection: str) -> Path:
        try:
            return self._paths[collection]
        except KeyError:
            raise StorageError(f"Unknown collection: {collection}")

    def load(self, collection: str) -> list[dict]:
        """Read a collection file."""
        path = self.path_for(collection)
        if not path.exists():
            return []

        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"{path} is not valid JSON: {e}")

        if not isinstance(data, list):
            raise CorruptDataError(f"{path} does not hold a JSON array")

        return data

    def save(self, collection: str, records: list[dict]) -> None:
        """Atomically replace a collection file."""
        path = self.path_for(collection)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(records, fh, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                # Never leave a half-written temp file behind
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write {path}: {e}")


class InMemoryStorage(CollectionStorageInterface):
    """
    Keeps collections in a dict. Used in tests and for throwaway sessions.

    Records are round-tripped through JSON on save and load so the
    behaviour matches the file backend.
    """

    def __init__(self, initial: Optional[dict[str, list[dict]]] = None):
        self._blobs: dict[str, str] = {}
        self.save_count: dict[str, int] = {}
        for collection, records in (initial or {}).items():
            self._blobs[collection] = json.dumps(records)

    def load(self, collection: str) -> list[dict]:
        blob = self._blobs.get(collection)
        if blob is None:
            return []
        try:
            data = json.loads(blob)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"{collection} is not valid JSON: {e}")
        if not isinstance(data, list):
            raise CorruptDataError(f"{collection} does not hold a JSON array")
        return data

    def save(self, collection: str, records: list[dict]) -> None:
        try:
            self._blobs[collection] = json.dumps(records)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Failed to encode {collection}: {e}")
        self.save_count[collection] = self.save_count.get(collection, 0) + 1

    def put_raw(self, collection: str, blob: str) -> None:
        """Store an arbitrary blob (lets tests simulate corrupt data)."""
        self._blobs[collection] = blob


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    Append-only audit log, one JSON document per line.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = path or get_settings().storage.audit_log_path

    def append_event(self, event: AuditEvent) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as fh:
                fh.write(event.to_json_line() + "\n")
            return True
        except OSError as e:
            raise StorageError(f"Failed to append audit event: {e}")

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        if not self._path.exists():
            return []
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                lines = deque((line for line in fh if line.strip()), maxlen=limit)
        except OSError as e:
            raise StorageError(f"Failed to read audit log: {e}")

        events = []
        for line in reversed(lines):
            try:
                events.append(AuditEvent.model_validate_json(line))
            except ValueError:
                # A damaged line must not hide the rest of the log
                continue
        return events
