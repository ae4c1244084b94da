# phi_guard/audit/storage.py

"""Durable storage collaborators for the audit logger."""

import json
import logging
import threading
from pathlib import Path
from typing import List, Protocol, Union

from phi_guard.audit.events import AuditEvent
from phi_guard.core.exceptions import StorageError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_CAPACITY = 1000


class AuditStorage(Protocol):
    """Capability the audit logger persists events through.

    Implementations keep events newest-first and cap them at a fixed count.
    Either method may raise; the logger absorbs the failure.
    """

    def persist(self, event: AuditEvent) -> None: ...

    def load_all(self) -> List[AuditEvent]: ...


class InMemoryAuditStorage:
    """Process-local storage, mainly for tests and ephemeral sessions."""

    def __init__(self, capacity: int = DEFAULT_STORAGE_CAPACITY) -> None:
        self.capacity = capacity
        self._events: List[AuditEvent] = []
        self._lock = threading.Lock()

    def persist(self, event: AuditEvent) -> None:
        with self._lock:
            self._events.insert(0, event)
            del self._events[self.capacity :]

    def load_all(self) -> List[AuditEvent]:
        with self._lock:
            return list(self._events)

    def __len__(self) -> int:
        return len(self._events)


class JsonFileAuditStorage:
    """Stores events as a newest-first JSON array in a single file.

    Args:
        path: File to read and write. Parent directories are created on
            first write.
        capacity: Maximum number of events kept in the file.
    """

    def __init__(
        self, path: Union[str, Path], capacity: int = DEFAULT_STORAGE_CAPACITY
    ) -> None:
        self.path = Path(path)
        self.capacity = capacity
        self._lock = threading.Lock()

    def persist(self, event: AuditEvent) -> None:
        """Prepends the event and rewrites the file.

        Raises:
            StorageError: If the file cannot be read or written.
        """
        with self._lock:
            records = self._read_records()
            records.insert(0, event.to_dict())
            del records[self.capacity :]

            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(records, f)
                tmp_path.replace(self.path)
            except (OSError, TypeError, ValueError) as e:
                raise StorageError(f"Failed to write audit store {self.path}: {e}") from e

    def load_all(self) -> List[AuditEvent]:
        """Reads all stored events, newest first.

        Raises:
            StorageError: If the file exists but cannot be parsed.
        """
        with self._lock:
            records = self._read_records()

        try:
            return [AuditEvent.from_dict(r) for r in records]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Corrupt audit record in {self.path}: {e}") from e

    def _read_records(self) -> List[dict]:
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read audit store {self.path}: {e}") from e

        if not isinstance(records, list):
            raise StorageError(f"Audit store {self.path} does not hold a list")

        logger.debug(
            "Audit store read", extra={"path": str(self.path), "count": len(records)}
        )
        return records
