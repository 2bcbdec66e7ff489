"""Entity stores.

An entity store keeps whole collections under a key and offers exactly two
operations: ``load(key, default)`` and ``save(key, rows)``. Every save
replaces the collection. Stores expose a re-entrant ``lock`` that services
hold across a read-modify-write so that threaded hosts never see torn
writes.
"""

import copy
import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from taskboard.domain.shared.result import Err, Ok, Result
from taskboard.infrastructure.storage.json_storage import JsonStorage

logger = logging.getLogger(__name__)


class CollectionKey(str, Enum):
    """Names of the persisted collections."""

    USERS = "users"
    PROJECTS = "projects"
    TASKS = "tasks"
    NOTIFICATIONS = "notifications"


class EntityStore(Protocol):
    """Contract shared by all stores."""

    lock: threading.RLock

    def load(self, key: str, default: list[dict[str, Any]] | None = None) -> list[dict[str, Any]]: ...

    def save(self, key: str, value: list[dict[str, Any]]) -> Result[None, str]: ...


def _key_name(key: str) -> str:
    return key.value if isinstance(key, CollectionKey) else str(key)


class MemoryStore:
    """In-process store, used by tests and ephemeral sessions.

    Rows are deep-copied on the way in and out, mirroring the
    serialize/deserialize boundary of a real store.
    """

    def __init__(self, initial: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self.lock = threading.RLock()
        self._data: dict[str, list[dict[str, Any]]] = {
            _key_name(k): copy.deepcopy(v) for k, v in (initial or {}).items()
        }

    def load(self, key: str, default: list[dict[str, Any]] | None = None) -> list[dict[str, Any]]:
        with self.lock:
            rows = self._data.get(_key_name(key))
            if rows is None:
                return list(default or [])
            return copy.deepcopy(rows)

    def save(self, key: str, value: list[dict[str, Any]]) -> Result[None, str]:
        with self.lock:
            self._data[_key_name(key)] = copy.deepcopy(list(value))
        return Ok(None)


class JsonFileStore:
    """One JSON document per collection inside ``data_dir``."""

    def __init__(self, data_dir: Path, storage: JsonStorage | None = None) -> None:
        """Initialize the store.

        Args:
            data_dir: Directory holding ``<collection>.json`` files.
            storage: JsonStorage instance to use. Creates new one if not provided.
        """
        self.lock = threading.RLock()
        self.data_dir = Path(data_dir)
        self._storage = storage or JsonStorage()

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{_key_name(key)}.json"

    def load(self, key: str, default: list[dict[str, Any]] | None = None) -> list[dict[str, Any]]:
        """Load a collection, falling back to ``default`` when absent or unreadable."""
        path = self.path_for(key)
        with self.lock:
            if not path.exists():
                return list(default or [])
            result = self._storage.load_json(path)
        if isinstance(result, Err):
            logger.warning(f"Could not load {_key_name(key)}: {result.error}")
            return list(default or [])
        if not isinstance(result.value, list):
            logger.warning(f"Collection {_key_name(key)} is not a list, ignoring it")
            return list(default or [])
        return result.value

    def save(self, key: str, value: list[dict[str, Any]]) -> Result[None, str]:
        with self.lock:
            return self._storage.save_json(self.path_for(key), list(value))
