"""JSON file storage with Result-based error handling.

A thin wrapper around file I/O for JSON documents. Returns Result types
instead of raising, and writes through a temporary file so a crash never
leaves a half-written collection on disk.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from taskboard.domain.shared.result import Err, Ok, Result

logger = logging.getLogger(__name__)


class JsonStorage:
    """Low-level JSON file I/O with Result-based error handling.

    Holds no domain logic, only file access.

    Example:
        storage = JsonStorage()
        result = storage.load_json(Path("projects.json"))
        if isinstance(result, Ok):
            rows = result.value
    """

    def load_json(self, path: Path) -> Result[Any, str]:
        """Load a JSON document.

        Args:
            path: Path to the JSON file to read.

        Returns:
            Ok(data) if successful, Err(str) with error message if failed.
        """
        try:
            if not path.exists():
                return Err(f"File not found: {path}")

            content = path.read_text(encoding="utf-8")
            return Ok(json.loads(content))

        except json.JSONDecodeError as e:
            return Err(f"Invalid JSON in {path}: {e}")
        except PermissionError:
            return Err(f"Permission denied reading {path}")
        except OSError as e:
            return Err(f"Error reading {path}: {e}")

    def save_json(self, path: Path, data: Any, indent: int = 2) -> Result[None, str]:
        """Atomically replace a JSON document.

        Args:
            path: Destination file.
            data: JSON-serializable value.
            indent: JSON indentation level (default 2).

        Returns:
            Ok(None) if successful, Err(str) with error message if failed.
        """
        try:
            content = json.dumps(data, indent=indent)
        except (TypeError, ValueError) as e:
            return Err(f"Data not JSON serializable: {e}")

        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
            os.replace(tmp_name, path)
            return Ok(None)

        except PermissionError:
            return Err(f"Permission denied writing {path}")
        except OSError as e:
            return Err(f"Error writing {path}: {e}")
        finally:
            if tmp_name and os.path.exists(tmp_name):
                logger.warning(f"Removing stale temp file {tmp_name}")
                os.unlink(tmp_name)
