"""JSON document storage for episodes and facts."""

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..errors import MemoryStoreError
from .models import MemoryDocument

logger = logging.getLogger(__name__)

MEMORY_FILENAME = "memory.json"


class MemoryStore:
    """Persistent storage for the memory document.

    The whole document lives in one JSON file and is rewritten in full on
    every mutation. Writes go to a temporary file in the same directory and
    are moved into place with os.replace, so a crash never leaves a
    half-written memory.json behind.
    """

    def __init__(self, data_dir: Path | str) -> None:
        """Initialize the store with a data directory.

        Args:
            data_dir: Directory holding memory.json. Created on first save.
        """
        self.data_dir = Path(data_dir).expanduser()
        self.path = self.data_dir / MEMORY_FILENAME
        self._document: MemoryDocument | None = None
        self._lock = threading.Lock()

    def load(self) -> MemoryDocument:
        """Load the document from disk.

        A missing file yields an empty document. An unreadable or corrupt
        file is logged and also yields an empty document.
        """
        self._document = self._read()
        logger.info(
            "Loaded %d episodes, %d facts from %s",
            len(self._document.episodes),
            len(self._document.facts),
            self.path,
        )
        return self._document

    def _read(self) -> MemoryDocument:
        if not self.path.exists():
            return MemoryDocument()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top-level value is not an object")
            return MemoryDocument.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Cannot load %s: %s. Starting with empty memory.", self.path, e)
            return MemoryDocument()

    @property
    def document(self) -> MemoryDocument:
        """The in-memory document, loaded lazily on first access."""
        if self._document is None:
            return self.load()
        return self._document

    def save(self) -> None:
        """Write the current document to disk atomically.

        Raises:
            MemoryStoreError: If the file cannot be written.
        """
        content = json.dumps(self.document.to_dict(), indent=2, ensure_ascii=False)

        tmp_path: str | None = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.data_dir,
                prefix=".memory-",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_path = f.name
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise MemoryStoreError(f"Failed to save memory to {self.path}: {e}") from e

    @contextmanager
    def transaction(self) -> Iterator[MemoryDocument]:
        """Mutate the document and persist it, one writer at a time.

        Changes made inside the block are kept in memory even if the save
        fails; the MemoryStoreError is re-raised to the caller.
        """
        with self._lock:
            yield self.document
            self.save()
