"""
Key-value storage backends.

A backend maps string keys to string values, the way browser local
storage does. The entry store layers JSON envelopes on top.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from weight_loss_tracker.utils.exceptions import StorageError

logger = logging.getLogger(__name__)


class KeyValueBackend(ABC):
    """Synchronous string key-value storage."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""


class InMemoryBackend(KeyValueBackend):
    """Dictionary backend, used in tests and for throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileBackend(KeyValueBackend):
    """
    Backend persisting all keys in a single JSON document.

    Every write rewrites the whole document through a temporary file that
    then replaces the target, so a failed write never leaves a truncated
    file behind.
    """

    def __init__(self, path: str | Path) -> None:
        """
        Initialize file backend.

        Args:
            path: Path to the JSON document. Created on first write.
        """
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        """
        Read the whole document.

        Raises:
            StorageError: If the file exists but cannot be read or decoded.
        """
        if not self.path.exists():
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read store file {self.path}: {e}") from e

        if not isinstance(document, dict):
            raise StorageError(f"Store file {self.path} does not hold a JSON object")

        return {str(k): v for k, v in document.items() if isinstance(v, str)}

    def _write_all(self, document: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write store file {self.path}: {e}") from e

        logger.debug(f"Wrote {len(document)} keys to {self.path}")

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            document = self._read_all()
        except StorageError as e:
            # Keys of a corrupt document already read back as absent
            logger.warning(f"Replacing unreadable store file: {e}")
            document = {}
        document[key] = value
        self._write_all(document)

    def delete(self, key: str) -> None:
        document = self._read_all()
        if document.pop(key, None) is not None:
            self._write_all(document)
