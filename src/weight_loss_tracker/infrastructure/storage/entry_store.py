"""
Entry store: persistence for the goal record and the weekly entries.

Two logical keys are stored, each as a JSON envelope carrying a schema
version. Unversioned values written by the browser version of the
tracker are read as schema version 0.
"""

import json
import logging
from typing import Any

from weight_loss_tracker.domain.goal import GoalRecord
from weight_loss_tracker.domain.weekly_entry import WeeklyEntry, parse_entries
from weight_loss_tracker.infrastructure.storage.backends import KeyValueBackend
from weight_loss_tracker.utils.exceptions import StorageError
from weight_loss_tracker.utils.parameters import StorageConfig

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class EntryStore:
    """
    Repository for the goal record (singular, nullable) and the weekly
    entry collection (list, insertion ordered, default empty).

    Reads never raise: unreadable or unparsable values are treated as
    absent and a notice is appended to ``notices`` for the presentation
    layer. Writes raise StorageError.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        config: StorageConfig | None = None,
        timezone: str | None = None,
    ) -> None:
        """
        Initialize entry store.

        Args:
            backend: Key-value backend holding the serialized values.
            config: Storage configuration (key names).
            timezone: Timezone that stored timestamps are read in.
        """
        self.backend = backend
        self.config = config or StorageConfig()
        self.timezone = timezone
        self.notices: list[str] = []

    def _notify(self, message: str) -> None:
        logger.warning(message)
        self.notices.append(message)

    def _read(self, key: str, strict: bool = False) -> Any | None:
        """
        Read and unwrap a stored value.

        Args:
            key: Logical key.
            strict: Raise instead of recovering when the value was written
                by a newer schema version.

        Returns:
            The payload, or None if absent or unreadable.

        Raises:
            StorageError: In strict mode, if the schema version is unsupported.
        """
        try:
            raw = self.backend.get(key)
        except StorageError as e:
            self._notify(f"Could not read '{key}', using defaults: {e}")
            return None

        if raw is None:
            return None

        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            self._notify(f"Stored '{key}' is not valid JSON, using defaults: {e}")
            return None

        if isinstance(value, dict) and "schemaVersion" in value and "data" in value:
            version = value["schemaVersion"]
            if not isinstance(version, int) or version > SCHEMA_VERSION:
                if strict:
                    raise StorageError(
                        f"Refusing to overwrite '{key}' stored with schema version {version!r}"
                    )
                self._notify(f"Stored '{key}' has unsupported schema version {version!r}")
                return None
            return value["data"]

        return value

    def _write(self, key: str, data: Any) -> None:
        """
        Wrap and write a value.

        Raises:
            StorageError: If serialization or the backend write fails.
        """
        try:
            raw = json.dumps({"schemaVersion": SCHEMA_VERSION, "data": data}, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Failed to serialize '{key}': {e}") from e

        try:
            self.backend.set(key, raw)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write '{key}': {e}") from e

    def load_goal(self) -> GoalRecord | None:
        """
        Load the goal record.

        Returns:
            Goal record, or None if none is stored or it cannot be parsed.
        """
        data = self._read(self.config.goal_key)
        if data is None:
            return None

        try:
            return GoalRecord.model_validate(data, context={"timezone": self.timezone})
        except Exception as e:
            self._notify(f"Stored goal is malformed, ignoring it: {e}")
            return None

    def save_goal(self, goal: GoalRecord) -> None:
        """
        Save the goal record, replacing any previous one.

        Raises:
            StorageError: If the store cannot be written.
        """
        self._write(self.config.goal_key, goal.to_dict())
        logger.info(f"Saved goal {goal.start_date} -> {goal.end_date}")

    def load_entries(self) -> list[WeeklyEntry]:
        """
        Load all weekly entries in insertion order.

        Returns:
            List of weekly entries; empty if none stored. Malformed items are skipped.
        """
        data = self._read(self.config.entries_key)
        if data is None:
            return []

        if not isinstance(data, list):
            self._notify(f"Stored '{self.config.entries_key}' is not a list, ignoring it")
            return []

        entries = parse_entries(data, timezone=self.timezone)
        skipped = len(data) - len(entries)
        if skipped:
            self._notify(f"Skipped {skipped} malformed weekly entries")

        return entries

    def append_entry(self, entry: WeeklyEntry) -> None:
        """
        Append a weekly entry.

        Reads the full collection, appends and writes it back. Raw items
        are preserved as stored, including ones that fail to parse.

        Raises:
            StorageError: If the store cannot be written or holds entries
                from a newer schema version.
        """
        data = self._read(self.config.entries_key, strict=True)
        items: list[Any] = data if isinstance(data, list) else []
        items.append(entry.to_dict())
        self._write(self.config.entries_key, items)
        logger.info(f"Appended weekly entry {entry.id} for {entry.date} ({len(items)} total)")

    def clear(self) -> None:
        """Remove the goal and every weekly entry."""
        try:
            self.backend.delete(self.config.goal_key)
            self.backend.delete(self.config.entries_key)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to clear store: {e}") from e
        logger.info("Cleared goal and weekly entries")
