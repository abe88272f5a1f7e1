"""
Weekly log service.

Creates weekly entries from form input and appends them to the store.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from weight_loss_tracker.domain.weekly_entry import WeeklyEntry
from weight_loss_tracker.infrastructure.storage.entry_store import EntryStore
from weight_loss_tracker.services.progress import sort_entries
from weight_loss_tracker.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)


class WeeklyLogService:
    """Service for logging weekly entries and listing the history."""

    def __init__(self, store: EntryStore) -> None:
        """
        Initialize weekly log service.

        Args:
            store: Entry store to persist through.
        """
        self.store = store

    def log_entry(self, data: Mapping[str, Any]) -> WeeklyEntry:
        """
        Create a weekly entry and append it to the store.

        A goal must be set first, and weight and waist must be given.

        Args:
            data: Entry fields (snake_case or camelCase). A missing id is generated.

        Returns:
            The stored entry.

        Raises:
            ValidationError: If no goal is set or the entry is invalid.
            StorageError: If the store cannot be written.
        """
        if self.store.load_goal() is None:
            raise ValidationError("Set your goals before logging a week")

        problems = [
            f"{field_name} is required"
            for field_name in ("weight", "waist")
            if not data.get(field_name)
        ]
        if problems:
            raise ValidationError("Invalid weekly entry: " + "; ".join(problems), problems)

        try:
            entry = WeeklyEntry.model_validate(dict(data))
        except PydanticValidationError as e:
            problems = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            ]
            raise ValidationError("Invalid weekly entry: " + "; ".join(problems), problems) from e

        self.store.append_entry(entry)
        return entry

    def history(self) -> list[WeeklyEntry]:
        """All entries, newest first."""
        return sort_entries(self.store.load_entries(), descending=True)
