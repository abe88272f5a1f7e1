"""
Goal service.

Validates goal input and saves it wholesale through the entry store.
"""

import logging
from collections.abc import Mapping
from typing import Any

from weight_loss_tracker.domain.goal import GoalRecord, validate_goal
from weight_loss_tracker.infrastructure.storage.entry_store import EntryStore

logger = logging.getLogger(__name__)


class GoalService:
    """Service for reading and replacing the goal record."""

    def __init__(self, store: EntryStore) -> None:
        """
        Initialize goal service.

        Args:
            store: Entry store to persist through.
        """
        self.store = store

    def get_goal(self) -> GoalRecord | None:
        """Get the current goal, or None if none is set."""
        return self.store.load_goal()

    def save_goal(self, goal: GoalRecord | Mapping[str, Any]) -> GoalRecord:
        """
        Validate and save a goal, replacing the previous one.

        Args:
            goal: Goal record or field mapping.

        Returns:
            The saved goal.

        Raises:
            ValidationError: If the goal is incomplete or its bounds are violated.
                Nothing is written in that case.
            StorageError: If the store cannot be written.
        """
        validated = validate_goal(goal)
        self.store.save_goal(validated)
        logger.info(
            f"Goal set: {validated.initial_weight} -> {validated.target_weight} kg, "
            f"{validated.initial_waist} -> {validated.target_waist} cm"
        )
        return validated
