"""
Dashboard service.

Loads the goal and entries from the store and assembles every derived
statistic the dashboard and progress views display.
"""

import logging

from weight_loss_tracker.domain.progress import DashboardReport
from weight_loss_tracker.infrastructure.storage.entry_store import EntryStore
from weight_loss_tracker.services import progress
from weight_loss_tracker.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)


class DashboardService:
    """Service building dashboard snapshots from the entry store."""

    def __init__(self, store: EntryStore) -> None:
        """
        Initialize dashboard service.

        Args:
            store: Entry store to read from.
        """
        self.store = store

    def build_report(self) -> DashboardReport:
        """
        Build a dashboard snapshot.

        Returns:
            Report with None for every statistic that has no data yet.

        Raises:
            ValidationError: If no goal is set.
        """
        goal = self.store.load_goal()
        if goal is None:
            raise ValidationError("Set your goals first")

        entries = self.store.load_entries()
        latest = progress.latest_entry(entries)

        report = DashboardReport(
            goal=goal,
            latest=latest,
            overall_progress_pct=progress.overall_progress_percent(goal, latest),
            weight_progress_pct=progress.weight_progress_percent(goal, latest),
            waist_progress_pct=progress.waist_progress_percent(goal, latest),
            stats=progress.summary_stats(goal, entries),
            history=progress.sort_entries(entries, descending=True),
            weight_series=list(progress.weight_series(goal, entries)),
            waist_series=list(progress.waist_series(goal, entries)),
            habits=progress.habit_scores(latest),
            self_assessment=progress.self_assessment_scores(latest),
        )

        logger.info(f"Built dashboard report over {len(entries)} entries")
        return report
