"""
Derived progress value objects.

Display-ready statistics and chart series computed from a goal record and
the weekly entries. Undefined values are None, never NaN or Infinity.
"""

from collections.abc import Callable, Iterator, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict

from weight_loss_tracker.domain.goal import GoalRecord
from weight_loss_tracker.domain.weekly_entry import WeeklyEntry
from weight_loss_tracker.utils.timezone_utils import short_label


class SummaryStats(BaseModel):
    """Totals and per-week averages relative to the goal's initial values."""

    current_weight: float
    current_waist: float
    total_weight_lost: float
    total_waist_lost: float
    weeks_logged: int
    avg_weight_loss_per_week: float | None
    avg_waist_loss_per_week: float | None

    model_config = ConfigDict(frozen=True)


class SeriesPoint(BaseModel):
    """One chart point."""

    label: str
    measured_value: float
    target_value: float

    model_config = ConfigDict(frozen=True)


class HabitScores(BaseModel):
    """Habit signals normalized to a 0-100 scale."""

    activity: float
    sleep: float
    meditation: float
    water: float
    error_control: float

    model_config = ConfigDict(frozen=True)


class SelfAssessmentScores(BaseModel):
    """Self-reported perceptions mapped to a 0-100 scale."""

    body_weight_perception: float
    energy: float
    sugar_control: float

    model_config = ConfigDict(frozen=True)


class ChartSeries:
    """
    Chart series over weekly entries.

    Iteration is lazy and can be repeated; each pass yields one point per
    entry in ascending date order.
    """

    def __init__(
        self,
        name: str,
        entries: Sequence[WeeklyEntry],
        measure: Callable[[WeeklyEntry], float],
        target_value: float,
        axis_domain: tuple[float, float],
    ) -> None:
        """
        Initialize chart series.

        Args:
            name: Series name ("weight" or "waist").
            entries: Entries already sorted by ascending date.
            measure: Extracts the measured value from an entry.
            target_value: Constant target line value.
            axis_domain: Suggested (min, max) for the value axis.
        """
        self.name = name
        self._entries = entries
        self._measure = measure
        self.target_value = target_value
        self.axis_domain = axis_domain

    def __iter__(self) -> Iterator[SeriesPoint]:
        for entry in self._entries:
            yield SeriesPoint(
                label=short_label(entry.date),
                measured_value=self._measure(entry),
                target_value=self.target_value,
            )

    def __len__(self) -> int:
        return len(self._entries)

    def to_records(self) -> list[dict[str, Any]]:
        """Materialize the series as a list of dictionaries."""
        return [point.model_dump() for point in self]


class DashboardReport(BaseModel):
    """Snapshot of everything the dashboard and progress views display."""

    goal: GoalRecord
    latest: WeeklyEntry | None
    overall_progress_pct: float | None
    weight_progress_pct: float | None
    waist_progress_pct: float | None
    stats: SummaryStats | None
    history: list[WeeklyEntry]
    weight_series: list[SeriesPoint]
    waist_series: list[SeriesPoint]
    habits: HabitScores | None
    self_assessment: SelfAssessmentScores | None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dictionary."""
        return self.model_dump(mode="json")
