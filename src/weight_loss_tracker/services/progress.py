"""
Progress calculator.

Pure functions deriving display statistics and chart series from a goal
record and weekly entries. No function raises on empty input or returns
NaN/Infinity: the "no data" and "undefined" result is None.

Entry order is never assumed. Every function sorts explicitly: ascending
by date for series, and "latest" means maximum date with ties going to
the most recently inserted entry.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

import pandas as pd

from weight_loss_tracker.domain.goal import GoalRecord
from weight_loss_tracker.domain.progress import (
    ChartSeries,
    HabitScores,
    SelfAssessmentScores,
    SummaryStats,
)
from weight_loss_tracker.domain.weekly_entry import (
    Perception,
    SugarCraving,
    WeeklyEntry,
    parse_entries,
)
from weight_loss_tracker.utils.timezone_utils import short_label

logger = logging.getLogger(__name__)

EntryInput = Iterable[WeeklyEntry | Mapping[str, Any]]

SLEEP_TARGET_HOURS = 8.0
WATER_TARGET_LITERS = 2.5
ERROR_PENALTY = 20.0

WEIGHT_AXIS_MARGIN = 2.0
WAIST_AXIS_MARGIN = 5.0

PERCEPTION_SCORES = {
    Perception.HIGH: 100.0,
    Perception.MEDIUM: 50.0,
    Perception.LOW: 0.0,
}

# Less craving scores higher.
SUGAR_CRAVING_SCORES = {
    SugarCraving.NONE: 100.0,
    SugarCraving.LITTLE: 75.0,
    SugarCraving.FREQUENT: 25.0,
    SugarCraving.CONSTANT: 0.0,
}


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _finite_or_none(value: float | None) -> float | None:
    if value is None or not math.isfinite(value):
        return None
    return value


def sort_entries(entries: EntryInput, descending: bool = False) -> list[WeeklyEntry]:
    """
    Sort entries by date.

    The sort is stable: ascending keeps insertion order among equal dates,
    descending puts the most recently inserted entry first among equal dates.

    Args:
        entries: Weekly entries (raw mappings are parsed, malformed ones skipped).
        descending: Newest first when True.

    Returns:
        New sorted list.
    """
    ordered = sorted(parse_entries(entries), key=lambda e: e.date)
    if descending:
        ordered.reverse()
    return ordered


def latest_entry(entries: EntryInput) -> WeeklyEntry | None:
    """
    Get the entry with the latest date.

    Ties go to the entry inserted last.

    Returns:
        Latest entry, or None if there are no entries.
    """
    items = parse_entries(entries)
    if not items:
        return None
    _, latest = max(enumerate(items), key=lambda pair: (pair[1].date, pair[0]))
    return latest


def progress_percent(initial: float, current: float, target: float) -> float | None:
    """
    Percentage of the way from initial to target, clamped to [0, 100].

    Overshooting the target reports 100 and regressing past the initial
    value reports 0.

    Returns:
        Percentage, or None when initial equals target or an input is not finite.
    """
    if not all(math.isfinite(v) for v in (initial, current, target)):
        return None

    span = initial - target
    if span == 0:
        return None

    return _clamp((initial - current) / span * 100.0)


def weight_progress_percent(goal: GoalRecord | None, latest: WeeklyEntry | None) -> float | None:
    """Weight progress percentage for the latest entry."""
    if goal is None or latest is None:
        return None
    return progress_percent(goal.initial_weight, latest.weight, goal.target_weight)


def waist_progress_percent(goal: GoalRecord | None, latest: WeeklyEntry | None) -> float | None:
    """Waist progress percentage for the latest entry."""
    if goal is None or latest is None:
        return None
    return progress_percent(goal.initial_waist, latest.waist, goal.target_waist)


def overall_progress_percent(goal: GoalRecord | None, latest: WeeklyEntry | None) -> float | None:
    """
    Average of weight and waist progress, each clamped before averaging.

    When only one of the two is defined it is returned alone.

    Args:
        goal: Goal record.
        latest: Latest weekly entry.

    Returns:
        Percentage in [0, 100], or None if neither component is defined.
    """
    components = [
        pct
        for pct in (weight_progress_percent(goal, latest), waist_progress_percent(goal, latest))
        if pct is not None
    ]
    if not components:
        return None
    return sum(components) / len(components)


def summary_stats(goal: GoalRecord | None, entries: EntryInput) -> SummaryStats | None:
    """
    Totals lost and per-week averages.

    Averages divide by the number of logged entries, not by elapsed
    calendar weeks.

    Args:
        goal: Goal record.
        entries: Weekly entries in any order.

    Returns:
        Summary statistics, or None without a goal or entries.
    """
    items = parse_entries(entries)
    latest = latest_entry(items)
    if goal is None or latest is None:
        return None

    weeks_logged = len(items)
    weight_lost = _finite_or_none(goal.initial_weight - latest.weight)
    waist_lost = _finite_or_none(goal.initial_waist - latest.waist)
    if weight_lost is None or waist_lost is None:
        logger.warning("Goal or latest entry holds non-finite measurements")
        return None

    return SummaryStats(
        current_weight=latest.weight,
        current_waist=latest.waist,
        total_weight_lost=weight_lost,
        total_waist_lost=waist_lost,
        weeks_logged=weeks_logged,
        avg_weight_loss_per_week=weight_lost / weeks_logged if weeks_logged else None,
        avg_waist_loss_per_week=waist_lost / weeks_logged if weeks_logged else None,
    )


def weight_series(goal: GoalRecord, entries: EntryInput) -> ChartSeries:
    """Weight over time against the constant target weight."""
    return ChartSeries(
        name="weight",
        entries=sort_entries(entries),
        measure=lambda e: e.weight,
        target_value=goal.target_weight,
        axis_domain=(
            goal.target_weight - WEIGHT_AXIS_MARGIN,
            goal.initial_weight + WEIGHT_AXIS_MARGIN,
        ),
    )


def waist_series(goal: GoalRecord, entries: EntryInput) -> ChartSeries:
    """Waist over time against the constant target waist."""
    return ChartSeries(
        name="waist",
        entries=sort_entries(entries),
        measure=lambda e: e.waist,
        target_value=goal.target_waist,
        axis_domain=(
            goal.target_waist - WAIST_AXIS_MARGIN,
            goal.initial_waist + WAIST_AXIS_MARGIN,
        ),
    )


def habit_scores(latest: WeeklyEntry | None) -> HabitScores | None:
    """
    Normalize the five habit signals of an entry to 0-100.

    Returns:
        Habit scores, or None without an entry.
    """
    if latest is None:
        return None

    return HabitScores(
        activity=100.0 if latest.physical_activity else 0.0,
        sleep=min(100.0, latest.sleep / SLEEP_TARGET_HOURS * 100.0),
        meditation=100.0 if latest.meditation else 0.0,
        water=min(100.0, latest.water / WATER_TARGET_LITERS * 100.0),
        error_control=max(0.0, 100.0 - latest.errors * ERROR_PENALTY),
    )


def self_assessment_scores(latest: WeeklyEntry | None) -> SelfAssessmentScores | None:
    """
    Map an entry's self-reported perceptions to 0-100.

    Returns:
        Self-assessment scores, or None without an entry.
    """
    if latest is None:
        return None

    return SelfAssessmentScores(
        body_weight_perception=PERCEPTION_SCORES[latest.body_weight_perception],
        energy=PERCEPTION_SCORES[latest.energy],
        sugar_control=SUGAR_CRAVING_SCORES[latest.sugar_craving],
    )


def rolling_average(entries: EntryInput, field: str = "weight", window: int = 3) -> list[dict[str, Any]]:
    """
    Trailing rolling mean of a measurement over date-sorted entries.

    The first points average over however many entries exist so far.

    Args:
        entries: Weekly entries in any order.
        field: Measurement to average ("weight" or "waist").
        window: Number of entries per window.

    Returns:
        One {"date", "label", "value"} dictionary per entry, ascending by date.

    Raises:
        ValueError: If field is not a measurement or window is not positive.
    """
    if field not in ("weight", "waist"):
        raise ValueError(f"Unsupported field for rolling average: {field}")
    if window < 1:
        raise ValueError(f"Window must be positive, got {window}")

    ordered = sort_entries(entries)
    if not ordered:
        return []

    df = pd.DataFrame(
        {
            "date": [e.date for e in ordered],
            "value": [getattr(e, field) for e in ordered],
        }
    )
    df["value"] = df["value"].rolling(window=window, min_periods=1).mean().round(2)

    return [
        {"date": row.date.isoformat(), "label": short_label(row.date), "value": float(row.value)}
        for row in df.itertuples(index=False)
    ]
