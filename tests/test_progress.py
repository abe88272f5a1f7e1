"""Unit tests for the progress calculator."""

import logging
import math
from datetime import date

import pytest

from weight_loss_tracker.domain.goal import GoalRecord
from weight_loss_tracker.domain.weekly_entry import Perception, SugarCraving, WeeklyEntry
from weight_loss_tracker.services import progress


def make_goal(**overrides: float) -> GoalRecord:
    fields = {
        "start_date": date(2024, 1, 1),
        "end_date": date(2024, 6, 30),
        "initial_weight": 80.0,
        "target_weight": 70.0,
        "initial_waist": 100.0,
        "target_waist": 90.0,
        "height": 170.0,
    }
    fields.update(overrides)
    return GoalRecord(**fields)


def make_entry(entry_id: str, day: date, weight: float = 75.0, waist: float = 95.0, **kwargs) -> WeeklyEntry:
    return WeeklyEntry(id=entry_id, date=day, weight=weight, waist=waist, **kwargs)


def test_latest_entry_picks_max_date() -> None:
    """Test that the latest entry is chosen by date, not position."""
    entries = [
        make_entry("jan1", date(2024, 1, 1)),
        make_entry("jan15", date(2024, 1, 15)),
        make_entry("jan8", date(2024, 1, 8)),
    ]

    latest = progress.latest_entry(entries)

    if latest is None or latest.id != "jan15":
        raise AssertionError(f"Expected jan15, got {latest}")


def test_latest_entry_tie_goes_to_last_inserted() -> None:
    """Test that equal dates resolve to the most recently inserted entry."""
    entries = [
        make_entry("first", date(2024, 1, 8)),
        make_entry("second", date(2024, 1, 8)),
        make_entry("older", date(2024, 1, 1)),
    ]

    latest = progress.latest_entry(entries)

    if latest is None or latest.id != "second":
        raise AssertionError(f"Expected second, got {latest}")


def test_sort_entries_descending_keeps_latest_first_on_ties() -> None:
    """Test the descending sort matches latest_entry on ties."""
    entries = [
        make_entry("first", date(2024, 1, 8)),
        make_entry("second", date(2024, 1, 8)),
    ]

    ordered = progress.sort_entries(entries, descending=True)

    if ordered[0].id != progress.latest_entry(entries).id:
        raise AssertionError(f"Expected descending head to equal latest, got {ordered}")


def test_weight_progress_half_way() -> None:
    """Test weight progress for the midpoint between initial and target."""
    goal = make_goal()
    latest = make_entry("a", date(2024, 2, 1), weight=75.0)

    pct = progress.weight_progress_percent(goal, latest)

    if pct != 50.0:
        raise AssertionError(f"Expected 50.0, got {pct}")


@pytest.mark.parametrize("weight,waist", [(60.0, 80.0), (95.0, 120.0), (60.0, 120.0), (1.0, 500.0)])
def test_overall_progress_is_clamped(weight: float, waist: float) -> None:
    """Test that overshooting or regressing never leaves [0, 100]."""
    goal = make_goal()
    latest = make_entry("a", date(2024, 2, 1), weight=weight, waist=waist)

    pct = progress.overall_progress_percent(goal, latest)

    if pct is None or not 0.0 <= pct <= 100.0:
        raise AssertionError(f"Expected value in [0, 100], got {pct}")


def test_overall_progress_clamps_before_averaging() -> None:
    """Test that an overshoot on one measure cannot offset a regression on the other."""
    goal = make_goal()
    latest = make_entry("a", date(2024, 2, 1), weight=60.0, waist=105.0)

    pct = progress.overall_progress_percent(goal, latest)

    if pct != 50.0:
        raise AssertionError(f"Expected (100 + 0) / 2 = 50.0, got {pct}")


def test_progress_undefined_when_initial_equals_target() -> None:
    """Test that a zero span yields None instead of a division error."""
    goal = make_goal(target_weight=80.0)
    latest = make_entry("a", date(2024, 2, 1), weight=75.0, waist=95.0)

    if progress.weight_progress_percent(goal, latest) is not None:
        raise AssertionError("Expected undefined weight progress")

    overall = progress.overall_progress_percent(goal, latest)
    if overall != 50.0:
        raise AssertionError(f"Expected overall to fall back to waist progress 50.0, got {overall}")

    both_undefined = make_goal(target_weight=80.0, target_waist=100.0)
    if progress.overall_progress_percent(both_undefined, latest) is not None:
        raise AssertionError("Expected undefined overall progress")


def test_empty_entries_return_no_data() -> None:
    """Test that every derivation tolerates an empty entry list."""
    goal = make_goal()
    latest = progress.latest_entry([])

    results = {
        "latest_entry": latest,
        "overall_progress_percent": progress.overall_progress_percent(goal, latest),
        "summary_stats": progress.summary_stats(goal, []),
        "habit_scores": progress.habit_scores(latest),
        "self_assessment_scores": progress.self_assessment_scores(latest),
    }
    for name, value in results.items():
        if value is not None:
            raise AssertionError(f"Expected None from {name}, got {value}")

    if list(progress.weight_series(goal, [])) != []:
        raise AssertionError("Expected an empty weight series")
    if progress.rolling_average([], "weight") != []:
        raise AssertionError("Expected an empty rolling average")


def test_summary_stats() -> None:
    """Test totals and per-entry averages."""
    goal = make_goal()
    entries = [
        make_entry("b", date(2024, 1, 15), weight=76.0, waist=96.0),
        make_entry("a", date(2024, 1, 8), weight=78.0, waist=98.0),
    ]

    stats = progress.summary_stats(goal, entries)

    if stats is None:
        raise AssertionError("Expected summary stats")
    if stats.current_weight != 76.0 or stats.current_waist != 96.0:
        raise AssertionError(f"Expected current values from latest entry, got {stats}")
    if stats.total_weight_lost != 4.0 or stats.total_waist_lost != 4.0:
        raise AssertionError(f"Expected 4.0 lost, got {stats}")
    if stats.weeks_logged != 2:
        raise AssertionError(f"Expected 2 weeks logged, got {stats.weeks_logged}")
    if stats.avg_weight_loss_per_week != 2.0 or stats.avg_waist_loss_per_week != 2.0:
        raise AssertionError(f"Expected 2.0 average per week, got {stats}")


def test_summary_stats_without_goal() -> None:
    """Test that no goal means no statistics."""
    entries = [make_entry("a", date(2024, 1, 8))]

    if progress.summary_stats(None, entries) is not None:
        raise AssertionError("Expected None without a goal")


def test_weight_series_is_sorted_and_restartable() -> None:
    """Test series order, labels, target values and repeated iteration."""
    goal = make_goal()
    entries = [
        make_entry("c", date(2024, 1, 15), weight=77.0),
        make_entry("a", date(2024, 1, 1), weight=80.0),
        make_entry("b", date(2024, 1, 8), weight=78.5),
    ]

    series = progress.weight_series(goal, entries)
    first_pass = list(series)
    second_pass = list(series)

    labels = [p.label for p in first_pass]
    values = [p.measured_value for p in first_pass]
    if labels != ["Jan 1", "Jan 8", "Jan 15"]:
        raise AssertionError(f"Unexpected labels {labels}")
    if values != [80.0, 78.5, 77.0]:
        raise AssertionError(f"Unexpected values {values}")
    if any(p.target_value != 70.0 for p in first_pass):
        raise AssertionError("Expected constant target value 70.0")
    if first_pass != second_pass:
        raise AssertionError("Expected the series to be restartable")
    if len(series) != 3:
        raise AssertionError(f"Expected len 3, got {len(series)}")
    if series.axis_domain != (68.0, 82.0):
        raise AssertionError(f"Unexpected axis domain {series.axis_domain}")


def test_waist_series_targets_waist() -> None:
    """Test that the waist series measures waist against the waist target."""
    goal = make_goal()
    entries = [make_entry("a", date(2024, 3, 5), waist=97.5)]

    points = progress.waist_series(goal, entries).to_records()

    if points != [{"label": "Mar 5", "measured_value": 97.5, "target_value": 90.0}]:
        raise AssertionError(f"Unexpected waist points {points}")


def test_habit_scores() -> None:
    """Test habit normalization."""
    entry = make_entry(
        "a",
        date(2024, 1, 8),
        sleep=8,
        water=2.5,
        physical_activity=True,
        meditation=False,
        errors=1,
    )

    scores = progress.habit_scores(entry)

    expected = {"activity": 100.0, "sleep": 100.0, "meditation": 0.0, "water": 100.0, "error_control": 80.0}
    if scores is None or scores.model_dump() != expected:
        raise AssertionError(f"Expected {expected}, got {scores}")


def test_habit_scores_are_capped() -> None:
    """Test that habit scores stay within [0, 100]."""
    entry = make_entry("a", date(2024, 1, 8), sleep=12, water=4, errors=9)

    scores = progress.habit_scores(entry)

    if scores is None:
        raise AssertionError("Expected habit scores")
    if scores.sleep != 100.0 or scores.water != 100.0 or scores.error_control != 0.0:
        raise AssertionError(f"Expected capped scores, got {scores}")
    if not math.isclose(progress.habit_scores(make_entry("b", date(2024, 1, 8), sleep=4)).sleep, 50.0):
        raise AssertionError("Expected 4 hours of sleep to score 50")


@pytest.mark.parametrize(
    "perception,energy,craving,expected",
    [
        (Perception.HIGH, Perception.LOW, SugarCraving.NONE, (100.0, 0.0, 100.0)),
        (Perception.MEDIUM, Perception.HIGH, SugarCraving.LITTLE, (50.0, 100.0, 75.0)),
        (Perception.LOW, Perception.MEDIUM, SugarCraving.FREQUENT, (0.0, 50.0, 25.0)),
        (Perception.LOW, Perception.LOW, SugarCraving.CONSTANT, (0.0, 0.0, 0.0)),
    ],
)
def test_self_assessment_scores(
    perception: Perception, energy: Perception, craving: SugarCraving, expected: tuple
) -> None:
    """Test the perception and craving scales."""
    entry = make_entry(
        "a",
        date(2024, 1, 8),
        body_weight_perception=perception,
        energy=energy,
        sugar_craving=craving,
    )

    scores = progress.self_assessment_scores(entry)

    actual = (scores.body_weight_perception, scores.energy, scores.sugar_control)
    if actual != expected:
        raise AssertionError(f"Expected {expected}, got {actual}")


def test_malformed_raw_items_are_skipped(caplog: pytest.LogCaptureFixture) -> None:
    """Test that malformed stored items are excluded and logged."""
    goal = make_goal()
    raw = [
        {"id": "a", "date": "2024-01-01", "weight": 80, "waist": 100},
        {"id": "bad", "date": "2024-01-08", "weight": "heavy", "waist": 99},
        {"id": "c", "date": "2024-01-15", "weight": 78, "waist": 98},
    ]

    with caplog.at_level(logging.WARNING, logger="weight_loss_tracker"):
        values = [p.measured_value for p in progress.weight_series(goal, raw)]

    if values != [80.0, 78.0]:
        raise AssertionError(f"Expected malformed item skipped, got {values}")
    if "Skipping malformed weekly entry" not in caplog.text:
        raise AssertionError("Expected the skip to be logged")


def test_rolling_average() -> None:
    """Test the trailing rolling mean over date-sorted entries."""
    entries = [
        make_entry("c", date(2024, 1, 15), weight=77.0),
        make_entry("a", date(2024, 1, 1), weight=80.0),
        make_entry("b", date(2024, 1, 8), weight=78.0),
    ]

    values = [p["value"] for p in progress.rolling_average(entries, "weight", window=2)]

    if values != [80.0, 79.0, 77.5]:
        raise AssertionError(f"Expected [80.0, 79.0, 77.5], got {values}")


def test_rolling_average_rejects_unknown_field() -> None:
    """Test that only measurements can be averaged."""
    with pytest.raises(ValueError):
        progress.rolling_average([], "sleep")
