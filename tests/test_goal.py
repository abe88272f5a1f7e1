"""Unit tests for goal validation and the goal service."""

from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError

from weight_loss_tracker.domain.goal import GoalRecord, validate_goal
from weight_loss_tracker.infrastructure.storage.backends import InMemoryBackend
from weight_loss_tracker.infrastructure.storage.entry_store import EntryStore
from weight_loss_tracker.services.goals import GoalService
from weight_loss_tracker.utils.exceptions import ValidationError


def valid_goal_data() -> dict:
    return {
        "start_date": "2024-01-01",
        "end_date": "2024-06-30",
        "initial_weight": 80.0,
        "target_weight": 70.0,
        "initial_waist": 95.0,
        "target_waist": 85.0,
        "height": 170.0,
    }


def test_validate_goal_accepts_valid_goal() -> None:
    """Test that a complete, well-ordered goal validates."""
    goal = validate_goal(valid_goal_data())

    if goal.start_date != date(2024, 1, 1):
        raise AssertionError(f"Expected start_date 2024-01-01, got {goal.start_date}")
    if goal.weight_to_lose != 10.0:
        raise AssertionError(f"Expected weight_to_lose=10.0, got {goal.weight_to_lose}")
    if goal.waist_to_lose != 10.0:
        raise AssertionError(f"Expected waist_to_lose=10.0, got {goal.waist_to_lose}")


def test_validate_goal_accepts_camel_case_keys() -> None:
    """Test that stored camelCase keys are accepted."""
    goal = validate_goal(
        {
            "startDate": "2024-01-01",
            "endDate": "2024-01-01",
            "initialWeight": 80,
            "targetWeight": 70,
            "initialWaist": 95,
            "targetWaist": 85,
            "height": 170,
        }
    )

    if goal.end_date != goal.start_date:
        raise AssertionError("Expected equal start and end dates to be accepted")


def test_validate_goal_rejects_target_weight_not_below_initial() -> None:
    """Test that target weight must be below initial weight."""
    data = valid_goal_data()
    data["target_weight"] = 80.0

    with pytest.raises(ValidationError) as exc_info:
        validate_goal(data)

    if "target_weight must be lower than initial_weight" not in exc_info.value.problems:
        raise AssertionError(f"Unexpected problems: {exc_info.value.problems}")


def test_validate_goal_rejects_target_waist_not_below_initial() -> None:
    """Test that target waist must be below initial waist."""
    data = valid_goal_data()
    data["target_waist"] = 96.0

    with pytest.raises(ValidationError) as exc_info:
        validate_goal(data)

    if "target_waist must be lower than initial_waist" not in exc_info.value.problems:
        raise AssertionError(f"Unexpected problems: {exc_info.value.problems}")


def test_validate_goal_rejects_end_before_start() -> None:
    """Test that end date must not precede start date."""
    data = valid_goal_data()
    data["end_date"] = "2023-12-31"

    with pytest.raises(ValidationError) as exc_info:
        validate_goal(data)

    if "end_date must be on or after start_date" not in exc_info.value.problems:
        raise AssertionError(f"Unexpected problems: {exc_info.value.problems}")


def test_validate_goal_collects_every_problem() -> None:
    """Test that missing and non-positive fields are all reported."""
    data = valid_goal_data()
    del data["end_date"]
    data["height"] = 0
    data["initial_waist"] = None

    with pytest.raises(ValidationError) as exc_info:
        validate_goal(data)

    problems = exc_info.value.problems
    expected = ["end_date is required", "height must be greater than zero", "initial_waist is required"]
    for problem in expected:
        if problem not in problems:
            raise AssertionError(f"Expected '{problem}' in {problems}")


def test_save_goal_rejected_leaves_store_untouched() -> None:
    """Test that an invalid goal is not written."""
    backend = InMemoryBackend()
    service = GoalService(EntryStore(backend))

    data = valid_goal_data()
    data["target_weight"] = 85.0

    with pytest.raises(ValidationError):
        service.save_goal(data)

    if backend.data:
        raise AssertionError(f"Expected empty backend, got {backend.data}")


def test_save_goal_replaces_previous_goal() -> None:
    """Test that saving overwrites the goal wholesale."""
    service = GoalService(EntryStore(InMemoryBackend()))
    service.save_goal(valid_goal_data())

    data = valid_goal_data()
    data["target_weight"] = 65.0
    service.save_goal(data)

    goal = service.get_goal()
    if goal is None or goal.target_weight != 65.0:
        raise AssertionError(f"Expected target_weight=65.0, got {goal}")


def test_goal_record_accepts_browser_timestamps() -> None:
    """Test that full ISO timestamps are truncated to their date."""
    goal = GoalRecord.model_validate(
        {
            "startDate": "2024-01-15T03:00:00.000Z",
            "endDate": "2024-04-15T03:00:00.000Z",
            "initialWeight": 80,
            "targetWeight": 70,
            "initialWaist": 95,
            "targetWaist": 85,
            "height": 170,
        }
    )

    if goal.start_date != date(2024, 1, 15):
        raise AssertionError(f"Expected 2024-01-15, got {goal.start_date}")


def test_goal_record_rejects_infinite_values() -> None:
    """Test that a goal holding Infinity does not load."""
    data = {**valid_goal_data(), "initial_weight": float("inf")}

    with pytest.raises(PydanticValidationError):
        GoalRecord.model_validate(data)


def test_goal_record_resolves_timestamps_in_timezone() -> None:
    """Test that a stored local midnight maps back to the local day."""
    data = {
        **valid_goal_data(),
        "start_date": "2023-12-31T23:00:00.000Z",
        "end_date": "2024-06-29T22:00:00.000Z",
    }

    goal = GoalRecord.model_validate(data, context={"timezone": "Europe/Madrid"})

    if goal.start_date != date(2024, 1, 1):
        raise AssertionError(f"Expected 2024-01-01, got {goal.start_date}")
    if goal.end_date != date(2024, 6, 30):
        raise AssertionError(f"Expected 2024-06-30, got {goal.end_date}")
