"""
Goal domain model and entry-time validation.

A goal record holds the program's start/end dates and the initial and
target body measurements. It is overwritten wholesale, never patched.
"""

import math
from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from weight_loss_tracker.utils.exceptions import ValidationError
from weight_loss_tracker.utils.timezone_utils import parse_date

MEASUREMENT_FIELDS = (
    "initial_weight",
    "target_weight",
    "initial_waist",
    "target_waist",
    "height",
)


class GoalRecord(BaseModel):
    """
    Weight loss program goal.

    The model only enforces structure. Bound checks (positive values,
    targets below initial values, ordered dates) live in validate_goal so
    that records already on disk can still be loaded and reported on.
    """

    start_date: date = Field(alias="startDate", description="Program start date")
    end_date: date = Field(alias="endDate", description="Program end date")
    initial_weight: float = Field(alias="initialWeight", description="Initial weight in kg")
    target_weight: float = Field(alias="targetWeight", description="Target weight in kg")
    initial_waist: float = Field(alias="initialWaist", description="Initial waist in cm")
    target_waist: float = Field(alias="targetWaist", description="Target waist in cm")
    height: float = Field(description="Height in cm (informational)")

    model_config = ConfigDict(populate_by_name=True, frozen=True, allow_inf_nan=False)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any, info: ValidationInfo) -> date:
        return parse_date(value, (info.context or {}).get("timezone"))

    @property
    def weight_to_lose(self) -> float:
        """Planned weight loss in kg."""
        return self.initial_weight - self.target_weight

    @property
    def waist_to_lose(self) -> float:
        """Planned waist reduction in cm."""
        return self.initial_waist - self.target_waist

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stored JSON shape (camelCase keys, ISO dates)."""
        return self.model_dump(mode="json", by_alias=True)


def _lookup(data: Mapping[str, Any], field_name: str) -> Any:
    if field_name in data:
        return data[field_name]
    alias = GoalRecord.model_fields[field_name].alias
    if alias and alias in data:
        return data[alias]
    return None


def validate_goal(goal: GoalRecord | Mapping[str, Any]) -> GoalRecord:
    """
    Validate a goal before it is persisted.

    Every problem is collected so the user sees them all at once.

    Args:
        goal: Goal record or mapping of field name (snake_case or camelCase) to value.

    Returns:
        The validated goal record.

    Raises:
        ValidationError: If a field is missing or a bound is violated.
    """
    data: Mapping[str, Any] = goal.model_dump() if isinstance(goal, GoalRecord) else goal
    problems: list[str] = []

    dates: dict[str, date] = {}
    for field_name in ("start_date", "end_date"):
        value = _lookup(data, field_name)
        if value is None or value == "":
            problems.append(f"{field_name} is required")
            continue
        try:
            dates[field_name] = parse_date(value)
        except ValueError:
            problems.append(f"{field_name} is not a valid date")

    if len(dates) == 2 and dates["end_date"] < dates["start_date"]:
        problems.append("end_date must be on or after start_date")

    numbers: dict[str, float] = {}
    for field_name in MEASUREMENT_FIELDS:
        value = _lookup(data, field_name)
        if value is None or value == "":
            problems.append(f"{field_name} is required")
            continue
        try:
            number = float(value)
        except (TypeError, ValueError):
            problems.append(f"{field_name} must be a number")
            continue
        if not math.isfinite(number) or number <= 0:
            problems.append(f"{field_name} must be greater than zero")
            continue
        numbers[field_name] = number

    if "initial_weight" in numbers and "target_weight" in numbers:
        if numbers["target_weight"] >= numbers["initial_weight"]:
            problems.append("target_weight must be lower than initial_weight")

    if "initial_waist" in numbers and "target_waist" in numbers:
        if numbers["target_waist"] >= numbers["initial_waist"]:
            problems.append("target_waist must be lower than initial_waist")

    if problems:
        raise ValidationError("Invalid goal: " + "; ".join(problems), problems)

    return GoalRecord(**dates, **numbers)
