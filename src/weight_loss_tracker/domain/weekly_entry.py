"""
Weekly entry domain model.

One week's measurements plus self-reported habit and mood fields.
Entries are immutable once created; the entry store owns the collection.
"""

import datetime as dt
import logging
import time
import uuid
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from weight_loss_tracker.utils.timezone_utils import parse_date

logger = logging.getLogger(__name__)


class Perception(str, Enum):
    """Three-level self perception scale."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SugarCraving(str, Enum):
    """Sugar craving frequency scale."""

    CONSTANT = "constant"
    FREQUENT = "frequent"
    LITTLE = "little"
    NONE = "none"


# Values written by the Spanish-language browser release.
LEGACY_PERCEPTION_VALUES = {"alta": "high", "media": "medium", "baja": "low"}
LEGACY_CRAVING_VALUES = {
    "permanente": "constant",
    "frecuente": "frequent",
    "poco": "little",
    "nada": "none",
}


def new_entry_id() -> str:
    """Generate an entry identifier: millisecond timestamp plus a random suffix."""
    return f"{time.time_ns() // 1_000_000}-{uuid.uuid4().hex[:8]}"


class WeeklyEntry(BaseModel):
    """Weekly measurements and habits."""

    id: str = Field(default_factory=new_entry_id, description="Opaque unique identifier")
    date: dt.date = Field(description="Measurement date")

    weight: float = Field(gt=0, description="Weight in kg")
    waist: float = Field(gt=0, description="Waist in cm")

    errors: int = Field(0, ge=0, description="Diet deviations during the week")
    physical_activity: bool = Field(False, alias="physicalActivity")
    sleep: float = Field(0.0, ge=0, description="Average sleep in hours")
    meditation: bool = False
    water: float = Field(0.0, ge=0, description="Daily water in liters")

    body_weight_perception: Perception = Field(
        Perception.MEDIUM, alias="bodyWeightPerception"
    )
    energy: Perception = Perception.MEDIUM
    sugar_craving: SugarCraving = Field(SugarCraving.LITTLE, alias="sugarCraving")

    model_config = ConfigDict(populate_by_name=True, frozen=True, allow_inf_nan=False)

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any, info: ValidationInfo) -> dt.date:
        return parse_date(value, (info.context or {}).get("timezone"))

    @field_validator("body_weight_perception", "energy", mode="before")
    @classmethod
    def _normalize_perception(cls, value: Any) -> Any:
        if isinstance(value, str):
            return LEGACY_PERCEPTION_VALUES.get(value.strip().lower(), value.strip().lower())
        return value

    @field_validator("sugar_craving", mode="before")
    @classmethod
    def _normalize_craving(cls, value: Any) -> Any:
        if isinstance(value, str):
            return LEGACY_CRAVING_VALUES.get(value.strip().lower(), value.strip().lower())
        return value

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stored JSON shape (camelCase keys, ISO dates)."""
        return self.model_dump(mode="json", by_alias=True)


def parse_entries(
    items: Iterable[WeeklyEntry | Mapping[str, Any]], timezone: str | None = None
) -> list[WeeklyEntry]:
    """
    Parse stored items into weekly entries.

    Items that fail to parse are skipped and logged; the rest of the batch
    is kept in its original order.

    Args:
        items: Weekly entries or raw mappings as read from storage.
        timezone: Timezone to resolve stored timestamps in.

    Returns:
        List of valid weekly entries.
    """
    entries: list[WeeklyEntry] = []

    for idx, item in enumerate(items):
        if isinstance(item, WeeklyEntry):
            entries.append(item)
            continue

        try:
            entries.append(WeeklyEntry.model_validate(item, context={"timezone": timezone}))
        except Exception as e:
            logger.warning(f"Skipping malformed weekly entry at position {idx}: {e}")
            continue

    return entries
