from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TimetableRecord(BaseModel):
    """One row as fetched from the remote timetable service."""

    model_config = ConfigDict(frozen=True)

    date: str | None = None          # YYYYMMDD
    grade: str | None = None
    class_number: str | None = None
    period: str | None = None
    raw_subject: str | None = None


class OverrideLayer(str, Enum):
    date = "date"
    weekly = "weekly"
    replace = "replace"


class ResolvedPeriod(BaseModel):
    period: str
    raw_subject: str | None
    display_text: str
    edited: bool
    layer: OverrideLayer | None = None


class TimetableFeed(BaseModel):
    day: date
    school_code: str
    grade: str
    class_number: str
    weekday: int
    count: int
    periods: list[ResolvedPeriod]


NUMBER = r"^\d{1,2}$"


class OverrideTarget(BaseModel):
    """Identifies the record an override applies to.

    Period, grade and class become "|"-separated key parts, so they are digits only.
    """

    day: date
    period: str = Field(..., pattern=NUMBER)
    raw_subject: str | None = None
    # the fetched row may carry its own grade/class; default to the current selection
    record_grade: str | None = Field(None, pattern=NUMBER)
    record_class_number: str | None = Field(None, pattern=NUMBER)


class OverrideIn(OverrideTarget):
    mode: OverrideLayer
    text: str = Field(..., max_length=120)


class OverrideDelete(OverrideTarget):
    mode: OverrideLayer


class OverrideMapsOut(BaseModel):
    date: dict[str, str]
    weekly: dict[str, str]
    replace: dict[str, str]
