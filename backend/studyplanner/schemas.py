"""Pydantic schemas used by the API and the schedule generator.

Schemas keep input/output shapes stable and provide validation for
controller handlers, model output and tests.
"""

from datetime import datetime, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .models import DayOfWeek

# "monday" and "mon" both map to DayOfWeek.monday
_DAY_ALIASES = {
    alias: day
    for day in DayOfWeek
    for alias in (day.value.lower(), day.value[:3].lower())
}


class StudyPreferences(BaseModel):
    """Preferences submitted on the schedule form."""
    goal: str = Field(min_length=1)
    subjects: str = Field(min_length=1)
    methods: str = ""
    deadline: int = Field(ge=1, le=366)
    dailytime: float = Field(gt=0, le=24)
    slots: str = ""
    remarks: str = ""
    flexibility: str = ""

    @field_validator("goal", "subjects", "methods", "slots", "remarks", "flexibility", mode="before")
    @classmethod
    def _strip_text(cls, v):
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v


class ScheduleEntry(BaseModel):
    """A single study block as produced by the model.

    Field aliases match the JSON keys requested in the prompt
    (`dayOfWeek`, `startTime`, `endTime`, `subject`).
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    day_of_week: DayOfWeek = Field(alias="dayOfWeek")
    start_time: time = Field(alias="startTime")
    end_time: time = Field(alias="endTime")
    subject: str = Field(min_length=1)

    @field_validator("day_of_week", mode="before")
    @classmethod
    def _parse_day(cls, v):
        if isinstance(v, DayOfWeek):
            return v
        if not isinstance(v, str) or v.strip().lower() not in _DAY_ALIASES:
            raise ValueError(f"unknown day of week: {v!r}")
        return _DAY_ALIASES[v.strip().lower()]

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_clock(cls, v):
        if isinstance(v, time):
            return v
        if not isinstance(v, str):
            raise ValueError("time must be a string in HH:MM format")
        try:
            return datetime.strptime(v.strip(), "%H:%M").time()
        except ValueError:
            raise ValueError(f"time must be in HH:MM format, got {v!r}")

    @field_validator("subject", mode="before")
    @classmethod
    def _strip_subject(cls, v):
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode="after")
    def _check_order(self):
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be later than startTime")
        return self


class SessionIdentity(BaseModel):
    """Claims carried by a verified session token."""
    user_id: int
    name: str


class ScheduleItemOut(BaseModel):
    """A stored schedule row as shown on the dashboard."""
    model_config = ConfigDict(from_attributes=True)

    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    subject: str


class DashboardOut(BaseModel):
    """Read model rendered on the dashboard page."""
    name: str
    daily_focus_hours: Optional[float] = None
    schedule_items: List[ScheduleItemOut] = Field(default_factory=list)
    streak_count: int = 0
    longest_streak: int = 0
    insight: str = "Planning is the first step to success!"

    @property
    def focused_time(self) -> str:
        if not self.daily_focus_hours:
            return "N/A"
        return f"{self.daily_focus_hours:g} Hours/Day"
