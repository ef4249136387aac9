"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Each class maps to a table and uses relationships where appropriate.
"""

from datetime import datetime, time, timezone
from enum import Enum
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel


class DayOfWeek(str, Enum):
    """Weekdays in Monday-first order; iteration order is display order."""
    monday = "Monday"
    tuesday = "Tuesday"
    wednesday = "Wednesday"
    thursday = "Thursday"
    friday = "Friday"
    saturday = "Saturday"
    sunday = "Sunday"


DAY_ORDER = {day: index for index, day in enumerate(DayOfWeek)}


class User(SQLModel, table=True):
    """A registered user.

    Fields:
    - `email`: unique login name, stored lower-cased
    - `password_hash`: hashed password string (never store plaintext)
    - `daily_focus_hours`: hours per day declared on the last generation
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False)
    email: str = Field(index=True, nullable=False, unique=True)
    password_hash: str
    daily_focus_hours: Optional[float] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    schedule_items: List["ScheduleItem"] = Relationship(back_populates="user")


class ScheduleItem(SQLModel, table=True):
    """One planned study block belonging to a `User`.

    The whole set for a user is replaced on every generation.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True, nullable=False)
    day_of_week: DayOfWeek = Field(nullable=False)
    start_time: time = Field(nullable=False)
    end_time: time = Field(nullable=False)
    subject: str = Field(nullable=False)
    user: Optional[User] = Relationship(back_populates="schedule_items")


class UserStreak(SQLModel, table=True):
    """Current and longest study streak for a user (read-only here)."""
    user_id: int = Field(foreign_key="user.id", primary_key=True)
    streak_count: int = 0
    longest_streak: int = 0
