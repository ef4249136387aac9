"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (users,
schedule items, streaks). `UserRepository.create` commits on its own;
the schedule methods only flush so they can run inside the caller's
transaction.
"""

from typing import Iterable, List, Optional

from sqlmodel import Session, delete, select

from . import models
from .schemas import ScheduleEntry


class UserRepository:
    """CRUD operations for `User` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance."""
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_by_email(self, email: str) -> Optional[models.User]:
        """Return a `User` by email or `None` if not found."""
        stmt = select(models.User).where(models.User.email == email)
        return self.session.exec(stmt).first()

    def get(self, user_id: int) -> Optional[models.User]:
        """Get a `User` by primary key."""
        return self.session.get(models.User, user_id)

    def get_for_update(self, user_id: int) -> Optional[models.User]:
        """Get a `User` and lock its row until the transaction ends.

        Concurrent schedule replacements for the same user queue up on
        this lock. SQLite ignores FOR UPDATE; there `delete_for_user` takes
        the write lock instead.
        """
        stmt = select(models.User).where(models.User.id == user_id).with_for_update()
        return self.session.exec(stmt).first()


class ScheduleRepository:
    """Query and replace helpers for `ScheduleItem` records."""
    def __init__(self, session: Session):
        self.session = session

    def list_for_user(self, user_id: int) -> List[models.ScheduleItem]:
        """Return the user's items ordered Monday first, then by start time."""
        stmt = select(models.ScheduleItem).where(models.ScheduleItem.user_id == user_id)
        items = self.session.exec(stmt).all()
        return sorted(items, key=lambda it: (models.DAY_ORDER[it.day_of_week], it.start_time, it.id))

    def delete_for_user(self, user_id: int) -> int:
        """Delete every item owned by `user_id`; returns the number removed.

        A single DELETE statement, so it takes the write lock and sees the
        rows committed by any transaction that held the lock before it.
        """
        stmt = delete(models.ScheduleItem).where(models.ScheduleItem.user_id == user_id)
        result = self.session.exec(stmt)
        return result.rowcount

    def add_entries(self, user_id: int, entries: Iterable[ScheduleEntry]) -> int:
        """Insert one row per entry, in the given order."""
        added = 0
        for entry in entries:
            self.session.add(models.ScheduleItem(
                user_id=user_id,
                day_of_week=entry.day_of_week,
                start_time=entry.start_time,
                end_time=entry.end_time,
                subject=entry.subject,
            ))
            # flush per row so ids follow array order
            self.session.flush()
            added += 1
        return added


class StreakRepository:
    """Read access to `UserStreak` rows."""
    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: int) -> Optional[models.UserStreak]:
        return self.session.get(models.UserStreak, user_id)
