"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories
and auxiliary logic. Services raise the exceptions from `errors`; the
controllers in `main` decide how each one is shown to the user.
"""

import logging
from typing import Sequence

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from . import models, repositories
from .auth import issue_session_token
from .database import transaction
from .errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .schemas import DashboardOut, ScheduleEntry, ScheduleItemOut

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

logger = logging.getLogger("studyplanner.schedule")
auth_logger = logging.getLogger("studyplanner.auth")


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """Registration and login; both return a signed session token."""
    def __init__(self, session: Session):
        self.session = session
        self.user_repo = repositories.UserRepository(session)

    def register(self, name: str, email: str, password: str) -> str:
        """Create a new user with a hashed password and return a session token.

        Raises `DuplicateEmailError` when the email is already taken; no
        second row is written in that case.
        """
        if not name or not name.strip() or not email or not email.strip() or not password:
            raise ValidationError("All fields are required.")
        email = normalize_email(email)
        if self.user_repo.get_by_email(email):
            raise DuplicateEmailError("User with this email already exists.")
        user = models.User(name=name.strip(), email=email, password_hash=PWD_CTX.hash(password))
        try:
            user = self.user_repo.create(user)
        except IntegrityError:
            # lost a race with a concurrent registration for the same email
            self.session.rollback()
            raise DuplicateEmailError("User with this email already exists.")
        auth_logger.info("registered user %s", user.id)
        return issue_session_token(user.id, user.name)

    def login(self, email: str, password: str) -> str:
        """Verify credentials and return a session token."""
        if not email or not email.strip() or not password:
            raise ValidationError("Email and password are required.")
        user = self.user_repo.get_by_email(normalize_email(email))
        if not user:
            raise NotFoundError("User not found.")
        if not PWD_CTX.verify(password, user.password_hash):
            raise InvalidCredentialsError("Incorrect password.")
        auth_logger.info("login successful for user %s", user.id)
        return issue_session_token(user.id, user.name)


class ScheduleService:
    """Atomically replace a user's schedule."""
    def __init__(self, session: Session):
        self.session = session

    def replace_schedule(self, user_id: int, entries: Sequence[ScheduleEntry], daily_hours: float) -> int:
        """Swap the user's schedule for `entries` and record `daily_hours`.

        Runs on a dedicated connection in one transaction: lock the user
        row, delete the old items, insert the new ones in order, update
        `daily_focus_hours`, commit. Any database failure rolls the whole
        thing back and is re-raised as `PersistenceError`, leaving the
        previous schedule untouched. Returns the number of items stored.
        """
        bind = self.session.get_bind()
        try:
            with transaction(bind) as tx:
                users = repositories.UserRepository(tx)
                items = repositories.ScheduleRepository(tx)
                user = users.get_for_update(user_id)
                if user is None:
                    raise NotFoundError(f"user {user_id} not found")
                removed = items.delete_for_user(user_id)
                added = items.add_entries(user_id, entries)
                user.daily_focus_hours = daily_hours
                tx.add(user)
        except SQLAlchemyError as e:
            logger.exception("schedule transaction rolled back for user %s", user_id)
            raise PersistenceError(f"could not save schedule for user {user_id}") from e
        logger.info("replaced schedule for user %s: removed=%d added=%d", user_id, removed, added)
        return added


class DashboardService:
    """Compose the dashboard read model from user, schedule and streak rows."""
    def __init__(self, session: Session):
        self.session = session
        self.user_repo = repositories.UserRepository(session)
        self.schedule_repo = repositories.ScheduleRepository(session)
        self.streak_repo = repositories.StreakRepository(session)

    def assemble(self, user_id: int) -> DashboardOut:
        """Return the dashboard for `user_id`.

        Raises `NotFoundError` for an unknown user instead of rendering an
        empty dashboard. A missing streak row reads as zero/zero.
        """
        user = self.user_repo.get(user_id)
        if not user:
            raise NotFoundError(f"user {user_id} not found")
        items = [ScheduleItemOut.model_validate(it) for it in self.schedule_repo.list_for_user(user_id)]
        streak = self.streak_repo.get(user_id)
        return DashboardOut(
            name=user.name,
            daily_focus_hours=user.daily_focus_hours,
            schedule_items=items,
            streak_count=streak.streak_count if streak else 0,
            longest_streak=streak.longest_streak if streak else 0,
        )
