from datetime import time

import pytest
from sqlmodel import Session

from studyplanner import models
from studyplanner.auth import issue_session_token
from studyplanner.config import settings
from studyplanner.errors import NotFoundError
from studyplanner.models import DayOfWeek
from studyplanner.schemas import DashboardOut, ScheduleEntry
from studyplanner.services import DashboardService, ScheduleService
from tests.conftest import make_user


def _entry(day, start, end, subject):
    return ScheduleEntry(day_of_week=day, start_time=start, end_time=end, subject=subject)


def test_items_ordered_monday_first_then_start_time(db_engine):
    user_id = make_user(db_engine)
    entries = [
        _entry(DayOfWeek.sunday, time(9), time(10), "Sun"),
        _entry(DayOfWeek.wednesday, time(14), time(15), "Wed late"),
        _entry(DayOfWeek.monday, time(18), time(19), "Mon late"),
        _entry(DayOfWeek.wednesday, time(8), time(9), "Wed early"),
        _entry(DayOfWeek.monday, time(7), time(8), "Mon early"),
        _entry(DayOfWeek.saturday, time(10), time(11), "Sat"),
    ]
    with Session(db_engine) as session:
        ScheduleService(session).replace_schedule(user_id, entries, 2)
        view = DashboardService(session).assemble(user_id)
    assert [i.subject for i in view.schedule_items] == [
        "Mon early", "Mon late", "Wed early", "Wed late", "Sat", "Sun",
    ]


def test_missing_streak_defaults_to_zero(db_engine):
    user_id = make_user(db_engine)
    with Session(db_engine) as session:
        view = DashboardService(session).assemble(user_id)
    assert (view.streak_count, view.longest_streak) == (0, 0)
    assert view.schedule_items == []
    assert view.focused_time == "N/A"
    assert view.insight == "Planning is the first step to success!"


def test_streak_row_is_read(db_engine):
    user_id = make_user(db_engine, daily_focus_hours=2.5)
    with Session(db_engine) as session:
        session.add(models.UserStreak(user_id=user_id, streak_count=3, longest_streak=9))
        session.commit()
        view = DashboardService(session).assemble(user_id)
    assert (view.streak_count, view.longest_streak) == (3, 9)
    assert view.focused_time == "2.5 Hours/Day"


def test_assemble_unknown_user_raises(db_engine):
    with Session(db_engine) as session:
        with pytest.raises(NotFoundError):
            DashboardService(session).assemble(42)


def test_dashboard_for_unknown_user_redirects(client):
    client.cookies.set(settings.SESSION_COOKIE_NAME, issue_session_token(42, "Ghost"))
    r = client.get("/dashboard", follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/"


def test_dashboard_page_escapes_user_text(client, db_engine):
    user_id = make_user(db_engine, name="<b>Ada</b>")
    with Session(db_engine) as session:
        ScheduleService(session).replace_schedule(
            user_id, [_entry(DayOfWeek.monday, time(9), time(10), "<script>x</script>")], 1)
    client.cookies.set(settings.SESSION_COOKIE_NAME, issue_session_token(user_id, "<b>Ada</b>"))
    r = client.get("/dashboard")
    assert r.status_code == 200
    assert "<script>x</script>" not in r.text
    assert "&lt;script&gt;" in r.text
    assert "&lt;b&gt;Ada&lt;/b&gt;" in r.text


def test_focused_time_formats_whole_hours():
    assert DashboardOut(name="Ada", daily_focus_hours=2.0).focused_time == "2 Hours/Day"
