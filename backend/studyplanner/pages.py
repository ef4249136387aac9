"""Server-rendered HTML pages.

Three small pages: login/register, the preference form and the
dashboard. Every user-supplied value goes through `html.escape`.
"""

from html import escape
from typing import Optional

from .schemas import DashboardOut

_STYLE = """
    body { font-family: Arial, sans-serif; margin: 32px; }
    a { color: #0a6; }
    .card { max-width: 640px; padding: 16px; border: 1px solid #ddd; border-radius: 8px; margin-bottom: 16px; }
    .error { color: #b00; }
    label { display: block; margin-top: 8px; }
    table { border-collapse: collapse; }
    td, th { padding: 4px 12px; border-bottom: 1px solid #eee; text-align: left; }
"""


def _page(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8" />
  <title>{escape(title)}</title>
  <style>{_STYLE}</style>
</head>
<body>
{body}
</body>
</html>
"""


def _error_block(error: Optional[str]) -> str:
    if not error:
        return ""
    return f'<p class="error">{escape(error)}</p>'


def render_auth_page(error: Optional[str] = None) -> str:
    """Login and register forms with an optional error message."""
    body = f"""
  <h1>Study Planner</h1>
  {_error_block(error)}
  <div class="card">
    <h2>Log in</h2>
    <form method="post" action="/login">
      <label>Email <input type="email" name="email" required /></label>
      <label>Password <input type="password" name="password" required /></label>
      <button type="submit">Log in</button>
    </form>
  </div>
  <div class="card">
    <h2>Register</h2>
    <form method="post" action="/register">
      <label>Name <input type="text" name="name" required /></label>
      <label>Email <input type="email" name="email" required /></label>
      <label>Password <input type="password" name="password" required /></label>
      <button type="submit">Create account</button>
    </form>
  </div>
"""
    return _page("Study Planner", body)


def render_form_page(error: Optional[str] = None) -> str:
    """Study preference form posted to `/form`."""
    body = f"""
  <h1>Your study preferences</h1>
  {_error_block(error)}
  <div class="card">
    <form method="post" action="/form">
      <label>Goal <input type="text" name="goal" required /></label>
      <label>Subjects (with priorities) <input type="text" name="subjects" required /></label>
      <label>Study methods <input type="text" name="methods" /></label>
      <label>Deadline (days) <input type="number" name="deadline" min="1" required /></label>
      <label>Daily time (hours) <input type="number" name="dailytime" min="0.5" step="0.5" required /></label>
      <label>Preferred time slots <input type="text" name="slots" /></label>
      <label>Flexibility <input type="text" name="flexibility" /></label>
      <label>Remarks <textarea name="remarks"></textarea></label>
      <button type="submit">Generate schedule</button>
    </form>
  </div>
  <p><a href="/dashboard">Dashboard</a> | <a href="/logout">Log out</a></p>
"""
    return _page("Study preferences", body)


def render_dashboard(view: DashboardOut) -> str:
    """Dashboard with the ordered weekly schedule and streak counters."""
    if view.schedule_items:
        rows = "\n".join(
            "      <tr><td>{day}</td><td>{start} - {end}</td><td>{subject}</td></tr>".format(
                day=escape(item.day_of_week.value),
                start=item.start_time.strftime("%H:%M"),
                end=item.end_time.strftime("%H:%M"),
                subject=escape(item.subject),
            )
            for item in view.schedule_items
        )
        schedule = f"""<table>
      <tr><th>Day</th><th>Time</th><th>Subject</th></tr>
{rows}
    </table>"""
    else:
        schedule = '<p>No schedule yet. <a href="/form">Generate one</a>.</p>'
    body = f"""
  <h1>Welcome, {escape(view.name)}</h1>
  <div class="card">
    <p>Focused time: {escape(view.focused_time)}</p>
    <p>Current streak: {view.streak_count} | Longest streak: {view.longest_streak}</p>
    <p><em>{escape(view.insight)}</em></p>
  </div>
  <div class="card">
    <h2>Weekly schedule</h2>
    {schedule}
  </div>
  <p><a href="/form">New schedule</a> | <a href="/logout">Log out</a></p>
"""
    return _page("Dashboard", body)
