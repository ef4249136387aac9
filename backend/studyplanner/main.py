"""FastAPI application entrypoint and HTTP controllers.

This module defines the server-rendered routes of the study planner.
Controllers are intentionally thin: they read form fields, delegate to
services and turn domain errors into pages, redirects or plain-text
error responses.

Endpoints implemented:
- GET  /            login/register page
- POST /register
- POST /login
- GET  /logout
- GET  /form        preference form (session required)
- POST /form        generate and store a schedule (session required)
- GET  /dashboard   schedule, focus time and streaks (session required)
- GET  /health
"""

import json
import logging
import time
import uuid

from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from . import pages, services
from .auth import clear_session_cookie, get_current_identity, set_session_cookie
from .config import settings
from .database import create_db_and_tables, get_session
from .errors import (
    DuplicateEmailError,
    GenerationError,
    InvalidCredentialsError,
    NotFoundError,
    PersistenceError,
    SessionError,
    ValidationError,
)
from .generator import ScheduleGenerator, get_generator
from .schemas import SessionIdentity, StudyPreferences

app = FastAPI(title="Study Planner")
logger = logging.getLogger("studyplanner.api")
if not logging.getLogger().handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

GENERATION_FAILED = "An error occurred while generating the schedule."
INTERNAL_ERROR = "An internal server error occurred."

create_db_and_tables()


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    record = {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        "client": request.client.host if request.client else "unknown",
    }
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        record["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception("request_failed %s", json.dumps(record, ensure_ascii=True))
        raise
    response.headers["X-Request-ID"] = req_id
    record["status_code"] = response.status_code
    record["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info("request_done %s", json.dumps(record, ensure_ascii=True))
    return response


@app.exception_handler(SessionError)
def session_error_handler(request: Request, exc: SessionError):
    """Send unauthenticated requests back to the login page."""
    response = _redirect("/")
    clear_session_cookie(response)
    return response


def _redirect(url: str) -> RedirectResponse:
    # 303 so browsers follow a POST with a GET
    return RedirectResponse(url=url, status_code=303)


def _auth_page(error: str) -> HTMLResponse:
    return HTMLResponse(pages.render_auth_page(error))


@app.get("/", response_class=HTMLResponse)
def home():
    """Login/register page."""
    return pages.render_auth_page()


@app.post("/register")
def register(
    name: str | None = Form(default=None),
    email: str | None = Form(default=None),
    password: str | None = Form(default=None),
    db: Session = Depends(get_session),
):
    """Create an account, set the session cookie and go to the form."""
    logger.info("register attempt")
    try:
        token = services.AuthService(db).register(name, email, password)
    except (ValidationError, DuplicateEmailError) as e:
        return _auth_page(str(e))
    except SQLAlchemyError:
        logger.exception("register failed")
        return _auth_page(INTERNAL_ERROR)
    response = _redirect("/form")
    set_session_cookie(response, token)
    return response


@app.post("/login")
def login(
    email: str | None = Form(default=None),
    password: str | None = Form(default=None),
    db: Session = Depends(get_session),
):
    """Check credentials, set the session cookie and go to the dashboard."""
    logger.info("login attempt")
    try:
        token = services.AuthService(db).login(email, password)
    except (ValidationError, NotFoundError, InvalidCredentialsError) as e:
        return _auth_page(str(e))
    except SQLAlchemyError:
        logger.exception("login failed")
        return _auth_page(INTERNAL_ERROR)
    response = _redirect("/dashboard")
    set_session_cookie(response, token)
    return response


@app.get("/logout")
def logout():
    response = _redirect("/")
    clear_session_cookie(response)
    return response


@app.get("/form", response_class=HTMLResponse)
def preference_form(identity: SessionIdentity = Depends(get_current_identity)):
    """Render the study preference form."""
    return pages.render_form_page()


@app.post("/form")
def generate_schedule(
    goal: str | None = Form(default=None),
    subjects: str | None = Form(default=None),
    methods: str | None = Form(default=None),
    deadline: str | None = Form(default=None),
    remarks: str | None = Form(default=None),
    dailytime: str | None = Form(default=None),
    slots: str | None = Form(default=None),
    flexibility: str | None = Form(default=None),
    identity: SessionIdentity = Depends(get_current_identity),
    generator: ScheduleGenerator = Depends(get_generator),
    db: Session = Depends(get_session),
):
    """Generate a schedule from the submitted preferences and store it.

    The user id always comes from the session, never from the form.
    Generation finishes before the persistence transaction starts; a
    failure in either leaves the stored schedule as it was.
    """
    try:
        prefs = StudyPreferences(
            goal=goal,
            subjects=subjects,
            methods=methods,
            deadline=deadline,
            remarks=remarks,
            dailytime=dailytime,
            slots=slots,
            flexibility=flexibility,
        )
    except PydanticValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        message = f"Please check these fields: {', '.join(fields)}."
        return HTMLResponse(pages.render_form_page(message), status_code=400)

    logger.info("generating schedule for user %s", identity.user_id)
    try:
        entries = generator.generate(prefs)
        services.ScheduleService(db).replace_schedule(identity.user_id, entries, prefs.dailytime)
    except (GenerationError, PersistenceError, NotFoundError):
        logger.exception("schedule generation failed for user %s", identity.user_id)
        return PlainTextResponse(GENERATION_FAILED, status_code=500)
    logger.info("saved schedule for user %s, redirecting to /dashboard", identity.user_id)
    return _redirect("/dashboard")


@app.get("/dashboard", response_class=HTMLResponse)
def dashboard(identity: SessionIdentity = Depends(get_current_identity), db: Session = Depends(get_session)):
    """Render the user's schedule, focus time and streaks."""
    try:
        view = services.DashboardService(db).assemble(identity.user_id)
    except NotFoundError:
        return _redirect("/")
    except SQLAlchemyError:
        logger.exception("dashboard failed for user %s", identity.user_id)
        return PlainTextResponse("Error loading dashboard.", status_code=500)
    return pages.render_dashboard(view)


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
