"""Session token helpers and the FastAPI session dependency.

Session tokens are stateless: a signed JWT carrying the user id and
name with a one day expiry. Nothing is stored server side; expiry is
enforced here, on every request, by the verifier.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Request

from .config import settings
from .errors import InvalidOrExpiredSessionError, SessionError
from .schemas import SessionIdentity

SESSION_TTL = timedelta(days=1)

logger = logging.getLogger("studyplanner.auth")


def issue_session_token(user_id: int, name: str, expires_in: timedelta = SESSION_TTL, secret: Optional[str] = None) -> str:
    """Return a signed token for `user_id` valid for `expires_in`."""
    expire = datetime.now(timezone.utc) + expires_in
    payload = {"user_id": user_id, "name": name, "exp": int(expire.timestamp())}
    return jwt.encode(payload, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_session(token: str, secret: Optional[str] = None) -> SessionIdentity:
    """Decode and verify a session token.

    Returns the embedded identity, or raises `InvalidOrExpiredSessionError`
    when the signature, expiry or claims are not acceptable.
    """
    try:
        payload = jwt.decode(token, secret or settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise InvalidOrExpiredSessionError("session expired")
    except jwt.InvalidTokenError:
        raise InvalidOrExpiredSessionError("invalid session token")
    user_id = payload.get("user_id")
    name = payload.get("name")
    if not isinstance(user_id, int) or not isinstance(name, str):
        raise InvalidOrExpiredSessionError("invalid session payload")
    return SessionIdentity(user_id=user_id, name=name)


def get_current_identity(request: Request) -> SessionIdentity:
    """FastAPI dependency returning the identity behind the session cookie.

    Raises `SessionError` (handled in `main` as a redirect to the login
    page) when the cookie is missing or the token does not verify.
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise SessionError("missing session cookie")
    try:
        return verify_session(token)
    except InvalidOrExpiredSessionError as e:
        logger.info("rejected session for %s: %s", request.url.path, e)
        raise


def set_session_cookie(response, token: str):
    """Attach the session token as an HTTP-only, same-site strict cookie."""
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        max_age=int(SESSION_TTL.total_seconds()),
    )


def clear_session_cookie(response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
