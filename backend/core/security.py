# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Central security module.  Password hashing, login sessions and the auth
guards live here.  No other module should touch raw crypto directly.

Responsibilities
----------------
1. Password hashing / verification          (passlib pbkdf2_sha256)
2. Server-side sessions + signed ``sid``    (sessions table, PyJWT / HS256)
3. FastAPI dependency guards                (get_current_user, require_admin)

Session model
-------------
Each login inserts a ``sessions`` row keyed by a random opaque id.  The
browser receives that id in the ``sid`` cookie, wrapped in an HS256 token
signed with SESSION_SECRET so a forged or truncated cookie is rejected
before the database is consulted.  Every authenticated request pushes
``expires_at`` forward and re-issues the cookie (sliding 30-day expiry).
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt as _jwt        # PyJWT
from passlib.hash import pbkdf2_sha256 as _pbkdf2  # pure Python, no binary deps
from fastapi import Depends, Response
from fastapi.security import APIKeyCookie
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import Forbidden, Unauthorized
from database import get_db
from models.session import UserSession
from models.user import User

SESSION_COOKIE = "sid"

# ---------------------------------------------------------------------------
# 1.  pbkdf2_sha256 – password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """
    Hash a plaintext password with PBKDF2-SHA256.

    Returns the full passlib hash string e.g. ``"$pbkdf2-sha256$..."``; the
    salt is embedded inside it.
    """
    return _pbkdf2.using(rounds=settings.password_hash_rounds).hash(plain)


def verify_password(plain: str, stored_hash: str) -> bool:
    """
    Constant-time verification of a plaintext password against a
    pbkdf2_sha256 hash produced by :func:`hash_password`.
    """
    try:
        return _pbkdf2.verify(plain, stored_hash)
    except ValueError:
        # Not a pbkdf2 hash at all (e.g. a row imported from elsewhere)
        return False


# ---------------------------------------------------------------------------
# 2.  Sessions
# ---------------------------------------------------------------------------


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they were written as UTC.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _max_age() -> timedelta:
    return timedelta(days=settings.session_max_age_days)


def sign_session_id(session_id: str) -> str:
    return _jwt.encode({"sid": session_id}, settings.session_secret, algorithm="HS256")


def unsign_session_id(cookie_value: str) -> Optional[str]:
    """Return the session id inside a ``sid`` cookie, or None if it is forged."""
    try:
        payload = _jwt.decode(cookie_value, settings.session_secret, algorithms=["HS256"])
    except _jwt.InvalidTokenError:
        return None
    return payload.get("sid")


def create_session(db: Session, user: User) -> UserSession:
    """Persist a fresh session for *user*, pruning expired rows on the way."""
    db.query(UserSession).filter(UserSession.expires_at < _now()).delete(synchronize_session=False)

    session = UserSession(
        id=secrets.token_urlsafe(32),
        user_id=user.id,
        expires_at=_now() + _max_age(),
    )
    db.add(session)
    db.commit()
    return session


def destroy_session(db: Session, cookie_value: Optional[str]) -> None:
    session_id = unsign_session_id(cookie_value) if cookie_value else None
    if session_id:
        db.query(UserSession).filter(UserSession.id == session_id).delete(synchronize_session=False)
        db.commit()


def set_session_cookie(response: Response, session: UserSession) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        sign_session_id(session.id),
        max_age=int(_max_age().total_seconds()),
        httponly=True,
        secure=False,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE, path="/")


# ---------------------------------------------------------------------------
# 3.  FastAPI dependency guards
# ---------------------------------------------------------------------------

# auto_error=False so a missing cookie produces our own 401 message
session_cookie = APIKeyCookie(name=SESSION_COOKIE, auto_error=False)

_NOT_LOGGED_IN = "Not logged in"


def get_current_user(
    response: Response,
    cookie_value: Optional[str] = Depends(session_cookie),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency: resolve the ``sid`` cookie to a live session, load the User
    row, verify the account may still sign in, then slide the expiry.
    Returns the User ORM instance.

    Raises 401 if the cookie is missing / forged / expired or the user is
    gone, disabled or not (yet) approved.
    """
    session_id = unsign_session_id(cookie_value) if cookie_value else None
    if not session_id:
        raise Unauthorized(_NOT_LOGGED_IN)

    session = db.query(UserSession).filter(UserSession.id == session_id).first()
    if not session:
        raise Unauthorized(_NOT_LOGGED_IN)

    if _as_utc(session.expires_at) <= _now():
        db.delete(session)
        db.commit()
        raise Unauthorized("Session expired")

    user = db.query(User).filter(User.id == session.user_id).first()
    if not user or not user.is_active or not user.is_approved:
        raise Unauthorized("User not found, disabled or not approved")

    session.expires_at = _now() + _max_age()
    db.commit()
    set_session_cookie(response, session)
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """
    Dependency: wraps :func:`get_current_user` and additionally asserts
    ``role == 'admin'``.  Raises 403 otherwise.
    """
    if current_user.role != "admin":
        raise Forbidden("Admin access required")
    return current_user
