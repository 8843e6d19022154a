# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Auth endpoints – registration, login, logout, current-user info.

Security notes
--------------
* Login returns the *same* error message whether the username doesn't exist
  or the password is wrong.  Only after the password checks out does it tell
  an unapproved or disabled account apart.
* Self-registered accounts start unapproved; an admin has to approve them
  before the first login succeeds.
* The session id never leaves the server unsigned (see core.security).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from database import get_db
from core.errors import Unauthorized, ValidationFailure
from core.logger import logger
from core.security import (
    clear_session_cookie,
    create_session,
    destroy_session,
    get_current_user,
    hash_password,
    session_cookie,
    set_session_cookie,
    verify_password,
)
from models.user import User
from auth.schemas import LoginRequest, RegisterRequest, UserInfoResponse

router = APIRouter(prefix="/api", tags=["auth"])

# Generic message used for both "no such user" and "wrong password"
_LOGIN_FAIL = "Invalid username or password"

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


def validate_credentials(username: Optional[str], password: Optional[str]) -> Optional[str]:
    """
    Return an error string if the username / password do not meet the
    minimum policy, or None if they are acceptable.

    Policy: username >= 3 chars, password >= 6 chars.
    """
    if username is not None and len(username.strip()) < MIN_USERNAME_LENGTH:
        return f"Username must be at least {MIN_USERNAME_LENGTH} characters"
    if password is not None and len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None


# ---------------------------------------------------------------------------
# POST /api/register
# ---------------------------------------------------------------------------


@router.post("/register", response_model=UserInfoResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Create an unapproved ``user`` account.  No session is started."""
    err = validate_credentials(body.username, body.password)
    if err:
        raise ValidationFailure(err)

    username = body.username.strip()
    if db.query(User).filter(User.username == username).first():
        raise ValidationFailure("Username already taken")

    user = User(
        username=username,
        password_hash=hash_password(body.password),
        role="user",
        is_active=True,
        is_approved=False,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s (awaiting approval)", user.username)
    return user


# ---------------------------------------------------------------------------
# POST /api/login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=UserInfoResponse)
def login(body: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """Authenticate, start a server-side session and set the ``sid`` cookie."""
    user = db.query(User).filter(User.username == body.username).first()

    # Unified failure path – no information leaks about whether the user exists
    if not user or not verify_password(body.password, user.password_hash):
        raise Unauthorized(_LOGIN_FAIL)

    if not user.is_approved:
        raise Unauthorized("Account not yet approved")

    if not user.is_active:
        raise Unauthorized("Account disabled")

    session = create_session(db, user)
    set_session_cookie(response, session)
    logger.info("User %s logged in", user.username)
    return user


# ---------------------------------------------------------------------------
# POST /api/logout
# ---------------------------------------------------------------------------


@router.post("/logout")
def logout(
    response: Response,
    cookie_value: Optional[str] = Depends(session_cookie),
    db: Session = Depends(get_db),
):
    """Drop the session row and the cookie.  Succeeds without a session too."""
    destroy_session(db, cookie_value)
    clear_session_cookie(response)
    return {"detail": "Logged out"}


# ---------------------------------------------------------------------------
# GET /api/user
# ---------------------------------------------------------------------------


@router.get("/user", response_model=UserInfoResponse)
def me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user's public profile (no secrets)."""
    return current_user
