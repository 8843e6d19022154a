# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Admin endpoints – user lifecycle management.

Every endpoint in this router is guarded by ``require_admin``.  A request
that carries a valid session but belongs to a ``user`` role will receive 403
before any business logic runs.

These endpoints manage *other* accounts: role change, password reset,
activation / approval toggles and deletion refuse to act on the caller's own
account with 400.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from auth.router import validate_credentials
from core.errors import NotFound, ValidationFailure
from core.logger import logger
from core.security import hash_password, require_admin
from models.session import UserSession
from models.user import User
from models.watchlist import WatchlistMovie
from admin.schemas import (
    ChangeRoleRequest,
    ChangeUsernameRequest,
    CreateUserRequest,
    ResetPasswordRequest,
    UserRow,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])

_VALID_ROLES = {"admin", "user"}


def _get_user(user_id: int, db: Session) -> User:
    target = db.query(User).filter(User.id == user_id).first()
    if not target:
        raise NotFound("User not found")
    return target


def _refuse_self(user_id: int, admin: User, detail: str) -> None:
    if user_id == admin.id:
        raise ValidationFailure(detail)


def _check_role(role: str) -> None:
    if role not in _VALID_ROLES:
        raise ValidationFailure("Invalid role. Must be 'admin' or 'user'")


def _check_username_free(username: str, db: Session) -> None:
    if db.query(User).filter(User.username == username).first():
        raise ValidationFailure("Username already taken")


# ---------------------------------------------------------------------------
# GET /api/admin/users  – list all users
# ---------------------------------------------------------------------------


@router.get("/users", response_model=List[UserRow])
def list_users(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Return every user row ordered by username (no password data)."""
    return db.query(User).order_by(User.username).all()


# ---------------------------------------------------------------------------
# POST /api/admin/users  – create a new user
# ---------------------------------------------------------------------------


@router.post("/users", response_model=UserRow, status_code=status.HTTP_201_CREATED)
def create_user(
    body: CreateUserRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Create an account.  Like a self-registration it starts active but
    unapproved; approval is a separate toggle.
    """
    err = validate_credentials(body.username, body.password)
    if err:
        raise ValidationFailure(err)
    _check_role(body.role)

    username = body.username.strip()
    _check_username_free(username, db)

    user = User(
        username=username,
        password_hash=hash_password(body.password),
        role=body.role,
        is_active=True,
        is_approved=False,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Admin %s created user %s (role=%s)", admin.username, user.username, user.role)
    return user


# ---------------------------------------------------------------------------
# PATCH /api/admin/users/{id}/role  – promote or demote a user
# ---------------------------------------------------------------------------


@router.patch("/users/{user_id}/role", response_model=UserRow)
def change_role(
    user_id: int,
    body: ChangeRoleRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """An admin cannot change their own role (prevents accidental self-lockout)."""
    _refuse_self(user_id, admin, "Cannot change your own role")
    _check_role(body.role)

    target = _get_user(user_id, db)
    target.role = body.role
    db.commit()
    db.refresh(target)
    logger.info("Admin %s set role of %s to %s", admin.username, target.username, body.role)
    return target


# ---------------------------------------------------------------------------
# PATCH /api/admin/users/{id}/username  – rename a user
# ---------------------------------------------------------------------------


@router.patch("/users/{user_id}/username", response_model=UserRow)
def change_username(
    user_id: int,
    body: ChangeUsernameRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    err = validate_credentials(body.username, None)
    if err:
        raise ValidationFailure(err)

    target = _get_user(user_id, db)
    username = body.username.strip()
    if username != target.username:
        _check_username_free(username, db)

    target.username = username
    db.commit()
    db.refresh(target)
    return target


# ---------------------------------------------------------------------------
# POST /api/admin/users/{id}/reset-password
# ---------------------------------------------------------------------------


@router.post("/users/{user_id}/reset-password")
def reset_password(
    user_id: int,
    body: ResetPasswordRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Overwrite another user's password and end all of their sessions."""
    err = validate_credentials(None, body.new_password)
    if err:
        raise ValidationFailure(err)
    _refuse_self(user_id, admin, "Use your profile to change your own password")

    target = _get_user(user_id, db)
    target.password_hash = hash_password(body.new_password)
    db.query(UserSession).filter(UserSession.user_id == user_id).delete(synchronize_session=False)
    db.commit()
    logger.info("Admin %s reset the password of %s", admin.username, target.username)
    return {"message": "Password reset successfully"}


# ---------------------------------------------------------------------------
# PATCH /api/admin/users/{id}/toggle-active  – allow / block login
# ---------------------------------------------------------------------------


@router.patch("/users/{user_id}/toggle-active", response_model=UserRow)
def toggle_active(
    user_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Flip ``is_active``.  A disabled user can no longer log in, and existing
    sessions are rejected by ``get_current_user``.
    """
    _refuse_self(user_id, admin, "Cannot disable yourself")

    target = _get_user(user_id, db)
    target.is_active = not target.is_active
    db.commit()
    db.refresh(target)
    logger.info("Admin %s set is_active=%s on %s", admin.username, target.is_active, target.username)
    return target


# ---------------------------------------------------------------------------
# PATCH /api/admin/users/{id}/toggle-approved  – grant / revoke access
# ---------------------------------------------------------------------------


@router.patch("/users/{user_id}/toggle-approved", response_model=UserRow)
def toggle_approved(
    user_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    _refuse_self(user_id, admin, "Cannot change your own approval")

    target = _get_user(user_id, db)
    target.is_approved = not target.is_approved
    db.commit()
    db.refresh(target)
    logger.info("Admin %s set is_approved=%s on %s", admin.username, target.is_approved, target.username)
    return target


# ---------------------------------------------------------------------------
# DELETE /api/admin/users/{id}
# ---------------------------------------------------------------------------


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Delete a user together with their watchlist and sessions in one transaction."""
    _refuse_self(user_id, admin, "Cannot delete your own account")

    target = _get_user(user_id, db)
    username = target.username
    # Explicit child deletes: SQLite only cascades with PRAGMA foreign_keys on
    db.query(WatchlistMovie).filter(WatchlistMovie.user_id == user_id).delete(synchronize_session=False)
    db.query(UserSession).filter(UserSession.user_id == user_id).delete(synchronize_session=False)
    db.delete(target)
    db.commit()
    logger.info("Admin %s deleted user %s", admin.username, username)
