"""Session helpers (issue bearer tokens, resolve the current user, guard routes)."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from fastapi import Depends, Request

from cms.core.config import get_settings
from cms.core.exceptions import AuthFailed, ExpiredTokenException, Forbidden, InvalidTokenException
from cms.db.models import User
from cms.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

_repo = UserRepository()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    return value.astimezone(timezone.utc) if value.tzinfo else value.replace(tzinfo=timezone.utc)


def issue_session(user_id: int) -> str:
    """Create a new session token for the user and persist it."""
    settings = get_settings()
    ttl = max(60, settings.session_ttl_seconds)
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl)
    return _repo.create_session(user_id, expires_at)


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def current_user(request: Request) -> User:
    """Resolve the user behind the Authorization header or raise."""
    token = bearer_token(request)
    if not token:
        raise AuthFailed(msg="authorization header missing or malformed")
    sess = _repo.get_session(token)
    if not sess:
        raise InvalidTokenException()
    if sess.expires_at and _as_utc(sess.expires_at) < datetime.now(timezone.utc):
        _repo.delete_session(token)
        raise ExpiredTokenException()
    user = _repo.get_user(sess.user_id)
    if not user:
        _repo.delete_session(token)
        raise AuthFailed(msg="user not found")
    return user


def login_required(user: User = Depends(current_user)) -> User:
    if not user.is_active:
        raise Forbidden(msg="account is disabled")
    return user


def admin_required(user: User = Depends(login_required)) -> User:
    if not user.is_admin:
        raise Forbidden(msg="super administrator required")
    return user


def group_required(auth: str) -> Callable[..., User]:
    """Dependency factory: allow super administrators and members of groups holding `auth`."""

    def _checker(user: User = Depends(login_required)) -> User:
        if user.is_admin:
            return user
        if not _repo.group_has_auth(user.group_id, auth):
            logger.info("User %s denied authority %r", user.id, auth, extra={"user_id": user.id})
            raise Forbidden(msg="insufficient authority, contact a super administrator")
        return user

    return _checker


def delete_session(token: str) -> None:
    """Remove a session token from the store."""
    if not token:
        return
    _repo.delete_session(token)
