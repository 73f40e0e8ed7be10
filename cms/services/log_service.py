"""Operation log helper: turn a message template into a Log row."""
from __future__ import annotations

import logging
import re
from typing import Optional

from fastapi import Request

from cms.db.models import User
from cms.repositories.log_repository import LogRepository

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{user\.(\w+)\}")
_repo = LogRepository()


def render_message(template: str, user: User) -> str:
    """Replace `{user.<attr>}` placeholders with the user's attributes."""
    return _PLACEHOLDER.sub(lambda m: str(getattr(user, m.group(1), "") or ""), template)


def record_log(
    request: Request,
    user: User,
    template: str,
    *,
    status_code: int = 200,
    authority: Optional[str] = None,
) -> None:
    message = render_message(template, user)
    _repo.create_log(
        message,
        user_id=user.id,
        user_name=user.nickname,
        status_code=status_code,
        method=request.method,
        path=request.url.path,
        authority=authority,
    )
    logger.debug("Operation log: %s", message, extra={"user_id": user.id, "path": request.url.path})
