"""
Authentication and account use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from cms.core.exceptions import AuthFailed, NotFound, RepeatException
from cms.core.security import hash_password, verify_password
from cms.db.models import User
from cms.repositories.user_repository import UserRepository
from cms.services.session_service import issue_session

logger = logging.getLogger(__name__)


@dataclass
class LoginSuccess:
    user: User
    access_token: str


@dataclass
class AuthService:
    """Handles login and administrator-driven registration."""

    def __post_init__(self):
        self.repository = UserRepository()

    def login(self, nickname: str, password: str) -> LoginSuccess:
        user = self.repository.get_user_by_nickname(nickname)
        if not user or not verify_password(password, user.password_hash):
            raise AuthFailed(msg="wrong nickname or password")
        if not user.is_active:
            raise AuthFailed(msg="account is disabled, contact a super administrator")
        token = issue_session(user.id)
        logger.info("User %s logged in", user.id, extra={"user_id": user.id})
        return LoginSuccess(user=user, access_token=token)

    def register(
        self,
        nickname: str,
        password: str,
        group_id: int,
        email: Optional[str] = None,
    ) -> User:
        if self.repository.nickname_taken(nickname):
            raise RepeatException(msg="nickname already taken")
        if email and self.repository.email_taken(email):
            raise RepeatException(msg="email already registered")
        if not self.repository.group_exists(group_id):
            raise NotFound(msg="group not found")
        user = self.repository.create_user(nickname, hash_password(password), email=email, group_id=group_id)
        logger.info("User %s registered in group %s", user.id, group_id, extra={"user_id": user.id})
        return user
