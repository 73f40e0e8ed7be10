"""Data access for user accounts, login sessions and group membership checks."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select

from cms.core.security import new_token
from cms.db.models import Auth, Group, User, UserActive, UserAdmin, UserSession
from cms.db.session import get_session, transaction


class UserRepository:
    """CRUD helpers wrapping the SQLAlchemy session."""

    # -------------------------- users --------------------------
    def get_user(self, user_id: int) -> Optional[User]:
        with get_session() as session:
            user = session.get(User, user_id)
            if user and user.delete_time is None:
                return user
            return None

    def get_user_by_nickname(self, nickname: str) -> Optional[User]:
        with get_session() as session:
            stmt = select(User).where(User.nickname == nickname, User.delete_time.is_(None))
            return session.execute(stmt).scalar_one_or_none()

    def nickname_taken(self, nickname: str) -> bool:
        """Nicknames stay reserved after a soft delete."""
        with get_session() as session:
            stmt = select(User.id).where(User.nickname == nickname).limit(1)
            return session.execute(stmt).first() is not None

    def email_taken(self, email: str) -> bool:
        with get_session() as session:
            stmt = select(User.id).where(User.email == email).limit(1)
            return session.execute(stmt).first() is not None

    def group_exists(self, group_id: int) -> bool:
        with get_session() as session:
            return session.get(Group, group_id) is not None

    def create_user(
        self,
        nickname: str,
        password_hash: str,
        *,
        email: str | None = None,
        group_id: int | None = None,
        admin: int = UserAdmin.COMMON,
    ) -> User:
        entity = User(
            nickname=nickname,
            email=email,
            password_hash=password_hash,
            group_id=group_id,
            admin=admin,
            active=UserActive.ACTIVE,
        )
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def group_has_auth(self, group_id: int | None, auth: str) -> bool:
        if group_id is None:
            return False
        with get_session() as session:
            stmt = select(Auth.id).where(Auth.group_id == group_id, Auth.auth == auth).limit(1)
            return session.execute(stmt).first() is not None

    # -------------------------- sessions --------------------------
    def create_session(self, user_id: int, expires_at: datetime) -> str:
        token = new_token()
        entity = UserSession(token=token, user_id=user_id, expires_at=expires_at)
        with transaction() as session:
            session.add(entity)
        return token

    def get_session(self, token: str) -> Optional[UserSession]:
        with get_session() as session:
            return session.get(UserSession, token)

    def delete_session(self, token: str) -> None:
        with transaction() as session:
            session.execute(delete(UserSession).where(UserSession.token == token))
