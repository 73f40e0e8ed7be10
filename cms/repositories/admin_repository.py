"""Admin DAO: user management, permission groups and authority dispatch."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from cms.core.exceptions import Forbidden, NotFound, ParametersException
from cms.core.route_meta import find_meta_by_auth
from cms.core.security import hash_password
from cms.db.models import Auth, Group, User, UserAdmin, UserSession
from cms.db.session import get_session

logger = logging.getLogger(__name__)


def group_auths(auths: Iterable[Auth]) -> list[dict]:
    """Render authorities grouped by module: [{module: [{auth, module}, ...]}, ...]."""
    by_module: dict[str, list[dict]] = {}
    for item in auths:
        by_module.setdefault(item.module, []).append(item.to_dict())
    return [{module: items} for module, items in by_module.items()]


class AdminRepository:
    """Persistence calls behind the /cms/admin routes."""

    # -------------------------- users --------------------------
    def _user_conditions(self, group_id: Optional[int]) -> list:
        conditions = [User.delete_time.is_(None), User.admin != UserAdmin.ADMIN]
        if group_id is not None:
            conditions.append(User.group_id == group_id)
        return conditions

    def get_users(self, group_id: Optional[int], start: int, count: int) -> tuple[list[dict], int]:
        """Return a page of users and the total, super administrators excluded."""
        conditions = self._user_conditions(group_id)
        with get_session() as session:
            total = session.execute(select(func.count(User.id)).where(*conditions)).scalar_one()
            stmt = (
                select(User, Group.name)
                .outerjoin(Group, Group.id == User.group_id)
                .where(*conditions)
                .order_by(User.id)
                .offset(start)
                .limit(count)
            )
            rows = session.execute(stmt).all()
            users = []
            for user, group_name in rows:
                data = user.to_dict()
                data["group_name"] = group_name
                users.append(data)
            return users, total

    def _get_user(self, session, user_id: int) -> User:
        user = session.get(User, user_id)
        if not user or user.delete_time is not None:
            raise NotFound(msg="user not found")
        return user

    def change_user_password(self, user_id: int, new_password: str) -> None:
        with get_session() as session:
            user = self._get_user(session, user_id)
            user.password_hash = hash_password(new_password)
            session.commit()
        logger.info("Password reset for user %s", user_id, extra={"user_id": user_id})

    def delete_user(self, user_id: int) -> None:
        with get_session() as session:
            user = self._get_user(session, user_id)
            user.delete_time = datetime.now(timezone.utc)
            session.execute(delete(UserSession).where(UserSession.user_id == user_id))
            session.commit()
        logger.info("User %s deleted", user_id, extra={"user_id": user_id})

    def update_user_info(self, user_id: int, email: str, group_id: int) -> None:
        with get_session() as session:
            user = self._get_user(session, user_id)
            if user.email != email:
                stmt = select(User.id).where(User.email == email, User.id != user_id).limit(1)
                if session.execute(stmt).first() is not None:
                    raise ParametersException(msg="email already registered, please use another one")
            if session.get(Group, group_id) is None:
                raise NotFound(msg="group not found")
            user.email = email
            user.group_id = group_id
            session.commit()
        logger.info("User %s moved to group %s", user_id, group_id, extra={"user_id": user_id, "group_id": group_id})

    # -------------------------- groups --------------------------
    def get_groups(self, start: int, count: int) -> tuple[list[dict], int]:
        with get_session() as session:
            total = session.execute(select(func.count(Group.id))).scalar_one()
            groups = session.execute(select(Group).order_by(Group.id).offset(start).limit(count)).scalars().all()
            collection = []
            for group in groups:
                data = group.to_dict()
                data["auths"] = group_auths(group.auths)
                collection.append(data)
            return collection, total

    def get_all_groups(self) -> list[dict]:
        with get_session() as session:
            groups = session.execute(select(Group).order_by(Group.id)).scalars().all()
            return [group.to_dict() for group in groups]

    def get_group(self, group_id: int) -> dict:
        with get_session() as session:
            group = session.get(Group, group_id)
            if not group:
                raise NotFound(msg="group not found")
            data = group.to_dict()
            data["auths"] = group_auths(group.auths)
            return data

    def create_group(self, name: str, info: Optional[str], auths: Iterable[str]) -> bool:
        """Create a group with its authorities in one commit; False when persistence fails."""
        with get_session() as session:
            exists = session.execute(select(Group.id).where(Group.name == name).limit(1)).first()
            if exists is not None:
                raise Forbidden(msg="group already exists, choose another name")
            group = Group(name=name, info=info)
            seen: set[str] = set()
            for item in auths:
                meta = find_meta_by_auth(item)
                if meta is None or item in seen:
                    continue
                seen.add(item)
                group.auths.append(Auth(auth=meta.auth, module=meta.module))
            session.add(group)
            try:
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                logger.exception("Failed to create group %s", name)
                return False
            logger.info("Group %s created with %d authorities", name, len(seen), extra={"group_id": group.id})
            return True

    def update_group(self, group_id: int, name: str, info: Optional[str]) -> None:
        with get_session() as session:
            group = session.get(Group, group_id)
            if not group:
                raise NotFound(msg="group not found, update failed")
            if name != group.name:
                stmt = select(Group.id).where(Group.name == name, Group.id != group_id).limit(1)
                if session.execute(stmt).first() is not None:
                    raise Forbidden(msg="group already exists, choose another name")
            group.name = name
            group.info = info
            session.commit()

    def delete_group(self, group_id: int) -> None:
        with get_session() as session:
            group = session.get(Group, group_id)
            if not group:
                raise NotFound(msg="group not found, delete failed")
            stmt = select(User.id).where(User.group_id == group_id, User.delete_time.is_(None)).limit(1)
            if session.execute(stmt).first() is not None:
                raise Forbidden(msg="group still has users, delete failed")
            session.execute(delete(Auth).where(Auth.group_id == group_id))
            session.delete(group)
            session.commit()
        logger.info("Group %s deleted", group_id, extra={"group_id": group_id})

    # -------------------------- authorities --------------------------
    def _require_group(self, session, group_id: int, msg: str) -> Group:
        group = session.get(Group, group_id)
        if not group:
            raise NotFound(msg=msg)
        return group

    def dispatch_auth(self, group_id: int, auth: str) -> None:
        with get_session() as session:
            self._require_group(session, group_id, "cannot dispatch authority to a missing group")
            stmt = select(Auth.id).where(Auth.group_id == group_id, Auth.auth == auth).limit(1)
            if session.execute(stmt).first() is not None:
                raise Forbidden(msg="authority already assigned")
            meta = find_meta_by_auth(auth)
            if meta is None:
                raise ParametersException(msg=f"unknown authority: {auth}")
            session.add(Auth(group_id=group_id, auth=meta.auth, module=meta.module))
            session.commit()
        logger.info("Authority %r dispatched to group %s", auth, group_id, extra={"group_id": group_id})

    def dispatch_auths(self, group_id: int, auths: Iterable[str]) -> None:
        with get_session() as session:
            self._require_group(session, group_id, "cannot dispatch authorities to a missing group")
            held = set(session.execute(select(Auth.auth).where(Auth.group_id == group_id)).scalars().all())
            for item in auths:
                if item in held:
                    continue
                meta = find_meta_by_auth(item)
                if meta is None:
                    continue
                held.add(item)
                session.add(Auth(group_id=group_id, auth=meta.auth, module=meta.module))
            session.commit()

    def remove_auths(self, group_id: int, auths: Iterable[str]) -> None:
        names = list(auths)
        with get_session() as session:
            self._require_group(session, group_id, "cannot remove authorities from a missing group")
            if names:
                session.execute(delete(Auth).where(Auth.group_id == group_id, Auth.auth.in_(names)))
            session.commit()
