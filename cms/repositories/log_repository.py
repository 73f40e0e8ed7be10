"""Operation log persistence and queries."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select

from cms.db.models import Log
from cms.db.session import get_session, transaction


class LogRepository:
    def create_log(
        self,
        message: str,
        *,
        user_id: int,
        user_name: str | None,
        status_code: int | None = None,
        method: str | None = None,
        path: str | None = None,
        authority: str | None = None,
    ) -> None:
        entity = Log(
            message=message,
            user_id=user_id,
            user_name=user_name,
            status_code=status_code,
            method=method,
            path=path,
            authority=authority,
        )
        with transaction() as session:
            session.add(entity)

    def get_logs(
        self,
        start: int,
        count: int,
        *,
        name: Optional[str] = None,
        begin: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> tuple[list[dict], int]:
        conditions = []
        if name:
            conditions.append(Log.user_name == name)
        if begin is not None:
            conditions.append(Log.time >= begin)
        if end is not None:
            conditions.append(Log.time <= end)
        with get_session() as session:
            total = session.execute(select(func.count(Log.id)).where(*conditions)).scalar_one()
            stmt = select(Log).where(*conditions).order_by(Log.time.desc(), Log.id.desc()).offset(start).limit(count)
            logs = session.execute(stmt).scalars().all()
            return [log.to_dict() for log in logs], total

    def get_user_names(self, start: int, count: int) -> list[str]:
        with get_session() as session:
            stmt = (
                select(Log.user_name)
                .where(Log.user_name.is_not(None))
                .group_by(Log.user_name)
                .order_by(Log.user_name)
                .offset(start)
                .limit(count)
            )
            return list(session.execute(stmt).scalars().all())
