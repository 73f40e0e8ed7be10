"""Operation log routes, mounted so their authorities can be dispatched to groups."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, Query

from cms.core.exceptions import NotFound, ParametersException
from cms.core.route_meta import LinRouter
from cms.core.utils import Pagination, paginate
from cms.repositories.log_repository import LogRepository
from cms.services.session_service import group_required

MODULE = "Log"
AUTH_LOGS = "query all logs"
AUTH_LOG_USERS = "query logged users"

router = LinRouter(prefix="/cms/log", tags=["log"])
log_repo = LogRepository()


def _parse_time(value: Optional[str], field: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise ParametersException(msg={field: "expected an ISO 8601 datetime"}) from exc
    # log times are stored as naive UTC
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


@router.lin_get(
    "getLogs",
    "/",
    auth=AUTH_LOGS,
    module=MODULE,
    dependencies=[Depends(group_required(AUTH_LOGS))],
)
def get_logs(
    name: Optional[str] = Query(None),
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    page: Pagination = Depends(paginate),
):
    logs, total = log_repo.get_logs(
        page.start,
        page.count,
        name=name,
        begin=_parse_time(start, "start"),
        end=_parse_time(end, "end"),
    )
    if total < 1:
        raise NotFound(msg="no logs found")
    return {"collection": logs, "total_nums": total}


@router.lin_get(
    "getUsers",
    "/users",
    auth=AUTH_LOG_USERS,
    module=MODULE,
    dependencies=[Depends(group_required(AUTH_LOG_USERS))],
)
def get_log_users(page: Pagination = Depends(paginate)):
    return log_repo.get_user_names(page.start, page.count)
