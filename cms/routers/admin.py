"""Administrator routes: users, permission groups and authority dispatch."""
from __future__ import annotations

from typing import Optional

from fastapi import Depends, Query, Request

from cms.core.exceptions import Failed, NotFound, ParametersException, Success
from cms.core.route_meta import LinRouter, authority_tree
from cms.core.utils import Pagination, get_safe_param_id, paginate, to_safe_int
from cms.repositories.admin_repository import AdminRepository
from cms.schemas.admin import (
    DispatchAuthsValidator,
    DispatchAuthValidator,
    NewGroupValidator,
    RemoveAuthsValidator,
    ResetPasswordValidator,
    UpdateGroupValidator,
    UpdateUserInfoValidator,
)
from cms.services.session_service import admin_required

MODULE = "Admin"

router = LinRouter(prefix="/cms/admin", tags=["admin"], dependencies=[Depends(admin_required)])
admin_repo = AdminRepository()


@router.lin_get("getAuthority", "/authority", auth="query all dispatchable authorities", module=MODULE, mount=False)
def get_authority():
    return authority_tree()


@router.lin_get("getAdminUsers", "/users", auth="query all users", module=MODULE, mount=False)
def get_admin_users(group_id: Optional[str] = Query(None), page: Pagination = Depends(paginate)):
    gid = None
    if group_id not in (None, ""):
        gid = to_safe_int(group_id)
        if gid is None or gid <= 0:
            raise ParametersException(msg="group_id must be a positive integer")
    users, total = admin_repo.get_users(gid, page.start, page.count)
    # super administrators are not part of the total
    return {"collection": users, "total_nums": total}


@router.lin_put("changeUserPassword", "/password/{id}", auth="change user password", module=MODULE, mount=False)
def change_user_password(request: Request, v: ResetPasswordValidator, id: int = Depends(get_safe_param_id)):
    admin_repo.change_user_password(id, v.new_password)
    return Success(msg="password changed").response(request)


@router.lin_delete("deleteUser", "/{id}", auth="delete user", module=MODULE, mount=False)
def delete_user(request: Request, id: int = Depends(get_safe_param_id)):
    admin_repo.delete_user(id)
    return Success(msg="user deleted").response(request)


@router.lin_put("updateUser", "/{id}", auth="update user information", module=MODULE, mount=False)
def update_user(request: Request, v: UpdateUserInfoValidator, id: int = Depends(get_safe_param_id)):
    admin_repo.update_user_info(id, str(v.email), v.group_id)
    return Success(msg="user updated").response(request)


@router.lin_get("getAdminGroups", "/groups", auth="query all groups with their authorities", module=MODULE, mount=False)
def get_admin_groups(page: Pagination = Depends(paginate)):
    groups, total = admin_repo.get_groups(page.start, page.count)
    if total < 1:
        raise NotFound(msg="no permission groups found")
    return {"collection": groups, "total_nums": total}


@router.lin_get("getAllGroup", "/group/all", auth="query all groups", module=MODULE, mount=False)
def get_all_group():
    groups = admin_repo.get_all_groups()
    if not groups:
        raise NotFound(msg="no permission groups found")
    return groups


@router.lin_get("getGroup", "/group/{id}", auth="query one group with its authorities", module=MODULE, mount=False)
def get_group(id: int = Depends(get_safe_param_id)):
    return admin_repo.get_group(id)


@router.lin_post("createGroup", "/group", auth="create group", module=MODULE, mount=False)
def create_group(request: Request, v: NewGroupValidator):
    ok = admin_repo.create_group(v.name, v.info, v.auths)
    if not ok:
        return Failed(msg="failed to create group").response(request)
    return Success(msg="group created").response(request)


@router.lin_put("updateGroup", "/group/{id}", auth="update group", module=MODULE, mount=False)
def update_group(request: Request, v: UpdateGroupValidator, id: int = Depends(get_safe_param_id)):
    admin_repo.update_group(id, v.name, v.info)
    return Success(msg="group updated").response(request)


@router.lin_delete("deleteGroup", "/group/{id}", auth="delete group", module=MODULE, mount=False)
def delete_group(request: Request, id: int = Depends(get_safe_param_id)):
    admin_repo.delete_group(id)
    return Success(msg="group deleted").response(request)


@router.lin_post("dispatchAuth", "/dispatch", auth="dispatch one authority", module=MODULE, mount=False)
def dispatch_auth(request: Request, v: DispatchAuthValidator):
    admin_repo.dispatch_auth(v.group_id, v.auth)
    return Success(msg="authority added").response(request)


@router.lin_post("dispatchAuths", "/dispatch/patch", auth="dispatch several authorities", module=MODULE, mount=False)
def dispatch_auths(request: Request, v: DispatchAuthsValidator):
    admin_repo.dispatch_auths(v.group_id, v.auths)
    return Success(msg="authorities added").response(request)


@router.lin_post("removeAuths", "/remove", auth="remove several authorities", module=MODULE, mount=False)
def remove_auths(request: Request, v: RemoveAuthsValidator):
    admin_repo.remove_auths(v.group_id, v.auths)
    return Success(msg="authorities removed").response(request)
