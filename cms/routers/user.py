"""Account routes: login, logout, registration by a super administrator, own profile."""
from __future__ import annotations

from fastapi import Depends, Request

from cms.core.exceptions import Success
from cms.core.route_meta import LinRouter
from cms.db.models import User
from cms.schemas.admin import LoginValidator, RegisterValidator
from cms.services.auth_service import AuthService
from cms.services.log_service import record_log
from cms.services.session_service import admin_required, bearer_token, delete_session, login_required

MODULE = "User"

router = LinRouter(prefix="/cms/user", tags=["user"])
auth_service = AuthService()


@router.lin_post("userLogin", "/login", auth="login", module=MODULE, mount=False)
def login(request: Request, v: LoginValidator):
    result = auth_service.login(v.nickname, v.password)
    record_log(request, result.user, "{user.nickname} logged in and obtained a token")
    return {"access_token": result.access_token, "token_type": "bearer"}


@router.lin_post("userLogout", "/logout", auth="logout", module=MODULE, mount=False)
def logout(request: Request, user: User = Depends(login_required)):
    delete_session(bearer_token(request) or "")
    return Success(msg="logged out").response(request)


@router.lin_post(
    "userRegister",
    "/register",
    auth="register user",
    module=MODULE,
    mount=False,
    dependencies=[Depends(admin_required)],
)
def register(request: Request, v: RegisterValidator):
    auth_service.register(v.nickname, v.password, v.group_id, str(v.email) if v.email else None)
    return Success(msg="user created").response(request)


@router.lin_get("userInformation", "/information", auth="own information", module=MODULE, mount=False)
def information(user: User = Depends(login_required)):
    return user.to_dict()
