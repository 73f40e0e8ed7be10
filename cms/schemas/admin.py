"""Request-body validators for the admin and user routes."""
from __future__ import annotations

import re
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from cms.core.utils import MAX_SAFE_ID

PASSWORD_PATTERN = re.compile(r"^[A-Za-z0-9_*&$#@]{6,22}$")


def _check_password(value: str) -> str:
    if not PASSWORD_PATTERN.match(value or ""):
        raise ValueError("password must be 6-22 characters of letters, digits and _*&$#@")
    return value


def _not_blank(value: str, message: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(message)
    return value


class ResetPasswordValidator(BaseModel):
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def _password_format(cls, value: str) -> str:
        return _check_password(value)

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("the two passwords do not match")
        return self


class UpdateUserInfoValidator(BaseModel):
    group_id: int = Field(..., ge=1, le=MAX_SAFE_ID)
    email: EmailStr


class NewGroupValidator(BaseModel):
    name: str
    info: Optional[str] = None
    auths: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        return _not_blank(value, "group name is required")


class UpdateGroupValidator(BaseModel):
    name: str
    info: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        return _not_blank(value, "group name is required")


class DispatchAuthValidator(BaseModel):
    group_id: int = Field(..., ge=1, le=MAX_SAFE_ID)
    auth: str

    @field_validator("auth")
    @classmethod
    def _auth_required(cls, value: str) -> str:
        return _not_blank(value, "auth is required")


class DispatchAuthsValidator(BaseModel):
    group_id: int = Field(..., ge=1, le=MAX_SAFE_ID)
    auths: List[str] = Field(..., min_length=1)


class RemoveAuthsValidator(BaseModel):
    group_id: int = Field(..., ge=1, le=MAX_SAFE_ID)
    auths: List[str] = Field(..., min_length=1)


class LoginValidator(BaseModel):
    nickname: str
    password: str

    @field_validator("nickname")
    @classmethod
    def _nickname_required(cls, value: str) -> str:
        return _not_blank(value, "nickname is required")


class RegisterValidator(BaseModel):
    nickname: str = Field(..., max_length=24)
    password: str
    confirm_password: str
    email: Optional[EmailStr] = None
    group_id: int = Field(..., ge=1, le=MAX_SAFE_ID)

    @field_validator("nickname")
    @classmethod
    def _nickname_required(cls, value: str) -> str:
        return _not_blank(value, "nickname is required")

    @field_validator("password")
    @classmethod
    def _password_format(cls, value: str) -> str:
        return _check_password(value)

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("the two passwords do not match")
        return self
