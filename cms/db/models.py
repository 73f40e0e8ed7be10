"""SQLAlchemy models for users, permission groups, authorities, sessions and logs."""
from __future__ import annotations

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .session import Base


class UserAdmin:
    COMMON = 1
    ADMIN = 2


class UserActive:
    ACTIVE = 1
    NOT_ACTIVE = 2


class Group(Base):
    __tablename__ = "lin_group"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(60), unique=True, nullable=False)
    info = Column(String(255), nullable=True)

    auths = relationship("Auth", back_populates="group", cascade="all,delete-orphan")

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "info": self.info}


class User(Base):
    __tablename__ = "lin_user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nickname = Column(String(24), unique=True, nullable=False)
    email = Column(String(100), unique=True, nullable=True)
    password_hash = Column(Text, nullable=False)
    admin = Column(SmallInteger, default=UserAdmin.COMMON, nullable=False)
    active = Column(SmallInteger, default=UserActive.ACTIVE, nullable=False)
    group_id = Column(Integer, ForeignKey("lin_group.id", ondelete="SET NULL"), nullable=True)
    create_time = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    update_time = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    delete_time = Column(DateTime(timezone=True), nullable=True)

    group = relationship("Group")

    @property
    def is_admin(self) -> bool:
        return self.admin == UserAdmin.ADMIN

    @property
    def is_active(self) -> bool:
        return self.active == UserActive.ACTIVE

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nickname": self.nickname,
            "email": self.email,
            "admin": self.admin,
            "active": self.active,
            "group_id": self.group_id,
            "create_time": self.create_time.isoformat() if self.create_time else None,
        }


class Auth(Base):
    __tablename__ = "lin_auth"
    __table_args__ = (UniqueConstraint("group_id", "auth", name="uq_lin_auth_group_auth"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey("lin_group.id", ondelete="CASCADE"), nullable=False)
    auth = Column(String(60), nullable=False)
    module = Column(String(50), nullable=False)

    group = relationship("Group", back_populates="auths")

    def to_dict(self) -> dict:
        return {"auth": self.auth, "module": self.module}


class UserSession(Base):
    __tablename__ = "lin_session"

    token = Column(String(128), primary_key=True)
    user_id = Column(Integer, ForeignKey("lin_user.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Log(Base):
    __tablename__ = "lin_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    message = Column(String(450), nullable=True)
    user_id = Column(Integer, nullable=False)
    user_name = Column(String(24), nullable=True)
    status_code = Column(Integer, nullable=True)
    method = Column(String(20), nullable=True)
    path = Column(String(50), nullable=True)
    authority = Column(String(100), nullable=True)
    time = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "message": self.message,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "status_code": self.status_code,
            "method": self.method,
            "path": self.path,
            "authority": self.authority,
            "time": self.time.isoformat() if self.time else None,
        }
