from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the cms package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fastapi.testclient import TestClient  # noqa: E402

from cms.core import config as core_config  # noqa: E402
from cms.core.security import hash_password  # noqa: E402
from cms.db import models  # noqa: E402
from cms.db import session as db_session  # noqa: E402
from cms.repositories.user_repository import UserRepository  # noqa: E402
from cms.services.session_service import issue_session  # noqa: E402


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Point DATABASE_URL at a temporary SQLite file and reset settings/engine caches."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)

    yield db_file

    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def client(temp_db):
    from cms.app import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture()
def user_repo(temp_db):
    return UserRepository()


@pytest.fixture()
def make_user(user_repo):
    def _make(nickname: str, password: str = "123456", **kwargs):
        return user_repo.create_user(nickname, hash_password(password), **kwargs)

    return _make


@pytest.fixture()
def admin_headers(make_user):
    admin = make_user("root", admin=models.UserAdmin.ADMIN)
    return {"Authorization": f"Bearer {issue_session(admin.id)}"}


@pytest.fixture()
def bearer(temp_db):
    def _headers(user) -> dict:
        return {"Authorization": f"Bearer {issue_session(user.id)}"}

    return _headers
