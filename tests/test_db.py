from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from cms.core import config as core_config
from cms.db import create_tables
from cms.db import session as db_session
from cms.db.models import Group
from cms.db.session import get_session, transaction

CMS_TABLES = {"lin_auth", "lin_group", "lin_log", "lin_session", "lin_user"}


def test_create_all_reports_tables(temp_db):
    assert CMS_TABLES <= set(create_tables.create_all())


def test_main_recreates_tables(temp_db):
    with transaction() as session:
        session.add(Group(name="editors"))

    assert create_tables.main([]) == 0
    with get_session() as session:
        assert session.execute(select(func.count(Group.id))).scalar_one() == 1

    assert create_tables.main(["--drop"]) == 0
    with get_session() as session:
        assert session.execute(select(func.count(Group.id))).scalar_one() == 0


def test_transaction_rolls_back_on_database_error(temp_db):
    with transaction() as session:
        session.add(Group(name="editors"))

    with pytest.raises(IntegrityError):
        with transaction() as session:
            session.add(Group(name="writers"))
            session.flush()
            session.add(Group(name="editors"))

    with get_session() as session:
        names = session.execute(select(Group.name)).scalars().all()
    assert names == ["editors"]


def test_engine_requires_database_url(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "")
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    try:
        with pytest.raises(RuntimeError):
            db_session.get_engine()
    finally:
        core_config.get_settings.cache_clear()
        db_session.get_engine.cache_clear()


def test_responses_carry_request_id_and_headers(client):
    resp = client.get("/cms/nowhere", headers={"X-Request-ID": "abc123"})
    assert resp.headers["X-Request-ID"] == "abc123"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["Cache-Control"] == "no-store"
    assert "Strict-Transport-Security" not in resp.headers

    generated = client.get("/cms/admin/users").headers["X-Request-ID"]
    assert len(generated) == 32
