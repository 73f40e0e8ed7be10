"""
End-to-end tests for the /cms/admin routes through FastAPI's TestClient.
"""
from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cms.core.utils import MAX_SAFE_ID
from cms.db.models import Auth, Group, UserAdmin
from cms.db.session import get_session


def _create_group(client, headers, name="editors", auths=None):
    resp = client.post("/cms/admin/group", json={"name": name, "info": "", "auths": auths or []}, headers=headers)
    assert resp.status_code == 201
    groups = client.get("/cms/admin/group/all", headers=headers).json()
    return next(g["id"] for g in groups if g["name"] == name)


def test_requires_credentials(client):
    resp = client.get("/cms/admin/users")
    assert resp.status_code == 401
    assert resp.json()["error_code"] == 10000


def test_invalid_token(client):
    resp = client.get("/cms/admin/users", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401
    assert resp.json()["error_code"] == 10040


def test_common_user_is_forbidden(client, make_user, bearer):
    user = make_user("alice")
    resp = client.get("/cms/admin/users", headers=bearer(user))
    assert resp.status_code == 401
    assert resp.json()["error_code"] == 10070


def test_get_authority_lists_mounted_routes(client, admin_headers):
    resp = client.get("/cms/admin/authority", headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["Log"]["query all logs"] == ["GET getLogs"]
    assert "Admin" not in body


def test_get_users_envelope(client, admin_headers, make_user):
    make_user("alice")
    make_user("bob")
    make_user("other-root", admin=UserAdmin.ADMIN)

    resp = client.get("/cms/admin/users", params={"count": 1, "page": 1}, headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_nums"] == 2
    assert [u["nickname"] for u in body["collection"]] == ["bob"]
    assert "password_hash" not in body["collection"][0]


def test_get_users_rejects_bad_group_id(client, admin_headers):
    resp = client.get("/cms/admin/users", params={"group_id": "abc"}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["error_code"] == 10030


@pytest.mark.parametrize(
    "method,path",
    [
        ("put", "/cms/admin/password/abc"),
        ("delete", "/cms/admin/abc"),
        ("delete", "/cms/admin/0"),
        ("delete", "/cms/admin/-3"),
        ("get", "/cms/admin/group/1.5"),
        ("delete", "/cms/admin/group/xyz"),
        ("get", "/cms/admin/group/99999999999999999999"),
        ("put", f"/cms/admin/password/{MAX_SAFE_ID + 1}"),
        ("delete", "/cms/admin/" + "9" * 5000),
    ],
)
def test_route_id_must_be_positive_integer(client, admin_headers, method, path):
    kwargs = {"headers": admin_headers}
    if method == "put":
        kwargs["json"] = {"new_password": "123456", "confirm_password": "123456"}
    resp = getattr(client, method)(path, **kwargs)
    assert resp.status_code == 400
    body = resp.json()
    assert body["error_code"] == 10030
    assert body["msg"] == "invalid route parameter"


def test_change_user_password(client, admin_headers, make_user):
    user = make_user("alice")
    resp = client.put(
        f"/cms/admin/password/{user.id}",
        json={"new_password": "s3cret_", "confirm_password": "s3cret_"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    assert resp.json() == {"error_code": 0, "msg": "password changed", "url": f"PUT /cms/admin/password/{user.id}"}

    login = client.post("/cms/user/login", json={"nickname": "alice", "password": "s3cret_"})
    assert login.status_code == 200


def test_change_user_password_validation(client, admin_headers, make_user):
    user = make_user("alice")
    resp = client.put(
        f"/cms/admin/password/{user.id}",
        json={"new_password": "s3cret_", "confirm_password": "different"},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error_code"] == 10030

    resp = client.put(
        f"/cms/admin/password/{user.id}",
        json={"new_password": "abc", "confirm_password": "abc"},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert "new_password" in resp.json()["msg"]


def test_change_password_missing_user(client, admin_headers):
    resp = client.put(
        "/cms/admin/password/999",
        json={"new_password": "123456", "confirm_password": "123456"},
        headers=admin_headers,
    )
    assert resp.status_code == 404
    assert resp.json()["error_code"] == 10020


def test_delete_user(client, admin_headers, make_user):
    user = make_user("alice")
    resp = client.delete(f"/cms/admin/{user.id}", headers=admin_headers)
    assert resp.status_code == 201
    assert client.get("/cms/admin/users", headers=admin_headers).json()["total_nums"] == 0
    assert client.delete(f"/cms/admin/{user.id}", headers=admin_headers).status_code == 404


def test_update_user(client, admin_headers, make_user):
    gid = _create_group(client, admin_headers)
    user = make_user("alice")
    resp = client.put(
        f"/cms/admin/{user.id}",
        json={"group_id": gid, "email": "alice@example.com"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    users = client.get("/cms/admin/users", params={"group_id": gid}, headers=admin_headers).json()
    assert users["collection"][0]["email"] == "alice@example.com"
    assert users["collection"][0]["group_name"] == "editors"

    bad = client.put(f"/cms/admin/{user.id}", json={"group_id": 0, "email": "nope"}, headers=admin_headers)
    assert bad.status_code == 400
    assert set(bad.json()["msg"]) == {"group_id", "email"}


def test_groups_not_found_when_empty(client, admin_headers):
    assert client.get("/cms/admin/groups", headers=admin_headers).status_code == 404
    assert client.get("/cms/admin/group/all", headers=admin_headers).status_code == 404
    assert client.get("/cms/admin/group/1", headers=admin_headers).status_code == 404


def test_group_lifecycle(client, admin_headers):
    gid = _create_group(client, admin_headers, auths=["query all logs"])

    dup = client.post("/cms/admin/group", json={"name": "editors", "auths": []}, headers=admin_headers)
    assert dup.status_code == 401
    assert dup.json()["error_code"] == 10070

    groups = client.get("/cms/admin/groups", headers=admin_headers).json()
    assert groups["total_nums"] == 1
    assert groups["collection"][0]["auths"] == [{"Log": [{"auth": "query all logs", "module": "Log"}]}]

    resp = client.put(f"/cms/admin/group/{gid}", json={"name": "writers", "info": "x"}, headers=admin_headers)
    assert resp.status_code == 201
    assert client.get(f"/cms/admin/group/{gid}", headers=admin_headers).json()["name"] == "writers"

    resp = client.delete(f"/cms/admin/group/{gid}", headers=admin_headers)
    assert resp.status_code == 201
    assert resp.json()["msg"] == "group deleted"
    assert client.delete(f"/cms/admin/group/{gid}", headers=admin_headers).status_code == 404


def test_create_group_requires_name(client, admin_headers):
    resp = client.post("/cms/admin/group", json={"name": "  ", "auths": []}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["msg"] == {"name": "group name is required"}


def test_delete_group_with_users_is_forbidden(client, admin_headers, make_user):
    gid = _create_group(client, admin_headers)
    make_user("alice", group_id=gid)
    resp = client.delete(f"/cms/admin/group/{gid}", headers=admin_headers)
    assert resp.status_code == 401
    assert resp.json()["error_code"] == 10070


def test_dispatch_routes(client, admin_headers):
    gid = _create_group(client, admin_headers)

    resp = client.post("/cms/admin/dispatch", json={"group_id": gid, "auth": "query all logs"}, headers=admin_headers)
    assert resp.status_code == 201
    again = client.post("/cms/admin/dispatch", json={"group_id": gid, "auth": "query all logs"}, headers=admin_headers)
    assert again.status_code == 401

    resp = client.post(
        "/cms/admin/dispatch/patch",
        json={"group_id": gid, "auths": ["query all logs", "query logged users"]},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    auths = client.get(f"/cms/admin/group/{gid}", headers=admin_headers).json()["auths"][0]["Log"]
    assert len(auths) == 2

    resp = client.post(
        "/cms/admin/remove",
        json={"group_id": gid, "auths": ["query all logs", "query logged users"]},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    assert client.get(f"/cms/admin/group/{gid}", headers=admin_headers).json()["auths"] == []

    missing = client.post("/cms/admin/remove", json={"group_id": 999, "auths": ["x"]}, headers=admin_headers)
    assert missing.status_code == 404
    empty = client.post("/cms/admin/dispatch/patch", json={"group_id": gid, "auths": []}, headers=admin_headers)
    assert empty.status_code == 400


def test_largest_route_id_reaches_the_database(client, admin_headers):
    resp = client.get(f"/cms/admin/group/{MAX_SAFE_ID}", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["error_code"] == 10020


def test_oversized_numbers_are_rejected(client, admin_headers):
    resp = client.post("/cms/admin/dispatch", json={"group_id": 10**20, "auth": "query all logs"}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["error_code"] == 10030
    assert "group_id" in resp.json()["msg"]

    resp = client.post(
        "/cms/admin/remove", json={"group_id": MAX_SAFE_ID + 1, "auths": ["query all logs"]}, headers=admin_headers
    )
    assert resp.status_code == 400

    resp = client.get("/cms/admin/users", params={"page": "99999999999999999999"}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["error_code"] == 10030

    resp = client.get("/cms/admin/users", params={"group_id": "9" * 5000}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["msg"] == "group_id must be a positive integer"


def test_create_group_persistence_failure(client, admin_headers, monkeypatch):
    real_commit = Session.commit

    def failing_commit(self):
        if any(isinstance(obj, Group) for obj in self.new):
            raise SQLAlchemyError("disk I/O error")
        return real_commit(self)

    monkeypatch.setattr(Session, "commit", failing_commit)

    resp = client.post(
        "/cms/admin/group",
        json={"name": "editors", "info": "", "auths": ["query all logs"]},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.json() == {"error_code": 9999, "msg": "failed to create group", "url": "POST /cms/admin/group"}

    assert client.get("/cms/admin/group/all", headers=admin_headers).status_code == 404
    with get_session() as session:
        assert session.execute(select(func.count(Group.id))).scalar_one() == 0
        assert session.execute(select(func.count(Auth.id))).scalar_one() == 0
