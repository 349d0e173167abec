import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from noteful.utils.jwt_auth import Identity, create_access_token, decode_token, get_current_user


def _register(client, username="userA", password="StrongPassw0rd!"):
    return client.post("/users", json={"username": username, "password": password})


def test_register_login_token_returned(client):
    r = _register(client)
    assert r.status_code == 201
    user_id = r.json()["id"]

    r = client.post("/auth/login", json={"username": "userA", "password": "StrongPassw0rd!"})
    assert r.status_code == 200
    data = r.json()
    assert data["token_type"] == "bearer"

    claims = decode_token(data["access_token"])
    assert claims["sub"] == user_id
    assert claims["username"] == "userA"


def test_login_wrong_password_or_unknown_user(client):
    _register(client)
    r = client.post("/auth/login", json={"username": "userA", "password": "wrongwrongwrong"})
    assert r.status_code == 401
    r = client.post("/auth/login", json={"username": "nobody", "password": "StrongPassw0rd!"})
    assert r.status_code == 401


def test_token_from_login_gives_access(client):
    _register(client)
    token = client.post("/auth/login", json={"username": "userA", "password": "StrongPassw0rd!"}).json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    r = client.post("/notes", headers=headers, json={"title": "mine"})
    assert r.status_code == 201
    r = client.get("/notes", headers=headers)
    assert [n["title"] for n in r.json()] == ["mine"]


def test_refresh_issues_new_token_for_same_identity(client, user_a):
    r = client.post("/auth/refresh", headers=user_a)
    assert r.status_code == 200
    claims = decode_token(r.json()["access_token"])
    assert claims["username"] == "userA"

    assert client.post("/auth/refresh").status_code == 401


def test_protected_requires_token(client, user_a):
    assert client.get("/notes").status_code == 401
    # the old X-User-Id header is not an identity
    assert client.get("/notes", headers={"X-User-Id": "userA"}).status_code == 401
    assert client.get("/notes", headers=user_a).status_code == 200


def test_expired_token_is_rejected(monkeypatch):
    monkeypatch.setenv("JWT_EXP_MINUTES", "-1")
    token = create_access_token(user_id="a" * 24, username="userA")
    with pytest.raises(HTTPException) as e:
        get_current_user(HTTPAuthorizationCredentials(scheme="Bearer", credentials=token))
    assert e.value.status_code == 401


def test_identity_from_token():
    token = create_access_token(user_id="a" * 24, username="userA")
    ident = get_current_user(HTTPAuthorizationCredentials(scheme="Bearer", credentials=token))
    assert ident == Identity(id="a" * 24, username="userA")


def test_missing_secret_is_an_error(monkeypatch):
    monkeypatch.delenv("JWT_SECRET")
    with pytest.raises(RuntimeError):
        create_access_token(user_id="a" * 24, username="userA")
