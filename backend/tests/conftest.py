import os

# keep password hashing cheap in tests; read when auth_hash is imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from noteful.config import Settings
from noteful.main import create_app
from noteful.storage.document_store import DocumentStore
from noteful.utils.jwt_auth import create_access_token

USER_A = "aaaaaaaaaaaaaaaaaaaaaaaa"
USER_B = "bbbbbbbbbbbbbbbbbbbbbbbb"


@pytest.fixture(autouse=True)
def jwt_env(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "dev-secret-for-tests")
    monkeypatch.setenv("JWT_EXP_MINUTES", "15")


@pytest.fixture()
def store(tmp_path):
    # isolate data dir per test
    return DocumentStore(tmp_path)


@pytest.fixture()
def client(tmp_path, store):
    app = create_app(Settings(data_dir=tmp_path, log_level="DEBUG"), store=store)
    return TestClient(app)


def bearer(user_id: str, username: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id=user_id, username=username)}"}


@pytest.fixture()
def user_a():
    return bearer(USER_A, "userA")


@pytest.fixture()
def user_b():
    return bearer(USER_B, "userB")
