import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from db.memory import InMemoryStore
from db.mongo import DocumentStore
from db.relational import RelationalStore
from main import create_app
from security import TokenIssuer, get_password_hash

TEST_SECRET = "test-secret"


def make_store(kind):
    if kind == "memory":
        return InMemoryStore()
    if kind == "relational":
        return RelationalStore("sqlite://")
    if kind == "document":
        return DocumentStore(mongomock.MongoClient().scoreboard_test)
    raise ValueError(kind)


@pytest.fixture()
def settings():
    return Settings(jwt_secret=TEST_SECRET, access_token_expire_minutes=60, log_level="WARNING")


@pytest.fixture()
def issuer():
    return TokenIssuer(TEST_SECRET, expire_minutes=60)


@pytest.fixture(params=["memory", "relational", "document"])
def store(request):
    return make_store(request.param)


@pytest.fixture()
def memory_store():
    return InMemoryStore()


@pytest.fixture()
def hashed_password():
    # Hashing is slow; share one hash across store tests.
    return get_password_hash("secret1")


@pytest.fixture()
def client(settings, memory_store):
    app = create_app(settings, store=memory_store)
    return TestClient(app)


@pytest.fixture(params=["memory", "relational", "document"])
def backend_client(request, settings):
    app = create_app(settings, store=make_store(request.param))
    return TestClient(app)


def register(client, username="alice", email="a@x.com", password="secret1"):
    return client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": password},
    )


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}
