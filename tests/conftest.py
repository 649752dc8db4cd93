import os
import sys
from pathlib import Path

os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from api import create_app  # noqa: E402
from models.refresh_registry import InMemoryRefreshTokenRegistry  # noqa: E402
from utils.security import create_access_token, create_refresh_token  # noqa: E402


@pytest.fixture
def registry():
    """Fresh registry per test."""
    return InMemoryRefreshTokenRegistry()


@pytest.fixture
def app(registry):
    app = create_app("testing", registry=registry)
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def storage(app):
    return app.extensions["storage"]


@pytest.fixture
def alice(storage):
    return storage.create("alice", "alice@example.com", "Sup3r-Secret!", age="25_34")


@pytest.fixture
def bob(storage):
    return storage.create("bob", "bob@example.com", "An0ther-Secret!", age="35_44")


def auth_header(user_id: str, email: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, email)}"}


def register_refresh(registry, user_id: str, email: str) -> str:
    token = create_refresh_token(user_id, email)
    registry.add(token)
    return token
