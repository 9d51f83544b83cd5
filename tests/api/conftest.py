"""
Fixtures for HTTP-level tests: the app with a mocked database session and
bearer headers for each role.
"""

import pytest
from fastapi.testclient import TestClient

from chenaniah.core.database import get_db
from chenaniah.core.security import create_access_token
from chenaniah.main import app


@pytest.fixture
def client(mock_db):
    async def override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def factory(role: str, username: str | None = None) -> dict[str, str]:
        username = username or f"test-{role}"
        token = create_access_token(
            subject=username,
            additional_claims={"username": username, "role": role},
        )
        return {"Authorization": f"Bearer {token}"}

    return factory
