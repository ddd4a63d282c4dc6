from __future__ import annotations

import time

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from starlette.testclient import TestClient

from hrms.core.config import Settings
from hrms.core.dependencies import get_current_user
from hrms.main import app
from hrms.models.auth import UserInfo
from hrms.services.employee_service import employee_service

TEST_JWT_SECRET = "test-secret-0000000000000000000000000000"
TEST_AUDIENCE = "authenticated"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _auth_settings():
    from hrms.core.config import settings

    original_secret = settings.AUTH_JWT_SECRET
    original_audience = settings.AUTH_JWT_AUDIENCE
    original_issuer = settings.AUTH_JWT_ISSUER
    settings.AUTH_JWT_SECRET = TEST_JWT_SECRET
    settings.AUTH_JWT_AUDIENCE = TEST_AUDIENCE
    settings.AUTH_JWT_ISSUER = ""
    yield
    settings.AUTH_JWT_SECRET = original_secret
    settings.AUTH_JWT_AUDIENCE = original_audience
    settings.AUTH_JWT_ISSUER = original_issuer


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def make_token(
    secret: str = TEST_JWT_SECRET,
    *,
    sub: str = "user-123",
    email: str = "hr.admin@acme.vn",
    role: str = "authenticated",
    roles: list[str] | None = None,
    audience: str = TEST_AUDIENCE,
    expired: bool = False,
) -> str:
    now = int(time.time())
    claims = {
        "sub": sub,
        "email": email,
        "role": role,
        "app_metadata": {"roles": roles or []},
        "aud": audience,
        "exp": now - 3600 if expired else now + 3600,
        "iat": now - 60,
    }
    return jwt.encode(claims, secret, algorithm="HS256")


@pytest.fixture
def mock_user_hr():
    return UserInfo(id="hr-1", email="hr@acme.vn", role="authenticated", roles=["hr"])


@pytest.fixture
def authenticated_client(mock_user_hr):
    app.dependency_overrides[get_current_user] = lambda: mock_user_hr
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def db_service(tmp_path):
    settings = Settings(DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'hrms.db'}")
    await employee_service.initialize(settings)
    await employee_service.create_schema()
    yield employee_service
    await employee_service.close()


@pytest.fixture
async def api_client(db_service, async_client, mock_user_hr):
    app.dependency_overrides[get_current_user] = lambda: mock_user_hr
    yield async_client
    app.dependency_overrides.clear()
