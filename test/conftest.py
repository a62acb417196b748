"""
Test Configuration and Fixtures

This module provides:
- Environment setup that must run before application modules are imported
- The session-scoped HTTP client (TestClient over the test app)
- JWT helpers for user and admin callers

Architecture:
- Unit tests (test/**/unit/): AsyncMock repositories, no database
- Integration tests (test/**/integration/): a fresh SQLite file per test,
  or the shared HTTP client for API tests
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read at import time (eventbook.platform.config.core_setting)
# =============================================================================
import os
from pathlib import Path
import tempfile


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    # The API client gets its own SQLite file for the whole session
    api_db_dir = Path(tempfile.mkdtemp(prefix='eventbook_api_'))
    os.environ['DATABASE_URL'] = f'sqlite+aiosqlite:///{api_db_dir / "eventbook_api.db"}'
    os.environ.setdefault('SECRET_KEY', 'eventbook_test_secret_key_0123456789abcdef')
    os.environ.setdefault('DEBUG', 'false')


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from collections.abc import Callable, Generator  # noqa: E402
from typing import Any  # noqa: E402

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402

from eventbook.service.booking.domain.entity.user_entity import UserEntity, UserRole  # noqa: E402
from eventbook.service.booking.driving_adapter.http_controller.auth.jwt_auth import (  # noqa: E402
    JwtAuth,
)


# =============================================================================
# Session-scoped Fixtures
# =============================================================================
@pytest.fixture(scope='session')
def client() -> Generator[TestClient, None, None]:
    from test_main import app

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def clear_client_cookies(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    # Only tests that talk HTTP carry cookies around
    if 'client' not in request.fixturenames:
        yield
        return
    client = request.getfixturevalue('client')
    client.cookies.clear()
    yield
    client.cookies.clear()


# =============================================================================
# Auth Helpers
# =============================================================================
@pytest.fixture(scope='session')
def jwt_auth() -> JwtAuth:
    return JwtAuth()


@pytest.fixture(scope='session')
def auth_headers(jwt_auth: JwtAuth) -> Callable[..., dict[str, str]]:
    """Build an `Authorization: Bearer` header for any caller."""

    def _headers(user_id: int, role: UserRole = UserRole.USER, **extra: Any) -> dict[str, str]:
        token = jwt_auth.create_jwt_token(UserEntity(id=user_id, role=role, **extra))
        return {'Authorization': f'Bearer {token}'}

    return _headers


@pytest.fixture(scope='session')
def admin_headers(auth_headers: Callable[..., dict[str, str]]) -> dict[str, str]:
    return auth_headers(1, UserRole.ADMIN, email='admin@eventbook.test', name='Admin')


@pytest.fixture(scope='session')
def user_headers(auth_headers: Callable[..., dict[str, str]]) -> dict[str, str]:
    return auth_headers(2, email='alice@eventbook.test', name='Alice')


@pytest.fixture(scope='session')
def other_user_headers(auth_headers: Callable[..., dict[str, str]]) -> dict[str, str]:
    return auth_headers(3, email='bob@eventbook.test', name='Bob')
