"""
Shared test configuration.

Environment overrides are applied before anything from ``agriloop`` is
imported, because settings are cached on first use.
"""

import os

os.environ.setdefault("AGRILOOP_ENVIRONMENT", "test")
os.environ.setdefault("AGRILOOP_RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("AGRILOOP_TRACING_ENABLED", "false")
os.environ.setdefault("AGRILOOP_PASSWORD_BCRYPT_ROUNDS", "4")
os.environ.setdefault("AGRILOOP_LOG_FORMAT", "text")
os.environ.setdefault("AGRILOOP_LOG_LEVEL", "WARNING")
os.environ.setdefault("AGRILOOP_JWT_SECRET_KEY", "test-secret-key-that-is-at-least-32-characters")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from agriloop.dependencies import (  # noqa: E402
    get_listing_repository,
    get_order_repository,
    get_showcase_repository,
    get_user_repository,
)
from agriloop.main import app as agriloop_app  # noqa: E402
from agriloop.models.auth import CurrentUser  # noqa: E402
from agriloop.services.auth_service import AuthService  # noqa: E402
from tests.fakes import (  # noqa: E402
    FakeListingRepository,
    FakeOrderRepository,
    FakeShowcaseRepository,
    FakeUserRepository,
)
from tests.helpers import make_user, register  # noqa: E402


# ============================================================================
# REPOSITORIES
# ============================================================================


@pytest.fixture
def user_repo() -> FakeUserRepository:
    return FakeUserRepository()


@pytest.fixture
def listing_repo() -> FakeListingRepository:
    return FakeListingRepository()


@pytest.fixture
def order_repo() -> FakeOrderRepository:
    return FakeOrderRepository()


@pytest.fixture
def showcase_repo() -> FakeShowcaseRepository:
    return FakeShowcaseRepository()


@pytest.fixture
def auth_service(user_repo) -> AuthService:
    return AuthService(user_repo)


# ============================================================================
# USERS
# ============================================================================


@pytest.fixture
async def farmer(user_repo) -> CurrentUser:
    return await make_user(user_repo, "farmer", "Lakshmi Nair", "lakshmi@example.com")


@pytest.fixture
async def creator(user_repo) -> CurrentUser:
    return await make_user(user_repo, "creator", "Arjun Menon", "arjun@example.com")


# ============================================================================
# HTTP CLIENT
# ============================================================================


@pytest.fixture
def app(user_repo, listing_repo, order_repo, showcase_repo):
    """The real application with the data layer swapped for fakes."""
    agriloop_app.dependency_overrides[get_user_repository] = lambda: user_repo
    agriloop_app.dependency_overrides[get_listing_repository] = lambda: listing_repo
    agriloop_app.dependency_overrides[get_order_repository] = lambda: order_repo
    agriloop_app.dependency_overrides[get_showcase_repository] = lambda: showcase_repo
    yield agriloop_app
    agriloop_app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    # no context manager: the lifespan (MongoDB connect) must not run
    return TestClient(app)


@pytest.fixture
def farmer_token(client) -> str:
    return register(client, "farmer", "farmer@example.com", "Lakshmi Nair")["token"]


@pytest.fixture
def creator_token(client) -> str:
    return register(client, "creator", "creator@example.com", "Arjun Menon")["token"]
