import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise, connections

from user_registration.config import settings
from user_registration.core import db as db_module
from user_registration.main import app
from user_registration.schemas.user import RegistrationIn
from user_registration.services import build_services


TEST_DB_URL = "sqlite://:memory:"
# Minimum bcrypt work factor keeps the suite fast
TEST_SETTINGS = settings.model_copy(update={"bcrypt_rounds": 4, "jwt_secret": "test-secret"})

DEFAULT_PASSWORD = "Valid1Pass!"


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await connections.close_all()
    await Tortoise.init(db_url=TEST_DB_URL, modules={"models": db_module.MODEL_MODULES})
    await Tortoise.generate_schemas()


@pytest.fixture
def test_settings():
    return TEST_SETTINGS


@pytest_asyncio.fixture
async def services():
    """
    Fresh database with the default roles seeded, and a service container
    wired against it.
    """
    await _init_test_db()
    container = build_services(TEST_SETTINGS)
    await container.roles.seed_default_roles()
    yield container
    await connections.close_all()


@pytest_asyncio.fixture
async def client(services):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    app.state.services = services
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


def registration(**overrides) -> RegistrationIn:
    """A valid registration request; keyword arguments replace fields."""
    unique = uuid.uuid4().hex[:8]
    fields = {
        "firstName": "Jane",
        "lastName": "Doe",
        "email": f"jane.{unique}@acme.io",
        "password": DEFAULT_PASSWORD,
        "confirmPassword": DEFAULT_PASSWORD,
        "phoneNumber": None,
        "country": "US",
        "roles": ["General User"],
    }
    fields.update(overrides)
    return RegistrationIn(**fields)


@pytest.fixture
def make_registration():
    return registration


@pytest_asyncio.fixture
async def create_user(services):
    """
    Factory fixture registering users through the service layer.
    """

    async def _create_user(password: str = DEFAULT_PASSWORD, roles=("General User",), **overrides):
        data = registration(password=password, confirmPassword=password, roles=list(roles), **overrides)
        user = await services.users.register(data)
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def create_admin(create_user):
    """
    Factory fixture to create admin users for privileged endpoints.
    """

    async def _create_admin(password: str = "AdminPass!23"):
        return await create_user(password=password, roles=("General User", "Admin"))

    return _create_admin


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the login endpoint.
    """

    async def _get_headers(email: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/v1/auth/login",
            json={"email": email, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["data"]["token"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers
