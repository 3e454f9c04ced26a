"""Pytest configuration and fixtures for LeaseDesk tests.

Beanie runs on an in-memory mongomock-motor client, so no MongoDB server
is needed. API tests go through the real routers via ASGITransport.
"""

import io
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import httpx
import pytest
import pytest_asyncio
from beanie import init_beanie
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient
from openpyxl import Workbook

from leasedesk.config import settings
from leasedesk.database import get_document_models
from leasedesk.models import User, UserRole
from leasedesk.services.auth import create_session, create_user

# Header row in the canonical field order, using the Russian aliases
OFFER_HEADERS = [
    "Код предложения",
    "Статус",
    "Марка",
    "Модель",
    "Модификация",
    "Тип ТС",
    "Год выпуска",
    "Пробег, км",
    "Количество ключей",
    "ПТС/ЭПТС",
    "Обременение",
    "Снят с учета",
    "Ответственный",
    "Место хранения",
    "Дней в продаже",
    "Цена",
    "Яндекс Диск",
    "Статус брони",
    "Внешний ID",
    "CRM",
    "Ссылка на сайт",
]

TEST_PASSWORD = "secret-password"


def make_offer_row(**overrides: Any) -> list[Any]:
    """A valid data row aligned with OFFER_HEADERS; override cells by field name."""
    values: dict[str, Any] = {
        "offer_code": "OFR-1",
        "status": "В продаже",
        "brand": "Toyota",
        "model": "Camry",
        "modification": "2.5 AT",
        "vehicle_type": "Легковой",
        "year": 2020,
        "mileage_km": "45 000",
        "key_count": 2,
        "pts_type": "ЭПТС",
        "has_encumbrance": "Нет",
        "is_deregistered": "Да",
        "responsible_person": "Иванов И.И.",
        "storage_address": "420000, Респ. Татарстан, г. Казань, ул. Баумана 1",
        "days_on_sale": 12,
        "price": "1 234 567,50",
        "yandex_disk_url": "https://disk.yandex.ru/d/abc123",
        "booking_status": "Свободен",
        "external_id": "EXT-1",
        "crm_ref": "CRM-1",
        "website_url": "example.com/offers/1",
    }
    values.update(overrides)
    return list(values.values())


def make_xlsx(headers: list[Any], rows: list[list[Any]]) -> bytes:
    """Build an XLSX workbook in memory."""
    wb = Workbook()
    ws = wb.active
    ws.append(headers)
    for row in rows:
        ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def _not_found_transport() -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(404))


def create_test_app():
    """Create a FastAPI app configured for testing (no database lifespan)."""
    from fastapi import FastAPI
    from slowapi import _rate_limit_exceeded_handler
    from slowapi.errors import RateLimitExceeded

    from leasedesk import __version__
    from leasedesk.main import app as main_app
    from leasedesk.main import limiter

    # Empty lifespan for testing - we manage the database ourselves
    @asynccontextmanager
    async def test_lifespan(app: FastAPI):
        yield

    test_app = FastAPI(title="LeaseDesk Test", version=__version__, lifespan=test_lifespan)
    test_app.state.limiter = limiter
    test_app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    for route in main_app.routes:
        test_app.routes.append(route)

    return test_app


_test_app = None


def get_test_app():
    """Get the test app singleton."""
    global _test_app
    if _test_app is None:
        _test_app = create_test_app()
    return _test_app


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Login limits are kept in process memory; start every test clean."""
    from leasedesk.main import limiter
    from leasedesk.routers import auth

    limiter.reset()
    auth.limiter.reset()
    yield


@pytest_asyncio.fixture(scope="function")
async def init_test_db():
    """Initialize Beanie over a fresh in-memory database."""
    client = AsyncMongoMockClient()
    db = client[f"test_leasedesk_{uuid.uuid4().hex[:8]}"]
    await init_beanie(database=db, document_models=get_document_models())
    yield db


@pytest.fixture
def app(init_test_db):
    """The test app with fresh per-process services on app.state."""
    from leasedesk.main import init_app_state

    test_app = get_test_app()
    init_app_state(test_app, httpx.AsyncClient(transport=_not_found_transport()))
    return test_app


async def _make_user(login: str, role: UserRole) -> User:
    return await create_user(login, TEST_PASSWORD, display_name=login.title(), role=role)


@pytest_asyncio.fixture
async def admin_user(init_test_db) -> User:
    return await _make_user("admin", UserRole.ADMIN)


@pytest_asyncio.fixture
async def stock_owner_user(init_test_db) -> User:
    return await _make_user("owner", UserRole.STOCK_OWNER)


@pytest_asyncio.fixture
async def manager_user(init_test_db) -> User:
    return await _make_user("manager", UserRole.MANAGER)


@asynccontextmanager
async def _client_for(app, user: User | None) -> AsyncGenerator[AsyncClient, None]:
    headers = {}
    if user is not None:
        token = await create_session(user)
        headers["Cookie"] = f"{settings.session_cookie_name}={token}"
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", headers=headers) as ac:
        yield ac


@pytest_asyncio.fixture
async def unauthenticated_client(app) -> AsyncGenerator[AsyncClient, None]:
    async with _client_for(app, None) as ac:
        yield ac


@pytest_asyncio.fixture
async def admin_client(app, admin_user) -> AsyncGenerator[AsyncClient, None]:
    async with _client_for(app, admin_user) as ac:
        yield ac


@pytest_asyncio.fixture
async def owner_client(app, stock_owner_user) -> AsyncGenerator[AsyncClient, None]:
    async with _client_for(app, stock_owner_user) as ac:
        yield ac


@pytest_asyncio.fixture
async def manager_client(app, manager_user) -> AsyncGenerator[AsyncClient, None]:
    async with _client_for(app, manager_user) as ac:
        yield ac
