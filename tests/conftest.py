"""Test configuration and fixtures"""

from decimal import Decimal
import httpx
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from uuid import uuid4

from app.main import app
from app.database import Base, get_db
from app.delivery.engine import DeliveryFeeEngine, get_fee_engine
from app.delivery.geocoding import Geocoder
from app.models.address import Address
from app.models.motoboy import Motoboy
from app.models.store import StoreSettings
from app.models.user import User, UserRole
from app.realtime.broadcaster import Broadcaster
from app.realtime.stream import get_broadcaster
from app.api.auth import get_password_hash, create_access_token


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Coordinates the fake geocoder knows about
STORE_COORDS = (-23.5790, -46.6390)
GEOCODED = {
    "Rua Domingos de Morais": {"lat": "-23.5880", "lon": "-46.6360", "display_name": "Vila Mariana"},
}


def geocoding_handler(request: httpx.Request) -> httpx.Response:
    """Nominatim stand-in: known streets resolve, everything else has no match"""
    query = request.url.params.get("q", "")
    for street, result in GEOCODED.items():
        if query.startswith(street):
            return httpx.Response(200, json=[result])
    return httpx.Response(200, json=[])


def unavailable_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, text="Service Unavailable")


@pytest.fixture
async def test_db():
    """Create test database"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def broadcaster():
    """Fresh broadcaster per test"""
    broadcaster = Broadcaster(buffer_size=10)
    yield broadcaster
    broadcaster.close()


@pytest.fixture
def fee_engine():
    """Fee engine backed by the fake geocoder"""
    return DeliveryFeeEngine(Geocoder(transport=httpx.MockTransport(geocoding_handler)))


@pytest.fixture
def offline_fee_engine():
    """Fee engine whose geocoding provider is down"""
    return DeliveryFeeEngine(Geocoder(transport=httpx.MockTransport(unavailable_handler)))


@pytest.fixture
async def test_store(test_db):
    """Store settings with coordinates and distance pricing"""
    store = StoreSettings(
        store_address="Rua Vergueiro, 1000, Vila Mariana, São Paulo, SP",
        store_lat=Decimal(str(STORE_COORDS[0])),
        store_lng=Decimal(str(STORE_COORDS[1])),
        delivery_rate_per_km=Decimal("1.25"),
        min_delivery_fee=Decimal("5.00"),
        max_delivery_distance=Decimal("15.00"),
        is_open=True,
    )
    test_db.add(store)
    await test_db.commit()

    return store


async def _create_user(test_db, name: str, role: UserRole, whatsapp=None) -> User:
    user = User(
        id=uuid4(),
        name=name,
        whatsapp=whatsapp,
        hashed_password=get_password_hash(f"{name.lower()}pass") if role != UserRole.CUSTOMER else None,
        role=role,
    )
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
async def test_customer(test_db):
    """Create a customer"""
    return await _create_user(test_db, "Cliente", UserRole.CUSTOMER, whatsapp="11911112222")


@pytest.fixture
async def test_admin(test_db):
    """Create an admin"""
    return await _create_user(test_db, "Admin", UserRole.ADMIN)


@pytest.fixture
async def test_kitchen(test_db):
    """Create a kitchen user"""
    return await _create_user(test_db, "Cozinha", UserRole.KITCHEN)


@pytest.fixture
async def test_pdv(test_db):
    """Create a point-of-sale user"""
    return await _create_user(test_db, "Balcao", UserRole.PDV)


@pytest.fixture
async def test_address(test_db, test_customer):
    """Create a customer address in a zone-table neighborhood"""
    address = Address(
        id=uuid4(),
        user_id=test_customer.id,
        street="Rua Domingos de Morais",
        number="2000",
        neighborhood="Vila Mariana",
        is_default=True,
    )
    test_db.add(address)
    await test_db.commit()

    return address


@pytest.fixture
async def test_motoboy(test_db):
    """Create a courier linked to a motoboy user"""
    user = await _create_user(test_db, "Joao", UserRole.MOTOBOY, whatsapp="11988887777")
    motoboy = Motoboy(
        id=uuid4(),
        user_id=user.id,
        name="Joao",
        whatsapp="11988887777",
        is_active=True,
    )
    test_db.add(motoboy)
    await test_db.commit()

    return motoboy


@pytest.fixture
async def client(test_db, broadcaster, fee_engine):
    """Create test client with overridden database, broadcaster and geocoder"""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_broadcaster] = lambda: broadcaster
    app.dependency_overrides[get_fee_engine] = lambda: fee_engine

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def _authenticate(client: AsyncClient, user: User) -> AsyncClient:
    client.headers["Authorization"] = f"Bearer {create_access_token(user)}"
    return client


@pytest.fixture
async def customer_client(client, test_customer):
    """Client authenticated as a customer"""
    return _authenticate(client, test_customer)


@pytest.fixture
async def admin_client(client, test_admin):
    """Client authenticated as an admin"""
    return _authenticate(client, test_admin)


@pytest.fixture
async def kitchen_client(client, test_kitchen):
    """Client authenticated as kitchen staff"""
    return _authenticate(client, test_kitchen)


@pytest.fixture
async def pdv_client(client, test_pdv):
    """Client authenticated as point-of-sale staff"""
    return _authenticate(client, test_pdv)
