"""Pytest configuration and shared fixtures."""

import os

# Set test database URL BEFORE any imports from src
# This ensures the module-level engines never point at a developer database
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from src.models import Base  # noqa: E402
from src.models.apartment import Apartment  # noqa: E402
from src.models.payment import Currency, Payment  # noqa: E402
from src.models.service_request import ServiceRequest  # noqa: E402
from src.models.user import User, UserRole  # noqa: E402
from src.models.utility_reading import UtilityReading, WhoPays  # noqa: E402
from src.models.village import Village  # noqa: E402
from src.services import build_async_engine  # noqa: E402


@pytest.fixture
async def async_db_session():
    """Create async test database session."""
    engine = build_async_engine("sqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session

    await engine.dispose()


@pytest.fixture
async def village(async_db_session):
    """Create a village priced at 2 EGP per water unit and 3 EGP per electricity unit."""
    village = Village(
        name="Sunrise Bay",
        water_price=Decimal("2"),
        electricity_price=Decimal("3"),
        phases=3,
    )
    async_db_session.add(village)
    await async_db_session.commit()
    return village


@pytest.fixture
async def owner(async_db_session):
    """Create an apartment owner."""
    user = User(name="Mona Owner", email="mona@example.com", role=UserRole.OWNER)
    async_db_session.add(user)
    await async_db_session.commit()
    return user


@pytest.fixture
async def apartment(async_db_session, village, owner):
    """Create an apartment with no ledger activity."""
    apt = Apartment(name="A-101", village_id=village.id, phase=1, owner_id=owner.id)
    async_db_session.add(apt)
    await async_db_session.commit()
    return apt


@pytest.fixture
def add_payment(async_db_session):
    """Return a helper that records a payment."""

    async def _add(apartment_id: int, amount: str, currency: str = "EGP") -> Payment:
        payment = Payment(apartment_id=apartment_id, amount=Decimal(amount), currency=currency)
        async_db_session.add(payment)
        await async_db_session.commit()
        return payment

    return _add


@pytest.fixture
def add_service_request(async_db_session):
    """Return a helper that logs a service request."""

    async def _add(
        apartment_id: int, cost: str, currency: Currency = Currency.EGP
    ) -> ServiceRequest:
        request = ServiceRequest(
            apartment_id=apartment_id,
            service_name="Cleaning",
            cost=Decimal(cost),
            currency=currency,
        )
        async_db_session.add(request)
        await async_db_session.commit()
        return request

    return _add


@pytest.fixture
def add_reading(async_db_session):
    """Return a helper that logs a utility reading (bounds may be None)."""

    async def _add(
        apartment_id: int,
        water: tuple | None = (None, None),
        electricity: tuple | None = (None, None),
        who_pays: WhoPays = WhoPays.OWNER,
    ) -> UtilityReading:
        water_start, water_end = water
        electricity_start, electricity_end = electricity
        reading = UtilityReading(
            apartment_id=apartment_id,
            water_start_reading=None if water_start is None else Decimal(str(water_start)),
            water_end_reading=None if water_end is None else Decimal(str(water_end)),
            electricity_start_reading=(
                None if electricity_start is None else Decimal(str(electricity_start))
            ),
            electricity_end_reading=(
                None if electricity_end is None else Decimal(str(electricity_end))
            ),
            who_pays=who_pays,
        )
        async_db_session.add(reading)
        await async_db_session.commit()
        return reading

    return _add
