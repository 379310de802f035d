import pytest
from datetime import datetime
from decimal import Decimal
from typing import AsyncGenerator
from zoneinfo import ZoneInfo
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from billmate.main import app
from billmate.core.database import get_async_session, get_session_factory
from billmate.db.base import Base
from billmate.models import Customer, Expense, Product, Sale

# In-memory database shared by every session of one test
TEST_DATABASE_URL = "sqlite+aiosqlite://"

SHOP_TZ = ZoneInfo("Asia/Kolkata")
# Friday afternoon in the shop's timezone
NOW = datetime(2024, 3, 15, 14, 30, tzinfo=SHOP_TZ)


@pytest.fixture
def tz() -> ZoneInfo:
    return SHOP_TZ


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the test database"""
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_maker
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_product(db_session):
    async def _make(name: str, stock: int, price: str = "10", cost: str = "6", **kwargs) -> Product:
        product = Product(
            name=name,
            selling_price=Decimal(price),
            cost_price=Decimal(cost),
            stock_quantity=stock,
            **kwargs
        )
        db_session.add(product)
        await db_session.commit()
        return product
    return _make


@pytest.fixture
def make_customer(db_session):
    async def _make(name: str, balance: str = "0", phone: str = "") -> Customer:
        customer = Customer(name=name, phone=phone, balance=Decimal(balance))
        db_session.add(customer)
        await db_session.commit()
        return customer
    return _make


@pytest.fixture
def make_sale(db_session):
    async def _make(total: str, date: datetime, refunded: bool = False, payment_method: str = "Cash") -> Sale:
        sale = Sale(
            date=date,
            total=Decimal(total),
            profit=Decimal("0"),
            payment_method=payment_method,
            refunded=refunded,
            item_count=1,
        )
        db_session.add(sale)
        await db_session.commit()
        return sale
    return _make


@pytest.fixture
def make_expense(db_session):
    async def _make(amount: str, date: datetime, type: str = "Supplies") -> Expense:
        expense = Expense(type=type, amount=Decimal(amount), date=date, note="")
        db_session.add(expense)
        await db_session.commit()
        return expense
    return _make
