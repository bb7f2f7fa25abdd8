"""
Test Suite Configuration
"""
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import AsyncGenerator, Dict, List
from uuid import UUID

import pytest
import pytest_asyncio
from sqlalchemy import null
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from codmetrics.database.models import (
    Base,
    Carrier,
    Country,
    Employee,
    Order,
    OrderItem,
    Product,
    Status,
)
from codmetrics.metrics.types import MetricsFilters, OrderItemRow, OrderMetrics, OrderRow

BUSINESS_ID = UUID("00000000-0000-4000-8000-000000000001")
OTHER_BUSINESS_ID = UUID("00000000-0000-4000-8000-000000000002")

SA_ID = UUID("10000000-0000-4000-8000-000000000001")
AE_ID = UUID("10000000-0000-4000-8000-000000000002")
KW_ID = UUID("10000000-0000-4000-8000-000000000003")

ARAMEX_ID = UUID("20000000-0000-4000-8000-000000000001")
SMSA_ID = UUID("20000000-0000-4000-8000-000000000002")

EMPLOYEE_ID = UUID("30000000-0000-4000-8000-000000000001")

PERFUME_ID = UUID("40000000-0000-4000-8000-000000000001")
WATCH_ID = UUID("40000000-0000-4000-8000-000000000002")
BAG_ID = UUID("40000000-0000-4000-8000-000000000003")

DELIVERED_STATUS_ID = UUID("50000000-0000-4000-8000-000000000001")
RETURNED_STATUS_ID = UUID("50000000-0000-4000-8000-000000000002")
NEW_STATUS_ID = UUID("50000000-0000-4000-8000-000000000003")


class FakeOrderSource:
    """In-memory order source that records the filters it was called with"""

    def __init__(self, orders: List[OrderRow] = None, items: List[OrderItemRow] = None, error: Exception = None):
        self.orders = orders or []
        self.items = items or []
        self.error = error
        self.calls: List[MetricsFilters] = []

    async def fetch_orders(self, business_id: UUID, filters: MetricsFilters) -> List[OrderRow]:
        self.calls.append(filters)
        if self.error:
            raise self.error
        return [
            order for order in self.orders
            if order.order_date is None or filters.date_from <= order.order_date.date() <= filters.date_to
        ]

    async def fetch_order_items(self, business_id: UUID, filters: MetricsFilters) -> List[OrderItemRow]:
        self.calls.append(filters)
        if self.error:
            raise self.error
        return list(self.items)


@pytest.fixture
def four_orders() -> List[OrderMetrics]:
    """Two delivered, one returned and one active order"""
    return [
        OrderMetrics(revenue=1000, cogs=300, shipping_cost=100, ad_cost=50, counts_as_delivered=True),
        OrderMetrics(revenue=800, cogs=200, shipping_cost=80, ad_cost=40, counts_as_delivered=True),
        OrderMetrics(revenue=500, cogs=150, shipping_cost=50, ad_cost=0, counts_as_return=True),
        OrderMetrics(revenue=1200, cogs=400, shipping_cost=120, ad_cost=60, counts_as_active=True),
    ]


@pytest.fixture
def january_filters() -> MetricsFilters:
    return MetricsFilters(date_from=date(2025, 1, 1), date_to=date(2025, 1, 31))


@pytest.fixture
def order_rows() -> List[OrderRow]:
    """
    Six orders over three countries with differing totals and profits.

    Saudi Arabia has the most orders, the UAE the highest profit.
    """
    def row(day, country_id, country_name, revenue, delivered=False, returned=False, carrier_id=ARAMEX_ID):
        return OrderRow(
            order_id=uuid.uuid4(),
            order_date=datetime(2025, 1, day, 12, 0),
            revenue=Decimal(revenue),
            cogs=Decimal("100"),
            shipping_cost=Decimal("20"),
            ad_cost=Decimal("10"),
            counts_as_delivered=delivered,
            counts_as_return=returned,
            counts_as_active=not (delivered or returned),
            country_id=country_id,
            country_name=country_name,
            carrier_id=carrier_id,
            carrier_name="أرامكس" if carrier_id == ARAMEX_ID else "سمسا",
            employee_id=EMPLOYEE_ID,
            employee_name="أحمد",
            status_key="delivered" if delivered else "returned" if returned else "new",
            status_label="تم التوصيل" if delivered else "مرتجع" if returned else "جديد",
            status_color="#22c55e" if delivered else "#ef4444" if returned else "#3b82f6",
        )

    return [
        row(20, SA_ID, "السعودية", "200", delivered=True),
        row(5, SA_ID, "السعودية", "150", returned=True, carrier_id=SMSA_ID),
        row(12, SA_ID, "السعودية", "180"),
        row(5, AE_ID, "الإمارات", "900", delivered=True),
        row(20, AE_ID, "الإمارات", "700", delivered=True, carrier_id=SMSA_ID),
        row(12, KW_ID, "الكويت", "300", returned=True),
    ]


@pytest.fixture
def order_items() -> List[OrderItemRow]:
    """
    Line items for three products.

    By profit: watch, perfume, bag. By revenue: watch, bag, perfume.
    """
    order_a, order_b, order_c = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    return [
        OrderItemRow(order_id=order_a, product_id=PERFUME_ID, product_name="عطر", quantity=2,
                     unit_price=Decimal("100"), unit_cost=Decimal("40"), counts_as_delivered=True),
        OrderItemRow(order_id=order_a, product_id=WATCH_ID, product_name="ساعة", quantity=1,
                     unit_price=Decimal("500"), unit_cost=Decimal("200"), counts_as_delivered=True),
        OrderItemRow(order_id=order_b, product_id=PERFUME_ID, product_name="عطر", quantity=1,
                     unit_price=Decimal("100"), unit_cost=Decimal("40"), counts_as_return=True),
        OrderItemRow(order_id=order_c, product_id=BAG_ID, product_name="حقيبة", quantity=3,
                     unit_price=Decimal("120"), unit_cost=Decimal("100")),
    ]


# =============================================================================
# DATABASE
# =============================================================================

@pytest_asyncio.fixture
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine so concurrent sessions see the same data"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'codmetrics.db'}",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def seeded_db(session_factory) -> Dict[str, UUID]:
    """
    One business with three statuses, three January orders and one on the
    first of February, plus one order belonging to another business.
    """
    async with session_factory() as session:
        session.add_all([
            Status(id=DELIVERED_STATUS_ID, business_id=BUSINESS_ID, key="delivered", name_ar="تم التوصيل",
                   color="#22c55e", counts_as_delivered=True, counts_as_active=False, is_final=True),
            Status(id=RETURNED_STATUS_ID, business_id=BUSINESS_ID, key="returned", name_ar="مرتجع",
                   color="#ef4444", counts_as_return=True, counts_as_active=False, is_final=True),
            Status(id=NEW_STATUS_ID, business_id=BUSINESS_ID, key="new", name_ar="جديد",
                   color="#3b82f6", counts_as_active=True),
            Country(id=SA_ID, business_id=BUSINESS_ID, name_ar="السعودية", code="SA"),
            Country(id=AE_ID, business_id=BUSINESS_ID, name_ar="الإمارات", code="AE"),
            Carrier(id=ARAMEX_ID, business_id=BUSINESS_ID, name_ar="أرامكس"),
            Employee(id=EMPLOYEE_ID, business_id=BUSINESS_ID, name_ar="أحمد"),
            Product(id=PERFUME_ID, business_id=BUSINESS_ID, name_ar="عطر", price=100, cost=40),
            Product(id=WATCH_ID, business_id=BUSINESS_ID, name_ar="ساعة", price=500, cost=200),
        ])
        await session.flush()

        orders = [
            # First and last instant of the range are both included
            Order(business_id=BUSINESS_ID, order_number="ORD-1", order_date=datetime(2025, 1, 1, 0, 0),
                  customer_name="سارة", status_id=DELIVERED_STATUS_ID, country_id=SA_ID, carrier_id=ARAMEX_ID,
                  employee_id=EMPLOYEE_ID, revenue=1000, cogs=300, shipping_cost=100, ad_cost=50),
            Order(business_id=BUSINESS_ID, order_number="ORD-2", order_date=datetime(2025, 1, 31, 23, 59, 59),
                  customer_name="ليلى", status_id=RETURNED_STATUS_ID, country_id=AE_ID,
                  revenue=500, cogs=150, shipping_cost=50, ad_cost=null()),
            Order(business_id=BUSINESS_ID, order_number="ORD-3", order_date=datetime(2025, 1, 15, 9, 30),
                  customer_name="خالد", status_id=NEW_STATUS_ID, country_id=SA_ID,
                  revenue=1200, cogs=400, shipping_cost=120, ad_cost=60),
            Order(business_id=BUSINESS_ID, order_number="ORD-4", order_date=datetime(2025, 2, 1, 0, 0),
                  customer_name="نورة", status_id=DELIVERED_STATUS_ID, country_id=SA_ID,
                  revenue=800, cogs=200, shipping_cost=80, ad_cost=40),
            Order(business_id=OTHER_BUSINESS_ID, order_number="ORD-X", order_date=datetime(2025, 1, 10, 10, 0),
                  customer_name="مجهول", status_id=DELIVERED_STATUS_ID,
                  revenue=9999, cogs=0, shipping_cost=0, ad_cost=0),
        ]
        session.add_all(orders)
        await session.flush()

        session.add_all([
            OrderItem(order_id=orders[0].id, business_id=BUSINESS_ID, product_id=PERFUME_ID,
                      quantity=2, unit_price=100, unit_cost=40),
            OrderItem(order_id=orders[0].id, business_id=BUSINESS_ID, product_id=WATCH_ID,
                      quantity=1, unit_price=500, unit_cost=200),
            OrderItem(order_id=orders[1].id, business_id=BUSINESS_ID, product_id=WATCH_ID,
                      quantity=1, unit_price=500, unit_cost=200),
        ])
        await session.commit()

        return {"delivered_order": orders[0].id, "returned_order": orders[1].id}
