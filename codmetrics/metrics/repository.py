"""
Order Source

Fetches the raw rows the metrics core aggregates. The protocol keeps the
service independent of storage; ``SqlAlchemyOrderSource`` is the database
implementation.
"""

from datetime import datetime
from typing import Any, List, Optional, Protocol
from uuid import UUID

import structlog
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from codmetrics.database.connection import get_session_factory
from codmetrics.database.models import (
    Carrier,
    Country,
    Employee,
    Order,
    OrderItem,
    Product,
    Status,
)
from codmetrics.metrics.types import MetricsFilters, OrderItemRow, OrderRow

logger = structlog.get_logger(__name__)


class OrderSource(Protocol):
    """Supplies filtered order and line-item rows for one business"""

    async def fetch_orders(self, business_id: UUID, filters: MetricsFilters) -> List[OrderRow]:
        ...

    async def fetch_order_items(self, business_id: UUID, filters: MetricsFilters) -> List[OrderItemRow]:
        ...


def _order_conditions(business_id: UUID, filters: MetricsFilters, by_product: bool = True) -> List[Any]:
    """WHERE clauses on orders (and their joined status) for a filter set."""
    conditions = [
        Order.business_id == business_id,
        Order.order_date >= datetime.combine(filters.date_from, datetime.min.time()),
        Order.order_date <= datetime.combine(filters.date_to, datetime.max.time()),
    ]

    if filters.country_id:
        conditions.append(Order.country_id == filters.country_id)
    if filters.carrier_id:
        conditions.append(Order.carrier_id == filters.carrier_id)
    if filters.employee_id:
        conditions.append(Order.employee_id == filters.employee_id)
    if filters.status_id:
        conditions.append(Order.status_id == filters.status_id)
    if filters.status_key:
        conditions.append(Status.key == filters.status_key)
    if by_product and filters.product_id:
        conditions.append(
            select(OrderItem.id)
            .where(
                OrderItem.order_id == Order.id,
                OrderItem.product_id == filters.product_id,
            )
            .exists()
        )

    return conditions


class SqlAlchemyOrderSource:
    """
    Order source backed by the relational store.

    Every fetch opens its own session so several fetches can be awaited
    concurrently.
    """

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self._session_factory = session_factory

    def _session(self) -> AsyncSession:
        factory = self._session_factory or get_session_factory()
        return factory()

    async def fetch_orders(self, business_id: UUID, filters: MetricsFilters) -> List[OrderRow]:
        """Orders matching the filters, joined with status and dimension names."""
        stmt = (
            select(
                Order.id.label("order_id"),
                Order.order_date,
                Order.revenue,
                Order.cogs,
                Order.shipping_cost,
                Order.ad_cost,
                Order.country_id,
                Country.name_ar.label("country_name"),
                Order.carrier_id,
                Carrier.name_ar.label("carrier_name"),
                Order.employee_id,
                Employee.name_ar.label("employee_name"),
                Order.status_id,
                Status.key.label("status_key"),
                Status.name_ar.label("status_label"),
                Status.color.label("status_color"),
                Status.counts_as_delivered,
                Status.counts_as_return,
                Status.counts_as_active,
                Status.is_final,
            )
            .select_from(Order)
            .join(Status, Order.status_id == Status.id)
            .outerjoin(Country, Order.country_id == Country.id)
            .outerjoin(Carrier, Order.carrier_id == Carrier.id)
            .outerjoin(Employee, Order.employee_id == Employee.id)
            .where(and_(*_order_conditions(business_id, filters)))
        )

        try:
            async with self._session() as session:
                result = await session.execute(stmt)
                rows = [OrderRow(**row._mapping) for row in result.all()]
        except Exception as e:
            logger.error(
                "Failed to fetch orders",
                business_id=str(business_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        logger.debug("Orders fetched", business_id=str(business_id), rows=len(rows))
        return rows

    async def fetch_order_items(self, business_id: UUID, filters: MetricsFilters) -> List[OrderItemRow]:
        """Line items of matching orders, joined with product name and order status."""
        conditions = _order_conditions(business_id, filters, by_product=False)
        if filters.product_id:
            conditions.append(OrderItem.product_id == filters.product_id)

        stmt = (
            select(
                OrderItem.order_id,
                OrderItem.product_id,
                Product.name_ar.label("product_name"),
                OrderItem.quantity,
                OrderItem.unit_price,
                OrderItem.unit_cost,
                Status.counts_as_delivered,
                Status.counts_as_return,
            )
            .select_from(OrderItem)
            .join(Order, OrderItem.order_id == Order.id)
            .join(Status, Order.status_id == Status.id)
            .outerjoin(Product, OrderItem.product_id == Product.id)
            .where(and_(*conditions))
        )

        try:
            async with self._session() as session:
                result = await session.execute(stmt)
                items = [OrderItemRow(**row._mapping) for row in result.all()]
        except Exception as e:
            logger.error(
                "Failed to fetch order items",
                business_id=str(business_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        logger.debug("Order items fetched", business_id=str(business_id), rows=len(items))
        return items
