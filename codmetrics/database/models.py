"""
Database Models - COD Order Schema

Tables consumed by the metrics core. Every row is scoped by ``business_id``.

Reference Tables:
- statuses: per-business order statuses and their operational classification
- countries, carriers, employees: breakdown dimensions
- products: product catalog

Transaction Tables:
- orders: one row per order with its economic fields
- order_items: line items (product, quantity, unit price/cost)
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List
import uuid

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# REFERENCE TABLES
# =============================================================================

class Status(Base):
    """
    Order Status

    Each business maintains its own status list. The classification flags
    decide which bucket (delivered, return, active) an order in this status
    counts towards; exactly one is expected to be set.
    """
    __tablename__ = "statuses"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    business_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    key: Mapped[str] = mapped_column(String(50), nullable=False)
    name_ar: Mapped[str] = mapped_column(String(100), nullable=False)
    name_en: Mapped[Optional[str]] = mapped_column(String(100))
    color: Mapped[Optional[str]] = mapped_column(String(20), default="#64748b")

    counts_as_delivered: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    counts_as_return: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    counts_as_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_final: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("ix_statuses_business_key", "business_id", "key", unique=True),
    )


class Country(Base):
    """Destination country"""
    __tablename__ = "countries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    business_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    name_ar: Mapped[str] = mapped_column(String(100), nullable=False)
    name_en: Mapped[Optional[str]] = mapped_column(String(100))
    code: Mapped[str] = mapped_column(String(3), nullable=False)
    currency: Mapped[Optional[str]] = mapped_column(String(3))
    shipping_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class Carrier(Base):
    """Delivery carrier"""
    __tablename__ = "carriers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    business_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    name_ar: Mapped[str] = mapped_column(String(100), nullable=False)
    name_en: Mapped[Optional[str]] = mapped_column(String(100))
    tracking_url: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class Employee(Base):
    """Call-center employee who confirmed the order"""
    __tablename__ = "employees"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    business_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    name_ar: Mapped[str] = mapped_column(String(100), nullable=False)
    name_en: Mapped[Optional[str]] = mapped_column(String(100))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class Product(Base):
    """Product catalog entry"""
    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    business_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    name_ar: Mapped[str] = mapped_column(String(200), nullable=False)
    name_en: Mapped[Optional[str]] = mapped_column(String(200))
    sku: Mapped[Optional[str]] = mapped_column(String(100))
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


# =============================================================================
# TRANSACTION TABLES
# =============================================================================

class Order(Base):
    """
    Order

    Grain is one order. ``revenue`` is the amount collected on delivery;
    ``cogs``, ``shipping_cost`` and ``ad_cost`` are the costs attributed to it.
    """
    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    business_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    order_number: Mapped[str] = mapped_column(String(50), nullable=False)
    order_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_phone: Mapped[Optional[str]] = mapped_column(String(50))
    tracking_number: Mapped[Optional[str]] = mapped_column(String(100))

    # Dimensions
    status_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("statuses.id"))
    country_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("countries.id"))
    carrier_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("carriers.id"))
    employee_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("employees.id"))

    # Measures
    revenue: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    cogs: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    shipping_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    ad_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    status: Mapped[Optional["Status"]] = relationship()
    items: Mapped[List["OrderItem"]] = relationship(back_populates="order")

    __table_args__ = (
        Index("ix_orders_business_date", "business_id", "order_date"),
        Index("ix_orders_status", "status_id"),
        Index("ix_orders_country", "country_id"),
        Index("ix_orders_carrier", "carrier_id"),
        Index("ix_orders_employee", "employee_id"),
    )


class OrderItem(Base):
    """
    Order Line Item

    Grain is one product line of an order.
    """
    __tablename__ = "order_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    business_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    product_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("products.id"))

    quantity: Mapped[int] = mapped_column(Integer, default=1)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    unit_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    order: Mapped["Order"] = relationship(back_populates="items")

    __table_args__ = (
        Index("ix_order_items_order", "order_id"),
        Index("ix_order_items_product", "product_id"),
    )
