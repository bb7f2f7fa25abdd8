"""
Metrics Types

Input rows (dataclasses, produced by the order source) and result records
(pydantic models, returned to callers and serialised by the API).
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Dict, List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, PlainSerializer, model_validator

Number = Union[int, float, Decimal]

# Decimal in Python, a JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


# =============================================================================
# INPUT ROWS
# =============================================================================

@dataclass(frozen=True)
class OrderMetrics:
    """Per-order economic snapshot"""
    revenue: Optional[Number] = 0
    cogs: Optional[Number] = 0
    shipping_cost: Optional[Number] = 0
    ad_cost: Optional[Number] = 0
    counts_as_delivered: bool = False
    counts_as_return: bool = False
    counts_as_active: bool = False
    is_final: bool = False


@dataclass(frozen=True)
class OrderRow(OrderMetrics):
    """Order joined with its status and dimension names"""
    order_id: Optional[UUID] = None
    order_date: Optional[datetime] = None
    country_id: Optional[UUID] = None
    country_name: Optional[str] = None
    carrier_id: Optional[UUID] = None
    carrier_name: Optional[str] = None
    employee_id: Optional[UUID] = None
    employee_name: Optional[str] = None
    status_id: Optional[UUID] = None
    status_key: Optional[str] = None
    status_label: Optional[str] = None
    status_color: Optional[str] = None


@dataclass(frozen=True)
class OrderItemRow:
    """Order line item joined with its product and parent order status"""
    order_id: UUID
    product_id: Optional[UUID]
    product_name: Optional[str] = None
    quantity: Optional[int] = 1
    unit_price: Optional[Number] = 0
    unit_cost: Optional[Number] = 0
    counts_as_delivered: bool = False
    counts_as_return: bool = False


@dataclass(frozen=True)
class AggregatedMetrics:
    """Reduction of a collection of OrderMetrics"""
    total_orders: int = 0
    delivered_orders: int = 0
    return_orders: int = 0
    active_orders: int = 0
    gross_sales: Decimal = Decimal("0")
    total_cogs: Decimal = Decimal("0")
    total_shipping_cost: Decimal = Decimal("0")
    total_ad_cost: Decimal = Decimal("0")
    net_profit: Decimal = Decimal("0")


# =============================================================================
# FILTERS
# =============================================================================

class MetricsFilters(BaseModel):
    """Filter set shared by every metrics operation"""
    date_from: date
    date_to: date
    country_id: Optional[UUID] = None
    carrier_id: Optional[UUID] = None
    employee_id: Optional[UUID] = None
    product_id: Optional[UUID] = None
    status_id: Optional[UUID] = None
    status_key: Optional[str] = None
    include_ad_cost: bool = True
    # AOV divides gross sales by this count
    delivered_denominator: Literal["total", "delivered"] = "total"

    @model_validator(mode="after")
    def check_date_range(self) -> "MetricsFilters":
        if self.date_to < self.date_from:
            raise ValueError("date_to must not be before date_from")
        return self


# =============================================================================
# RESULTS
# =============================================================================

class DateRange(BaseModel):
    """Inclusive calendar date range"""
    date_from: date
    date_to: date


class KPIs(BaseModel):
    """Headline metrics for a filter set"""
    total_orders: int
    delivered_orders: int
    return_orders: int
    active_orders: int
    delivery_rate: float
    return_rate: float
    gross_sales: Money
    total_cogs: Money
    total_shipping_cost: Money
    total_ad_cost: Money
    net_profit: Money
    aov: Money
    last_updated_at: datetime


class TimeSeriesPoint(BaseModel):
    """Per-day aggregate"""
    date: date
    total_orders: int
    delivered_orders: int
    return_orders: int
    gross_sales: Money
    net_profit: Money


class DimensionBreakdown(BaseModel):
    """Aggregate for one country, carrier or employee"""
    id: UUID
    name_ar: Optional[str]
    total: int
    delivered: int
    returns: int
    delivery_rate: float
    gross_sales: Money
    net_profit: Money


class ProductBreakdown(BaseModel):
    """Aggregate for one product, computed from line items"""
    product_id: UUID
    name_ar: Optional[str]
    total_items: int
    total_orders: int
    delivered: int
    returns: int
    revenue: Money
    profit: Money
    delivery_rate: float


class Breakdowns(BaseModel):
    by_country: List[DimensionBreakdown]
    by_carrier: List[DimensionBreakdown]
    by_employee: List[DimensionBreakdown]
    by_product: List[ProductBreakdown]


class StatusShare(BaseModel):
    """Share of the matching orders sitting in one status"""
    status_key: str
    label_ar: Optional[str]
    color: Optional[str]
    count: int
    percentage: float


class Trend(BaseModel):
    current: float
    previous: float
    percent_change: float
    direction: Literal["up", "down", "neutral"]


class KpiComparison(BaseModel):
    """KPIs for a window against the window of equal length before it"""
    current: KPIs
    previous: KPIs
    previous_period: DateRange
    trends: Dict[str, Trend]
