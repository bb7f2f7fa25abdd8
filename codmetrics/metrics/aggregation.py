"""
Metrics Aggregation

Grouping and sorting of fetched rows into result records. Everything in this
module is synchronous and side-effect free; fetching lives in the repository
and orchestration in the service.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, Hashable, List, Optional, Sequence, Set, Tuple, TypeVar
from uuid import UUID

from codmetrics.metrics.calculations import (
    ZERO,
    aggregate_order_metrics,
    calculate_aov,
    calculate_delivery_rate,
    calculate_return_rate,
    to_decimal,
)
from codmetrics.metrics.types import (
    DimensionBreakdown,
    KPIs,
    MetricsFilters,
    OrderItemRow,
    OrderRow,
    ProductBreakdown,
    StatusShare,
    TimeSeriesPoint,
)

T = TypeVar("T")

SUPPORTED_BUCKETS = ("day",)


@dataclass
class Group:
    """Rows sharing one grouping key, with the display name of the first row"""
    name: Optional[str]
    rows: List = field(default_factory=list)


def group_rows(
    rows: Sequence[T],
    key: Callable[[T], Optional[Hashable]],
    name: Callable[[T], Optional[str]] = lambda row: None,
) -> "OrderedDict[Hashable, Group]":
    """
    Group rows by a key function, preserving first-seen order.

    Rows whose key is None are skipped.
    """
    groups: "OrderedDict[Hashable, Group]" = OrderedDict()
    for row in rows:
        group_key = key(row)
        if group_key is None:
            continue
        if group_key not in groups:
            groups[group_key] = Group(name=name(row))
        groups[group_key].rows.append(row)
    return groups


# =============================================================================
# KPIs
# =============================================================================

def build_kpis(
    rows: Sequence[OrderRow],
    filters: MetricsFilters,
    now: Optional[datetime] = None,
) -> KPIs:
    """Aggregate the whole row set into a KPIs record."""
    aggregated = aggregate_order_metrics(rows, filters.include_ad_cost)

    if filters.delivered_denominator == "delivered":
        denominator = aggregated.delivered_orders
    else:
        denominator = aggregated.total_orders

    return KPIs(
        total_orders=aggregated.total_orders,
        delivered_orders=aggregated.delivered_orders,
        return_orders=aggregated.return_orders,
        active_orders=aggregated.active_orders,
        delivery_rate=calculate_delivery_rate(aggregated.delivered_orders, aggregated.total_orders),
        return_rate=calculate_return_rate(aggregated.return_orders, aggregated.total_orders),
        gross_sales=aggregated.gross_sales,
        total_cogs=aggregated.total_cogs,
        total_shipping_cost=aggregated.total_shipping_cost,
        total_ad_cost=aggregated.total_ad_cost,
        net_profit=aggregated.net_profit,
        aov=calculate_aov(aggregated.gross_sales, denominator),
        last_updated_at=now or datetime.now(timezone.utc),
    )


# =============================================================================
# TIME SERIES
# =============================================================================

def _order_day(row: OrderRow) -> Optional[date]:
    if row.order_date is None:
        return None
    if isinstance(row.order_date, datetime):
        return row.order_date.date()
    return row.order_date


def build_time_series(
    rows: Sequence[OrderRow],
    filters: MetricsFilters,
    bucket: str = "day",
    fill_gaps: bool = False,
) -> List[TimeSeriesPoint]:
    """
    Aggregate rows per calendar day, ascending by date.

    Args:
        rows: Order rows in any order
        filters: Filter set (date range and ad cost inclusion)
        bucket: Time bucket; only "day" is supported
        fill_gaps: Emit a zero point for every day in the range without orders

    Raises:
        ValueError: For an unsupported bucket
    """
    if bucket not in SUPPORTED_BUCKETS:
        raise ValueError(f"Unsupported time bucket: {bucket!r}")

    points: Dict[date, TimeSeriesPoint] = {}
    for day, group in group_rows(rows, _order_day).items():
        aggregated = aggregate_order_metrics(group.rows, filters.include_ad_cost)
        points[day] = TimeSeriesPoint(
            date=day,
            total_orders=aggregated.total_orders,
            delivered_orders=aggregated.delivered_orders,
            return_orders=aggregated.return_orders,
            gross_sales=aggregated.gross_sales,
            net_profit=aggregated.net_profit,
        )

    if fill_gaps:
        day = filters.date_from
        while day <= filters.date_to:
            if day not in points:
                points[day] = TimeSeriesPoint(
                    date=day,
                    total_orders=0,
                    delivered_orders=0,
                    return_orders=0,
                    gross_sales=ZERO,
                    net_profit=ZERO,
                )
            day += timedelta(days=1)

    return sorted(points.values(), key=lambda point: point.date)


# =============================================================================
# BREAKDOWNS
# =============================================================================

def build_dimension_breakdown(
    rows: Sequence[OrderRow],
    key: Callable[[OrderRow], Optional[UUID]],
    name: Callable[[OrderRow], Optional[str]],
    include_ad_cost: bool = True,
) -> List[DimensionBreakdown]:
    """
    Group rows by one dimension and aggregate each group.

    Sorted busiest first (descending by total orders).
    """
    breakdown = []
    for group_key, group in group_rows(rows, key, name).items():
        aggregated = aggregate_order_metrics(group.rows, include_ad_cost)
        breakdown.append(
            DimensionBreakdown(
                id=group_key,
                name_ar=group.name,
                total=aggregated.total_orders,
                delivered=aggregated.delivered_orders,
                returns=aggregated.return_orders,
                delivery_rate=calculate_delivery_rate(
                    aggregated.delivered_orders, aggregated.total_orders
                ),
                gross_sales=aggregated.gross_sales,
                net_profit=aggregated.net_profit,
            )
        )
    return sorted(breakdown, key=lambda item: item.total, reverse=True)


def build_country_breakdown(rows: Sequence[OrderRow], include_ad_cost: bool = True) -> List[DimensionBreakdown]:
    return build_dimension_breakdown(
        rows, lambda row: row.country_id, lambda row: row.country_name, include_ad_cost
    )


def build_carrier_breakdown(rows: Sequence[OrderRow], include_ad_cost: bool = True) -> List[DimensionBreakdown]:
    return build_dimension_breakdown(
        rows, lambda row: row.carrier_id, lambda row: row.carrier_name, include_ad_cost
    )


def build_employee_breakdown(rows: Sequence[OrderRow], include_ad_cost: bool = True) -> List[DimensionBreakdown]:
    return build_dimension_breakdown(
        rows, lambda row: row.employee_id, lambda row: row.employee_name, include_ad_cost
    )


def build_product_breakdown(items: Sequence[OrderItemRow]) -> List[ProductBreakdown]:
    """
    Aggregate line items per product, most profitable first.

    Revenue and cost are weighted by quantity. An order carrying several
    products counts once towards each of them; delivered and returns count
    distinct orders in that state.
    """
    breakdown = []
    for product_id, group in group_rows(items, lambda item: item.product_id, lambda item: item.product_name).items():
        total_items = 0
        revenue = ZERO
        cogs = ZERO
        orders: Set[UUID] = set()
        delivered: Set[UUID] = set()
        returned: Set[UUID] = set()

        for item in group.rows:
            quantity = item.quantity if item.quantity is not None else 1
            total_items += quantity
            revenue += to_decimal(item.unit_price) * quantity
            cogs += to_decimal(item.unit_cost) * quantity
            orders.add(item.order_id)
            if item.counts_as_delivered:
                delivered.add(item.order_id)
            if item.counts_as_return:
                returned.add(item.order_id)

        breakdown.append(
            ProductBreakdown(
                product_id=product_id,
                name_ar=group.name,
                total_items=total_items,
                total_orders=len(orders),
                delivered=len(delivered),
                returns=len(returned),
                revenue=revenue,
                profit=revenue - cogs,
                delivery_rate=calculate_delivery_rate(len(delivered), len(orders)),
            )
        )
    return sorted(breakdown, key=lambda item: item.profit, reverse=True)


# =============================================================================
# STATUS DISTRIBUTION
# =============================================================================

def build_status_distribution(rows: Sequence[OrderRow]) -> List[StatusShare]:
    """Count orders per status key, largest first."""
    total = len(rows)
    counts: Dict[str, Tuple[Optional[str], Optional[str], int]] = {}

    for row in rows:
        if row.status_key is None:
            continue
        label, color, count = counts.get(row.status_key, (row.status_label, row.status_color, 0))
        counts[row.status_key] = (label, color, count + 1)

    distribution = [
        StatusShare(
            status_key=key,
            label_ar=label,
            color=color,
            count=count,
            percentage=(count / total) * 100 if total > 0 else 0.0,
        )
        for key, (label, color, count) in counts.items()
    ]
    return sorted(distribution, key=lambda share: share.count, reverse=True)
