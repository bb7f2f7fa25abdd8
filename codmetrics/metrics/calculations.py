"""
Metrics Math

Pure arithmetic over order economics. Nothing here raises on degenerate
input: empty collections, zero denominators and missing amounts all resolve
to 0.
"""

from decimal import Decimal
from typing import Iterable, Optional

from codmetrics.metrics.types import AggregatedMetrics, Number, OrderMetrics

ZERO = Decimal("0")


def to_decimal(value: Optional[Number]) -> Decimal:
    """Normalise an amount to Decimal; None becomes 0."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def calculate_delivery_rate(delivered: int, total: int) -> float:
    """Delivered orders as a percentage of total; 0 for an empty group."""
    if total == 0:
        return 0.0
    return float(delivered / total * 100)


def calculate_return_rate(returns: int, total: int) -> float:
    """Returned orders as a percentage of total; 0 for an empty group."""
    if total == 0:
        return 0.0
    return float(returns / total * 100)


def calculate_net_profit(
    revenue: Optional[Number],
    cogs: Optional[Number],
    shipping_cost: Optional[Number],
    ad_cost: Optional[Number],
    include_ad_cost: bool,
) -> Decimal:
    """revenue - cogs - shipping - ad cost (only when include_ad_cost)."""
    ad_cost_value = to_decimal(ad_cost) if include_ad_cost else ZERO
    return to_decimal(revenue) - to_decimal(cogs) - to_decimal(shipping_cost) - ad_cost_value


def calculate_aov(gross_sales: Optional[Number], order_count: int) -> Decimal:
    """Average order value; 0 when there are no orders."""
    if order_count == 0:
        return ZERO
    return to_decimal(gross_sales) / order_count


def has_conflicting_classification(order: OrderMetrics) -> bool:
    """True when an order's status sits in more than one bucket."""
    flags = (order.counts_as_delivered, order.counts_as_return, order.counts_as_active)
    return sum(bool(flag) for flag in flags) > 1


def aggregate_order_metrics(
    orders: Iterable[OrderMetrics],
    include_ad_cost: bool = True,
) -> AggregatedMetrics:
    """
    Reduce orders to counts and sums in a single pass.

    Net profit is accumulated per order through calculate_net_profit, so the
    total always equals the sum of the per-order profits. When include_ad_cost
    is false the returned total_ad_cost is 0, not just left out of profit.

    Args:
        orders: Orders to reduce (not modified)
        include_ad_cost: Whether ad cost counts against profit

    Returns:
        AggregatedMetrics for the whole collection
    """
    total_orders = 0
    delivered_orders = 0
    return_orders = 0
    active_orders = 0
    gross_sales = ZERO
    total_cogs = ZERO
    total_shipping_cost = ZERO
    total_ad_cost = ZERO
    net_profit = ZERO

    for order in orders:
        total_orders += 1

        if order.counts_as_delivered:
            delivered_orders += 1
        if order.counts_as_return:
            return_orders += 1
        if order.counts_as_active:
            active_orders += 1

        gross_sales += to_decimal(order.revenue)
        total_cogs += to_decimal(order.cogs)
        total_shipping_cost += to_decimal(order.shipping_cost)
        total_ad_cost += to_decimal(order.ad_cost)

        net_profit += calculate_net_profit(
            order.revenue,
            order.cogs,
            order.shipping_cost,
            order.ad_cost,
            include_ad_cost,
        )

    return AggregatedMetrics(
        total_orders=total_orders,
        delivered_orders=delivered_orders,
        return_orders=return_orders,
        active_orders=active_orders,
        gross_sales=gross_sales,
        total_cogs=total_cogs,
        total_shipping_cost=total_shipping_cost,
        total_ad_cost=total_ad_cost if include_ad_cost else ZERO,
        net_profit=net_profit,
    )
