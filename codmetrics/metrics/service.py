"""
Metrics Aggregation Service

Report operations for a business and a filter set. Each operation fetches
rows from an order source and hands them to the aggregation builders. There
is no retry and no partial result: a failed fetch fails the whole report.
"""

import asyncio
from typing import Callable, List, Sequence
from uuid import UUID

import structlog

from codmetrics.metrics.aggregation import (
    build_carrier_breakdown,
    build_country_breakdown,
    build_employee_breakdown,
    build_kpis,
    build_product_breakdown,
    build_status_distribution,
    build_time_series,
)
from codmetrics.metrics.calculations import has_conflicting_classification
from codmetrics.metrics.periods import calculate_trend, previous_period
from codmetrics.metrics.repository import OrderSource
from codmetrics.metrics.types import (
    Breakdowns,
    DimensionBreakdown,
    KPIs,
    KpiComparison,
    MetricsFilters,
    OrderRow,
    ProductBreakdown,
    StatusShare,
    TimeSeriesPoint,
)

logger = structlog.get_logger(__name__)

TREND_METRICS = (
    "total_orders",
    "delivered_orders",
    "gross_sales",
    "net_profit",
    "delivery_rate",
    "aov",
)


def _warn_on_conflicts(rows: Sequence[OrderRow], business_id: UUID) -> None:
    conflicting = sum(1 for row in rows if has_conflicting_classification(row))
    if conflicting:
        logger.warning(
            "Orders with conflicting status classification",
            business_id=str(business_id),
            orders=conflicting,
        )


async def get_kpis(source: OrderSource, business_id: UUID, filters: MetricsFilters) -> KPIs:
    """Headline metrics over every order matching the filters."""
    rows = await source.fetch_orders(business_id, filters)
    _warn_on_conflicts(rows, business_id)

    kpis = build_kpis(rows, filters)
    logger.info(
        "KPIs computed",
        business_id=str(business_id),
        date_from=str(filters.date_from),
        date_to=str(filters.date_to),
        total_orders=kpis.total_orders,
    )
    return kpis


async def get_time_series(
    source: OrderSource,
    business_id: UUID,
    filters: MetricsFilters,
    bucket: str = "day",
    fill_gaps: bool = False,
) -> List[TimeSeriesPoint]:
    """Per-day aggregates, ascending by date."""
    rows = await source.fetch_orders(business_id, filters)
    series = build_time_series(rows, filters, bucket=bucket, fill_gaps=fill_gaps)
    logger.info("Time series computed", business_id=str(business_id), points=len(series))
    return series


async def get_breakdowns(source: OrderSource, business_id: UUID, filters: MetricsFilters) -> Breakdowns:
    """
    Country, carrier, employee and product breakdowns.

    The four are fetched and computed concurrently and combined once all of
    them complete.
    """

    async def dimension(builder: Callable[..., List[DimensionBreakdown]]) -> List[DimensionBreakdown]:
        rows = await source.fetch_orders(business_id, filters)
        return builder(rows, filters.include_ad_cost)

    async def products() -> List[ProductBreakdown]:
        items = await source.fetch_order_items(business_id, filters)
        return build_product_breakdown(items)

    by_country, by_carrier, by_employee, by_product = await asyncio.gather(
        dimension(build_country_breakdown),
        dimension(build_carrier_breakdown),
        dimension(build_employee_breakdown),
        products(),
    )

    logger.info(
        "Breakdowns computed",
        business_id=str(business_id),
        countries=len(by_country),
        carriers=len(by_carrier),
        employees=len(by_employee),
        products=len(by_product),
    )
    return Breakdowns(
        by_country=by_country,
        by_carrier=by_carrier,
        by_employee=by_employee,
        by_product=by_product,
    )


async def get_status_distribution(
    source: OrderSource,
    business_id: UUID,
    filters: MetricsFilters,
) -> List[StatusShare]:
    """Order count and share per status, largest first."""
    rows = await source.fetch_orders(business_id, filters)
    distribution = build_status_distribution(rows)
    logger.info("Status distribution computed", business_id=str(business_id), statuses=len(distribution))
    return distribution


async def get_top_products(
    source: OrderSource,
    business_id: UUID,
    filters: MetricsFilters,
    limit: int = 5,
) -> List[ProductBreakdown]:
    """Best-selling products by revenue."""
    items = await source.fetch_order_items(business_id, filters)
    ranked = sorted(build_product_breakdown(items), key=lambda product: product.revenue, reverse=True)
    logger.info("Top products computed", business_id=str(business_id), products=len(ranked), limit=limit)
    return ranked[:limit]


async def get_kpi_comparison(
    source: OrderSource,
    business_id: UUID,
    filters: MetricsFilters,
) -> KpiComparison:
    """KPIs for the filter window against the equally long window before it."""
    prev_range = previous_period(filters.date_from, filters.date_to)
    prev_filters = filters.model_copy(
        update={"date_from": prev_range.date_from, "date_to": prev_range.date_to}
    )

    current, previous = await asyncio.gather(
        get_kpis(source, business_id, filters),
        get_kpis(source, business_id, prev_filters),
    )

    logger.info(
        "KPI comparison computed",
        business_id=str(business_id),
        previous_from=str(prev_range.date_from),
        previous_to=str(prev_range.date_to),
    )
    return KpiComparison(
        current=current,
        previous=previous,
        previous_period=prev_range,
        trends={
            metric: calculate_trend(getattr(current, metric), getattr(previous, metric))
            for metric in TREND_METRICS
        },
    )
