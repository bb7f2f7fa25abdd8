"""
Metrics API Endpoints

Dashboard reports for one business: KPIs, period comparison, daily series,
breakdowns, status distribution and top products.
"""

from datetime import date
from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError
import structlog

from codmetrics.config import get_settings
from codmetrics.metrics import service
from codmetrics.metrics.periods import Period, previous_period, resolve_period
from codmetrics.metrics.repository import OrderSource, SqlAlchemyOrderSource
from codmetrics.metrics.types import (
    Breakdowns,
    KPIs,
    KpiComparison,
    MetricsFilters,
    ProductBreakdown,
    StatusShare,
    TimeSeriesPoint,
)

router = APIRouter()
logger = structlog.get_logger(__name__)


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_order_source() -> OrderSource:
    """Order source backed by the application database."""
    return SqlAlchemyOrderSource()


def get_metrics_filters(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    period: Optional[Period] = None,
    country_id: Optional[UUID] = None,
    carrier_id: Optional[UUID] = None,
    employee_id: Optional[UUID] = None,
    product_id: Optional[UUID] = None,
    status_id: Optional[UUID] = None,
    status_key: Optional[str] = None,
    include_ad_cost: Optional[bool] = None,
    delivered_denominator: Optional[Literal["total", "delivered"]] = None,
) -> MetricsFilters:
    """
    Build the filter set from query parameters.

    A missing bound is taken from the named period (or the configured default
    period); unset toggles fall back to the reporting settings.
    """
    reporting = get_settings().reporting

    if date_from is None or date_to is None:
        resolved = resolve_period(period or reporting.default_period)
        date_from = date_from or resolved.date_from
        date_to = date_to or resolved.date_to

    try:
        return MetricsFilters(
            date_from=date_from,
            date_to=date_to,
            country_id=country_id,
            carrier_id=carrier_id,
            employee_id=employee_id,
            product_id=product_id,
            status_id=status_id,
            status_key=status_key,
            include_ad_cost=reporting.include_ad_cost if include_ad_cost is None else include_ad_cost,
            delivered_denominator=delivered_denominator or reporting.delivered_denominator,
        )
    except ValidationError as e:
        logger.warning("Rejected metrics filters", errors=e.error_count())
        raise HTTPException(
            status_code=422,
            detail=e.errors(include_url=False, include_context=False, include_input=False),
        )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/kpis", response_model=KPIs)
async def read_kpis(
    business_id: UUID,
    filters: MetricsFilters = Depends(get_metrics_filters),
    source: OrderSource = Depends(get_order_source),
) -> KPIs:
    """Headline KPIs for the filter window."""
    return await service.get_kpis(source, business_id, filters)


@router.get("/kpis/comparison", response_model=KpiComparison)
async def read_kpi_comparison(
    business_id: UUID,
    filters: MetricsFilters = Depends(get_metrics_filters),
    source: OrderSource = Depends(get_order_source),
) -> KpiComparison:
    """KPIs against the previous window of the same length."""
    try:
        previous_period(filters.date_from, filters.date_to)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return await service.get_kpi_comparison(source, business_id, filters)


@router.get("/timeseries", response_model=List[TimeSeriesPoint])
async def read_time_series(
    business_id: UUID,
    bucket: Literal["day"] = "day",
    fill_gaps: bool = False,
    filters: MetricsFilters = Depends(get_metrics_filters),
    source: OrderSource = Depends(get_order_source),
) -> List[TimeSeriesPoint]:
    """Daily series, oldest first."""
    max_days = get_settings().reporting.max_fill_gaps_days
    if fill_gaps and (filters.date_to - filters.date_from).days + 1 > max_days:
        raise HTTPException(
            status_code=422,
            detail=f"fill_gaps covers at most {max_days} days",
        )
    return await service.get_time_series(source, business_id, filters, bucket=bucket, fill_gaps=fill_gaps)


@router.get("/breakdowns", response_model=Breakdowns)
async def read_breakdowns(
    business_id: UUID,
    filters: MetricsFilters = Depends(get_metrics_filters),
    source: OrderSource = Depends(get_order_source),
) -> Breakdowns:
    """Breakdowns by country, carrier, employee and product."""
    return await service.get_breakdowns(source, business_id, filters)


@router.get("/status-distribution", response_model=List[StatusShare])
async def read_status_distribution(
    business_id: UUID,
    filters: MetricsFilters = Depends(get_metrics_filters),
    source: OrderSource = Depends(get_order_source),
) -> List[StatusShare]:
    """Order share per status."""
    return await service.get_status_distribution(source, business_id, filters)


@router.get("/top-products", response_model=List[ProductBreakdown])
async def read_top_products(
    business_id: UUID,
    limit: Optional[int] = Query(None, ge=1, le=100),
    filters: MetricsFilters = Depends(get_metrics_filters),
    source: OrderSource = Depends(get_order_source),
) -> List[ProductBreakdown]:
    """Best-selling products by revenue."""
    limit = limit or get_settings().reporting.top_products_limit
    return await service.get_top_products(source, business_id, filters, limit=limit)
