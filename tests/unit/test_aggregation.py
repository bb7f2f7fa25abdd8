"""
Unit Tests - Metrics Aggregation
"""
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from codmetrics.metrics.aggregation import (
    build_carrier_breakdown,
    build_country_breakdown,
    build_employee_breakdown,
    build_kpis,
    build_product_breakdown,
    build_status_distribution,
    build_time_series,
    group_rows,
)
from codmetrics.metrics.types import MetricsFilters, OrderItemRow, OrderRow

from conftest import AE_ID, ARAMEX_ID, BAG_ID, KW_ID, PERFUME_ID, SA_ID, SMSA_ID, WATCH_ID


class TestGroupRows:
    """Tests for group_rows"""

    def test_preserves_first_seen_order(self):
        groups = group_rows(["b1", "a1", "b2"], key=lambda s: s[0])

        assert list(groups) == ["b", "a"]
        assert groups["b"].rows == ["b1", "b2"]

    def test_skips_missing_keys(self):
        groups = group_rows([1, None, 2], key=lambda value: value)

        assert list(groups) == [1, 2]


class TestBuildKpis:
    """Tests for build_kpis"""

    def test_totals_and_rates(self, order_rows, january_filters):
        kpis = build_kpis(order_rows, january_filters)

        assert kpis.total_orders == 6
        assert kpis.delivered_orders == 3
        assert kpis.return_orders == 2
        assert kpis.active_orders == 1
        assert kpis.gross_sales == Decimal("2430")
        assert kpis.delivery_rate == 50.0
        assert kpis.return_rate == pytest.approx(33.333, rel=1e-3)

    def test_aov_uses_total_orders_by_default(self, order_rows, january_filters):
        assert january_filters.delivered_denominator == "total"

        kpis = build_kpis(order_rows, january_filters)

        assert kpis.aov == Decimal("405")

    def test_aov_over_delivered_orders(self, order_rows, january_filters):
        filters = january_filters.model_copy(update={"delivered_denominator": "delivered"})

        kpis = build_kpis(order_rows, filters)

        assert kpis.aov == Decimal("810")
        # Rates keep total orders as denominator
        assert kpis.delivery_rate == 50.0

    def test_empty_rows(self, january_filters):
        kpis = build_kpis([], january_filters)

        assert kpis.total_orders == 0
        assert kpis.delivery_rate == 0
        assert kpis.aov == 0

    def test_stamped_with_given_time(self, order_rows, january_filters):
        now = datetime(2025, 2, 1, 8, 0, tzinfo=timezone.utc)

        assert build_kpis(order_rows, january_filters, now=now).last_updated_at == now

    def test_money_serialises_as_number(self, order_rows, january_filters):
        payload = build_kpis(order_rows, january_filters).model_dump(mode="json")

        assert payload["gross_sales"] == 2430.0
        assert isinstance(payload["net_profit"], float)


class TestBuildTimeSeries:
    """Tests for build_time_series"""

    def test_ascending_regardless_of_input_order(self, order_rows, january_filters):
        series = build_time_series(list(reversed(order_rows)), january_filters)

        assert [point.date for point in series] == [
            date(2025, 1, 5),
            date(2025, 1, 12),
            date(2025, 1, 20),
        ]

    def test_point_values(self, order_rows, january_filters):
        first = build_time_series(order_rows, january_filters)[0]

        assert first.total_orders == 2
        assert first.delivered_orders == 1
        assert first.return_orders == 1
        assert first.gross_sales == Decimal("1050")
        assert first.net_profit == Decimal("790")

    def test_groups_by_calendar_date(self, january_filters):
        rows = [
            OrderRow(order_date=datetime(2025, 1, 3, 0, 0), revenue=10),
            OrderRow(order_date=datetime(2025, 1, 3, 23, 59, 59), revenue=20),
        ]

        series = build_time_series(rows, january_filters)

        assert len(series) == 1
        assert series[0].gross_sales == 30

    def test_fill_gaps(self, order_rows):
        filters = MetricsFilters(date_from=date(2025, 1, 4), date_to=date(2025, 1, 6))

        rows = [row for row in order_rows if row.order_date.day == 5]

        series = build_time_series(rows, filters, fill_gaps=True)

        assert [point.date for point in series] == [date(2025, 1, 4), date(2025, 1, 5), date(2025, 1, 6)]
        assert series[0].total_orders == 0
        assert series[1].total_orders == 2

    def test_unsupported_bucket(self, order_rows, january_filters):
        with pytest.raises(ValueError):
            build_time_series(order_rows, january_filters, bucket="week")

    def test_empty(self, january_filters):
        assert build_time_series([], january_filters) == []


class TestDimensionBreakdowns:
    """Tests for country, carrier and employee breakdowns"""

    def test_sorted_by_total_not_profit(self, order_rows):
        breakdown = build_country_breakdown(order_rows)

        assert [item.id for item in breakdown] == [SA_ID, AE_ID, KW_ID]
        assert [item.total for item in breakdown] == [3, 2, 1]
        # Profit order would be UAE, Kuwait, Saudi Arabia
        assert [item.net_profit for item in breakdown] == [Decimal("140"), Decimal("1340"), Decimal("170")]

    def test_group_values(self, order_rows):
        uae = build_country_breakdown(order_rows)[1]

        assert uae.name_ar == "الإمارات"
        assert uae.delivered == 2
        assert uae.returns == 0
        assert uae.delivery_rate == 100.0
        assert uae.gross_sales == Decimal("1600")

    def test_carrier_breakdown(self, order_rows):
        breakdown = build_carrier_breakdown(order_rows)

        assert [(item.id, item.total) for item in breakdown] == [(ARAMEX_ID, 4), (SMSA_ID, 2)]

    def test_excluding_ad_cost(self, order_rows):
        kuwait = build_country_breakdown(order_rows, include_ad_cost=False)[2]

        assert kuwait.net_profit == Decimal("180")

    def test_missing_dimension_is_skipped(self, order_rows):
        rows = order_rows + [OrderRow(order_date=datetime(2025, 1, 2), revenue=50)]

        breakdown = build_employee_breakdown(rows)

        assert len(breakdown) == 1
        assert breakdown[0].total == 6


class TestProductBreakdown:
    """Tests for build_product_breakdown"""

    def test_sorted_by_profit(self, order_items):
        breakdown = build_product_breakdown(order_items)

        assert [item.product_id for item in breakdown] == [WATCH_ID, PERFUME_ID, BAG_ID]
        assert [item.profit for item in breakdown] == [Decimal("300"), Decimal("180"), Decimal("60")]

    def test_weighted_by_quantity(self, order_items):
        perfume = build_product_breakdown(order_items)[1]

        assert perfume.total_items == 3
        assert perfume.revenue == Decimal("300")
        assert perfume.total_orders == 2
        assert perfume.delivered == 1
        assert perfume.returns == 1
        assert perfume.delivery_rate == 50.0

    def test_order_counted_once_per_product(self, order_items):
        extra = OrderItemRow(
            order_id=order_items[0].order_id,
            product_id=PERFUME_ID,
            product_name="عطر",
            quantity=1,
            unit_price=Decimal("100"),
            unit_cost=Decimal("40"),
            counts_as_delivered=True,
        )

        perfume = build_product_breakdown(order_items + [extra])[1]

        assert perfume.total_items == 4
        assert perfume.total_orders == 2
        assert perfume.delivered == 1

    def test_missing_quantity_counts_as_one(self):
        items = [OrderItemRow(order_id=SA_ID, product_id=WATCH_ID, quantity=None, unit_price=10, unit_cost=4)]

        product = build_product_breakdown(items)[0]

        assert product.total_items == 1
        assert product.profit == 6

    def test_empty(self):
        assert build_product_breakdown([]) == []


class TestStatusDistribution:
    """Tests for build_status_distribution"""

    def test_counts_and_shares(self, order_rows):
        distribution = build_status_distribution(order_rows)

        assert [(share.status_key, share.count) for share in distribution] == [
            ("delivered", 3),
            ("returned", 2),
            ("new", 1),
        ]
        assert distribution[0].percentage == 50.0
        assert distribution[0].label_ar == "تم التوصيل"
        assert distribution[0].color == "#22c55e"
        assert sum(share.percentage for share in distribution) == pytest.approx(100.0)

    def test_empty(self):
        assert build_status_distribution([]) == []
