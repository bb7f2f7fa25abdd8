"""
Unit Tests - Demo Data Generation and Seeding
"""
from datetime import date, datetime
from uuid import UUID

import polars as pl
import pytest

from codmetrics.data import CodDatasetGenerator
from codmetrics.database import connection
from codmetrics.ingestion.seed_db import seed_tables, to_records
from codmetrics.metrics import service
from codmetrics.metrics.repository import SqlAlchemyOrderSource
from codmetrics.metrics.types import MetricsFilters

START = datetime(2025, 1, 1)
END = datetime(2025, 1, 31, 23, 0)


@pytest.fixture
def tables():
    return CodDatasetGenerator(seed=7).generate(
        n_orders=50, n_products=5, n_employees=3, start_date=START, end_date=END
    )


class TestCodDatasetGenerator:
    """Tests for CodDatasetGenerator"""

    def test_tables(self, tables):
        assert set(tables) == {
            "statuses", "countries", "carriers", "employees", "products", "orders", "order_items",
        }
        assert tables["orders"].height == 50
        assert tables["products"].height == 5
        assert tables["employees"].height == 3

    def test_one_classification_per_status(self, tables):
        flags = tables["statuses"].select(
            pl.sum_horizontal(
                pl.col("counts_as_delivered").cast(pl.Int32),
                pl.col("counts_as_return").cast(pl.Int32),
                pl.col("counts_as_active").cast(pl.Int32),
            ).alias("flags")
        )
        # Cancelled sits in no bucket
        assert flags["flags"].max() == 1

    def test_orders_within_range(self, tables):
        order_dates = tables["orders"]["order_date"]

        assert order_dates.min() >= START
        assert order_dates.max() <= END

    def test_items_belong_to_orders(self, tables):
        order_ids = set(tables["orders"]["id"].to_list())

        assert set(tables["order_items"]["order_id"].to_list()) <= order_ids
        assert tables["orders"]["id"].n_unique() == 50

    def test_revenue_matches_lines(self, tables):
        lines = tables["order_items"].group_by("order_id").agg(
            (pl.col("unit_price") * pl.col("quantity")).sum().alias("line_revenue")
        )
        joined = tables["orders"].join(lines, left_on="id", right_on="order_id")

        assert ((joined["revenue"] - joined["line_revenue"]).abs() < 0.01).all()

    def test_same_seed_same_dataset(self, tables):
        again = CodDatasetGenerator(seed=7).generate(
            n_orders=50, n_products=5, n_employees=3, start_date=START, end_date=END
        )

        assert again["orders"].equals(tables["orders"])


class TestSeedDb:
    """Tests for database seeding"""

    def test_to_records_parses_uuids(self, tables):
        record = to_records(tables["order_items"])[0]

        assert record["order_id"].version == 4
        assert isinstance(record["quantity"], int)

    @pytest.mark.asyncio
    async def test_seeded_data_is_reportable(self, tables, session_factory, monkeypatch):
        monkeypatch.setattr(connection, "_async_session_factory", session_factory)
        generator_business = tables["orders"]["business_id"][0]

        counts = await seed_tables(tables)

        assert counts["orders"] == 50
        assert counts["order_items"] == tables["order_items"].height

        source = SqlAlchemyOrderSource(session_factory)
        filters = MetricsFilters(date_from=date(2025, 1, 1), date_to=date(2025, 1, 31))
        kpis = await service.get_kpis(source, UUID(generator_business), filters)

        assert kpis.total_orders == 50
        assert kpis.delivered_orders + kpis.return_orders + kpis.active_orders <= 50
        assert kpis.gross_sales > 0
