"""
Database Seeding

Loads a generated COD dataset into the application database.
"""

import asyncio
import uuid
from typing import Any, Dict, List

import polars as pl
import structlog
from sqlalchemy import insert

from codmetrics.database.connection import close_database, get_db, init_database
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

logger = structlog.get_logger(__name__)

CHUNK_SIZE = 1000

# Parents before children so foreign keys resolve
TABLES = [
    ("statuses", Status),
    ("countries", Country),
    ("carriers", Carrier),
    ("employees", Employee),
    ("products", Product),
    ("orders", Order),
    ("order_items", OrderItem),
]

UUID_COLUMNS = {
    "id",
    "business_id",
    "order_id",
    "product_id",
    "status_id",
    "country_id",
    "carrier_id",
    "employee_id",
}


def to_records(df: pl.DataFrame) -> List[Dict[str, Any]]:
    """Convert a frame to insertable rows, parsing UUID string columns."""
    records = df.to_dicts()
    for record in records:
        for column in UUID_COLUMNS.intersection(record):
            if record[column] is not None:
                record[column] = uuid.UUID(record[column])
    return records


async def execute_batch_insert(model: Any, records: List[Dict[str, Any]]) -> int:
    """Insert records in chunks using Core insert."""
    if not records:
        return 0

    async with get_db() as db:
        for i in range(0, len(records), CHUNK_SIZE):
            chunk = records[i:i + CHUNK_SIZE]
            await db.execute(insert(model).values(chunk))

    logger.info("Inserted records", table=model.__tablename__, count=len(records))
    return len(records)


async def create_tables(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_tables(tables: Dict[str, pl.DataFrame]) -> Dict[str, int]:
    """
    Insert every generated table.

    Args:
        tables: Frames keyed by table name, as returned by
            CodDatasetGenerator.generate()

    Returns:
        Inserted row count per table
    """
    counts = {}
    for name, model in TABLES:
        if name not in tables:
            continue
        counts[name] = await execute_batch_insert(model, to_records(tables[name]))
    return counts


async def main(tables: Dict[str, pl.DataFrame]) -> Dict[str, int]:
    logger.info("Starting database seeding...")
    engine = await init_database()

    try:
        await create_tables(engine)
        counts = await seed_tables(tables)
        logger.info("Database seeding completed", **counts)
        return counts
    except Exception as e:
        logger.error("Seeding failed", error=str(e))
        raise
    finally:
        await close_database()


if __name__ == "__main__":
    from codmetrics.data import CodDatasetGenerator

    asyncio.run(main(CodDatasetGenerator().generate()))
