"""
COD Demo Dataset Generator

Generates a demo dataset for one business, writes it as CSV and optionally
loads it into the database configured by DATABASE_URL / POSTGRES_*.

Usage:
    python scripts/generate_dataset.py --orders 5000 --seed-db
"""

import argparse
import asyncio
import uuid
from datetime import datetime, timedelta
from pathlib import Path

from codmetrics.data import CodDatasetGenerator
from codmetrics.ingestion.seed_db import main as seed_database

OUTPUT_DIR = Path(__file__).parent.parent / "data" / "generated"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a COD demo dataset")
    parser.add_argument("--orders", type=int, default=5000, help="number of orders")
    parser.add_argument("--products", type=int, default=20, help="catalog size")
    parser.add_argument("--employees", type=int, default=5, help="call-center employees")
    parser.add_argument("--days", type=int, default=90, help="days of history ending today")
    parser.add_argument("--business-id", type=uuid.UUID, default=None)
    parser.add_argument("--random-seed", type=int, default=42)
    parser.add_argument("--output", type=Path, default=OUTPUT_DIR, help="CSV output directory")
    parser.add_argument("--seed-db", action="store_true", help="also insert into the database")
    return parser.parse_args()


def main():
    args = parse_args()

    print("=" * 60)
    print("📦 COD Demo Dataset Generator")
    print("=" * 60 + "\n")

    end_date = datetime.now().replace(microsecond=0)
    generator = CodDatasetGenerator(business_id=args.business_id, seed=args.random_seed)
    tables = generator.generate(
        n_orders=args.orders,
        n_products=args.products,
        n_employees=args.employees,
        start_date=end_date - timedelta(days=args.days),
        end_date=end_date,
    )

    args.output.mkdir(parents=True, exist_ok=True)
    for name, df in tables.items():
        df.write_csv(args.output / f"{name}.csv")
        print(f"   ✅ {name}.csv: {df.height:,} rows")

    print(f"\n🏢 Business: {generator.business_id}")
    print(f"📁 Output: {args.output}\n")

    if args.seed_db:
        counts = asyncio.run(seed_database(tables))
        print(f"🗄️  Loaded {sum(counts.values()):,} rows into the database")


if __name__ == "__main__":
    main()
