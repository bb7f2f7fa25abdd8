"""
Synthetic Data Generator

Generates a realistic COD dataset for one business, for demos and local
development:
- Status list with delivered / return / active classification
- Countries, carriers and employees
- Product catalog
- Orders with line items, shipping and ad cost
"""

import random
import uuid
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

import numpy as np
import polars as pl
from faker import Faker

fake = Faker(["ar_AA", "en_US"])


# =============================================================================
# CONFIGURATION
# =============================================================================

# key, Arabic label, color, delivered, return, active, final, weight
STATUSES = [
    ("new", "جديد", "#3b82f6", False, False, True, False, 0.08),
    ("confirmed", "مؤكد", "#6366f1", False, False, True, False, 0.07),
    ("shipped", "تم الشحن", "#f59e0b", False, False, True, False, 0.10),
    ("delivered", "تم التوصيل", "#22c55e", True, False, False, True, 0.55),
    ("returned", "مرتجع", "#ef4444", False, True, False, True, 0.15),
    ("cancelled", "ملغي", "#64748b", False, False, False, True, 0.05),
]

COUNTRIES = [
    ("السعودية", "Saudi Arabia", "SA", "SAR", 25.0),
    ("الإمارات", "United Arab Emirates", "AE", "AED", 20.0),
    ("الكويت", "Kuwait", "KW", "KWD", 2.0),
    ("عمان", "Oman", "OM", "OMR", 2.0),
    ("قطر", "Qatar", "QA", "QAR", 20.0),
]

CARRIERS = [
    ("أرامكس", "Aramex"),
    ("سمسا", "SMSA"),
    ("ناقل", "Naqel"),
    ("جي أند تي", "J&T"),
]


class CodDatasetGenerator:
    """
    Generate a complete dataset for one business.

    Identifiers are stored as UUID strings; the same seed and date range
    yield the same dataset.

    Example:
        generator = CodDatasetGenerator(seed=42)
        tables = generator.generate(n_orders=1000)
        orders = tables["orders"]
    """

    def __init__(self, business_id: Optional[uuid.UUID] = None, seed: Optional[int] = 42):
        self._random = random.Random(seed)
        self.business_id = business_id or uuid.UUID(int=self._random.getrandbits(128), version=4)
        self._rng = np.random.default_rng(seed)
        if seed is not None:
            Faker.seed(seed)

    def _uuid(self) -> str:
        return str(uuid.UUID(int=self._random.getrandbits(128), version=4))

    def generate_statuses(self) -> pl.DataFrame:
        """One row per configured status"""
        return pl.DataFrame([
            {
                "id": self._uuid(),
                "business_id": str(self.business_id),
                "key": key,
                "name_ar": name_ar,
                "name_en": key.title(),
                "color": color,
                "counts_as_delivered": delivered,
                "counts_as_return": returned,
                "counts_as_active": active,
                "is_final": final,
                "sort_order": position,
            }
            for position, (key, name_ar, color, delivered, returned, active, final, _) in enumerate(STATUSES)
        ])

    def generate_countries(self) -> pl.DataFrame:
        return pl.DataFrame([
            {
                "id": self._uuid(),
                "business_id": str(self.business_id),
                "name_ar": name_ar,
                "name_en": name_en,
                "code": code,
                "currency": currency,
                "shipping_cost": shipping_cost,
            }
            for name_ar, name_en, code, currency, shipping_cost in COUNTRIES
        ])

    def generate_carriers(self) -> pl.DataFrame:
        return pl.DataFrame([
            {
                "id": self._uuid(),
                "business_id": str(self.business_id),
                "name_ar": name_ar,
                "name_en": name_en,
            }
            for name_ar, name_en in CARRIERS
        ])

    def generate_employees(self, n: int = 5) -> pl.DataFrame:
        return pl.DataFrame([
            {
                "id": self._uuid(),
                "business_id": str(self.business_id),
                "name_ar": fake["ar_AA"].name(),
                "name_en": fake["en_US"].name(),
            }
            for _ in range(n)
        ])

    def generate_products(self, n: int = 20) -> pl.DataFrame:
        """Catalog with cost between 25% and 60% of price"""
        prices = np.round(self._rng.uniform(50, 600, n), 2)
        cost_ratios = self._rng.uniform(0.25, 0.60, n)

        return pl.DataFrame({
            "id": [self._uuid() for _ in range(n)],
            "business_id": [str(self.business_id)] * n,
            "name_ar": [f"منتج {fake['ar_AA'].word()} {i + 1}" for i in range(n)],
            "name_en": [f"{fake['en_US'].word().title()} {i + 1}" for i in range(n)],
            "sku": [f"SKU-{i:06d}" for i in range(n)],
            "price": prices,
            "cost": np.round(prices * cost_ratios, 2),
        })

    def generate_orders(
        self,
        n: int,
        statuses: pl.DataFrame,
        countries: pl.DataFrame,
        carriers: pl.DataFrame,
        employees: pl.DataFrame,
        products: pl.DataFrame,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Tuple[pl.DataFrame, pl.DataFrame]:
        """
        Generate n orders with their line items.

        Order revenue and cogs are the sums of their lines; shipping cost is
        the destination country's rate; ad cost is spread over orders.

        Returns:
            (orders, order_items)
        """
        end_date = end_date or datetime.now().replace(microsecond=0)
        start_date = start_date or end_date - timedelta(days=90)
        span_seconds = int((end_date - start_date).total_seconds())

        status_ids = statuses["id"].to_list()
        weights = np.array([status[-1] for status in STATUSES])
        country_rows = countries.select(["id", "shipping_cost"]).to_dicts()
        carrier_ids = carriers["id"].to_list()
        employee_ids = employees["id"].to_list()
        product_rows = products.select(["id", "price", "cost"]).to_dicts()

        orders = []
        order_items = []

        for i in range(n):
            order_id = self._uuid()
            country = self._random.choice(country_rows)

            revenue = 0.0
            cogs = 0.0
            num_lines = int(self._rng.choice([1, 2, 3], p=[0.70, 0.22, 0.08]))
            for product in self._random.sample(product_rows, k=min(num_lines, len(product_rows))):
                quantity = int(self._rng.choice([1, 2, 3], p=[0.75, 0.18, 0.07]))
                revenue += product["price"] * quantity
                cogs += product["cost"] * quantity
                order_items.append({
                    "id": self._uuid(),
                    "order_id": order_id,
                    "business_id": str(self.business_id),
                    "product_id": product["id"],
                    "quantity": quantity,
                    "unit_price": product["price"],
                    "unit_cost": product["cost"],
                })

            orders.append({
                "id": order_id,
                "business_id": str(self.business_id),
                "order_number": f"ORD-{i + 1:07d}",
                "order_date": start_date + timedelta(seconds=self._random.randint(0, span_seconds)),
                "customer_name": fake["ar_AA"].name(),
                "customer_phone": fake["en_US"].msisdn(),
                "status_id": status_ids[int(self._rng.choice(len(status_ids), p=weights / weights.sum()))],
                "country_id": country["id"],
                "carrier_id": self._random.choice(carrier_ids),
                "employee_id": self._random.choice(employee_ids),
                "revenue": round(revenue, 2),
                "cogs": round(cogs, 2),
                "shipping_cost": country["shipping_cost"],
                "ad_cost": round(float(self._rng.uniform(0, 40)), 2),
            })

        return pl.DataFrame(orders), pl.DataFrame(order_items)

    def generate(
        self,
        n_orders: int = 1000,
        n_products: int = 20,
        n_employees: int = 5,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Dict[str, pl.DataFrame]:
        """Generate every table, keyed by table name."""
        statuses = self.generate_statuses()
        countries = self.generate_countries()
        carriers = self.generate_carriers()
        employees = self.generate_employees(n_employees)
        products = self.generate_products(n_products)
        orders, order_items = self.generate_orders(
            n_orders, statuses, countries, carriers, employees, products,
            start_date=start_date, end_date=end_date,
        )

        return {
            "statuses": statuses,
            "countries": countries,
            "carriers": carriers,
            "employees": employees,
            "products": products,
            "orders": orders,
            "order_items": order_items,
        }
