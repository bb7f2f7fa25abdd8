"""
Metrics Module

Delivery, return and profit reporting over COD orders.
"""
from .calculations import (
    aggregate_order_metrics,
    calculate_aov,
    calculate_delivery_rate,
    calculate_net_profit,
    calculate_return_rate,
)
from .repository import OrderSource, SqlAlchemyOrderSource
from .types import MetricsFilters, OrderMetrics

__all__ = [
    "aggregate_order_metrics",
    "calculate_aov",
    "calculate_delivery_rate",
    "calculate_net_profit",
    "calculate_return_rate",
    "OrderSource",
    "SqlAlchemyOrderSource",
    "MetricsFilters",
    "OrderMetrics",
]
