"""
COD Metrics Service

Reporting backend for cash-on-delivery order dashboards.
"""

__version__ = "1.0.0"
