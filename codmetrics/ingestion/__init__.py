"""
Data Ingestion Module
"""
from .seed_db import execute_batch_insert, seed_tables

__all__ = [
    "execute_batch_insert",
    "seed_tables",
]
