"""
Data Generation Module
"""
from .generators import CodDatasetGenerator

__all__ = [
    "CodDatasetGenerator",
]
