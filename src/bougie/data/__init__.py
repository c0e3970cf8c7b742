"""
Bar data loading.
"""

from .csv_loader import filter_by_date, read_candlesticks

__all__ = ["read_candlesticks", "filter_by_date"]
