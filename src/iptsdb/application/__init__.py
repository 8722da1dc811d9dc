"""Application layer for the time-series store.

Exports:
    - TimeSeriesDatabase: Main entry point implementing the TableStore port
"""

from iptsdb.application.timeseries_database import TimeSeriesDatabase

__all__ = [
    "TimeSeriesDatabase",
]
