"""
iptsdb - Columnar Time-Series Storage

An append-oriented time-series store that keeps every field as an immutable,
content-addressed column block and commits updates by swapping a single
naming-service pointer per table.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
