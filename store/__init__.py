"""
Store Module

Key-value storage and persistence layer.

This module provides:
- SQLite-backed storage for text keys and values
- Upsert writes that keep the original insert timestamp
- Creation and last-update timestamp lookup
- A small error hierarchy wrapping driver failures
"""

__version__ = "0.1.0"
