"""Database utilities."""

from .connection import DatabaseManager
from .utils import (
    process_database_record,
    build_filter_conditions,
    build_where_clause,
    build_order_by,
)

__all__ = [
    "DatabaseManager",
    "process_database_record",
    "build_filter_conditions",
    "build_where_clause",
    "build_order_by",
]
