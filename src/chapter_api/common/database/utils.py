"""
Database utility functions for common operations.
"""

from typing import Dict, Any, List, Tuple, Optional
import json
from uuid import UUID


def process_database_record(
    data: Any,  # Can be Dict or asyncpg.Record
    uuid_fields: Optional[List[str]] = None,
    jsonb_fields: Optional[List[str]] = None
) -> Dict[str, Any]:
    """Process a database record for domain model conversion.

    - Converts asyncpg.Record to dict
    - Converts UUID fields to strings
    - Parses JSONB fields delivered as strings, mapping null to ``{}``

    Args:
        data: Raw database record (Dict or asyncpg.Record)
        uuid_fields: Field names holding UUIDs (defaults to ``["id"]``)
        jsonb_fields: Field names holding JSONB objects

    Returns:
        Processed data ready for domain model
    """
    data = dict(data)

    for field in uuid_fields or ["id"]:
        if isinstance(data.get(field), UUID):
            data[field] = str(data[field])

    for field in jsonb_fields or []:
        if field not in data:
            continue
        value = data[field]
        if isinstance(value, str):
            data[field] = json.loads(value) if value else {}
        elif value is None:
            data[field] = {}

    return data


def build_filter_conditions(
    filters: Dict[str, Any],
    table_alias: str = "t",
    start_param: int = 1
) -> Tuple[List[str], List[Any]]:
    """Build WHERE conditions from a filter dictionary.

    Keys are column names matched by equality. ``None`` values are skipped.

    Returns:
        Tuple of (where_conditions list, parameters list)
    """
    where_conditions = []
    params = []
    param_count = start_param

    for field, value in filters.items():
        if value is None:
            continue

        where_conditions.append(f"{table_alias}.{field} = ${param_count}")
        params.append(value)
        param_count += 1

    return where_conditions, params


def build_where_clause(conditions: List[str]) -> str:
    """Join conditions into a WHERE clause, empty when there are none."""
    if not conditions:
        return ""
    return "WHERE " + " AND ".join(conditions)


def build_order_by(
    sort_field: str,
    sort_order: str = "DESC",
    table_alias: str = "t",
    tiebreaker: Optional[str] = "id"
) -> str:
    """Build an ORDER BY clause with a unique tiebreaker column."""
    direction = "ASC" if sort_order.upper() == "ASC" else "DESC"
    clause = f"ORDER BY {table_alias}.{sort_field} {direction}"
    if tiebreaker and tiebreaker != sort_field:
        clause += f", {table_alias}.{tiebreaker} {direction}"
    return clause
