"""
Base repository pattern for database operations.
"""

import asyncio
from contextlib import contextmanager
from typing import TypeVar, Generic, Iterator
from abc import ABC

import asyncpg
from loguru import logger

from ..database.connection import DatabaseManager
from ..exceptions import ValidationError, DatabaseError

T = TypeVar('T')


class BaseRepository(ABC, Generic[T]):
    """
    Base repository bound to one table of one database.

    Subclasses run their SQL inside ``translate_errors`` so that constraint and
    data violations surface as ``ValidationError`` and everything else as
    ``DatabaseError``.
    """

    def __init__(self, db: DatabaseManager, table_name: str):
        self.db = db
        self.table_name = table_name

    @contextmanager
    def translate_errors(self, operation: str) -> Iterator[None]:
        """Map driver exceptions raised by ``operation`` onto application errors."""
        try:
            yield
        except (asyncpg.IntegrityConstraintViolationError, asyncpg.DataError) as e:
            field = getattr(e, "column_name", None) or getattr(e, "constraint_name", None)
            raise ValidationError(
                errors=[{
                    "field": field or self.table_name,
                    "message": getattr(e, "message", None) or str(e),
                    "value": None
                }]
            ) from e
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as e:
            logger.error(f"Database error during {self.table_name}.{operation}: {e}")
            raise DatabaseError(
                message=f"Failed to {operation.replace('_', ' ')}",
                operation=operation
            ) from e
