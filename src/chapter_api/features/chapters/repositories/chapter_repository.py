"""
Repository for chapter persistence.
"""

import json
from typing import Optional, List, Dict, Any

from ....common.repositories.base import BaseRepository
from ....common.database.connection import DatabaseManager
from ....common.database.utils import (
    process_database_record,
    build_filter_conditions,
    build_where_clause,
    build_order_by,
)
from ..models.domain import Chapter, ChapterFields, Subject, ChapterClass, ChapterStatus

CHAPTER_COLUMNS = """
    id, subject, chapter, class_name, unit, year_wise_question_count,
    question_solved, status, is_weak_chapter, created_at, updated_at
"""

# Columns that may be used for equality filtering or distinct-value listing
FILTERABLE_COLUMNS = ["subject", "class_name", "unit", "status", "is_weak_chapter"]


def _in_list(enum_cls) -> str:
    return ", ".join(f"'{member.value}'" for member in enum_cls)


SCHEMA_SQL = f"""
    CREATE TABLE IF NOT EXISTS chapters (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        subject VARCHAR(20) NOT NULL CHECK (subject IN ({_in_list(Subject)})),
        chapter VARCHAR(200) NOT NULL CHECK (length(chapter) >= 1),
        class_name VARCHAR(10) NOT NULL CHECK (class_name IN ({_in_list(ChapterClass)})),
        unit VARCHAR(100) NOT NULL CHECK (length(unit) >= 1),
        year_wise_question_count JSONB NOT NULL DEFAULT '{{}}'::jsonb,
        question_solved INTEGER NOT NULL DEFAULT 0 CHECK (question_solved >= 0),
        status VARCHAR(20) NOT NULL DEFAULT '{ChapterStatus.NOT_STARTED.value}'
            CHECK (status IN ({_in_list(ChapterStatus)})),
        is_weak_chapter BOOLEAN NOT NULL DEFAULT FALSE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    CREATE INDEX IF NOT EXISTS idx_chapters_subject_class ON chapters (subject, class_name);
    CREATE INDEX IF NOT EXISTS idx_chapters_status ON chapters (status);
    CREATE INDEX IF NOT EXISTS idx_chapters_is_weak ON chapters (is_weak_chapter);
    CREATE INDEX IF NOT EXISTS idx_chapters_unit ON chapters (unit);
    CREATE INDEX IF NOT EXISTS idx_chapters_chapter ON chapters (chapter);
    CREATE INDEX IF NOT EXISTS idx_chapters_subject_class_status ON chapters (subject, class_name, status);
    CREATE INDEX IF NOT EXISTS idx_chapters_subject_is_weak ON chapters (subject, is_weak_chapter);
    CREATE INDEX IF NOT EXISTS idx_chapters_created_at ON chapters (created_at DESC);
"""


class ChapterRepository(BaseRepository[Chapter]):
    """Repository for the ``chapters`` table."""

    def __init__(self, db: DatabaseManager):
        super().__init__(db, table_name="chapters")

    def _to_chapter(self, row: Any) -> Chapter:
        data = process_database_record(row, jsonb_fields=["year_wise_question_count"])
        return Chapter.model_validate(data)

    def _write_params(self, data: ChapterFields) -> List[Any]:
        return [
            data.subject,
            data.chapter,
            data.class_name,
            data.unit,
            json.dumps(data.year_wise_question_count),
            data.question_solved,
            data.status,
            data.is_weak_chapter,
        ]

    async def ensure_schema(self) -> None:
        """Create the chapters table and its indexes if missing."""
        with self.translate_errors("ensure_schema"):
            await self.db.execute(SCHEMA_SQL)

    async def find(
        self,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 10,
        offset: int = 0
    ) -> List[Chapter]:
        """Fetch one page of chapters, newest first."""
        conditions, params = build_filter_conditions(filters or {}, table_alias="c")
        where_clause = build_where_clause(conditions)
        order_by = build_order_by("created_at", "DESC", table_alias="c")

        query = f"""
            SELECT {CHAPTER_COLUMNS}
            FROM {self.table_name} c
            {where_clause}
            {order_by}
            LIMIT ${len(params) + 1} OFFSET ${len(params) + 2}
        """

        with self.translate_errors("find"):
            rows = await self.db.fetch(query, *params, limit, offset)
        return [self._to_chapter(row) for row in rows]

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count chapters matching the filters."""
        conditions, params = build_filter_conditions(filters or {}, table_alias="c")
        query = f"SELECT COUNT(*) FROM {self.table_name} c {build_where_clause(conditions)}"

        with self.translate_errors("count"):
            return await self.db.fetchval(query, *params)

    async def get_by_id(self, chapter_id: str) -> Optional[Chapter]:
        query = f"SELECT {CHAPTER_COLUMNS} FROM {self.table_name} WHERE id = $1"

        with self.translate_errors("get_by_id"):
            row = await self.db.fetchrow(query, chapter_id)
        return self._to_chapter(row) if row else None

    async def create(self, data: ChapterFields) -> Chapter:
        query = f"""
            INSERT INTO {self.table_name} (
                subject, chapter, class_name, unit, year_wise_question_count,
                question_solved, status, is_weak_chapter
            )
            VALUES ($1, $2, $3, $4, $5::jsonb, $6, $7, $8)
            RETURNING {CHAPTER_COLUMNS}
        """

        with self.translate_errors("create"):
            row = await self.db.fetchrow(query, *self._write_params(data))
        return self._to_chapter(row)

    async def update(self, chapter_id: str, data: ChapterFields) -> Optional[Chapter]:
        """Replace every writable attribute of a chapter. None if it does not exist."""
        query = f"""
            UPDATE {self.table_name}
            SET subject = $2,
                chapter = $3,
                class_name = $4,
                unit = $5,
                year_wise_question_count = $6::jsonb,
                question_solved = $7,
                status = $8,
                is_weak_chapter = $9,
                updated_at = now()
            WHERE id = $1
            RETURNING {CHAPTER_COLUMNS}
        """

        with self.translate_errors("update"):
            row = await self.db.fetchrow(query, chapter_id, *self._write_params(data))
        return self._to_chapter(row) if row else None

    async def delete(self, chapter_id: str) -> bool:
        query = f"DELETE FROM {self.table_name} WHERE id = $1 RETURNING id"

        with self.translate_errors("delete"):
            deleted_id = await self.db.fetchval(query, chapter_id)
        return deleted_id is not None

    async def delete_all(self) -> int:
        """Remove every chapter. Returns the number of rows deleted."""
        with self.translate_errors("delete_all"):
            status = await self.db.execute(f"DELETE FROM {self.table_name}")
        # asyncpg returns the command tag, e.g. "DELETE 42"
        return int(status.split()[-1]) if status else 0

    async def get_status_counts(self) -> Dict[str, int]:
        """Collection-wide totals by status plus the weak-chapter count."""
        query = f"""
            SELECT
                COUNT(*) AS total,
                COUNT(*) FILTER (WHERE status = $1) AS completed,
                COUNT(*) FILTER (WHERE status = $2) AS in_progress,
                COUNT(*) FILTER (WHERE status = $3) AS not_started,
                COUNT(*) FILTER (WHERE is_weak_chapter) AS weak
            FROM {self.table_name}
        """

        with self.translate_errors("get_status_counts"):
            row = await self.db.fetchrow(
                query,
                ChapterStatus.COMPLETED.value,
                ChapterStatus.IN_PROGRESS.value,
                ChapterStatus.NOT_STARTED.value,
            )
        return dict(row) if row else {
            "total": 0, "completed": 0, "in_progress": 0, "not_started": 0, "weak": 0
        }

    async def get_subject_distribution(self) -> List[Dict[str, Any]]:
        """Per-subject count, completed count and weak count, ordered by subject."""
        query = f"""
            SELECT
                subject,
                COUNT(*) AS count,
                COUNT(*) FILTER (WHERE status = $1) AS completed,
                COUNT(*) FILTER (WHERE is_weak_chapter) AS weak_chapters
            FROM {self.table_name}
            GROUP BY subject
            ORDER BY subject
        """

        with self.translate_errors("get_subject_distribution"):
            rows = await self.db.fetch(query, ChapterStatus.COMPLETED.value)
        return [dict(row) for row in rows]

    async def get_distinct_values(self, column: str) -> List[Any]:
        """Sorted distinct values stored in a filterable column."""
        if column not in FILTERABLE_COLUMNS:
            raise ValueError(f"Invalid column: {column}")

        query = f"SELECT DISTINCT {column} FROM {self.table_name} ORDER BY {column}"

        with self.translate_errors("get_distinct_values"):
            rows = await self.db.fetch(query)
        return [row[column] for row in rows]
