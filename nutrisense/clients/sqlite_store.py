"""SQLite persistence for shared analyses."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional


class SQLiteStore:
    """Shared analyses keyed by share code, stored as JSON documents."""

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS shared_analyses (
                    share_code TEXT PRIMARY KEY,
                    created_at TEXT NOT NULL,
                    analysis TEXT NOT NULL
                )
                """
            )

    def insert_shared_analysis(
        self, *, share_code: str, created_at: str, analysis: Dict[str, Any]
    ) -> bool:
        """Store ``analysis``; return False when ``share_code`` is already taken."""
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT OR IGNORE INTO shared_analyses (share_code, created_at, analysis)
                VALUES (?, ?, ?)
                """,
                (share_code, created_at, json.dumps(analysis, ensure_ascii=False)),
            )
        return cursor.rowcount == 1

    def get_shared_analysis(self, share_code: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT share_code, created_at, analysis FROM shared_analyses "
                "WHERE share_code = ?",
                (share_code,),
            ).fetchone()
        if not row:
            return None
        return {
            "share_code": row["share_code"],
            "created_at": row["created_at"],
            "analysis": json.loads(row["analysis"]),
        }


__all__ = ["SQLiteStore"]
