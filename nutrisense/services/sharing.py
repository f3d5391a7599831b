"""Persist analyses under short share codes so they can be linked to."""

from __future__ import annotations

import logging
import re
import secrets
from datetime import datetime, timezone
from typing import Any, Optional

from nutrisense.clients.sqlite_store import SQLiteStore
from nutrisense.core.errors import PayloadValidationError
from nutrisense.schemas import SharedAnalysis
from nutrisense.services.schema_guard import normalize_analysis

_SHARE_CODE = re.compile(r"^[a-f0-9]{12}$")
_MAX_ATTEMPTS = 5

logger = logging.getLogger(__name__)


class SharedAnalysisService:
    """Store normalized analyses and look them up by share code."""

    def __init__(self, store: SQLiteStore) -> None:
        self._store = store

    def share(self, payload: Any) -> str:
        """Normalize ``payload`` and store it; return the new share code."""
        if not isinstance(payload, dict):
            raise PayloadValidationError("Invalid request body")
        analysis = normalize_analysis(payload)
        created_at = datetime.now(timezone.utc).isoformat()

        for _ in range(_MAX_ATTEMPTS):
            share_code = secrets.token_hex(6)
            stored = self._store.insert_shared_analysis(
                share_code=share_code,
                created_at=created_at,
                analysis=analysis.to_payload(),
            )
            if stored:
                logger.info("Stored shared analysis %s", share_code)
                return share_code
        raise RuntimeError("Could not allocate a unique share code")

    def get(self, share_code: str) -> Optional[SharedAnalysis]:
        if not _SHARE_CODE.match(share_code or ""):
            raise PayloadValidationError("Invalid share link")
        item = self._store.get_shared_analysis(share_code)
        if item is None:
            return None
        return SharedAnalysis(
            share_code=item["share_code"],
            created_at=datetime.fromisoformat(item["created_at"]),
            analysis=normalize_analysis(item.get("analysis")),
        )


__all__ = ["SharedAnalysisService"]
