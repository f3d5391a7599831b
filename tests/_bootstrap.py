"""Test helper that normalizes sys.path and environment defaults."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep the share store out of the working tree.
_TEST_DATA_DIR = Path(tempfile.mkdtemp(prefix="nutrisense-tests-"))

_DEFAULT_ENV_VARS: dict[str, str] = {
    "APP_ENV": "test",
    "APP_LOG_LEVEL": "WARNING",
    "AI_PROVIDER_ORDER": "gemini,gateway",
    "GEMINI_API_KEY": "test-gemini-key",
    "AI_GATEWAY_API_KEY": "test-gateway-key",
    "NUTRISENSE_DB_PATH": str(_TEST_DATA_DIR / "nutrisense.db"),
}

for key, value in _DEFAULT_ENV_VARS.items():
    os.environ.setdefault(key, value)
