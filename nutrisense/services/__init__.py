"""Service layer exports."""

from .dispatcher import ProviderDispatcher
from .orchestrator import AnalysisOrchestrator
from .schema_guard import extract_json_object, normalize_analysis
from .sharing import SharedAnalysisService
from .validation import (
    validate_analysis_payload,
    validate_chat_payload,
    validate_transcription_payload,
)

__all__ = [
    "AnalysisOrchestrator",
    "ProviderDispatcher",
    "SharedAnalysisService",
    "extract_json_object",
    "normalize_analysis",
    "validate_analysis_payload",
    "validate_chat_payload",
    "validate_transcription_payload",
]
