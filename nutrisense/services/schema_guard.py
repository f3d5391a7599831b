"""Normalize untrusted model output into a well-formed ``AnalysisRecord``.

The model is asked for JSON but routinely wraps it in markdown fences, omits
fields, uses the wrong types or invents values. :func:`extract_json_object`
locates the JSON document (raising :class:`ParseError` when there is none) and
:func:`normalize_analysis` turns whatever object it finds into a record. The
latter never raises: a strict pydantic validation is attempted first and, when
it fails, the record is rebuilt field by field with defaults.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError

from nutrisense.core.errors import ParseError
from nutrisense.schemas import analysis as schema
from nutrisense.schemas.analysis import AnalysisRecord

logger = logging.getLogger(__name__)

FALLBACK_VERDICT = "caution"
FALLBACK_SAFETY = "unknown"
DEFAULT_CONFIDENCE = 50
DEFAULT_CATEGORY_NAME = "Other ingredients"
DEFAULT_CATEGORY_ICON = "🧪"
DEFAULT_INGREDIENT_NAME = "Unknown ingredient"

_FENCE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)


def _balanced_spans(text: str):
    """Yield each balanced ``{...}`` span, string- and escape-aware."""
    for start, char in enumerate(text):
        if char != "{":
            continue
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            current = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif current == "\\":
                    escaped = True
                elif current == '"':
                    in_string = False
                continue
            if current == '"':
                in_string = True
            elif current == "{":
                depth += 1
            elif current == "}":
                depth -= 1
                if depth == 0:
                    yield text[start : index + 1]
                    break


def extract_json_object(content: str) -> dict[str, Any]:
    """Return the first JSON object found in raw model output."""
    cleaned = _FENCE.sub("", content or "").strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, dict):
        return parsed

    for span in _balanced_spans(content or ""):
        try:
            candidate = json.loads(span)
        except json.JSONDecodeError:
            continue
        if isinstance(candidate, dict):
            return candidate

    raise ParseError("Model response did not contain a JSON object")


def _text(value: Any, max_len: int, default: str = "") -> str:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return default
    return value.strip()[:max_len]


def _optional_text(value: Any, max_len: int) -> Optional[str]:
    text = _text(value, max_len)
    return text or None


def _score(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return min(100, max(0, value))
    if isinstance(value, str):
        try:
            value = float(value.strip().rstrip("%"))
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return None
    return int(min(100, max(0, round(value))))


def _choice(value: Any, allowed: tuple[str, ...], fallback: str) -> str:
    if isinstance(value, str) and value.strip().lower() in allowed:
        return value.strip().lower()
    return fallback


def _items(value: Any, coerce: Callable[[Mapping[str, Any]], Optional[dict]]) -> list[dict]:
    if not isinstance(value, list):
        return []
    coerced = (coerce(item) for item in value if isinstance(item, Mapping))
    return [item for item in coerced if item is not None]


def _field(raw: Mapping[str, Any], camel: str, snake: str) -> Any:
    return raw.get(camel, raw.get(snake))


def _coerce_ingredient(raw: Mapping[str, Any]) -> dict:
    return {
        "common_name": _text(
            _field(raw, "commonName", "common_name") or raw.get("name"),
            schema.MAX_INGREDIENT_NAME,
            DEFAULT_INGREDIENT_NAME,
        ),
        "scientific_name": _optional_text(
            _field(raw, "scientificName", "scientific_name"),
            schema.MAX_INGREDIENT_NAME,
        ),
        "safety": _choice(raw.get("safety"), schema.SAFETY_LEVELS, FALLBACK_SAFETY),
        "explanation": _text(raw.get("explanation"), schema.MAX_EXPLANATION),
        "detailed_info": _optional_text(
            _field(raw, "detailedInfo", "detailed_info"), schema.MAX_DETAILED_INFO
        ),
    }


def _coerce_category(raw: Mapping[str, Any]) -> dict:
    return {
        "name": _text(raw.get("name"), schema.MAX_CATEGORY_NAME, DEFAULT_CATEGORY_NAME),
        "icon": _text(raw.get("icon"), schema.MAX_CATEGORY_ICON, DEFAULT_CATEGORY_ICON),
        "ai_note": _optional_text(_field(raw, "aiNote", "ai_note"), schema.MAX_AI_NOTE),
        "ingredients": _items(raw.get("ingredients"), _coerce_ingredient),
    }


def _coerce_tradeoff(raw: Mapping[str, Any]) -> Optional[dict]:
    ingredient = _text(raw.get("ingredient"), schema.MAX_TRADEOFF_INGREDIENT)
    if not ingredient:
        return None
    return {
        "ingredient": ingredient,
        "why": _text(raw.get("why"), schema.MAX_TRADEOFF_TEXT),
        "concern": _text(raw.get("concern"), schema.MAX_TRADEOFF_TEXT),
        "reality": _text(raw.get("reality"), schema.MAX_TRADEOFF_TEXT),
    }


def _coerce_quick_advice(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    tips = (_text(item, schema.MAX_QUICK_ADVICE) for item in value)
    return [tip for tip in tips if tip][: schema.MAX_QUICK_ADVICE_ITEMS]


def _coerce_record(raw: Mapping[str, Any]) -> AnalysisRecord:
    confidence = _score(raw.get("confidence"))
    if confidence is None:
        confidence = DEFAULT_CONFIDENCE
    health_score = _score(_field(raw, "healthScore", "health_score"))
    if health_score is None:
        health_score = round(confidence * 0.9)

    fields: dict[str, Any] = {
        "product_name": _optional_text(
            _field(raw, "productName", "product_name"), schema.MAX_PRODUCT_NAME
        ),
        "verdict": _choice(raw.get("verdict"), schema.VERDICTS, FALLBACK_VERDICT),
        "confidence": confidence,
        "health_score": health_score,
        "summary": _text(raw.get("summary"), schema.MAX_SUMMARY),
        "detected_context": _optional_text(
            _field(raw, "detectedContext", "detected_context"),
            schema.MAX_DETECTED_CONTEXT,
        ),
        "context_note": _optional_text(
            _field(raw, "contextNote", "context_note"), schema.MAX_CONTEXT_NOTE
        ),
        "quick_advice": _coerce_quick_advice(_field(raw, "quickAdvice", "quick_advice")),
        "categories": _items(raw.get("categories"), _coerce_category),
        "tradeoffs": _items(raw.get("tradeoffs"), _coerce_tradeoff),
    }
    record_id = raw.get("id")
    if isinstance(record_id, str) and record_id.strip():
        fields["id"] = record_id.strip()[:100]
    return AnalysisRecord.model_validate(fields)


def _default_record() -> AnalysisRecord:
    return AnalysisRecord(
        verdict=FALLBACK_VERDICT,
        confidence=DEFAULT_CONFIDENCE,
        health_score=round(DEFAULT_CONFIDENCE * 0.9),
        summary="",
        quick_advice=[],
        categories=[],
        tradeoffs=[],
    )


def normalize_analysis(payload: Any) -> AnalysisRecord:
    """Return a well-formed record for any decoded JSON value. Never raises."""
    if isinstance(payload, AnalysisRecord):
        return payload
    if not isinstance(payload, Mapping):
        logger.warning("Analysis payload is %s, not an object", type(payload).__name__)
        payload = {}

    try:
        return AnalysisRecord.model_validate(payload)
    except ValidationError as exc:
        logger.info(
            "Analysis payload failed strict validation (%d issue(s)); coercing fields.",
            exc.error_count(),
        )

    try:
        return _coerce_record(payload)
    except Exception:  # pragma: no cover - coercion output always satisfies the schema
        logger.exception("Field-by-field analysis coercion failed; using defaults.")
        return _default_record()


__all__ = [
    "FALLBACK_SAFETY",
    "FALLBACK_VERDICT",
    "extract_json_object",
    "normalize_analysis",
]
