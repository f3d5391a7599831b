try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json

import pytest

from nutrisense.core.errors import ParseError
from nutrisense.schemas import AnalysisRecord
from nutrisense.services.schema_guard import extract_json_object, normalize_analysis


def test_well_formed_record_is_returned_unchanged(well_formed_analysis: dict) -> None:
    record = normalize_analysis(well_formed_analysis)

    assert record.to_payload() == well_formed_analysis
    assert normalize_analysis(record.to_payload()) == record


def test_semantically_malformed_payload_is_defaulted() -> None:
    record = normalize_analysis(
        {"verdict": "bogus", "confidence": "high", "summary": "Looks fine."}
    )

    assert record.verdict == "caution"
    assert 0 <= record.confidence <= 100
    assert record.categories == []
    assert record.tradeoffs == []
    assert record.quick_advice == []
    assert record.summary == "Looks fine."


@pytest.mark.parametrize(
    "raw, expected",
    [(150, 100), (-5, 0), (72.6, 73), ("64", 64), ("91%", 91), (True, 50), (None, 50)],
)
def test_confidence_is_parsed_and_clamped(raw, expected: int) -> None:
    record = normalize_analysis({"verdict": "safe", "confidence": raw})

    assert record.confidence == expected


def test_huge_integer_score_is_clamped_without_losing_the_record(
    well_formed_analysis: dict,
) -> None:
    well_formed_analysis["confidence"] = 10**400
    content = json.dumps(well_formed_analysis)

    record = normalize_analysis(extract_json_object(content))

    assert record.confidence == 100
    assert record.verdict == "safe"
    assert record.summary == well_formed_analysis["summary"]
    assert len(record.categories) == 1
    assert len(record.tradeoffs) == 1


def test_missing_health_score_is_derived_from_confidence() -> None:
    record = normalize_analysis({"verdict": "safe", "confidence": 80})

    assert record.health_score == 72


def test_strings_are_truncated_not_rejected() -> None:
    record = normalize_analysis(
        {
            "verdict": "Concern",
            "confidence": 40,
            "healthScore": 35,
            "productName": "P" * 400,
            "summary": "S" * 2500,
            "quickAdvice": ["tip " * 80] + [f"tip {index}" for index in range(12)],
        }
    )

    assert record.verdict == "concern"
    assert len(record.product_name) == 300
    assert len(record.summary) == 2000
    assert len(record.quick_advice) == 10
    assert len(record.quick_advice[0]) == 200


def test_nested_entries_are_coerced_or_dropped() -> None:
    record = normalize_analysis(
        {
            "verdict": "safe",
            "confidence": 90,
            "categories": [
                "not-a-category",
                {
                    "icon": 7,
                    "ingredients": [
                        {"commonName": "Carrageenan", "safety": "dangerous", "explanation": 3},
                        {"safety": "safe"},
                        None,
                    ],
                },
            ],
            "tradeoffs": [
                {"ingredient": "Carrageenan", "why": "Thickener"},
                {"why": "orphaned"},
            ],
        }
    )

    assert len(record.categories) == 1
    category = record.categories[0]
    assert category.name == "Other ingredients"
    assert category.icon == "7"
    assert [item.common_name for item in category.ingredients] == [
        "Carrageenan",
        "Unknown ingredient",
    ]
    assert category.ingredients[0].safety == "unknown"
    assert category.ingredients[0].explanation == "3"
    assert category.ingredients[1].safety == "safe"
    assert len(record.tradeoffs) == 1
    assert record.tradeoffs[0].concern == ""


@pytest.mark.parametrize("payload", [[1, 2, 3], "text", None, 42])
def test_non_object_payloads_never_raise(payload) -> None:
    record = normalize_analysis(payload)

    assert isinstance(record, AnalysisRecord)
    assert record.verdict == "caution"


def test_fenced_json_is_extracted(well_formed_analysis: dict) -> None:
    content = f"```json\n{json.dumps(well_formed_analysis)}\n```"

    assert extract_json_object(content) == well_formed_analysis


def test_json_embedded_in_prose_is_extracted() -> None:
    content = (
        'Here is the analysis {not json} you asked for: '
        '{"verdict": "safe", "summary": "Braces } inside \\" strings", "confidence": 70}'
        " Let me know if you need more."
    )

    payload = extract_json_object(content)

    assert payload["verdict"] == "safe"
    assert payload["summary"] == 'Braces } inside " strings'


@pytest.mark.parametrize("content", ["", "I cannot analyse this image.", "[1, 2]", "{broken"])
def test_missing_json_object_raises_parse_error(content: str) -> None:
    with pytest.raises(ParseError):
        extract_json_object(content)
