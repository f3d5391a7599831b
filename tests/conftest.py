"""Pytest configuration shared across the suite."""

import copy

import pytest

_WELL_FORMED_ANALYSIS = {
    "id": "analysis-fixture",
    "productName": "Organic Apple Cinnamon Bar",
    "verdict": "safe",
    "confidence": 88,
    "healthScore": 82,
    "summary": "Simple whole-food ingredients with vitamin C added as an antioxidant.",
    "detectedContext": "Snack bar",
    "contextNote": "Focused on added sugars because this is a snack.",
    "quickAdvice": ["Great everyday snack", "Watch portion sizes"],
    "categories": [
        {
            "name": "Base Ingredients",
            "icon": "🍎",
            "aiNote": None,
            "ingredients": [
                {
                    "commonName": "Organic Apples",
                    "scientificName": "Malus domestica",
                    "safety": "safe",
                    "explanation": "Whole fruit providing fibre and natural sweetness.",
                    "detailedInfo": None,
                },
                {
                    "commonName": "Ascorbic Acid",
                    "scientificName": "Vitamin C",
                    "safety": "safe",
                    "explanation": "Antioxidant that prevents browning.",
                    "detailedInfo": "Identical to the vitamin found in citrus fruit.",
                },
            ],
        }
    ],
    "tradeoffs": [
        {
            "ingredient": "Ascorbic Acid",
            "why": "Keeps the fruit from browning.",
            "concern": "Sounds synthetic.",
            "reality": "Same molecule as dietary vitamin C.",
        }
    ],
}


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def well_formed_analysis() -> dict:
    """A model response that already satisfies every schema bound."""
    return copy.deepcopy(_WELL_FORMED_ANALYSIS)
