#!/usr/bin/env python
"""Command-line front end: analyze ingredients, then ask follow-up questions."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Dict, List

import httpx

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from nutrisense.clients.nutrisense_api import (  # noqa: E402
    NutriSenseApiClient,
    NutriSenseApiError,
)
from nutrisense.schemas import AnalysisRecord  # noqa: E402


def _print_analysis(record: AnalysisRecord) -> None:
    title = record.product_name or "Ingredient analysis"
    print(f"{title}: {record.verdict.upper()} (health score {record.health_score}/100, "
          f"confidence {record.confidence}%)")
    if record.summary:
        print(record.summary)
    for tip in record.quick_advice:
        print(f"  - {tip}")
    for category in record.categories:
        print(f"\n{category.icon} {category.name}")
        for ingredient in category.ingredients:
            print(f"  [{ingredient.safety}] {ingredient.common_name}: {ingredient.explanation}")
    print()


async def _analyze(client: NutriSenseApiClient, args: argparse.Namespace) -> AnalysisRecord:
    if args.image:
        return await client.analyze_image(Path(args.image), question=args.question)
    return await client.analyze_text(args.ingredients, question=args.question)


async def run_chat(client: NutriSenseApiClient, record: AnalysisRecord) -> int:
    history: List[Dict[str, str]] = []
    print("Ask follow-up questions. Type 'exit' or 'quit' to end.\n")
    while True:
        try:
            question = input("You: ")
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye!")
            return 0
        if question.strip().lower() in {"exit", "quit"}:
            print("Goodbye!")
            return 0
        if not question.strip():
            continue
        try:
            reply = await client.chat(question, analysis=record, history=history)
        except NutriSenseApiError as exc:
            print(f"Error: {exc}\n")
            continue
        except httpx.HTTPError as exc:
            print(f"Could not reach NutriSense API: {exc}\n")
            continue
        history.extend(
            [
                {"role": "user", "content": question},
                {"role": "assistant", "content": reply},
            ]
        )
        print(f"NutriSense: {reply}\n")


async def run(args: argparse.Namespace) -> int:
    client = NutriSenseApiClient(args.base_url)
    try:
        record = await _analyze(client, args)
    except NutriSenseApiError as exc:
        print(f"Error ({exc.status_code}): {exc}", file=sys.stderr)
        return 1
    except httpx.HTTPError as exc:
        print(f"Could not reach NutriSense API at {args.base_url}: {exc}", file=sys.stderr)
        return 1
    _print_analysis(record)
    if args.share:
        try:
            share_code = await client.share(record)
        except NutriSenseApiError as exc:
            print(f"Could not share analysis ({exc.status_code}): {exc}", file=sys.stderr)
        except httpx.HTTPError as exc:
            print(f"Could not share analysis: {exc}", file=sys.stderr)
        else:
            print(f"Share code: {share_code}\n")
    if args.chat:
        return await run_chat(client, record)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Analyze a food product's ingredients with NutriSense."
    )
    parser.add_argument(
        "ingredients",
        nargs="?",
        help="Ingredient list to analyze. Omit when using --image.",
    )
    parser.add_argument("--image", help="Path to a photo of the ingredient label.")
    parser.add_argument("--question", help="Optional question about the product.")
    parser.add_argument(
        "--base-url",
        default="http://localhost:8000",
        help="NutriSense API base URL (default: http://localhost:8000).",
    )
    parser.add_argument(
        "--chat",
        action="store_true",
        help="Start an interactive follow-up conversation after the analysis.",
    )
    parser.add_argument(
        "--share",
        action="store_true",
        help="Store the analysis and print its share code.",
    )

    args = parser.parse_args(argv)
    if not args.ingredients and not args.image:
        parser.error("provide an ingredient list or --image")
    return asyncio.run(run(args))


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
