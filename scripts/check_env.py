"""Utility for verifying that the service configuration is usable.

The tool loads the given ``.env`` file, instantiates ``AppSettings`` and
reports which AI providers will be tried, in order. It exits non-zero when the
settings are malformed or when no provider has credentials, so it can gate a
deployment before the service starts answering with configuration errors.

Example usage::

    python -m scripts.check_env --env-file /opt/nutrisense/.env
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from nutrisense.core.config import AppSettings, _load_env_file

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_NO_PROVIDER = 4
EXIT_RUNTIME_ERROR = 5

_PROVIDER_KEYS = {
    "gemini": "GEMINI_API_KEY",
    "gateway": "AI_GATEWAY_API_KEY",
}


def _load_settings(env_file: Path) -> AppSettings:
    """Load ``env_file`` into the environment and build the settings."""
    _load_env_file(str(env_file))
    return AppSettings()  # type: ignore[call-arg]


def configured_providers(settings: AppSettings) -> list[str]:
    """Return provider names, in priority order, that have credentials."""
    credentials = {
        "gemini": settings.gemini.api_key,
        "gateway": settings.gateway.api_key,
    }
    return [name for name in settings.provider_order if credentials.get(name)]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate settings and report the AI provider order."
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        type=Path,
        help="Path to the environment file (default: .env in the repo root).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    env_file: Path = args.env_file

    if not env_file.exists():
        print(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or create it before running this tool.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    try:
        settings = _load_settings(env_file)
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    providers = configured_providers(settings)
    if not providers:
        expected = ", ".join(_PROVIDER_KEYS[name] for name in _PROVIDER_KEYS)
        print(
            f"No AI provider is configured. Set at least one of: {expected}.",
            file=sys.stderr,
        )
        return EXIT_NO_PROVIDER

    print(f"Providers (in order): {', '.join(providers)}")
    print(f"Upstream timeout: {settings.upstream_timeout_seconds:g}s")
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
