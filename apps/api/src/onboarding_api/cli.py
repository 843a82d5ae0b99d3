from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from onboarding_api.config import get_settings
from onboarding_api.container import build_container
from onboarding_api.errors import RAGInitializationError
from onboarding_api.logging_config import setup_logging


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="onboarding-rag-check",
        description="Load the onboarding corpus and run the sample guidance queries",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level for the check run",
    )
    parser.add_argument(
        "--status-only",
        action="store_true",
        help="Load the corpus and print the RAG status without running sample queries",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation for the printed report",
    )
    return parser


async def _run_check(*, status_only: bool) -> dict[str, Any]:
    container = build_container(get_settings())
    loader = container.corpus_loader

    await loader.load()
    report: dict[str, Any] = {"status": loader.system_status()}
    if not status_only:
        report["queries"] = await loader.run_sample_queries()
    return report


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()
    setup_logging(args.log_level.upper())

    try:
        report = asyncio.run(_run_check(status_only=args.status_only))
    except RAGInitializationError as exc:
        print(f"[onboarding-rag-check] failed: {exc.message}", file=sys.stderr, flush=True)
        raise SystemExit(1) from exc

    print(json.dumps(report, indent=args.indent), flush=True)


if __name__ == "__main__":
    main()
