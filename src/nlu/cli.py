"""
NLU Settings CLI
================

Command-line entry point for inspecting and updating the NLU classification
settings kept in a JSON settings file (``SETTINGS_FILE``).

    nlu-settings show
    nlu-settings decide keyword
    nlu-settings save proposal.json
    nlu-settings check
    nlu-settings reset

Configuration comes from environment variables (see ``common.config``).
Results are printed to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Sequence

import structlog

from common.config import Settings
from common.logging_config import configure_logging
from common.store import JsonFileStore
from common.transport import RequestsTransport

from .catalog import FEATURE_NAMES
from .errors import AuthFailed, InvalidFeature
from .registry import StaticPostTypeRegistry, StaticTaxonomyRegistry
from .service import NluSettingsService

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nlu-settings",
        description="Inspect and update NLU classification settings",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("show", help="Print every feature decision and the supported post types")

    decide_parser = subparsers.add_parser("decide", help="Print the decision for one feature")
    decide_parser.add_argument("feature", help=f"One of: {', '.join(FEATURE_NAMES)}")

    save_parser = subparsers.add_parser("save", help="Sanitize and store a JSON settings proposal")
    save_parser.add_argument("file", type=Path, help="Path to the JSON proposal ('-' for stdin)")

    subparsers.add_parser("check", help="Probe the NLU provider with the resolved credentials")
    subparsers.add_parser("reset", help="Restore factory defaults (credentials are kept)")
    return parser


def build_service(settings: Settings) -> tuple[NluSettingsService, RequestsTransport]:
    transport = RequestsTransport(timeout=settings.REQUEST_TIMEOUT)
    service = NluSettingsService(
        settings,
        JsonFileStore(settings.SETTINGS_FILE),
        transport,
        StaticPostTypeRegistry(settings.PUBLIC_POST_TYPES),
        StaticTaxonomyRegistry(settings.TAXONOMIES),
    )
    return service, transport


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _load_proposal(path: Path) -> dict:
    raw = sys.stdin.read() if str(path) == "-" else path.read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("Settings proposal must be a JSON object.")
    return data


def run_command(args: argparse.Namespace, service: NluSettingsService) -> int:
    log = structlog.get_logger(__name__)

    if args.command == "show":
        _print_json(
            {
                "configured": service.is_configured(),
                "post_types": service.supported_post_types(),
                "features": {
                    name: decision.to_dict()
                    for name, decision in service.engine.decide_all().items()
                },
            }
        )
        return EXIT_OK

    if args.command == "decide":
        try:
            decision = service.engine.decide(args.feature)
        except InvalidFeature as e:
            log.error("Unknown feature", feature=args.feature, error=str(e))
            return EXIT_USAGE
        _print_json(decision.to_dict())
        return EXIT_OK

    if args.command == "save":
        try:
            proposal = _load_proposal(args.file)
        except (OSError, ValueError) as e:
            log.error("Could not read settings proposal", file=str(args.file), error=str(e))
            return EXIT_FAILURE
        result = service.save(proposal)
        _print_json(
            {
                "settings": result.settings.to_dict(),
                "notices": [asdict(notice) for notice in result.notices],
            }
        )
        return EXIT_OK

    if args.command == "check":
        credentials = {
            key: service.resolver.resolve("credentials", key)
            for key in ("url", "username", "password")
        }
        try:
            service.validator.check(credentials)
        except AuthFailed as e:
            _print_json({"configured": False, "reason": e.reason})
            return EXIT_FAILURE
        _print_json({"configured": True})
        return EXIT_OK

    if args.command == "reset":
        _print_json(service.reset().to_dict())
        return EXIT_OK

    raise ValueError(f"Unhandled command: {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``nlu-settings`` console script."""
    args = build_parser().parse_args(argv)
    log = structlog.get_logger(__name__)

    try:
        settings = Settings()
        configure_logging(settings)
    except ValueError as e:
        log.error("Configuration error", error=str(e))
        return EXIT_FAILURE

    service, transport = build_service(settings)
    try:
        return run_command(args, service)
    except ValueError as e:
        # JsonFileStore refuses a settings file that is not a JSON object.
        log.error(
            "Could not read settings file", file=settings.SETTINGS_FILE, error=str(e)
        )
        return EXIT_FAILURE
    finally:
        transport.close()


if __name__ == "__main__":
    sys.exit(main())
