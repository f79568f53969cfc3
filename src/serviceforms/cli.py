"""CLI entry point for ServiceForms."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from serviceforms import __version__, logger
from serviceforms.catalogue import ServiceCatalogue
from serviceforms.exceptions import PackageError, ServiceNotFoundError
from serviceforms.logging import configure_logging
from serviceforms.settings import get_settings
from serviceforms.steps import build_service_steps

if TYPE_CHECKING:
    from serviceforms.settings import Settings


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="serviceforms")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--spec",
        type=Path,
        default=None,
        dest="spec_path",
        help="Local OpenAPI document (YAML or JSON) instead of the live specification",
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("list", parents=[common], help="List the services found in the specification")

    show_parser = subparsers.add_parser("show", parents=[common], help="Print one service definition as JSON")
    show_parser.add_argument("slug")

    steps_parser = subparsers.add_parser(
        "steps",
        parents=[common],
        help="Print the form steps of one service",
    )
    steps_parser.add_argument("slug")

    return parser


def _load_catalogue(settings: Settings, spec_path: Path | None) -> ServiceCatalogue:
    """Build a catalogue from a local file or the live specification.

    Args:
        settings (Settings): Runtime settings.
        spec_path (Path | None): Optional local document.

    Returns:
        ServiceCatalogue: Loaded catalogue.
    """
    catalogue = ServiceCatalogue(settings)
    if spec_path is not None:
        catalogue.load_text(spec_path.read_text(encoding="utf-8"))
    else:
        asyncio.run(catalogue.refresh())

    if catalogue.error:
        logger.warning("Using fallback service definitions", extra={"error": catalogue.error})
    return catalogue


def _emit(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")


def _run_command(args: argparse.Namespace, catalogue: ServiceCatalogue) -> int:
    if args.command == "list":
        _emit(
            [
                {
                    "slug": service.slug,
                    "name": service.name,
                    "questions": len(service.questions),
                    "source": service.source.to_str(),
                }
                for service in catalogue.services
            ],
        )
        return 0

    service = catalogue.require(args.slug)
    if args.command == "show":
        _emit(service.model_dump(mode="json", by_alias=True, exclude_none=True))
        return 0

    _emit(
        [
            {
                "page": step.page.id if step.page else None,
                "title": step.page.title if step.page else step.questions[0].label,
                "questions": [question.id for question in step.questions],
            }
            for step in build_service_steps(service)
        ],
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        argv (list[str] | None): Arguments, defaults to `sys.argv[1:]`.

    Returns:
        int: Exit code (0 for success, 1 for error).
    """
    settings = get_settings()
    configure_logging(settings=settings)

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        catalogue = _load_catalogue(settings, args.spec_path)
        return _run_command(args, catalogue)
    except ServiceNotFoundError as exc:
        logger.error("Unknown service", extra={"slug": exc.slug, "available": exc.available})
        return 1
    except PackageError:
        logger.exception("Command failed")
        return 1
    except OSError:
        logger.exception("Could not read specification file")
        return 1
    except KeyboardInterrupt:
        logger.info("Command aborted by user")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
