"""
Command-line entry point.

    metacollector [FORMAT]        browse the FORMAT meta and wishlist
    metacollector DECKLIST_FILE   check a decklist against the collection

Exit status: 0 on normal quit, 1 when startup data cannot be loaded,
2 on usage errors (including unknown formats).
"""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from metacollector.config import SupportedFormat, settings
from metacollector.models.failure import ConfigurationError, DataFetchError, KnownError
from metacollector.parsers.collection_import import load_collection
from metacollector.parsers.deck_list import load_deck_file
from metacollector.services.deck_check import check_deck, print_deck_check
from metacollector.services.provider import WebDataProvider
from metacollector.services.snapshot import load_snapshot
from metacollector.session.state import SessionData
from metacollector.ui.app import MetaCollectorApp

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    formats = ", ".join(fmt.value for fmt in SupportedFormat)
    parser = argparse.ArgumentParser(
        prog="metacollector",
        description="Rank the cards your collection is missing from the current meta",
    )
    parser.add_argument(
        "target",
        nargs="?",
        help=(
            f"Format to browse ({formats}; prefixes accepted, "
            f"default {settings.default_format.value}) or a decklist file to check"
        ),
    )
    parser.add_argument(
        "--collection",
        type=Path,
        default=None,
        help=f"Collection file (default {settings.collection_path})",
    )
    parser.add_argument(
        "--export",
        type=Path,
        default=None,
        help=f"Wishlist export file (default {settings.export_path})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug messages")
    return parser


def configure_logging(verbose: bool, log_file: Path | None) -> None:
    """
    Send logs to a file while the full-screen UI owns the terminal,
    otherwise to stderr.
    """
    level = logging.DEBUG if verbose or settings.debug else logging.INFO
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logging.basicConfig(level=level, format=LOG_FORMAT, filename=log_file, force=True)
    else:
        logging.basicConfig(
            level=level,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
            force=True,
        )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def run_deck_check(deck_path: Path, collection_path: Path) -> int:
    collection, _warnings = load_collection(collection_path)
    cards = load_deck_file(deck_path)
    print_deck_check(check_deck(cards, collection), Console())
    return 0


def run_browser(format_name: str, collection_path: Path, export_path: Path) -> int:
    console = Console(stderr=True)
    with WebDataProvider() as provider:

        def loader() -> SessionData:
            return load_snapshot(format_name, provider, collection_path)

        with console.status(f"Fetching the {format_name} meta..."):
            data = loader()

        app = MetaCollectorApp(
            data,
            loader=loader,
            export_path=export_path,
            title=settings.app_name,
            viewport_rows=settings.viewport_rows,
            match_type_tags=settings.search_type_tags,
        )
        result = app.run()
    return result or 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    collection_path = args.collection or settings.collection_path

    deck_path = Path(args.target) if args.target else None
    if deck_path is not None and deck_path.is_file():
        configure_logging(args.verbose, log_file=None)
        try:
            return run_deck_check(deck_path, collection_path)
        except KnownError as e:
            print(f"metacollector: {e.user_message()}", file=sys.stderr)
            return 1

    try:
        fmt = SupportedFormat.parse(args.target or settings.default_format.value)
    except ConfigurationError as e:
        parser.error(e.user_message())

    configure_logging(args.verbose, log_file=settings.log_file)
    logger.info("Starting %s for %s", settings.app_name, fmt.value)
    try:
        return run_browser(fmt.value, collection_path, args.export or settings.export_path)
    except (ConfigurationError, DataFetchError) as e:
        logger.error("Startup failed: %s", e.user_message())
        print(f"metacollector: {e.user_message()}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
