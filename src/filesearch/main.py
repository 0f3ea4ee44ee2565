import argparse
import asyncio
import os
import signal
import sys
from typing import List, Optional

from filesearch.version import __version__
from filesearch.core.cancellation import CancellationTokenSource
from filesearch.core.constants import BACKENDS
from filesearch.core.models import FileSearchReport, SearchOptions
from filesearch.core.search_service import FileSearchService
from filesearch.core.settings import Settings
from filesearch.core.utils.logging import configure_logging
from filesearch.core.utils.uri import FileUri

EXIT_OK = 0
EXIT_ALL_ROOTS_FAILED = 1
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filesearch",
        description="Fuzzy file search across one or more roots.",
    )
    parser.add_argument("pattern", nargs="?", default="", help="search pattern ('' or '*' lists everything)")
    parser.add_argument("-r", "--root", action="append", dest="roots", default=[], help="root directory or file:// URI (repeatable, default: cwd)")
    parser.add_argument("-g", "--include", action="append", default=[], help="include glob applied to every root (repeatable)")
    parser.add_argument("-x", "--exclude", action="append", default=[], help="exclude glob applied to every root (repeatable)")
    parser.add_argument("--no-gitignore", action="store_true", help="list ignored and hidden files too")
    parser.add_argument("--no-fuzzy", action="store_true", help="only report substring matches")
    parser.add_argument("-n", "--limit", type=int, default=None, help="maximum number of results")
    parser.add_argument("--backend", choices=BACKENDS, default=None, help="listing backend (default: FILESEARCH_BACKEND or auto)")
    parser.add_argument("--rg-path", default=None, help="ripgrep executable")
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="print the full search report as JSON")
    output.add_argument("--paths", action="store_true", help="print filesystem paths instead of file URIs")
    parser.add_argument("--version", action="version", version=f"filesearch {__version__}")
    return parser


def _settings_from_args(ns: argparse.Namespace) -> Settings:
    overrides = {}
    if ns.backend:
        overrides["BACKEND"] = ns.backend
    if ns.rg_path:
        overrides["RG_PATH"] = ns.rg_path
    return Settings(**overrides)


def _options_from_args(ns: argparse.Namespace) -> SearchOptions:
    return SearchOptions(
        root_uris=ns.roots or [os.getcwd()],
        include_patterns=ns.include or None,
        exclude_patterns=ns.exclude or None,
        use_git_ignore=not ns.no_gitignore,
        fuzzy_match=not ns.no_fuzzy,
        limit=ns.limit,
    )


async def run_search(service: FileSearchService, pattern: str, options: SearchOptions) -> FileSearchReport:
    """Run one search; SIGINT cancels it instead of killing the process."""
    source = CancellationTokenSource()
    loop = asyncio.get_running_loop()
    handled = False
    # add_signal_handler is not available on Windows
    if os.name != "nt":
        try:
            loop.add_signal_handler(signal.SIGINT, source.cancel)
            handled = True
        except (NotImplementedError, RuntimeError):
            handled = False
    try:
        return await service.search(pattern, options, source.token)
    finally:
        if handled:
            loop.remove_signal_handler(signal.SIGINT)


def _print_report(report: FileSearchReport, ns: argparse.Namespace) -> None:
    if ns.json:
        sys.stdout.write(report.model_dump_json(indent=2) + "\n")
        return
    for file_uri in report.files:
        sys.stdout.write((FileUri.to_fs_path(file_uri) if ns.paths else file_uri) + "\n")


def main(argv: Optional[List[str]] = None) -> int:
    ns = build_parser().parse_args(argv)
    cfg = _settings_from_args(ns)
    configure_logging(cfg)
    service = FileSearchService(cfg=cfg)
    try:
        report = asyncio.run(run_search(service, ns.pattern, _options_from_args(ns)))
    except KeyboardInterrupt:
        return EXIT_CANCELLED

    _print_report(report, ns)
    if report.cancelled:
        return EXIT_CANCELLED
    if report.all_roots_failed:
        return EXIT_ALL_ROOTS_FAILED
    return EXIT_OK
