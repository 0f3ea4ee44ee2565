"""Multi-root fuzzy file search on top of ripgrep."""
from filesearch.version import __version__
from filesearch.core.cancellation import CancellationToken, CancellationTokenSource
from filesearch.core.models import FileSearchReport, RootOptions, SearchOptions
from filesearch.core.search_service import FileSearchService

__all__ = [
    "__version__",
    "CancellationToken",
    "CancellationTokenSource",
    "FileSearchReport",
    "FileSearchService",
    "RootOptions",
    "SearchOptions",
]
