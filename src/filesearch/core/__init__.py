from .cancellation import CancellationToken, CancellationTokenSource
from .models import FileSearchReport, RootOptions, SearchOptions
from .search_service import FileSearchService
from .settings import Settings, settings

__all__ = [
    "CancellationToken",
    "CancellationTokenSource",
    "FileSearchReport",
    "FileSearchService",
    "RootOptions",
    "SearchOptions",
    "Settings",
    "settings",
]
