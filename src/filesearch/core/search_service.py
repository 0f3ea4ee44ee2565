import asyncio
from collections.abc import Mapping
from typing import Dict, List, Optional, Set, Union

import structlog

from filesearch.core.cancellation import CancellationToken, CancellationTokenSource
from filesearch.core.constants import WILDCARD_PATTERN
from filesearch.core.errors import PartialRootSearchError, RootSearchError
from filesearch.core.models import FileSearchReport, RootOptions, SearchOptions
from filesearch.core.ranking import fuzzy_test, sort_fuzzy_matches
from filesearch.core.search.backends import create_backend
from filesearch.core.search.base import ListingBackend
from filesearch.core.settings import Settings, settings as default_settings
from filesearch.core.utils.logging import get_logger
from filesearch.core.utils.uri import FileUri

OptionsInput = Union[SearchOptions, Mapping, None]


class _MatchSet:
    def __init__(self) -> None:
        # dict keeps discovery order for exact matches
        self.exact: Dict[str, None] = {}
        self.fuzzy: Set[str] = set()

    def __contains__(self, file_uri: str) -> bool:
        return file_uri in self.exact or file_uri in self.fuzzy


class FileSearchService:
    """
    Multi-root file search.

    Every root is listed concurrently by the listing backend. Each reported
    path is resolved to a file URI and classified on arrival: a case-insensitive
    substring hit (or an empty / '*' pattern) is an exact match, otherwise a
    fuzzy subsequence hit is a fuzzy match. The first classification of a URI
    wins, so a file reachable from several roots is reported once. The result
    lists exact matches in discovery order followed by fuzzy matches by
    descending relevance, cut to `limit`.

    A root that fails is logged and skipped; it never fails the search.
    """

    def __init__(
        self,
        backend: Optional[ListingBackend] = None,
        cfg: Optional[Settings] = None,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.settings = cfg or default_settings
        self.logger = logger or get_logger("filesearch.search")
        self.backend = backend or create_backend(self.settings, self.logger)

    @staticmethod
    def _coerce_options(options: OptionsInput) -> SearchOptions:
        if options is None:
            return SearchOptions()
        if isinstance(options, SearchOptions):
            return options
        return SearchOptions.model_validate(dict(options))

    async def find(
        self,
        pattern: str,
        options: OptionsInput = None,
        client_token: Optional[CancellationToken] = None,
    ) -> List[str]:
        report = await self.search(pattern, options, client_token)
        return report.files

    async def search(
        self,
        pattern: str,
        options: OptionsInput = None,
        client_token: Optional[CancellationToken] = None,
    ) -> FileSearchReport:
        opts = self._coerce_options(options)
        pattern = pattern or ""
        limit = opts.limit
        if limit is not None and limit <= 0:
            return FileSearchReport(cancelled=bool(client_token and client_token.is_cancellation_requested))

        roots = opts.normalized_root_options()
        source = CancellationTokenSource(client_token)
        matches = _MatchSet()
        failed_roots: List[str] = []
        partial_roots: List[str] = []
        accept_all = not pattern or pattern == WILDCARD_PATTERN
        lowered = pattern.lower()

        def _classify(root_path: str, candidate: str) -> None:
            file_uri = FileUri.resolve(root_path, candidate)
            if file_uri in matches:
                return
            if accept_all or lowered in candidate.lower():
                matches.exact[file_uri] = None
                # Exact matches come first, so the result is settled once
                # `limit` of them are known.
                if limit is not None and len(matches.exact) >= limit:
                    source.cancel()
            elif opts.fuzzy_match and fuzzy_test(pattern, candidate):
                matches.fuzzy.add(file_uri)

        async def _search_root(root_uri: str, root_options: RootOptions) -> None:
            try:
                root_path = FileUri.fs_path(root_uri)
                await self.backend.search(
                    root_uri,
                    root_options,
                    lambda candidate: _classify(root_path, candidate),
                    source.token,
                )
            except PartialRootSearchError as e:
                partial_roots.append(root_uri)
                self.logger.warning(
                    "root_search_partial",
                    root=root_uri,
                    error=str(e),
                    delivered=e.delivered,
                )
            except Exception as e:
                failed_roots.append(root_uri)
                self.logger.warning(
                    "root_search_failed",
                    root=root_uri,
                    error=str(e),
                    exc_info=not isinstance(e, RootSearchError),
                )

        try:
            await asyncio.gather(*(_search_root(uri, root_opts) for uri, root_opts in roots.items()))
        finally:
            source.dispose()

        if client_token is not None and client_token.is_cancellation_requested:
            return FileSearchReport(
                roots_searched=len(roots),
                failed_roots=failed_roots,
                partial_roots=partial_roots,
                cancelled=True,
            )

        ranked_fuzzy = sort_fuzzy_matches(matches.fuzzy, pattern)
        files = [*matches.exact, *ranked_fuzzy]
        if limit is not None:
            files = files[:limit]

        self.logger.debug(
            "search_completed",
            pattern=pattern,
            roots=len(roots),
            exact=len(matches.exact),
            fuzzy=len(matches.fuzzy),
            failed=len(failed_roots),
            partial=len(partial_roots),
        )
        return FileSearchReport(
            files=files,
            roots_searched=len(roots),
            failed_roots=failed_roots,
            partial_roots=partial_roots,
            exact_count=len(matches.exact),
            fuzzy_count=len(matches.fuzzy),
        )
