import asyncio
import os
import threading
from pathlib import Path
from typing import Callable, Iterator, List, Optional

import structlog

from filesearch.core.cancellation import CancellationToken
from filesearch.core.constants import BACKEND_PYTHON, DEFAULT_MAX_DEPTH
from filesearch.core.errors import RootSearchError
from filesearch.core.models import RootOptions
from filesearch.core.search.base import Accept
from filesearch.core.utils.gitignore import GitignoreMatcher, GlobFilter, load_gitignore
from filesearch.core.utils.logging import get_logger
from filesearch.core.utils.uri import FileUri

_DONE = object()


def _is_git_ignored(matchers: List[GitignoreMatcher], rel_posix: str, is_dir: bool) -> bool:
    # Deeper .gitignore files override shallower ones.
    for matcher in reversed(matchers):
        verdict = matcher.match(rel_posix, is_dir)
        if verdict is not None:
            return verdict
    return False


class WalkBackend:
    """
    Pure-Python listing backend used when ripgrep is unavailable.

    Mirrors `rg --files`: hidden entries and .gitignore'd paths are skipped
    unless use_git_ignore is off, include globs whitelist files and exclude
    globs prune files and directories.
    """

    name = BACKEND_PYTHON

    def __init__(
        self,
        follow_symlinks: bool = False,
        max_depth: int = DEFAULT_MAX_DEPTH,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.follow_symlinks = follow_symlinks
        self.max_depth = max_depth
        self.logger = logger or get_logger("filesearch.search.walker")

    def iter_candidates(
        self,
        root: Path,
        options: RootOptions,
        should_stop: Callable[[], bool] = lambda: False,
    ) -> Iterator[str]:
        """Yield POSIX paths relative to root. Raises OSError when root itself is unreadable."""
        globs = GlobFilter(options.include_patterns, options.exclude_patterns)
        use_git_ignore = bool(options.use_git_ignore)
        yield from self._scan_recursive(root, root, "", 0, globs, use_git_ignore, [], set(), should_stop)

    def _scan_recursive(
        self,
        root: Path,
        current_dir: Path,
        rel_dir: str,
        depth: int,
        globs: GlobFilter,
        use_git_ignore: bool,
        matchers: List[GitignoreMatcher],
        visited: set,
        should_stop: Callable[[], bool],
    ) -> Iterator[str]:
        if depth > self.max_depth:
            return

        # Cycle detection for symlinked directories
        if self.follow_symlinks:
            try:
                real_path = os.path.realpath(current_dir)
            except OSError:
                return
            if real_path in visited:
                return
            visited.add(real_path)

        if use_git_ignore:
            lines = load_gitignore(current_dir)
            if lines:
                matchers = [*matchers, GitignoreMatcher(lines, base=rel_dir)]

        try:
            with os.scandir(current_dir) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError:
            if current_dir == root:
                raise
            return

        for entry in entries:
            if should_stop():
                return
            rel = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            try:
                is_dir = entry.is_dir(follow_symlinks=self.follow_symlinks)
                is_file = not is_dir and entry.is_file(follow_symlinks=self.follow_symlinks)
            except OSError:
                continue
            if not is_dir and not is_file:
                continue

            if use_git_ignore:
                if entry.name.startswith("."):
                    continue
                if _is_git_ignored(matchers, rel, is_dir):
                    continue
            if globs.is_excluded(rel, is_dir):
                continue

            if is_dir:
                yield from self._scan_recursive(
                    root, Path(entry.path), rel, depth + 1, globs, use_git_ignore, matchers, visited, should_stop
                )
            else:
                yield rel

    async def search(
        self,
        root_uri: str,
        options: RootOptions,
        accept: Accept,
        token: CancellationToken,
    ) -> None:
        root = Path(FileUri.fs_path(root_uri))
        if not root.is_dir():
            raise RootSearchError(root_uri, f"root directory does not exist: {root}")

        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        stop = threading.Event()

        def _should_stop() -> bool:
            return stop.is_set() or token.is_cancellation_requested

        def _produce() -> None:
            # Runs in a worker thread; every candidate is handed to the loop so
            # `accept` is only ever called from the loop thread.
            try:
                for rel in self.iter_candidates(root, options, _should_stop):
                    loop.call_soon_threadsafe(queue.put_nowait, rel)
            except OSError as e:
                loop.call_soon_threadsafe(queue.put_nowait, e)
            finally:
                loop.call_soon_threadsafe(queue.put_nowait, _DONE)

        self.logger.debug("root_search_started", root=root_uri)
        worker = loop.run_in_executor(None, _produce)
        try:
            while True:
                item = await queue.get()
                if item is _DONE:
                    break
                if isinstance(item, OSError):
                    raise RootSearchError(root_uri, f"cannot list {root}: {item}") from item
                if not token.is_cancellation_requested:
                    accept(item)
        finally:
            stop.set()
            await worker
