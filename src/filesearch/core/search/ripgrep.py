import asyncio
import os
from typing import Optional

import structlog

from filesearch.core.cancellation import CancellationToken
from filesearch.core.constants import BACKEND_RIPGREP, TOOL_ERROR_EXIT_CODE
from filesearch.core.errors import PartialRootSearchError, RootSearchError, ToolNotFoundError
from filesearch.core.models import RootOptions
from filesearch.core.search.args import build_search_args
from filesearch.core.search.base import Accept
from filesearch.core.utils.logging import get_logger
from filesearch.core.utils.system import terminate_process
from filesearch.core.utils.uri import FileUri

# Line length cap of the stdout reader; file paths stay far below it.
_STREAM_LIMIT = 1024 * 1024


def _decode_line(raw: bytes) -> str:
    return os.fsdecode(raw.rstrip(b"\r\n"))


class RipgrepBackend:
    """Lists files by running `rg --files` in the root directory."""

    name = BACKEND_RIPGREP

    def __init__(self, tool_path: str, logger: Optional[structlog.stdlib.BoundLogger] = None):
        self.tool_path = tool_path
        self.logger = logger or get_logger("filesearch.search.ripgrep")

    async def _spawn(self, root_uri: str, cwd: str, options: RootOptions) -> asyncio.subprocess.Process:
        args = build_search_args(options)
        try:
            return await asyncio.create_subprocess_exec(
                self.tool_path,
                *args,
                cwd=cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=_STREAM_LIMIT,
            )
        except FileNotFoundError as e:
            if not os.path.isdir(cwd):
                raise RootSearchError(root_uri, f"root directory does not exist: {cwd}") from e
            raise ToolNotFoundError(root_uri, self.tool_path) from e
        except OSError as e:
            raise RootSearchError(root_uri, f"failed to launch {self.tool_path}: {e}") from e

    async def search(
        self,
        root_uri: str,
        options: RootOptions,
        accept: Accept,
        token: CancellationToken,
    ) -> None:
        cwd = FileUri.fs_path(root_uri)
        proc = await self._spawn(root_uri, cwd, options)
        self.logger.debug("root_search_started", root=root_uri, pid=proc.pid)

        detach = token.on_cancellation_requested(lambda: terminate_process(proc))
        stderr_reader = asyncio.ensure_future(proc.stderr.read())
        stderr = b""
        delivered = 0
        try:
            async for raw in proc.stdout:
                if token.is_cancellation_requested:
                    terminate_process(proc)
                    break
                line = _decode_line(raw)
                if line:
                    accept(line)
                    delivered += 1
            stderr = await stderr_reader
            returncode = await proc.wait()
        finally:
            detach()
            if proc.returncode is None:
                terminate_process(proc)
                await proc.wait()
            if not stderr_reader.done():
                stderr_reader.cancel()

        if returncode >= TOOL_ERROR_EXIT_CODE and not token.is_cancellation_requested:
            detail = os.fsdecode(stderr).strip() or f"exit status {returncode}"
            message = f"{self.tool_path} failed: {detail}"
            if delivered:
                raise PartialRootSearchError(root_uri, message, delivered)
            raise RootSearchError(root_uri, message)
