from typing import Optional

import structlog

from filesearch.core.constants import BACKEND_PYTHON, BACKEND_RIPGREP, DEFAULT_TOOL_NAME
from filesearch.core.search.base import ListingBackend
from filesearch.core.search.ripgrep import RipgrepBackend
from filesearch.core.search.walker import WalkBackend
from filesearch.core.settings import Settings, settings as default_settings
from filesearch.core.utils.logging import get_logger


def create_backend(cfg: Optional[Settings] = None, logger: Optional[structlog.stdlib.BoundLogger] = None) -> ListingBackend:
    """
    Pick the listing backend from FILESEARCH_BACKEND.

    "ripgrep" always uses the tool (a missing binary then fails every root),
    "python" always walks in-process, "auto" prefers ripgrep when it is found.
    """
    cfg = cfg or default_settings
    logger = logger or get_logger("filesearch.search")

    def _walk_backend() -> WalkBackend:
        return WalkBackend(follow_symlinks=cfg.FOLLOW_SYMLINKS, max_depth=cfg.MAX_DEPTH)

    if cfg.BACKEND == BACKEND_PYTHON:
        return _walk_backend()
    tool = cfg.tool_path()
    if cfg.BACKEND == BACKEND_RIPGREP:
        return RipgrepBackend(tool or DEFAULT_TOOL_NAME)
    if tool:
        return RipgrepBackend(tool)
    logger.warning("search_backend_fallback", backend=BACKEND_PYTHON, reason=f"{DEFAULT_TOOL_NAME} not found")
    return _walk_backend()
