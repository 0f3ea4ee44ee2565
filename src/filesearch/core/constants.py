"""
Centralized constants for filesearch.

Flag spellings of the listing tool live here so the argument contract is
defined in one place.
"""

# ============================================================================
# Listing tool
# ============================================================================

DEFAULT_TOOL_NAME = "rg"
"""Executable looked up on PATH when no explicit tool path is configured."""

LIST_FILES_FLAGS = ("--files", "--case-sensitive")
"""Always passed first: list files only, match globs case-sensitively."""

GLOB_FLAG = "--glob"
"""Followed by one glob; a leading '!' negates it."""

NEGATED_GLOB_PREFIX = "!"

NO_IGNORE_FLAG = "-uu"
"""Disables ignore-file handling and includes hidden entries."""

TOOL_ERROR_EXIT_CODE = 2
"""ripgrep exits with 1 when nothing was listed and 2 on errors."""


# ============================================================================
# Search
# ============================================================================

WILDCARD_PATTERN = "*"
"""Pattern accepting every candidate as an exact match (as does '')."""

BACKEND_AUTO = "auto"
BACKEND_RIPGREP = "ripgrep"
BACKEND_PYTHON = "python"
BACKENDS = (BACKEND_AUTO, BACKEND_RIPGREP, BACKEND_PYTHON)


# ============================================================================
# Walk backend
# ============================================================================

DEFAULT_MAX_DEPTH = 64
"""Directory depth limit of the pure-Python walk."""

GITIGNORE_FILE_NAME = ".gitignore"
