class FileSearchError(RuntimeError):
    def __init__(self, code: str, message: str, hint: str = ""):
        super().__init__(message)
        self.code = code
        self.message = message
        self.hint = hint


class RootSearchError(FileSearchError):
    """A single root could not be listed. Never escapes the search service."""

    def __init__(self, root: str, message: str, code: str = "ERR_ROOT_SEARCH", hint: str = ""):
        super().__init__(code, message, hint)
        self.root = root

    def __str__(self) -> str:
        return f"{self.root}: {self.message}"


class ToolNotFoundError(RootSearchError):
    def __init__(self, root: str, tool: str):
        super().__init__(
            root,
            f"listing tool not found: {tool}",
            code="ERR_TOOL_NOT_FOUND",
            hint="install ripgrep or set FILESEARCH_RG_PATH / FILESEARCH_BACKEND=python",
        )
        self.tool = tool


class PartialRootSearchError(RootSearchError):
    """The tool failed after listing part of the root; the delivered candidates stand."""

    def __init__(self, root: str, message: str, delivered: int):
        super().__init__(root, message, code="ERR_ROOT_PARTIAL")
        self.delivered = delivered
