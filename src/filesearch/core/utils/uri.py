import os
import urllib.parse
import urllib.request
from pathlib import Path
from typing import Union


class FileUri:
    """Root identifiers may be file:// URIs or plain paths; results are always URIs."""

    @staticmethod
    def is_uri(value: str) -> bool:
        return str(value or "").startswith("file:")

    @staticmethod
    def fs_path(root: Union[str, Path]) -> str:
        """
        Filesystem location of a root identifier.
        - file:// URIs are decoded (percent-escapes, drive letters).
        - '~' is expanded for plain paths.
        - '.'/'..' segments and trailing separators are collapsed.
        """
        raw = str(root or "").strip()
        if FileUri.is_uri(raw):
            parsed = urllib.parse.urlparse(raw)
            path = urllib.request.url2pathname(parsed.path)
            if parsed.netloc and parsed.netloc != "localhost":
                path = f"//{parsed.netloc}{path}"
        else:
            path = os.path.expanduser(raw) if raw else os.getcwd()
        return os.path.abspath(path)

    @staticmethod
    def resolve(root: Union[str, Path], relative: str) -> str:
        """Resolve a path emitted under root into its file identifier (idempotent)."""
        base = FileUri.fs_path(root)
        joined = os.path.normpath(os.path.join(base, relative))
        return Path(joined).as_uri()

    @staticmethod
    def to_fs_path(file_uri: str) -> str:
        return FileUri.fs_path(file_uri)
