import shutil
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from filesearch.version import __version__
from filesearch.core.constants import BACKEND_AUTO, DEFAULT_MAX_DEPTH, DEFAULT_TOOL_NAME


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FILESEARCH_",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    # --- CORE RELEVANT SETTINGS ---
    VERSION: str = __version__
    # Explicit ripgrep executable. Looked up on PATH when unset.
    RG_PATH: Optional[str] = None
    BACKEND: Literal["auto", "ripgrep", "python"] = BACKEND_AUTO

    # --- WALK BACKEND ---
    FOLLOW_SYMLINKS: bool = False
    MAX_DEPTH: int = DEFAULT_MAX_DEPTH

    # --- LOGGING ---
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    def tool_path(self) -> Optional[str]:
        """Resolve the listing tool executable, or None when it is not installed."""
        if self.RG_PATH:
            return shutil.which(self.RG_PATH) or self.RG_PATH
        return shutil.which(DEFAULT_TOOL_NAME)


settings = Settings()
