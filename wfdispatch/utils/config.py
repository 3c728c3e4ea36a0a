# wfdispatch/utils/config.py
from __future__ import annotations

import functools
import subprocess
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from wfdispatch.core.git import get_repository_root


# ---------- Enums ----------

class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


_FALSY_CI_VALUES = {"", "0", "false", "no", "off"}


def _default_repo_root() -> Path:
    # Outside a git checkout (or without git) the current directory is the best guess
    try:
        return get_repository_root()
    except (subprocess.CalledProcessError, OSError):
        return Path.cwd()


# ---------- Settings ----------

class Settings(BaseSettings):
    """
    Central configuration for the workflow dispatcher.

    Values load in this order of precedence:
      1) Environment variables
      2) .env file in the current directory
      3) Defaults below
    """

    # ---- GitHub ----
    GITHUB_TOKEN: Optional[str] = Field(default=None, description="Token used for the dispatch request")
    GITHUB_OWNER: str = Field(default="expo")
    GITHUB_REPO: str = Field(default="expo")
    GITHUB_API_URL: str = Field(default="https://api.github.com")
    HTTP_TIMEOUT: float = Field(default=30.0, gt=0, description="Seconds per HTTP request")

    # ---- Local checkout ----
    REPO_ROOT: Path = Field(default_factory=lambda: _default_repo_root(), description="Root of the local working copy")
    MAX_WORKERS: int = Field(default=8, ge=1, description="Threads used for workflow file existence checks")

    # ---- Environment detection ----
    CI: Optional[str] = Field(default=None, description="Set by most CI providers")

    # ---- Logging ----
    LOG_LEVEL: LogLevel = Field(default=LogLevel.INFO)
    LOG_TO_FILE: bool = Field(default=False)
    LOG_FILE: Path = Field(default=Path("./wfdispatch.log"))
    COLORIZED_OUTPUT: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("REPO_ROOT", "LOG_FILE", mode="before")
    @classmethod
    def _coerce_to_path(cls, v):
        if isinstance(v, Path):
            return v
        return Path(str(v)) if v is not None else v

    @field_validator("REPO_ROOT", "LOG_FILE", mode="after")
    @classmethod
    def _absolutize(cls, v: Path):
        return v if v.is_absolute() else Path.cwd() / v

    @field_validator("GITHUB_API_URL")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def ci(self) -> bool:
        """True when running inside an automated (non-interactive) environment."""
        if self.CI is None:
            return False
        return self.CI.strip().lower() not in _FALSY_CI_VALUES

    @property
    def repo_slug(self) -> str:
        return f"{self.GITHUB_OWNER}/{self.GITHUB_REPO}"

    def masked(self) -> dict:
        """Effective settings as plain data, with the token hidden."""
        data = self.model_dump(mode="json")
        if data.get("GITHUB_TOKEN"):
            data["GITHUB_TOKEN"] = "***"
        return data


# --------- Public accessor (memoized) ---------

@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache settings once per process.
    Call `get_settings.cache_clear()` if you need to reload after changing env.
    """
    return Settings()
