from __future__ import annotations

import tempfile
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _strip_quotes(s: str) -> str:
    s = (s or "").strip()
    if len(s) >= 2 and ((s[0] == s[-1]) and s[0] in ("'", '"')):
        s = s[1:-1].strip()
    return s


def _env_files() -> tuple[str, str]:
    """
    Local .env first, then the repo-root .env.
    """
    repo_root_env = str(Path(__file__).resolve().parents[2] / ".env")
    return (".env", repo_root_env)


class NotifySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Directory shared by every participant; must be visible to all of them.
    base_dir: str = Field(default_factory=tempfile.gettempdir, alias="VIRTUAL_NOTIFY_DIR")
    poll_interval_seconds: float = Field(default=0.1, alias="VIRTUAL_NOTIFY_POLL_INTERVAL")
    # 0 = unbounded.
    queue_maxsize: int = Field(default=32, alias="VIRTUAL_NOTIFY_QUEUE_MAXSIZE")
    # -1 = block until the lock is free.
    lock_timeout_seconds: float = Field(default=-1, alias="VIRTUAL_NOTIFY_LOCK_TIMEOUT")
    publish_retry_interval_seconds: float = Field(default=0.005, alias="VIRTUAL_NOTIFY_PUBLISH_RETRY_INTERVAL")
    log_level: str = Field(default="INFO", alias="VIRTUAL_NOTIFY_LOG_LEVEL")

    @field_validator("base_dir", "log_level", mode="before")
    @classmethod
    def _norm_str(cls, v: object) -> str:
        return _strip_quotes(str(v))

    @field_validator("base_dir")
    @classmethod
    def _default_base_dir(cls, v: str) -> str:
        return v or tempfile.gettempdir()

    @field_validator("poll_interval_seconds")
    @classmethod
    def _positive_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("VIRTUAL_NOTIFY_POLL_INTERVAL must be > 0")
        return v

    @field_validator("publish_retry_interval_seconds")
    @classmethod
    def _non_negative_retry(cls, v: float) -> float:
        return max(0.0, v)
