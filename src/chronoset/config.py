"""
Settings read from the environment (and a `.env` file, if present).

    from chronoset.config import Settings
    settings = Settings.from_env()

Every variable is prefixed with ``CHRONOSET_``; unset ones keep the defaults
below.
"""

from __future__ import annotations

import os
from typing import Literal, Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ENV_PREFIX = "CHRONOSET_"


class Settings(BaseModel):
    backend: Literal["sql", "redis"] = "sql"
    database_url: str = "sqlite:///chronoset.db"
    redis_url: str = "redis://localhost:6379/0"
    default_limit: int = Field(default=100, gt=0)
    stream_maxlen: int | None = Field(default=None, gt=0)
    socket_timeout: float | None = Field(default=None, gt=0)
    pool_timeout: float = Field(default=30.0, gt=0)
    log_level: str = "INFO"
    log_json: bool | None = None  # None ➜ JSON unless stdout is a tty

    model_config = {"frozen": True}

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, *, dotenv: bool = True
    ) -> "Settings":
        """Build settings from `environ` (default ``os.environ``).

        Raises pydantic's ``ValidationError`` on malformed values.
        """
        if environ is None:
            if dotenv:
                load_dotenv()
            environ = os.environ
        values = {}
        for name in cls.model_fields:
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is not None and raw != "":
                values[name] = raw
        return cls.model_validate(values)
