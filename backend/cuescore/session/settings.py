"""Session configuration via environment variables."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class CuescoreSettings(BaseSettings):
    model_config = {"env_prefix": "CUESCORE_"}

    data_dir: str = Field(default="backend/data", min_length=1)
    log_dir: str | None = Field(default=None, min_length=1)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "console"
    history_limit: int = Field(default=100, ge=1)  # finished games kept in history
