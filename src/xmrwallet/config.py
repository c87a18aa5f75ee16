"""
Configuration management using pydantic-settings.
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from xmrwallet.wallet.models import Priority


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="XMRWALLET_", env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    rpc_url: str = "http://127.0.0.1:18083/json_rpc"
    rpc_user: str = ""
    rpc_password: str = ""
    rpc_timeout: float = Field(default=60.0, gt=0)

    priority: Priority = Priority.DEFAULT

    log_level: str = "INFO"
    # Channel name attached to records forwarded from stdlib logging
    log_channel: str = "wallet_engine"
    forward_engine_logs: bool = True

    @field_validator("priority", mode="before")
    @classmethod
    def parse_priority(cls, value: Any) -> Any:
        """Accept tier names ("high") as well as numbers ("3")."""
        if isinstance(value, str):
            value = value.strip()
            if value.isdigit():
                return Priority(int(value))
            return Priority[value.upper()]
        return value


def get_settings() -> Settings:
    return Settings()
