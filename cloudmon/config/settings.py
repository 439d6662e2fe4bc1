"""
Application settings.

Values come from the environment (prefix `CLOUDMON_`) or a local `.env`.
"""

import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class AppSettings(BaseSettings):
    """Central configuration shared by connectors, the CLI and the API."""

    model_config = SettingsConfigDict(
        env_prefix="CLOUDMON_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout per upstream request (seconds).",
    )
    user_agent: str = Field(
        default="cloudmon/0.1",
        min_length=1,
        description="User-Agent sent to providers.",
    )
    default_provider: str = Field(
        default="zeabur",
        min_length=1,
        description="Provider assumed when an account does not name one.",
    )
    accounts: Optional[str] = Field(
        default=None,
        description="Preconfigured accounts: `name[|provider]:token,...`.",
    )
    admin_password: Optional[str] = Field(
        default=None,
        description="Dashboard password. Routes are open when unset.",
    )
    session_days: int = Field(default=10, ge=1)
    session_sweep_seconds: float = Field(default=3600.0, gt=0)
    log_level: str = Field(default="INFO")

    def env_accounts(self) -> list[dict]:
        return parse_accounts_env(self.accounts, self.default_provider)


def parse_accounts_env(value: Optional[str], default_provider: str = "zeabur") -> list[dict]:
    """Parse `name[|provider]:token` pairs separated by commas.

    Malformed entries are skipped. Tokens may themselves contain `:`.
    """
    if not value:
        return []

    accounts = []
    for item in value.split(","):
        raw_name, sep, token = item.partition(":")
        if not sep:
            logger.warning("Skipping account entry without token: %r", raw_name.strip())
            continue
        name, _, provider = raw_name.partition("|")
        name = name.strip()
        token = token.strip()
        if not name or not token:
            continue
        accounts.append({
            "name": name,
            "token": token,
            "provider": provider.strip() or default_provider,
        })
    return accounts
