"""
Configuration module for cloudmon.
"""

from cloudmon.config.log import setup_logging
from cloudmon.config.providers import FREE_QUOTA_LIMIT, PROVIDER_ALIASES
from cloudmon.config.settings import AppSettings, parse_accounts_env

__all__ = [
    "AppSettings",
    "FREE_QUOTA_LIMIT",
    "PROVIDER_ALIASES",
    "parse_accounts_env",
    "setup_logging",
]
