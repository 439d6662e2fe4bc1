"""
Connector registry.

Connector classes register themselves against a `ProviderKind`; the
dispatcher looks them up here instead of switching on provider names.
"""

from typing import Optional

from cloudmon.config.providers import PROVIDER_ALIASES
from cloudmon.connect.base import BaseConnector, ProviderKind

CONNECTORS: dict[ProviderKind, type[BaseConnector]] = {}


def register(kind: ProviderKind):
    """Class decorator adding a connector to the registry."""

    def decorator(cls: type[BaseConnector]) -> type[BaseConnector]:
        cls.provider = kind
        CONNECTORS[kind] = cls
        return cls

    return decorator


def canonical_provider(provider: Optional[str], default: str = ProviderKind.ZEABUR.value) -> str:
    """Trim, lower-case and de-alias a provider identifier."""
    name = (provider or "").strip().lower() or default.strip().lower()
    return PROVIDER_ALIASES.get(name, name)


def lookup(provider: str) -> Optional[type[BaseConnector]]:
    try:
        return CONNECTORS.get(ProviderKind(provider))
    except ValueError:
        return None
