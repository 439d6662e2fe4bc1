"""
Account Aggregator - Unified view across all providers.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Optional, Union

import httpx

from cloudmon.config.providers import FREE_QUOTA_LIMIT
from cloudmon.config.settings import AppSettings
from cloudmon.connect import ZeaburConnector
from cloudmon.connect.base import (
    AccountDescriptor,
    AccountSnapshot,
    BaseConnector,
    ProviderKind,
    UsageSummary,
    normalize_token,
)
from cloudmon.connect.registry import canonical_provider, lookup
from cloudmon.errors import (
    CloudMonError,
    InvalidDescriptorError,
    MissingTokenError,
    ProviderError,
    UnsupportedProviderError,
)
from cloudmon.see.models import BatchResult

logger = logging.getLogger(__name__)

Descriptor = Union[AccountDescriptor, Mapping]


class AccountAggregator:
    """Routes accounts to their provider connector and fans batches out concurrently."""

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or AppSettings()
        self._transport = transport

    def _coerce(self, descriptor: Descriptor) -> AccountDescriptor:
        if isinstance(descriptor, AccountDescriptor):
            return descriptor
        if isinstance(descriptor, Mapping):
            return AccountDescriptor.from_dict(descriptor)
        raise InvalidDescriptorError("Account descriptor must be an object")

    def provider_of(self, descriptor: Descriptor) -> str:
        if isinstance(descriptor, Mapping):
            provider = descriptor.get("provider")
        else:
            provider = getattr(descriptor, "provider", None)
        return canonical_provider(provider, self.settings.default_provider)

    def connector_for(self, provider: str) -> BaseConnector:
        connector_cls = lookup(provider)
        if connector_cls is None:
            raise UnsupportedProviderError(provider)
        return connector_cls(settings=self.settings, transport=self._transport)

    async def resolve(self, descriptor: Descriptor) -> AccountSnapshot:
        """Fetch one account's snapshot.

        Zeabur accounts additionally get month-to-date usage; when that
        call fails the snapshot carries zero usage instead of failing.
        """
        account = self._coerce(descriptor)
        provider = self.provider_of(account)
        token = normalize_token(account.token)
        if not token:
            raise MissingTokenError()

        connector = self.connector_for(provider)
        snapshot = await connector.fetch(token)

        if connector.provider is ProviderKind.ZEABUR:
            usage = UsageSummary.zero(FREE_QUOTA_LIMIT)
            if snapshot.user.id:
                try:
                    usage = await connector.fetch_usage(token, snapshot.user.id)
                except ProviderError as exc:
                    logger.warning("[%s] Zeabur usage unavailable: %s", account.name, exc)
            snapshot.apply_usage(usage)

        return snapshot

    async def validate(self, descriptor: Descriptor) -> AccountSnapshot:
        """Resolve an account to check that its token works."""
        snapshot = await self.resolve(descriptor)
        logger.info("Validated account %s", self._coerce(descriptor).name)
        return snapshot

    async def _run_one(self, descriptor: Descriptor) -> BatchResult:
        name = ""
        provider = ""
        try:
            account = self._coerce(descriptor)
            name = account.name
            provider = self.provider_of(account)
            snapshot = await self.resolve(account)
        except CloudMonError as exc:
            logger.error("[%s] (%s) %s", name, provider, exc)
            return BatchResult(name=name, provider=provider, success=False, error=str(exc))
        except Exception as exc:
            logger.exception("[%s] (%s) unexpected failure", name, provider)
            return BatchResult(
                name=name,
                provider=provider,
                success=False,
                error=str(exc) or type(exc).__name__,
            )

        logger.info("[%s] (%s) %d projects", name, provider, len(snapshot.projects))
        return BatchResult(name=name, provider=provider, success=True, snapshot=snapshot)

    async def run_batch(self, descriptors: list[Descriptor]) -> list[BatchResult]:
        """Resolve every account concurrently. One result per input, same order."""
        logger.info("Fetching %d accounts", len(descriptors))
        results = await asyncio.gather(*(self._run_one(d) for d in descriptors))
        failed = sum(1 for r in results if not r.success)
        logger.info("Fetched %d accounts (%d failed)", len(results), failed)
        return list(results)

    def zeabur(self) -> ZeaburConnector:
        """Connector for the Zeabur-only service and project actions."""
        return ZeaburConnector(settings=self.settings, transport=self._transport)
