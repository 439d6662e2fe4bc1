"""
Render Connector - Web services and workers as projects.
"""

import asyncio

from cloudmon.config.providers import RENDER_OWNERS_URL, RENDER_SERVICES_URL
from cloudmon.connect.base import (
    AccountSnapshot,
    BaseConnector,
    Domain,
    IdAllocator,
    Project,
    ProviderKind,
    UserInfo,
)
from cloudmon.connect.http import request_json
from cloudmon.connect.normalize import as_mapping, pick, to_sequence
from cloudmon.connect.outcomes import optional
from cloudmon.connect.registry import register


def _unwrap_items(items: list, key: str) -> list[dict]:
    """Render wraps list items as `{"<key>": {...}, "cursor": ...}`."""
    unwrapped = []
    for item in items:
        if not isinstance(item, dict):
            continue
        inner = item.get(key)
        unwrapped.append(inner if isinstance(inner, dict) else item)
    return unwrapped


def _custom_domains(value) -> list[Domain]:
    domains = []
    for entry in to_sequence(value):
        name = pick(entry, "name", "domain") if isinstance(entry, dict) else entry
        if isinstance(name, str) and name:
            domains.append(Domain(domain=name, is_generated=False))
    return domains


@register(ProviderKind.RENDER)
class RenderConnector(BaseConnector):
    """Render REST connector.

    Owners and services are fetched independently and each may fail
    without failing the account; an account with no services is valid.
    """

    async def fetch(self, token: str) -> AccountSnapshot:
        provider = self.provider.value
        async with self._client(token) as client:
            owners_raw, services_raw = await asyncio.gather(
                optional(
                    request_json(client, "GET", RENDER_OWNERS_URL, provider=provider, what="Render owners"),
                    [],
                    what="Render owners",
                ),
                optional(
                    request_json(client, "GET", RENDER_SERVICES_URL, provider=provider, what="Render services"),
                    [],
                    what="Render services",
                ),
            )

        owners = _unwrap_items(to_sequence(owners_raw), "owner")
        if not owners and isinstance(owners_raw, dict):
            owners = [owners_raw]
        owner = owners[0] if owners else {}

        services = _unwrap_items(to_sequence(services_raw), "service")
        ids = IdAllocator(s.get("id") for s in services)
        projects = []
        for service in services:
            details = as_mapping(service.get("serviceDetails"))
            projects.append(Project(
                id=ids.assign(service.get("id"), "render"),
                name=service.get("name"),
                region=details.get("region") or "Global",
                domains=_custom_domains(details.get("customDomains")),
            ))

        return AccountSnapshot(
            user=UserInfo(
                id=owner.get("id") or "render",
                username=pick(owner, "name", "email", default="Render User"),
                email=owner.get("email"),
            ),
            projects=projects,
        )
