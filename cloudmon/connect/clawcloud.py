"""
ClawCloud Connector - Project listing with the owner embedded in the envelope.
"""

from cloudmon.config.providers import CLAWCLOUD_PROJECTS_URL
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
from cloudmon.connect.normalize import as_mapping, extract, pick, to_sequence
from cloudmon.connect.registry import register


def owner_from_envelope(body) -> UserInfo:
    """The owner may sit under `owner`, `user` or `account`, or be a bare name."""
    owner = pick(body, "owner", "user", "account", default={})
    if isinstance(owner, str):
        owner = {"username": owner}
    owner = as_mapping(owner)
    return UserInfo(
        id=pick(owner, "id", "_id", default="clawcloud"),
        username=pick(owner, "username", "name", default="ClawCloud User"),
        email=owner.get("email") or None,
    )


def _domains(value) -> list[Domain]:
    domains = []
    for entry in to_sequence(value):
        name = pick(entry, "domain", "name") if isinstance(entry, dict) else entry
        if isinstance(name, str) and name:
            domains.append(Domain(domain=name, is_generated=False))
    return domains


@register(ProviderKind.CLAWCLOUD)
class ClawCloudConnector(BaseConnector):
    """ClawCloud connector."""

    async def fetch(self, token: str) -> AccountSnapshot:
        async with self._client(token) as client:
            body = await request_json(
                client,
                "GET",
                CLAWCLOUD_PROJECTS_URL,
                provider=self.provider.value,
                what="ClawCloud projects",
            )

        listed = [p for p in extract(body, "projects") if isinstance(p, dict)]
        ids = IdAllocator(pick(p, "id", "name") for p in listed)
        projects = [
            Project(
                id=ids.assign(pick(p, "id", "name"), "clawcloud"),
                name=p.get("name"),
                region=p.get("region") or "Global",
                domains=_domains(p.get("domains")),
            )
            for p in listed
        ]

        return AccountSnapshot(user=owner_from_envelope(body), projects=projects)
