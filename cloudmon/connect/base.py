"""
Base classes for cloud provider connectors.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import httpx

from cloudmon.config.settings import AppSettings
from cloudmon.connect.http import build_async_client

_BEARER_PREFIX = re.compile(r"^bearer(?:\s+|$)", re.IGNORECASE)


class ProviderKind(str, Enum):
    """Supported hosting providers."""
    ZEABUR = "zeabur"
    VERCEL = "vercel"
    HUGGINGFACE = "huggingface"
    RENDER = "render"
    RAILWAY = "railway"
    CLAWCLOUD = "clawcloud"


def normalize_token(token) -> str:
    """Strip surrounding whitespace and any case-insensitive `Bearer ` prefix."""
    if not token:
        return ""
    return _BEARER_PREFIX.sub("", str(token).strip()).strip()


@dataclass
class AccountDescriptor:
    """An account to fetch: display name, raw token, provider identifier."""
    name: str
    token: str
    provider: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "AccountDescriptor":
        return cls(
            name=str(data.get("name") or ""),
            token=data.get("token") or "",
            provider=data.get("provider"),
        )


@dataclass
class UserInfo:
    """Account owner as reported by the provider."""
    id: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"id": self.id, "username": self.username, "email": self.email}
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class Domain:
    domain: str
    is_generated: bool = False

    def to_dict(self) -> dict:
        return {"domain": self.domain, "isGenerated": self.is_generated}


@dataclass
class Service:
    """A deployed service inside a project (primary provider only)."""
    id: str
    name: Optional[str] = None
    status: Optional[str] = None
    template: Optional[str] = None
    cpu: Optional[float] = None
    memory: Optional[float] = None
    domains: list[Domain] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "template": self.template,
            "resourceLimit": {"cpu": self.cpu, "memory": self.memory},
            "domains": [d.to_dict() for d in self.domains],
        }


@dataclass
class Project:
    """Canonical project record shared by every provider."""
    id: str
    name: Optional[str]
    region: str
    environments: list[str] = field(default_factory=list)
    services: list[Service] = field(default_factory=list)
    domains: list[Domain] = field(default_factory=list)
    cost: float = 0.0
    has_cost_data: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "region": self.region,
            "environments": list(self.environments),
            "services": [s.to_dict() for s in self.services],
            "domains": [d.to_dict() for d in self.domains],
            "cost": self.cost,
            "hasCostData": self.has_cost_data,
        }


@dataclass
class UsageSummary:
    """Month-to-date usage for the primary provider."""
    project_costs: dict[str, float] = field(default_factory=dict)
    total_usage: float = 0.0
    free_quota_remaining: float = 0.0
    free_quota_limit: float = 0.0

    @classmethod
    def zero(cls, free_quota_limit: float) -> "UsageSummary":
        return cls(
            project_costs={},
            total_usage=0.0,
            free_quota_remaining=free_quota_limit,
            free_quota_limit=free_quota_limit,
        )

    @property
    def credit_cents(self) -> int:
        return round(self.free_quota_remaining * 100)

    def to_dict(self) -> dict:
        return {
            "projectCosts": dict(self.project_costs),
            "totalUsage": self.total_usage,
            "freeQuotaRemaining": self.free_quota_remaining,
            "freeQuotaLimit": self.free_quota_limit,
        }


@dataclass
class AIHubKey:
    key_id: Optional[str]
    alias: Optional[str] = None
    cost: float = 0.0

    def to_dict(self) -> dict:
        return {"keyID": self.key_id, "alias": self.alias, "cost": self.cost}


@dataclass
class AIHubTenant:
    """Secondary account-level balance exposed by the primary provider."""
    balance: float = 0.0
    keys: list[AIHubKey] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"balance": self.balance, "keys": [k.to_dict() for k in self.keys]}


@dataclass
class AccountSnapshot:
    """Unified result of one account fetch."""
    user: UserInfo
    projects: list[Project] = field(default_factory=list)
    usage: Optional[UsageSummary] = None
    aihub: Optional[AIHubTenant] = None

    def apply_usage(self, usage: UsageSummary) -> None:
        """Attach usage and copy per-project display costs onto the projects."""
        self.usage = usage
        for project in self.projects:
            cost = usage.project_costs.get(project.id, 0.0)
            project.cost = cost
            project.has_cost_data = bool(cost)

    def to_dict(self) -> dict:
        data = {
            "user": self.user.to_dict(),
            "projects": [p.to_dict() for p in self.projects],
        }
        if self.usage is not None:
            data["usage"] = self.usage.to_dict()
        if self.aihub is not None:
            data["aihub"] = self.aihub.to_dict()
        return data


class IdAllocator:
    """Hands out project ids, synthesizing `<kind>-<n>` when none is supplied.

    A synthesized id never equals one already handed out or reserved, so
    passing every supplier id up front keeps ids unique within a fetch.
    """

    def __init__(self, reserved: Iterable = ()):
        self._counter = 0
        self._taken = {str(value) for value in reserved if value not in (None, "")}

    def assign(self, candidate, kind: str) -> str:
        if candidate not in (None, ""):
            value = str(candidate)
            self._taken.add(value)
            return value
        while True:
            value = f"{kind}-{self._counter}"
            self._counter += 1
            if value not in self._taken:
                self._taken.add(value)
                return value


class BaseConnector(ABC):
    """Base class for all provider connectors.

    A connector is stateless between calls: every `fetch` opens its own
    HTTP client and returns a fresh snapshot.
    """

    provider: ProviderKind

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or AppSettings()
        self._transport = transport

    def _client(self, token: str, headers: Optional[dict] = None) -> httpx.AsyncClient:
        return build_async_client(
            self.settings,
            token=token,
            extra_headers=headers,
            transport=self._transport,
        )

    @abstractmethod
    async def fetch(self, token: str) -> AccountSnapshot:
        """Fetch the account owner and projects for an already-normalized token."""
        pass
