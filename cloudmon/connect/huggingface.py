"""
Hugging Face Connector - Models, Spaces and Datasets as projects.

Repositories are listed per namespace (the user's own handle plus every
organization) because unscoped listings leave out private repositories.
"""

import logging
from typing import Optional

import httpx

from cloudmon.config.providers import (
    HUGGINGFACE_API_URL,
    HUGGINGFACE_MAX_PAGES,
    HUGGINGFACE_PAGE_SIZE,
    HUGGINGFACE_REPO_KINDS,
    HUGGINGFACE_WHOAMI_URL,
)
from cloudmon.connect.base import (
    AccountSnapshot,
    BaseConnector,
    IdAllocator,
    Project,
    ProviderKind,
    UserInfo,
)
from cloudmon.connect.http import request_json
from cloudmon.connect.normalize import as_mapping, extract, pick, to_sequence
from cloudmon.connect.outcomes import gather_outcomes, require_any, unwrap
from cloudmon.connect.registry import register

logger = logging.getLogger(__name__)

# Field names seen for a repo identifier across the three listing endpoints
REPO_NAME_FIELDS = ("id", "name", "repo_id", "repoId", "slug", "full_name", "fullName")


def repo_base_name(repo: dict) -> Optional[str]:
    value = pick(repo, *REPO_NAME_FIELDS)
    return str(value) if value is not None else None


def resolve_repo_type(repo: dict, endpoint_type: str) -> str:
    return str(pick(repo, "repo_type", "type", default=endpoint_type or "model")).lower()


def _org_identifier(org) -> Optional[str]:
    candidate = pick(org, "name", "orgName", "id") if isinstance(org, dict) else org
    return candidate if isinstance(candidate, str) and candidate else None


def namespaces_for(user: dict) -> list[Optional[str]]:
    """User handle and organization names, or `[None]` for an unscoped listing."""
    namespaces: list[str] = []
    candidates = [user.get("name"), user.get("user")]
    candidates.extend(_org_identifier(org) for org in to_sequence(user.get("orgs")))
    for value in candidates:
        if isinstance(value, str) and value and value not in namespaces:
            namespaces.append(value)
    return namespaces or [None]


@register(ProviderKind.HUGGINGFACE)
class HuggingFaceConnector(BaseConnector):
    """Hugging Face Hub connector."""

    PAGE_SIZE = HUGGINGFACE_PAGE_SIZE
    MAX_PAGES = HUGGINGFACE_MAX_PAGES

    async def _list_namespace(
        self,
        client: httpx.AsyncClient,
        key: str,
        repo_type: str,
        path: str,
        namespace: Optional[str],
    ) -> list:
        """Page through one repo kind for one namespace."""
        collected = []
        offset = 0
        for _ in range(self.MAX_PAGES):
            params = {"limit": self.PAGE_SIZE, "full": "1", "offset": offset}
            if namespace:
                params["author"] = namespace
            body = await request_json(
                client,
                "GET",
                f"{HUGGINGFACE_API_URL}/{path}",
                provider=self.provider.value,
                what=f"Hugging Face {repo_type} list",
                params=params,
            )
            page = extract(body, key)
            collected.extend(page)
            if len(page) < self.PAGE_SIZE:
                break
            offset += self.PAGE_SIZE
        return collected

    async def _list_kind(
        self,
        client: httpx.AsyncClient,
        key: str,
        repo_type: str,
        path: str,
        namespaces: list[Optional[str]],
    ) -> list:
        outcomes = await gather_outcomes(
            *(self._list_namespace(client, key, repo_type, path, ns) for ns in namespaces)
        )
        pages = require_any(
            outcomes,
            provider=self.provider.value,
            what=f"Hugging Face {repo_type} list",
        )
        return [repo for page in pages for repo in page]

    async def fetch(self, token: str) -> AccountSnapshot:
        async with self._client(token, headers={"Accept": "application/json"}) as client:
            user = as_mapping(await request_json(
                client,
                "GET",
                HUGGINGFACE_WHOAMI_URL,
                provider=self.provider.value,
                what="Hugging Face user info",
            ))
            namespaces = namespaces_for(user)
            logger.debug("Hugging Face namespaces: %s", namespaces)
            kind_outcomes = await gather_outcomes(*(
                self._list_kind(client, key, repo_type, path, namespaces)
                for key, repo_type, path in HUGGINGFACE_REPO_KINDS
            ))

        listed = [
            (endpoint_type, repo)
            for (_, endpoint_type, _), outcome in zip(HUGGINGFACE_REPO_KINDS, kind_outcomes)
            for repo in unwrap(outcome)
            if isinstance(repo, dict)
        ]

        ids = IdAllocator(repo_base_name(repo) for _, repo in listed)
        seen: set[str] = set()
        projects = []
        for endpoint_type, repo in listed:
            base = repo_base_name(repo)
            project_id = f"{base or ids.assign(None, f'repo-{endpoint_type}')}-{endpoint_type}"
            if project_id in seen:
                continue
            seen.add(project_id)

            repo_type = resolve_repo_type(repo, endpoint_type)
            visibility = "Private" if repo.get("private") else "Public"
            projects.append(Project(
                id=project_id,
                name=base or "Unknown",
                region=f"{repo_type[:1].upper()}{repo_type[1:]} · {visibility}",
            ))

        return AccountSnapshot(
            user=UserInfo(
                id=pick(user, "id", "name"),
                username=user.get("name"),
                email=user.get("email"),
            ),
            projects=projects,
        )
