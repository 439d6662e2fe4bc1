"""
Vercel Connector - Projects across the personal scope and every team.
"""

import logging
from typing import Optional

import httpx

from cloudmon.config.providers import (
    VERCEL_PROJECT_LIMIT,
    VERCEL_PROJECTS_URL,
    VERCEL_USER_URL,
)
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
from cloudmon.connect.outcomes import gather_outcomes, require_any
from cloudmon.connect.registry import register
from cloudmon.errors import ProviderError, UpstreamError

logger = logging.getLogger(__name__)

PROJECT_ID_FIELDS = ("id", "projectId", "name")


def team_contexts(user_json: dict, user: dict) -> list[Optional[str]]:
    """Personal scope first, then the default team, then every other team."""
    contexts: list[Optional[str]] = [None]
    candidates = [user.get("defaultTeamId")]
    candidates.extend(
        team.get("id") for team in to_sequence(user_json.get("teams"))
        if isinstance(team, dict)
    )
    for team_id in candidates:
        if team_id and team_id not in contexts:
            contexts.append(team_id)
    return contexts


def _target_domains(targets) -> list[Domain]:
    """Domains from a project's deployment targets.

    `targets` is a list of aliases/targets, or a mapping of target name to
    deployment carrying an `alias` list.
    """
    entries = list(targets) if isinstance(targets, list) else []
    if isinstance(targets, dict):
        for deployment in targets.values():
            entries.extend(to_sequence(as_mapping(deployment).get("alias")))

    domains = []
    for entry in entries:
        name = pick(entry, "alias", "domain") if isinstance(entry, dict) else entry
        if isinstance(name, str) and name:
            domains.append(Domain(domain=name, is_generated=True))
    return domains


@register(ProviderKind.VERCEL)
class VercelConnector(BaseConnector):
    """Vercel REST connector. Unions personal and team projects by id."""

    async def _list_projects(self, client: httpx.AsyncClient, team_id: Optional[str]) -> list:
        params = {"limit": VERCEL_PROJECT_LIMIT}
        if team_id:
            params["teamId"] = team_id
        body = await request_json(
            client,
            "GET",
            VERCEL_PROJECTS_URL,
            provider=self.provider.value,
            what=f"Vercel projects ({team_id or 'personal'})",
            params=params,
        )
        return extract(body, "projects")

    def _parse_project(self, raw: dict, team_id: Optional[str], ids: IdAllocator) -> Project:
        return Project(
            id=ids.assign(pick(raw, *PROJECT_ID_FIELDS), "vercel"),
            name=raw.get("name"),
            region=f"Team {team_id}" if team_id else (raw.get("teamId") or "Personal"),
            domains=_target_domains(raw.get("targets")),
        )

    async def fetch(self, token: str) -> AccountSnapshot:
        async with self._client(token) as client:
            user_json = as_mapping(await request_json(
                client,
                "GET",
                VERCEL_USER_URL,
                provider=self.provider.value,
                what="Vercel user info",
            ))
            user = as_mapping(pick(user_json, "user", "account"))
            contexts = team_contexts(user_json, user)
            outcomes = await gather_outcomes(
                *(self._list_projects(client, team_id) for team_id in contexts)
            )

        if all(isinstance(o, ProviderError) for o in outcomes):
            require_any(outcomes, provider=self.provider.value, what="Vercel projects")

        listed = []
        for team_id, outcome in zip(contexts, outcomes):
            if isinstance(outcome, ProviderError):
                logger.warning("Skipping Vercel context %s: %s", team_id or "personal", outcome)
                continue
            listed.extend((team_id, raw) for raw in outcome if isinstance(raw, dict))

        ids = IdAllocator(pick(raw, *PROJECT_ID_FIELDS) for _, raw in listed)
        projects: dict[str, Project] = {}
        for team_id, raw in listed:
            project = self._parse_project(raw, team_id, ids)
            projects[project.id] = project

        if not projects:
            raise UpstreamError("Vercel projects: no projects found", self.provider.value)

        return AccountSnapshot(
            user=UserInfo(
                id=pick(user, "id", "uid"),
                username=pick(user, "username", "name", "email"),
                email=user.get("email"),
            ),
            projects=list(projects.values()),
        )
