"""
Zeabur Connector - Primary provider, GraphQL API with billing data.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

import httpx

from cloudmon.config.providers import FREE_QUOTA_LIMIT, ZEABUR_GRAPHQL_URL
from cloudmon.connect.base import (
    AccountSnapshot,
    AIHubKey,
    AIHubTenant,
    BaseConnector,
    Domain,
    IdAllocator,
    Project,
    ProviderKind,
    Service,
    UsageSummary,
    UserInfo,
)
from cloudmon.connect.http import graphql
from cloudmon.connect.normalize import as_mapping, pick, to_sequence
from cloudmon.connect.outcomes import gather_outcomes, optional, unwrap
from cloudmon.connect.registry import register
from cloudmon.errors import UpstreamError
from cloudmon.usage.engine import USAGE_QUERY, summarize_usage, usage_variables

logger = logging.getLogger(__name__)

USER_QUERY = """
query {
  me {
    _id
    username
    email
  }
}
"""

PROJECTS_QUERY = """
query {
  projects {
    edges {
      node {
        _id
        name
        region {
          name
        }
        environments {
          _id
        }
        services {
          _id
          name
          status
          template
          resourceLimit {
            cpu
            memory
          }
          domains {
            domain
            isGenerated
          }
        }
      }
    }
  }
}
"""

AIHUB_QUERY = """
query GetAIHubTenant {
  aihubTenant {
    balance
    keys {
      keyID
      alias
      cost
    }
  }
}
"""

SUSPEND_MUTATION = """
mutation SuspendService($serviceID: ObjectID!, $environmentID: ObjectID!) {
  suspendService(serviceID: $serviceID, environmentID: $environmentID)
}
"""

RESTART_MUTATION = """
mutation RestartService($serviceID: ObjectID!, $environmentID: ObjectID!) {
  restartService(serviceID: $serviceID, environmentID: $environmentID)
}
"""

RENAME_MUTATION = """
mutation RenameProject($projectID: ObjectID!, $name: String!) {
  renameProject(_id: $projectID, name: $name)
}
"""

RUNTIME_LOGS_QUERY = """
query RuntimeLogs($projectID: ObjectID!, $serviceID: ObjectID!, $environmentID: ObjectID!) {
  runtimeLogs(projectID: $projectID, serviceID: $serviceID, environmentID: $environmentID) {
    message
    timestamp
  }
}
"""


@dataclass
class RuntimeLogs:
    """The newest runtime log lines of a service, oldest first."""
    logs: list[dict] = field(default_factory=list)
    total_count: int = 0

    def to_dict(self) -> dict:
        return {
            "logs": self.logs,
            "count": len(self.logs),
            "totalCount": self.total_count,
        }


def _parse_float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _parse_domains(value, generated_default: bool = False) -> list[Domain]:
    domains = []
    for entry in to_sequence(value):
        if isinstance(entry, str):
            domains.append(Domain(domain=entry, is_generated=generated_default))
        elif isinstance(entry, dict) and entry.get("domain"):
            domains.append(Domain(
                domain=str(entry["domain"]),
                is_generated=bool(entry.get("isGenerated", generated_default)),
            ))
    return domains


def _parse_service(node: dict, ids: IdAllocator) -> Service:
    limits = as_mapping(node.get("resourceLimit"))
    return Service(
        id=ids.assign(node.get("_id"), "service"),
        name=node.get("name"),
        status=node.get("status"),
        template=node.get("template"),
        cpu=limits.get("cpu"),
        memory=limits.get("memory"),
        domains=_parse_domains(node.get("domains")),
    )


def _parse_project(node: dict, ids: IdAllocator) -> Project:
    region = node.get("region")
    if isinstance(region, dict):
        region = region.get("name")

    services = [
        _parse_service(s, ids)
        for s in to_sequence(node.get("services"))
        if isinstance(s, dict)
    ]
    environments = [
        str(env["_id"])
        for env in to_sequence(node.get("environments"))
        if isinstance(env, dict) and env.get("_id")
    ]
    return Project(
        id=ids.assign(node.get("_id"), "project"),
        name=node.get("name"),
        region=region or "Unknown",
        environments=environments,
        services=services,
        domains=[d for s in services for d in s.domains],
    )


def _supplied_ids(nodes: list[dict]) -> list:
    ids = []
    for node in nodes:
        ids.append(node.get("_id"))
        ids.extend(s.get("_id") for s in to_sequence(node.get("services")) if isinstance(s, dict))
    return ids


def _parse_aihub(tenant) -> Optional[AIHubTenant]:
    if not isinstance(tenant, dict):
        return None
    keys = [
        AIHubKey(
            key_id=k.get("keyID"),
            alias=k.get("alias"),
            cost=_parse_float(k.get("cost")),
        )
        for k in to_sequence(tenant.get("keys"))
        if isinstance(k, dict)
    ]
    return AIHubTenant(balance=_parse_float(tenant.get("balance")), keys=keys)


def _timestamp_key(entry: dict) -> float:
    raw = entry.get("timestamp") if isinstance(entry, dict) else None
    if not isinstance(raw, str):
        return 0.0
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return 0.0


@register(ProviderKind.ZEABUR)
class ZeaburConnector(BaseConnector):
    """Zeabur connector: projects, services, AI Hub balance and monthly usage."""

    GRAPHQL_URL = ZEABUR_GRAPHQL_URL

    async def _query(
        self,
        client: httpx.AsyncClient,
        query: str,
        what: str,
        variables: Optional[dict] = None,
        operation_name: Optional[str] = None,
    ) -> dict:
        return await graphql(
            client,
            self.GRAPHQL_URL,
            query,
            provider=self.provider.value,
            what=f"Zeabur {what}",
            variables=variables,
            operation_name=operation_name,
        )

    async def fetch(self, token: str) -> AccountSnapshot:
        async with self._client(token) as client:
            user_data, projects_data, aihub_data = await gather_outcomes(
                self._query(client, USER_QUERY, "user info"),
                self._query(client, PROJECTS_QUERY, "projects"),
                optional(
                    self._query(client, AIHUB_QUERY, "AI Hub balance"),
                    {},
                    what="Zeabur AI Hub balance",
                ),
            )

        me = as_mapping(unwrap(user_data).get("me"))
        edges = to_sequence(as_mapping(unwrap(projects_data).get("projects")).get("edges"))

        nodes = [
            edge["node"] for edge in edges
            if isinstance(edge, dict) and isinstance(edge.get("node"), dict)
        ]
        ids = IdAllocator(_supplied_ids(nodes))
        projects = [_parse_project(node, ids) for node in nodes]

        return AccountSnapshot(
            user=UserInfo(
                id=pick(me, "_id", "id"),
                username=me.get("username"),
                email=me.get("email"),
            ),
            projects=projects,
            aihub=_parse_aihub(aihub_data.get("aihubTenant")),
        )

    async def fetch_usage(
        self,
        token: str,
        user_id: str,
        today: Optional[date] = None,
    ) -> UsageSummary:
        """Month-to-date usage grouped by project and day."""
        async with self._client(token) as client:
            data = await self._query(
                client,
                USAGE_QUERY,
                "usage",
                variables=usage_variables(user_id, today),
                operation_name="GetHeaderMonthlyUsage",
            )
        rows = as_mapping(data.get("usages")).get("data")
        return summarize_usage(rows, FREE_QUOTA_LIMIT)

    async def _mutate(self, token: str, query: str, field_name: str, what: str, variables: dict) -> bool:
        async with self._client(token) as client:
            data = await self._query(client, query, what, variables=variables)
        if not data.get(field_name):
            raise UpstreamError(f"Zeabur {what} was rejected", self.provider.value)
        logger.info("Zeabur %s succeeded", what)
        return True

    async def suspend_service(self, token: str, service_id: str, environment_id: str) -> bool:
        return await self._mutate(
            token,
            SUSPEND_MUTATION,
            "suspendService",
            "suspend service",
            {"serviceID": service_id, "environmentID": environment_id},
        )

    async def restart_service(self, token: str, service_id: str, environment_id: str) -> bool:
        return await self._mutate(
            token,
            RESTART_MUTATION,
            "restartService",
            "restart service",
            {"serviceID": service_id, "environmentID": environment_id},
        )

    async def rename_project(self, token: str, project_id: str, name: str) -> bool:
        return await self._mutate(
            token,
            RENAME_MUTATION,
            "renameProject",
            "rename project",
            {"projectID": project_id, "name": name},
        )

    async def runtime_logs(
        self,
        token: str,
        project_id: str,
        service_id: str,
        environment_id: str,
        limit: int = 200,
    ) -> RuntimeLogs:
        """Fetch runtime logs sorted by timestamp, keeping the newest `limit`."""
        async with self._client(token) as client:
            data = await self._query(
                client,
                RUNTIME_LOGS_QUERY,
                "runtime logs",
                variables={
                    "projectID": project_id,
                    "serviceID": service_id,
                    "environmentID": environment_id,
                },
            )

        entries = data.get("runtimeLogs")
        if not isinstance(entries, list):
            raise UpstreamError("Zeabur runtime logs were not returned", self.provider.value)

        ordered = sorted(entries, key=_timestamp_key)
        kept = ordered[-limit:] if limit > 0 else []
        return RuntimeLogs(logs=kept, total_count=len(entries))
