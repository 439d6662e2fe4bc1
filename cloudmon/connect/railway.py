"""
Railway Connector - Single GraphQL viewer query.
"""

from cloudmon.config.providers import RAILWAY_GRAPHQL_URL
from cloudmon.connect.base import (
    AccountSnapshot,
    BaseConnector,
    IdAllocator,
    Project,
    ProviderKind,
    UserInfo,
)
from cloudmon.connect.http import graphql
from cloudmon.connect.normalize import as_mapping, pick, to_sequence
from cloudmon.connect.registry import register

VIEWER_QUERY = """
query Viewer {
  viewer {
    id
    email
    username
    projects {
      edges {
        node { id name }
      }
    }
  }
}
"""


@register(ProviderKind.RAILWAY)
class RailwayConnector(BaseConnector):
    """Railway connector."""

    GRAPHQL_URL = RAILWAY_GRAPHQL_URL

    async def fetch(self, token: str) -> AccountSnapshot:
        async with self._client(token) as client:
            data = await graphql(
                client,
                self.GRAPHQL_URL,
                VIEWER_QUERY,
                provider=self.provider.value,
                what="Railway viewer",
            )

        viewer = as_mapping(pick(data, "viewer", "me"))
        edges = to_sequence(as_mapping(viewer.get("projects")).get("edges"))

        nodes = [
            edge["node"] for edge in edges
            if isinstance(edge, dict) and isinstance(edge.get("node"), dict)
        ]
        ids = IdAllocator(node.get("id") for node in nodes)
        projects = []
        for node in nodes:
            projects.append(Project(
                id=ids.assign(node.get("id"), "railway"),
                name=node.get("name"),
                region="Railway",
            ))

        return AccountSnapshot(
            user=UserInfo(
                id=viewer.get("id"),
                username=pick(viewer, "username", "email"),
                email=viewer.get("email"),
            ),
            projects=projects,
        )
