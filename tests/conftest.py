"""
Shared fixtures: a fake upstream built on httpx.MockTransport.
"""

import json
from collections.abc import Callable
from typing import Any, Union

import httpx
import pytest

from cloudmon.config.settings import AppSettings

Handler = Callable[[httpx.Request], httpx.Response]


def _base_url(request: httpx.Request) -> str:
    return f"{request.url.scheme}://{request.url.host}{request.url.path}"


class FakeUpstream:
    """Routes requests by method and URL (query string ignored)."""

    def __init__(self):
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, url: str, response: Union[Handler, Any], status: int = 200) -> None:
        if callable(response):
            self.routes[(method, url)] = response
        else:
            self.routes[(method, url)] = lambda request: httpx.Response(status, json=response)

    def graphql(self, url: str, operations: dict[str, Any]) -> None:
        """Answer a GraphQL endpoint by matching a marker in the query text."""

        def handler(request: httpx.Request) -> httpx.Response:
            query = json.loads(request.content)["query"]
            for marker, answer in operations.items():
                if marker in query:
                    if callable(answer):
                        return answer(request)
                    return httpx.Response(200, json=answer)
            return httpx.Response(200, json={"errors": [{"message": "unknown operation"}]})

        self.routes[("POST", url)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = _base_url(request)
        handler = self.routes.get((request.method, url))
        if handler is None:
            return httpx.Response(404, text=f"no route for {request.method} {url}")
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def requests_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if _base_url(r) == url]


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None, admin_password=None, accounts=None)
