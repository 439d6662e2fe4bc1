"""
Bounded-timeout HTTP primitives shared by all connectors.

Every connector goes through `request_json` or `graphql` so that timeouts,
transport failures, HTTP errors and malformed bodies surface as the same
`ProviderError` subclasses regardless of provider.
"""

import asyncio
from typing import Any, Optional

import httpx

from cloudmon.config.providers import REASON_LIMIT
from cloudmon.config.settings import AppSettings
from cloudmon.errors import (
    ParseError,
    ProviderTimeoutError,
    TransportError,
    UpstreamError,
)


def build_async_client(
    settings: Optional[AppSettings] = None,
    *,
    token: Optional[str] = None,
    extra_headers: Optional[dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the shared timeout and auth header."""
    settings = settings or AppSettings()
    headers = {"User-Agent": settings.user_agent}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers=headers,
        transport=transport,
    )


def sanitize_reason(reason, limit: int = REASON_LIMIT) -> str:
    if not isinstance(reason, str):
        return "unknown error"
    trimmed = reason.strip()
    if not trimmed:
        return "unknown error"
    return f"{trimmed[:limit]}..." if len(trimmed) > limit else trimmed


async def request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    provider: str,
    what: str,
    **kwargs,
) -> Any:
    """Perform one request and return its decoded JSON body.

    The client's read timeout also bounds the whole call, body included, so
    an upstream trickling bytes is cut off. An empty body decodes to `{}`.
    """
    deadline = client.timeout.read
    try:
        response = await asyncio.wait_for(client.request(method, url, **kwargs), deadline)
    except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
        raise ProviderTimeoutError(
            f"{what}: request timed out",
            provider,
            timeout=deadline,
        ) from exc
    except httpx.RequestError as exc:
        # transport failures, bad content encodings, redirect loops
        raise TransportError(f"{what}: {exc or type(exc).__name__}", provider) from exc

    if response.is_error:
        reason = sanitize_reason(response.text or response.reason_phrase)
        raise UpstreamError(
            f"{what}: {reason}",
            provider,
            status_code=response.status_code,
        )

    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError as exc:
        raise ParseError(f"{what}: invalid JSON response", provider) from exc


async def graphql(
    client: httpx.AsyncClient,
    url: str,
    query: str,
    *,
    provider: str,
    what: str,
    variables: Optional[dict] = None,
    operation_name: Optional[str] = None,
) -> dict:
    """Run a GraphQL operation and return its `data` member."""
    body: dict[str, Any] = {"query": query}
    if variables:
        body["variables"] = variables
    if operation_name:
        body["operationName"] = operation_name

    payload = await request_json(client, "POST", url, provider=provider, what=what, json=body)
    if not isinstance(payload, dict):
        raise ParseError(f"{what}: unexpected GraphQL payload", provider)

    errors = payload.get("errors")
    if errors:
        messages = [
            e.get("message", "") if isinstance(e, dict) else str(e)
            for e in (errors if isinstance(errors, list) else [errors])
        ]
        reason = sanitize_reason("; ".join(m for m in messages if m))
        raise UpstreamError(f"{what}: {reason}", provider)

    data = payload.get("data")
    return data if isinstance(data, dict) else {}
