"""
Combinators for calls whose failure is not always fatal.

`optional` replaces a failed call with a default. `gather_outcomes` runs
alternative calls together and `require_any` keeps whatever succeeded,
failing only when every alternative failed.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

from cloudmon.config.providers import COMBINED_REASON_LIMIT
from cloudmon.connect.http import sanitize_reason
from cloudmon.errors import ProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def optional(awaitable: Awaitable[T], default: T, *, what: str) -> T:
    """Await `awaitable`; on a provider failure log it and return `default`."""
    try:
        return await awaitable
    except ProviderError as exc:
        logger.warning("%s failed, continuing without it: %s", what, exc)
        return default


async def gather_outcomes(*awaitables: Awaitable[Any]) -> list:
    """Run awaitables concurrently; each outcome is a value or a `ProviderError`.

    Any other exception propagates.
    """
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException) and not isinstance(result, ProviderError):
            raise result
    return results


def unwrap(outcome):
    """Return a required outcome, raising it if the call failed."""
    if isinstance(outcome, ProviderError):
        raise outcome
    return outcome


def combine_reasons(errors: list[BaseException]) -> str:
    combined = "; ".join(sanitize_reason(str(e)) for e in errors)
    if not combined:
        return "unknown error"
    if len(combined) > COMBINED_REASON_LIMIT:
        return f"{combined[:COMBINED_REASON_LIMIT]}..."
    return combined


def require_any(outcomes: list, *, provider: str, what: str) -> list:
    """Return the successful outcomes in order.

    Raises when none succeeded; logs the failures when only some did.
    """
    values = [o for o in outcomes if not isinstance(o, ProviderError)]
    errors = [o for o in outcomes if isinstance(o, ProviderError)]

    if not values:
        if not errors:
            raise ProviderError(f"{what}: nothing to fetch", provider)
        message = f"{what}: {combine_reasons(errors)}"
        kinds = {type(e) for e in errors}
        error_cls = kinds.pop() if len(kinds) == 1 else ProviderError
        raise error_cls(message, provider)

    if errors:
        logger.warning("%s partially failed: %s", what, combine_reasons(errors))
    return values
