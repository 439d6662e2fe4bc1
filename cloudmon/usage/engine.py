"""
Usage Engine - Month-to-date cost for the primary provider.

Displayed per-project costs are rounded up to the cent, as on the provider's
own dashboard. The account total sums the unrounded values, so the
remaining free quota is exact.
"""

import math
from datetime import date, timedelta
from typing import Any, Optional

from cloudmon.config.providers import FREE_QUOTA_LIMIT
from cloudmon.connect.base import UsageSummary
from cloudmon.connect.normalize import to_sequence

USAGE_QUERY = """
query GetHeaderMonthlyUsage($from: String!, $to: String!, $groupByEntity: GroupByEntity, $groupByTime: GroupByTime, $groupByType: GroupByType, $userID: ObjectID!) {
  usages(
    from: $from
    to: $to
    groupByEntity: $groupByEntity
    groupByTime: $groupByTime
    groupByType: $groupByType
    userID: $userID
  ) {
    categories
    data {
      id
      name
      groupByEntity
      usageOfEntity
    }
  }
}
"""


def usage_window(today: Optional[date] = None) -> tuple[str, str]:
    """First day of the current month through tomorrow, as `YYYY-MM-DD`.

    The upper bound is tomorrow so all of today is included whatever the
    provider's timezone.
    """
    today = today or date.today()
    start = today.replace(day=1)
    end = today + timedelta(days=1)
    return start.isoformat(), end.isoformat()


def usage_variables(user_id: str, today: Optional[date] = None) -> dict:
    start, end = usage_window(today)
    return {
        "from": start,
        "to": end,
        "groupByEntity": "PROJECT",
        "groupByTime": "DAY",
        "groupByType": "ALL",
        "userID": user_id,
    }


def display_cost(total: float) -> float:
    """Round a project total up to the cent; non-positive totals show as 0.

    Unlike the provider's own dashboard, float noise is rounded away first,
    so 1.1 shows as 1.10 here where the dashboard shows 1.11.
    """
    if total <= 0:
        return 0.0
    # round first so 1.1 * 100 == 110.00000000000001 does not bill an extra cent
    return math.ceil(round(total * 100, 6)) / 100


def _entity_total(values: Any) -> float:
    total = 0.0
    for value in to_sequence(values):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            total += value
    return total


def summarize_usage(
    entries: Any,
    free_quota_limit: float = FREE_QUOTA_LIMIT,
) -> UsageSummary:
    """Build a `UsageSummary` from the `usages.data` rows."""
    project_costs: dict[str, float] = {}
    total_usage = 0.0

    for entry in to_sequence(entries):
        if not isinstance(entry, dict):
            continue
        project_total = _entity_total(entry.get("usageOfEntity"))
        total_usage += project_total
        project_id = entry.get("id")
        if project_id:
            project_costs[str(project_id)] = display_cost(project_total)

    return UsageSummary(
        project_costs=project_costs,
        total_usage=total_usage,
        free_quota_remaining=free_quota_limit - total_usage,
        free_quota_limit=free_quota_limit,
    )
