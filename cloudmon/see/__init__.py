"""
See Module - Unified Account Aggregation

Fetch accounts from every configured provider into a single view.
"""

from cloudmon.see.aggregator import AccountAggregator
from cloudmon.see.models import BatchResult

__all__ = [
    "AccountAggregator",
    "BatchResult",
]
