"""
Usage Module - Billing aggregation for providers that expose it.
"""

from cloudmon.usage.engine import display_cost, summarize_usage, usage_window

__all__ = [
    "display_cost",
    "summarize_usage",
    "usage_window",
]
