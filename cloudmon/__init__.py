"""
cloudmon - Multi-provider cloud account monitor

Fetch accounts, projects and usage from several hosting providers into one
dashboard-ready model.
"""

__version__ = "1.0.0"

from cloudmon.connect import (
    ClawCloudConnector,
    HuggingFaceConnector,
    RailwayConnector,
    RenderConnector,
    VercelConnector,
    ZeaburConnector,
)
from cloudmon.see import AccountAggregator, BatchResult

__all__ = [
    "AccountAggregator",
    "BatchResult",
    "ClawCloudConnector",
    "HuggingFaceConnector",
    "RailwayConnector",
    "RenderConnector",
    "VercelConnector",
    "ZeaburConnector",
]
