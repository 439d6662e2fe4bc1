"""
Connect Module - Cloud Provider Integrations

Connect to Zeabur, Vercel, Hugging Face, Render, Railway and ClawCloud
and translate each one's API into a common account snapshot.
"""

from cloudmon.connect.base import (
    AccountDescriptor,
    AccountSnapshot,
    BaseConnector,
    Project,
    ProviderKind,
    UsageSummary,
    UserInfo,
    normalize_token,
)
from cloudmon.connect.zeabur import ZeaburConnector
from cloudmon.connect.vercel import VercelConnector
from cloudmon.connect.huggingface import HuggingFaceConnector
from cloudmon.connect.render import RenderConnector
from cloudmon.connect.railway import RailwayConnector
from cloudmon.connect.clawcloud import ClawCloudConnector
from cloudmon.connect.registry import CONNECTORS, canonical_provider, lookup

__all__ = [
    "AccountDescriptor",
    "AccountSnapshot",
    "BaseConnector",
    "Project",
    "ProviderKind",
    "UsageSummary",
    "UserInfo",
    "normalize_token",
    "CONNECTORS",
    "canonical_provider",
    "lookup",
    "ZeaburConnector",
    "VercelConnector",
    "HuggingFaceConnector",
    "RenderConnector",
    "RailwayConnector",
    "ClawCloudConnector",
]
