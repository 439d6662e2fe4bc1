"""
API Module - REST surface for the dashboard.
"""

from cloudmon.api.sessions import SessionStore

__all__ = ["SessionStore"]
