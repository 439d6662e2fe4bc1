"""
Data models for batch results.
"""

from dataclasses import dataclass
from typing import Optional

from cloudmon.connect.base import AccountSnapshot, ProviderKind


@dataclass
class BatchResult:
    """Outcome of one account in a batch: a snapshot or an error message."""
    name: str
    provider: str
    success: bool
    snapshot: Optional[AccountSnapshot] = None
    error: Optional[str] = None

    @property
    def credit(self) -> int:
        """Remaining free quota in cents. Only Zeabur has a free quota."""
        if self.provider != ProviderKind.ZEABUR.value or self.snapshot is None:
            return 0
        if self.snapshot.usage is None:
            return 0
        return self.snapshot.usage.credit_cents

    def _base(self) -> dict:
        data = {"name": self.name, "provider": self.provider, "success": self.success}
        if not self.success:
            data["error"] = self.error
        return data

    def to_dict(self) -> dict:
        data = self._base()
        if self.success and self.snapshot is not None:
            data["data"] = {**self.snapshot.to_dict(), "credit": self.credit}
        return data

    def account_view(self) -> dict:
        """User fields, credit and usage totals for the accounts panel."""
        data = self._base()
        if self.success and self.snapshot is not None:
            usage = self.snapshot.usage
            data["data"] = {
                **self.snapshot.user.to_dict(),
                "credit": self.credit,
                "totalUsage": usage.total_usage if usage else None,
                "freeQuotaLimit": usage.free_quota_limit if usage else None,
            }
            data["aihub"] = self.snapshot.aihub.to_dict() if self.snapshot.aihub else None
        return data

    def project_view(self) -> dict:
        """Project list for the projects panel."""
        data = self._base()
        if self.success and self.snapshot is not None:
            data["projects"] = [p.to_dict() for p in self.snapshot.projects]
        return data
