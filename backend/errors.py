"""
FarmerAid - Exception types shared by the rule engine and the upstream clients.
Endpoints translate these into HTTPException responses.
"""
from typing import Any, Dict, Optional


class FarmerAidError(Exception):
    """Base class for application errors."""


class InsufficientForecastData(FarmerAidError, ValueError):
    """The forecast payload has no usable days in its window."""

    def __init__(self, message: str = "Insufficient forecast data for evaluation."):
        super().__init__(message)


class ConfigurationError(FarmerAidError):
    """A required server-side setting (API key, URL) is missing or a placeholder."""


class UpstreamError(FarmerAidError):
    """A third-party service failed, timed out, or answered with an error status."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details
        self.extra = extra or {}

    def to_detail(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {"error": self.message}
        if self.details:
            detail["details"] = self.details
        detail.update(self.extra)
        return detail
