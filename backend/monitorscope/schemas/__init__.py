"""Pydantic schemas for API request/response models."""
from .check import (
    HealthCheckRecord,
    CheckRequest,
    CheckOutcomeResponse,
    CheckRunResponse,
)
from .alert import (
    AlertResponse,
    AlertStats,
    ResolveRequest,
    ResolveResponse,
)
from .status import (
    StatusOverview,
    TargetSummary,
)
from .email_config import (
    EmailConfigResponse,
    EmailTestRequest,
    EmailTestResponse,
)

__all__ = [
    "HealthCheckRecord",
    "CheckRequest",
    "CheckOutcomeResponse",
    "CheckRunResponse",
    "AlertResponse",
    "AlertStats",
    "ResolveRequest",
    "ResolveResponse",
    "StatusOverview",
    "TargetSummary",
    "EmailConfigResponse",
    "EmailTestRequest",
    "EmailTestResponse",
]
