"""standhub token API library."""

from .client import TokenApiClient
from .exceptions import TokenApiError, TokenApiErrorCodes
from .http_client import HttpTokenApiClient
from .models import (
    AITokenStatus,
    AuditIssue,
    AuditIssueType,
    AuditReport,
    AuditSeverity,
    AuditStatus,
    AuditSummary,
    BalanceInfo,
    ReservationResult,
    ResolutionResult,
    TokenApiConfig,
)
from .reservation import ReservationOutcome, run_with_reservation

__all__ = [
    "TokenApiClient",
    "HttpTokenApiClient",
    "TokenApiConfig",
    "BalanceInfo",
    "ReservationResult",
    "ResolutionResult",
    "ReservationOutcome",
    "run_with_reservation",
    "AITokenStatus",
    "AuditReport",
    "AuditSummary",
    "AuditIssue",
    "AuditIssueType",
    "AuditSeverity",
    "AuditStatus",
    "TokenApiError",
    "TokenApiErrorCodes",
]
