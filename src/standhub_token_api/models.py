"""Token API data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


@dataclass
class TokenApiConfig:
    """Token API client settings."""

    base_url: str
    timeout_seconds: float = 10.0
    api_key: str = ""


@dataclass(frozen=True)
class BalanceInfo:
    """Credit balance of the signed-in account."""

    balance: int
    total_balance: int
    reserved_tokens: int
    subscription_plan: str = "Free"
    is_premium: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BalanceInfo:
        return cls(
            balance=int(data["balance"]),
            total_balance=int(data.get("totalBalance", data["balance"])),
            reserved_tokens=int(data.get("reservedTokens", 0)),
            subscription_plan=data.get("subscriptionPlan") or "Free",
            is_premium=bool(data.get("isPremium", False)),
        )


@dataclass(frozen=True)
class ReservationResult:
    """Outcome of a reserve call.

    ``success`` is False when the server refused the reservation, for example
    on insufficient balance; ``available_balance`` and ``required`` then
    describe the shortfall.
    """

    success: bool
    reservation_id: str | None = None
    new_balance: int | None = None
    error: str | None = None
    available_balance: int | None = None
    required: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReservationResult:
        return cls(
            success=True,
            reservation_id=str(data["reservationId"]),
            new_balance=_opt_int(data.get("newBalance")),
        )

    @classmethod
    def failure(cls, data: dict[str, Any], default_error: str) -> ReservationResult:
        return cls(
            success=False,
            error=data.get("error") or default_error,
            available_balance=_opt_int(data.get("availableBalance")),
            required=_opt_int(data.get("required")),
        )


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of a commit or rollback call."""

    success: bool
    new_balance: int | None = None
    error: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResolutionResult:
        return cls(success=True, new_balance=_opt_int(data.get("newBalance")))

    @classmethod
    def failure(cls, data: dict[str, Any], default_error: str) -> ResolutionResult:
        return cls(success=False, error=data.get("error") or default_error)


@dataclass(frozen=True)
class AITokenStatus:
    """Monthly generation allowance reported by the check-ai-tokens endpoint."""

    has_tokens: bool
    tokens_used: int
    tokens_remaining: int
    total_tokens: int
    monthly_limit: int
    video_credits: int = 0
    is_premium: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AITokenStatus:
        return cls(
            has_tokens=bool(data.get("hasTokens", False)),
            tokens_used=int(data.get("tokensUsed") or 0),
            tokens_remaining=int(data.get("tokensRemaining") or 0),
            total_tokens=int(data.get("totalTokens") or 0),
            monthly_limit=int(data.get("monthlyLimit") or 0),
            video_credits=int(data.get("videoCredits") or 0),
            is_premium=bool(data.get("isPremium", False)),
        )


class AuditStatus(StrEnum):
    """Overall health of the credit ledger."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class AuditSeverity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AuditIssueType(StrEnum):
    ORPHANED_GENERATION = "orphaned_generation"
    EXPIRED_RESERVATION = "expired_reservation"
    NEGATIVE_RESERVED_TOKENS = "negative_reserved_tokens"
    BALANCE_MISMATCH = "balance_mismatch"
    DOUBLE_DEDUCTION = "double_deduction"


@dataclass(frozen=True)
class AuditIssue:
    """A single defect found by the ledger audit."""

    type: str
    severity: AuditSeverity
    details: str
    user_id: str | None = None
    email: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditIssue:
        return cls(
            type=data["type"],
            severity=AuditSeverity(data.get("severity", "low")),
            details=data.get("details", ""),
            user_id=data.get("userId"),
            email=data.get("email"),
        )


@dataclass(frozen=True)
class AuditSummary:
    total_users: int = 0
    users_with_inconsistencies: int = 0
    orphaned_generations: int = 0
    expired_reservations: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditSummary:
        return cls(
            total_users=int(data.get("totalUsers", 0)),
            users_with_inconsistencies=int(data.get("usersWithInconsistencies", 0)),
            orphaned_generations=int(data.get("orphanedGenerations", 0)),
            expired_reservations=int(data.get("expiredReservations", 0)),
        )


@dataclass(frozen=True)
class AuditReport:
    """Report of reservations left unresolved and generations without a debit."""

    status: AuditStatus
    summary: AuditSummary
    issues: list[AuditIssue] = field(default_factory=list)
    timestamp: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditReport:
        return cls(
            status=AuditStatus(data.get("status", "healthy")),
            summary=AuditSummary.from_dict(data.get("summary") or {}),
            issues=[AuditIssue.from_dict(i) for i in data.get("issues", [])],
            timestamp=data.get("timestamp", ""),
        )

    def issues_of_type(self, issue_type: str) -> list[AuditIssue]:
        return [i for i in self.issues if i.type == issue_type]

    @property
    def is_healthy(self) -> bool:
        return self.status == AuditStatus.HEALTHY


def _opt_int(value: Any) -> int | None:
    return None if value is None else int(value)
