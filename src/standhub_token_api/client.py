"""TokenApiClient abstract base class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from standhub_events import Unsubscribe

from .models import (
    AITokenStatus,
    AuditReport,
    BalanceInfo,
    ReservationResult,
    ResolutionResult,
)


class TokenApiClient(ABC):
    """Credit balance and reservation operations.

    Every implementation must broadcast to ``on_unauthorized`` subscribers
    when the server rejects the session, before raising.
    """

    @abstractmethod
    def on_unauthorized(self, callback: Callable[[], None]) -> Unsubscribe:
        """Register a callback fired on every unauthorized response."""
        ...

    @abstractmethod
    async def check_balance(self, token: str) -> BalanceInfo: ...

    @abstractmethod
    async def reserve_tokens(
        self, token: str, service_type: str, amount: int
    ) -> ReservationResult:
        """Tentatively debit ``amount`` credits for ``service_type``."""
        ...

    @abstractmethod
    async def commit_reservation(
        self, token: str, reservation_id: str, result_url: str
    ) -> ResolutionResult:
        """Finalize the debit and attach the generated artifact."""
        ...

    @abstractmethod
    async def rollback_reservation(
        self, token: str, reservation_id: str, reason: str
    ) -> ResolutionResult:
        """Reverse the tentative debit."""
        ...

    @abstractmethod
    async def check_ai_tokens(self, token: str) -> AITokenStatus: ...

    @abstractmethod
    async def increment_ai_tokens(self, token: str) -> None:
        """Record one generation against the monthly allowance."""
        ...

    @abstractmethod
    async def fetch_audit_report(self, token: str) -> AuditReport: ...
