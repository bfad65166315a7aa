"""Reserve, generate, then commit or roll back."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import structlog

from .client import TokenApiClient
from .models import ReservationResult, ResolutionResult

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReservationOutcome:
    """What happened to one reservation.

    ``resolution`` is None when the reservation was refused and nothing
    was generated.
    """

    reservation: ReservationResult
    resolution: ResolutionResult | None = None
    result_url: str | None = None

    @property
    def committed(self) -> bool:
        return (
            self.resolution is not None
            and self.resolution.success
            and self.result_url is not None
        )


async def run_with_reservation(
    api: TokenApiClient,
    token: str,
    service_type: str,
    amount: int,
    generate: Callable[[], Awaitable[str]],
) -> ReservationOutcome:
    """Spend ``amount`` credits on one call to ``generate``.

    ``generate`` returns the URL of the produced artifact. The reservation is
    committed once on success and rolled back once if ``generate`` raises or
    is cancelled; the original exception is re-raised after the rollback.
    A refused reservation returns immediately without calling ``generate``.
    """
    reservation = await api.reserve_tokens(token, service_type, amount)
    if not reservation.success or reservation.reservation_id is None:
        logger.info(
            "generation_skipped",
            service_type=service_type,
            error=reservation.error,
            available_balance=reservation.available_balance,
            required=reservation.required,
        )
        return ReservationOutcome(reservation=reservation)

    reservation_id = reservation.reservation_id
    try:
        result_url = await generate()
    except asyncio.CancelledError:
        await _rollback(api, token, reservation_id, "Generation cancelled")
        raise
    except Exception as e:
        await _rollback(api, token, reservation_id, f"Generation failed: {e}")
        raise

    try:
        resolution = await api.commit_reservation(token, reservation_id, result_url)
    except Exception:
        # Left reserved; the ledger audit reports it as expired.
        logger.exception(
            "reservation_commit_failed",
            reservation_id=reservation_id,
            result_url=result_url,
        )
        raise
    if not resolution.success:
        logger.error(
            "reservation_commit_refused",
            reservation_id=reservation_id,
            error=resolution.error,
        )
    return ReservationOutcome(
        reservation=reservation, resolution=resolution, result_url=result_url
    )


async def _rollback(
    api: TokenApiClient, token: str, reservation_id: str, reason: str
) -> None:
    try:
        result = await api.rollback_reservation(token, reservation_id, reason)
    except Exception:
        logger.exception("reservation_rollback_failed", reservation_id=reservation_id)
        return
    if not result.success:
        logger.warning(
            "reservation_rollback_refused",
            reservation_id=reservation_id,
            error=result.error,
        )
