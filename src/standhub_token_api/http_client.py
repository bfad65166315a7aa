"""httpx implementation of the token API client."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import httpx
import structlog

from standhub_events import Subscribers, Unsubscribe
from standhub_telemetry import reservation_total, unauthorized_total

from .client import TokenApiClient
from .exceptions import TokenApiError, TokenApiErrorCodes
from .models import (
    AITokenStatus,
    AuditReport,
    BalanceInfo,
    ReservationResult,
    ResolutionResult,
    TokenApiConfig,
)

logger = structlog.get_logger(__name__)

UnauthorizedCallback = Callable[[], None]

T = TypeVar("T")


class HttpTokenApiClient(TokenApiClient):
    """Token API client over the platform's backend functions.

    The unauthorized broadcast is the ``Subscribers`` list passed in, so
    several clients built by the same application can share listeners.
    """

    def __init__(
        self,
        config: TokenApiConfig,
        unauthorized: Subscribers[UnauthorizedCallback] | None = None,
    ) -> None:
        self._config = config
        self._unauthorized: Subscribers[UnauthorizedCallback] = (
            unauthorized if unauthorized is not None else Subscribers("unauthorized")
        )

    @property
    def unauthorized(self) -> Subscribers[UnauthorizedCallback]:
        return self._unauthorized

    def on_unauthorized(self, callback: UnauthorizedCallback) -> Unsubscribe:
        return self._unauthorized.subscribe(callback)

    def _make_client(self, token: str) -> httpx.AsyncClient:
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        if self._config.api_key:
            headers["apikey"] = self._config.api_key
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=headers,
            timeout=self._config.timeout_seconds,
        )

    async def _post(
        self,
        token: str,
        path: str,
        operation: str,
        body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            async with self._make_client(token) as client:
                resp = await client.post(path, json=body)
        except httpx.HTTPError as e:
            logger.error("token_api_request_failed", operation=operation, error=str(e))
            raise TokenApiError(
                code=TokenApiErrorCodes.HTTP_ERROR,
                message=f"{operation} failed: {e}",
                cause=e,
            ) from e

        if resp.status_code == 401:
            logger.warning("token_api_unauthorized", operation=operation)
            unauthorized_total.add(1, {"operation": operation})
            self._unauthorized.notify()
            raise TokenApiError(
                code=TokenApiErrorCodes.UNAUTHORIZED,
                message=f"{operation}: unauthorized",
                status_code=401,
            )
        if resp.status_code >= 500:
            raise TokenApiError(
                code=TokenApiErrorCodes.HTTP_ERROR,
                message=f"{operation}: HTTP {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
            )
        return resp

    @staticmethod
    def _json(resp: httpx.Response, operation: str) -> dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise TokenApiError(
                code=TokenApiErrorCodes.INVALID_RESPONSE,
                message=f"{operation}: response is not JSON",
                cause=e,
                status_code=resp.status_code,
            ) from e
        if not isinstance(data, dict):
            raise TokenApiError(
                code=TokenApiErrorCodes.INVALID_RESPONSE,
                message=f"{operation}: expected a JSON object",
                status_code=resp.status_code,
            )
        return data

    @staticmethod
    def _parse(operation: str, build: Callable[[], T]) -> T:
        try:
            return build()
        except (KeyError, TypeError, ValueError) as e:
            raise TokenApiError(
                code=TokenApiErrorCodes.INVALID_RESPONSE,
                message=f"{operation}: malformed response: {e}",
                cause=e,
            ) from e

    @classmethod
    def _failure_body(cls, resp: httpx.Response) -> dict[str, Any]:
        try:
            data = resp.json()
        except ValueError:
            return {"error": resp.text or f"HTTP {resp.status_code}"}
        return data if isinstance(data, dict) else {}

    def _raise_for_client_error(self, resp: httpx.Response, operation: str) -> None:
        if resp.status_code >= 400:
            raise TokenApiError(
                code=TokenApiErrorCodes.HTTP_ERROR,
                message=f"{operation}: HTTP {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
            )

    async def check_balance(self, token: str) -> BalanceInfo:
        resp = await self._post(token, "/get-user-balance", "check_balance")
        self._raise_for_client_error(resp, "check_balance")
        data = self._json(resp, "check_balance")
        return self._parse("check_balance", lambda: BalanceInfo.from_dict(data))

    async def reserve_tokens(
        self, token: str, service_type: str, amount: int
    ) -> ReservationResult:
        resp = await self._post(
            token,
            "/reserve-tokens",
            "reserve_tokens",
            {"serviceType": service_type, "tokensAmount": amount},
        )
        if resp.status_code >= 400:
            body = self._failure_body(resp)
            result = self._parse(
                "reserve_tokens",
                lambda: ReservationResult.failure(body, "Failed to reserve tokens"),
            )
            logger.warning(
                "reservation_refused",
                service_type=service_type,
                amount=amount,
                error=result.error,
                available_balance=result.available_balance,
            )
            reservation_total.add(1, {"operation": "reserve", "outcome": "refused"})
            return result
        data = self._json(resp, "reserve_tokens")
        if data.get("success") is False or "reservationId" not in data:
            reservation_total.add(1, {"operation": "reserve", "outcome": "refused"})
            return self._parse(
                "reserve_tokens",
                lambda: ReservationResult.failure(data, "Failed to reserve tokens"),
            )
        result = self._parse("reserve_tokens", lambda: ReservationResult.from_dict(data))
        logger.info(
            "reservation_created",
            reservation_id=result.reservation_id,
            service_type=service_type,
            amount=amount,
            new_balance=result.new_balance,
        )
        reservation_total.add(1, {"operation": "reserve", "outcome": "success"})
        return result

    async def _resolve(
        self,
        token: str,
        path: str,
        operation: str,
        body: dict[str, Any],
    ) -> ResolutionResult:
        resp = await self._post(token, path, operation, body)
        if resp.status_code >= 400:
            result = ResolutionResult.failure(
                self._failure_body(resp), f"{operation} failed"
            )
        else:
            data = self._json(resp, operation)
            if data.get("success") is False:
                result = ResolutionResult.failure(data, f"{operation} failed")
            else:
                result = self._parse(operation, lambda: ResolutionResult.from_dict(data))
        outcome = "success" if result.success else "refused"
        reservation_total.add(1, {"operation": operation, "outcome": outcome})
        logger.info(
            "reservation_resolved",
            operation=operation,
            reservation_id=body["reservationId"],
            success=result.success,
            error=result.error,
        )
        return result

    async def commit_reservation(
        self, token: str, reservation_id: str, result_url: str
    ) -> ResolutionResult:
        return await self._resolve(
            token,
            "/commit-reservation",
            "commit_reservation",
            {"reservationId": reservation_id, "aiResultUrl": result_url},
        )

    async def rollback_reservation(
        self, token: str, reservation_id: str, reason: str
    ) -> ResolutionResult:
        return await self._resolve(
            token,
            "/rollback-reservation",
            "rollback_reservation",
            {"reservationId": reservation_id, "reason": reason},
        )

    async def check_ai_tokens(self, token: str) -> AITokenStatus:
        resp = await self._post(token, "/check-ai-tokens", "check_ai_tokens")
        self._raise_for_client_error(resp, "check_ai_tokens")
        data = self._json(resp, "check_ai_tokens")
        return self._parse("check_ai_tokens", lambda: AITokenStatus.from_dict(data))

    async def increment_ai_tokens(self, token: str) -> None:
        resp = await self._post(token, "/increment-ai-tokens", "increment_ai_tokens")
        self._raise_for_client_error(resp, "increment_ai_tokens")
        logger.info("ai_tokens_incremented")

    async def fetch_audit_report(self, token: str) -> AuditReport:
        resp = await self._post(token, "/audit-token-system", "fetch_audit_report")
        self._raise_for_client_error(resp, "fetch_audit_report")
        data = self._json(resp, "fetch_audit_report")
        return self._parse("fetch_audit_report", lambda: AuditReport.from_dict(data))
