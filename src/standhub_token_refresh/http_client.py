"""httpx implementation of the token refresh client."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import structlog

from standhub_retry import RetryConfig, RetryError, with_retry

from .client import TokenRefreshClient
from .exceptions import TokenRefreshError, TokenRefreshErrorCodes
from .models import RefreshTokenResponse, TokenRefreshConfig

logger = structlog.get_logger(__name__)


def _is_retryable(error: Exception) -> bool:
    return not (
        isinstance(error, TokenRefreshError)
        and error.code == TokenRefreshErrorCodes.UNAUTHORIZED
    )


class HttpTokenRefreshClient(TokenRefreshClient):
    """Calls the refresh endpoint with bounded exponential backoff.

    A 401 response is terminal. Any other non-success status, transport
    error or payload missing ``token``/``expiresAt`` is retried.
    """

    def __init__(
        self,
        config: TokenRefreshConfig,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self._sleep = sleep
        self._retry = RetryConfig(
            max_retries=config.max_retries,
            initial_delay=config.initial_delay,
            multiplier=2.0,
            jitter=False,
        )

    def _make_client(self, current_token: str) -> httpx.AsyncClient:
        headers = {
            "Authorization": f"Bearer {current_token}",
            "Content-Type": "application/json",
        }
        if self._config.api_key:
            headers["apikey"] = self._config.api_key
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=headers,
            timeout=self._config.timeout_seconds,
        )

    async def _attempt(self, current_token: str) -> RefreshTokenResponse:
        try:
            async with self._make_client(current_token) as client:
                resp = await client.post(self._config.endpoint)
        except httpx.HTTPError as e:
            raise TokenRefreshError(
                code=TokenRefreshErrorCodes.REFRESH_FAILED,
                message=f"Refresh request failed: {e}",
                cause=e,
            ) from e

        if resp.status_code == 401:
            logger.error("token_refresh_unauthorized")
            raise TokenRefreshError(
                code=TokenRefreshErrorCodes.UNAUTHORIZED,
                message="Session is no longer authorized",
            )
        if resp.status_code >= 400:
            raise TokenRefreshError(
                code=TokenRefreshErrorCodes.REFRESH_FAILED,
                message=f"Refresh failed: HTTP {resp.status_code}",
            )
        try:
            data: Any = resp.json()
        except ValueError as e:
            raise TokenRefreshError(
                code=TokenRefreshErrorCodes.INVALID_RESPONSE,
                message="Refresh endpoint returned a non-JSON body",
                cause=e,
            ) from e
        return RefreshTokenResponse.from_dict(data)

    async def refresh_token(self, current_token: str) -> RefreshTokenResponse:
        try:
            result = await with_retry(
                self._retry,
                lambda: self._attempt(current_token),
                retry_if=_is_retryable,
                sleep=self._sleep,
            )
        except RetryError as e:
            logger.error("token_refresh_exhausted", attempts=e.attempts, error=str(e.last_error))
            raise TokenRefreshError(
                code=TokenRefreshErrorCodes.REFRESH_FAILED,
                message=f"Token refresh failed after {e.attempts} attempts",
                cause=e,
            ) from e
        logger.info("token_refresh_succeeded", user_id=result.user_id, expires_at=result.expires_at)
        return result
