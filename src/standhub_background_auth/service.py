"""Background auth service.

Keeps the stored session token fresh and turns unauthorized responses into
a single "auth lost" notification. A check runs once on ``start`` and then
every ``check_interval`` seconds; each check is its own task so a slow
network call never delays the timer.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import structlog

from standhub_events import Subscribers, Unsubscribe
from standhub_telemetry import auth_lost_total, token_refresh_total
from standhub_token_api import TokenApiClient
from standhub_token_refresh import TokenRefreshClient, TokenRefreshError
from standhub_token_storage import TokenStorage, TokenStorageError

from .models import AuthStatus, BackgroundAuthConfig, ServiceState

logger = structlog.get_logger(__name__)

AuthLostCallback = Callable[[], None]
TokenRefreshedCallback = Callable[[str], None]


class BackgroundAuthService:
    """Periodic token refresh and session liveness monitor."""

    def __init__(
        self,
        storage: TokenStorage,
        refresh_client: TokenRefreshClient,
        api_client: TokenApiClient,
        config: BackgroundAuthConfig | None = None,
    ) -> None:
        self._storage = storage
        self._refresh_client = refresh_client
        self._api_client = api_client
        self._config = config or BackgroundAuthConfig()
        self._state = ServiceState.STOPPED
        self._timer: asyncio.Task[None] | None = None
        self._checks: set[asyncio.Task[None]] = set()
        self._unsubscribe_unauthorized: Unsubscribe | None = None
        self._auth_lost_handled = False
        self._auth_lost: Subscribers[AuthLostCallback] = Subscribers("auth_lost")
        self._token_refreshed: Subscribers[TokenRefreshedCallback] = Subscribers(
            "token_refreshed"
        )

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == ServiceState.RUNNING

    def start(self) -> None:
        """Start monitoring. Must be called from a running event loop."""
        if self.is_running:
            logger.info("background_auth_already_running")
            return

        loop = asyncio.get_running_loop()
        logger.info("background_auth_starting", check_interval=self._config.check_interval)
        self._state = ServiceState.RUNNING
        self._auth_lost_handled = False
        self._unsubscribe_unauthorized = self._api_client.on_unauthorized(
            self._on_unauthorized
        )
        self._timer = loop.create_task(self._run_timer(), name="background-auth-timer")
        self._spawn_check()

    def stop(self) -> None:
        """Stop the timer and the unauthorized subscription.

        Checks already in flight run to completion.
        """
        if not self.is_running:
            return

        logger.info("background_auth_stopping")
        self._state = ServiceState.STOPPED
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._unsubscribe_unauthorized is not None:
            self._unsubscribe_unauthorized()
            self._unsubscribe_unauthorized = None

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self._config.check_interval)
            self._spawn_check()

    def _spawn_check(self) -> None:
        task = asyncio.get_running_loop().create_task(self._run_check())
        self._checks.add(task)
        task.add_done_callback(self._checks.discard)

    async def _run_check(self) -> None:
        # Scheduled but not yet started when stop() ran.
        if not self.is_running:
            return
        try:
            await self.perform_checks()
        except Exception:
            logger.exception("background_auth_check_failed")

    async def wait_idle(self) -> None:
        """Wait for every in-flight check to finish."""
        while self._checks:
            await asyncio.gather(*list(self._checks), return_exceptions=True)

    async def perform_checks(self) -> None:
        """Refresh the token when due, then probe the session."""
        logger.debug("background_auth_checking")

        if self._storage.should_refresh_token() and self._storage.can_refresh_now():
            await self._attempt_token_refresh()

        if self._storage.is_token_expired():
            logger.warning("stored_token_expired")
            self._handle_auth_lost()
            return

        await self._verify_authentication()

    async def _attempt_token_refresh(self) -> None:
        current_token = self._storage.get_token()
        if not current_token:
            logger.info("token_refresh_skipped", reason="no token")
            return

        logger.info(
            "token_refresh_needed",
            minutes_remaining=self._storage.get_time_until_expiration() // 60000,
        )
        try:
            self._storage.mark_refresh_attempt()
        except TokenStorageError as e:
            logger.warning("refresh_attempt_not_recorded", error=str(e))

        try:
            response = await self._refresh_client.refresh_token(current_token)
        except TokenRefreshError as e:
            if e.is_unauthorized:
                token_refresh_total.add(1, {"outcome": "unauthorized"})
                logger.error("token_refresh_unauthorized")
                self._handle_auth_lost()
                return
            self._refresh_failed(e)
            return
        except Exception as e:
            self._refresh_failed(e)
            return

        try:
            self._storage.save_token_with_metadata(
                response.token, response.expires_at, response.user_id
            )
        except TokenStorageError as e:
            token_refresh_total.add(1, {"outcome": "failed"})
            logger.error("refreshed_token_not_saved", error=str(e))
            return

        token_refresh_total.add(1, {"outcome": "success"})
        logger.info("token_refreshed", expires_at=response.expires_at)
        self._token_refreshed.notify(response.token)

    def _refresh_failed(self, error: Exception) -> None:
        # The next cycle retries, gated only by the last successful refresh.
        token_refresh_total.add(1, {"outcome": "failed"})
        logger.error("token_refresh_failed", error=str(error))
        try:
            self._storage.clear_refresh_attempt()
        except TokenStorageError as e:
            logger.warning("refresh_attempt_not_cleared", error=str(e))

    async def _verify_authentication(self) -> None:
        # Only the unauthorized broadcast declares the session lost; any
        # other failure here is left to the next cycle.
        token = self._storage.get_token()
        if not token:
            return
        try:
            await self._api_client.check_balance(token)
        except Exception as e:
            logger.warning("auth_verification_error", error=str(e))
            return
        logger.debug("auth_verification_passed")

    def _on_unauthorized(self) -> None:
        logger.warning("unauthorized_response_detected")
        self._handle_auth_lost()

    def _handle_auth_lost(self) -> None:
        if self._auth_lost_handled:
            return
        self._auth_lost_handled = True

        logger.warning("auth_lost")
        auth_lost_total.add(1)
        self._storage.clear_token_storage()
        self.stop()
        self._auth_lost.notify()

    async def verify_now(self) -> None:
        """Probe the session immediately, outside the timer cadence."""
        logger.info("manual_verification_triggered")
        await self._verify_authentication()

    def on_auth_lost(self, callback: AuthLostCallback) -> Unsubscribe:
        return self._auth_lost.subscribe(callback)

    def on_token_refreshed(self, callback: TokenRefreshedCallback) -> Unsubscribe:
        return self._token_refreshed.subscribe(callback)

    def status(self) -> AuthStatus:
        metadata = self._storage.get_token_metadata()
        return AuthStatus(
            state=self._state,
            has_token=self._storage.get_token() is not None,
            expires_at=metadata.expires_at if metadata else None,
            time_until_expiration=self._storage.get_time_until_expiration(),
            refresh_count=metadata.refresh_count if metadata else 0,
            last_refresh=metadata.last_refresh if metadata else None,
            pending_checks=len(self._checks),
        )
