"""Application-owned wiring of the session components."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from types import TracebackType

import structlog

from standhub_config import AppConfig
from standhub_events import Subscribers
from standhub_telemetry import new_logger
from standhub_token_api import HttpTokenApiClient, TokenApiClient, TokenApiConfig
from standhub_token_refresh import (
    HttpTokenRefreshClient,
    TokenRefreshClient,
    TokenRefreshConfig,
)
from standhub_token_storage import (
    FileTokenStorage,
    InMemoryTokenStorage,
    TokenRecord,
    TokenStorage,
    now_ms,
)

from .models import BackgroundAuthConfig
from .service import BackgroundAuthService

logger = structlog.get_logger(__name__)


@dataclass
class AuthContext:
    """Owns one session's storage, clients and background service.

    Create one per application session and pass it to the code that needs
    it. Used as an async context manager it starts the service on entry and
    stops it on exit, waiting for in-flight checks.
    """

    storage: TokenStorage
    refresh_client: TokenRefreshClient
    api_client: TokenApiClient
    service: BackgroundAuthService

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        *,
        clock: Callable[[], int] = now_ms,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        configure_logging: bool = True,
    ) -> AuthContext:
        """Build every component from ``config``.

        Applies ``observability.log`` to structlog unless
        ``configure_logging`` is False, for hosts that set up logging
        themselves.
        """
        if configure_logging:
            log = config.observability.log
            new_logger(level=log.level, format=log.format)
        auth = config.auth
        storage: TokenStorage
        if config.storage.path:
            storage = FileTokenStorage(
                config.storage.path,
                refresh_threshold=auth.refresh_threshold_seconds,
                min_refresh_interval=auth.min_refresh_interval_seconds,
                clock=clock,
            )
        else:
            storage = InMemoryTokenStorage(
                refresh_threshold=auth.refresh_threshold_seconds,
                min_refresh_interval=auth.min_refresh_interval_seconds,
                clock=clock,
            )

        api_client = HttpTokenApiClient(
            TokenApiConfig(
                base_url=config.api.base_url,
                timeout_seconds=config.api.timeout_seconds,
                api_key=config.api.api_key,
            ),
            Subscribers("unauthorized"),
        )
        refresh_client = HttpTokenRefreshClient(
            TokenRefreshConfig(
                base_url=config.api.base_url,
                timeout_seconds=config.api.timeout_seconds,
                max_retries=auth.max_retries,
                initial_delay=auth.initial_delay_seconds,
                api_key=config.api.api_key,
            ),
            sleep=sleep,
        )
        service = BackgroundAuthService(
            storage,
            refresh_client,
            api_client,
            BackgroundAuthConfig.from_section(auth),
        )
        return cls(
            storage=storage,
            refresh_client=refresh_client,
            api_client=api_client,
            service=service,
        )

    def login(self, token: str, expires_at: int, user_id: str = "") -> TokenRecord:
        """Persist the token issued by a fresh sign-in."""
        self.storage.clear_token_storage()
        record = self.storage.save_token_with_metadata(token, expires_at, user_id)
        logger.info("session_started", user_id=record.user_id, expires_at=expires_at)
        return record

    async def logout(self) -> None:
        """Stop monitoring and drop the stored session."""
        self.service.stop()
        await self.service.wait_idle()
        self.storage.clear_token_storage()
        logger.info("session_ended")

    async def __aenter__(self) -> AuthContext:
        self.service.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.service.stop()
        await self.service.wait_idle()
