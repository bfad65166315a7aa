"""Background auth service models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from standhub_config import AuthSection

CHECK_INTERVAL_SECONDS = 3 * 60


class ServiceState(StrEnum):
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass
class BackgroundAuthConfig:
    """Background auth service settings."""

    check_interval: float = CHECK_INTERVAL_SECONDS  # seconds

    @classmethod
    def from_section(cls, section: AuthSection) -> BackgroundAuthConfig:
        return cls(check_interval=section.check_interval_seconds)


@dataclass(frozen=True)
class AuthStatus:
    """Snapshot of the service and the stored session, for diagnostics."""

    state: ServiceState
    has_token: bool
    expires_at: int | None
    time_until_expiration: int  # ms
    refresh_count: int
    last_refresh: int | None
    pending_checks: int
