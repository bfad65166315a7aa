"""standhub telemetry library."""

from .logger import new_logger
from .metrics import (
    auth_lost_total,
    reservation_total,
    token_refresh_total,
    unauthorized_total,
)

__all__ = [
    "new_logger",
    "token_refresh_total",
    "auth_lost_total",
    "unauthorized_total",
    "reservation_total",
]
