"""standhub background auth library."""

from .context import AuthContext
from .models import AuthStatus, BackgroundAuthConfig, ServiceState
from .service import BackgroundAuthService

__all__ = [
    "AuthContext",
    "AuthStatus",
    "BackgroundAuthConfig",
    "BackgroundAuthService",
    "ServiceState",
]
