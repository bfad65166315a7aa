"""standhub events library."""

from .subscribers import Subscribers, Unsubscribe

__all__ = [
    "Subscribers",
    "Unsubscribe",
]
