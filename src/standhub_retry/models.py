"""Retry policy."""

from __future__ import annotations

import random
from dataclasses import dataclass


@dataclass
class RetryConfig:
    """Retry policy.

    ``max_retries`` counts retries after the first attempt, so a call is made
    at most ``max_retries + 1`` times.
    """

    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    multiplier: float = 2.0
    jitter: bool = False

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def compute_delay(self, attempt: int) -> float:
        """Return the delay in seconds before retry number ``attempt`` (0-based)."""
        base = self.initial_delay * (self.multiplier**attempt)
        capped = min(base, self.max_delay)
        if self.jitter:
            return capped * (0.9 + random.random() * 0.2)
        return capped
