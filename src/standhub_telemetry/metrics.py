"""OpenTelemetry counters for session and credit operations."""

from __future__ import annotations

from opentelemetry import metrics

_meter = metrics.get_meter("standhub", version="0.1.0")

token_refresh_total = _meter.create_counter(
    name="token_refresh_total",
    description="Session token refresh attempts by outcome",
    unit="1",
)

auth_lost_total = _meter.create_counter(
    name="auth_lost_total",
    description="Number of times the session was declared lost",
    unit="1",
)

unauthorized_total = _meter.create_counter(
    name="unauthorized_total",
    description="Unauthorized responses seen by the token API client",
    unit="1",
)

reservation_total = _meter.create_counter(
    name="reservation_total",
    description="Credit reservation operations by outcome",
    unit="1",
)
