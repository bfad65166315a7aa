"""run_with_reservation unit tests."""

import asyncio
import json

import httpx
import pytest
import respx
from structlog.testing import CapturingLogger
import standhub_token_api.reservation as reservation_module
from standhub_token_api import (
    HttpTokenApiClient,
    TokenApiConfig,
    TokenApiError,
    TokenApiErrorCodes,
    run_with_reservation,
)

BASE_URL = "https://api.standhub.test/functions/v1"
TOKEN = "session-token"


@pytest.fixture
def api() -> HttpTokenApiClient:
    return HttpTokenApiClient(TokenApiConfig(base_url=BASE_URL))


@pytest.fixture
def routes():
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as mock:
        yield {
            "reserve": mock.post("/reserve-tokens"),
            "commit": mock.post("/commit-reservation").mock(
                return_value=httpx.Response(200, json={"success": True, "newBalance": 5})
            ),
            "rollback": mock.post("/rollback-reservation").mock(
                return_value=httpx.Response(200, json={"success": True, "newBalance": 10})
            ),
        }


def reserve_ok(routes) -> None:
    routes["reserve"].mock(
        return_value=httpx.Response(200, json={"reservationId": "res-1", "newBalance": 5})
    )


async def test_refused_reservation_skips_generation(api, routes) -> None:
    """Insufficient balance returns without generating or resolving."""
    routes["reserve"].mock(
        return_value=httpx.Response(
            403, json={"error": "Insufficient tokens", "availableBalance": 2, "required": 5}
        )
    )
    generated: list[str] = []

    async def generate() -> str:
        generated.append("called")
        return "https://cdn/x.png"

    outcome = await run_with_reservation(api, TOKEN, "stand_render", 5, generate)

    assert generated == []
    assert outcome.reservation.success is False
    assert outcome.reservation.available_balance == 2
    assert outcome.resolution is None
    assert not outcome.committed
    assert not routes["commit"].called
    assert not routes["rollback"].called


async def test_successful_generation_commits_once(api, routes) -> None:
    """A produced artifact commits the reservation exactly once."""
    reserve_ok(routes)

    async def generate() -> str:
        return "https://cdn/stand.png"

    outcome = await run_with_reservation(api, TOKEN, "stand_render", 5, generate)

    assert outcome.committed
    assert outcome.result_url == "https://cdn/stand.png"
    assert routes["commit"].call_count == 1
    assert json.loads(routes["commit"].calls.last.request.content) == {
        "reservationId": "res-1",
        "aiResultUrl": "https://cdn/stand.png",
    }
    assert not routes["rollback"].called


async def test_failed_generation_rolls_back_and_reraises(api, routes) -> None:
    """A failing generator rolls back once and the error propagates."""
    reserve_ok(routes)

    async def generate() -> str:
        raise RuntimeError("model timeout")

    with pytest.raises(RuntimeError, match="model timeout"):
        await run_with_reservation(api, TOKEN, "stand_render", 5, generate)

    assert routes["rollback"].call_count == 1
    body = json.loads(routes["rollback"].calls.last.request.content)
    assert body["reservationId"] == "res-1"
    assert "model timeout" in body["reason"]
    assert not routes["commit"].called


async def test_cancelled_generation_rolls_back(api, routes) -> None:
    """Cancellation during generation rolls back before propagating."""
    reserve_ok(routes)

    async def generate() -> str:
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await run_with_reservation(api, TOKEN, "stand_render", 5, generate)

    assert routes["rollback"].call_count == 1
    body = json.loads(routes["rollback"].calls.last.request.content)
    assert body["reason"] == "Generation cancelled"


async def test_rollback_failure_does_not_mask_generation_error(api, routes) -> None:
    """A rollback that fails is logged; the generator's error still propagates."""
    reserve_ok(routes)
    routes["rollback"].mock(return_value=httpx.Response(500, text="boom"))

    async def generate() -> str:
        raise ValueError("bad prompt")

    with pytest.raises(ValueError, match="bad prompt"):
        await run_with_reservation(api, TOKEN, "stand_render", 5, generate)

    assert routes["rollback"].call_count == 1


async def test_refused_commit_is_not_committed(api, routes) -> None:
    """An already-resolved commit reports committed False without retrying."""
    reserve_ok(routes)
    routes["commit"].mock(
        return_value=httpx.Response(404, json={"error": "Reservation already committed"})
    )

    async def generate() -> str:
        return "https://cdn/stand.png"

    outcome = await run_with_reservation(api, TOKEN, "stand_render", 5, generate)

    assert not outcome.committed
    assert outcome.resolution is not None
    assert outcome.resolution.error == "Reservation already committed"
    assert routes["commit"].call_count == 1


async def test_commit_error_is_logged_and_reraised(api, routes, monkeypatch) -> None:
    """A commit that raises is logged with the reservation id, then propagates."""
    reserve_ok(routes)
    routes["commit"].mock(return_value=httpx.Response(503, text="unavailable"))
    captured = CapturingLogger()
    monkeypatch.setattr(reservation_module, "logger", captured)

    async def generate() -> str:
        return "https://cdn/stand.png"

    with pytest.raises(TokenApiError) as exc_info:
        await run_with_reservation(api, TOKEN, "stand_render", 5, generate)

    assert exc_info.value.code == TokenApiErrorCodes.HTTP_ERROR
    failures = [c for c in captured.calls if c.args == ("reservation_commit_failed",)]
    assert len(failures) == 1
    assert failures[0].method_name == "exception"
    assert failures[0].kwargs["reservation_id"] == "res-1"
    assert not routes["rollback"].called
