import asyncio

import httpx
import pytest

from variant_engine.sequences.sequence_client import (
    NEXT_SEQUENCES_PATH,
    HttpSequenceReserver,
    SequenceReservationError,
)


def _counter_service(start=1, seen=None):
    state = {"next": start}

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        count = int(request.url.params["count"])
        seqs = list(range(state["next"], state["next"] + count))
        state["next"] += count
        return httpx.Response(200, json={"success": True, "data": {"sequences": seqs}})

    return httpx.MockTransport(handler)


def test_reserve_returns_numbers_and_sends_token():
    seen = []
    reserver = HttpSequenceReserver(
        base_url="https://shop.test/", token="t0k", transport=_counter_service(40, seen)
    )
    assert asyncio.run(reserver.reserve(3)) == [40, 41, 42]
    (req,) = seen
    assert req.url.path == NEXT_SEQUENCES_PATH
    assert req.headers["Authorization"] == "Bearer t0k"


def test_large_requests_are_split_into_batches():
    seen = []
    reserver = HttpSequenceReserver(
        base_url="https://shop.test", token="", batch_limit=2, transport=_counter_service(1, seen)
    )
    assert asyncio.run(reserver.reserve(5)) == [1, 2, 3, 4, 5]
    assert [int(r.url.params["count"]) for r in seen] == [2, 2, 1]
    assert "Authorization" not in seen[0].headers


def test_zero_count_makes_no_call():
    seen = []
    reserver = HttpSequenceReserver(base_url="https://shop.test", transport=_counter_service(1, seen))
    assert asyncio.run(reserver.reserve(0)) == []
    assert seen == []


def test_missing_url_raises():
    reserver = HttpSequenceReserver(base_url="")
    with pytest.raises(SequenceReservationError):
        asyncio.run(reserver.reserve(1))


@pytest.mark.parametrize("response", [
    httpx.Response(500, text="boom"),
    httpx.Response(200, json={"success": False, "error": "limit"}),
    httpx.Response(200, json={"success": True, "data": {}}),
    httpx.Response(200, text="not json"),
])
def test_bad_responses_raise(response):
    transport = httpx.MockTransport(lambda request: response)
    reserver = HttpSequenceReserver(base_url="https://shop.test", transport=transport)
    with pytest.raises(SequenceReservationError):
        asyncio.run(reserver.reserve(2))


def test_connection_error_raises():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    reserver = HttpSequenceReserver(base_url="https://shop.test", transport=httpx.MockTransport(handler))
    with pytest.raises(SequenceReservationError):
        asyncio.run(reserver.reserve(1))
