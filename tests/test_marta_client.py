"""Tests for the MARTA real-time client (no network: httpx MockTransport)."""

import httpx
import pytest

from src.smarta.providers.base import FetchError
from src.smarta.providers.marta import MartaClient

API_URL = "https://developer.itsmarta.com/RealtimeTrain/RestServiceNextTrain/GetRealtimeArrivals"

SAMPLE_RESPONSE = [
    {
        "DESTINATION": "North Springs",
        "DIRECTION": "N",
        "EVENT_TIME": "10/17/2026 8:14:20 PM",
        "LINE": "RED",
        "NEXT_ARR": "08:14:32 PM",
        "STATION": "FIVE POINTS STATION",
        "TRAIN_ID": "403206",
        "WAITING_SECONDS": "-12",
        "WAITING_TIME": "Boarding",
    },
    {
        "DESTINATION": "Airport",
        "DIRECTION": "S",
        "EVENT_TIME": "10/17/2026 8:14:20 PM",
        "LINE": "GOLD",
        "NEXT_ARR": "08:17:40 PM",
        "STATION": "EAST LAKE STATION",
        "TRAIN_ID": "312506",
        "WAITING_SECONDS": 188,
        "WAITING_TIME": "3 min",
    },
]


def create_client(handler) -> MartaClient:
    return MartaClient(api_key="test-key", api_url=API_URL, transport=httpx.MockTransport(handler))


async def test_parses_trains_in_feed_order():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=SAMPLE_RESPONSE)

    trains = await create_client(handler).fetch_trains()

    assert [t.station for t in trains] == ["FIVE POINTS STATION", "EAST LAKE STATION"]
    first = trains[0]
    assert first.direction == "N"
    assert first.waiting_time == "Boarding"
    assert first.destination == "North Springs"
    assert first.train_id == "403206"
    assert trains[1].waiting_seconds == "188"

    assert requests[0].url.params["apikey"] == "test-key"
    assert requests[0].method == "GET"


async def test_malformed_entries_skipped():
    payload = [SAMPLE_RESPONSE[0], {"STATION": "NO DIRECTION STATION"}]

    trains = await create_client(lambda request: httpx.Response(200, json=payload)).fetch_trains()

    assert len(trains) == 1


async def test_empty_feed():
    trains = await create_client(lambda request: httpx.Response(200, json=[])).fetch_trains()

    assert trains == []


async def test_http_error_status_raises_fetch_error():
    client = create_client(lambda request: httpx.Response(401, text="Invalid API key"))

    with pytest.raises(FetchError, match="401"):
        await client.fetch_trains()


async def test_invalid_json_raises_fetch_error():
    client = create_client(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

    with pytest.raises(FetchError, match="invalid JSON"):
        await client.fetch_trains()


async def test_non_list_payload_raises_fetch_error():
    client = create_client(lambda request: httpx.Response(200, json={"error": "rate limited"}))

    with pytest.raises(FetchError, match="Unexpected MARTA payload"):
        await client.fetch_trains()


async def test_timeout_raises_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(FetchError, match="MARTA request failed"):
        await create_client(handler).fetch_trains()


async def test_connection_pool_reused_until_closed():
    client = create_client(lambda request: httpx.Response(200, json=[]))

    await client.fetch_trains()
    pooled = client._client
    await client.fetch_trains()

    assert client._client is pooled

    await client.aclose()
    assert pooled.is_closed
    assert client._client is None

    await client.fetch_trains()
    assert client._client is not pooled
