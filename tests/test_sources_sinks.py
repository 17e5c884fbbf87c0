import asyncio
import json

import httpx

from collector.sinks import LoggingEventSink, WebhookEventSink, dispatch
from collector.sources import HttpGameSource, build_sources, fetch_all
from shared.models import LobbyEvent

FEEDS = {
    "https://feeds.test/ae": httpx.Response(200, json={"players": ["Alice"], "lobbies": []}),
    "https://feeds.test/pr": httpx.Response(503),
    "https://feeds.test/mv": httpx.Response(200, text="<html>"),
}


def feed_client() -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return FEEDS[str(request.url)]

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class SlowSource:
    game = "apoc"

    async def fetch(self):
        await asyncio.sleep(10)
        return {"players": ["Late"]}


class BrokenSource:
    game = "broken"

    async def fetch(self):
        raise RuntimeError("adapter bug")


async def test_http_source_returns_payload():
    async with feed_client() as client:
        source = HttpGameSource("ae", "https://feeds.test/ae", client)
        assert await source.fetch() == {"players": ["Alice"], "lobbies": []}


async def test_http_source_swallows_upstream_errors():
    async with feed_client() as client:
        assert await HttpGameSource("pr", "https://feeds.test/pr", client).fetch() is None
        assert await HttpGameSource("mv", "https://feeds.test/mv", client).fetch() is None


async def test_fetch_all_skips_failed_and_late_games():
    async with feed_client() as client:
        sources = build_sources({game: f"https://feeds.test/{game}" for game in ("ae", "pr", "mv")}, client)
        payloads = await fetch_all([*sources, SlowSource(), BrokenSource()], timeout=0.05)

    assert payloads == {"ae": {"players": ["Alice"], "lobbies": []}}


async def test_fetch_all_without_sources():
    assert await fetch_all([], timeout=1) == {}


def event(name="Bob's Race"):
    return LobbyEvent(
        kind="new", game="ae", lobby_name=name, players=("Bob",), player_count=1, max_players=8
    )


async def test_webhook_sink_posts_event_json():
    received = []

    def handler(request: httpx.Request) -> httpx.Response:
        received.append(json.loads(request.content))
        return httpx.Response(204)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        failures = await dispatch([event()], [LoggingEventSink(), WebhookEventSink("https://hooks.test/", client)])

    assert failures == 0
    assert received == [event().to_dict()]


async def test_dispatch_counts_failed_deliveries():
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500))) as client:
        sink = WebhookEventSink("https://hooks.test/", client)
        failures = await dispatch([event("One"), event("Two")], [sink])

    assert failures == 2
