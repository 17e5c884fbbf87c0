from aiohttp import test_utils

from collector.core import DataCollector
from collector.core.health_server import HealthCheckServer


async def test_health_reports_readiness_after_first_cycle(json_repository, t0):
    collector = DataCollector(json_repository)
    server = HealthCheckServer(collector)

    async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
        before = await (await client.get("/health")).json()
        collector.record_cycle({"ae": {"players": ["Alice"]}}, t0)
        after = await (await client.get("/health")).json()
        status = await (await client.get("/status")).json()
        ping = await client.get("/ping")

        assert before == {"status": "starting", "ready": False}
        assert after == {"status": "healthy", "ready": True}
        assert status["cycles"] == 1
        assert status["snapshots"] == 1
        assert status["persistence_available"] is True
        assert await ping.text() == "pong"
