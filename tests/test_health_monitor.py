"""
Peer health probing against a mocked transport.
"""

import httpx

from privatediary.services.health_monitor import HealthMonitor


def _monitor(handler) -> HealthMonitor:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HealthMonitor("http://peer.test/", client=client, timeout=1)


async def test_healthy_peer_is_available():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json={"status": "healthy", "role": "primary"})

    monitor = _monitor(handler)
    assert monitor.peer_available is False

    status = await monitor.probe()

    assert status.ok is True
    assert status.peer_role == "primary"
    assert monitor.peer_available is True
    assert seen == ["http://peer.test/api/health"]


async def test_unhealthy_payload_counts_as_down():
    monitor = _monitor(lambda request: httpx.Response(200, json={"status": "unhealthy"}))

    status = await monitor.probe()

    assert status.ok is False
    assert "unhealthy" in status.error
    assert monitor.peer_available is False


async def test_http_error_status_counts_as_down():
    monitor = _monitor(lambda request: httpx.Response(500, text="boom"))

    status = await monitor.probe()

    assert status.ok is False
    assert "500" in status.error


async def test_invalid_json_counts_as_down():
    monitor = _monitor(lambda request: httpx.Response(200, text="not json"))

    status = await monitor.probe()

    assert status.ok is False
    assert "invalid JSON" in status.error


async def test_non_object_payload_counts_as_down():
    responses = iter([
        httpx.Response(200, json={"status": "healthy", "role": "primary"}),
        httpx.Response(200, json=["healthy"]),
    ])
    monitor = _monitor(lambda request: next(responses))
    await monitor.probe()
    assert monitor.peer_available is True

    status = await monitor.probe()

    assert status.ok is False
    assert "non-object" in status.error
    assert monitor.peer_available is False


async def test_connection_error_never_raises_and_counts_failures(caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    monitor = _monitor(handler)

    first = await monitor.probe()
    second = await monitor.probe()

    assert first.ok is False and second.ok is False
    assert second.consecutive_failures == 2
    assert "is down" in caplog.text


async def test_recovery_resets_failure_count():
    responses = iter([
        httpx.Response(503),
        httpx.Response(200, json={"status": "healthy", "role": "secondary"}),
    ])
    monitor = _monitor(lambda request: next(responses))

    await monitor.probe()
    status = await monitor.probe()

    assert status.ok is True
    assert status.consecutive_failures == 0
    assert status.to_dict()["peer_role"] == "secondary"


async def test_close_leaves_injected_client_open():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))
    monitor = HealthMonitor("http://peer.test", client=client)

    await monitor.close()

    assert client.is_closed is False
    await client.aclose()
