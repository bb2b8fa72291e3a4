import asyncio

from fastapi.testclient import TestClient

import web.app
from config import settings
from utils.errors import FigmaApiError
from web.app import create_app
from web.bridge import ProgressBridge

PLAN = {"features": {"status": "ready", "plugins": []}}


# ============================================================
# 进度桥
# ============================================================


def test_bridge_drops_repeated_messages() -> None:
    bridge = ProgressBridge()

    async def scenario():
        queue = bridge.subscribe()
        callback = bridge.progress_callback("b1")
        await callback("phase", "Phase 1/3")
        await callback("phase", "Phase 1/3")
        await callback("phase", "Phase 2/3")
        await bridge.emit("b2", "phase", "Phase 1/3")
        received = queue.qsize()
        bridge.unsubscribe(queue)
        await bridge.emit("b2", "complete", "done")
        return received, queue.qsize()

    received, after_unsubscribe = asyncio.run(scenario())
    assert received == 3
    assert after_unsubscribe == 3
    assert [e["message"] for e in bridge.get_history("b1")] == ["Phase 1/3", "Phase 2/3"]
    assert len(bridge.get_history()) == 4


def test_bridge_history_is_bounded_and_finished_builds_forgotten() -> None:
    bridge = ProgressBridge(history_limit=3)

    async def scenario():
        for index in range(4):
            await bridge.emit("b1", "phase", f"Phase {index}")
        await bridge.emit("b2", "error", "stopped")
        await bridge.emit("b1", "complete", "done")

    asyncio.run(scenario())
    assert [e["message"] for e in bridge.get_history()] == ["Phase 3", "stopped", "done"]
    assert bridge._last == {}


# ============================================================
# HTTP / WebSocket
# ============================================================


def _client(make_site) -> TestClient:
    app = create_app(
        site_factory=lambda name, site_id: make_site(name=name, site_id=site_id or "site-1"),
        settle_seconds=0,
    )
    return TestClient(app)


def test_build_lifecycle(make_site) -> None:
    with _client(make_site) as client:
        response = client.post("/api/builds", json={"siteName": "demo", "plan": PLAN})
        assert response.status_code == 200
        build_id = response.json()["buildId"]
        assert response.json()["state"] == "pending"

        signal = client.post(f"/api/builds/{build_id}/installed", json={})
        assert signal.status_code == 202
        assert signal.json()["accepted"] is True

        status = client.get(f"/api/builds/{build_id}").json()
        assert status["state"] == "cleaned"
        assert status["siteId"] == "site-1"
        assert status["summary"]["success"] is True

        duplicate = client.post(f"/api/builds/{build_id}/installed", json={"siteId": "site-1"})
        assert duplicate.json()["accepted"] is False

        events = client.get("/api/history", params={"build_id": build_id}).json()["events"]
        assert [e["event"] for e in events] == ["preflight", "complete"]


def test_invalid_requests_are_rejected(make_site) -> None:
    with _client(make_site) as client:
        assert client.post("/api/builds", json={"siteName": "../etc", "plan": PLAN}).status_code == 400
        bad_plan = {"design": {"theme": {"childThemeName": "../x"}}}
        assert client.post("/api/builds", json={"siteName": "demo", "plan": bad_plan}).status_code == 400
        assert client.get("/api/builds/nope").status_code == 404
        assert client.post("/api/builds/nope/installed", json={}).status_code == 404


def test_websocket_replays_history(make_site) -> None:
    with _client(make_site) as client:
        build_id = client.post("/api/builds", json={"siteName": "demo", "plan": PLAN}).json()["buildId"]
        client.post(f"/api/builds/{build_id}/installed", json={})

        with client.websocket_connect("/ws") as ws:
            assert ws.receive_json()["event"] == "preflight"
            assert ws.receive_json()["event"] == "complete"
            ws.send_json({"type": "history", "buildId": build_id})
            replay = ws.receive_json()
            assert replay["buildId"] == build_id
            assert replay["event"] == "preflight"


def test_figma_failures_are_reported_not_crashed(make_site, monkeypatch) -> None:
    request = {"siteName": "demo", "plan": PLAN, "figmaUrl": "https://www.figma.com/design/AbC/Site"}
    monkeypatch.setattr(settings, "FIGMA_API_KEY", "")
    with _client(make_site) as client:
        response = client.post("/api/builds", json=request)
        assert response.status_code == 502
        assert "FIGMA_API_KEY" in response.json()["detail"]

    def missing_file(url):
        raise FigmaApiError("获取 Figma 文件 AbC 失败 (404)", 404)

    monkeypatch.setattr(web.app, "analyze_figma_url", missing_file)
    with _client(make_site) as client:
        response = client.post("/api/builds", json=request)
        assert response.status_code == 502
        assert "404" in response.json()["detail"]
