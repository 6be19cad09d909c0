import logging

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from config import Settings
from uablock.main import create_app
from uablock.middlewares import RequestIdMiddleware, UserAgentFilterMiddleware
from uablock.security.blocker import UserAgentBlocker
from uablock.security.ua_guard import require_allowed_agent

BROWSER_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


def _make_app(blocker=None, **kwargs):
    test_app = FastAPI()
    test_app.add_middleware(UserAgentFilterMiddleware, blocker=blocker, **kwargs)
    test_app.add_middleware(RequestIdMiddleware)

    @test_app.get("/echo")
    async def echo():
        return {"ok": True}

    @test_app.get("/health")
    async def health():
        return {"ok": True}

    return test_app


def test_blocked_agent_gets_403():
    client = TestClient(_make_app(UserAgentBlocker()))
    resp = client.get("/echo", headers={"User-Agent": "curl/7.68.0"})
    assert resp.status_code == 403
    body = resp.json()
    assert body["ok"] is False
    assert body["error"]["code"] == "UA_BLOCKED"
    assert (
        body["error"]["message"]
        == "Access denied: User agent contains blocked pattern 'curl'"
    )


def test_blocked_response_carries_request_id():
    client = TestClient(_make_app(UserAgentBlocker()))
    resp = client.get(
        "/echo", headers={"User-Agent": "Googlebot/2.1", "X-Request-ID": "abc"}
    )
    assert resp.status_code == 403
    assert resp.headers["X-Request-ID"] == "abc"
    assert resp.json()["request_id"] == "abc"


def test_browser_passes():
    client = TestClient(_make_app(UserAgentBlocker()))
    resp = client.get("/echo", headers={"User-Agent": BROWSER_UA})
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_empty_user_agent_passes():
    client = TestClient(_make_app(UserAgentBlocker()))
    resp = client.get("/echo", headers={"User-Agent": ""})
    assert resp.status_code == 200


def test_custom_status_and_exempt_path():
    client = TestClient(
        _make_app(UserAgentBlocker(), status_code=429, exempt_paths=["/health"])
    )
    headers = {"User-Agent": "Scrapy/2.11"}
    assert client.get("/echo", headers=headers).status_code == 429
    assert client.get("/health", headers=headers).status_code == 200


def test_blocker_from_app_state_sees_mutations():
    test_app = _make_app()
    blocker = UserAgentBlocker()
    test_app.state.ua_blocker = blocker
    client = TestClient(test_app)
    headers = {"User-Agent": "FancyFetcher/1.0"}

    assert client.get("/echo", headers=headers).status_code == 200
    blocker.add_pattern("fancyfetcher")
    assert client.get("/echo", headers=headers).status_code == 403
    blocker.remove_pattern("fancyfetcher")
    assert client.get("/echo", headers=headers).status_code == 200


def test_no_blocker_configured_passes():
    client = TestClient(_make_app())
    resp = client.get("/echo", headers={"User-Agent": "curl/7.68.0"})
    assert resp.status_code == 200


def test_block_is_logged(caplog):
    client = TestClient(_make_app(UserAgentBlocker()))
    with caplog.at_level(logging.INFO, logger="api"):
        client.get("/echo", headers={"User-Agent": "Wget/1.21"})
    record = next(r for r in caplog.records if r.getMessage() == "blocked user agent")
    assert record.pattern == "wget"
    assert record.route == "/echo"
    assert record.status == 403


def test_route_dependency():
    test_app = FastAPI()
    test_app.state.ua_blocker = UserAgentBlocker()

    @test_app.get("/guarded", dependencies=[Depends(require_allowed_agent)])
    async def guarded():
        return {"ok": True}

    client = TestClient(test_app)
    resp = client.get("/guarded", headers={"User-Agent": "HTTrack 3.0"})
    assert resp.status_code == 403
    assert resp.json()["detail"]["error"]["code"] == "UA_BLOCKED"
    assert "'httrack'" in resp.json()["detail"]["error"]["message"]
    assert client.get("/guarded", headers={"User-Agent": BROWSER_UA}).status_code == 200


def test_route_dependency_without_blocker():
    test_app = FastAPI()

    @test_app.get("/guarded", dependencies=[Depends(require_allowed_agent)])
    async def guarded():
        return {"ok": True}

    client = TestClient(test_app)
    resp = client.get("/guarded", headers={"User-Agent": "curl/8"})
    assert resp.status_code == 503
    assert resp.json()["detail"]["error"]["code"] == "UA_BLOCKER_MISSING"


def test_create_app_defaults():
    client = TestClient(create_app(settings=Settings()))
    assert client.get("/health", headers={"User-Agent": "curl/8"}).status_code == 200
    resp = client.get("/admin/patterns", headers={"User-Agent": "curl/8"})
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "UA_BLOCKED"


def test_create_app_loads_pattern_file(tmp_path):
    path = tmp_path / "patterns.txt"
    path.write_text("zgrab\n", encoding="utf-8")
    test_app = create_app(settings=Settings(ua_block_file=str(path)))
    assert "zgrab" in test_app.state.ua_blocker
    client = TestClient(test_app)
    resp = client.get("/admin/patterns/check?ua=x", headers={"User-Agent": "zgrab/0.x"})
    assert resp.status_code == 403
