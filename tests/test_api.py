from fastapi.testclient import TestClient

from efis_adapter.api import create_app
from efis_adapter.core.config import load_config
from efis_adapter.core.roles import SourceRole
from efis_adapter.core.service import build_service
from efis_adapter.io.generators import SimulatedAutopilot, SimulatedGenerator, SimulatedInclinometer


def make_client(**generator_kwargs) -> TestClient:
    service = build_service(
        load_config(),
        SimulatedGenerator(**generator_kwargs),
        SimulatedAutopilot(),
        inclinometer=SimulatedInclinometer(clock=lambda: 0.5),
    )
    return TestClient(create_app(service))


def test_info_lists_roles_and_categories():
    resp = make_client().get("/v1/info")
    assert resp.status_code == 200
    data = resp.json()
    assert data["roles"] == ["central", "copilot"]
    assert data["stalled_roles"] == []
    assert "NAV1" in data["categories"]
    assert "MAINT" not in data["categories"]


def test_hsi_readout_falls_back():
    client = make_client(offline=[SourceRole.CENTRAL])
    resp = client.post("/v1/readout/hsi", json={"category_id": "NAV1", "symbol_generator_id": 1})
    assert resp.status_code == 200
    data = resp.json()
    assert data["available"] is True
    assert data["role"] == "copilot"
    assert 0.0 <= data["view"]["heading"] < 360.0


def test_speed_and_vsi_readouts():
    client = make_client()
    for path in ("/v1/readout/speed", "/v1/readout/vsi"):
        resp = client.post(path, json={"category_id": "NAV2"})
        assert resp.status_code == 200
        assert resp.json()["role"] == "central"


def test_unknown_category_is_rejected_and_sanitized():
    resp = make_client().post("/v1/readout/speed", json={"category_id": "<img src=x>"})
    assert resp.status_code == 404
    detail = resp.json()["detail"]
    assert detail["error"] == "unknown_category"
    assert detail["category_id"] == ""
    assert "available" not in detail
    assert "<img" not in resp.text
    assert "NAV1" not in resp.text


def test_degraded_states_are_not_errors():
    client = make_client(failing=[SourceRole.CENTRAL, SourceRole.COPILOT])
    resp = client.post("/v1/readout/vsi", json={"category_id": "NAV1"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["available"] is False
    assert data["status"] == "sources_failed"
    assert data["view"] is None


def test_nav_mode_and_inclinometer():
    client = make_client()
    nav = client.post("/v1/readout/nav-mode", json={"category_id": "NAV1"}).json()
    assert nav["view"]["mode_name"] == "LNAV"
    assert nav["view"]["vertical_guidance"] == -0.35
    incl = client.post("/v1/readout/inclinometer", json={"sensor_key": "left"}).json()
    assert incl["available"] is True
    assert incl["view"][0]["sensor_array"] == "left"


def test_shutdown_closes_service(monkeypatch):
    service = build_service(load_config(), SimulatedGenerator(), SimulatedAutopilot())
    closed = []
    monkeypatch.setattr(service, "close", lambda: closed.append(True))
    with TestClient(create_app(service)) as client:
        assert client.get("/v1/info").status_code == 200
    assert closed == [True]
