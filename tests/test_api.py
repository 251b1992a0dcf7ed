from datetime import datetime

import pytest

import config.testing as testing_settings
from src.office_erp.office_erp.container import assemble
from src.office_erp.office_erp.main import create_app
from tests.fakes import (
    OFFICE_IP,
    OUTSIDE_IP,
    WORK_DAY,
    FakeAttendanceRepo,
    FakeEmployeesRepo,
    FakeNetworksRepo,
    FakeRequestsRepo,
    FakeRewardsRepo,
    FakeTasksRepo,
    FixedClock,
    RecordingNotifier,
)


@pytest.fixture
def app():
    attendance = FakeAttendanceRepo()
    container = assemble(
        employees_repo=FakeEmployeesRepo(),
        networks_repo=FakeNetworksRepo([("HQ", OFFICE_IP, True)]),
        attendance_repo=attendance,
        requests_repo=FakeRequestsRepo(attendance),
        rewards_repo=FakeRewardsRepo(),
        tasks_repo=FakeTasksRepo(),
        settings=testing_settings,
        notifier=RecordingNotifier(),
        clock=FixedClock(datetime(2026, 3, 2, 8, 55)),
    )
    return create_app("config.testing", container=container)


def client_for(app, ip=OFFICE_IP):
    client = app.test_client()
    client.environ_base["REMOTE_ADDR"] = ip
    return client


def login(client, username, password):
    resp = client.post("/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp


def test_requires_login(app):
    resp = client_for(app).post("/attendance/check-in", json={"fingerprint": "fp-1"})

    assert resp.status_code == 401
    assert resp.get_json()["error"]["kind"] == "authorization_denied"


def test_bad_password_is_rejected(app):
    resp = client_for(app).post("/auth/login", json={"username": "admin", "password": "nope"})

    assert resp.status_code == 403
    assert resp.get_json()["success"] is False


def test_check_in_uses_connection_address(app):
    client = client_for(app)
    login(client, "nguyenvana", "staff123")

    resp = client.post("/attendance/check-in", json={"fingerprint": "fp-1", "ip": "10.9.9.9"})

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["data"]["ip"] == OFFICE_IP
    assert body["data"]["status"] == "ON_TIME"
    assert body["data"]["work_date"] == WORK_DAY.isoformat()

    again = client.post("/attendance/check-in", json={"fingerprint": "fp-1"})
    assert again.status_code == 409
    assert again.get_json()["error"]["code"] == "AlreadyCheckedIn"


def test_check_in_from_outside_network(app):
    client = client_for(app, OUTSIDE_IP)
    login(client, "nguyenvana", "staff123")

    resp = client.post("/attendance/check-in", json={"fingerprint": "fp-1", "ip": OFFICE_IP})

    assert resp.status_code == 403
    assert resp.get_json()["error"] == {"kind": "authorization_denied", "code": "OutsideAllowedNetwork"}


def test_admin_routes_need_admin(app):
    client = client_for(app)
    login(client, "nguyenvana", "staff123")

    assert client.get("/rewards").status_code == 403
    assert client.get("/office-ip").status_code == 403
    assert client.get("/rewards/employee-stats").status_code == 200


def test_reward_flow_over_http(app):
    client = client_for(app)
    login(client, "admin", "admin123")

    created = client.post(
        "/rewards",
        json={"name": "Quỹ Tết", "initial_amount": 1_000_000, "start_date": "2026-01-01", "event_type": "new_year"},
    ).get_json()
    reward_id = created["data"]["reward_id"]

    ok = client.post("/rewards/deduct", json={"reward_id": reward_id, "amount": 300_000})
    assert ok.get_json()["data"]["current_amount"] == 700_000

    too_much = client.post("/rewards/deduct", json={"reward_id": reward_id, "amount": 800_000})
    assert too_much.status_code == 409
    assert too_much.get_json()["error"]["code"] == "InsufficientBalance"

    listing = client.get("/rewards?limit=5").get_json()["data"]
    assert listing["total"] == 1
    assert listing["items"][0]["current_amount"] == 700_000

    entries = client.get(f"/rewards/{reward_id}/entries").get_json()["data"]
    assert [e["entry_type"] for e in entries] == ["deduction", "deposit"]


def test_qr_code_is_public(app):
    resp = client_for(app).get("/attendance/qr-code")

    data = resp.get_json()["data"]
    assert data["attendance_url"] == "https://erp.example.test/attendance"
    assert data["qr_code"].startswith("data:image/png;base64,")
