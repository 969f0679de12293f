"""Tests for the local JSON API."""

from datetime import datetime, timedelta, timezone

import pytest

from focusreport.core.config import get_default_config
from focusreport.core.focus_mode import FocusModeManager
from focusreport.core.models import Event, FocusViolation
from focusreport.core.pipeline import DailyReportPipeline
from focusreport.persistence.store import ActivityStore
from focusreport.ui.web import create_flask_app


@pytest.fixture
def store(tmp_path):
    s = ActivityStore(str(tmp_path / "test.db"))
    s.init_db()
    yield s
    s.close()


@pytest.fixture
def focus_mode():
    return FocusModeManager({"com.spotify.client"})


@pytest.fixture
def client(store, focus_mode):
    pipeline = DailyReportPipeline.from_config(get_default_config(), store)
    flask_app = create_flask_app(store, pipeline, focus_mode)
    flask_app.config["TESTING"] = True
    with flask_app.test_client() as c:
        yield c


def _record(store, start, seconds, app_id, name, title=None):
    for offset in range(0, seconds + 1, 2):
        store.append_event(
            Event(start + timedelta(seconds=offset), app_id, name, window_title=title)
        )


# ---------------------------------------------------------------------------
# GET /api/summary/daily
# ---------------------------------------------------------------------------

class TestDailySummaryEndpoint:
    def test_empty_day(self, client):
        resp = client.get("/api/summary/daily?date=2026-02-03")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["date"] == "2026-02-03"
        assert data["summary"].startswith("Daily Summary (Feb 3)")
        assert data["metrics"]["total_active_minutes"] == 0
        assert data["metrics"]["top_apps"] == []

    def test_with_activity(self, client, store):
        _record(store, datetime(2026, 2, 3, 9, 0, 0), 30 * 60,
                "com.microsoft.VSCode", "Code")

        data = client.get("/api/summary/daily?date=2026-02-03").get_json()

        assert data["metrics"]["total_active_minutes"] == 30
        assert data["metrics"]["deep_work_minutes"] == 30
        assert data["metrics"]["top_apps"] == [{"app_name": "Code", "minutes": 30}]
        assert "Code (30m)" in data["summary"]

    def test_rebuilds_stored_sessions(self, client, store):
        _record(store, datetime(2026, 2, 3, 9, 0, 0), 60, "com.apple.Terminal", "Terminal")
        start, end = datetime(2026, 2, 3), datetime(2026, 2, 4)
        assert store.fetch_sessions(start, end) == []

        client.get("/api/summary/daily?date=2026-02-03")

        sessions = store.fetch_sessions(start, end)
        assert [s.app_name for s in sessions] == ["Terminal"]

    def test_bad_date(self, client):
        resp = client.get("/api/summary/daily?date=03/02/2026")
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "date must be YYYY-MM-DD"}


# ---------------------------------------------------------------------------
# GET /api/sessions
# ---------------------------------------------------------------------------

class TestSessionsEndpoint:
    def test_sessions_after_rebuild(self, client, store):
        _record(store, datetime(2026, 2, 3, 9, 0, 0), 60,
                "com.google.Chrome", "Google Chrome", title="YouTube - Home")
        client.get("/api/summary/daily?date=2026-02-03")

        data = client.get("/api/sessions?date=2026-02-03").get_json()

        assert len(data) == 1
        session = data[0]
        assert session["app_name"] == "Google Chrome"
        assert session["start_time"] == "2026-02-03T09:00:00"
        assert session["duration_seconds"] == 60
        assert session["category"] == "distraction"

    def test_no_sessions_before_rebuild(self, client, store):
        _record(store, datetime(2026, 2, 3, 9, 0, 0), 60, "com.apple.Terminal", "Terminal")
        assert client.get("/api/sessions?date=2026-02-03").get_json() == []

    def test_bad_date(self, client):
        assert client.get("/api/sessions?date=nope").status_code == 400


# ---------------------------------------------------------------------------
# POST /api/events
# ---------------------------------------------------------------------------

class TestEventsEndpoint:
    def test_accepts_event(self, client, store):
        resp = client.post("/api/events", json={
            "timestamp": "2026-02-03T09:00:00",
            "app_identifier": "com.apple.Terminal",
            "app_name": "Terminal",
            "window_title": "zsh",
        })

        assert resp.status_code == 201
        assert resp.get_json()["id"] > 0
        events = store.fetch_events(datetime(2026, 2, 3), datetime(2026, 2, 4))
        assert events == [
            Event(datetime(2026, 2, 3, 9, 0, 0), "com.apple.Terminal", "Terminal",
                  False, "zsh")
        ]

    def test_blank_identity_becomes_sentinel(self, client, store):
        client.post("/api/events", json={
            "timestamp": "2026-02-03T09:00:00",
            "app_identifier": "",
            "app_name": "",
            "is_idle": True,
        })
        event = store.fetch_events(datetime(2026, 2, 3), datetime(2026, 2, 4))[0]
        assert event.app_identifier == "unknown"
        assert event.app_name == "unknown"
        assert event.is_idle is True

    def test_missing_field(self, client):
        resp = client.post("/api/events", json={"timestamp": "2026-02-03T09:00:00"})
        assert resp.status_code == 400

    def test_bad_timestamp(self, client):
        resp = client.post("/api/events", json={
            "timestamp": "yesterday",
            "app_identifier": "a",
            "app_name": "A",
        })
        assert resp.status_code == 400

    def test_offset_timestamp_is_stored_as_local_time(self, client, store):
        store.append_event(
            Event(datetime(2026, 2, 3, 10, 0, 0), "com.apple.Terminal", "Terminal")
        )
        resp = client.post("/api/events", json={
            "timestamp": "2026-02-03T10:00:05+00:00",
            "app_identifier": "com.apple.Terminal",
            "app_name": "Terminal",
        })
        assert resp.status_code == 201

        expected = (
            datetime(2026, 2, 3, 10, 0, 5, tzinfo=timezone.utc)
            .astimezone()
            .replace(tzinfo=None)
        )
        events = store.fetch_events(datetime(2026, 2, 2), datetime(2026, 2, 5))
        assert expected in [e.timestamp for e in events]
        assert all(e.timestamp.tzinfo is None for e in events)

        summary = client.get("/api/summary/daily?date=2026-02-03")
        assert summary.status_code == 200

    @pytest.mark.parametrize("value", ["false", 0, 1, None])
    def test_non_boolean_is_idle_rejected(self, client, store, value):
        resp = client.post("/api/events", json={
            "timestamp": "2026-02-03T09:00:00",
            "app_identifier": "a",
            "app_name": "A",
            "is_idle": value,
        })
        assert resp.status_code == 400
        assert store.fetch_events(datetime(2026, 2, 3), datetime(2026, 2, 4)) == []

    def test_non_object_body(self, client):
        resp = client.post("/api/events", json=[1, 2, 3])
        assert resp.status_code == 400

    def test_non_json_body(self, client):
        resp = client.post("/api/events", data="hello", content_type="text/plain")
        assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Violations and focus mode
# ---------------------------------------------------------------------------

class TestViolationsEndpoint:
    def test_counts_and_recent(self, client, store):
        for minute in range(3):
            store.insert_violation(FocusViolation(
                datetime(2026, 2, 3, 10, minute, 0), "com.spotify.client", "Spotify"
            ))
        store.insert_violation(FocusViolation(
            datetime(2026, 2, 4, 10, 0, 0), "com.spotify.client", "Spotify"
        ))

        data = client.get("/api/violations?date=2026-02-03").get_json()

        assert data["date"] == "2026-02-03"
        assert data["count"] == 3
        assert data["recent"][0]["timestamp"] == "2026-02-03T10:02:00"
        assert data["recent"][0]["app_name"] == "Spotify"

    def test_bad_date(self, client):
        assert client.get("/api/violations?date=2026-13-01").status_code == 400


class TestFocusModeEndpoint:
    def test_state_and_toggle(self, client, focus_mode):
        assert client.get("/api/focus-mode").get_json() == {"enabled": False}

        resp = client.post("/api/focus-mode/toggle")

        assert resp.get_json() == {"enabled": True}
        assert focus_mode.enabled is True
        assert client.get("/api/focus-mode").get_json() == {"enabled": True}

    def test_toggle_without_focus_mode(self, store):
        pipeline = DailyReportPipeline.from_config(get_default_config(), store)
        flask_app = create_flask_app(store, pipeline)
        flask_app.config["TESTING"] = True
        with flask_app.test_client() as c:
            assert c.get("/api/focus-mode").get_json() == {"enabled": False}
            assert c.post("/api/focus-mode/toggle").status_code == 404
