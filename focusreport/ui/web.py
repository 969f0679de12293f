"""Local JSON API for FocusReport.

A lightweight Flask app exposing:
- the rendered daily summary and its metrics
- the day's sessions and focus-mode violations
- an ingestion endpoint for samplers running in another process
"""

import logging
import threading
from dataclasses import asdict
from datetime import date, datetime
from typing import Any, Optional

from flask import Flask, jsonify, request

from focusreport.core.focus_mode import FocusModeManager
from focusreport.core.models import UNKNOWN_APP, Event, day_bounds
from focusreport.core.pipeline import DailyReportPipeline
from focusreport.persistence.store import ActivityStore

logger = logging.getLogger(__name__)


def create_flask_app(
    store: ActivityStore,
    pipeline: DailyReportPipeline,
    focus_mode: Optional[FocusModeManager] = None,
) -> Flask:
    app = Flask(__name__)

    @app.route("/api/summary/daily")
    def api_daily():
        """Build the day's report.

        Not read-only: the day's stored sessions are rebuilt from its
        events before the metrics are computed.
        """
        target = _requested_day()
        if target is None:
            return jsonify({"error": "date must be YYYY-MM-DD"}), 400
        metrics, text = pipeline.build_report(target)
        return jsonify({
            "date": target.isoformat(),
            "summary": text,
            "metrics": asdict(metrics),
        })

    @app.route("/api/sessions")
    def api_sessions():
        target = _requested_day()
        if target is None:
            return jsonify({"error": "date must be YYYY-MM-DD"}), 400
        start, end = day_bounds(target)
        sessions = store.fetch_sessions(start, end)
        return jsonify([
            {
                "start_time": s.start_time.isoformat(),
                "end_time": s.end_time.isoformat(),
                "app_identifier": s.app_identifier,
                "app_name": s.app_name,
                "duration_seconds": s.duration_seconds,
                "ended_by_idle": s.ended_by_idle,
                "category": pipeline.categorizer.category(
                    s.app_identifier, s.window_title
                ).value,
            }
            for s in sessions
        ])

    @app.route("/api/events", methods=["POST"])
    def api_add_event():
        data = request.get_json(silent=True)
        try:
            event = _event_from_json(data)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Rejected event payload: %s", exc)
            return jsonify({"error": f"invalid event: {exc}"}), 400
        row_id = store.append_event(event)
        return jsonify({"id": row_id}), 201

    @app.route("/api/violations")
    def api_violations():
        target = _requested_day()
        if target is None:
            return jsonify({"error": "date must be YYYY-MM-DD"}), 400
        start, end = day_bounds(target)
        recent = store.fetch_violations(start, end)
        return jsonify({
            "date": target.isoformat(),
            "count": store.fetch_violation_count(start, end),
            "recent": [
                {
                    "timestamp": v.timestamp.isoformat(),
                    "app_identifier": v.app_identifier,
                    "app_name": v.app_name,
                }
                for v in recent
            ],
        })

    @app.route("/api/focus-mode")
    def api_focus_mode():
        return jsonify({"enabled": bool(focus_mode and focus_mode.enabled)})

    @app.route("/api/focus-mode/toggle", methods=["POST"])
    def api_toggle_focus_mode():
        if focus_mode is None:
            return jsonify({"error": "focus mode not configured"}), 404
        return jsonify({"enabled": focus_mode.toggle()})

    return app


def start_dashboard(
    store: ActivityStore,
    pipeline: DailyReportPipeline,
    focus_mode: Optional[FocusModeManager] = None,
    port: int = 5555,
) -> threading.Thread:
    """Start the Flask API in a daemon thread."""
    flask_app = create_flask_app(store, pipeline, focus_mode)

    def _run():
        flask_app.run(host="127.0.0.1", port=port, debug=False, use_reloader=False)

    t = threading.Thread(target=_run, daemon=True, name="focusreport-web")
    t.start()
    logger.info("API started at http://127.0.0.1:%d", port)
    return t


def _requested_day() -> Optional[date]:
    date_str = request.args.get("date")
    if not date_str:
        return date.today()
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        return None


def _event_from_json(data: Any) -> Event:
    """Validate an ingestion payload and build an Event from it.

    Timestamps carrying a UTC offset are converted to naive local time so
    they sort and subtract alongside the sampler's local timestamps.
    """
    if not isinstance(data, dict):
        raise TypeError("body must be a JSON object")
    app_identifier = data["app_identifier"]
    app_name = data["app_name"]
    if not isinstance(app_identifier, str) or not isinstance(app_name, str):
        raise TypeError("app_identifier and app_name must be strings")
    title = data.get("window_title")
    if title is not None and not isinstance(title, str):
        raise TypeError("window_title must be a string")
    is_idle = data.get("is_idle", False)
    if not isinstance(is_idle, bool):
        raise TypeError("is_idle must be a boolean")
    timestamp = datetime.fromisoformat(data["timestamp"])
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone().replace(tzinfo=None)
    return Event(
        timestamp=timestamp,
        app_identifier=app_identifier or UNKNOWN_APP,
        app_name=app_name or UNKNOWN_APP,
        is_idle=is_idle,
        window_title=title or None,
    )
