"""FocusReport application entry point.

Supports four modes:
  - default: rebuild the day's sessions and print its daily summary
  - export:  also write the report to a Word document
  - serve:   run the local JSON API until interrupted
  - sample:  record foreground-app events from the configured provider

Usage:
    python -m focusreport.main                          # today's summary
    python -m focusreport.main --date 2026-02-03        # a specific day
    python -m focusreport.main --export report.docx     # write a .docx too
    python -m focusreport.main --serve                  # run the JSON API
    python -m focusreport.main --sample                 # record app usage
"""

import argparse
import logging
import os
import time
from datetime import date

from focusreport.core.config import get_default_config_path, load_config
from focusreport.core.focus_mode import FocusModeManager
from focusreport.core.pipeline import DailyReportPipeline
from focusreport.core.sampler import Sampler
from focusreport.persistence.store import ActivityStore
from focusreport.platform.factory import create_activity_provider
from focusreport.reporting.exporter import ReportExporter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="focusreport",
        description="FocusReport: daily productivity summaries from app usage",
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Day to report on (YYYY-MM-DD, default: today)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.json (default: platform data directory)",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--export",
        metavar="PATH",
        default=None,
        help="Also write the daily report to a .docx file",
    )
    group.add_argument(
        "--serve",
        action="store_true",
        help="Run the local JSON API instead of printing a summary",
    )
    group.add_argument(
        "--sample",
        action="store_true",
        help="Record foreground-app events from the configured provider",
    )
    return parser


def _open_store(config: dict) -> ActivityStore:
    db_path = os.path.expanduser(config.get("database_path", "~/.focusreport/focusreport.db"))
    if db_path != ":memory:":
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
    store = ActivityStore(db_path)
    store.init_db()
    return store


def _print_daily_summary(config: dict, day: date, export_path: str | None = None) -> None:
    """Run the pipeline for *day*, print the summary and optionally export it."""
    store = _open_store(config)
    try:
        pipeline = DailyReportPipeline.from_config(config, store)
        metrics, text = pipeline.build_report(day)
        print(text)
        if export_path:
            user_name = config.get("report", {}).get("user_name", "")
            ReportExporter().export_daily(
                day, metrics, user_name, os.path.expanduser(export_path)
            )
    finally:
        store.close()


def _focus_mode(config: dict) -> FocusModeManager:
    section = config.get("focus_mode", {})
    return FocusModeManager(
        section.get("blocked_apps", []), enabled=bool(section.get("enabled", False))
    )


def _serve(config: dict) -> None:
    """Run the JSON API until interrupted."""
    from focusreport.ui.web import start_dashboard

    store = _open_store(config)
    try:
        pipeline = DailyReportPipeline.from_config(config, store)
        thread = start_dashboard(
            store, pipeline, _focus_mode(config), port=config.get("dashboard_port", 5555)
        )
        while thread.is_alive():
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        store.close()


def _sample(config: dict) -> None:
    """Record events from the configured provider until interrupted."""
    provider = create_activity_provider(config)
    store = _open_store(config)
    sampler = Sampler(
        provider,
        store,
        focus_mode=_focus_mode(config),
        poll_interval=config.get("poll_interval_seconds", 2),
    )
    try:
        sampler.run()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        sampler.stop()
        store.close()


def main(args: list[str] | None = None) -> None:
    """Entry point for FocusReport.

    When *args* is ``None`` the arguments are read from ``sys.argv``.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    parser = build_parser()
    parsed = parser.parse_args(args)

    config_path = parsed.config or get_default_config_path()
    config = load_config(str(config_path))

    if parsed.sample:
        _sample(config)
    elif parsed.serve:
        _serve(config)
    else:
        _print_daily_summary(config, parsed.date or date.today(), parsed.export)


if __name__ == "__main__":
    main()
