"""Sessionizer for FocusReport.

Turns a day's raw foreground-app samples into sessions: maximal runs of
samples for one application that are not interrupted by an app switch,
an idle sample, or a gap between samples longer than ``max_gap``.

A day's sessions are always rebuilt as a unit.  Rebuilding the same
event set twice produces the same sessions.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from focusreport.core.models import Event, Session, day_bounds
from focusreport.persistence.store import ActivityStore

logger = logging.getLogger(__name__)


class Sessionizer:
    """Segments events into sessions and writes them to the store."""

    def __init__(
        self,
        store: ActivityStore,
        max_gap_seconds: float = 10,
        min_session_seconds: float = 10,
    ) -> None:
        self.store = store
        self.max_gap = timedelta(seconds=max_gap_seconds)
        self.min_session = timedelta(seconds=min_session_seconds)

    def rebuild_sessions(self, day: date) -> list[Session]:
        """Replace every session of *day* with a fresh segmentation.

        Reading the events and swapping the sessions happen in one store
        transaction: a concurrent append cannot slip in between, and if
        anything fails the previous sessions stay in place.
        """
        start, end = day_bounds(day)
        with self.store.transaction():
            events = self.store.fetch_events(start, end)
            sessions = self.segment_events(events)
            self.store.replace_sessions(start, end, sessions)
        logger.info(
            "Rebuilt %d sessions from %d events for %s",
            len(sessions), len(events), day.isoformat(),
        )
        return sessions

    def segment_events(self, events: Iterable[Event]) -> list[Session]:
        """Split time-ordered *events* into sessions (pure, no storage)."""
        sessions: list[Session] = []
        segment: Optional[_OpenSegment] = None
        last_ts: Optional[datetime] = None

        for event in events:
            if segment is None or last_ts is None:
                segment = _OpenSegment(event)
                last_ts = event.timestamp
                continue

            gap = event.timestamp - last_ts
            gap_exceeded = gap > self.max_gap
            if (
                event.app_identifier != segment.app_identifier
                or event.is_idle
                or gap_exceeded
            ):
                self._close(segment, last_ts, event.is_idle or gap_exceeded, sessions)
                segment = _OpenSegment(event)
            else:
                segment.observe_title(event.window_title)
            last_ts = event.timestamp

        if segment is not None and last_ts is not None:
            # The final run has no breaking event; it keeps the idle flag
            # of the sample that opened it.
            self._close(segment, last_ts, segment.opened_idle, sessions)
        return sessions

    def _close(
        self,
        segment: "_OpenSegment",
        end: datetime,
        ended_by_idle: bool,
        sessions: list[Session],
    ) -> None:
        duration = end - segment.start
        if duration < self.min_session:
            logger.debug(
                "Dropping %.1fs segment of %s at %s",
                duration.total_seconds(), segment.app_identifier, segment.start,
            )
            return
        sessions.append(
            Session(
                start_time=segment.start,
                end_time=end,
                app_identifier=segment.app_identifier,
                app_name=segment.app_name,
                duration_seconds=int(duration.total_seconds()),
                ended_by_idle=ended_by_idle,
                window_title=segment.window_title,
            )
        )


class _OpenSegment:
    """Mutable state of the session currently being built."""

    __slots__ = ("start", "app_identifier", "app_name", "opened_idle", "window_title")

    def __init__(self, event: Event) -> None:
        self.start = event.timestamp
        self.app_identifier = event.app_identifier
        self.app_name = event.app_name
        self.opened_idle = event.is_idle
        self.window_title: Optional[str] = event.window_title or None

    def observe_title(self, title: Optional[str]) -> None:
        if self.window_title is None and title:
            self.window_title = title
