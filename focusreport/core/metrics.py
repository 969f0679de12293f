"""Daily metrics aggregation for FocusReport."""

from collections import defaultdict
from datetime import date
from typing import Sequence

from focusreport.core.categorizer import Categorizer
from focusreport.core.models import (
    AppMinutes,
    Category,
    DailyMetrics,
    Session,
    day_bounds,
)
from focusreport.persistence.store import ActivityStore

TOP_APPS_LIMIT = 5


class MetricsEngine:
    """Produces DailyMetrics from the persisted sessions of a day.

    Every minute figure is a sum of per-session floored minutes, so two
    90-second sessions count as 2 minutes, not 3.
    """

    def __init__(self, store: ActivityStore, categorizer: Categorizer) -> None:
        self.store = store
        self.categorizer = categorizer

    def compute_metrics(self, day: date) -> DailyMetrics:
        """Build metrics for *day* from the stored sessions."""
        start, end = day_bounds(day)
        return self.metrics_from_sessions(self.store.fetch_sessions(start, end))

    def metrics_from_sessions(self, sessions: Sequence[Session]) -> DailyMetrics:
        """Aggregate chronologically ordered *sessions* (pure)."""
        total = 0
        longest = 0
        by_app: dict[str, int] = defaultdict(int)
        by_category: dict[Category, int] = defaultdict(int)

        for session in sessions:
            minutes = session.minutes
            total += minutes
            longest = max(longest, minutes)
            by_app[session.app_name] += minutes
            category = self.categorizer.category(
                session.app_identifier, session.window_title
            )
            by_category[category] += minutes

        switches = sum(
            1
            for prev, cur in zip(sessions, sessions[1:])
            if prev.app_identifier != cur.app_identifier
        )

        # Stable sort: equal minutes stay in first-seen order, which is
        # not part of the contract.
        ranked = sorted(by_app.items(), key=lambda item: item[1], reverse=True)
        top_apps = [AppMinutes(name, mins) for name, mins in ranked[:TOP_APPS_LIMIT]]

        return DailyMetrics(
            total_active_minutes=total,
            context_switches=switches,
            longest_focus_minutes=longest,
            top_apps=top_apps,
            deep_work_minutes=by_category[Category.DEEP_WORK],
            shallow_work_minutes=by_category[Category.SHALLOW_WORK],
            distraction_minutes=by_category[Category.DISTRACTION],
        )
