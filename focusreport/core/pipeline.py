"""End-to-end daily report pipeline.

Runs the three analytics steps in order for one day:
rebuild sessions, compute metrics, render the summary text.
"""

import logging
from datetime import date
from typing import Any

from focusreport.core.categorizer import Categorizer
from focusreport.core.metrics import MetricsEngine
from focusreport.core.models import CategoryRules, DailyMetrics
from focusreport.core.sessionizer import Sessionizer
from focusreport.persistence.store import ActivityStore
from focusreport.reporting.summary import SummaryGenerator

logger = logging.getLogger(__name__)


class DailyReportPipeline:
    """Wires the Sessionizer, MetricsEngine and SummaryGenerator together."""

    def __init__(
        self,
        store: ActivityStore,
        categorizer: Categorizer,
        max_gap_seconds: float = 10,
        min_session_seconds: float = 10,
    ) -> None:
        self.store = store
        self.categorizer = categorizer
        self.sessionizer = Sessionizer(store, max_gap_seconds, min_session_seconds)
        self.metrics_engine = MetricsEngine(store, categorizer)
        self.summary_generator = SummaryGenerator()

    @classmethod
    def from_config(
        cls, config: dict[str, Any], store: ActivityStore
    ) -> "DailyReportPipeline":
        rules = CategoryRules.from_config(config.get("categorization", {}))
        return cls(
            store,
            Categorizer(rules),
            max_gap_seconds=config.get("max_gap_seconds", 10),
            min_session_seconds=config.get("min_session_seconds", 10),
        )

    def build_report(self, day: date) -> tuple[DailyMetrics, str]:
        """Rebuild *day*'s sessions and return its metrics and summary text."""
        self.sessionizer.rebuild_sessions(day)
        metrics = self.metrics_engine.compute_metrics(day)
        logger.debug("Metrics for %s: %s", day.isoformat(), metrics)
        return metrics, self.summary_generator.render(day, metrics)

    def build_summary_text(self, day: date) -> str:
        return self.build_report(day)[1]
