"""Daily summary text with heuristic recommendations."""

from datetime import date

from focusreport.core.models import DailyMetrics

NO_APPS_TEXT = "No app usage recorded."
MAX_RECOMMENDATIONS = 3

# Fixed English abbreviations; strftime("%b") follows the process locale.
MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

HIGH_SWITCH_TIP = (
    "Your context switching was high. "
    "Try one 25-minute focus block with only one app open."
)
MODERATE_SWITCH_TIP = "Try grouping similar tasks together to reduce app switching."
LOW_SWITCH_TIP = (
    "Nice job keeping context switching low. "
    "Try extending one focus block tomorrow."
)
SHORT_FOCUS_TIP = (
    "Your longest focus block was under 20 minutes. "
    "Aim for a 25-minute uninterrupted session."
)
MEDIUM_FOCUS_TIP = (
    "Try pushing your best focus block to 40 minutes by pausing notifications."
)
LONG_FOCUS_TIP = "Great focus endurance today. Protect that time window tomorrow."
LOW_ACTIVITY_TIP = (
    "You had low active time today. "
    "Try scheduling one dedicated study block tomorrow."
)


class SummaryGenerator:
    """Renders DailyMetrics as the plain-text daily summary."""

    @staticmethod
    def switch_rate(metrics: DailyMetrics) -> str:
        """Context switches per active hour, e.g. ``'4.5/hr'``.

        Active time is floored at 0.1 hours so that a few minutes of use
        does not produce an absurd rate.
        """
        if metrics.total_active_minutes == 0:
            return "0/hr"
        hours = metrics.total_active_minutes / 60.0
        return f"{metrics.context_switches / max(hours, 0.1):.1f}/hr"

    @staticmethod
    def focus_quality(metrics: DailyMetrics) -> str:
        if metrics.longest_focus_minutes >= 40:
            return "strong"
        if metrics.longest_focus_minutes >= 25:
            return "decent"
        return "fragmented"

    @staticmethod
    def recommendations(metrics: DailyMetrics) -> list[str]:
        """Return at most three tips, in heuristic order.

        The switching and focus-length heuristics always contribute one
        tip each; the low-activity tip is added only under an hour.
        """
        recs: list[str] = []

        if metrics.context_switches >= 60:
            recs.append(HIGH_SWITCH_TIP)
        elif metrics.context_switches >= 30:
            recs.append(MODERATE_SWITCH_TIP)
        else:
            recs.append(LOW_SWITCH_TIP)

        if metrics.longest_focus_minutes < 20:
            recs.append(SHORT_FOCUS_TIP)
        elif metrics.longest_focus_minutes < 40:
            recs.append(MEDIUM_FOCUS_TIP)
        else:
            recs.append(LONG_FOCUS_TIP)

        if metrics.total_active_minutes < 60:
            recs.append(LOW_ACTIVITY_TIP)

        return recs[:MAX_RECOMMENDATIONS]

    @staticmethod
    def top_apps_text(metrics: DailyMetrics) -> str:
        if not metrics.top_apps:
            return NO_APPS_TEXT
        return ", ".join(f"{a.app_name} ({a.minutes}m)" for a in metrics.top_apps)

    @classmethod
    def render(cls, day: date, metrics: DailyMetrics) -> str:
        """Render the summary for *day* as newline-joined text."""
        lines = [
            f"Daily Summary ({MONTH_ABBR[day.month - 1]} {day.day})",
            "",
            f"You were active for {metrics.total_active_minutes} minutes.",
            f"Longest focus block: {metrics.longest_focus_minutes} minutes.",
            (
                f"Context switches: {metrics.context_switches} "
                f"({cls.switch_rate(metrics)}). "
                f"Focus quality: {cls.focus_quality(metrics)}."
            ),
            "",
            "Top apps:",
            cls.top_apps_text(metrics),
            "",
            "What to improve tomorrow:",
        ]
        for i, rec in enumerate(cls.recommendations(metrics), start=1):
            lines.append(f"{i}. {rec}")
        return "\n".join(lines)
