"""Core data models for FocusReport.

Defines all dataclasses and enums used across the application:
- Sampling: ForegroundApp, Event
- Sessionizing: Session
- Classification: Category, CategoryRules
- Reporting: AppMinutes, DailyMetrics
- Focus mode: FocusViolation
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Optional

# Placeholder used when the sampler cannot resolve an identifier or name.
UNKNOWN_APP = "unknown"


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Return the half-open local interval [midnight, next midnight) for *day*."""
    start = datetime(day.year, day.month, day.day)
    return start, start + timedelta(days=1)


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------

@dataclass
class ForegroundApp:
    """The application currently in the foreground, as seen by a provider."""
    app_identifier: str
    app_name: str
    window_title: Optional[str] = None


@dataclass(frozen=True)
class Event:
    """A single foreground-app sample. Immutable once stored."""
    timestamp: datetime
    app_identifier: str
    app_name: str
    is_idle: bool = False
    window_title: Optional[str] = None


# ---------------------------------------------------------------------------
# Sessionizing
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Session:
    """A contiguous run of samples attributed to one application."""
    start_time: datetime
    end_time: datetime
    app_identifier: str
    app_name: str
    duration_seconds: int
    ended_by_idle: bool = False
    window_title: Optional[str] = None  # first non-empty title in the run

    @property
    def minutes(self) -> int:
        """Whole minutes of this session (floored)."""
        return self.duration_seconds // 60


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

class Category(Enum):
    """Productivity category of an application."""
    DEEP_WORK = "deep_work"
    SHALLOW_WORK = "shallow_work"
    DISTRACTION = "distraction"
    UNKNOWN = "unknown"


@dataclass
class CategoryRules:
    """Classification data injected into the Categorizer."""
    deep_work: frozenset[str] = field(default_factory=frozenset)
    shallow_work: frozenset[str] = field(default_factory=frozenset)
    distraction: frozenset[str] = field(default_factory=frozenset)
    title_sensitive: frozenset[str] = field(default_factory=frozenset)  # e.g. browsers
    distraction_keywords: tuple[str, ...] = ()
    productive_keywords: tuple[str, ...] = ()

    @classmethod
    def from_config(cls, data: dict[str, Any]) -> "CategoryRules":
        """Build rules from the ``categorization`` section of config.json.

        Missing keys become empty sets. Keywords are lower-cased so that
        they match against lower-cased titles.
        """
        return cls(
            deep_work=frozenset(data.get("deep_work", [])),
            shallow_work=frozenset(data.get("shallow_work", [])),
            distraction=frozenset(data.get("distraction", [])),
            title_sensitive=frozenset(data.get("title_sensitive", [])),
            distraction_keywords=tuple(
                k.lower() for k in data.get("distraction_keywords", [])
            ),
            productive_keywords=tuple(
                k.lower() for k in data.get("productive_keywords", [])
            ),
        )

    def to_config(self) -> dict[str, Any]:
        """Return a JSON-serializable dict (sets are written sorted)."""
        return {
            "deep_work": sorted(self.deep_work),
            "shallow_work": sorted(self.shallow_work),
            "distraction": sorted(self.distraction),
            "title_sensitive": sorted(self.title_sensitive),
            "distraction_keywords": list(self.distraction_keywords),
            "productive_keywords": list(self.productive_keywords),
        }


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

@dataclass
class AppMinutes:
    """Minutes attributed to one application display name."""
    app_name: str
    minutes: int


@dataclass
class DailyMetrics:
    """Aggregate metrics for a single day. Never persisted."""
    total_active_minutes: int = 0
    context_switches: int = 0
    longest_focus_minutes: int = 0
    top_apps: list[AppMinutes] = field(default_factory=list)  # at most 5, minutes descending
    deep_work_minutes: int = 0
    shallow_work_minutes: int = 0
    distraction_minutes: int = 0


# ---------------------------------------------------------------------------
# Focus mode
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FocusViolation:
    """A blocked application observed in the foreground during focus mode."""
    timestamp: datetime
    app_identifier: str
    app_name: str
