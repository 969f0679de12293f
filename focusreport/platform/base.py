"""Abstract base class for platform-specific foreground-app providers."""

from abc import ABC, abstractmethod
from typing import Optional

from focusreport.core.models import ForegroundApp


class ActivityProvider(ABC):
    """Common interface for reading the foreground application.

    Each supported platform supplies a concrete implementation that
    uses OS-specific APIs (workspace notifications, accessibility
    window titles, idle timers) behind this interface.
    """

    @abstractmethod
    def get_foreground_app(self) -> Optional[ForegroundApp]:
        """Return the foreground application, or None if unavailable."""
        pass

    @abstractmethod
    def is_user_idle(self) -> bool:
        """Return True if the screen is locked or the user is idle."""
        pass
