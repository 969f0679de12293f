"""Focus mode: a switchable block list of distracting applications."""

from typing import Iterable


class FocusModeManager:
    """Tracks whether focus mode is on and which apps it blocks."""

    def __init__(self, blocked_apps: Iterable[str], enabled: bool = False) -> None:
        self.blocked_apps = frozenset(blocked_apps)
        self.enabled = enabled

    def toggle(self) -> bool:
        """Flip focus mode and return the new state."""
        self.enabled = not self.enabled
        return self.enabled

    def is_blocked(self, app_identifier: str) -> bool:
        """True only while focus mode is on and the app is on the block list."""
        return self.enabled and app_identifier in self.blocked_apps
