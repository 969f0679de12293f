"""Sampler for FocusReport.

Polls an ActivityProvider at a fixed interval and appends each reading
to the event store as an immutable Event.  The analytics pipeline never
calls back into the sampler; it only reads what has been stored.
"""

import logging
import time
from datetime import datetime
from typing import Optional

from focusreport.core.focus_mode import FocusModeManager
from focusreport.core.models import UNKNOWN_APP, Event, FocusViolation
from focusreport.persistence.store import ActivityStore
from focusreport.platform.base import ActivityProvider

logger = logging.getLogger(__name__)


class Sampler:
    """Feeds foreground-app samples into the event store."""

    def __init__(
        self,
        provider: ActivityProvider,
        store: ActivityStore,
        focus_mode: Optional[FocusModeManager] = None,
        poll_interval: float = 2,
    ) -> None:
        self.provider = provider
        self.store = store
        self.focus_mode = focus_mode
        self.poll_interval = poll_interval
        self._running = False

    def poll_once(self, now: datetime) -> Optional[Event]:
        """Take one sample and persist it. Returns the stored event, if any."""

        # 1. Read the provider; a failing read skips this cycle
        try:
            app = self.provider.get_foreground_app()
        except Exception:
            logger.exception("Failed to read foreground app; skipping this cycle")
            return None

        if app is None:
            logger.debug("No foreground app returned; skipping this cycle")
            return None

        try:
            idle = self.provider.is_user_idle()
        except Exception:
            logger.exception("Failed to check idle state; assuming not idle")
            idle = False

        # 2. Persist the event
        event = Event(
            timestamp=now,
            app_identifier=app.app_identifier or UNKNOWN_APP,
            app_name=app.app_name or UNKNOWN_APP,
            is_idle=idle,
            window_title=app.window_title or None,
        )
        self.store.append_event(event)

        # 3. Record focus-mode violations for active use of blocked apps
        if (
            not idle
            and self.focus_mode is not None
            and self.focus_mode.is_blocked(event.app_identifier)
        ):
            logger.info("Focus mode violation: %s", event.app_name)
            self.store.insert_violation(
                FocusViolation(
                    timestamp=now,
                    app_identifier=event.app_identifier,
                    app_name=event.app_name,
                )
            )
        return event

    def run(self) -> None:
        """Poll until :meth:`stop` is called."""
        self._running = True
        logger.info("Sampling every %ss", self.poll_interval)
        while self._running:
            try:
                self.poll_once(datetime.now())
            except Exception:
                logger.exception("Failed to store sample")
            time.sleep(self.poll_interval)

    def stop(self) -> None:
        """Signal the run loop to stop."""
        self._running = False
