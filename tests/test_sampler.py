"""Unit tests for the Sampler."""

import logging
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from focusreport.core.focus_mode import FocusModeManager
from focusreport.core.models import UNKNOWN_APP, Event, FocusViolation, ForegroundApp
from focusreport.core.sampler import Sampler
from focusreport.persistence.store import ActivityStore
from focusreport.platform.base import ActivityProvider


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

NOW = datetime(2026, 2, 3, 9, 0, 0)


def _make_sampler(app=None, is_idle=False, get_app_side_effect=None, focus_mode=None):
    """Build a Sampler wired to mocks with sensible defaults."""
    provider = MagicMock(spec=ActivityProvider)
    if get_app_side_effect is not None:
        provider.get_foreground_app.side_effect = get_app_side_effect
    else:
        provider.get_foreground_app.return_value = app
    provider.is_user_idle.return_value = is_idle

    store = MagicMock(spec=ActivityStore)
    store.append_event.return_value = 1

    sampler = Sampler(provider, store, focus_mode=focus_mode, poll_interval=1)
    return sampler, provider, store


# ---------------------------------------------------------------------------
# poll_once
# ---------------------------------------------------------------------------

class TestPollOnce:
    def test_appends_event(self):
        app = ForegroundApp("com.microsoft.VSCode", "Code", "sampler.py")
        sampler, provider, store = _make_sampler(app=app)

        event = sampler.poll_once(NOW)

        expected = Event(NOW, "com.microsoft.VSCode", "Code", False, "sampler.py")
        assert event == expected
        store.append_event.assert_called_once_with(expected)

    def test_idle_flag_comes_from_provider(self):
        sampler, _, store = _make_sampler(app=ForegroundApp("a", "A"), is_idle=True)
        sampler.poll_once(NOW)
        assert store.append_event.call_args[0][0].is_idle is True

    def test_missing_identifier_and_name_use_sentinel(self):
        sampler, _, store = _make_sampler(app=ForegroundApp("", ""))
        sampler.poll_once(NOW)
        event = store.append_event.call_args[0][0]
        assert event.app_identifier == UNKNOWN_APP
        assert event.app_name == UNKNOWN_APP

    def test_empty_title_becomes_none(self):
        sampler, _, store = _make_sampler(app=ForegroundApp("a", "A", ""))
        sampler.poll_once(NOW)
        assert store.append_event.call_args[0][0].window_title is None

    def test_no_foreground_app_skips(self):
        sampler, _, store = _make_sampler(app=None)
        assert sampler.poll_once(NOW) is None
        store.append_event.assert_not_called()

    def test_provider_error_skips_and_logs(self, caplog):
        sampler, _, store = _make_sampler(get_app_side_effect=RuntimeError("AX denied"))
        with caplog.at_level(logging.ERROR):
            assert sampler.poll_once(NOW) is None
        store.append_event.assert_not_called()
        assert "Failed to read foreground app" in caplog.text

    def test_idle_check_error_assumes_active(self):
        sampler, provider, store = _make_sampler(app=ForegroundApp("a", "A"))
        provider.is_user_idle.side_effect = OSError("no idle timer")
        sampler.poll_once(NOW)
        assert store.append_event.call_args[0][0].is_idle is False

    def test_store_error_propagates(self):
        sampler, _, store = _make_sampler(app=ForegroundApp("a", "A"))
        store.append_event.side_effect = OSError("disk full")
        with pytest.raises(OSError):
            sampler.poll_once(NOW)


# ---------------------------------------------------------------------------
# Focus mode violations
# ---------------------------------------------------------------------------

class TestFocusViolations:
    def test_blocked_app_records_violation(self):
        focus = FocusModeManager({"com.spotify.client"}, enabled=True)
        sampler, _, store = _make_sampler(
            app=ForegroundApp("com.spotify.client", "Spotify"), focus_mode=focus
        )
        sampler.poll_once(NOW)
        store.insert_violation.assert_called_once_with(
            FocusViolation(NOW, "com.spotify.client", "Spotify")
        )

    def test_disabled_focus_mode_records_nothing(self):
        focus = FocusModeManager({"com.spotify.client"}, enabled=False)
        sampler, _, store = _make_sampler(
            app=ForegroundApp("com.spotify.client", "Spotify"), focus_mode=focus
        )
        sampler.poll_once(NOW)
        store.insert_violation.assert_not_called()

    def test_idle_sample_is_not_a_violation(self):
        focus = FocusModeManager({"com.spotify.client"}, enabled=True)
        sampler, _, store = _make_sampler(
            app=ForegroundApp("com.spotify.client", "Spotify"),
            is_idle=True,
            focus_mode=focus,
        )
        sampler.poll_once(NOW)
        store.insert_violation.assert_not_called()

    def test_allowed_app_records_nothing(self):
        focus = FocusModeManager({"com.spotify.client"}, enabled=True)
        sampler, _, store = _make_sampler(
            app=ForegroundApp("com.microsoft.VSCode", "Code"), focus_mode=focus
        )
        sampler.poll_once(NOW)
        store.insert_violation.assert_not_called()


# ---------------------------------------------------------------------------
# run / stop
# ---------------------------------------------------------------------------

class TestRunLoop:
    def test_run_polls_until_stopped(self):
        sampler, _, store = _make_sampler(app=ForegroundApp("a", "A"))
        calls = {"n": 0}

        def _sleep(_seconds):
            calls["n"] += 1
            if calls["n"] == 3:
                sampler.stop()

        with patch("focusreport.core.sampler.time.sleep", side_effect=_sleep):
            sampler.run()

        assert store.append_event.call_count == 3

    def test_run_survives_store_errors(self):
        sampler, _, store = _make_sampler(app=ForegroundApp("a", "A"))
        store.append_event.side_effect = OSError("locked")

        def _sleep(_seconds):
            sampler.stop()

        with patch("focusreport.core.sampler.time.sleep", side_effect=_sleep):
            sampler.run()

        store.append_event.assert_called_once()
