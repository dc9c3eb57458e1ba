import logging
import threading

import httpx
import pytest

from feedback_bank.client import FeedbackClient, SiteLock, SiteLockPoller

class FakeClient:
    def __init__(self, *states):
        self.states = list(states)
        self.calls = 0

    def get_site_lock(self):
        self.calls += 1
        state = self.states.pop(0) if len(self.states) > 1 else self.states[0]
        if isinstance(state, Exception):
            raise state
        return state

def test_first_poll_always_reports():
    seen = []
    poller = SiteLockPoller(FakeClient(SiteLock(False)), seen.append, interval=1)
    poller.poll_once()
    assert seen == [SiteLock(False)]

def test_reports_only_changes():
    seen = []
    states = [SiteLock(False), SiteLock(False), SiteLock(True, "1700000000000"), SiteLock(True, "1700000000000"),
              SiteLock(False, "1700000000000")]
    poller = SiteLockPoller(FakeClient(*states), seen.append, interval=1)
    for _ in states:
        poller.poll_once()
    assert [s.locked for s in seen] == [False, True, False]
    assert poller.last == states[-1]

def test_failed_poll_is_logged_and_skipped(caplog):
    seen = []
    fake = FakeClient(SiteLock(False), httpx.ConnectError("connection refused"), SiteLock(True))
    poller = SiteLockPoller(fake, seen.append, interval=1)
    poller.poll_once()
    with caplog.at_level(logging.WARNING):
        assert poller.poll_once() is None
    assert "Site lock poll failed" in caplog.text
    poller.poll_once()
    assert [s.locked for s in seen] == [False, True]

def test_result_after_stop_is_discarded():
    seen = []
    poller = SiteLockPoller(FakeClient(SiteLock(True)), seen.append, interval=1)
    poller.stop()
    assert poller.poll_once() is None
    assert seen == []
    assert poller.last is None

def test_start_and_stop():
    changed = threading.Event()
    poller = SiteLockPoller(FakeClient(SiteLock(True)), lambda state: changed.set(), interval=0.01)
    poller.start()
    try:
        assert poller.running
        assert changed.wait(2)
    finally:
        poller.stop(timeout=2)
    assert not poller.running

def test_callback_can_stop_the_poller(monkeypatch):
    errors = []
    monkeypatch.setattr(threading, "excepthook", errors.append)
    stopped = threading.Event()
    fake = FakeClient(SiteLock(False), SiteLock(True))

    def on_change(state):
        if state.locked:
            poller.stop()
            stopped.set()

    poller = SiteLockPoller(fake, on_change, interval=0.01)
    poller.start()
    thread = poller._thread
    assert stopped.wait(2)
    thread.join(2)
    assert not thread.is_alive()
    assert errors == []
    assert not poller.running
    assert fake.calls == 2

def test_polls_the_real_endpoint(client):
    api = FeedbackClient(http=client)
    seen = []
    poller = SiteLockPoller(api, seen.append, interval=1)
    poller.poll_once()
    api.set_site_lock(True)
    poller.poll_once()
    assert [s.locked for s in seen] == [False, True]
    assert seen[-1].lock_timestamp is not None

@pytest.mark.parametrize("interval", [None, 2.5])
def test_interval_defaults_from_settings(interval):
    from feedback_bank.core.config import settings

    poller = SiteLockPoller(FakeClient(SiteLock(False)), lambda s: None, interval=interval)
    assert poller.interval == (settings.LOCK_POLL_INTERVAL_SECONDS if interval is None else interval)
