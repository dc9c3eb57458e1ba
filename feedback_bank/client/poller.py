from typing import Callable, Optional
import logging
import threading

from feedback_bank.client.api import FeedbackClient, SiteLock
from feedback_bank.core.config import settings

logger = logging.getLogger(__name__)

class SiteLockPoller:
    """Polls the site lock on a fixed interval and reports changes.

    A failed poll is logged and simply superseded by the next tick. A poll
    that completes after ``stop()`` is discarded.
    """

    def __init__(
        self,
        client: FeedbackClient,
        on_change: Callable[[SiteLock], None],
        interval: Optional[float] = None,
    ):
        self.client = client
        self.on_change = on_change
        self.interval = settings.LOCK_POLL_INTERVAL_SECONDS if interval is None else interval
        self.last: Optional[SiteLock] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def poll_once(self) -> Optional[SiteLock]:
        try:
            state = self.client.get_site_lock()
        except Exception as e:
            logger.warning(f"Site lock poll failed: {e}")
            return None
        if self._stop.is_set():
            return None
        if self.last is None or state.locked != self.last.locked:
            self.last = state
            self.on_change(state)
        else:
            self.last = state
        return state

    def _run(self) -> None:
        while not self._stop.is_set():
            self.poll_once()
            self._stop.wait(self.interval)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="site-lock-poller", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        # on_change may call stop() from the polling thread itself
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
