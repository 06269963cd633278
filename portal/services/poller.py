"""
Polling Loop.

Background daemon thread that runs a fetch/commit cycle immediately and
then once per interval, for as long as its consumer is mounted.  Follows
the usual daemon-thread lifecycle: the owner calls :meth:`start` /
:meth:`stop`, and the thread sleeps on ``stop_event.wait(interval)`` so a
stop request wakes it at once.

Teardown Guard
--------------
A fetch that is in flight when :meth:`stop` runs must not write into a
consumer that has gone away.  :meth:`stop` clears the mounted flag and
bumps a generation counter *before* signalling the thread; every commit
re-checks both under the lock and is discarded on mismatch.  The same
applies to a stop followed by a fresh :meth:`start`: the late result of
the old generation never reaches the new one.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, Optional, TypeVar

from portal.logger import StructuredLogger
from portal.services.base_service import BaseService

T = TypeVar("T")


class PollingLoop(BaseService, Generic[T]):
    """Cancellable periodic fetch bound to a consumer's lifetime.

    Parameters
    ----------
    name:
        Thread name, also used in log lines.
    fetch:
        Produces a fresh result.  May raise; failures are logged and the
        consumer's previous state is left untouched.
    commit:
        Applies a result to the consumer.  Only ever called while the loop
        is mounted under the generation that started the fetch.
    interval_s:
        Seconds between fetches.
    logger:
        Structured JSON logger.
    on_error:
        Optional callback receiving each fetch failure.
    stop_timeout_s:
        Default seconds :meth:`stop` waits for the thread to exit.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[], T],
        commit: Callable[[T], None],
        interval_s: float,
        logger: StructuredLogger,
        on_error: Optional[Callable[[Exception], None]] = None,
        stop_timeout_s: float = 10.0,
    ) -> None:
        super().__init__(logger)
        self._name = name
        self._fetch = fetch
        self._commit = commit
        self._interval_s = interval_s
        self._on_error = on_error
        self._stop_timeout_s = stop_timeout_s

        self._lock: threading.RLock = threading.RLock()
        self._mounted: bool = False
        self._generation: int = 0
        self._thread: Optional[threading.Thread] = None
        self._stop_event: threading.Event = threading.Event()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Mount and start polling on a daemon thread.

        Idempotent: calling ``start()`` while already running is a no-op.
        """
        with self._lock:
            if self._mounted:
                self._logger.debug("%s already running.", self._name)
                return
            self._mounted = True
            self._generation += 1
            # A fresh event per run: a previous thread still draining its
            # last fetch keeps seeing its own, already-set event.
            self._stop_event = threading.Event()
            stop_event = self._stop_event

        self._thread = threading.Thread(
            target=self._run_loop,
            args=(stop_event,),
            name=self._name,
            daemon=True,
        )
        self._thread.start()
        self._logger.info(
            "%s started (interval %.0fs).", self._name, self._interval_s,
            extra={"event": "POLL_START"},
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        """Unmount, then signal the thread and wait up to *timeout* seconds.

        Safe to call when not running.  Results of fetches still in
        flight are discarded even if the thread outlives the wait.
        """
        with self._lock:
            if not self._mounted and self._thread is None:
                return
            self._mounted = False
            self._generation += 1
            self._stop_event.set()

        thread = self._thread
        self._thread = None
        if thread is None:
            return

        wait_s = self._stop_timeout_s if timeout is None else timeout
        if thread is not threading.current_thread():
            thread.join(timeout=wait_s)

        if thread.is_alive():
            self._logger.debug(
                "%s thread still finishing a fetch; its result will be dropped.",
                self._name,
            )
        else:
            self._logger.info("%s stopped.", self._name, extra={"event": "POLL_STOP"})

    @property
    def is_running(self) -> bool:
        """``True`` while mounted."""
        with self._lock:
            return self._mounted

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def poll_once(self) -> bool:
        """Run one fetch/commit cycle.

        Returns ``True`` when a result was committed; ``False`` when not
        mounted, when the fetch failed, or when teardown happened while
        the fetch was in flight.
        """
        with self._lock:
            if not self._mounted:
                return False
            generation = self._generation

        try:
            result = self._fetch()
        except Exception as exc:
            self._logger.warning(
                "%s fetch failed; keeping previous state: %s", self._name, exc,
                extra={"event": "POLL_FETCH_FAILED"},
            )
            with self._lock:
                if (
                    self._on_error is not None
                    and self._mounted
                    and generation == self._generation
                ):
                    self._on_error(exc)
            return False

        with self._lock:
            if not self._mounted or generation != self._generation:
                self._logger.debug(
                    "%s discarded a result fetched before teardown.", self._name,
                )
                return False
            self._commit(result)
        return True

    # ------------------------------------------------------------------
    # Core loop
    # ------------------------------------------------------------------

    def _run_loop(self, stop_event: threading.Event) -> None:
        """Main loop executed on the daemon thread.

        Wrapped in a top-level ``try/except`` so that an unexpected
        exception logs an error rather than silently killing the thread.
        """
        try:
            self.poll_once()
            while not stop_event.wait(timeout=self._interval_s):
                self.poll_once()
        except Exception:
            self._logger.error(
                "%s thread terminated due to unhandled exception.", self._name,
                exc_info=True,
            )
