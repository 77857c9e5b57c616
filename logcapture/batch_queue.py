"""Batch queue — buffers log records and flushes on size or age threshold."""

import threading
import time
import logging

logger = logging.getLogger(__name__)


class BatchQueue:
    """Thread-safe buffer that hands batches to an ``execute`` callback when
    either the batch size is reached or the oldest buffered item gets older
    than ``threshold`` seconds.

    Producers only hold the buffer lock while appending. Swap-and-execute runs
    under a separate flush lock, so at most one batch is executed at a time and
    batches reach ``execute`` in enqueue order. A push that is not due never
    waits for a running flush. Items pushed from inside ``execute`` stay
    buffered until the next flush. A stuck ``execute`` blocks every later
    flush; there is no timeout.
    """

    def __init__(
        self,
        batch_size: int,
        threshold: float,
        execute,
        shutdown_event: threading.Event | None = None,
        tick_interval: float = 0.1,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._batch_size = batch_size
        self._threshold = threshold
        self._execute = execute
        self._shutdown = shutdown_event or threading.Event()
        self._tick_interval = tick_interval

        self._buffer: list = []
        self._lock = threading.Lock()
        self._flush_lock = threading.RLock()
        self._executing = False
        self._oldest: float | None = None
        self._flush_count = 0

        self._timer_thread = threading.Thread(
            target=self._flush_timer, name="batch-queue-timer", daemon=True
        )
        self._timer_thread.start()

    # Public API

    def push(self, item):
        """Append an item, then flush if a threshold has been reached."""
        with self._lock:
            if not self._buffer:
                self._oldest = time.monotonic()
            self._buffer.append(item)
        self.flush_if_due()

    def flush_if_due(self) -> bool:
        """Flush the buffer if it is full or too old. Returns True if a batch
        was executed."""
        return self._flush(force=False)

    def flush(self) -> bool:
        """Flush whatever is buffered regardless of thresholds."""
        return self._flush(force=True)

    def stop(self):
        """Stop the timer thread and flush remaining items."""
        self._shutdown.set()
        self._timer_thread.join(timeout=5)
        self.flush()

    @property
    def pending_count(self) -> int:
        """Number of items currently waiting in the buffer."""
        with self._lock:
            return len(self._buffer)

    @property
    def flush_count(self) -> int:
        return self._flush_count

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def threshold(self) -> float:
        return self._threshold

    # Internal helpers

    def _is_due(self) -> bool:
        # Must be called with self._lock held
        if not self._buffer:
            return False
        if len(self._buffer) >= self._batch_size:
            return True
        return time.monotonic() - self._oldest >= self._threshold

    def _flush(self, force: bool) -> bool:
        if not force:
            with self._lock:
                if not self._is_due():
                    return False

        with self._flush_lock:
            # Re-entrant call from inside execute (e.g. a hook that logs):
            # leave the items buffered for the next flush
            if self._executing:
                return False

            with self._lock:
                if not self._buffer or not (force or self._is_due()):
                    return False
                batch = self._buffer
                self._buffer = []
                self._oldest = None

            self._flush_count += 1
            logger.debug("Executing batch #%d of %d items", self._flush_count, len(batch))
            self._executing = True
            try:
                self._execute(batch)
            finally:
                self._executing = False
            return True

    def _flush_timer(self):
        """Background thread that flushes aged items even when no producer
        pushes."""
        while not self._shutdown.is_set():
            self._shutdown.wait(timeout=self._tick_interval)
            try:
                self.flush_if_due()
            except Exception:
                logger.exception("Timed flush failed")
