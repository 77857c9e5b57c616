"""Log capture service — builds records, echoes them to the console and
batches them into JSON log files."""

import copy
import threading
import logging

from logcapture.batch_queue import BatchQueue
from logcapture.config import Config
from logcapture.console import write_console
from logcapture.file_writer import write_log_to_file
from logcapture.models import LogRecord, LogType, create_log_record
from logcapture.path_resolver import resolve_json_file_path

logger = logging.getLogger(__name__)


class LogCaptureService:
    """Entry point the rest of an application logs through.

    ``capture`` returns immediately: console output happens on the calling
    thread, file output happens later when the batch queue flushes.
    """

    def __init__(
        self,
        config: Config,
        shutdown_event: threading.Event | None = None,
        console_stream=None,
        time_func=None,
        tick_interval: float = 0.1,
    ):
        self._config = config
        self._console_stream = console_stream
        self._time_func = time_func
        self._written = 0
        self._skipped = 0
        self._queue = BatchQueue(
            batch_size=config.batch_size,
            threshold=config.threshold_seconds,
            execute=self._execute,
            shutdown_event=shutdown_event,
            tick_interval=tick_interval,
        )

    # ------------------------------------------------------------------
    # Capture
    # ------------------------------------------------------------------

    def capture(
        self,
        payload,
        log_type: LogType = LogType.Error,
        context: dict | None = None,
        json_file_path: str | None = None,
    ) -> LogRecord:
        """Capture a message, an exception or any other object."""
        record = create_log_record(payload, log_type, context, json_file_path)
        return self.capture_record(record)

    def capture_record(self, record: LogRecord) -> LogRecord:
        if self._config.is_enable_log_to_console:
            write_console(record, self._console_stream)

        if self._config.is_enable_log_to_file:
            self._queue.push(record)

        return record

    # ------------------------------------------------------------------
    # Flush execution (called by BatchQueue)
    # ------------------------------------------------------------------

    def _execute(self, batch: list[LogRecord]):
        """Filter, hook and persist every record of a flushed batch.

        The first failing record aborts the rest of the batch.
        """
        for record in batch:
            log = copy.copy(record)

            if not self._config.is_log_full_info:
                log.context = None
                log.runtime = None
                log.environment = None
                log.sdk = None
            else:
                # Hooks must not reach the caller's dicts
                log.context = copy.deepcopy(record.context)
                log.runtime = copy.deepcopy(record.runtime)
                log.environment = copy.deepcopy(record.environment)
                log.sdk = copy.deepcopy(record.sdk)

            if self._config.before_log is not None:
                log = self._config.before_log(log)

            if log is None:
                self._skipped += 1
                continue

            self._write_to_file(log)
            self._written += 1

            if self._config.after_log is not None:
                self._config.after_log(log)

        logger.debug("Processed batch of %d records (%d written, %d skipped so far)",
                     len(batch), self._written, self._skipped)

    def _write_to_file(self, log: LogRecord):
        if not self._config.is_enable_log_to_file:
            return
        path = resolve_json_file_path(self._config.json_file_path, log, self._time_func)
        write_log_to_file(path, log, self._time_func)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def flush(self) -> bool:
        """Write everything buffered right now."""
        return self._queue.flush()

    def stop(self):
        """Stop the flush timer and drain the queue."""
        self._queue.stop()
        logger.debug("Log capture stopped: %d written, %d skipped",
                     self._written, self._skipped)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False

    @property
    def written_count(self) -> int:
        return self._written

    @property
    def skipped_count(self) -> int:
        return self._skipped

    @property
    def pending_count(self) -> int:
        return self._queue.pending_count

    @property
    def config(self) -> Config:
        return self._config
