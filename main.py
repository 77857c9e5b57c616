#!/usr/bin/env python3
"""Log capture demo — emits sample records of every type into batched JSON log files."""

import argparse
import logging
import random
import signal
import sys
import time

from logcapture.config import load_config, load_yaml_config
from logcapture.models import LogType
from logcapture.service import LogCaptureService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [log-capture] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

_running = True


def _signal_handler(sig, _frame):
    global _running
    logger.info("Shutdown signal received (signal %d), stopping...", sig)
    _running = False


SAMPLE_MESSAGES = {
    LogType.Debug: ["Entering request handler", "Parsed request body"],
    LogType.Info: ["Request processed successfully", "Health check passed"],
    LogType.Warning: ["Slow query detected (>500ms)", "Connection pool nearing capacity"],
    LogType.Error: ["Failed to connect to database", "Invalid auth token received"],
    LogType.Fatal: ["Unrecoverable state, shutting down worker"],
}


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Log Capture demo")
    parser.add_argument("--config", default=None, help="Path to YAML config file")
    parser.add_argument("--count", type=int, default=50, help="Number of sample records")
    parser.add_argument("--interval", type=float, default=0.05,
                        help="Seconds between sample records")
    return parser


def _capture_sample_exception(service: LogCaptureService):
    try:
        {}["missing"]
    except KeyError as e:
        service.capture(e, LogType.Error, context={"path": "/orders", "method": "GET"})


def main(argv=None):
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    args = build_cli_parser().parse_args(argv)
    config = load_config(load_yaml_config(args.config))
    logger.info(
        "Config: path=%s, batch_size=%d, threshold=%.1fs, full_info=%s, console=%s, file=%s",
        config.json_file_path, config.batch_size, config.threshold_seconds,
        config.is_log_full_info, config.is_enable_log_to_console, config.is_enable_log_to_file,
    )

    service = LogCaptureService(config)
    emitted = 0

    try:
        while _running and emitted < args.count:
            log_type = random.choice(list(SAMPLE_MESSAGES))
            service.capture(random.choice(SAMPLE_MESSAGES[log_type]), log_type)
            emitted += 1
            if emitted % 10 == 0:
                _capture_sample_exception(service)
                service.capture({"order_id": emitted, "status": "pending"}, LogType.Info)
            time.sleep(args.interval)
    except KeyboardInterrupt:
        pass

    service.stop()
    logger.info("Shut down cleanly. Records written: %d, skipped: %d",
                service.written_count, service.skipped_count)


if __name__ == "__main__":
    main()
