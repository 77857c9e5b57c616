"""Console renderer — colorized one-line output for log records (ANSI)."""

import sys

from logcapture.models import LogRecord, LogType, local_now
from logcapture.path_resolver import format_dotnet_datetime

# ANSI background colors
BACKGROUNDS = {
    LogType.Debug: "\033[47m",    # gray
    LogType.Info: "\033[46m",     # cyan
    LogType.Warning: "\033[43m",  # dark yellow
    LogType.Error: "\033[41m",    # red
    LogType.Fatal: "\033[45m",    # magenta
}
PREFIXES = {
    LogType.Debug: "D",
    LogType.Info: "I",
    LogType.Warning: "W",
    LogType.Error: "E",
    LogType.Fatal: "F",
}
FOREGROUND = "\033[97m"  # white
RESET = "\033[0m"
FALLBACK_PREFIX = "[LOG]"
TIME_FORMAT = "h:m:s.ff tt"


def _prefix(record: LogRecord, now) -> str:
    timestamp = format_dotnet_datetime(now, TIME_FORMAT)
    letter = PREFIXES.get(record.type)
    if letter is None:
        name = record.type.value if isinstance(record.type, LogType) else str(record.type)
        letter = name[:4]
    color = BACKGROUNDS.get(record.type, BACKGROUNDS[LogType.Error])
    return f"{color}{FOREGROUND}[{letter}] [{timestamp}]{RESET}"


def render_record(record: LogRecord, now=None) -> str:
    """Return the colorized console line for ``record``. Never raises; a broken
    prefix falls back to ``[LOG]``."""
    try:
        prefix = _prefix(record, now or local_now())
    except Exception:
        prefix = FALLBACK_PREFIX

    line = prefix
    if record.exception_place and str(record.exception_place).strip():
        line += f" {record.exception_place}.\n"
    return line + f" {record.message}."


def write_console(record: LogRecord, stream=None):
    """Print ``record`` to ``stream`` (stdout by default)."""
    stream = stream or sys.stdout
    stream.write(render_record(record) + "\n")
    stream.flush()
