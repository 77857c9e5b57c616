"""Resolve the JSON file a log record is written to from a path template.

Templates are plain paths with placeholders in braces:

    Logs/{Type}/{yyyy}/{MM-dd}.json

``{Type}`` becomes the record's type name, every other ``{...}`` token is a
.NET-style custom date/time format applied to the current local time.
"""

import os
import re
import logging
from datetime import datetime, timezone

from logcapture.models import LogRecord, LogType, local_now

logger = logging.getLogger(__name__)

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# Single-letter formats are .NET standard formats (invariant culture)
STANDARD_FORMATS = {
    "d": "MM/dd/yyyy",
    "D": "dddd, dd MMMM yyyy",
    "f": "dddd, dd MMMM yyyy HH:mm",
    "F": "dddd, dd MMMM yyyy HH:mm:ss",
    "g": "MM/dd/yyyy HH:mm",
    "G": "MM/dd/yyyy HH:mm:ss",
    "m": "MMMM dd",
    "M": "MMMM dd",
    "o": "yyyy'-'MM'-'dd'T'HH':'mm':'ss'.'fffffffzzz",
    "O": "yyyy'-'MM'-'dd'T'HH':'mm':'ss'.'fffffffzzz",
    "r": "ddd, dd MMM yyyy HH':'mm':'ss 'GMT'",
    "R": "ddd, dd MMM yyyy HH':'mm':'ss 'GMT'",
    "s": "yyyy'-'MM'-'dd'T'HH':'mm':'ss",
    "t": "HH:mm",
    "T": "HH:mm:ss",
    "u": "yyyy'-'MM'-'dd HH':'mm':'ss'Z'",
    "y": "yyyy MMMM",
    "Y": "yyyy MMMM",
}
UTC_STANDARD_FORMATS = "rRu"

_TOKEN_RE = re.compile(
    r"'[^']*'|\"[^\"]*\"|\\.|%|y+|M+|d+|H+|h+|m+|s+|f+|F+|t+|z+|K|.",
    re.DOTALL,
)


def _utc_offset(dt: datetime, width: str) -> str:
    offset = dt.utcoffset()
    if offset is None:
        return ""
    minutes = int(offset.total_seconds() // 60)
    sign = "-" if minutes < 0 else "+"
    hours, mins = divmod(abs(minutes), 60)
    if width == "z":
        return f"{sign}{hours}"
    if width == "zz":
        return f"{sign}{hours:02d}"
    return f"{sign}{hours:02d}:{mins:02d}"


def _format_token(dt: datetime, token: str) -> str:
    head, n = token[0], len(token)
    hour12 = dt.hour % 12 or 12

    if head == "y":
        if n == 1:
            return str(dt.year % 100)
        if n == 2:
            return f"{dt.year % 100:02d}"
        return str(dt.year).zfill(n)
    if head == "M":
        if n == 1:
            return str(dt.month)
        if n == 2:
            return f"{dt.month:02d}"
        if n == 3:
            return MONTH_NAMES[dt.month - 1][:3]
        return MONTH_NAMES[dt.month - 1]
    if head == "d":
        if n == 1:
            return str(dt.day)
        if n == 2:
            return f"{dt.day:02d}"
        if n == 3:
            return DAY_NAMES[dt.weekday()][:3]
        return DAY_NAMES[dt.weekday()]
    if head == "H":
        return str(dt.hour) if n == 1 else f"{dt.hour:02d}"
    if head == "h":
        return str(hour12) if n == 1 else f"{hour12:02d}"
    if head == "m":
        return str(dt.minute) if n == 1 else f"{dt.minute:02d}"
    if head == "s":
        return str(dt.second) if n == 1 else f"{dt.second:02d}"
    if head in "fF":
        digits = f"{dt.microsecond:06d}0"[: min(n, 7)]
        if head == "F":
            digits = digits.rstrip("0")
        return digits
    if head == "t":
        designator = "AM" if dt.hour < 12 else "PM"
        return designator[0] if n == 1 else designator
    if head == "z":
        return _utc_offset(dt, token[:3])
    if token == "K":
        return _utc_offset(dt, "zzz")
    return token


def format_dotnet_datetime(dt: datetime, fmt: str) -> str:
    """Format ``dt`` with a .NET date and time format string, e.g.
    ``yyyy-MM-dd`` or ``h:m:s.ff tt``.

    A format made of one standard specifier letter (``d``, ``M``, ``T``...)
    expands to its invariant-culture pattern; ``%d`` forces the custom
    meaning.
    """
    if len(fmt) == 1 and fmt in STANDARD_FORMATS:
        if fmt in UTC_STANDARD_FORMATS and dt.tzinfo is not None:
            dt = dt.astimezone(timezone.utc)
        fmt = STANDARD_FORMATS[fmt]

    parts = []
    for token in _TOKEN_RE.findall(fmt):
        if token[0] in "'\"":
            parts.append(token[1:-1])
        elif token[0] == "\\":
            parts.append(token[1:])
        elif token == "%":
            continue
        else:
            parts.append(_format_token(dt, token))
    return "".join(parts)


def _type_name(log_type) -> str:
    return log_type.value if isinstance(log_type, LogType) else str(log_type)


def substitute_type(path: str, record: LogRecord) -> str:
    return path.replace("{Type}", _type_name(record.type))


def substitute_datetime(path: str, dt: datetime) -> str:
    """Replace ``{<format>}`` tokens left to right until none remain.

    Malformed braces (missing ``{`` or ``}``, or ``}`` before ``{``) end the
    substitution and the path is returned as it is.
    """
    while True:
        start = path.find("{")
        end = path.find("}")
        if start < 0 or end < 0 or start >= end:
            return path
        param = path[start:end + 1]
        path = path.replace(param, format_dotnet_datetime(dt, param[1:-1]))


def ensure_json_extension(path: str) -> str:
    root, ext = os.path.splitext(path)
    if ext.lower() == ".json":
        return path
    return root + ".json"


def resolve_json_file_path(template: str, record: LogRecord, time_func=None) -> str:
    """Compute the absolute JSON file path for ``record`` and create its
    directory. A non-blank ``record.json_file_path`` wins over ``template``."""
    now = (time_func or local_now)()

    chosen = record.json_file_path if (record.json_file_path or "").strip() else template
    path = os.path.abspath(chosen)
    path = path.replace("/", os.sep).replace("\\", os.sep)

    path = substitute_type(path, record)
    path = substitute_datetime(path, now)
    path = ensure_json_extension(path)

    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)

    logger.debug("Resolved %s -> %s", chosen, path)
    return path
