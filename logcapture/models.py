"""Log record and per-file metadata models with factory helpers."""

import json
import os
import platform
import socket
import sys
import traceback
from dataclasses import dataclass, field, asdict, fields
from datetime import datetime
from enum import Enum
from typing import Any, Optional

SDK_NAME = "logcapture"
SDK_VERSION = "1.0.0"


class LogType(Enum):
    Debug = "Debug"
    Info = "Info"
    Warning = "Warning"
    Error = "Error"
    Fatal = "Fatal"


def local_now() -> datetime:
    """Timezone-aware local time."""
    return datetime.now().astimezone()


@dataclass
class LogRecord:
    message: str
    type: LogType = LogType.Error
    created_time: datetime = field(default_factory=local_now)
    exception_type: Optional[str] = None
    exception_place: Optional[str] = None
    stack_trace: Optional[str] = None
    data: Any = None
    context: Optional[dict] = None
    runtime: Optional[dict] = None
    environment: Optional[dict] = None
    sdk: Optional[dict] = None
    json_file_path: Optional[str] = None  # routing only, never persisted

    def __setattr__(self, name, value):
        if name == "created_time" and "created_time" in self.__dict__:
            raise AttributeError("created_time is read-only once the record is built")
        super().__setattr__(name, value)


@dataclass
class LogMetadata:
    created_time: datetime
    last_updated_time: datetime
    file_name: str
    file_size: str
    total_log_count: int = 0


# Snapshots of the process the record was captured in

def runtime_snapshot() -> dict:
    return {
        "implementation": platform.python_implementation(),
        "version": platform.python_version(),
        "executable": sys.executable,
    }


def environment_snapshot() -> dict:
    return {
        "machine_name": socket.gethostname(),
        "os": platform.platform(),
        "process_id": os.getpid(),
        "working_directory": os.getcwd(),
    }


def sdk_snapshot() -> dict:
    return {"name": SDK_NAME, "version": SDK_VERSION}


def _exception_place(exc: BaseException) -> Optional[str]:
    tb = exc.__traceback__
    if tb is None:
        return None
    while tb.tb_next is not None:
        tb = tb.tb_next
    frame = tb.tb_frame
    module = frame.f_globals.get("__name__", "?")
    return f"{module}.{frame.f_code.co_name}:{tb.tb_lineno}"


def _object_fields(obj) -> dict:
    try:
        text = json.dumps(obj, default=str)
    except (TypeError, ValueError):
        text = repr(obj)
    try:
        json.dumps(obj)
        data = obj
    except (TypeError, ValueError):
        data = text
    return {"message": text, "data": data}


def create_log_record(
    payload,
    log_type: LogType = LogType.Error,
    context: Optional[dict] = None,
    json_file_path: Optional[str] = None,
) -> LogRecord:
    """Build a LogRecord from a message, an exception or any other object.

    All three kinds end up with the same normalized text fields: ``message`` is
    always a string, exceptions additionally fill ``exception_type``,
    ``exception_place`` and ``stack_trace``, other objects keep a JSON-friendly
    copy in ``data``.
    """
    if isinstance(payload, BaseException):
        cls = type(payload)
        kwargs = {
            "message": str(payload) or cls.__name__,
            "exception_type": f"{cls.__module__}.{cls.__qualname__}",
            "exception_place": _exception_place(payload),
            "stack_trace": "".join(
                traceback.format_exception(cls, payload, payload.__traceback__)
            ),
        }
    elif isinstance(payload, str):
        kwargs = {"message": payload}
    else:
        kwargs = _object_fields(payload)

    return LogRecord(
        type=log_type,
        context=dict(context) if context is not None else None,
        runtime=runtime_snapshot(),
        environment=environment_snapshot(),
        sdk=sdk_snapshot(),
        json_file_path=json_file_path,
        **kwargs,
    )


def record_to_dict(record: LogRecord) -> dict:
    """Convert a LogRecord to a JSON-ready dictionary."""
    data = asdict(record)
    data["type"] = record.type.value if isinstance(record.type, LogType) else str(record.type)
    data["created_time"] = record.created_time.isoformat()
    return data


def record_from_dict(data: dict) -> LogRecord:
    known = {f.name for f in fields(LogRecord)}
    kwargs = {k: v for k, v in data.items() if k in known}
    type_name = kwargs.get("type", LogType.Error.value)
    # Unknown type names stay plain strings
    if type_name in LogType.__members__:
        kwargs["type"] = LogType[type_name]
    if "created_time" in kwargs:
        kwargs["created_time"] = datetime.fromisoformat(kwargs["created_time"])
    return LogRecord(**kwargs)


def metadata_to_dict(metadata: LogMetadata) -> dict:
    data = asdict(metadata)
    data["created_time"] = metadata.created_time.isoformat()
    data["last_updated_time"] = metadata.last_updated_time.isoformat()
    return data


def metadata_from_dict(data: dict) -> LogMetadata:
    return LogMetadata(
        created_time=datetime.fromisoformat(data["created_time"]),
        last_updated_time=datetime.fromisoformat(data["last_updated_time"]),
        file_name=data["file_name"],
        file_size=data["file_size"],
        total_log_count=int(data.get("total_log_count", 0)),
    )
