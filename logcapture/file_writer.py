"""Write log records into per-file JSON stores and keep their metadata row
current."""

import os
import logging
from datetime import datetime

from logcapture.models import (
    LogMetadata,
    LogRecord,
    local_now,
    metadata_from_dict,
    metadata_to_dict,
    record_to_dict,
)
from logcapture.store import JsonDocumentStore

logger = logging.getLogger(__name__)

LOGS_COLLECTION = "logs"
METADATA_COLLECTION = "metadata"

_SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]


def humanize_bytes(size: int) -> str:
    """Render a byte count like ``512 B``, ``1.21 KB`` or ``3.4 MB``."""
    value = float(size)
    for unit in _SIZE_UNITS:
        if value < 1024 or unit == _SIZE_UNITS[-1]:
            if unit == "B":
                return f"{int(value)} B"
            return f"{value:.2f}".rstrip("0").rstrip(".") + f" {unit}"
        value /= 1024
    return f"{size} B"


def _file_size(path: str) -> int:
    try:
        return os.path.getsize(path)
    except FileNotFoundError:
        return 0


def _created_time(doc: dict) -> datetime:
    return datetime.fromisoformat(doc["created_time"])


def write_metadata(store: JsonDocumentStore, time_func=None) -> LogMetadata:
    """Insert or refresh the single metadata row of ``store``."""
    now = (time_func or local_now)()
    metadatas = store.get_collection(METADATA_COLLECTION)
    existing = metadatas.first()

    file_name = os.path.basename(store.path)
    file_size = humanize_bytes(_file_size(store.path))
    total = store.get_collection(LOGS_COLLECTION).count()

    if existing is None:
        metadata = LogMetadata(
            created_time=now,
            last_updated_time=now,
            file_name=file_name,
            file_size=file_size,
            total_log_count=total,
        )
        metadatas.insert_one(metadata_to_dict(metadata))
    else:
        metadata = metadata_from_dict(existing)
        metadata.last_updated_time = now
        metadata.file_name = file_name
        metadata.file_size = file_size
        metadata.total_log_count = total
        metadatas.update_one(lambda doc: True, metadata_to_dict(metadata))
    return metadata


def write_log(store: JsonDocumentStore, record: LogRecord):
    """Insert ``record`` and rewrite the logs collection newest-first."""
    doc = record_to_dict(record)
    doc.pop("json_file_path", None)

    logs = store.get_collection(LOGS_COLLECTION)
    logs.insert_one(doc)

    ordered = sorted(logs.all(), key=_created_time, reverse=True)
    logs.delete_many(lambda d: True)
    logs.insert_many(ordered)


def write_log_to_file(path: str, record: LogRecord, time_func=None) -> LogMetadata:
    """Persist one record into the JSON store at ``path``.

    The store stays locked for the whole read-modify-write cycle. Errors are
    not caught and nothing is rolled back.
    """
    is_new_file = not os.path.exists(path)

    with JsonDocumentStore(path) as store:
        # Metadata goes first on a new file, then the log
        if is_new_file:
            write_metadata(store, time_func)

        write_log(store, record)
        metadata = write_metadata(store, time_func)

    logger.debug("Wrote record to %s (%d total, %s)",
                 path, metadata.total_log_count, metadata.file_size)
    return metadata
