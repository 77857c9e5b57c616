"""Minimal JSON document store: named collections kept in a single file."""

import json
import os
import threading
import weakref
import logging

logger = logging.getLogger(__name__)

# Entries vanish once no open store holds the lock
_path_locks = weakref.WeakValueDictionary()
_path_locks_guard = threading.Lock()


def _lock_for(path: str) -> threading.RLock:
    with _path_locks_guard:
        lock = _path_locks.get(path)
        if lock is None:
            lock = threading.RLock()
            _path_locks[path] = lock
        return lock


class Collection:
    """A named list of documents. Every mutation persists the whole store."""

    def __init__(self, store: "JsonDocumentStore", name: str):
        self._store = store
        self._name = name

    @property
    def _docs(self) -> list[dict]:
        return self._store._data.setdefault(self._name, [])

    def all(self) -> list[dict]:
        return [dict(doc) for doc in self._docs]

    def count(self) -> int:
        return len(self._docs)

    def first(self) -> dict | None:
        docs = self._docs
        return dict(docs[0]) if docs else None

    def insert_one(self, doc: dict):
        self._docs.append(dict(doc))
        self._store.save()

    def insert_many(self, docs: list[dict]):
        self._docs.extend(dict(doc) for doc in docs)
        self._store.save()

    def delete_many(self, predicate) -> int:
        docs = self._docs
        kept = [doc for doc in docs if not predicate(doc)]
        removed = len(docs) - len(kept)
        self._store._data[self._name] = kept
        self._store.save()
        return removed

    def update_one(self, predicate, doc: dict) -> bool:
        for i, existing in enumerate(self._docs):
            if predicate(existing):
                self._docs[i] = dict(doc)
                self._store.save()
                return True
        return False


class JsonDocumentStore:
    """Context manager that holds an exclusive per-path lock while open.

    A missing file opens as an empty store; the file is created on the first
    write. Saves go through a temp file and ``os.replace``.
    """

    def __init__(self, path: str):
        self._path = path
        self._lock = _lock_for(os.path.abspath(path))
        self._data: dict[str, list[dict]] = {}

    @property
    def path(self) -> str:
        return self._path

    def __enter__(self):
        self._lock.acquire()
        try:
            self._load()
        except BaseException:
            self._lock.release()
            raise
        return self

    def __exit__(self, exc_type, exc, tb):
        self._lock.release()
        return False

    def _load(self):
        if not os.path.exists(self._path):
            self._data = {}
            return
        with open(self._path, "r", encoding="utf-8") as f:
            content = f.read()
        self._data = json.loads(content) if content.strip() else {}
        logger.debug("Loaded %s (%s)", self._path, ", ".join(
            f"{name}={len(docs)}" for name, docs in self._data.items()
        ))

    def save(self):
        """Atomic write: write to tmp file then replace."""
        os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
        tmp_path = self._path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, default=str)
        os.replace(tmp_path, self._path)

    def get_collection(self, name: str) -> Collection:
        return Collection(self, name)
