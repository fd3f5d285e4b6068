# -*- coding: utf-8 -*-
"""Persistent key-value storage backed by SQLite.

`LocalStorage` mirrors the browser's localStorage contract: one JSON document
per key, reads fall back to a default, and write failures are logged instead
of raised. `StoredValue` binds one key to an in-memory copy that follows the
change channel.
"""

from __future__ import annotations

import copy
import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Generic, List, Optional, TypeVar, Union

from pydantic import TypeAdapter

from ..app_db import db_conn, init_app_db
from .channel import ChangeChannel, StorageChange

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Values the browser app could leave behind for "nothing stored".
_EMPTY_MARKERS = {"", "undefined"}


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _decode(raw: str, adapter: TypeAdapter | None) -> Any:
    if adapter is not None:
        return adapter.validate_json(raw)
    return json.loads(raw)


def _encode(value: Any, adapter: TypeAdapter | None) -> str:
    if adapter is not None:
        return adapter.dump_json(value).decode("utf-8")
    return json.dumps(value, ensure_ascii=False)


class LocalStorage:
    def __init__(self, db_path: Path, channel: ChangeChannel | None = None) -> None:
        self.db_path = db_path
        self.channel = channel or ChangeChannel()
        init_app_db(db_path)

    # ---- raw access ----

    def get_item(self, key: str) -> Optional[str]:
        with db_conn(self.db_path) as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None

    def set_item(self, key: str, serialized: str) -> None:
        with db_conn(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, serialized, _utc_now()),
            )

    def keys(self) -> List[str]:
        try:
            with db_conn(self.db_path) as conn:
                rows = conn.execute("SELECT key FROM kv_store ORDER BY key ASC").fetchall()
                return [r["key"] for r in rows]
        except (sqlite3.Error, OSError) as exc:
            logger.error("Error listing storage keys: %s", exc)
            return []

    # ---- typed access ----

    def read(self, key: str, default: T, adapter: TypeAdapter | None = None) -> T:
        try:
            raw = self.get_item(key)
        except (sqlite3.Error, OSError) as exc:
            logger.error("Error reading storage key %r: %s", key, exc)
            return default
        if raw is None or raw.strip() in _EMPTY_MARKERS:
            return default
        try:
            return _decode(raw, adapter)
        except ValueError as exc:
            # Covers json.JSONDecodeError and pydantic.ValidationError.
            logger.error("Error parsing storage key %r: %s", key, exc)
            return default

    def write(self, key: str, value: Any, adapter: TypeAdapter | None = None) -> bool:
        try:
            serialized = _encode(value, adapter)
        except (TypeError, ValueError) as exc:
            logger.error("Error serializing storage key %r: %s", key, exc)
            return False
        try:
            self.set_item(key, serialized)
        except (sqlite3.Error, OSError) as exc:
            logger.error("Error setting storage key %r: %s", key, exc)
            return False
        self.channel.publish(StorageChange(key=key, serialized_value=serialized))
        return True

    def remove(self, key: str) -> bool:
        try:
            with db_conn(self.db_path) as conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        except (sqlite3.Error, OSError) as exc:
            logger.error("Error removing storage key %r: %s", key, exc)
            return False
        self.channel.publish(StorageChange(key=key, serialized_value=None))
        return True


class StoredValue(Generic[T]):
    """One storage key mirrored in memory."""

    def __init__(
        self,
        storage: LocalStorage,
        key: str,
        default: T,
        adapter: TypeAdapter | None = None,
    ) -> None:
        self.storage = storage
        self.key = key
        self.adapter = adapter
        self._default = default
        self._value: T = storage.read(key, self._fresh_default(), adapter)
        self._unsubscribe = storage.channel.subscribe(key, self._on_change)

    def _fresh_default(self) -> T:
        return copy.deepcopy(self._default)

    @property
    def value(self) -> T:
        return self._value

    def set(self, new_value: Union[T, Callable[[T], T]]) -> T:
        value = new_value(self._value) if callable(new_value) else new_value
        # In-memory state wins even when persisting fails.
        self._value = value
        self.storage.write(self.key, value, self.adapter)
        return value

    def reset(self) -> bool:
        """Drop back to the default in memory, then delete the stored key."""
        self._value = self._fresh_default()
        return self.storage.remove(self.key)

    def _on_change(self, change: StorageChange) -> None:
        if change.serialized_value is None:
            self._value = self._fresh_default()
            return
        try:
            self._value = _decode(change.serialized_value, self.adapter)
        except ValueError as exc:
            logger.error("Error parsing storage change for key %r: %s", self.key, exc)

    def close(self) -> None:
        self._unsubscribe()
