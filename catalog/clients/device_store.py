"""
Persistent key/value store on the device, backed by sqlite.
"""
import asyncio
import sqlite3
from contextlib import closing
from typing import List, Optional

from catalog.config import DEVICE_STORE_PATH


class DeviceStoreError(Exception):
    """Raised when the device store cannot be read or written."""


class DeviceStore:
    """
    String-keyed, string-valued storage that survives process restarts.
    Each call opens its own connection; blocking sqlite work runs in a worker thread.
    """

    def __init__(self, path: str = DEVICE_STORE_PATH):
        self.path = str(path)
        self._schema_ready = False

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        if not self._schema_ready:
            with conn:
                conn.execute("CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)")
            self._schema_ready = True
        return conn

    def _get(self, key: str) -> Optional[str]:
        with closing(self._connect()) as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None

    def _set(self, key: str, value: str) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(
                "INSERT INTO kv (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )

    def _remove(self, key: str) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))

    def _keys(self) -> List[str]:
        with closing(self._connect()) as conn:
            return [row[0] for row in conn.execute("SELECT key FROM kv ORDER BY key")]

    async def _run(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except sqlite3.Error as e:
            raise DeviceStoreError(f"Device store {fn.__name__.lstrip('_')} failed: {e}") from e

    async def get(self, key: str) -> Optional[str]:
        return await self._run(self._get, key)

    async def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"Device store values must be strings, got {type(value).__name__}")
        await self._run(self._set, key, value)

    async def remove(self, key: str) -> None:
        await self._run(self._remove, key)

    async def keys(self) -> List[str]:
        return await self._run(self._keys)
