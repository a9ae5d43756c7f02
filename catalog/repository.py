"""
Generic three-tier repository: in-memory list -> device store -> remote document store.
"""
import asyncio
import json
from datetime import datetime
from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from aiohttp import ClientError
from loguru import logger

from catalog.config import META_SUFFIX
from catalog.clients import DeviceStore, DeviceStoreError, RemoteStoreClient, RemoteStoreError
from catalog.models import RecordError

T = TypeVar("T")

REMOTE_ERRORS = (RemoteStoreError, ClientError, asyncio.TimeoutError)


class Repository(Generic[T]):
    """
    Read API over one entity collection.

    The in-memory list is None until populated; an empty list is valid, populated data.
    Reads never raise for remote or device-store failures: they degrade to the next tier,
    and finally to an empty result.
    """

    def __init__(
        self,
        name: str,
        collection: str,
        cache_key: str,
        record_type: Type[T],
        remote: RemoteStoreClient,
        store: DeviceStore,
        relation_field: Optional[str] = None,
    ):
        self.name = name
        self.collection = collection
        self.cache_key = cache_key
        self.meta_key = f"{cache_key}{META_SUFFIX}"
        self.record_type = record_type
        self.relation_field = relation_field
        self._remote = remote
        self._store = store
        self._cache: Optional[List[T]] = None

    @property
    def is_populated(self) -> bool:
        return self._cache is not None

    @property
    def cached(self) -> Optional[List[T]]:
        """Snapshot of the in-memory tier, or None when unpopulated."""
        return None if self._cache is None else list(self._cache)

    def _parse(self, records: Iterable[Dict[str, Any]], source: str) -> List[T]:
        items = []
        for record in records:
            try:
                items.append(self.record_type.from_record(record))
            except RecordError as e:
                logger.warning(f"⚠️ Skipping malformed {self.name} record from {source}: {e}")
        return items

    async def _read_persistent(self) -> Optional[List[T]]:
        """Returns the device-store snapshot, or None when absent or unreadable."""
        try:
            raw = await self._store.get(self.cache_key)
        except DeviceStoreError as e:
            logger.debug(f"⚠️ Could not read {self.cache_key}: {e}")
            return None
        if raw is None:
            return None
        try:
            records = json.loads(raw)
        except ValueError as e:
            logger.warning(f"⚠️ Corrupt payload in {self.cache_key}: {e}")
            return None
        if not isinstance(records, list):
            logger.warning(f"⚠️ Corrupt payload in {self.cache_key}: expected a list")
            return None
        items = self._parse(records, "device store")
        if records and not items:
            logger.warning(f"⚠️ Corrupt payload in {self.cache_key}: no readable records")
            return None
        return items

    async def _write_through(self, items: List[T]) -> None:
        payload = json.dumps([item.to_record() for item in items])
        meta = json.dumps({"lastUpdated": datetime.now().isoformat()})
        try:
            await self._store.set(self.cache_key, payload)
            await self._store.set(self.meta_key, meta)
        except DeviceStoreError as e:
            logger.debug(f"⚠️ Could not write {self.cache_key}: {e}")

    async def get_all(self) -> List[T]:
        """
        Return the whole collection with best available freshness.

        Memory hit returns without I/O. Otherwise the remote store is tried once; a successful
        fetch replaces the memory tier and, when non-empty, is written through to the device
        store. On remote failure the device-store snapshot is used. Both failing yields [].
        """
        if self._cache is not None:
            return list(self._cache)

        try:
            records = await self._remote.list_documents(self.collection)
        except REMOTE_ERRORS as e:
            logger.debug(f"⚠️ Remote fetch of {self.collection} failed, falling back to device store: {e}")
        else:
            items = self._parse(records, "remote store")
            self._cache = items
            if items:
                await self._write_through(items)
            else:
                logger.debug(f"Remote {self.collection} is empty; keeping the stored snapshot")
            return list(items)

        stored = await self._read_persistent()
        if stored is not None:
            self._cache = stored
            logger.debug(f"📦 Loaded {len(stored)} {self.name} from device store")
            return list(stored)

        logger.debug(f"No {self.name} available from any tier")
        return []

    async def get_by_id(self, item_id: str) -> Optional[T]:
        if self._cache is not None:
            for item in self._cache:
                if item.id == item_id:
                    return item

        try:
            record = await self._remote.get_document(self.collection, item_id)
        except REMOTE_ERRORS as e:
            logger.debug(f"⚠️ Remote read of {self.collection}/{item_id} failed: {e}")
            record = None
        if record is not None:
            parsed = self._parse([record], "remote store")
            if parsed:
                return parsed[0]

        for item in await self.get_all():
            if item.id == item_id:
                return item
        return None

    async def get_by_relation(self, related_id: str) -> List[T]:
        """Entities whose relation field lists `related_id`."""
        if self.relation_field is None:
            raise ValueError(f"{self.name} has no relation field")
        return [item for item in await self.get_all() if related_id in getattr(item, self.relation_field)]

    def clear_cache(self) -> None:
        """Mark the memory tier unpopulated; the device store is untouched."""
        self._cache = None
        logger.debug(f"Cleared in-memory {self.name} cache")

    invalidate = clear_cache

    async def load_initial_cache_from_storage(self) -> None:
        """Warm the memory tier from the device store, once."""
        if self._cache is not None:
            return
        stored = await self._read_persistent()
        # A concurrent get_all may have populated memory while the store was read
        if stored is not None and self._cache is None:
            self._cache = stored
            logger.debug(f"📦 Warm-started {len(stored)} {self.name} from device store")
