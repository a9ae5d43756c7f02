"""
Directory of every repository cache, so "clear everything" reaches all of them.
"""
import asyncio
import json
from typing import Dict, List, Optional

from loguru import logger

from catalog.clients import DeviceStore, DeviceStoreError
from catalog.repository import Repository


class CacheRegistry:
    """Holds repository references, keyed by entity name, populated by the composition root."""

    def __init__(self, store: DeviceStore):
        self._store = store
        self._repositories: Dict[str, Repository] = {}

    def register(self, repository: Repository) -> None:
        if repository.name in self._repositories:
            raise ValueError(f"Repository '{repository.name}' is already registered")
        self._repositories[repository.name] = repository

    @property
    def repositories(self) -> List[Repository]:
        return list(self._repositories.values())

    def get(self, name: str) -> Repository:
        return self._repositories[name]

    def clear_all_memory(self) -> None:
        for repository in self._repositories.values():
            repository.invalidate()
        logger.info("🧹 All in-memory caches cleared")

    async def clear_all_persistent(self) -> None:
        keys = []
        for repository in self._repositories.values():
            keys.extend([repository.cache_key, repository.meta_key])
        results = await asyncio.gather(*[self._store.remove(key) for key in keys], return_exceptions=True)
        for key, result in zip(keys, results):
            if isinstance(result, DeviceStoreError):
                logger.debug(f"⚠️ Failed to clear {key}: {result}")
            elif isinstance(result, Exception):
                raise result
        logger.info("🧹 All device-store caches cleared")

    async def clear_all(self) -> None:
        """Clear both the memory and the device-store tier of every repository."""
        self.clear_all_memory()
        await self.clear_all_persistent()

    async def cache_info(self) -> Dict[str, Optional[Dict[str, str]]]:
        """
        Size and last update of every persisted collection.

        Returns:
            Dict[str, Optional[Dict[str, str]]]: entity name -> {"size_kb", "last_updated"},
                                                 or None when nothing is stored.
        """
        info: Dict[str, Optional[Dict[str, str]]] = {}
        for name, repository in self._repositories.items():
            try:
                data = await self._store.get(repository.cache_key)
                meta = await self._store.get(repository.meta_key)
            except DeviceStoreError as e:
                logger.debug(f"⚠️ Could not read cache info for {name}: {e}")
                info[name] = None
                continue
            if not data:
                info[name] = None
                continue
            last_updated = "Unknown"
            if meta:
                try:
                    last_updated = json.loads(meta).get("lastUpdated", "Unknown")
                except (ValueError, AttributeError):
                    pass
            info[name] = {
                "size_kb": f"{len(data) / 1024:.2f}",
                "last_updated": last_updated,
            }
        return info
