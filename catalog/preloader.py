"""
Startup and manual-refresh sequencing across all repositories.
"""
import asyncio

from loguru import logger

from catalog.cache_registry import CacheRegistry
from catalog.clients import ReachabilityClient


class Preloader:
    """
    Warms every repository from the device store, then refreshes from the remote store
    when the device is connected.
    """

    def __init__(self, registry: CacheRegistry, reachability: ReachabilityClient):
        self.registry = registry
        self.reachability = reachability

    async def _is_connected(self) -> bool:
        try:
            return await self.reachability.is_connected()
        except Exception as e:
            logger.debug(f"⚠️ Reachability check failed: {e}")
            return False

    async def preload(self) -> None:
        """
        Runs once at startup and never raises.

        Phase 1 loads every memory tier from the device store so the app can render offline.
        Phase 2 fetches fresh data, only when reachable; results are written through as a side effect.
        """
        repositories = self.registry.repositories
        logger.info("Starting data preloading...")

        try:
            await asyncio.gather(*[repo.load_initial_cache_from_storage() for repo in repositories])
            logger.info("Local caches initialized from device store")
        except Exception as e:
            logger.error(f"Error warming caches from device store: {e}")

        if not await self._is_connected():
            logger.info("Offline, using cached data only")
            return

        try:
            logger.info("Online, fetching fresh data from remote store...")
            await asyncio.gather(*[repo.get_all() for repo in repositories])
            logger.info("Remote data fetch complete")
        except Exception as e:
            logger.error(f"Error in data preloading: {e}")

    async def refresh(self) -> bool:
        """
        Force every repository to re-fetch.

        Returns:
            bool: True if the re-fetch ran; False when offline or when it raised.
        """
        self.registry.clear_all_memory()

        if not await self._is_connected():
            logger.info("Cannot refresh data while offline")
            return False

        try:
            await asyncio.gather(*[repo.get_all() for repo in self.registry.repositories])
        except Exception as e:
            logger.error(f"Error refreshing app data: {e}")
            return False
        return True
