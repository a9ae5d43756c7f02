"""
Composition root: builds the clients, the four repositories, the cache registry,
the preloader and the completion state manager, and exposes the accessors the UI uses.
"""
from typing import Dict, List, Optional, Union

from loguru import logger

from catalog import config
from catalog import queries
from catalog.cache_registry import CacheRegistry
from catalog.clients import DeviceStore, ReachabilityClient, RemoteStoreClient
from catalog.completion import CompletionStateManager
from catalog.models import Business, CompletionSummary, DateIdea, GiftIdea, IdeaType, Product
from catalog.preloader import Preloader
from catalog.repository import Repository


class CatalogApp:
    """
    Process-wide owner of the data layer.

    Nothing runs at construction time; call `initialize()` once at startup.
    """

    def __init__(
        self,
        remote: Optional[RemoteStoreClient] = None,
        store: Optional[DeviceStore] = None,
        reachability: Optional[ReachabilityClient] = None,
    ):
        self.remote = remote or RemoteStoreClient()
        self.store = store or DeviceStore()
        self.reachability = reachability or ReachabilityClient()

        self.date_ideas: Repository[DateIdea] = Repository(
            "date_ideas", config.DATE_IDEAS_COLLECTION, config.DATE_IDEAS_CACHE_KEY,
            DateIdea, self.remote, self.store,
        )
        self.gift_ideas: Repository[GiftIdea] = Repository(
            "gift_ideas", config.GIFT_IDEAS_COLLECTION, config.GIFT_IDEAS_CACHE_KEY,
            GiftIdea, self.remote, self.store,
        )
        self.businesses: Repository[Business] = Repository(
            "businesses", config.BUSINESSES_COLLECTION, config.BUSINESSES_CACHE_KEY,
            Business, self.remote, self.store, relation_field="related_idea_ids",
        )
        self.products: Repository[Product] = Repository(
            "products", config.PRODUCTS_COLLECTION, config.PRODUCTS_CACHE_KEY,
            Product, self.remote, self.store, relation_field="related_gift_ids",
        )

        self.registry = CacheRegistry(self.store)
        for repository in (self.date_ideas, self.gift_ideas, self.businesses, self.products):
            self.registry.register(repository)

        self.preloader = Preloader(self.registry, self.reachability)
        self.completion = CompletionStateManager(self.store, self.businesses)
        self._initialized = False

    async def initialize(self) -> None:
        """Restore user state, then preload catalog data. Safe to call more than once."""
        if self._initialized:
            return
        await self.completion.load()
        await self.preloader.preload()
        self._initialized = True
        logger.info("Catalog data layer initialized")

    async def refresh(self) -> bool:
        return await self.preloader.refresh()

    async def clear_all_caches(self) -> None:
        await self.registry.clear_all()

    async def cache_info(self) -> Dict[str, Optional[Dict[str, str]]]:
        return await self.registry.cache_info()

    async def close(self) -> None:
        await self.remote.close()

    def ideas(self, idea_type: IdeaType) -> Repository:
        return self.date_ideas if idea_type == IdeaType.DATE else self.gift_ideas

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    async def get_ideas(self, idea_type: IdeaType) -> List[Union[DateIdea, GiftIdea]]:
        return await self.ideas(idea_type).get_all()

    async def get_idea_by_id(self, idea_type: IdeaType, idea_id: str) -> Optional[Union[DateIdea, GiftIdea]]:
        return await self.ideas(idea_type).get_by_id(idea_id)

    async def get_ideas_by_letter(self, idea_type: IdeaType, letter: str) -> List[Union[DateIdea, GiftIdea]]:
        return queries.ideas_by_letter(await self.get_ideas(idea_type), letter)

    async def get_ideas_by_category(self, idea_type: IdeaType, category: str) -> List[Union[DateIdea, GiftIdea]]:
        return queries.ideas_by_category(await self.get_ideas(idea_type), category)

    async def get_gift_ideas_by_occasion(self, occasion: str) -> List[GiftIdea]:
        return queries.gift_ideas_by_occasion(await self.gift_ideas.get_all(), occasion)

    async def get_favorite_ideas(self, idea_type: IdeaType) -> List[Union[DateIdea, GiftIdea]]:
        return [idea for idea in await self.get_ideas(idea_type) if self.completion.is_favorite(idea_type, idea.id)]

    async def get_businesses_by_idea_id(self, idea_id: str) -> List[Business]:
        return await self.businesses.get_by_relation(idea_id)

    async def get_products_by_gift_id(self, gift_id: str) -> List[Product]:
        return await self.products.get_by_relation(gift_id)

    async def search_businesses(self, term: str) -> List[Business]:
        return queries.search(await self.businesses.get_all(), term)

    async def search_products(self, term: str) -> List[Product]:
        return queries.search(await self.products.get_all(), term)

    async def get_completion_summary(self, idea_type: IdeaType) -> CompletionSummary:
        return queries.completion_summary(
            idea_type,
            await self.get_ideas(idea_type),
            self.completion.is_idea_completed,
        )
