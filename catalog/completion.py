"""
Device-local favorite and completion state, with the business -> idea completion cascade.

An idea counts as completed when the user marked it directly, or when one of its related
businesses is marked completed. The cascade runs only on business transitions: marking an
idea incomplete directly leaves any completed related business in place, and that business
re-completes the idea the next time a business transition for the idea runs.
"""
import json
from typing import Dict, Iterable, List, Optional, Set

from loguru import logger

from catalog.config import COMPLETED_BUSINESSES_KEY, COMPLETED_IDEAS_KEY, FAVORITES_KEY
from catalog.clients import DeviceStore, DeviceStoreError
from catalog.models import Business, IdeaType
from catalog.repository import Repository

# Businesses service date ideas
BUSINESS_IDEA_TYPE = IdeaType.DATE


def _empty_by_type() -> Dict[IdeaType, Set[str]]:
    return {idea_type: set() for idea_type in IdeaType}


class CompletionStateManager:
    """Owns the favorite sets, the idea-completion sets and the business-completion set."""

    def __init__(self, store: DeviceStore, businesses: Repository[Business]):
        self._store = store
        self._businesses = businesses
        self._favorites = _empty_by_type()
        self._completed_ideas = _empty_by_type()
        self._completed_businesses: Set[str] = set()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def _read(self, key: str):
        try:
            raw = await self._store.get(key)
        except DeviceStoreError as e:
            logger.debug(f"⚠️ Could not read {key}: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning(f"⚠️ Corrupt payload in {key}: {e}")
            return None

    @staticmethod
    def _by_type_from_payload(payload) -> Dict[IdeaType, Set[str]]:
        result = _empty_by_type()
        if not isinstance(payload, dict):
            return result
        for idea_type in IdeaType:
            ids = payload.get(idea_type.value) or []
            if isinstance(ids, list):
                result[idea_type] = {str(i) for i in ids}
        return result

    async def load(self) -> None:
        """Restore every set from the device store; unreadable payloads leave the set empty."""
        self._favorites = self._by_type_from_payload(await self._read(FAVORITES_KEY))
        self._completed_ideas = self._by_type_from_payload(await self._read(COMPLETED_IDEAS_KEY))
        businesses = await self._read(COMPLETED_BUSINESSES_KEY)
        self._completed_businesses = {str(i) for i in businesses} if isinstance(businesses, list) else set()
        logger.debug(
            f"Loaded user state: {sum(len(s) for s in self._favorites.values())} favorites, "
            f"{sum(len(s) for s in self._completed_ideas.values())} completed ideas, "
            f"{len(self._completed_businesses)} completed businesses"
        )

    async def _write(self, key: str, payload) -> None:
        try:
            await self._store.set(key, json.dumps(payload))
        except DeviceStoreError as e:
            logger.error(f"Error saving {key}: {e}")

    async def _persist_favorites(self) -> None:
        await self._write(FAVORITES_KEY, {t.value: sorted(ids) for t, ids in self._favorites.items()})

    async def _persist_completed_ideas(self) -> None:
        await self._write(COMPLETED_IDEAS_KEY, {t.value: sorted(ids) for t, ids in self._completed_ideas.items()})

    async def _persist_completed_businesses(self) -> None:
        await self._write(COMPLETED_BUSINESSES_KEY, sorted(self._completed_businesses))

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    def is_favorite(self, idea_type: IdeaType, idea_id: str) -> bool:
        return idea_id in self._favorites[idea_type]

    def favorite_ids(self, idea_type: IdeaType) -> List[str]:
        return sorted(self._favorites[idea_type])

    async def add_favorite(self, idea_type: IdeaType, idea_id: str) -> None:
        self._favorites[idea_type].add(idea_id)
        await self._persist_favorites()

    async def remove_favorite(self, idea_type: IdeaType, idea_id: str) -> None:
        self._favorites[idea_type].discard(idea_id)
        await self._persist_favorites()

    async def toggle_favorite(self, idea_type: IdeaType, idea_id: str) -> bool:
        if self.is_favorite(idea_type, idea_id):
            await self.remove_favorite(idea_type, idea_id)
            return False
        await self.add_favorite(idea_type, idea_id)
        return True

    # ------------------------------------------------------------------
    # Completion queries
    # ------------------------------------------------------------------

    def is_idea_completed(self, idea_type: IdeaType, idea_id: str) -> bool:
        return idea_id in self._completed_ideas[idea_type]

    def is_business_completed(self, business_id: str) -> bool:
        return business_id in self._completed_businesses

    def completed_idea_ids(self, idea_type: IdeaType) -> List[str]:
        return sorted(self._completed_ideas[idea_type])

    def completed_business_ids(self) -> List[str]:
        return sorted(self._completed_businesses)

    # ------------------------------------------------------------------
    # Idea transitions (direct user action, business set untouched)
    # ------------------------------------------------------------------

    async def mark_idea_completed(self, idea_type: IdeaType, idea_id: str) -> None:
        self._completed_ideas[idea_type].add(idea_id)
        await self._persist_completed_ideas()

    async def mark_idea_incomplete(self, idea_type: IdeaType, idea_id: str) -> None:
        self._completed_ideas[idea_type].discard(idea_id)
        await self._persist_completed_ideas()

    async def toggle_idea_completed(self, idea_type: IdeaType, idea_id: str) -> bool:
        if self.is_idea_completed(idea_type, idea_id):
            await self.mark_idea_incomplete(idea_type, idea_id)
            return False
        await self.mark_idea_completed(idea_type, idea_id)
        return True

    # ------------------------------------------------------------------
    # Business transitions (cascade to the related idea)
    # ------------------------------------------------------------------

    async def _related_idea_id(self, business_id: str) -> Optional[str]:
        """First entry of the business's related idea ids; other entries do not cascade."""
        business = await self._businesses.get_by_id(business_id)
        if business is None:
            logger.warning(f"⚠️ Business {business_id} not found; skipping completion cascade")
            return None
        if not business.related_idea_ids:
            logger.warning(f"⚠️ Business {business_id} has no related idea; skipping completion cascade")
            return None
        return business.related_idea_ids[0]

    def _any_completed(self, businesses: Iterable[Business]) -> bool:
        return any(b.id in self._completed_businesses for b in businesses)

    async def mark_business_completed(self, business_id: str) -> None:
        self._completed_businesses.add(business_id)
        await self._persist_completed_businesses()

        idea_id = await self._related_idea_id(business_id)
        if idea_id is None:
            return
        await self.mark_idea_completed(BUSINESS_IDEA_TYPE, idea_id)

    async def mark_business_incomplete(self, business_id: str) -> None:
        self._completed_businesses.discard(business_id)
        await self._persist_completed_businesses()

        idea_id = await self._related_idea_id(business_id)
        if idea_id is None:
            return
        related = await self._businesses.get_by_relation(idea_id)
        if self._any_completed(related):
            logger.debug(f"Idea {idea_id} stays completed through another related business")
            if not self.is_idea_completed(BUSINESS_IDEA_TYPE, idea_id):
                await self.mark_idea_completed(BUSINESS_IDEA_TYPE, idea_id)
            return
        await self.mark_idea_incomplete(BUSINESS_IDEA_TYPE, idea_id)

    async def toggle_business_completed(self, business_id: str) -> bool:
        if self.is_business_completed(business_id):
            await self.mark_business_incomplete(business_id)
            return False
        await self.mark_business_completed(business_id)
        return True
