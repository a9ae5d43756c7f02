"""
Typed data models for the catalog data layer.
All records read from the remote store or the device store are built here.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class RecordError(ValueError):
    """Raised when a raw record cannot be turned into a typed entity."""


class IdeaType(str, Enum):
    DATE = "date"
    GIFT = "gift"


class CostTier(str, Enum):
    LOW = "$"
    MEDIUM = "$$"
    HIGH = "$$$"


def _check_record(record: Any) -> None:
    if not isinstance(record, dict):
        raise RecordError(f"Expected a record object, got {type(record).__name__}")


def _require(record: Dict[str, Any], key: str) -> Any:
    if key not in record or record[key] is None:
        raise RecordError(f"Missing required field '{key}' in record {record.get('id', '<no id>')}")
    return record[key]


def _tier(record: Dict[str, Any], key: str) -> CostTier:
    value = _require(record, key)
    try:
        return CostTier(value)
    except ValueError:
        raise RecordError(f"Invalid {key} '{value}' in record {record.get('id', '<no id>')}")


def _number(record: Dict[str, Any], key: str, required: bool = False) -> float:
    value = _require(record, key) if required else record.get(key)
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        raise RecordError(f"Field '{key}' must be numeric in record {record.get('id', '<no id>')}")


def _str_list(record: Dict[str, Any], key: str) -> List[str]:
    value = record.get(key) or []
    if not isinstance(value, list):
        raise RecordError(f"Field '{key}' must be a list in record {record.get('id', '<no id>')}")
    return [str(v) for v in value]


def _optional_str(record: Dict[str, Any], key: str) -> Optional[str]:
    value = record.get(key)
    return None if value is None else str(value)


def _drop_none(record: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in record.items() if v is not None}


@dataclass
class DateIdea:
    """Date idea catalog entry."""
    id: str
    title: str
    letter: str  # Single uppercase character used for alphabetic grouping
    description: str
    cost: CostTier
    duration: str
    category: List[str] = field(default_factory=list)
    image: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "DateIdea":
        _check_record(record)
        return cls(
            id=str(_require(record, "id")),
            title=str(_require(record, "title")),
            letter=str(_require(record, "letter")).upper(),
            description=str(record.get("description") or ""),
            cost=_tier(record, "cost"),
            duration=str(record.get("duration") or ""),
            category=_str_list(record, "category"),
            image=_optional_str(record, "image"),
        )

    def to_record(self) -> Dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "title": self.title,
            "letter": self.letter,
            "description": self.description,
            "cost": self.cost.value,
            "duration": self.duration,
            "category": list(self.category),
            "image": self.image,
        })


@dataclass
class GiftIdea:
    """Gift idea catalog entry."""
    id: str
    title: str
    letter: str
    description: str
    cost: CostTier
    category: List[str] = field(default_factory=list)
    occasion: List[str] = field(default_factory=list)
    image: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "GiftIdea":
        _check_record(record)
        return cls(
            id=str(_require(record, "id")),
            title=str(_require(record, "title")),
            letter=str(_require(record, "letter")).upper(),
            description=str(record.get("description") or ""),
            cost=_tier(record, "cost"),
            category=_str_list(record, "category"),
            occasion=_str_list(record, "occasion"),
            image=_optional_str(record, "image"),
        )

    def to_record(self) -> Dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "title": self.title,
            "letter": self.letter,
            "description": self.description,
            "cost": self.cost.value,
            "category": list(self.category),
            "occasion": list(self.occasion),
            "image": self.image,
        })


@dataclass
class Business:
    """Venue related to one or more date ideas."""
    id: str
    name: str
    description: str
    address: str
    price_range: CostTier
    rating: float  # 0.0 - 5.0
    related_idea_ids: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    phone: Optional[str] = None
    website: Optional[str] = None
    hours: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Business":
        _check_record(record)
        return cls(
            id=str(_require(record, "id")),
            name=str(_require(record, "name")),
            description=str(record.get("description") or ""),
            address=str(record.get("address") or ""),
            price_range=_tier(record, "priceRange"),
            rating=_number(record, "rating"),
            related_idea_ids=_str_list(record, "relatedIdeaIds"),
            tags=_str_list(record, "tags"),
            phone=_optional_str(record, "phone"),
            website=_optional_str(record, "website"),
            hours=_optional_str(record, "hours"),
            image_url=_optional_str(record, "imageUrl"),
        )

    def to_record(self) -> Dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "address": self.address,
            "priceRange": self.price_range.value,
            "rating": self.rating,
            "relatedIdeaIds": list(self.related_idea_ids),
            "tags": list(self.tags),
            "phone": self.phone,
            "website": self.website,
            "hours": self.hours,
            "imageUrl": self.image_url,
        })


@dataclass
class Product:
    """Purchasable product related to one or more gift ideas."""
    id: str
    name: str
    description: str
    price: float
    price_range: CostTier
    rating: float
    related_gift_ids: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    image_url: Optional[str] = None
    affiliate_link: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Product":
        _check_record(record)
        return cls(
            id=str(_require(record, "id")),
            name=str(_require(record, "name")),
            description=str(record.get("description") or ""),
            price=_number(record, "price", required=True),
            price_range=_tier(record, "priceRange"),
            rating=_number(record, "rating"),
            related_gift_ids=_str_list(record, "relatedGiftIds"),
            tags=_str_list(record, "tags"),
            image_url=_optional_str(record, "imageUrl"),
            affiliate_link=_optional_str(record, "affiliateLink"),
        )

    def to_record(self) -> Dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "priceRange": self.price_range.value,
            "rating": self.rating,
            "relatedGiftIds": list(self.related_gift_ids),
            "tags": list(self.tags),
            "imageUrl": self.image_url,
            "affiliateLink": self.affiliate_link,
        })


@dataclass
class CompletionSummary:
    """Per-letter completion progress for one idea type."""
    idea_type: IdeaType
    completed_letters: List[str]
    total_letters: int
    completed_percent: int
    completed_by_letter: Dict[str, int] = field(default_factory=dict)
