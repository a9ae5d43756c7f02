import pytest

from catalog.models import Business, CostTier, DateIdea, GiftIdea, Product, RecordError
from tests.sample_data import BUSINESS_RECORDS


def test_business_from_record_maps_fields():
    business = Business.from_record(BUSINESS_RECORDS[0])

    assert business.price_range is CostTier.MEDIUM
    assert business.related_idea_ids == ["a1"]
    assert business.phone == "(212) 555-1234"
    assert business.website is None
    assert business.to_record() == BUSINESS_RECORDS[0]


def test_letter_is_normalized_to_uppercase():
    idea = DateIdea.from_record({"id": "c1", "title": "Cooking", "letter": "c", "cost": "$", "duration": "1h"})

    assert idea.letter == "C"
    assert idea.category == []


def test_missing_required_field_fails_fast():
    with pytest.raises(RecordError, match="title"):
        GiftIdea.from_record({"id": "g1", "letter": "G", "cost": "$"})


def test_invalid_cost_tier_is_rejected():
    with pytest.raises(RecordError, match="cost"):
        DateIdea.from_record({"id": "d1", "title": "Dance", "letter": "D", "cost": "$$$$"})


def test_product_price_must_be_numeric():
    record = {"id": "p1", "name": "Mug", "price": "cheap", "priceRange": "$", "rating": 4}

    with pytest.raises(RecordError, match="price"):
        Product.from_record(record)


def test_product_without_price_is_rejected():
    with pytest.raises(RecordError, match="price"):
        Product.from_record({"id": "p1", "name": "Mug", "priceRange": "$"})


def test_list_fields_must_be_lists():
    record = dict(BUSINESS_RECORDS[0], relatedIdeaIds="a1")

    with pytest.raises(RecordError, match="relatedIdeaIds"):
        Business.from_record(record)


@pytest.mark.parametrize("record", [1, "x", ["id", "a1"], None])
def test_non_object_record_is_rejected(record):
    with pytest.raises(RecordError, match="record object"):
        DateIdea.from_record(record)
