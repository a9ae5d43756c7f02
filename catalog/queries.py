"""
Derived catalog queries over repository results: alphabetic grouping, tag filters,
text search and completion progress.
"""
from rapidfuzz import fuzz
from typing import Callable, Iterable, List, Sequence, TypeVar, Union

from catalog.config import SEARCH_THRESHOLD
from catalog.models import Business, CompletionSummary, DateIdea, GiftIdea, IdeaType, Product

Idea = Union[DateIdea, GiftIdea]
Searchable = TypeVar("Searchable", Business, Product)


def ideas_by_letter(ideas: Iterable[Idea], letter: str) -> List[Idea]:
    letter = letter.upper()
    return [idea for idea in ideas if idea.letter.upper() == letter]


def ideas_by_category(ideas: Iterable[Idea], category: str) -> List[Idea]:
    return [idea for idea in ideas if category in idea.category]


def gift_ideas_by_occasion(ideas: Iterable[GiftIdea], occasion: str) -> List[GiftIdea]:
    return [idea for idea in ideas if occasion in idea.occasion]


def matches_search(
    item: Union[Business, Product],
    term: str,
    threshold: float = SEARCH_THRESHOLD,
) -> bool:
    """
    Determine whether a business or product matches a free-text search term.

    Args:
        item: Business or product to test.
        term: Search term typed by the user.
        threshold (float): Minimum partial-ratio score for a fuzzy name match.

    Returns:
        bool: True on a case-insensitive substring hit in name, description or tags,
              or when the name is a close fuzzy match for the term.
    """
    term = term.strip().lower()
    if not term:
        return True

    name = item.name.lower()
    if term in name or term in item.description.lower():
        return True
    if any(term in tag.lower() for tag in item.tags):
        return True

    # Typo tolerance on the name only
    return fuzz.partial_ratio(term, name) >= threshold


def search(items: Sequence[Searchable], term: str, threshold: float = SEARCH_THRESHOLD) -> List[Searchable]:
    return [item for item in items if matches_search(item, term, threshold)]


def completion_summary(
    idea_type: IdeaType,
    ideas: Iterable[Idea],
    is_completed: Callable[[IdeaType, str], bool],
) -> CompletionSummary:
    """
    Summarize completion progress letter by letter.

    A letter counts as completed once at least one of its ideas is completed.
    """
    letters = set()
    completed_by_letter = {}
    for idea in ideas:
        letter = idea.letter.upper()
        letters.add(letter)
        if is_completed(idea_type, idea.id):
            completed_by_letter[letter] = completed_by_letter.get(letter, 0) + 1

    completed_letters = sorted(completed_by_letter)
    total = len(letters)
    percent = round(len(completed_letters) / total * 100) if total else 0
    return CompletionSummary(
        idea_type=idea_type,
        completed_letters=completed_letters,
        total_letters=total,
        completed_percent=percent,
        completed_by_letter=completed_by_letter,
    )
