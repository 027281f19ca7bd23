"""
Query layer - search, filter, sort and paginate in-memory collections.

The operations compose left to right (search, filter, sort, paginate) and
never reorder records except in ``sort_records``, which is stable. They accept
schema models or plain dicts; dict keys may be snake_case or camelCase.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Sequence, TypeVar

from pydantic.alias_generators import to_camel

from .schema import parse_timestamp

T = TypeVar("T")

# Text fields searched per record type
SEARCH_FIELDS: Dict[str, List[str]] = {
    "post": ["title", "excerpt", "content", "tags"],
    "track": ["title", "tags", "mood"],
    "album": ["title", "description"],
    "news": ["title", "excerpt", "tags"],
}

SORT_FIELDS = ["title", "releaseDate", "duration"]
SORT_ORDERS = ["asc", "desc"]

# Similarity weights
MOOD_WEIGHT = 3
TAG_WEIGHT = 2
BPM_TOLERANCE = 10
BPM_BONUS = 1
SAME_ALBUM_BONUS = 2
SIMILAR_LIMIT = 5


def field_value(record: Any, name: str) -> Any:
    """Read ``name`` from a model attribute or a dict (snake_case or camelCase key)."""
    if isinstance(record, Mapping):
        if name in record:
            return record[name]
        return record.get(to_camel(name))
    return getattr(record, name, None)


def _contains_text(value: Any, needle: str) -> bool:
    if isinstance(value, str):
        return needle in value.lower()
    if isinstance(value, (list, tuple)):
        return any(isinstance(v, str) and needle in v.lower() for v in value)
    return False


def search(records: Sequence[T], query: str, fields: Sequence[str]) -> List[T]:
    """Case-insensitive substring search over ``fields``. Empty query returns everything."""
    if not query:
        return list(records)
    needle = query.lower()
    return [r for r in records if any(_contains_text(field_value(r, f), needle) for f in fields)]


def search_records(records: Sequence[T], query: str, record_type: str) -> List[T]:
    """Search with the fixed field set for ``record_type`` (post, track, album, news)."""
    try:
        fields = SEARCH_FIELDS[record_type]
    except KeyError:
        raise ValueError(f"Unknown record type for search: {record_type}")
    return search(records, query, fields)


def release_year(record: Any) -> Optional[int]:
    value = field_value(record, "release_date")
    if not value:
        return None
    parsed = parse_timestamp(value)
    if parsed.year == 1:
        return None
    return parsed.year


def filter_records(records: Sequence[T], filters: Mapping[str, Any],
                   extractors: Optional[Mapping[str, Callable[[Any], Any]]] = None) -> List[T]:
    """
    Keep records matching every present filter (``None`` values are skipped).

    List-valued fields match when they contain the expected value; scalars must
    be equal. ``extractors`` derive a value per record for computed fields such
    as the release year.
    """
    extractors = extractors or {}
    predicates = [(name, expected) for name, expected in filters.items() if expected is not None]
    if not predicates:
        return list(records)

    def matches(record: Any) -> bool:
        for name, expected in predicates:
            if name in extractors:
                actual = extractors[name](record)
            else:
                actual = field_value(record, name)
            if isinstance(actual, (list, tuple)):
                if expected not in actual:
                    return False
            elif actual != expected:
                return False
        return True

    return [r for r in records if matches(r)]


def filter_tracks(tracks: Sequence[T], album: Optional[str] = None, mood: Optional[str] = None,
                  tag: Optional[str] = None, year: Optional[int] = None) -> List[T]:
    return filter_records(
        tracks,
        {"album_id": album, "mood": mood, "tags": tag, "year": year},
        extractors={"year": release_year},
    )


_SORT_KEYS: Dict[str, Callable[[Any], Any]] = {
    "title": lambda r: (field_value(r, "title") or "").casefold(),
    "releaseDate": lambda r: parse_timestamp(field_value(r, "release_date")),
    "duration": lambda r: field_value(r, "duration_sec") or 0,
}


def sort_records(records: Sequence[T], sort_by: str = "releaseDate", order: str = "desc") -> List[T]:
    """Stable sort by title, release date or duration. Equal keys keep their input order."""
    if sort_by not in _SORT_KEYS:
        raise ValueError(f"sort must be one of: {SORT_FIELDS}")
    if order not in SORT_ORDERS:
        raise ValueError(f"order must be one of: {SORT_ORDERS}")
    return sorted(records, key=_SORT_KEYS[sort_by], reverse=(order == "desc"))


def sort_by_timestamp(records: Sequence[T], name: str, newest_first: bool = True) -> List[T]:
    return sorted(records, key=lambda r: parse_timestamp(field_value(r, name)), reverse=newest_first)


@dataclass
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    page: int = 1
    page_size: int = 10
    total: int = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size)

    @property
    def has_more(self) -> bool:
        return self.page * self.page_size < self.total

    def metadata(self) -> Dict[str, int]:
        return {
            "page": self.page,
            "pageSize": self.page_size,
            "total": self.total,
            "totalPages": self.total_pages,
        }


def paginate(records: Sequence[T], page: int = 1, page_size: int = 10) -> Page:
    """Slice ``[(page-1)*page_size, page*page_size)``; ``total`` counts everything."""
    if page < 1:
        raise ValueError("page must be >= 1")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    start = (page - 1) * page_size
    return Page(items=list(records[start:start + page_size]), page=page, page_size=page_size,
                total=len(records))


# ---- per-resource listings ----

def list_posts(posts: Sequence[T], query: str = "", status: Optional[str] = None,
               tag: Optional[str] = None, category: Optional[str] = None) -> List[T]:
    """Search, filter by status/tag/category, newest ``updatedAt`` first."""
    matched = search_records(posts, query, "post")
    matched = filter_records(matched, {"status": status, "tags": tag, "category_id": category})
    return sort_by_timestamp(matched, "updated_at")


def list_albums(albums: Sequence[T], query: str = "", album_type: Optional[str] = None) -> List[T]:
    matched = search_records(albums, query, "album")
    matched = filter_records(matched, {"type": album_type})
    return sort_by_timestamp(matched, "release_date")


def filter_news(articles: Sequence[T], category: Optional[str] = None, tag: Optional[str] = None,
                query: str = "", featured: Optional[bool] = None) -> List[T]:
    """News listing: tag matches case-insensitively; newest ``publishedAt`` first."""
    matched = search_records(articles, query, "news")
    matched = filter_records(matched, {"category": category, "featured": featured})
    if tag:
        wanted = tag.lower()
        matched = [a for a in matched if any(t.lower() == wanted for t in field_value(a, "tags") or [])]
    return sort_by_timestamp(matched, "published_at")


def related_news(articles: Sequence[T], current: Any, limit: int = 3) -> List[T]:
    """Other articles sharing the category or at least one tag, in document order."""
    current_id = field_value(current, "id")
    category = field_value(current, "category")
    tags = set(field_value(current, "tags") or [])
    related = [
        a for a in articles
        if field_value(a, "id") != current_id
        and (field_value(a, "category") == category or tags.intersection(field_value(a, "tags") or []))
    ]
    return related[:limit]


def active_carousel(images: Sequence[T]) -> List[T]:
    active = [i for i in images if field_value(i, "is_active")]
    return sorted(active, key=lambda i: field_value(i, "order") or 0)


# ---- similarity ----

def similarity_score(reference: Any, candidate: Any) -> int:
    """Weighted overlap between two tracks."""
    score = 0
    reference_mood = field_value(reference, "mood") or []
    reference_tags = field_value(reference, "tags") or []

    score += MOOD_WEIGHT * sum(1 for m in field_value(candidate, "mood") or [] if m in reference_mood)
    score += TAG_WEIGHT * sum(1 for t in field_value(candidate, "tags") or [] if t in reference_tags)

    reference_bpm = field_value(reference, "bpm")
    candidate_bpm = field_value(candidate, "bpm")
    if reference_bpm and candidate_bpm and abs(candidate_bpm - reference_bpm) <= BPM_TOLERANCE:
        score += BPM_BONUS

    if field_value(candidate, "album_id") == field_value(reference, "album_id"):
        score += SAME_ALBUM_BONUS

    return score


def similar_tracks(reference: Any, tracks: Sequence[T], limit: int = SIMILAR_LIMIT) -> List[T]:
    """Top ``limit`` tracks by score, zero scores dropped; ties keep document order."""
    reference_id = field_value(reference, "id")
    scored = [(t, similarity_score(reference, t)) for t in tracks if field_value(t, "id") != reference_id]
    scored = [item for item in scored if item[1] > 0]
    scored.sort(key=lambda item: item[1], reverse=True)
    return [t for t, _ in scored[:limit]]
