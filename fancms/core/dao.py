"""
Repository layer over the JSON document store.

Every collection is a ``Repository`` bound to one document path and one record
schema. Records are validated when read and before they are written, and every
mutation runs under a per-document lock so two requests in this process cannot
interleave their read/modify/write cycles on the same file.

Change dicts passed to ``create``/``update`` use attribute (snake_case) names.
"""

import threading
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import ValidationError

from util.logging import logger
from .errors import ConflictError, NotFoundError, ValidationFailedError
from .ids import generate_id
from .schema import (
    Album,
    CarouselImage,
    Category,
    Credits,
    GalleryImage,
    Lyrics,
    Media,
    Member,
    MusicVideo,
    NewsArticle,
    Playlist,
    Post,
    Record,
    Tag,
    TelemetryEvent,
    Track,
    User,
    dump_record,
    utc_now_iso,
    validate_records,
)
from .store import JsonStore

# Document paths, relative to the store root
USERS_DOCUMENT = "cms-data/users.json"
POSTS_DOCUMENT = "data/posts.json"
CATEGORIES_DOCUMENT = "data/categories.json"
TAGS_DOCUMENT = "data/tags.json"
MEDIA_DOCUMENT = "data/media.json"
TRACKS_DOCUMENT = "data/tracks.json"
ALBUMS_DOCUMENT = "data/albums.json"
LYRICS_DOCUMENT = "data/lyrics.json"
CREDITS_DOCUMENT = "data/credits.json"
PLAYLISTS_DOCUMENT = "data/playlists.json"
TELEMETRY_DOCUMENT = "data/telemetry.json"
MEMBERS_DOCUMENT = "cms-data/members.json"
NEWS_DOCUMENT = "cms-data/news.json"
MUSIC_VIDEOS_DOCUMENT = "cms-data/music.json"
GALLERY_DOCUMENT = "cms-data/gallery.json"
CAROUSEL_DOCUMENT = "cms-data/carousel.json"

R = TypeVar("R", bound=Record)
Guard = Callable[[Any], None]


class DocumentLocks:
    """One lock per document, created on first use."""

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def for_document(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock


def _has_field(model: Type[Record], name: str) -> bool:
    return name in model.model_fields


class Repository(Generic[R]):
    """CRUD over one JSON document of ``model`` records."""

    def __init__(self, store: JsonStore, path: str, model: Type[R], id_prefix: str,
                 locks: Optional[DocumentLocks] = None, unique_field: Optional[str] = "slug",
                 label: Optional[str] = None):
        self.store = store
        self.path = path
        self.model = model
        self.id_prefix = id_prefix
        self.locks = locks if locks is not None else DocumentLocks()
        self.unique_field = unique_field
        self.label = label or model.__name__

    # ---- reads ----

    def list(self) -> List[R]:
        return validate_records(self.model, self.store.load(self.path), self.path)

    def find(self, record_id: str) -> Optional[R]:
        return next((r for r in self.list() if r.id == record_id), None)

    def get(self, record_id: str) -> R:
        record = self.find(record_id)
        if record is None:
            raise NotFoundError(f"{self.label} not found")
        return record

    def find_by_slug(self, slug: str) -> Optional[R]:
        return next((r for r in self.list() if getattr(r, "slug", None) == slug), None)

    def get_by_slug(self, slug: str) -> R:
        record = self.find_by_slug(slug)
        if record is None:
            raise NotFoundError(f"{self.label} not found")
        return record

    def resolve(self, ids: Sequence[str]) -> List[R]:
        """Look up records by ID, keeping the order of ``ids`` and dropping dangling ones."""
        index = {r.id: r for r in self.list()}
        return [index[i] for i in ids if i in index]

    # ---- writes ----

    def _mutate(self, transform: Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        lock = self.locks.for_document(str(self.store.resolve(self.path)))
        with lock:
            return self.store.mutate(self.path, transform)

    def _build(self, fields: Dict[str, Any]) -> R:
        try:
            return self.model.model_validate(fields)
        except ValidationError as e:
            logger.log_schema_validation_error(self.path, e.errors())
            raise ValidationFailedError(f"Invalid {self.label.lower()}: {e.errors()[0].get('msg', 'validation failed')}") from e

    def _unique_value(self, record: Record) -> Any:
        if not self.unique_field:
            return None
        return getattr(record, self.unique_field, None)

    def create(self, fields: Dict[str, Any]) -> R:
        """Assign an ID and timestamps, then append. Duplicate ID or slug raises ConflictError."""
        data = dict(fields)
        data["id"] = data.get("id") or generate_id(self.id_prefix)
        now = utc_now_iso()
        if _has_field(self.model, "created_at"):
            data["created_at"] = now
        if _has_field(self.model, "updated_at"):
            data["updated_at"] = now
        record = self._build(data)
        unique_value = self._unique_value(record)

        def transform(raw):
            existing = validate_records(self.model, raw, self.path)
            if any(r.id == record.id for r in existing):
                raise ConflictError(f"{self.label} with id {record.id} already exists")
            if unique_value is not None and any(self._unique_value(r) == unique_value for r in existing):
                raise ConflictError(f"{self.unique_field.capitalize()} already exists")
            return list(raw) + [dump_record(record)]

        self._mutate(transform)
        logger.log_record_change("created", self.path, record.id, getattr(record, "slug", None))
        return record

    def update(self, record_id: str, changes: Dict[str, Any], guard: Optional[Guard] = None) -> R:
        """
        Apply ``changes`` to one record and refresh its ``updated_at``.

        ``guard`` sees the current record before anything changes and may raise
        (e.g. PermissionDeniedError) to abort the write. The unique field is not
        re-checked here.
        """
        changes = {k: v for k, v in changes.items() if k != "id"}
        result: List[R] = []

        def transform(raw):
            existing = validate_records(self.model, raw, self.path)
            index = next((i for i, r in enumerate(existing) if r.id == record_id), None)
            if index is None:
                raise NotFoundError(f"{self.label} not found")

            current = existing[index]
            if guard is not None:
                guard(current)

            merged = current.model_dump()
            merged.update(changes)
            if _has_field(self.model, "updated_at"):
                merged["updated_at"] = utc_now_iso()
            updated = self._build(merged)
            result.append(updated)

            new_raw = list(raw)
            new_raw[index] = dump_record(updated)
            return new_raw

        self._mutate(transform)
        logger.log_record_change("updated", self.path, record_id)
        return result[0]

    def delete(self, record_id: str, guard: Optional[Guard] = None) -> R:
        """Remove one record. Missing IDs raise NotFoundError."""
        removed: List[R] = []

        def transform(raw):
            existing = validate_records(self.model, raw, self.path)
            index = next((i for i, r in enumerate(existing) if r.id == record_id), None)
            if index is None:
                raise NotFoundError(f"{self.label} not found")
            if guard is not None:
                guard(existing[index])
            removed.append(existing[index])
            return [item for i, item in enumerate(raw) if i != index]

        self._mutate(transform)
        logger.log_record_change("deleted", self.path, record_id)
        return removed[0]

    def upsert(self, record: R) -> Tuple[R, bool]:
        """
        Replace the record with the same ID, or append it. Returns (record, created).
        Appending counts as a create, so a duplicate unique field raises ConflictError.
        """
        if _has_field(self.model, "updated_at"):
            record = record.model_copy(update={"updated_at": utc_now_iso()})
        unique_value = self._unique_value(record)
        created: List[bool] = []

        def transform(raw):
            existing = validate_records(self.model, raw, self.path)
            new_raw = list(raw)
            index = next((i for i, r in enumerate(existing) if r.id == record.id), None)
            if index is None:
                if unique_value is not None and any(self._unique_value(r) == unique_value for r in existing):
                    raise ConflictError(f"{self.unique_field.capitalize()} already exists")
                new_raw.append(dump_record(record))
                created.append(True)
            else:
                new_raw[index] = dump_record(record)
                created.append(False)
            return new_raw

        self._mutate(transform)
        logger.log_record_change("created" if created[0] else "updated", self.path, record.id)
        return record, created[0]

    def replace_all(self, records: Sequence[R]) -> List[R]:
        """Overwrite the whole collection. IDs must be unique within ``records``."""
        seen = set()
        for record in records:
            if record.id in seen:
                raise ConflictError(f"Duplicate {self.label.lower()} id {record.id}")
            seen.add(record.id)

        self._mutate(lambda raw: [dump_record(r) for r in records])
        return list(records)

    def count(self) -> int:
        return len(self.store.load(self.path))


class EventLog:
    """Append-only telemetry document that keeps only the newest ``max_events``."""

    def __init__(self, store: JsonStore, path: str = TELEMETRY_DOCUMENT,
                 locks: Optional[DocumentLocks] = None):
        self.store = store
        self.path = path
        self.locks = locks if locks is not None else DocumentLocks()

    def list(self) -> List[TelemetryEvent]:
        return validate_records(TelemetryEvent, self.store.load(self.path), self.path)

    def append(self, event: TelemetryEvent, max_events: int) -> int:
        """Append ``event``; returns the number of events kept."""
        def transform(raw):
            events = list(raw) + [dump_record(event)]
            if len(events) > max_events:
                return events[-max_events:]
            return events

        lock = self.locks.for_document(str(self.store.resolve(self.path)))
        with lock:
            return len(self.store.mutate(self.path, transform))


class Repositories:
    """All CMS collections over one store, sharing one lock registry."""

    def __init__(self, store: JsonStore, locks: Optional[DocumentLocks] = None):
        self.store = store
        self.locks = locks if locks is not None else DocumentLocks()
        locks = self.locks

        self.users = Repository(store, USERS_DOCUMENT, User, "u", locks, unique_field="username")
        self.posts = Repository(store, POSTS_DOCUMENT, Post, "p", locks)
        self.categories = Repository(store, CATEGORIES_DOCUMENT, Category, "c", locks)
        self.tags = Repository(store, TAGS_DOCUMENT, Tag, "t", locks)
        self.media = Repository(store, MEDIA_DOCUMENT, Media, "m", locks, unique_field=None)
        self.tracks = Repository(store, TRACKS_DOCUMENT, Track, "tr", locks)
        self.albums = Repository(store, ALBUMS_DOCUMENT, Album, "al", locks)
        self.lyrics = Repository(store, LYRICS_DOCUMENT, Lyrics, "ly", locks, unique_field=None)
        self.credits = Repository(store, CREDITS_DOCUMENT, Credits, "cr", locks, unique_field=None)
        self.playlists = Repository(store, PLAYLISTS_DOCUMENT, Playlist, "pl", locks, unique_field=None)
        self.members = Repository(store, MEMBERS_DOCUMENT, Member, "mb", locks, unique_field=None)
        self.news = Repository(store, NEWS_DOCUMENT, NewsArticle, "n", locks, label="News article")
        self.music_videos = Repository(store, MUSIC_VIDEOS_DOCUMENT, MusicVideo, "mv", locks,
                                       unique_field=None, label="Music video")
        self.gallery = Repository(store, GALLERY_DOCUMENT, GalleryImage, "g", locks,
                                  unique_field=None, label="Gallery image")
        self.carousel = Repository(store, CAROUSEL_DOCUMENT, CarouselImage, "ci", locks,
                                   unique_field=None, label="Carousel image")
        self.telemetry = EventLog(store, TELEMETRY_DOCUMENT, locks)
