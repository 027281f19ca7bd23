"""
Record schemas for every CMS collection.

Attributes are snake_case; documents on disk keep the camelCase keys the site
front end reads. Unknown keys are preserved so a round trip through the API
never drops data.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from util.logging import logger
from .errors import MalformedDocumentError

ROLES = ['AUTHOR', 'EDITOR', 'ADMIN']
POST_STATUSES = ['DRAFT', 'REVIEW', 'SCHEDULED', 'PUBLISHED', 'ARCHIVED']
ALBUM_TYPES = ['ALBUM', 'EP', 'SINGLE']
TELEMETRY_EVENTS = ['play_start', 'play_progress', 'seek', 'complete', 'like', 'add_to_playlist', 'error']
NEWS_CATEGORIES = [
    'latest-news',
    'behind-the-scenes',
    'fan-stories',
    'interviews',
    'performances',
    'announcements',
]

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time as ``2025-09-15T00:00:00.000Z``."""
    now = datetime.now(timezone.utc)
    return now.strftime('%Y-%m-%dT%H:%M:%S.') + f"{now.microsecond // 1000:03d}Z"


def parse_timestamp(value: Optional[str]) -> datetime:
    """Parse an ISO-8601 string; naive values are UTC, unparsable ones sort first."""
    if not value:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class CMSModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class Record(CMSModel):
    """A record addressable by ``id`` inside its collection."""
    id: str


# ============ Users ============

class User(Record):
    username: str
    name: str = ""
    email: str = ""
    role: str = "AUTHOR"
    password: Optional[str] = None
    avatar: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# ============ CMS - Posts ============

class Post(Record):
    title: str
    slug: str
    excerpt: str = ""
    content: str = ""
    # Not checked against POST_STATUSES here; request schemas do that
    status: str = "DRAFT"
    author_id: str
    tags: List[str] = Field(default_factory=list)
    category_id: Optional[str] = None
    hero_image: Optional[str] = None
    publish_at: Optional[str] = None
    created_at: str
    updated_at: str
    og_image: Optional[str] = None
    og_description: Optional[str] = None


class Category(Record):
    name: str
    slug: str


class Tag(Record):
    name: str
    slug: str


class Media(Record):
    filename: str
    url: str
    alt: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    tags: List[str] = Field(default_factory=list)
    uploaded_at: str
    uploaded_by: str


# ============ Music ============

class TrackAudio(CMSModel):
    hls: str
    mp3_160: str = Field(alias="mp3_160")
    mp3_320: str = Field(alias="mp3_320")


class MemberPart(CMSModel):
    member: str
    start: float = Field(alias="from")
    end: float = Field(alias="to")


class Track(Record):
    slug: str
    title: str
    album_id: str
    duration_sec: float
    audio: Optional[TrackAudio] = None
    artwork: str = ""
    explicit: bool = False
    bpm: Optional[float] = None
    mood: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    release_date: str
    territories: List[str] = Field(default_factory=list)
    credits_id: Optional[str] = None
    lyrics_ids: List[str] = Field(default_factory=list)
    members_parts: Optional[List[MemberPart]] = None


class Album(Record):
    slug: str
    title: str
    type: Optional[str] = None
    release_date: str
    cover: str = ""
    tracks: List[str] = Field(default_factory=list)
    description: Optional[str] = None


class LyricLine(CMSModel):
    t: float
    l: str


class Lyrics(Record):
    track_id: str
    lang: str
    lines: List[LyricLine] = Field(default_factory=list)


class Credits(Record):
    track_id: str
    composer: List[str] = Field(default_factory=list)
    lyricist: List[str] = Field(default_factory=list)
    arranger: List[str] = Field(default_factory=list)
    producer: List[str] = Field(default_factory=list)
    label: str = ""


class Playlist(Record):
    title: str
    owner: str
    tracks: List[str] = Field(default_factory=list)
    public: bool = True
    created_at: str
    updated_at: str


class TelemetryEvent(CMSModel):
    ts: str
    ip_hash: str
    event: str
    data: Dict[str, Any] = Field(default_factory=dict)


# ============ Site content ============

class Member(Record):
    name: str
    korean_name: str = ""
    position: str = ""
    birth_year: Optional[int] = None
    nationality: str = ""
    trainee_years: str = ""
    emoji: str = ""
    color: str = ""
    backstory: str = ""
    facts: List[str] = Field(default_factory=list)
    quote: str = ""
    image_url: str = ""
    quick_fact: str = ""
    icon: str = ""


class NewsAuthor(CMSModel):
    name: str
    role: str = ""
    avatar: Optional[str] = None


class NewsArticle(Record):
    slug: str
    title: str
    title_ko: Optional[str] = None
    category: str
    excerpt: str = ""
    content: str = ""
    cover_image: str = ""
    images: Optional[List[str]] = None
    author: Optional[NewsAuthor] = None
    tags: List[str] = Field(default_factory=list)
    published_at: str
    updated_at: Optional[str] = None
    featured: bool = False
    views: Optional[int] = None
    likes: Optional[int] = None
    read_time: Optional[int] = None


class MusicVideo(Record):
    title: str
    artist: str = ""
    type: str = ""
    youtube_id: str = ""
    release_date: str = ""
    views: str = ""
    thumbnail: str = ""
    description: str = ""
    emoji: str = ""
    featured: bool = False


class GalleryImage(Record):
    title: str
    category: str = ""
    member: Optional[str] = None
    description: str = ""
    emoji: str = ""
    image_url: str = ""
    upload_date: str = ""
    size: str = ""


class CarouselImage(Record):
    title: str
    image_url: str
    description: str = ""
    category: str = "Performance"
    order: int = 0
    is_active: bool = True
    created_at: str
    updated_at: str


M = TypeVar("M", bound=CMSModel)


def validate_records(model: Type[M], raw: Sequence[Dict[str, Any]], document: str) -> List[M]:
    """Validate raw document entries; a bad entry makes the whole document malformed."""
    records = []
    for index, item in enumerate(raw):
        try:
            records.append(model.model_validate(item))
        except ValidationError as e:
            logger.log_schema_validation_error(document, e.errors())
            raise MalformedDocumentError(document, f"entry {index} is not a valid {model.__name__}") from e
    return records


def dump_record(record: CMSModel) -> Dict[str, Any]:
    """Serialize a record with its on-disk (camelCase) keys. Unset optional fields are omitted."""
    return record.model_dump(by_alias=True, mode="json", exclude_none=True)


def dump_records(records: Sequence[CMSModel]) -> List[Dict[str, Any]]:
    return [dump_record(r) for r in records]
