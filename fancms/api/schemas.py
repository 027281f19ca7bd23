"""
Request and response models for the HTTP API.
Request bodies use the same camelCase keys as the stored documents.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..core.schema import NEWS_CATEGORIES, POST_STATUSES, TELEMETRY_EVENTS


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PostCreateRequest(RequestModel):
    title: str
    slug: str
    excerpt: str = ""
    content: str = ""
    status: str = "DRAFT"
    tags: List[str] = Field(default_factory=list)
    category_id: Optional[str] = None
    hero_image: Optional[str] = None
    publish_at: Optional[str] = None
    og_image: Optional[str] = None
    og_description: Optional[str] = None

    @field_validator('title')
    @classmethod
    def title_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('title cannot be empty')
        return v

    @field_validator('slug')
    @classmethod
    def slug_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('slug cannot be empty')
        return v

    @field_validator('status')
    @classmethod
    def status_must_be_valid(cls, v):
        if v not in POST_STATUSES:
            raise ValueError(f'status must be one of: {POST_STATUSES}')
        return v


class PostUpdateRequest(RequestModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    status: Optional[str] = None
    tags: Optional[List[str]] = None
    category_id: Optional[str] = None
    hero_image: Optional[str] = None
    publish_at: Optional[str] = None
    og_image: Optional[str] = None
    og_description: Optional[str] = None

    @field_validator('status')
    @classmethod
    def status_must_be_valid(cls, v):
        if v is not None and v not in POST_STATUSES:
            raise ValueError(f'status must be one of: {POST_STATUSES}')
        return v


class TelemetryRequest(RequestModel):
    event: str
    data: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('event')
    @classmethod
    def event_must_be_known(cls, v):
        if v not in TELEMETRY_EVENTS:
            raise ValueError(f'event must be one of: {TELEMETRY_EVENTS}')
        return v


class NewsArticleRequest(RequestModel):
    """Loose check on news writes; the stored schema does the full validation."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str
    slug: str
    title: str
    category: str
    published_at: str

    @field_validator('category')
    @classmethod
    def category_must_be_known(cls, v):
        if v not in NEWS_CATEGORIES:
            raise ValueError(f'category must be one of: {NEWS_CATEGORIES}')
        return v


class CarouselCreateRequest(RequestModel):
    title: Optional[str] = None
    image_url: Optional[str] = None
    description: str = ""
    category: str = "Performance"


class CarouselUpdateRequest(RequestModel):
    id: Optional[str] = None
    title: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    order: Optional[int] = None
    is_active: Optional[bool] = None


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    data_root: str
    documents: Dict[str, int]
    config_issues: List[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    error_type: str
    timestamp: datetime = None

    def __init__(self, **data):
        super().__init__(timestamp=datetime.now(), **data)
