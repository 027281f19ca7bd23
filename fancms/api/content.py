"""
Site content endpoints edited from the CMS: members, gallery, music videos,
news, carousel, media uploads and CMS users.

Members, gallery and music videos share one route shape: GET returns the bare
list, POST replaces the whole list, PUT upserts one record, DELETE ?id= removes one.
"""

import shutil
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Type

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..core import config
from ..core.auth import Caller, authenticate, public_user
from ..core.dao import Repositories, Repository
from ..core.errors import NotFoundError, UnauthorizedError, ValidationFailedError
from ..core.schema import (
    CMSModel,
    GalleryImage,
    Member,
    MusicVideo,
    NewsArticle,
    dump_record,
    dump_records,
    utc_now_iso,
)
from ..core.search_service import active_carousel, filter_news, paginate, related_news
from .deps import get_repositories, require_caller
from .schemas import CarouselCreateRequest, CarouselUpdateRequest, LoginRequest, NewsArticleRequest

router = APIRouter()

NEWS_LIST_CACHE = "public, s-maxage=60, stale-while-revalidate=120"
NEWS_ARTICLE_CACHE = "public, s-maxage=300, stale-while-revalidate=600"


def _parse(model: Type[CMSModel], data: Any, label: str) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValidationFailedError(f"Invalid {label}: {e.errors()[0].get('msg', 'validation failed')}") from e


def _require_id(record_id: Optional[str], label: str) -> str:
    if not record_id:
        raise ValidationFailedError(f"{label} ID is required")
    return record_id


def _register_collection_routes(path: str, model: Type[CMSModel], label: str,
                                select: Callable[[Repositories], Repository]):
    plural = f"{label.lower()}s"

    def list_all(repos: Repositories = Depends(get_repositories)):
        return dump_records(select(repos).list())

    def save_all(records: List[Dict[str, Any]] = Body(...),
                 repos: Repositories = Depends(get_repositories)):
        parsed = [_parse(model, r, label.lower()) for r in records]
        select(repos).replace_all(parsed)
        return {"message": f"{label}s data saved successfully"}

    def upsert_one(record: Dict[str, Any] = Body(...),
                   repos: Repositories = Depends(get_repositories)):
        select(repos).upsert(_parse(model, record, label.lower()))
        return {"message": f"{label} updated successfully"}

    def delete_one(id: Optional[str] = None, repos: Repositories = Depends(get_repositories)):
        select(repos).delete(_require_id(id, label))
        return {"message": f"{label} deleted successfully"}

    router.add_api_route(path, list_all, methods=["GET"], name=f"list_{plural}")
    router.add_api_route(path, save_all, methods=["POST"], name=f"save_{plural}")
    router.add_api_route(path, upsert_one, methods=["PUT"], name=f"upsert_{plural}")
    router.add_api_route(path, delete_one, methods=["DELETE"], name=f"delete_{plural}")


_register_collection_routes("/members", Member, "Member", lambda repos: repos.members)
_register_collection_routes("/gallery", GalleryImage, "Gallery image", lambda repos: repos.gallery)
_register_collection_routes("/music", MusicVideo, "Music video", lambda repos: repos.music_videos)


# ---- news ----

@router.get("/news")
def list_news(
    category: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    featured: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1),
    repos: Repositories = Depends(get_repositories),
):
    featured_flag = (featured == "true") if featured else None
    articles = filter_news(repos.news.list(), category=category or None, tag=tag or None,
                           query=search or "", featured=featured_flag)
    result = paginate(articles, page, page_size or config.NEWS_PAGE_SIZE)

    content = {
        "articles": dump_records(result.items),
        "total": result.total,
        "page": result.page,
        "pageSize": result.page_size,
        "hasMore": result.has_more,
    }
    return JSONResponse(content, headers={"Cache-Control": NEWS_LIST_CACHE})


@router.get("/news/{slug}")
def get_news_article(slug: str, repos: Repositories = Depends(get_repositories)):
    articles = repos.news.list()
    article = next((a for a in articles if a.slug == slug), None)
    if article is None:
        raise NotFoundError("Article not found")

    content = {
        "article": dump_record(article),
        "related": dump_records(related_news(articles, article, 3)),
    }
    return JSONResponse(content, headers={"Cache-Control": NEWS_ARTICLE_CACHE})


@router.post("/news")
def save_news(records: List[Dict[str, Any]] = Body(...), repos: Repositories = Depends(get_repositories)):
    parsed = []
    for r in records:
        _parse(NewsArticleRequest, r, "news article")
        parsed.append(_parse(NewsArticle, r, "news article"))
    repos.news.replace_all(parsed)
    return {"message": "News articles data saved successfully"}


@router.put("/news")
def upsert_news(record: Dict[str, Any] = Body(...), repos: Repositories = Depends(get_repositories)):
    _parse(NewsArticleRequest, record, "news article")
    repos.news.upsert(_parse(NewsArticle, record, "news article"))
    return {"message": "News article updated successfully"}


@router.delete("/news")
def delete_news(id: Optional[str] = None, repos: Repositories = Depends(get_repositories)):
    repos.news.delete(_require_id(id, "Article"))
    return {"message": "News article deleted successfully"}


# ---- carousel ----

@router.get("/carousel")
def list_carousel(repos: Repositories = Depends(get_repositories)):
    return dump_records(active_carousel(repos.carousel.list()))


@router.post("/carousel", status_code=201)
def create_carousel_image(body: CarouselCreateRequest, repos: Repositories = Depends(get_repositories)):
    if not body.title or not body.image_url:
        raise ValidationFailedError("Title and image URL are required")

    existing = repos.carousel.list()
    max_order = max((img.order for img in existing), default=0)
    image = repos.carousel.create({
        "title": body.title,
        "image_url": body.image_url,
        "description": body.description or "",
        "category": body.category or "Performance",
        "order": max_order + 1,
        "is_active": True,
    })
    return dump_record(image)


@router.put("/carousel")
def update_carousel_image(body: CarouselUpdateRequest, repos: Repositories = Depends(get_repositories)):
    image_id = _require_id(body.id, "Image")
    changes = body.model_dump(exclude_none=True, exclude={"id"})
    return dump_record(repos.carousel.update(image_id, changes))


@router.delete("/carousel")
def delete_carousel_image(id: Optional[str] = None, repos: Repositories = Depends(get_repositories)):
    repos.carousel.delete(_require_id(id, "Image"))
    return {"message": "Carousel image deleted successfully"}


# ---- media ----

@router.get("/media")
def list_media(repos: Repositories = Depends(get_repositories)):
    return {"success": True, "data": dump_records(repos.media.list())}


@router.post("/media")
def upload_media(
    file: Optional[UploadFile] = File(None),
    alt: str = Form(""),
    tags: str = Form(""),
    caller: Caller = Depends(require_caller),
    repos: Repositories = Depends(get_repositories),
):
    if file is None or not file.filename:
        raise ValidationFailedError("No file provided")

    upload_dir = config.get_upload_dir(repos.store.root)
    upload_dir.mkdir(parents=True, exist_ok=True)
    filename = f"{uuid.uuid4().hex}{Path(file.filename).suffix}"

    with open(upload_dir / filename, "wb") as out_file:
        shutil.copyfileobj(file.file, out_file)

    media = repos.media.create({
        "filename": filename,
        "url": f"/uploads/{filename}",
        "alt": alt or "",
        "tags": [t.strip() for t in tags.split(",") if t.strip()],
        "uploaded_at": utc_now_iso(),
        "uploaded_by": caller.user_id,
    })
    return {"success": True, "data": dump_record(media)}


# ---- users ----

@router.get("/users")
def list_users(repos: Repositories = Depends(get_repositories)):
    return [public_user(u) for u in repos.users.list()]


@router.post("/users")
def login(body: LoginRequest, repos: Repositories = Depends(get_repositories)):
    if not body.username or not body.password:
        raise ValidationFailedError("Username and password are required")

    user = authenticate(repos.users.list(), body.username, body.password)
    if user is None:
        raise UnauthorizedError("Invalid username or password")

    return {"message": "Login successful", "user": public_user(user)}
