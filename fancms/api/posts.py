"""
CMS posts and taxonomy endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..core import config
from ..core.auth import Caller, can_edit_post, has_role
from ..core.dao import Repositories
from ..core.errors import PermissionDeniedError, ValidationFailedError
from ..core.ids import sanitize_slug
from ..core.sanitize import sanitize_content
from ..core.schema import dump_record, dump_records
from ..core.search_service import list_posts, paginate
from .deps import get_repositories, require_caller
from .schemas import PostCreateRequest, PostUpdateRequest

router = APIRouter()

# Fields that are only changed when the request carries a non-empty value
_NON_EMPTY_FIELDS = ('title', 'slug', 'excerpt', 'content', 'status', 'tags', 'category_id')


@router.get("/posts")
def list_posts_endpoint(
    query: str = "",
    status: Optional[str] = None,
    tag: Optional[str] = None,
    category: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1),
    repos: Repositories = Depends(get_repositories),
):
    posts = list_posts(repos.posts.list(), query=query, status=status or None,
                       tag=tag or None, category=category or None)
    result = paginate(posts, page, page_size or config.DEFAULT_PAGE_SIZE)

    return {
        "success": True,
        "data": dump_records(result.items),
        "pagination": result.metadata(),
    }


@router.post("/posts")
def create_post(body: PostCreateRequest, caller: Caller = Depends(require_caller),
                repos: Repositories = Depends(get_repositories)):
    fields = body.model_dump()
    fields["slug"] = sanitize_slug(body.slug)
    if not fields["slug"]:
        raise ValidationFailedError("slug must contain letters or digits")
    fields["content"] = sanitize_content(body.content)
    fields["author_id"] = caller.user_id

    post = repos.posts.create(fields)
    return {"success": True, "data": dump_record(post)}


@router.get("/posts/{post_id}")
def get_post(post_id: str, repos: Repositories = Depends(get_repositories)):
    return {"success": True, "data": dump_record(repos.posts.get(post_id))}


@router.put("/posts/{post_id}")
def update_post(post_id: str, body: PostUpdateRequest, caller: Caller = Depends(require_caller),
                repos: Repositories = Depends(get_repositories)):
    changes = body.model_dump(exclude_unset=True)
    changes = {k: v for k, v in changes.items() if k not in _NON_EMPTY_FIELDS or v}
    if "slug" in changes:
        changes["slug"] = sanitize_slug(changes["slug"])
    if "content" in changes:
        changes["content"] = sanitize_content(changes["content"])

    def guard(post):
        if not can_edit_post(caller.user_id, post.author_id, caller.role):
            raise PermissionDeniedError("Permission denied")

    post = repos.posts.update(post_id, changes, guard=guard)
    return {"success": True, "data": dump_record(post)}


@router.delete("/posts/{post_id}")
def delete_post(post_id: str, caller: Caller = Depends(require_caller),
                repos: Repositories = Depends(get_repositories)):
    def guard(post):
        if not has_role(caller, "ADMIN"):
            raise PermissionDeniedError("Permission denied")

    repos.posts.delete(post_id, guard=guard)
    return {"success": True, "message": "Post deleted"}


@router.get("/taxonomies/categories")
def list_categories(repos: Repositories = Depends(get_repositories)):
    return {"success": True, "data": dump_records(repos.categories.list())}


@router.get("/taxonomies/tags")
def list_tags(repos: Repositories = Depends(get_repositories)):
    return {"success": True, "data": dump_records(repos.tags.list())}
