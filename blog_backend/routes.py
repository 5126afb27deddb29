"""
HTTP routes for posts, categories, tags, comments and media.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from blog_backend.auth import (
    ensure_owner_or_admin,
    get_current_user,
    get_optional_user,
    require_admin,
)
from blog_backend.db import (
    CategoryRecord,
    CommentRecord,
    DbClient,
    MediaRecord,
    NewCategory,
    NewComment,
    NewMedia,
    NewPost,
    NewTag,
    PostRecord,
    TagRecord,
    UserRecord,
)
from blog_backend.dependencies import get_db_client
from blog_backend.schemas import (
    CategoryCreate,
    CategoryDetailResponse,
    CategoryResponse,
    CategoryUpdate,
    CommentCreate,
    CommentResponse,
    CommentThreadResponse,
    CommentUpdate,
    MediaCreate,
    MediaResponse,
    PostCreate,
    PostDetailResponse,
    PostResponse,
    PostTagRequest,
    PostTagResponse,
    PostUpdate,
    TagCreate,
    TagDetailResponse,
    TagResponse,
    TagUpdate,
)
from blog_backend.slugs import slugify
from blog_backend.threads import build_comment_tree

logger = logging.getLogger(__name__)

router = APIRouter()


def _post(record: PostRecord) -> PostResponse:
    return PostResponse(**record.as_dict())


def _posts(records: Iterable[PostRecord]) -> list[PostResponse]:
    return [_post(record) for record in records]


def _category(record: CategoryRecord) -> CategoryResponse:
    return CategoryResponse(**record.as_dict())


def _tag(record: TagRecord) -> TagResponse:
    return TagResponse(**record.as_dict())


def _comment(record: CommentRecord) -> CommentResponse:
    return CommentResponse(**record.as_dict())


def _media(record: MediaRecord) -> MediaResponse:
    return MediaResponse(**record.as_dict())


def _no_content() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _require_slug(explicit: Optional[str], source: str) -> str:
    slug = explicit or slugify(source)
    if not slug:
        raise HTTPException(status_code=400, detail="Could not derive a slug, provide one")
    return slug


def _get_post_or_404(db: DbClient, post_id: int) -> PostRecord:
    post = db.get_post_by_id(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


def _check_tags_exist(db: DbClient, tag_ids: Iterable[int]) -> None:
    missing = sorted({tag_id for tag_id in tag_ids if db.get_tag_by_id(tag_id) is None})
    if missing:
        raise HTTPException(status_code=400, detail=f"Unknown tag id(s): {missing}")


@router.get("/health")
def health():
    return {"status": "ok"}


# -- posts ------------------------------------------------------------------


@router.get("/posts", response_model=list[PostResponse])
def list_posts(
    published: Optional[bool] = Query(None),
    db: DbClient = Depends(get_db_client),
):
    return _posts(db.get_all_posts(published=published))


@router.get("/posts/{slug}", response_model=PostDetailResponse)
def get_post(slug: str, db: DbClient = Depends(get_db_client)):
    post = db.get_post_by_slug(slug)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return PostDetailResponse(
        post=_post(post),
        tags=[_tag(tag) for tag in db.get_tags_by_post_id(post.id)],
        comments=[_comment(c) for c in db.get_comments_by_post_id(post.id)],
    )


@router.post("/posts", response_model=PostResponse, status_code=201)
def create_post(
    payload: PostCreate,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    if payload.tags:
        _check_tags_exist(db, payload.tags)
    post = db.create_post(
        NewPost(
            title=payload.title,
            slug=_require_slug(payload.slug, payload.title),
            content=payload.content,
            excerpt=payload.excerpt,
            cover_image=payload.cover_image,
            author=payload.author or user.display_name or user.username,
            published=payload.published,
            category_id=payload.category_id,
            user_id=user.id,
        )
    )
    if payload.tags:
        db.set_post_tags(post.id, payload.tags)
    logger.info("User %s created post %s (%s)", user.id, post.id, post.slug)
    return _post(post)


@router.api_route(
    "/posts/{post_id}", methods=["PUT", "PATCH"], response_model=PostResponse
)
def update_post(
    post_id: int,
    payload: PostUpdate,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    existing = _get_post_or_404(db, post_id)
    ensure_owner_or_admin(user, existing.user_id, "post")
    if payload.tags is not None:
        _check_tags_exist(db, payload.tags)

    updated = db.update_post(post_id, payload.changes(exclude=frozenset({"tags"})))
    if updated is None:
        raise HTTPException(status_code=404, detail="Post not found")
    if payload.tags is not None:
        db.set_post_tags(post_id, payload.tags)
    return _post(updated)


@router.delete("/posts/{post_id}", status_code=204)
def delete_post(
    post_id: int,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    existing = _get_post_or_404(db, post_id)
    ensure_owner_or_admin(user, existing.user_id, "post")
    if not db.delete_post(post_id):
        raise HTTPException(status_code=404, detail="Post not found")
    return _no_content()


@router.get("/search", response_model=list[PostResponse])
def search_posts(q: str = Query(""), db: DbClient = Depends(get_db_client)):
    if not q.strip():
        raise HTTPException(status_code=400, detail="Search query is required")
    return _posts(db.search_posts(q))


# -- post tags --------------------------------------------------------------


@router.get("/posts/{post_id}/tags", response_model=list[TagResponse])
def list_post_tags(post_id: int, db: DbClient = Depends(get_db_client)):
    _get_post_or_404(db, post_id)
    return [_tag(tag) for tag in db.get_tags_by_post_id(post_id)]


@router.post("/posts/{post_id}/tags", response_model=PostTagResponse, status_code=201)
def add_post_tag(
    post_id: int,
    payload: PostTagRequest,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    post = _get_post_or_404(db, post_id)
    ensure_owner_or_admin(user, post.user_id, "post")
    link = db.add_tag_to_post(post_id, payload.tag_id)
    return PostTagResponse(**link.as_dict())


@router.delete("/posts/{post_id}/tags/{tag_id}", status_code=204)
def remove_post_tag(
    post_id: int,
    tag_id: int,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    post = _get_post_or_404(db, post_id)
    ensure_owner_or_admin(user, post.user_id, "post")
    if not db.remove_tag_from_post(post_id, tag_id):
        raise HTTPException(status_code=404, detail="Tag is not attached to this post")
    return _no_content()


# -- categories -------------------------------------------------------------


@router.get("/categories", response_model=list[CategoryResponse])
def list_categories(db: DbClient = Depends(get_db_client)):
    return [_category(c) for c in db.get_all_categories()]


@router.get("/categories/{slug}", response_model=CategoryDetailResponse)
def get_category(slug: str, db: DbClient = Depends(get_db_client)):
    category = db.get_category_by_slug(slug)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return CategoryDetailResponse(
        category=_category(category),
        posts=_posts(db.get_posts_by_category(category.id)),
    )


@router.post("/categories", response_model=CategoryResponse, status_code=201)
def create_category(
    payload: CategoryCreate,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    category = db.create_category(
        NewCategory(
            name=payload.name,
            slug=_require_slug(payload.slug, payload.name),
            description=payload.description,
        )
    )
    return _category(category)


@router.patch("/categories/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    admin: UserRecord = Depends(require_admin),
    db: DbClient = Depends(get_db_client),
):
    category = db.update_category(category_id, payload.changes())
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return _category(category)


@router.delete("/categories/{category_id}", status_code=204)
def delete_category(
    category_id: int,
    admin: UserRecord = Depends(require_admin),
    db: DbClient = Depends(get_db_client),
):
    if not db.delete_category(category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return _no_content()


# -- tags -------------------------------------------------------------------


@router.get("/tags", response_model=list[TagResponse])
def list_tags(db: DbClient = Depends(get_db_client)):
    return [_tag(tag) for tag in db.get_all_tags()]


@router.get("/tags/{slug}", response_model=TagDetailResponse)
def get_tag(slug: str, db: DbClient = Depends(get_db_client)):
    tag = db.get_tag_by_slug(slug)
    if not tag:
        raise HTTPException(status_code=404, detail="Tag not found")
    return TagDetailResponse(tag=_tag(tag), posts=_posts(db.get_posts_by_tag(tag.id)))


@router.post("/tags", response_model=TagResponse, status_code=201)
def create_tag(
    payload: TagCreate,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    tag = db.create_tag(
        NewTag(name=payload.name, slug=_require_slug(payload.slug, payload.name))
    )
    return _tag(tag)


@router.patch("/tags/{tag_id}", response_model=TagResponse)
def update_tag(
    tag_id: int,
    payload: TagUpdate,
    admin: UserRecord = Depends(require_admin),
    db: DbClient = Depends(get_db_client),
):
    tag = db.update_tag(tag_id, payload.changes())
    if tag is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    return _tag(tag)


@router.delete("/tags/{tag_id}", status_code=204)
def delete_tag(
    tag_id: int,
    admin: UserRecord = Depends(require_admin),
    db: DbClient = Depends(get_db_client),
):
    if not db.delete_tag(tag_id):
        raise HTTPException(status_code=404, detail="Tag not found")
    return _no_content()


# -- comments ---------------------------------------------------------------


@router.get("/posts/{post_id}/comments", response_model=list[CommentResponse])
def list_comments(post_id: int, db: DbClient = Depends(get_db_client)):
    _get_post_or_404(db, post_id)
    return [_comment(c) for c in db.get_comments_by_post_id(post_id)]


@router.get(
    "/posts/{post_id}/comments/thread", response_model=list[CommentThreadResponse]
)
def list_comment_thread(post_id: int, db: DbClient = Depends(get_db_client)):
    _get_post_or_404(db, post_id)
    tree = build_comment_tree(db.get_comments_by_post_id(post_id))
    return [CommentThreadResponse(**node.as_dict()) for node in tree]


@router.post("/posts/{post_id}/comments", response_model=CommentResponse, status_code=201)
def create_comment(
    post_id: int,
    payload: CommentCreate,
    user: Optional[UserRecord] = Depends(get_optional_user),
    db: DbClient = Depends(get_db_client),
):
    _get_post_or_404(db, post_id)
    author_name = payload.author_name
    author_email = payload.author_email
    if user is not None:
        author_name = author_name or user.display_name or user.username
        author_email = author_email or user.email
    if not author_name or not author_email:
        raise HTTPException(
            status_code=400,
            detail="author_name and author_email are required for anonymous comments",
        )
    comment = db.create_comment(
        NewComment(
            content=payload.content,
            author_name=author_name,
            author_email=author_email,
            post_id=post_id,
            parent_id=payload.parent_id,
            user_id=user.id if user else None,
        )
    )
    return _comment(comment)


def _get_comment_for_edit(db: DbClient, comment_id: int, user: UserRecord) -> CommentRecord:
    comment = db.get_comment_by_id(comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    ensure_owner_or_admin(user, comment.user_id, "comment")
    return comment


@router.patch("/comments/{comment_id}", response_model=CommentResponse)
def update_comment(
    comment_id: int,
    payload: CommentUpdate,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    _get_comment_for_edit(db, comment_id, user)
    comment = db.update_comment(comment_id, payload.changes())
    if comment is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    return _comment(comment)


@router.delete("/comments/{comment_id}", status_code=204)
def delete_comment(
    comment_id: int,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    _get_comment_for_edit(db, comment_id, user)
    if not db.delete_comment(comment_id):
        raise HTTPException(status_code=404, detail="Comment not found")
    return _no_content()


# -- media ------------------------------------------------------------------


@router.get("/media", response_model=list[MediaResponse])
def list_media(db: DbClient = Depends(get_db_client)):
    return [_media(item) for item in db.get_all_media()]


@router.get("/media/{media_id}", response_model=MediaResponse)
def get_media(media_id: int, db: DbClient = Depends(get_db_client)):
    item = db.get_media_by_id(media_id)
    if not item:
        raise HTTPException(status_code=404, detail="Media not found")
    return _media(item)


@router.post("/media", response_model=MediaResponse, status_code=201)
def create_media(
    payload: MediaCreate,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    item = db.create_media(NewMedia(**payload.model_dump(), user_id=user.id))
    return _media(item)


@router.delete("/media/{media_id}", status_code=204)
def delete_media(
    media_id: int,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    item = db.get_media_by_id(media_id)
    if not item:
        raise HTTPException(status_code=404, detail="Media not found")
    ensure_owner_or_admin(user, item.user_id, "media item")
    db.delete_media(media_id)
    return _no_content()
