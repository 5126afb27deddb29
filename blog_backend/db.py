"""
Storage contract shared by the in-memory and SQLAlchemy-backed clients.

Route handlers only talk to ``DbClient``; ``dependencies.get_db_client``
decides which implementation backs a running process.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Protocol


class StorageError(Exception):
    """Base class for storage failures surfaced to the HTTP layer."""


class DuplicateError(StorageError):
    """A unique column (slug, name, username, email) already holds the value."""


class InvalidReferenceError(StorageError):
    """A foreign key points at a row that does not exist or is not allowed."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


POST_FIELDS = frozenset(
    {
        "title",
        "slug",
        "content",
        "excerpt",
        "cover_image",
        "author",
        "published",
        "category_id",
        "user_id",
    }
)
CATEGORY_FIELDS = frozenset({"name", "slug", "description"})
TAG_FIELDS = frozenset({"name", "slug"})
COMMENT_FIELDS = frozenset({"content", "author_name", "author_email", "parent_id"})
USER_FIELDS = frozenset(
    {"username", "email", "password_hash", "display_name", "profile_image", "bio", "role"}
)


def check_fields(changes: Mapping[str, Any], allowed: frozenset, entity: str) -> dict:
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"Unknown {entity} field(s): {', '.join(sorted(unknown))}")
    return dict(changes)


class _Record:
    """Records are immutable snapshots; changes go through ``update_*``."""

    def as_dict(self) -> dict:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class PostRecord(_Record):
    id: int
    title: str
    slug: str
    content: str
    author: str
    excerpt: Optional[str] = None
    cover_image: Optional[str] = None
    published: bool = True
    category_id: Optional[int] = None
    user_id: Optional[int] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class CategoryRecord(_Record):
    id: int
    name: str
    slug: str
    description: Optional[str] = None


@dataclass(frozen=True)
class TagRecord(_Record):
    id: int
    name: str
    slug: str


@dataclass(frozen=True)
class PostTagRecord(_Record):
    id: int
    post_id: int
    tag_id: int


@dataclass(frozen=True)
class CommentRecord(_Record):
    id: int
    content: str
    author_name: str
    author_email: str
    post_id: int
    parent_id: Optional[int] = None
    user_id: Optional[int] = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class MediaRecord(_Record):
    id: int
    filename: str
    file_path: str
    file_type: str
    file_size: int
    user_id: Optional[int] = None
    uploaded_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class UserRecord(_Record):
    id: int
    username: str
    email: str
    password_hash: str
    display_name: Optional[str] = None
    profile_image: Optional[str] = None
    bio: Optional[str] = None
    role: str = "user"
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def public_dict(self) -> dict:
        data = self.as_dict()
        data.pop("password_hash", None)
        return data


# Inputs for create_* calls. Ids and timestamps are assigned by the store.


@dataclass
class NewPost:
    title: str
    slug: str
    content: str
    author: str
    excerpt: Optional[str] = None
    cover_image: Optional[str] = None
    published: bool = True
    category_id: Optional[int] = None
    user_id: Optional[int] = None


@dataclass
class NewCategory:
    name: str
    slug: str
    description: Optional[str] = None


@dataclass
class NewTag:
    name: str
    slug: str


@dataclass
class NewComment:
    content: str
    author_name: str
    author_email: str
    post_id: int
    parent_id: Optional[int] = None
    user_id: Optional[int] = None


@dataclass
class NewMedia:
    filename: str
    file_path: str
    file_type: str
    file_size: int
    user_id: Optional[int] = None


@dataclass
class NewUser:
    username: str
    email: str
    password_hash: str
    display_name: Optional[str] = None
    profile_image: Optional[str] = None
    bio: Optional[str] = None
    role: str = "user"


class DbClient(Protocol):
    """Interface for blog persistence."""

    # Posts
    def get_all_posts(self, published: Optional[bool] = None) -> list[PostRecord]:
        ...

    def get_post_by_id(self, post_id: int) -> Optional[PostRecord]:
        ...

    def get_post_by_slug(self, slug: str) -> Optional[PostRecord]:
        ...

    def get_posts_by_category(self, category_id: int) -> list[PostRecord]:
        ...

    def get_posts_by_tag(self, tag_id: int) -> list[PostRecord]:
        ...

    def search_posts(self, query: str) -> list[PostRecord]:
        ...

    def create_post(self, post: NewPost) -> PostRecord:
        ...

    def update_post(
        self, post_id: int, changes: Mapping[str, Any]
    ) -> Optional[PostRecord]:
        ...

    def delete_post(self, post_id: int) -> bool:
        ...

    # Categories
    def get_all_categories(self) -> list[CategoryRecord]:
        ...

    def get_category_by_id(self, category_id: int) -> Optional[CategoryRecord]:
        ...

    def get_category_by_slug(self, slug: str) -> Optional[CategoryRecord]:
        ...

    def create_category(self, category: NewCategory) -> CategoryRecord:
        ...

    def update_category(
        self, category_id: int, changes: Mapping[str, Any]
    ) -> Optional[CategoryRecord]:
        ...

    def delete_category(self, category_id: int) -> bool:
        ...

    # Tags
    def get_all_tags(self) -> list[TagRecord]:
        ...

    def get_tag_by_id(self, tag_id: int) -> Optional[TagRecord]:
        ...

    def get_tag_by_slug(self, slug: str) -> Optional[TagRecord]:
        ...

    def create_tag(self, tag: NewTag) -> TagRecord:
        ...

    def update_tag(self, tag_id: int, changes: Mapping[str, Any]) -> Optional[TagRecord]:
        ...

    def delete_tag(self, tag_id: int) -> bool:
        ...

    # Post-tag links
    def get_tags_by_post_id(self, post_id: int) -> list[TagRecord]:
        ...

    def add_tag_to_post(self, post_id: int, tag_id: int) -> PostTagRecord:
        ...

    def remove_tag_from_post(self, post_id: int, tag_id: int) -> bool:
        ...

    def set_post_tags(self, post_id: int, tag_ids: Iterable[int]) -> list[TagRecord]:
        ...

    # Comments
    def get_comment_by_id(self, comment_id: int) -> Optional[CommentRecord]:
        ...

    def get_comments_by_post_id(self, post_id: int) -> list[CommentRecord]:
        ...

    def create_comment(self, comment: NewComment) -> CommentRecord:
        ...

    def update_comment(
        self, comment_id: int, changes: Mapping[str, Any]
    ) -> Optional[CommentRecord]:
        ...

    def delete_comment(self, comment_id: int) -> bool:
        ...

    # Media
    def get_all_media(self) -> list[MediaRecord]:
        ...

    def get_media_by_id(self, media_id: int) -> Optional[MediaRecord]:
        ...

    def create_media(self, media: NewMedia) -> MediaRecord:
        ...

    def delete_media(self, media_id: int) -> bool:
        ...

    # Users
    def get_user_by_id(self, user_id: int) -> Optional[UserRecord]:
        ...

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        ...

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    def create_user(self, user: NewUser) -> UserRecord:
        ...

    def update_user(
        self, user_id: int, changes: Mapping[str, Any]
    ) -> Optional[UserRecord]:
        ...

    def delete_user(self, user_id: int) -> bool:
        ...

    def reset(self) -> None:
        ...
