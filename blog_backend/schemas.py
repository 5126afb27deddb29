"""
Pydantic schemas for the blog API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar, Literal, Optional

from pydantic import BaseModel, Field, model_validator

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
MIME_PATTERN = r"^[\w.+-]+/[\w.+-]+$"


class PartialUpdate(BaseModel):
    """Base for PATCH/PUT bodies: only fields the client sent are applied."""

    non_nullable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        for name in sorted(self.model_fields_set & self.non_nullable):
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self, exclude: frozenset[str] = frozenset()) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude=set(exclude))


# Posts


class PostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=80, pattern=SLUG_PATTERN)
    content: str = Field(..., min_length=1)
    excerpt: Optional[str] = Field(None, max_length=500)
    cover_image: Optional[str] = Field(None, max_length=2048)
    author: Optional[str] = Field(None, min_length=1, max_length=100)
    published: bool = True
    category_id: Optional[int] = None
    tags: Optional[list[int]] = None


class PostUpdate(PartialUpdate):
    non_nullable: ClassVar[frozenset[str]] = frozenset(
        {"title", "slug", "content", "author", "published"}
    )

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=80, pattern=SLUG_PATTERN)
    content: Optional[str] = Field(None, min_length=1)
    excerpt: Optional[str] = Field(None, max_length=500)
    cover_image: Optional[str] = Field(None, max_length=2048)
    author: Optional[str] = Field(None, min_length=1, max_length=100)
    published: Optional[bool] = None
    category_id: Optional[int] = None
    tags: Optional[list[int]] = None


class PostResponse(BaseModel):
    id: int
    title: str
    slug: str
    content: str
    excerpt: Optional[str] = None
    cover_image: Optional[str] = None
    author: str
    published: bool
    category_id: Optional[int] = None
    user_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


# Categories and tags


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=80, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(None, max_length=1000)


class CategoryUpdate(PartialUpdate):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"name", "slug"})

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=80, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(None, max_length=1000)


class CategoryResponse(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    slug: Optional[str] = Field(None, max_length=80, pattern=SLUG_PATTERN)


class TagUpdate(PartialUpdate):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"name", "slug"})

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    slug: Optional[str] = Field(None, max_length=80, pattern=SLUG_PATTERN)


class TagResponse(BaseModel):
    id: int
    name: str
    slug: str


class PostTagRequest(BaseModel):
    tag_id: int


class PostTagResponse(BaseModel):
    id: int
    post_id: int
    tag_id: int


# Comments


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    author_name: Optional[str] = Field(None, min_length=1, max_length=100)
    author_email: Optional[str] = Field(None, max_length=254, pattern=EMAIL_PATTERN)
    parent_id: Optional[int] = None


class CommentUpdate(PartialUpdate):
    non_nullable: ClassVar[frozenset[str]] = frozenset(
        {"content", "author_name", "author_email"}
    )

    content: Optional[str] = Field(None, min_length=1, max_length=5000)
    author_name: Optional[str] = Field(None, min_length=1, max_length=100)
    author_email: Optional[str] = Field(None, max_length=254, pattern=EMAIL_PATTERN)
    parent_id: Optional[int] = None


class CommentResponse(BaseModel):
    id: int
    content: str
    author_name: str
    author_email: str
    post_id: int
    parent_id: Optional[int] = None
    user_id: Optional[int] = None
    created_at: datetime


class CommentThreadResponse(CommentResponse):
    replies: list["CommentThreadResponse"] = Field(default_factory=list)


class PostDetailResponse(BaseModel):
    post: PostResponse
    tags: list[TagResponse]
    comments: list[CommentResponse]


class CategoryDetailResponse(BaseModel):
    category: CategoryResponse
    posts: list[PostResponse]


class TagDetailResponse(BaseModel):
    tag: TagResponse
    posts: list[PostResponse]


# Media


class MediaCreate(BaseModel):
    filename: str = Field(..., min_length=1, max_length=255)
    file_path: str = Field(..., min_length=1, max_length=1024)
    file_type: str = Field(..., max_length=255, pattern=MIME_PATTERN)
    file_size: int = Field(..., ge=0)


class MediaResponse(BaseModel):
    id: int
    filename: str
    file_path: str
    file_type: str
    file_size: int
    user_id: Optional[int] = None
    uploaded_at: datetime


# Users and auth


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: str = Field(..., max_length=254, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=8, max_length=256)
    display_name: Optional[str] = Field(None, max_length=100)
    profile_image: Optional[str] = Field(None, max_length=2048)
    bio: Optional[str] = Field(None, max_length=2000)


class LoginRequest(BaseModel):
    username: str
    password: str


class ProfileUpdate(PartialUpdate):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"email", "password"})

    email: Optional[str] = Field(None, max_length=254, pattern=EMAIL_PATTERN)
    password: Optional[str] = Field(None, min_length=8, max_length=256)
    display_name: Optional[str] = Field(None, max_length=100)
    profile_image: Optional[str] = Field(None, max_length=2048)
    bio: Optional[str] = Field(None, max_length=2000)


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    display_name: Optional[str] = None
    profile_image: Optional[str] = None
    bio: Optional[str] = None
    role: Literal["user", "admin"]
    created_at: datetime
    updated_at: datetime


class LoginResponse(BaseModel):
    user: UserResponse


class MessageResponse(BaseModel):
    message: str


CommentThreadResponse.model_rebuild()
