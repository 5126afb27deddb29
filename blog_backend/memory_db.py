"""
In-memory implementation of the storage contract for development and tests.

Not safe for concurrent mutation: id generation and cascades are plain
read-modify-write sequences on shared dicts.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from blog_backend.db import (
    CATEGORY_FIELDS,
    COMMENT_FIELDS,
    POST_FIELDS,
    TAG_FIELDS,
    USER_FIELDS,
    CategoryRecord,
    CommentRecord,
    DuplicateError,
    InvalidReferenceError,
    MediaRecord,
    NewCategory,
    NewComment,
    NewMedia,
    NewPost,
    NewTag,
    NewUser,
    PostRecord,
    PostTagRecord,
    TagRecord,
    UserRecord,
    check_fields,
    utcnow,
)
from blog_backend.threads import creates_cycle

logger = logging.getLogger(__name__)


def _newest_first(records, attr: str) -> list:
    return sorted(records, key=lambda r: (getattr(r, attr), r.id), reverse=True)


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.posts: Dict[int, PostRecord] = {}
        self.categories: Dict[int, CategoryRecord] = {}
        self.tags: Dict[int, TagRecord] = {}
        self.post_tags: Dict[int, PostTagRecord] = {}
        self.comments: Dict[int, CommentRecord] = {}
        self.media: Dict[int, MediaRecord] = {}
        self.users: Dict[int, UserRecord] = {}
        self._ids: Dict[str, int] = {}

    def _next_id(self, kind: str) -> int:
        self._ids[kind] = self._ids.get(kind, 0) + 1
        return self._ids[kind]

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.posts.clear()
        self.categories.clear()
        self.tags.clear()
        self.post_tags.clear()
        self.comments.clear()
        self.media.clear()
        self.users.clear()
        self._ids.clear()

    # -- integrity helpers --------------------------------------------------

    @staticmethod
    def _ensure_unique(
        rows: Mapping[int, Any],
        attr: str,
        value: Any,
        label: str,
        exclude_id: Optional[int] = None,
    ) -> None:
        for row in rows.values():
            if row.id != exclude_id and getattr(row, attr) == value:
                raise DuplicateError(f"{label} with {attr} '{value}' already exists")

    def _check_category(self, category_id: Optional[int]) -> None:
        if category_id is not None and category_id not in self.categories:
            raise InvalidReferenceError(f"Category {category_id} does not exist")

    def _check_user(self, user_id: Optional[int]) -> None:
        if user_id is not None and user_id not in self.users:
            raise InvalidReferenceError(f"User {user_id} does not exist")

    def _check_parent(
        self, post_id: int, parent_id: Optional[int], comment_id: Optional[int] = None
    ) -> None:
        if parent_id is None:
            return
        parent = self.comments.get(parent_id)
        if parent is None:
            raise InvalidReferenceError(f"Parent comment {parent_id} does not exist")
        if parent.post_id != post_id:
            raise InvalidReferenceError(
                f"Parent comment {parent_id} belongs to a different post"
            )
        if comment_id is not None and creates_cycle(
            comment_id, parent_id, lambda cid: self.comments[cid].parent_id
        ):
            raise InvalidReferenceError(
                f"Comment {comment_id} cannot reply to its own descendant"
            )

    # -- posts --------------------------------------------------------------

    def get_all_posts(self, published: Optional[bool] = None) -> list[PostRecord]:
        posts = self.posts.values()
        if published is not None:
            posts = [post for post in posts if post.published == published]
        return _newest_first(posts, "created_at")

    def get_post_by_id(self, post_id: int) -> Optional[PostRecord]:
        return self.posts.get(post_id)

    def get_post_by_slug(self, slug: str) -> Optional[PostRecord]:
        for post in self.posts.values():
            if post.slug == slug:
                return post
        return None

    def get_posts_by_category(self, category_id: int) -> list[PostRecord]:
        return _newest_first(
            [post for post in self.posts.values() if post.category_id == category_id],
            "created_at",
        )

    def get_posts_by_tag(self, tag_id: int) -> list[PostRecord]:
        post_ids = {link.post_id for link in self.post_tags.values() if link.tag_id == tag_id}
        return _newest_first(
            [post for post in self.posts.values() if post.id in post_ids], "created_at"
        )

    def search_posts(self, query: str) -> list[PostRecord]:
        needle = query.lower()
        matches = [
            post
            for post in self.posts.values()
            if needle in post.title.lower()
            or needle in post.content.lower()
            or (post.excerpt is not None and needle in post.excerpt.lower())
        ]
        return _newest_first(matches, "created_at")

    def create_post(self, post: NewPost) -> PostRecord:
        self._ensure_unique(self.posts, "slug", post.slug, "Post")
        self._check_category(post.category_id)
        self._check_user(post.user_id)
        now = utcnow()
        record = PostRecord(
            id=self._next_id("post"),
            created_at=now,
            updated_at=now,
            **dataclasses.asdict(post),
        )
        self.posts[record.id] = record
        return record

    def update_post(
        self, post_id: int, changes: Mapping[str, Any]
    ) -> Optional[PostRecord]:
        changes = check_fields(changes, POST_FIELDS, "post")
        existing = self.posts.get(post_id)
        if not existing:
            return None
        if "slug" in changes:
            self._ensure_unique(self.posts, "slug", changes["slug"], "Post", post_id)
        if "category_id" in changes:
            self._check_category(changes["category_id"])
        if "user_id" in changes:
            self._check_user(changes["user_id"])
        updated = dataclasses.replace(existing, **changes, updated_at=utcnow())
        self.posts[post_id] = updated
        return updated

    def delete_post(self, post_id: int) -> bool:
        if post_id not in self.posts:
            return False
        comment_ids = [c.id for c in self.comments.values() if c.post_id == post_id]
        for comment_id in comment_ids:
            del self.comments[comment_id]
        link_ids = [link.id for link in self.post_tags.values() if link.post_id == post_id]
        for link_id in link_ids:
            del self.post_tags[link_id]
        del self.posts[post_id]
        logger.info(
            "Deleted post %s with %d comments and %d tag links",
            post_id,
            len(comment_ids),
            len(link_ids),
        )
        return True

    # -- categories ---------------------------------------------------------

    def get_all_categories(self) -> list[CategoryRecord]:
        return sorted(self.categories.values(), key=lambda c: c.id)

    def get_category_by_id(self, category_id: int) -> Optional[CategoryRecord]:
        return self.categories.get(category_id)

    def get_category_by_slug(self, slug: str) -> Optional[CategoryRecord]:
        for category in self.categories.values():
            if category.slug == slug:
                return category
        return None

    def create_category(self, category: NewCategory) -> CategoryRecord:
        self._ensure_unique(self.categories, "name", category.name, "Category")
        self._ensure_unique(self.categories, "slug", category.slug, "Category")
        record = CategoryRecord(
            id=self._next_id("category"), **dataclasses.asdict(category)
        )
        self.categories[record.id] = record
        return record

    def update_category(
        self, category_id: int, changes: Mapping[str, Any]
    ) -> Optional[CategoryRecord]:
        changes = check_fields(changes, CATEGORY_FIELDS, "category")
        existing = self.categories.get(category_id)
        if not existing:
            return None
        for attr in ("name", "slug"):
            if attr in changes:
                self._ensure_unique(
                    self.categories, attr, changes[attr], "Category", category_id
                )
        updated = dataclasses.replace(existing, **changes)
        self.categories[category_id] = updated
        return updated

    def delete_category(self, category_id: int) -> bool:
        if category_id not in self.categories:
            return False
        for post in list(self.posts.values()):
            if post.category_id == category_id:
                self.posts[post.id] = dataclasses.replace(post, category_id=None)
        del self.categories[category_id]
        return True

    # -- tags ---------------------------------------------------------------

    def get_all_tags(self) -> list[TagRecord]:
        return sorted(self.tags.values(), key=lambda t: t.id)

    def get_tag_by_id(self, tag_id: int) -> Optional[TagRecord]:
        return self.tags.get(tag_id)

    def get_tag_by_slug(self, slug: str) -> Optional[TagRecord]:
        for tag in self.tags.values():
            if tag.slug == slug:
                return tag
        return None

    def create_tag(self, tag: NewTag) -> TagRecord:
        self._ensure_unique(self.tags, "name", tag.name, "Tag")
        self._ensure_unique(self.tags, "slug", tag.slug, "Tag")
        record = TagRecord(id=self._next_id("tag"), **dataclasses.asdict(tag))
        self.tags[record.id] = record
        return record

    def update_tag(self, tag_id: int, changes: Mapping[str, Any]) -> Optional[TagRecord]:
        changes = check_fields(changes, TAG_FIELDS, "tag")
        existing = self.tags.get(tag_id)
        if not existing:
            return None
        for attr in ("name", "slug"):
            if attr in changes:
                self._ensure_unique(self.tags, attr, changes[attr], "Tag", tag_id)
        updated = dataclasses.replace(existing, **changes)
        self.tags[tag_id] = updated
        return updated

    def delete_tag(self, tag_id: int) -> bool:
        if tag_id not in self.tags:
            return False
        for link in list(self.post_tags.values()):
            if link.tag_id == tag_id:
                del self.post_tags[link.id]
        del self.tags[tag_id]
        return True

    # -- post-tag links -----------------------------------------------------

    def _find_link(self, post_id: int, tag_id: int) -> Optional[PostTagRecord]:
        for link in self.post_tags.values():
            if link.post_id == post_id and link.tag_id == tag_id:
                return link
        return None

    def get_tags_by_post_id(self, post_id: int) -> list[TagRecord]:
        tag_ids = {link.tag_id for link in self.post_tags.values() if link.post_id == post_id}
        return [tag for tag in self.get_all_tags() if tag.id in tag_ids]

    def add_tag_to_post(self, post_id: int, tag_id: int) -> PostTagRecord:
        if post_id not in self.posts:
            raise InvalidReferenceError(f"Post {post_id} does not exist")
        if tag_id not in self.tags:
            raise InvalidReferenceError(f"Tag {tag_id} does not exist")
        existing = self._find_link(post_id, tag_id)
        if existing:
            return existing
        link = PostTagRecord(id=self._next_id("post_tag"), post_id=post_id, tag_id=tag_id)
        self.post_tags[link.id] = link
        return link

    def remove_tag_from_post(self, post_id: int, tag_id: int) -> bool:
        link = self._find_link(post_id, tag_id)
        if not link:
            return False
        del self.post_tags[link.id]
        return True

    def set_post_tags(self, post_id: int, tag_ids: Iterable[int]) -> list[TagRecord]:
        wanted = set(tag_ids)
        if post_id not in self.posts:
            raise InvalidReferenceError(f"Post {post_id} does not exist")
        missing = sorted(tag_id for tag_id in wanted if tag_id not in self.tags)
        if missing:
            raise InvalidReferenceError(f"Tag(s) {missing} do not exist")
        current = {tag.id for tag in self.get_tags_by_post_id(post_id)}
        for tag_id in current - wanted:
            self.remove_tag_from_post(post_id, tag_id)
        for tag_id in sorted(wanted - current):
            self.add_tag_to_post(post_id, tag_id)
        return self.get_tags_by_post_id(post_id)

    # -- comments -----------------------------------------------------------

    def get_comment_by_id(self, comment_id: int) -> Optional[CommentRecord]:
        return self.comments.get(comment_id)

    def get_comments_by_post_id(self, post_id: int) -> list[CommentRecord]:
        return sorted(
            (c for c in self.comments.values() if c.post_id == post_id),
            key=lambda c: (c.created_at, c.id),
        )

    def create_comment(self, comment: NewComment) -> CommentRecord:
        if comment.post_id not in self.posts:
            raise InvalidReferenceError(f"Post {comment.post_id} does not exist")
        self._check_user(comment.user_id)
        self._check_parent(comment.post_id, comment.parent_id)
        record = CommentRecord(
            id=self._next_id("comment"),
            created_at=utcnow(),
            **dataclasses.asdict(comment),
        )
        self.comments[record.id] = record
        return record

    def update_comment(
        self, comment_id: int, changes: Mapping[str, Any]
    ) -> Optional[CommentRecord]:
        changes = check_fields(changes, COMMENT_FIELDS, "comment")
        existing = self.comments.get(comment_id)
        if not existing:
            return None
        if "parent_id" in changes:
            self._check_parent(existing.post_id, changes["parent_id"], comment_id)
        updated = dataclasses.replace(existing, **changes)
        self.comments[comment_id] = updated
        return updated

    def delete_comment(self, comment_id: int) -> bool:
        if comment_id not in self.comments:
            return False
        for child in list(self.comments.values()):
            if child.parent_id == comment_id:
                self.comments[child.id] = dataclasses.replace(child, parent_id=None)
        del self.comments[comment_id]
        return True

    # -- media --------------------------------------------------------------

    def get_all_media(self) -> list[MediaRecord]:
        return _newest_first(self.media.values(), "uploaded_at")

    def get_media_by_id(self, media_id: int) -> Optional[MediaRecord]:
        return self.media.get(media_id)

    def create_media(self, media: NewMedia) -> MediaRecord:
        self._check_user(media.user_id)
        record = MediaRecord(
            id=self._next_id("media"),
            uploaded_at=utcnow(),
            **dataclasses.asdict(media),
        )
        self.media[record.id] = record
        return record

    def delete_media(self, media_id: int) -> bool:
        return self.media.pop(media_id, None) is not None

    # -- users --------------------------------------------------------------

    def get_user_by_id(self, user_id: int) -> Optional[UserRecord]:
        return self.users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        for user in self.users.values():
            if user.username == username:
                return user
        return None

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        for user in self.users.values():
            if user.email == email:
                return user
        return None

    def create_user(self, user: NewUser) -> UserRecord:
        self._ensure_unique(self.users, "username", user.username, "User")
        self._ensure_unique(self.users, "email", user.email, "User")
        now = utcnow()
        record = UserRecord(
            id=self._next_id("user"),
            created_at=now,
            updated_at=now,
            **dataclasses.asdict(user),
        )
        self.users[record.id] = record
        return record

    def update_user(
        self, user_id: int, changes: Mapping[str, Any]
    ) -> Optional[UserRecord]:
        changes = check_fields(changes, USER_FIELDS, "user")
        existing = self.users.get(user_id)
        if not existing:
            return None
        for attr in ("username", "email"):
            if attr in changes:
                self._ensure_unique(self.users, attr, changes[attr], "User", user_id)
        updated = dataclasses.replace(existing, **changes, updated_at=utcnow())
        self.users[user_id] = updated
        return updated

    def delete_user(self, user_id: int) -> bool:
        if user_id not in self.users:
            return False
        for rows in (self.posts, self.comments, self.media):
            for row in list(rows.values()):
                if row.user_id == user_id:
                    rows[row.id] = dataclasses.replace(row, user_id=None)
        del self.users[user_id]
        return True
