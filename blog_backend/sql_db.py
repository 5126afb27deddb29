"""
SQLAlchemy implementation of the storage contract.

Postgres is the production target; any SQLAlchemy URL works, and the tests
run it against in-memory SQLite.

Search relies on the database for case folding. Postgres ILIKE folds all of
Unicode; SQLite's lower() only folds ASCII, so on SQLite "äbc" does not match
"ÄBC".
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
    delete,
    event,
    or_,
    select,
    update,
)
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

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
    StorageError,
    TagRecord,
    UserRecord,
    check_fields,
    utcnow,
)
from blog_backend.threads import creates_cycle

logger = logging.getLogger(__name__)


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        url = make_url(database_url)
        engine_kwargs: dict[str, Any] = {"pool_pre_ping": True, "pool_recycle": 1800}
        if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
            # One shared connection, otherwise every thread sees an empty database.
            engine_kwargs = {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        self.engine = create_engine(database_url, future=True, **engine_kwargs)
        if url.get_backend_name() == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def reset(self) -> None:
        with self.Session() as session:
            for table in reversed(Base.metadata.sorted_tables):
                session.execute(table.delete())
            session.commit()

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _commit(session: Session, label: str) -> None:
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            logger.warning("Integrity error while saving %s: %s", label, exc.orig)
            raise StorageError(f"{label} violates a database constraint") from exc

    @staticmethod
    def _ensure_unique(
        session: Session,
        column,
        value: Any,
        label: str,
        exclude_id: Optional[int] = None,
    ) -> None:
        row_cls = column.class_
        stmt = select(row_cls.id).where(column == value)
        if exclude_id is not None:
            stmt = stmt.where(row_cls.id != exclude_id)
        if session.execute(stmt.limit(1)).first():
            raise DuplicateError(f"{label} with {column.key} '{value}' already exists")

    @staticmethod
    def _ensure_exists(session: Session, row_cls, row_id: Optional[int], label: str) -> None:
        if row_id is not None and session.get(row_cls, row_id) is None:
            raise InvalidReferenceError(f"{label} {row_id} does not exist")

    def _check_parent(
        self,
        session: Session,
        post_id: int,
        parent_id: Optional[int],
        comment_id: Optional[int] = None,
    ) -> None:
        if parent_id is None:
            return
        parent = session.get(CommentRow, parent_id)
        if parent is None:
            raise InvalidReferenceError(f"Parent comment {parent_id} does not exist")
        if parent.post_id != post_id:
            raise InvalidReferenceError(
                f"Parent comment {parent_id} belongs to a different post"
            )

        def parent_of(cid: int) -> Optional[int]:
            row = session.get(CommentRow, cid)
            return row.parent_id if row else None

        if comment_id is not None and creates_cycle(comment_id, parent_id, parent_of):
            raise InvalidReferenceError(
                f"Comment {comment_id} cannot reply to its own descendant"
            )

    # -- row conversion -----------------------------------------------------

    def _to_post(self, row: "PostRow") -> PostRecord:
        return PostRecord(
            id=row.id,
            title=row.title,
            slug=row.slug,
            content=row.content,
            author=row.author,
            excerpt=row.excerpt,
            cover_image=row.cover_image,
            published=row.published,
            category_id=row.category_id,
            user_id=row.user_id,
            created_at=_aware(row.created_at),
            updated_at=_aware(row.updated_at),
        )

    def _to_category(self, row: "CategoryRow") -> CategoryRecord:
        return CategoryRecord(
            id=row.id, name=row.name, slug=row.slug, description=row.description
        )

    def _to_tag(self, row: "TagRow") -> TagRecord:
        return TagRecord(id=row.id, name=row.name, slug=row.slug)

    def _to_comment(self, row: "CommentRow") -> CommentRecord:
        return CommentRecord(
            id=row.id,
            content=row.content,
            author_name=row.author_name,
            author_email=row.author_email,
            post_id=row.post_id,
            parent_id=row.parent_id,
            user_id=row.user_id,
            created_at=_aware(row.created_at),
        )

    def _to_media(self, row: "MediaRow") -> MediaRecord:
        return MediaRecord(
            id=row.id,
            filename=row.filename,
            file_path=row.file_path,
            file_type=row.file_type,
            file_size=row.file_size,
            user_id=row.user_id,
            uploaded_at=_aware(row.uploaded_at),
        )

    def _to_user(self, row: "UserRow") -> UserRecord:
        return UserRecord(
            id=row.id,
            username=row.username,
            email=row.email,
            password_hash=row.password_hash,
            display_name=row.display_name,
            profile_image=row.profile_image,
            bio=row.bio,
            role=row.role,
            created_at=_aware(row.created_at),
            updated_at=_aware(row.updated_at),
        )

    # -- posts --------------------------------------------------------------

    def _list_posts(self, stmt) -> list[PostRecord]:
        stmt = stmt.order_by(PostRow.created_at.desc(), PostRow.id.desc())
        with self.Session() as session:
            return [self._to_post(row) for row in session.execute(stmt).scalars()]

    def get_all_posts(self, published: Optional[bool] = None) -> list[PostRecord]:
        stmt = select(PostRow)
        if published is not None:
            stmt = stmt.where(PostRow.published == published)
        return self._list_posts(stmt)

    def get_post_by_id(self, post_id: int) -> Optional[PostRecord]:
        with self.Session() as session:
            row = session.get(PostRow, post_id)
            return self._to_post(row) if row else None

    def get_post_by_slug(self, slug: str) -> Optional[PostRecord]:
        with self.Session() as session:
            row = session.execute(
                select(PostRow).where(PostRow.slug == slug)
            ).scalar_one_or_none()
            return self._to_post(row) if row else None

    def get_posts_by_category(self, category_id: int) -> list[PostRecord]:
        return self._list_posts(select(PostRow).where(PostRow.category_id == category_id))

    def get_posts_by_tag(self, tag_id: int) -> list[PostRecord]:
        return self._list_posts(
            select(PostRow)
            .join(PostTagRow, PostTagRow.post_id == PostRow.id)
            .where(PostTagRow.tag_id == tag_id)
        )

    def search_posts(self, query: str) -> list[PostRecord]:
        pattern = _like_pattern(query)
        return self._list_posts(
            select(PostRow).where(
                or_(
                    PostRow.title.ilike(pattern, escape="\\"),
                    PostRow.content.ilike(pattern, escape="\\"),
                    PostRow.excerpt.ilike(pattern, escape="\\"),
                )
            )
        )

    def create_post(self, post: NewPost) -> PostRecord:
        now = utcnow()
        with self.Session() as session:
            self._ensure_unique(session, PostRow.slug, post.slug, "Post")
            self._ensure_exists(session, CategoryRow, post.category_id, "Category")
            self._ensure_exists(session, UserRow, post.user_id, "User")
            row = PostRow(created_at=now, updated_at=now, **dataclasses.asdict(post))
            session.add(row)
            self._commit(session, "post")
            session.refresh(row)
            return self._to_post(row)

    def update_post(
        self, post_id: int, changes: Mapping[str, Any]
    ) -> Optional[PostRecord]:
        changes = check_fields(changes, POST_FIELDS, "post")
        with self.Session() as session:
            row = session.get(PostRow, post_id)
            if not row:
                return None
            if "slug" in changes:
                self._ensure_unique(session, PostRow.slug, changes["slug"], "Post", post_id)
            if "category_id" in changes:
                self._ensure_exists(session, CategoryRow, changes["category_id"], "Category")
            if "user_id" in changes:
                self._ensure_exists(session, UserRow, changes["user_id"], "User")
            for key, value in changes.items():
                setattr(row, key, value)
            row.updated_at = utcnow()
            self._commit(session, "post")
            return self._to_post(row)

    def delete_post(self, post_id: int) -> bool:
        with self.Session() as session:
            if session.get(PostRow, post_id) is None:
                return False
            links = session.execute(
                delete(PostTagRow).where(PostTagRow.post_id == post_id)
            ).rowcount
            session.execute(
                update(CommentRow)
                .where(CommentRow.post_id == post_id)
                .values(parent_id=None)
            )
            comments = session.execute(
                delete(CommentRow).where(CommentRow.post_id == post_id)
            ).rowcount
            session.execute(delete(PostRow).where(PostRow.id == post_id))
            self._commit(session, "post")
        logger.info(
            "Deleted post %s with %d comments and %d tag links", post_id, comments, links
        )
        return True

    # -- categories ---------------------------------------------------------

    def get_all_categories(self) -> list[CategoryRecord]:
        with self.Session() as session:
            rows = session.execute(select(CategoryRow).order_by(CategoryRow.id)).scalars()
            return [self._to_category(row) for row in rows]

    def get_category_by_id(self, category_id: int) -> Optional[CategoryRecord]:
        with self.Session() as session:
            row = session.get(CategoryRow, category_id)
            return self._to_category(row) if row else None

    def get_category_by_slug(self, slug: str) -> Optional[CategoryRecord]:
        with self.Session() as session:
            row = session.execute(
                select(CategoryRow).where(CategoryRow.slug == slug)
            ).scalar_one_or_none()
            return self._to_category(row) if row else None

    def create_category(self, category: NewCategory) -> CategoryRecord:
        with self.Session() as session:
            self._ensure_unique(session, CategoryRow.name, category.name, "Category")
            self._ensure_unique(session, CategoryRow.slug, category.slug, "Category")
            row = CategoryRow(**dataclasses.asdict(category))
            session.add(row)
            self._commit(session, "category")
            session.refresh(row)
            return self._to_category(row)

    def update_category(
        self, category_id: int, changes: Mapping[str, Any]
    ) -> Optional[CategoryRecord]:
        changes = check_fields(changes, CATEGORY_FIELDS, "category")
        with self.Session() as session:
            row = session.get(CategoryRow, category_id)
            if not row:
                return None
            for column in (CategoryRow.name, CategoryRow.slug):
                if column.key in changes:
                    self._ensure_unique(
                        session, column, changes[column.key], "Category", category_id
                    )
            for key, value in changes.items():
                setattr(row, key, value)
            self._commit(session, "category")
            return self._to_category(row)

    def delete_category(self, category_id: int) -> bool:
        with self.Session() as session:
            if session.get(CategoryRow, category_id) is None:
                return False
            session.execute(
                update(PostRow)
                .where(PostRow.category_id == category_id)
                .values(category_id=None)
            )
            session.execute(delete(CategoryRow).where(CategoryRow.id == category_id))
            self._commit(session, "category")
            return True

    # -- tags ---------------------------------------------------------------

    def get_all_tags(self) -> list[TagRecord]:
        with self.Session() as session:
            rows = session.execute(select(TagRow).order_by(TagRow.id)).scalars()
            return [self._to_tag(row) for row in rows]

    def get_tag_by_id(self, tag_id: int) -> Optional[TagRecord]:
        with self.Session() as session:
            row = session.get(TagRow, tag_id)
            return self._to_tag(row) if row else None

    def get_tag_by_slug(self, slug: str) -> Optional[TagRecord]:
        with self.Session() as session:
            row = session.execute(
                select(TagRow).where(TagRow.slug == slug)
            ).scalar_one_or_none()
            return self._to_tag(row) if row else None

    def create_tag(self, tag: NewTag) -> TagRecord:
        with self.Session() as session:
            self._ensure_unique(session, TagRow.name, tag.name, "Tag")
            self._ensure_unique(session, TagRow.slug, tag.slug, "Tag")
            row = TagRow(**dataclasses.asdict(tag))
            session.add(row)
            self._commit(session, "tag")
            session.refresh(row)
            return self._to_tag(row)

    def update_tag(self, tag_id: int, changes: Mapping[str, Any]) -> Optional[TagRecord]:
        changes = check_fields(changes, TAG_FIELDS, "tag")
        with self.Session() as session:
            row = session.get(TagRow, tag_id)
            if not row:
                return None
            for column in (TagRow.name, TagRow.slug):
                if column.key in changes:
                    self._ensure_unique(session, column, changes[column.key], "Tag", tag_id)
            for key, value in changes.items():
                setattr(row, key, value)
            self._commit(session, "tag")
            return self._to_tag(row)

    def delete_tag(self, tag_id: int) -> bool:
        with self.Session() as session:
            if session.get(TagRow, tag_id) is None:
                return False
            session.execute(delete(PostTagRow).where(PostTagRow.tag_id == tag_id))
            session.execute(delete(TagRow).where(TagRow.id == tag_id))
            self._commit(session, "tag")
            return True

    # -- post-tag links -----------------------------------------------------

    def _tags_for_post(self, session: Session, post_id: int) -> list[TagRecord]:
        rows = session.execute(
            select(TagRow)
            .join(PostTagRow, PostTagRow.tag_id == TagRow.id)
            .where(PostTagRow.post_id == post_id)
            .order_by(TagRow.id)
        ).scalars()
        return [self._to_tag(row) for row in rows]

    def get_tags_by_post_id(self, post_id: int) -> list[TagRecord]:
        with self.Session() as session:
            return self._tags_for_post(session, post_id)

    @staticmethod
    def _find_link(session: Session, post_id: int, tag_id: int) -> Optional["PostTagRow"]:
        return session.execute(
            select(PostTagRow).where(
                PostTagRow.post_id == post_id, PostTagRow.tag_id == tag_id
            )
        ).scalar_one_or_none()

    def add_tag_to_post(self, post_id: int, tag_id: int) -> PostTagRecord:
        with self.Session() as session:
            self._ensure_exists(session, PostRow, post_id, "Post")
            self._ensure_exists(session, TagRow, tag_id, "Tag")
            link = self._find_link(session, post_id, tag_id)
            if link is None:
                link = PostTagRow(post_id=post_id, tag_id=tag_id)
                session.add(link)
                self._commit(session, "post tag")
                session.refresh(link)
            return PostTagRecord(id=link.id, post_id=link.post_id, tag_id=link.tag_id)

    def remove_tag_from_post(self, post_id: int, tag_id: int) -> bool:
        with self.Session() as session:
            removed = session.execute(
                delete(PostTagRow).where(
                    PostTagRow.post_id == post_id, PostTagRow.tag_id == tag_id
                )
            ).rowcount
            self._commit(session, "post tag")
            return bool(removed)

    def set_post_tags(self, post_id: int, tag_ids: Iterable[int]) -> list[TagRecord]:
        wanted = set(tag_ids)
        with self.Session() as session:
            self._ensure_exists(session, PostRow, post_id, "Post")
            found = set()
            if wanted:
                found = set(
                    session.execute(select(TagRow.id).where(TagRow.id.in_(wanted))).scalars()
                )
            missing = sorted(wanted - found)
            if missing:
                raise InvalidReferenceError(f"Tag(s) {missing} do not exist")
            current = set(
                session.execute(
                    select(PostTagRow.tag_id).where(PostTagRow.post_id == post_id)
                ).scalars()
            )
            stale = current - wanted
            if stale:
                session.execute(
                    delete(PostTagRow).where(
                        PostTagRow.post_id == post_id, PostTagRow.tag_id.in_(stale)
                    )
                )
            for tag_id in sorted(wanted - current):
                session.add(PostTagRow(post_id=post_id, tag_id=tag_id))
            self._commit(session, "post tags")
            return self._tags_for_post(session, post_id)

    # -- comments -----------------------------------------------------------

    def get_comment_by_id(self, comment_id: int) -> Optional[CommentRecord]:
        with self.Session() as session:
            row = session.get(CommentRow, comment_id)
            return self._to_comment(row) if row else None

    def get_comments_by_post_id(self, post_id: int) -> list[CommentRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(CommentRow)
                .where(CommentRow.post_id == post_id)
                .order_by(CommentRow.created_at.asc(), CommentRow.id.asc())
            ).scalars()
            return [self._to_comment(row) for row in rows]

    def create_comment(self, comment: NewComment) -> CommentRecord:
        with self.Session() as session:
            self._ensure_exists(session, PostRow, comment.post_id, "Post")
            self._ensure_exists(session, UserRow, comment.user_id, "User")
            self._check_parent(session, comment.post_id, comment.parent_id)
            row = CommentRow(created_at=utcnow(), **dataclasses.asdict(comment))
            session.add(row)
            self._commit(session, "comment")
            session.refresh(row)
            return self._to_comment(row)

    def update_comment(
        self, comment_id: int, changes: Mapping[str, Any]
    ) -> Optional[CommentRecord]:
        changes = check_fields(changes, COMMENT_FIELDS, "comment")
        with self.Session() as session:
            row = session.get(CommentRow, comment_id)
            if not row:
                return None
            if "parent_id" in changes:
                self._check_parent(session, row.post_id, changes["parent_id"], comment_id)
            for key, value in changes.items():
                setattr(row, key, value)
            self._commit(session, "comment")
            return self._to_comment(row)

    def delete_comment(self, comment_id: int) -> bool:
        with self.Session() as session:
            if session.get(CommentRow, comment_id) is None:
                return False
            session.execute(
                update(CommentRow)
                .where(CommentRow.parent_id == comment_id)
                .values(parent_id=None)
            )
            session.execute(delete(CommentRow).where(CommentRow.id == comment_id))
            self._commit(session, "comment")
            return True

    # -- media --------------------------------------------------------------

    def get_all_media(self) -> list[MediaRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(MediaRow).order_by(MediaRow.uploaded_at.desc(), MediaRow.id.desc())
            ).scalars()
            return [self._to_media(row) for row in rows]

    def get_media_by_id(self, media_id: int) -> Optional[MediaRecord]:
        with self.Session() as session:
            row = session.get(MediaRow, media_id)
            return self._to_media(row) if row else None

    def create_media(self, media: NewMedia) -> MediaRecord:
        with self.Session() as session:
            self._ensure_exists(session, UserRow, media.user_id, "User")
            row = MediaRow(uploaded_at=utcnow(), **dataclasses.asdict(media))
            session.add(row)
            self._commit(session, "media")
            session.refresh(row)
            return self._to_media(row)

    def delete_media(self, media_id: int) -> bool:
        with self.Session() as session:
            removed = session.execute(delete(MediaRow).where(MediaRow.id == media_id)).rowcount
            self._commit(session, "media")
            return bool(removed)

    # -- users --------------------------------------------------------------

    def get_user_by_id(self, user_id: int) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.get(UserRow, user_id)
            return self._to_user(row) if row else None

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.execute(
                select(UserRow).where(UserRow.username == username)
            ).scalar_one_or_none()
            return self._to_user(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.execute(
                select(UserRow).where(UserRow.email == email)
            ).scalar_one_or_none()
            return self._to_user(row) if row else None

    def create_user(self, user: NewUser) -> UserRecord:
        now = utcnow()
        with self.Session() as session:
            self._ensure_unique(session, UserRow.username, user.username, "User")
            self._ensure_unique(session, UserRow.email, user.email, "User")
            row = UserRow(created_at=now, updated_at=now, **dataclasses.asdict(user))
            session.add(row)
            self._commit(session, "user")
            session.refresh(row)
            return self._to_user(row)

    def update_user(
        self, user_id: int, changes: Mapping[str, Any]
    ) -> Optional[UserRecord]:
        changes = check_fields(changes, USER_FIELDS, "user")
        with self.Session() as session:
            row = session.get(UserRow, user_id)
            if not row:
                return None
            for column in (UserRow.username, UserRow.email):
                if column.key in changes:
                    self._ensure_unique(session, column, changes[column.key], "User", user_id)
            for key, value in changes.items():
                setattr(row, key, value)
            row.updated_at = utcnow()
            self._commit(session, "user")
            return self._to_user(row)

    def delete_user(self, user_id: int) -> bool:
        with self.Session() as session:
            if session.get(UserRow, user_id) is None:
                return False
            for row_cls in (PostRow, CommentRow, MediaRow):
                session.execute(
                    update(row_cls).where(row_cls.user_id == user_id).values(user_id=None)
                )
            session.execute(delete(UserRow).where(UserRow.id == user_id))
            self._commit(session, "user")
            return True


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, nullable=False, unique=True)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    display_name = Column(String, nullable=True)
    profile_image = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    role = Column(String, nullable=False, default="user")
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class CategoryRow(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)
    slug = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)


class PostRow(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True)
    content = Column(Text, nullable=False)
    excerpt = Column(Text, nullable=True)
    cover_image = Column(String, nullable=True)
    author = Column(String, nullable=False)
    published = Column(Boolean, nullable=False, default=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class TagRow(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)
    slug = Column(String, nullable=False, unique=True)


class PostTagRow(Base):
    __tablename__ = "post_tags"
    __table_args__ = (UniqueConstraint("post_id", "tag_id", name="uq_post_tags_pair"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    tag_id = Column(Integer, ForeignKey("tags.id"), nullable=False, index=True)


class CommentRow(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content = Column(Text, nullable=False)
    author_name = Column(String, nullable=False)
    author_email = Column(String, nullable=False)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    parent_id = Column(Integer, ForeignKey("comments.id"), nullable=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class MediaRow(Base):
    __tablename__ = "media"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String, nullable=False)
    file_path = Column(String, nullable=False)
    file_type = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    uploaded_at = Column(DateTime(timezone=True), nullable=False)
