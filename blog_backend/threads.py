"""
Comment threading helpers.

Comments are stored flat with an optional ``parent_id``; these helpers turn
a post's comments into reply trees and guard against reply cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from blog_backend.db import CommentRecord


@dataclass
class CommentNode:
    comment: CommentRecord
    replies: list["CommentNode"] = field(default_factory=list)

    def as_dict(self) -> dict:
        data = self.comment.as_dict()
        data["replies"] = [reply.as_dict() for reply in self.replies]
        return data


def build_comment_tree(comments: Iterable[CommentRecord]) -> list[CommentNode]:
    """
    Group a flat comment list into top-level nodes with nested replies.

    Input order is kept at every level. A comment whose parent is missing from
    the input (deleted, or on another page) is promoted to the top level.
    """
    nodes = [CommentNode(comment) for comment in comments]
    by_id = {node.comment.id: node for node in nodes}
    roots: list[CommentNode] = []
    for node in nodes:
        parent_id = node.comment.parent_id
        parent = by_id.get(parent_id) if parent_id is not None else None
        if parent is None or parent is node:
            roots.append(node)
        else:
            parent.replies.append(node)
    return roots


def count_replies(node: CommentNode) -> int:
    return sum(1 + count_replies(reply) for reply in node.replies)


def creates_cycle(
    comment_id: int,
    new_parent_id: Optional[int],
    parent_of: Callable[[int], Optional[int]],
) -> bool:
    """Return True if re-parenting ``comment_id`` under ``new_parent_id`` loops.

    ``parent_of`` maps a comment id to its current parent id (or None).
    """
    seen: set[int] = set()
    cursor = new_parent_id
    while cursor is not None:
        if cursor == comment_id:
            return True
        if cursor in seen:
            # Existing data already loops; refuse to extend it.
            return True
        seen.add(cursor)
        cursor = parent_of(cursor)
    return False
