# pttboard/models/bookmarks.py
import logging
from datetime import datetime, timezone
from typing import Dict, Any, List

from sqlalchemy import Table, Column, Integer, DateTime, select, insert, delete, and_

from pttboard.database.connection import metadata, Storage, row_to_dict
from pttboard.errors import Conflict, NotFound
from pttboard.models.posts import posts

logger = logging.getLogger(__name__)

bookmarks = Table(
    "bookmarks",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, nullable=False),
    Column("post_id", Integer, nullable=False),
    Column("created_at", DateTime),
)


def _pair(user_id: int, post_id: int):
    return and_(bookmarks.c.user_id == user_id, bookmarks.c.post_id == post_id)


async def create_bookmark(storage: Storage, user_id: int, post_id: int) -> Dict[str, Any]:
    """(user_id, post_id) 는 하나만. 이미 있으면 Conflict, 게시글이 없으면 NotFound"""
    db = await storage.require()
    async with db.transaction():
        post = await db.fetch_one(select(posts.c.id).where(posts.c.id == post_id))
        if not post:
            raise NotFound("Post not found")
        existing = await db.fetch_one(select(bookmarks.c.id).where(_pair(user_id, post_id)).limit(1))
        if existing:
            raise Conflict("Already bookmarked")
        bookmark_id = await db.execute(
            insert(bookmarks).values(
                user_id=user_id, post_id=post_id, created_at=datetime.now(timezone.utc)
            )
        )
    row = await db.fetch_one(select(bookmarks).where(bookmarks.c.id == bookmark_id))
    return row_to_dict(row, bookmarks.c)


async def delete_bookmark(storage: Storage, user_id: int, post_id: int) -> None:
    db = await storage.require()
    await db.execute(delete(bookmarks).where(_pair(user_id, post_id)))


async def get_user_bookmarks(
    storage: Storage, user_id: int, limit: int = 20, offset: int = 0
) -> List[Dict[str, Any]]:
    """북마크한 게시글 목록 (최근 북마크순). 이미 지워진 게시글은 빠진다."""
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot list bookmarks: database not available")
        return []
    rows = await db.fetch_all(
        select(posts)
        .select_from(bookmarks.join(posts, posts.c.id == bookmarks.c.post_id))
        .where(bookmarks.c.user_id == user_id)
        .order_by(bookmarks.c.created_at.desc(), bookmarks.c.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return [row_to_dict(r, posts.c) for r in rows]


async def is_post_bookmarked(storage: Storage, user_id: int, post_id: int) -> bool:
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot check bookmark: database not available")
        return False
    row = await db.fetch_one(select(bookmarks.c.id).where(_pair(user_id, post_id)).limit(1))
    return row is not None
