# pttboard/models/posts.py
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List

from sqlalchemy import (
    Table, Column, Integer, String, Text, DateTime, Boolean, select, insert, update, delete,
)

from pttboard.database.connection import metadata, Storage, row_to_dict
from pttboard.errors import InvalidInput, NotFound
from pttboard.models.boards import boards

logger = logging.getLogger(__name__)

COMMENT_TYPES = ("push", "boo", "neutral")
REACTIONS = ("like", "dislike")

posts = Table(
    "posts",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("board_id", Integer, nullable=False),
    Column("title", String(255), nullable=False),
    Column("content", Text, nullable=False),
    Column("author_id", Integer, nullable=False),
    # 아래 세 카운트는 comments 기준으로 다시 계산되는 캐시
    Column("comment_count", Integer, default=0),
    Column("push_count", Integer, default=0),
    Column("booh_count", Integer, default=0),
    Column("is_pinned", Boolean, default=False),    # 공지: 항상 목록 맨 위
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
)

# 댓글(推/噓/→) 테이블
comments = Table(
    "comments",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("post_id", Integer, nullable=False),
    Column("content", Text, nullable=False),
    Column("type", String(16), nullable=False),     # push | boo | neutral
    Column("author_id", Integer, nullable=False),
    Column("is_edited", Boolean, default=False),
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
)

comment_reactions = Table(
    "comment_reactions",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("comment_id", Integer, nullable=False),
    Column("user_id", Integer, nullable=False),
    Column("reaction", String(16), nullable=False),  # like | dislike
    Column("created_at", DateTime),
)


# =========================
# 게시글 조회
# =========================
async def list_posts_by_board(
    storage: Storage, board_id: int, limit: int = 20, offset: int = 0
) -> List[Dict[str, Any]]:
    """고정글 먼저, 그 다음 최신순"""
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot list posts: database not available")
        return []
    rows = await db.fetch_all(
        select(posts)
        .where(posts.c.board_id == board_id)
        .order_by(posts.c.is_pinned.desc(), posts.c.created_at.desc(), posts.c.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return [row_to_dict(r, posts.c) for r in rows]


async def get_post_by_id(storage: Storage, post_id: int) -> Optional[Dict[str, Any]]:
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot get post: database not available")
        return None
    row = await db.fetch_one(select(posts).where(posts.c.id == post_id).limit(1))
    return row_to_dict(row, posts.c)


def _like_pattern(query: str) -> str:
    # %, _ 는 문자 그대로 찾는다. 패턴 전체를 하나의 바인드 값으로 넘긴다
    escaped = query.replace("/", "//").replace("%", "/%").replace("_", "/_")
    return f"%{escaped}%"


async def search_posts(storage: Storage, query: str, limit: int = 20) -> List[Dict[str, Any]]:
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot search posts: database not available")
        return []
    rows = await db.fetch_all(
        select(posts)
        .where(posts.c.title.like(_like_pattern(query), escape="/"))
        .order_by(posts.c.created_at.desc(), posts.c.id.desc())
        .limit(limit)
    )
    return [row_to_dict(r, posts.c) for r in rows]


async def get_all_posts(storage: Storage, limit: int = 50, offset: int = 0) -> List[Dict[str, Any]]:
    """관리자용: 게시판 구분 없이 최신순"""
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot list all posts: database not available")
        return []
    rows = await db.fetch_all(
        select(posts)
        .order_by(posts.c.created_at.desc(), posts.c.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return [row_to_dict(r, posts.c) for r in rows]


# =========================
# 게시글 작성/수정/삭제
# =========================
async def create_post(
    storage: Storage,
    board_id: int,
    title: str,
    content: str,
    author_id: int,
    is_pinned: bool = False,
) -> Dict[str, Any]:
    db = await storage.require()

    board = await db.fetch_one(select(boards.c.id).where(boards.c.id == board_id))
    if not board:
        raise NotFound("Board not found")

    now = datetime.now(timezone.utc)
    # execute 가 돌려주는 PK 로 바로 다시 읽는다
    post_id = await db.execute(
        insert(posts).values(
            board_id=board_id,
            title=title,
            content=content,
            author_id=author_id,
            comment_count=0,
            push_count=0,
            booh_count=0,
            is_pinned=is_pinned,
            created_at=now,
            updated_at=now,
        )
    )
    logger.info("[Database] Created post %s on board %s by user %s", post_id, board_id, author_id)
    row = await db.fetch_one(select(posts).where(posts.c.id == post_id))
    return row_to_dict(row, posts.c)


async def update_post(
    storage: Storage,
    post_id: int,
    title: Optional[str] = None,
    content: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    values: Dict[str, Any] = {}
    if title is not None:
        values["title"] = title
    if content is not None:
        values["content"] = content
    if not values:
        raise InvalidInput("No fields to update")

    db = await storage.require()
    values["updated_at"] = datetime.now(timezone.utc)
    await db.execute(update(posts).where(posts.c.id == post_id).values(**values))
    row = await db.fetch_one(select(posts).where(posts.c.id == post_id))
    return row_to_dict(row, posts.c)


async def delete_post(storage: Storage, post_id: int) -> None:
    """댓글(과 그 반응), 북마크를 먼저 지우고 게시글 삭제"""
    from pttboard.models.bookmarks import bookmarks

    db = await storage.require()
    comment_ids = select(comments.c.id).where(comments.c.post_id == post_id)
    async with db.transaction():
        await db.execute(delete(comment_reactions).where(comment_reactions.c.comment_id.in_(comment_ids)))
        await db.execute(delete(comments).where(comments.c.post_id == post_id))
        await db.execute(delete(bookmarks).where(bookmarks.c.post_id == post_id))
        await db.execute(delete(posts).where(posts.c.id == post_id))
    logger.info("[Database] Deleted post %s", post_id)
