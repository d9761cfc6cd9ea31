# pttboard/models/comments.py
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List

from sqlalchemy import select, insert, update, delete, func

from pttboard.database.connection import Storage, row_to_dict
from pttboard.errors import InvalidInput, NotFound
from pttboard.models.posts import COMMENT_TYPES, REACTIONS, posts, comments, comment_reactions

logger = logging.getLogger(__name__)


async def get_comments_by_post(storage: Storage, post_id: int) -> List[Dict[str, Any]]:
    """작성 순서대로"""
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot list comments: database not available")
        return []
    rows = await db.fetch_all(
        select(comments)
        .where(comments.c.post_id == post_id)
        .order_by(comments.c.created_at, comments.c.id)
    )
    return [row_to_dict(r, comments.c) for r in rows]


async def get_comment_by_id(storage: Storage, comment_id: int) -> Optional[Dict[str, Any]]:
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot get comment: database not available")
        return None
    row = await db.fetch_one(select(comments).where(comments.c.id == comment_id).limit(1))
    return row_to_dict(row, comments.c)


async def recount_post_comments(db, post_id: int) -> Dict[str, int]:
    """
    게시글의 comment/push/booh 카운트를 comments 테이블에서 다시 세서 덮어쓴다.
    증가/감소가 아니라 절대값이라 여러 번 돌려도 결과가 같다.
    """
    base = select(func.count()).select_from(comments).where(comments.c.post_id == post_id)
    counts = {
        "comment_count": await db.fetch_val(base) or 0,
        "push_count": await db.fetch_val(base.where(comments.c.type == "push")) or 0,
        "booh_count": await db.fetch_val(base.where(comments.c.type == "boo")) or 0,
    }
    await db.execute(update(posts).where(posts.c.id == post_id).values(**counts))
    return counts


async def create_comment(
    storage: Storage, post_id: int, content: str, comment_type: str, author_id: int
) -> Dict[str, Any]:
    if comment_type not in COMMENT_TYPES:
        raise InvalidInput(f"Unknown comment type: {comment_type}")
    db = await storage.require()

    post = await db.fetch_one(select(posts.c.id).where(posts.c.id == post_id))
    if not post:
        raise NotFound("Post not found")

    now = datetime.now(timezone.utc)
    # 댓글 등록 + 카운트 재계산을 한 트랜잭션으로
    async with db.transaction():
        comment_id = await db.execute(
            insert(comments).values(
                post_id=post_id,
                content=content,
                type=comment_type,
                author_id=author_id,
                is_edited=False,
                created_at=now,
                updated_at=now,
            )
        )
        counts = await recount_post_comments(db, post_id)

    logger.info("[Database] Comment %s (%s) on post %s, counts=%s", comment_id, comment_type, post_id, counts)
    row = await db.fetch_one(select(comments).where(comments.c.id == comment_id))
    return row_to_dict(row, comments.c)


async def update_comment(storage: Storage, comment_id: int, content: str) -> Optional[Dict[str, Any]]:
    db = await storage.require()
    await db.execute(
        update(comments)
        .where(comments.c.id == comment_id)
        .values(content=content, is_edited=True, updated_at=datetime.now(timezone.utc))
    )
    row = await db.fetch_one(select(comments).where(comments.c.id == comment_id))
    return row_to_dict(row, comments.c)


async def delete_comment(storage: Storage, comment_id: int) -> None:
    db = await storage.require()
    row = await db.fetch_one(select(comments.c.post_id).where(comments.c.id == comment_id))
    if not row:
        return
    async with db.transaction():
        await db.execute(delete(comment_reactions).where(comment_reactions.c.comment_id == comment_id))
        await db.execute(delete(comments).where(comments.c.id == comment_id))
        await recount_post_comments(db, row["post_id"])
    logger.info("[Database] Deleted comment %s", comment_id)


async def create_comment_reaction(
    storage: Storage, comment_id: int, user_id: int, reaction: str
) -> Dict[str, Any]:
    if reaction not in REACTIONS:
        raise InvalidInput(f"Unknown reaction: {reaction}")
    db = await storage.require()

    comment = await db.fetch_one(select(comments.c.id).where(comments.c.id == comment_id))
    if not comment:
        raise NotFound("Comment not found")

    reaction_id = await db.execute(
        insert(comment_reactions).values(
            comment_id=comment_id,
            user_id=user_id,
            reaction=reaction,
            created_at=datetime.now(timezone.utc),
        )
    )
    row = await db.fetch_one(select(comment_reactions).where(comment_reactions.c.id == reaction_id))
    return row_to_dict(row, comment_reactions.c)
