# seed_pinned_post.py
# 공지 게시판(announce)과 고정 사용 안내 글 생성. 이미 있으면 건너뜀.
import asyncio
import logging
import sys

from sqlalchemy import select

from pttboard.config import settings, configure_logging
from pttboard.database.connection import Storage
from pttboard.models.boards import get_board_by_name, create_board
from pttboard.models.posts import posts, create_post
from pttboard.models.users import upsert_user

logger = logging.getLogger("seed")

GUIDE_TITLE = "【使用說明】歡迎來到 PTT Clone"
GUIDE_CONTENT = """歡迎使用 PTT Clone 論壇！

【基本功能】
1. 看板列表：首頁顯示所有可用看板，點擊進入查看貼文
2. 發表貼文：登入後可在各看板發表新貼文
3. 推文回覆：可以對貼文進行推（讚）、噓（踩）或中立回覆
4. 編輯刪除：可編輯或刪除自己發表的貼文和推文
5. 收藏功能：登入後可收藏喜歡的貼文，在「我的收藏」查看

【社群規則】
- 尊重他人意見，禁止人身攻擊
- 不得發表違法或不當內容
- 管理員有權刪除違規貼文和推文

祝您使用愉快！"""


async def seed(storage: Storage, owner_open_id: str) -> None:
    owner = await upsert_user(storage, owner_open_id, name="admin", role="admin")

    board = await get_board_by_name(storage, "announce")
    if board is None:
        board = await create_board(
            storage,
            name="announce",
            display_name="公告",
            category="系統",
            description="系統公告和使用說明",
            moderator_id=owner["id"],
        )

    db = await storage.require()
    existing = await db.fetch_one(select(posts.c.id).where(posts.c.title == GUIDE_TITLE).limit(1))
    if existing:
        logger.info("Guide post already exists (id=%s)", existing["id"])
        return

    post = await create_post(
        storage,
        board_id=board["id"],
        title=GUIDE_TITLE,
        content=GUIDE_CONTENT,
        author_id=owner["id"],
        is_pinned=True,
    )
    logger.info("Pinned guide post created (id=%s)", post["id"])


async def main() -> int:
    configure_logging(settings.LOG_LEVEL)
    if not settings.DATABASE_URL:
        logger.error("DATABASE_URL not set")
        return 1
    storage = Storage(settings.DATABASE_URL)
    try:
        await seed(storage, settings.OWNER_OPEN_ID or "owner")
    finally:
        await storage.close()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
