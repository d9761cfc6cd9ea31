from sqlalchemy import func, select

from pttboard.models.boards import get_board_by_name
from pttboard.models.posts import list_posts_by_board, posts
from pttboard.models.users import get_user_by_open_id
from seed_pinned_post import GUIDE_TITLE, seed


async def test_seed_creates_pinned_guide(storage):
    await seed(storage, "owner-open-id")

    owner = await get_user_by_open_id(storage, "owner-open-id")
    assert owner["role"] == "admin"

    board = await get_board_by_name(storage, "announce")
    assert board["moderator_id"] == owner["id"]

    listed = await list_posts_by_board(storage, board["id"])
    assert listed[0]["title"] == GUIDE_TITLE
    assert listed[0]["is_pinned"]


async def test_seed_is_idempotent(storage):
    await seed(storage, "owner-open-id")
    await seed(storage, "owner-open-id")

    db = await storage.require()
    count = await db.fetch_val(select(func.count()).select_from(posts).where(posts.c.title == GUIDE_TITLE))
    assert count == 1
