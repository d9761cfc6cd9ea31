import logging

import pytest

from pttboard.database import connection
from pttboard.errors import Conflict, InvalidInput, NotFound, StorageUnavailable
from pttboard.models import boards as board_db
from pttboard.models import bookmarks as bookmark_db
from pttboard.models import comments as comment_db
from pttboard.models import posts as post_db
from pttboard.models import users as user_db


# ── users ─────────────────────────────────────────────────
async def test_upsert_user_creates_then_updates(storage):
    created = await user_db.upsert_user(storage, "u-1", name="First", email="a@example.com")
    assert created["role"] == "user"

    updated = await user_db.upsert_user(storage, "u-1", name="Renamed")
    assert updated["id"] == created["id"]
    assert updated["name"] == "Renamed"
    # None 으로 넘긴 필드는 유지
    assert updated["email"] == "a@example.com"


async def test_upsert_user_promotes_owner(storage):
    owner = await user_db.upsert_user(storage, "owner-id", owner_open_id="owner-id")
    assert owner["role"] == "admin"


async def test_upsert_user_requires_open_id(storage):
    with pytest.raises(ValueError):
        await user_db.upsert_user(storage, "")


async def test_get_authors_exposes_public_fields_only(storage, alice, bob):
    authors = await user_db.get_authors(storage, [alice["id"], bob["id"], None])
    assert set(authors) == {alice["id"], bob["id"]}
    assert authors[alice["id"]] == {"id": alice["id"], "name": "Alice", "role": "user"}


async def test_update_user_role_and_delete(storage, alice):
    assert await user_db.update_user_role(storage, alice["id"], "admin") is True
    assert (await user_db.get_user_by_id(storage, alice["id"]))["role"] == "admin"
    assert await user_db.update_user_role(storage, 9999, "admin") is False

    with pytest.raises(ValueError):
        await user_db.update_user_role(storage, alice["id"], "superuser")

    assert await user_db.delete_user(storage, alice["id"]) is True
    assert await user_db.get_user_by_id(storage, alice["id"]) is None
    assert await user_db.delete_user(storage, alice["id"]) is False


# ── boards ────────────────────────────────────────────────
async def test_create_board_rejects_duplicate_name(storage, board, bob):
    with pytest.raises(Conflict):
        await board_db.create_board(
            storage, name="Gossiping", display_name="dup", category="x", moderator_id=bob["id"]
        )


async def test_search_boards_is_case_sensitive(storage, alice):
    await board_db.create_board(storage, name="movie", display_name="Movie", category="a", moderator_id=alice["id"])
    await board_db.create_board(storage, name="movie2", display_name="movie talk", category="a", moderator_id=alice["id"])

    found = await board_db.search_boards(storage, "Movie")
    assert [b["name"] for b in found] == ["movie"]


async def test_search_boards_caps_results(storage, alice):
    for i in range(25):
        await board_db.create_board(
            storage, name=f"tech{i}", display_name=f"Tech {i}", category="tech", moderator_id=alice["id"]
        )
    found = await board_db.search_boards(storage, "Tech")
    assert len(found) == board_db.SEARCH_LIMIT == 20


async def test_search_boards_treats_wildcards_literally(storage, alice):
    await board_db.create_board(storage, name="pct", display_name="100% Real", category="a", moderator_id=alice["id"])
    await board_db.create_board(storage, name="plain", display_name="1000 Real", category="a", moderator_id=alice["id"])
    found = await board_db.search_boards(storage, "0%")
    assert [b["name"] for b in found] == ["pct"]


async def test_user_boards_and_moderator_update(storage, board, alice, bob):
    assert [b["id"] for b in await board_db.get_user_boards(storage, alice["id"])] == [board["id"]]

    await board_db.update_board_moderator(storage, board["id"], bob["id"])
    assert await board_db.get_user_boards(storage, alice["id"]) == []
    assert (await board_db.get_board_by_name(storage, "Gossiping"))["moderator_id"] == bob["id"]


# ── posts ─────────────────────────────────────────────────
async def test_create_post_starts_with_zero_counts(storage, post, board, alice):
    fetched = await post_db.get_post_by_id(storage, post["id"])
    assert fetched["title"] == "first post"
    assert fetched["board_id"] == board["id"]
    assert fetched["author_id"] == alice["id"]
    assert (fetched["comment_count"], fetched["push_count"], fetched["booh_count"]) == (0, 0, 0)
    assert not fetched["is_pinned"]


async def test_pinned_posts_listed_first(storage, board, alice):
    pinned = await post_db.create_post(storage, board["id"], "rules", "read me", alice["id"], is_pinned=True)
    older = await post_db.create_post(storage, board["id"], "older", "a", alice["id"])
    newer = await post_db.create_post(storage, board["id"], "newer", "b", alice["id"])

    listed = await post_db.list_posts_by_board(storage, board["id"])
    assert [p["id"] for p in listed] == [pinned["id"], newer["id"], older["id"]]

    page = await post_db.list_posts_by_board(storage, board["id"], limit=1, offset=1)
    assert [p["id"] for p in page] == [newer["id"]]


async def test_update_post_changes_only_given_fields(storage, post):
    updated = await post_db.update_post(storage, post["id"], title="edited")
    assert updated["title"] == "edited"
    assert updated["content"] == "hello"


async def test_search_posts_by_title(storage, board, alice, post):
    await post_db.create_post(storage, board["id"], "another topic", "x", alice["id"])
    found = await post_db.search_posts(storage, "first")
    assert [p["id"] for p in found] == [post["id"]]


async def test_delete_post_removes_comments_and_bookmarks(storage, post, alice, bob):
    comment = await comment_db.create_comment(storage, post["id"], "推", "push", bob["id"])
    await comment_db.create_comment_reaction(storage, comment["id"], alice["id"], "like")
    await bookmark_db.create_bookmark(storage, bob["id"], post["id"])

    await post_db.delete_post(storage, post["id"])

    assert await post_db.get_post_by_id(storage, post["id"]) is None
    assert await comment_db.get_comments_by_post(storage, post["id"]) == []
    assert await bookmark_db.is_post_bookmarked(storage, bob["id"], post["id"]) is False


# ── comments ──────────────────────────────────────────────
async def test_comment_counts_follow_comments(storage, post, alice, bob):
    await comment_db.create_comment(storage, post["id"], "good", "push", alice["id"])
    await comment_db.create_comment(storage, post["id"], "great", "push", bob["id"])
    boo = await comment_db.create_comment(storage, post["id"], "bad", "boo", bob["id"])
    await comment_db.create_comment(storage, post["id"], "meh", "neutral", alice["id"])

    fetched = await post_db.get_post_by_id(storage, post["id"])
    assert (fetched["comment_count"], fetched["push_count"], fetched["booh_count"]) == (4, 2, 1)

    await comment_db.delete_comment(storage, boo["id"])
    fetched = await post_db.get_post_by_id(storage, post["id"])
    assert (fetched["comment_count"], fetched["push_count"], fetched["booh_count"]) == (3, 2, 0)


async def test_comments_listed_oldest_first(storage, post, alice):
    first = await comment_db.create_comment(storage, post["id"], "1", "neutral", alice["id"])
    second = await comment_db.create_comment(storage, post["id"], "2", "neutral", alice["id"])
    listed = await comment_db.get_comments_by_post(storage, post["id"])
    assert [c["id"] for c in listed] == [first["id"], second["id"]]


async def test_create_comment_on_missing_post(storage, alice):
    with pytest.raises(NotFound):
        await comment_db.create_comment(storage, 12345, "?", "push", alice["id"])


async def test_recount_is_idempotent(storage, post, alice):
    await comment_db.create_comment(storage, post["id"], "x", "boo", alice["id"])
    db = await storage.require()
    first = await comment_db.recount_post_comments(db, post["id"])
    second = await comment_db.recount_post_comments(db, post["id"])
    assert first == second == {"comment_count": 1, "push_count": 0, "booh_count": 1}


async def test_update_comment_marks_edited(storage, post, alice):
    comment = await comment_db.create_comment(storage, post["id"], "typo", "neutral", alice["id"])
    assert not comment["is_edited"]
    updated = await comment_db.update_comment(storage, comment["id"], "fixed")
    assert updated["content"] == "fixed"
    assert updated["is_edited"]


# ── bookmarks ─────────────────────────────────────────────
async def test_bookmark_lifecycle(storage, post, bob):
    await bookmark_db.create_bookmark(storage, bob["id"], post["id"])
    assert await bookmark_db.is_post_bookmarked(storage, bob["id"], post["id"]) is True

    with pytest.raises(Conflict):
        await bookmark_db.create_bookmark(storage, bob["id"], post["id"])

    await bookmark_db.delete_bookmark(storage, bob["id"], post["id"])
    assert await bookmark_db.is_post_bookmarked(storage, bob["id"], post["id"]) is False

    # 지운 뒤에는 다시 추가 가능
    await bookmark_db.create_bookmark(storage, bob["id"], post["id"])
    listed = await bookmark_db.get_user_bookmarks(storage, bob["id"])
    assert [p["id"] for p in listed] == [post["id"]]


async def test_bookmarks_newest_first(storage, board, alice, bob):
    p1 = await post_db.create_post(storage, board["id"], "one", "1", alice["id"])
    p2 = await post_db.create_post(storage, board["id"], "two", "2", alice["id"])
    await bookmark_db.create_bookmark(storage, bob["id"], p2["id"])
    await bookmark_db.create_bookmark(storage, bob["id"], p1["id"])

    listed = await bookmark_db.get_user_bookmarks(storage, bob["id"])
    assert [p["id"] for p in listed] == [p1["id"], p2["id"]]


# ── 저장소 없음 ───────────────────────────────────────────
async def test_reads_degrade_without_storage(offline_storage, caplog):
    s = offline_storage
    reads = [
        (board_db.list_boards(s), []),
        (board_db.search_boards(s, "x"), []),
        (board_db.get_board_by_name(s, "x"), None),
        (board_db.get_board_by_id(s, 1), None),
        (board_db.get_user_boards(s, 1), []),
        (post_db.list_posts_by_board(s, 1), []),
        (post_db.get_post_by_id(s, 1), None),
        (post_db.search_posts(s, "x"), []),
        (post_db.get_all_posts(s), []),
        (comment_db.get_comments_by_post(s, 1), []),
        (comment_db.get_comment_by_id(s, 1), None),
        (bookmark_db.get_user_bookmarks(s, 1), []),
        (bookmark_db.is_post_bookmarked(s, 1, 1), False),
        (user_db.get_user_by_open_id(s, "x"), None),
        (user_db.get_user_by_id(s, 1), None),
        (user_db.get_authors(s, [1]), {}),
        (user_db.get_all_users(s), []),
    ]
    with caplog.at_level(logging.WARNING):
        for coro, expected in reads:
            assert await coro == expected
    warnings = [r for r in caplog.records if "database not available" in r.getMessage()]
    assert len(warnings) == len(reads)


async def test_writes_fail_without_storage(offline_storage):
    with pytest.raises(StorageUnavailable):
        await post_db.create_post(offline_storage, 1, "t", "c", 1)
    with pytest.raises(StorageUnavailable):
        await comment_db.create_comment(offline_storage, 1, "c", "push", 1)
    with pytest.raises(StorageUnavailable):
        await bookmark_db.create_bookmark(offline_storage, 1, 1)
    with pytest.raises(StorageUnavailable):
        await user_db.upsert_user(offline_storage, "someone")


# ── 부모 행 확인 ──────────────────────────────────────────
async def test_create_post_on_missing_board(storage, alice):
    with pytest.raises(NotFound):
        await post_db.create_post(storage, 999, "t", "c", alice["id"])
    assert await post_db.get_all_posts(storage) == []


async def test_react_to_missing_comment(storage, alice):
    with pytest.raises(NotFound):
        await comment_db.create_comment_reaction(storage, 999, alice["id"], "like")


async def test_bookmark_missing_post(storage, bob):
    with pytest.raises(NotFound):
        await bookmark_db.create_bookmark(storage, bob["id"], 999)
    assert await bookmark_db.get_user_bookmarks(storage, bob["id"]) == []


async def test_unknown_comment_type_and_reaction(storage, post, alice):
    with pytest.raises(InvalidInput):
        await comment_db.create_comment(storage, post["id"], "x", "like", alice["id"])
    comment = await comment_db.create_comment(storage, post["id"], "x", "push", alice["id"])
    with pytest.raises(InvalidInput):
        await comment_db.create_comment_reaction(storage, comment["id"], alice["id"], "love")


# ── 검색 ──────────────────────────────────────────────────
async def test_search_posts_treats_wildcards_literally(storage, board, alice):
    sale = await post_db.create_post(storage, board["id"], "50% off", "x", alice["id"])
    await post_db.create_post(storage, board["id"], "500 off", "x", alice["id"])
    under = await post_db.create_post(storage, board["id"], "snake_case", "x", alice["id"])
    await post_db.create_post(storage, board["id"], "snakeXcase", "x", alice["id"])

    assert [p["id"] for p in await post_db.search_posts(storage, "0%")] == [sale["id"]]
    assert [p["id"] for p in await post_db.search_posts(storage, "e_c")] == [under["id"]]


async def test_search_boards_underscore_is_literal(storage, alice):
    await board_db.create_board(storage, name="u1", display_name="a_b", category="a", moderator_id=alice["id"])
    await board_db.create_board(storage, name="u2", display_name="axb", category="a", moderator_id=alice["id"])
    assert [b["name"] for b in await board_db.search_boards(storage, "a_b")] == ["u1"]


# ── Storage ───────────────────────────────────────────────
async def test_failed_table_setup_disconnects(tmp_path, monkeypatch):
    opened = []

    class TrackingDatabase(connection.Database):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            opened.append(self)

    async def broken_create_tables(database):
        raise RuntimeError("disk full")

    monkeypatch.setattr(connection, "Database", TrackingDatabase)
    monkeypatch.setattr(connection, "create_tables", broken_create_tables)

    storage = connection.Storage(f"sqlite+aiosqlite:///{tmp_path / 'broken.db'}")
    assert await storage.get() is None
    assert await storage.get() is None

    assert len(opened) == 2
    assert not any(db.is_connected for db in opened)
    with pytest.raises(StorageUnavailable):
        await storage.require()
