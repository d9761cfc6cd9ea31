# pttboard/models/boards.py
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List

from sqlalchemy import Table, Column, Integer, String, Text, DateTime, func, select, insert, update

from pttboard.database.connection import metadata, Storage, row_to_dict
from pttboard.errors import Conflict

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20

boards = Table(
    "boards",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(64), unique=True, nullable=False),   # URL 용 짧은 이름, 생성 후 변경 불가
    Column("display_name", String(128), nullable=False),
    Column("category", String(32), nullable=False),
    Column("description", Text),
    Column("popularity", Integer, default=0),
    Column("moderator_id", Integer),                           # 만든 사람
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
)


async def list_boards(storage: Storage) -> List[Dict[str, Any]]:
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot list boards: database not available")
        return []
    rows = await db.fetch_all(select(boards).order_by(boards.c.popularity.desc(), boards.c.id))
    return [row_to_dict(r, boards.c) for r in rows]


async def search_boards(storage: Storage, query: str) -> List[Dict[str, Any]]:
    """display_name 에 query 가 (대소문자 구분) 포함된 게시판, 최대 20개"""
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot search boards: database not available")
        return []
    # instr 는 대소문자를 구분하고 %, _ 를 와일드카드로 보지 않는다
    rows = await db.fetch_all(
        select(boards)
        .where(func.instr(boards.c.display_name, query) > 0)
        .order_by(boards.c.id)
        .limit(SEARCH_LIMIT)
    )
    return [row_to_dict(r, boards.c) for r in rows]


async def get_board_by_name(storage: Storage, name: str) -> Optional[Dict[str, Any]]:
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot get board: database not available")
        return None
    row = await db.fetch_one(select(boards).where(boards.c.name == name).limit(1))
    return row_to_dict(row, boards.c)


async def get_board_by_id(storage: Storage, board_id: int) -> Optional[Dict[str, Any]]:
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot get board: database not available")
        return None
    row = await db.fetch_one(select(boards).where(boards.c.id == board_id).limit(1))
    return row_to_dict(row, boards.c)


async def create_board(
    storage: Storage,
    name: str,
    display_name: str,
    category: str,
    moderator_id: int,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    db = await storage.require()
    now = datetime.now(timezone.utc)

    existing = await db.fetch_one(select(boards.c.id).where(boards.c.name == name))
    if existing:
        raise Conflict(f"Board '{name}' already exists")

    board_id = await db.execute(
        insert(boards).values(
            name=name,
            display_name=display_name,
            category=category,
            description=description or "",
            popularity=0,
            moderator_id=moderator_id,
            created_at=now,
            updated_at=now,
        )
    )
    logger.info("[Database] Created board %s (%s) by user %s", board_id, name, moderator_id)
    row = await db.fetch_one(select(boards).where(boards.c.id == board_id))
    return row_to_dict(row, boards.c)


async def update_board_moderator(storage: Storage, board_id: int, moderator_id: int) -> None:
    db = await storage.require()
    await db.execute(
        update(boards)
        .where(boards.c.id == board_id)
        .values(moderator_id=moderator_id, updated_at=datetime.now(timezone.utc))
    )


async def get_user_boards(storage: Storage, user_id: int) -> List[Dict[str, Any]]:
    """user_id 가 moderator 인 게시판 (최근 생성순)"""
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot list user boards: database not available")
        return []
    rows = await db.fetch_all(
        select(boards)
        .where(boards.c.moderator_id == user_id)
        .order_by(boards.c.created_at.desc(), boards.c.id.desc())
    )
    return [row_to_dict(r, boards.c) for r in rows]
