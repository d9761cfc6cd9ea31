# pttboard/models/users.py
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List

from sqlalchemy import Table, Column, Integer, String, Text, DateTime, select, insert, update, delete

from pttboard.database.connection import metadata, Storage, row_to_dict

logger = logging.getLogger(__name__)

ROLES = ("user", "admin")

# =========================
# 유저 테이블 정의
# =========================
users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("open_id", String(64), unique=True, nullable=False),   # OAuth 쪽 식별자
    Column("name", Text),
    Column("email", String(320)),
    Column("login_method", String(64)),
    Column("role", String(16), default="user"),
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
    Column("last_signed_in", DateTime),
)

# 작성자로 노출하는 공개 필드
AUTHOR_COLUMNS = (users.c.id, users.c.name, users.c.role)


# =========================
# DB 헬퍼 함수
# =========================
async def get_user_by_open_id(storage: Storage, open_id: str) -> Optional[Dict[str, Any]]:
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot get user: database not available")
        return None
    row = await db.fetch_one(select(users).where(users.c.open_id == open_id).limit(1))
    return row_to_dict(row, users.c)


async def get_user_by_id(storage: Storage, user_id: int) -> Optional[Dict[str, Any]]:
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot get user: database not available")
        return None
    row = await db.fetch_one(select(users).where(users.c.id == user_id).limit(1))
    return row_to_dict(row, users.c)


async def get_authors(storage: Storage, user_ids) -> Dict[int, Dict[str, Any]]:
    """작성자 표시용 공개 정보만 {id: {...}} 로"""
    ids = {i for i in user_ids if i is not None}
    if not ids:
        return {}
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot get authors: database not available")
        return {}
    rows = await db.fetch_all(
        select(*AUTHOR_COLUMNS).where(users.c.id.in_(sorted(ids)))
    )
    return {r["id"]: row_to_dict(r, AUTHOR_COLUMNS) for r in rows}


async def upsert_user(
    storage: Storage,
    open_id: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
    login_method: Optional[str] = None,
    role: Optional[str] = None,
    last_signed_in: Optional[datetime] = None,
    owner_open_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    open_id 기준으로 사용자 생성 또는 갱신.
    - None 으로 넘긴 필드는 건드리지 않는다.
    - role 이 없고 owner_open_id 와 같으면 admin 으로 올린다.
    """
    if not open_id:
        raise ValueError("User openId is required for upsert")

    db = await storage.require()
    now = datetime.now(timezone.utc)

    values: Dict[str, Any] = {}
    for field, value in (("name", name), ("email", email), ("login_method", login_method)):
        if value is not None:
            values[field] = value
    if role is not None:
        values["role"] = role
    elif owner_open_id and open_id == owner_open_id:
        values["role"] = "admin"
    values["last_signed_in"] = last_signed_in or now

    async with db.transaction():
        existing = await db.fetch_one(select(users.c.id).where(users.c.open_id == open_id))
        if existing:
            await db.execute(
                update(users).where(users.c.id == existing["id"]).values(updated_at=now, **values)
            )
            user_id = existing["id"]
        else:
            values.setdefault("role", "user")
            user_id = await db.execute(
                insert(users).values(open_id=open_id, created_at=now, updated_at=now, **values)
            )
            logger.info("[Database] Created user %s (open_id=%s)", user_id, open_id)

    row = await db.fetch_one(select(users).where(users.c.id == user_id))
    return row_to_dict(row, users.c)


async def get_all_users(storage: Storage, limit: int = 50, offset: int = 0) -> List[Dict[str, Any]]:
    """관리자용 전체 사용자 목록 (최근 가입순)"""
    db = await storage.get()
    if db is None:
        logger.warning("[Database] Cannot list users: database not available")
        return []
    rows = await db.fetch_all(
        select(users)
        .order_by(users.c.created_at.desc(), users.c.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return [row_to_dict(r, users.c) for r in rows]


async def update_user_role(storage: Storage, user_id: int, role: str) -> bool:
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role}")
    db = await storage.require()
    row = await db.fetch_one(select(users.c.id).where(users.c.id == user_id))
    if not row:
        return False
    await db.execute(
        update(users)
        .where(users.c.id == user_id)
        .values(role=role, updated_at=datetime.now(timezone.utc))
    )
    logger.info("[Database] User %s role -> %s", user_id, role)
    return True


async def delete_user(storage: Storage, user_id: int) -> bool:
    """사용자 행만 삭제. 작성한 글/댓글은 남고 작성자는 null 로 보인다."""
    db = await storage.require()
    row = await db.fetch_one(select(users.c.id).where(users.c.id == user_id))
    if not row:
        return False
    await db.execute(delete(users).where(users.c.id == user_id))
    logger.info("[Database] Deleted user %s", user_id)
    return True
