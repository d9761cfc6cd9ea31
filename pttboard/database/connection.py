# pttboard/database/connection.py
import asyncio
import logging
from typing import Any, Dict, Optional

from databases import Database
from sqlalchemy import MetaData

from pttboard.errors import StorageUnavailable

logger = logging.getLogger(__name__)

metadata = MetaData()


class Storage:
    """
    DB 핸들을 처음 쓸 때 연결하는 저장소.
    - url 이 없으면 연결하지 않고 get() 이 None 을 돌려준다(오프라인 모드).
    - 연결 실패 시에도 None, 다음 호출에서 다시 시도한다.
    """

    def __init__(self, url: Optional[str]):
        self.url = url
        self._database: Optional[Database] = None
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self.url)

    async def get(self) -> Optional[Database]:
        if self._database is not None or not self.url:
            return self._database
        async with self._lock:
            if self._database is None:
                database = Database(self.url)
                try:
                    await database.connect()
                    await create_tables(database)
                except Exception:
                    logger.warning("[Database] Failed to connect", exc_info=True)
                    # 연결은 됐는데 테이블 생성에서 실패한 경우
                    if database.is_connected:
                        await database.disconnect()
                    return None
                self._database = database
        return self._database

    async def require(self) -> Database:
        """쓰기 작업용. 저장소가 없으면 바로 실패."""
        database = await self.get()
        if database is None:
            raise StorageUnavailable("Database not available")
        return database

    async def close(self) -> None:
        if self._database is not None:
            await self._database.disconnect()
            self._database = None


async def create_tables(database: Database) -> None:
    # users
    await database.execute("""
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        open_id VARCHAR(64) NOT NULL UNIQUE,
        name TEXT,
        email VARCHAR(320),
        login_method VARCHAR(64),
        role VARCHAR(16) NOT NULL DEFAULT 'user' CHECK (role IN ('user', 'admin')),
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        last_signed_in DATETIME DEFAULT CURRENT_TIMESTAMP
    );
    """)

    # boards (만든 사람이 곧 moderator)
    await database.execute("""
    CREATE TABLE IF NOT EXISTS boards (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name VARCHAR(64) NOT NULL UNIQUE,
        display_name VARCHAR(128) NOT NULL,
        category VARCHAR(32) NOT NULL,
        description TEXT,
        popularity INTEGER NOT NULL DEFAULT 0,
        moderator_id INTEGER,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
    );
    """)

    # posts: comment/push/booh 카운트는 comments 에서 다시 계산되는 캐시
    await database.execute("""
    CREATE TABLE IF NOT EXISTS posts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        board_id INTEGER NOT NULL,
        title VARCHAR(255) NOT NULL,
        content TEXT NOT NULL,
        author_id INTEGER NOT NULL,
        comment_count INTEGER NOT NULL DEFAULT 0,
        push_count INTEGER NOT NULL DEFAULT 0,
        booh_count INTEGER NOT NULL DEFAULT 0,
        is_pinned INTEGER NOT NULL DEFAULT 0,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
    );
    """)

    await database.execute("""
    CREATE TABLE IF NOT EXISTS comments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        post_id INTEGER NOT NULL,
        content TEXT NOT NULL,
        type VARCHAR(16) NOT NULL CHECK (type IN ('push', 'boo', 'neutral')),
        author_id INTEGER NOT NULL,
        is_edited INTEGER NOT NULL DEFAULT 0,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
    );
    """)

    await database.execute("""
    CREATE TABLE IF NOT EXISTS comment_reactions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        comment_id INTEGER NOT NULL,
        user_id INTEGER NOT NULL,
        reaction VARCHAR(16) NOT NULL CHECK (reaction IN ('like', 'dislike')),
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    );
    """)

    await database.execute("""
    CREATE TABLE IF NOT EXISTS bookmarks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        post_id INTEGER NOT NULL,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    );
    """)

    # 인덱스
    await database.execute("""
    CREATE INDEX IF NOT EXISTS idx_posts_board_pinned_created
    ON posts(board_id, is_pinned DESC, created_at DESC);
    """)
    await database.execute("""
    CREATE INDEX IF NOT EXISTS idx_comments_post
    ON comments(post_id, created_at);
    """)
    await database.execute("""
    CREATE INDEX IF NOT EXISTS idx_comment_reactions_comment
    ON comment_reactions(comment_id);
    """)
    await database.execute("""
    CREATE INDEX IF NOT EXISTS idx_bookmarks_user_post
    ON bookmarks(user_id, post_id);
    """)


def row_to_dict(row, columns) -> Optional[Dict[str, Any]]:
    """databases Record → dict. 컬럼 이름으로 꺼내야 결과 타입 변환(DateTime, Boolean)이 적용된다."""
    if row is None:
        return None
    return {c.name: row[c.name] for c in columns}
