import httpx
import pytest
from fastapi import Request

from pttboard.config import Settings
from pttboard.database.connection import Storage
from pttboard.main import create_app
from pttboard.models.boards import create_board
from pttboard.models.posts import create_post
from pttboard.models.users import upsert_user
from pttboard.routers import app_router
from pttboard.routers.auth import sign_in
from pttboard.rpc import RequestContext


@pytest.fixture
async def storage(tmp_path):
    # 파일 DB: :memory: 는 연결마다 따로라서 쓰지 않는다
    storage = Storage(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    yield storage
    await storage.close()


@pytest.fixture
def offline_storage():
    return Storage(None)


@pytest.fixture
async def alice(storage):
    return await upsert_user(storage, "alice-open-id", name="Alice")


@pytest.fixture
async def bob(storage):
    return await upsert_user(storage, "bob-open-id", name="Bob")


@pytest.fixture
async def admin(storage):
    return await upsert_user(storage, "admin-open-id", name="Admin", role="admin")


@pytest.fixture
async def board(storage, alice):
    return await create_board(
        storage,
        name="Gossiping",
        display_name="八卦",
        category="綜合",
        moderator_id=alice["id"],
    )


@pytest.fixture
async def post(storage, board, alice):
    return await create_post(
        storage, board_id=board["id"], title="first post", content="hello", author_id=alice["id"]
    )


@pytest.fixture
def call(storage):
    """call(user)("posts.create", {...}) 형태로 프로시저 호출"""
    def make(user=None, session=None):
        ctx = RequestContext(storage=storage, user=user, session=session)
        return app_router.create_caller(ctx)
    return make


@pytest.fixture
def app(storage):
    settings = Settings(DATABASE_URL=None, SESSION_SECRET="test-secret", OWNER_OPEN_ID="owner-open-id")
    app = create_app(settings=settings, storage=storage)

    # OAuth 콜백 자리에서 sign_in 만 부르는 테스트용 엔드포인트
    @app.post("/_test/login/{open_id}")
    async def login_for_test(open_id: str, request: Request):
        user = await sign_in(request, open_id)
        return {"id": user["id"]}

    return app


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
