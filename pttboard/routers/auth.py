# pttboard/routers/auth.py
import logging
from typing import Any, Dict, MutableMapping, Optional

from fastapi import Request

from pttboard.models.users import get_user_by_open_id, upsert_user
from pttboard.rpc import ProcedureRouter, RequestContext

logger = logging.getLogger(__name__)

router = ProcedureRouter()

SESSION_KEY = "user"


async def get_request_context(request: Request) -> RequestContext:
    """
    세션 쿠키 → 현재 사용자. 세션에는 id/open_id 만 두고 role 등은 매번 DB 에서 읽는다.
    저장소가 없거나 사용자가 지워졌으면 비로그인으로 취급.
    """
    storage = request.app.state.storage
    user = None
    session_user = request.session.get(SESSION_KEY)
    if isinstance(session_user, dict) and session_user.get("open_id"):
        user = await get_user_by_open_id(storage, session_user["open_id"])
    return RequestContext(storage=storage, user=user, session=request.session)


def establish_session(session: MutableMapping[str, Any], user: Dict[str, Any]) -> None:
    session[SESSION_KEY] = {"id": user["id"], "open_id": user["open_id"]}


async def sign_in(
    request: Request,
    open_id: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
    login_method: Optional[str] = None,
) -> Dict[str, Any]:
    """
    외부 OAuth 콜백에서 호출: 사용자 upsert + 세션 생성.
    OWNER_OPEN_ID 와 같은 open_id 는 admin 으로 가입된다.
    """
    settings = request.app.state.settings
    user = await upsert_user(
        request.app.state.storage,
        open_id,
        name=name,
        email=email,
        login_method=login_method,
        owner_open_id=settings.OWNER_OPEN_ID,
    )
    establish_session(request.session, user)
    logger.info("User %s signed in", user["id"])
    return user


@router.query("me")
async def me(ctx: RequestContext):
    return ctx.user


@router.mutation("logout", protected=False)
async def logout(ctx: RequestContext):
    # 세션을 비우면 SessionMiddleware 가 쿠키를 만료시킨다
    if ctx.session is not None:
        ctx.session.clear()
    if ctx.user:
        logger.info("User %s logged out", ctx.user["id"])
    return {"success": True}
