# pttboard/rpc.py
"""
이름으로 호출하는 프로시저 라우터.

- query: 읽기 전용. 기본적으로 비로그인 호출 허용
- mutation: 쓰기. 기본적으로 로그인 필요
- 입력은 pydantic 모델로 검증한 뒤 핸들러에 넘긴다

FastAPI APIRouter 처럼 include_router(prefix=...) 로 묶어서 "posts.create" 같은
점(.) 구분 이름을 만든다.
"""
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, MutableMapping, Optional, Type

from pydantic import BaseModel, ValidationError

from pttboard.database.connection import Storage
from pttboard.errors import InvalidInput, NotFound, Unauthenticated

logger = logging.getLogger(__name__)

QUERY = "query"
MUTATION = "mutation"


@dataclass
class RequestContext:
    storage: Storage
    user: Optional[Dict[str, Any]] = None
    # 로그아웃 등에서 비우는 세션. 세션 없는 호출(스크립트/테스트)이면 None
    session: Optional[MutableMapping[str, Any]] = None


Handler = Callable[..., Awaitable[Any]]


@dataclass
class Procedure:
    name: str
    kind: str
    handler: Handler
    input_model: Optional[Type[BaseModel]] = None
    protected: bool = False

    def parse_input(self, raw: Any) -> Optional[BaseModel]:
        if self.input_model is None:
            return None
        try:
            return self.input_model.model_validate(raw if raw is not None else {})
        except ValidationError as exc:
            errors = exc.errors(include_url=False, include_context=False, include_input=False)
            raise InvalidInput(_first_error_message(errors), details=errors) from exc

    async def __call__(self, ctx: RequestContext, raw_input: Any = None) -> Any:
        if self.protected and ctx.user is None:
            raise Unauthenticated("Please login to continue")
        data = self.parse_input(raw_input)
        logger.debug("-> %s %s user=%s", self.kind, self.name, ctx.user and ctx.user.get("id"))
        if data is None:
            return await self.handler(ctx)
        return await self.handler(ctx, data)


def _first_error_message(errors) -> str:
    if not errors:
        return "Invalid input"
    err = errors[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {err.get('msg')}" if loc else err.get("msg", "Invalid input")


class ProcedureRouter:
    def __init__(self):
        self.procedures: Dict[str, Procedure] = {}

    def add(self, procedure: Procedure) -> Procedure:
        if procedure.name in self.procedures:
            raise ValueError(f"Duplicate procedure: {procedure.name}")
        self.procedures[procedure.name] = procedure
        return procedure

    def query(self, name: str, input: Optional[Type[BaseModel]] = None, protected: bool = False):
        def decorator(fn: Handler) -> Handler:
            self.add(Procedure(name, QUERY, fn, input, protected))
            return fn
        return decorator

    def mutation(self, name: str, input: Optional[Type[BaseModel]] = None, protected: bool = True):
        def decorator(fn: Handler) -> Handler:
            self.add(Procedure(name, MUTATION, fn, input, protected))
            return fn
        return decorator

    def include_router(self, router: "ProcedureRouter", prefix: str = "") -> None:
        for proc in router.procedures.values():
            name = f"{prefix}.{proc.name}" if prefix else proc.name
            self.add(Procedure(name, proc.kind, proc.handler, proc.input_model, proc.protected))

    def get(self, name: str) -> Procedure:
        proc = self.procedures.get(name)
        if proc is None:
            raise NotFound(f"No procedure found on path \"{name}\"")
        return proc

    async def call(self, ctx: RequestContext, name: str, raw_input: Any = None) -> Any:
        return await self.get(name)(ctx, raw_input)

    def create_caller(self, ctx: RequestContext) -> "Caller":
        return Caller(self, ctx)


class Caller:
    """고정된 컨텍스트로 프로시저를 부르는 핸들. await caller("posts.getById", {"id": 1})"""

    def __init__(self, router: ProcedureRouter, ctx: RequestContext):
        self.router = router
        self.ctx = ctx

    async def __call__(self, name: str, raw_input: Any = None) -> Any:
        return await self.router.call(self.ctx, name, raw_input)
