# pttboard/routers/http.py
# 프로시저를 HTTP 로 노출: query 는 GET ?input=<json>, mutation 은 POST <json body>
import json
from typing import Any, Optional, Union

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from pttboard.errors import InvalidInput, MethodNotSupported, ProcedureError
from pttboard.rpc import MUTATION, QUERY, RequestContext
from . import app_router
from .auth import get_request_context

router = APIRouter(prefix="/api/trpc", tags=["rpc"])


def _decode(raw: Union[str, bytes, None]) -> Any:
    if not raw:
        return None
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw)
    except ValueError:
        # UnicodeDecodeError 도 ValueError
        raise InvalidInput("Input is not valid JSON")


async def _dispatch(ctx: RequestContext, name: str, kind: str, raw_input: Any):
    proc = app_router.get(name)
    if proc.kind != kind:
        method = "GET" if kind == QUERY else "POST"
        raise MethodNotSupported(f"Unsupported {method}-request to {proc.kind} procedure at path \"{name}\"")
    data = await proc(ctx, raw_input)
    return {"result": {"data": data}}


@router.get("/{name}")
async def run_query(
    name: str,
    input: Optional[str] = Query(None),
    ctx: RequestContext = Depends(get_request_context),
):
    return await _dispatch(ctx, name, QUERY, _decode(input))


@router.post("/{name}")
async def run_mutation(
    name: str,
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
):
    return await _dispatch(ctx, name, MUTATION, _decode(await request.body()))


async def procedure_error_handler(request: Request, exc: ProcedureError) -> JSONResponse:
    return JSONResponse({"error": exc.to_dict()}, status_code=exc.status_code)
