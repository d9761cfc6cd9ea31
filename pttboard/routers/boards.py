# pttboard/routers/boards.py
from pttboard.errors import NotFound
from pttboard.models import boards as board_db
from pttboard.rpc import ProcedureRouter, RequestContext
from pttboard.schemas import BoardCreate, BoardModeratorUpdate, BoardNameInput, SearchInput
from .security import ensure_can_modify

router = ProcedureRouter()


@router.query("list")
async def list_boards(ctx: RequestContext):
    return await board_db.list_boards(ctx.storage)


@router.query("search", input=SearchInput)
async def search_boards(ctx: RequestContext, data: SearchInput):
    return await board_db.search_boards(ctx.storage, data.query)


@router.query("getByName", input=BoardNameInput)
async def get_by_name(ctx: RequestContext, data: BoardNameInput):
    return await board_db.get_board_by_name(ctx.storage, data.name)


@router.query("mine", protected=True)
async def my_boards(ctx: RequestContext):
    """내가 만든(= moderator 인) 게시판"""
    return await board_db.get_user_boards(ctx.storage, ctx.user["id"])


@router.mutation("create", input=BoardCreate)
async def create_board(ctx: RequestContext, data: BoardCreate):
    return await board_db.create_board(
        ctx.storage,
        name=data.name,
        display_name=data.displayName,
        category=data.category,
        description=data.description,
        moderator_id=ctx.user["id"],
    )


@router.mutation("updateModerator", input=BoardModeratorUpdate)
async def update_moderator(ctx: RequestContext, data: BoardModeratorUpdate):
    await ctx.storage.require()
    board = await board_db.get_board_by_id(ctx.storage, data.boardId)
    if not board:
        raise NotFound("Board not found")
    ensure_can_modify(ctx.user, board["moderator_id"], "change the moderator of this board")
    await board_db.update_board_moderator(ctx.storage, data.boardId, data.moderatorId)
    return {"success": True}
