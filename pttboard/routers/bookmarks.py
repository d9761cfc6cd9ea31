# pttboard/routers/bookmarks.py
from pttboard.models import bookmarks as bookmark_db
from pttboard.rpc import ProcedureRouter, RequestContext
from pttboard.schemas import BookmarkInput, PageInput

router = ProcedureRouter()


@router.query("list", input=PageInput, protected=True)
async def list_bookmarks(ctx: RequestContext, data: PageInput):
    return await bookmark_db.get_user_bookmarks(ctx.storage, ctx.user["id"], data.limit, data.offset)


@router.query("isBookmarked", input=BookmarkInput)
async def is_bookmarked(ctx: RequestContext, data: BookmarkInput):
    # 비로그인은 항상 False
    if ctx.user is None:
        return False
    return await bookmark_db.is_post_bookmarked(ctx.storage, ctx.user["id"], data.postId)


@router.mutation("add", input=BookmarkInput)
async def add(ctx: RequestContext, data: BookmarkInput):
    return await bookmark_db.create_bookmark(ctx.storage, ctx.user["id"], data.postId)


@router.mutation("remove", input=BookmarkInput)
async def remove(ctx: RequestContext, data: BookmarkInput):
    await bookmark_db.delete_bookmark(ctx.storage, ctx.user["id"], data.postId)
    return {"success": True}
