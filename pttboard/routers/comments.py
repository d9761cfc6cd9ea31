# pttboard/routers/comments.py
from pttboard.errors import NotFound
from pttboard.models import comments as comment_db
from pttboard.models.users import get_authors
from pttboard.rpc import ProcedureRouter, RequestContext
from pttboard.schemas import CommentCreate, CommentIdInput, CommentListInput, CommentReact, CommentUpdate
from .security import ensure_can_modify

router = ProcedureRouter()


@router.query("listByPost", input=CommentListInput)
async def list_by_post(ctx: RequestContext, data: CommentListInput):
    comments = await comment_db.get_comments_by_post(ctx.storage, data.postId)
    authors = await get_authors(ctx.storage, [c["author_id"] for c in comments])
    return [{**c, "author": authors.get(c["author_id"])} for c in comments]


@router.mutation("create", input=CommentCreate)
async def create(ctx: RequestContext, data: CommentCreate):
    """댓글 작성 후 게시글의 推/噓/댓글 수를 다시 계산"""
    return await comment_db.create_comment(
        ctx.storage,
        post_id=data.postId,
        content=data.content,
        comment_type=data.type,
        author_id=ctx.user["id"],
    )


# 작성자 또는 관리자만 수정/삭제 가능 (게시글과 같은 규칙)
@router.mutation("update", input=CommentUpdate)
async def update(ctx: RequestContext, data: CommentUpdate):
    await ctx.storage.require()
    comment = await comment_db.get_comment_by_id(ctx.storage, data.id)
    if not comment:
        raise NotFound("Comment not found")
    ensure_can_modify(ctx.user, comment["author_id"], "edit this comment")
    return await comment_db.update_comment(ctx.storage, data.id, data.content)


@router.mutation("delete", input=CommentIdInput)
async def delete(ctx: RequestContext, data: CommentIdInput):
    await ctx.storage.require()
    comment = await comment_db.get_comment_by_id(ctx.storage, data.id)
    if not comment:
        raise NotFound("Comment not found")
    ensure_can_modify(ctx.user, comment["author_id"], "delete this comment")
    await comment_db.delete_comment(ctx.storage, data.id)
    return {"success": True}


@router.mutation("react", input=CommentReact)
async def react(ctx: RequestContext, data: CommentReact):
    return await comment_db.create_comment_reaction(
        ctx.storage,
        comment_id=data.commentId,
        user_id=ctx.user["id"],
        reaction=data.reaction,
    )
