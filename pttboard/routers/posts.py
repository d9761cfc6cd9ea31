# pttboard/routers/posts.py
from pttboard.errors import NotFound
from pttboard.models import comments as comment_db
from pttboard.models import posts as post_db
from pttboard.models.users import get_authors
from pttboard.rpc import ProcedureRouter, RequestContext
from pttboard.schemas import PostCreate, PostIdInput, PostListInput, PostUpdate, SearchInput
from .security import ensure_can_modify

router = ProcedureRouter()


@router.query("listByBoard", input=PostListInput)
async def list_by_board(ctx: RequestContext, data: PostListInput):
    return await post_db.list_posts_by_board(ctx.storage, data.boardId, data.limit, data.offset)


@router.query("getById", input=PostIdInput)
async def get_by_id(ctx: RequestContext, data: PostIdInput):
    """게시글 + 작성자 + 댓글(각 댓글 작성자 포함). 없으면 None"""
    post = await post_db.get_post_by_id(ctx.storage, data.id)
    if not post:
        return None

    comments = await comment_db.get_comments_by_post(ctx.storage, post["id"])
    authors = await get_authors(ctx.storage, [post["author_id"]] + [c["author_id"] for c in comments])
    return {
        **post,
        "author": authors.get(post["author_id"]),
        "comments": [{**c, "author": authors.get(c["author_id"])} for c in comments],
    }


@router.query("search", input=SearchInput)
async def search(ctx: RequestContext, data: SearchInput):
    return await post_db.search_posts(ctx.storage, data.query)


@router.mutation("create", input=PostCreate)
async def create(ctx: RequestContext, data: PostCreate):
    return await post_db.create_post(
        ctx.storage,
        board_id=data.boardId,
        title=data.title,
        content=data.content,
        author_id=ctx.user["id"],
    )


@router.mutation("update", input=PostUpdate)
async def update(ctx: RequestContext, data: PostUpdate):
    await ctx.storage.require()
    post = await post_db.get_post_by_id(ctx.storage, data.id)
    if not post:
        raise NotFound("Post not found")
    ensure_can_modify(ctx.user, post["author_id"], "edit this post")
    return await post_db.update_post(ctx.storage, data.id, title=data.title, content=data.content)


@router.mutation("delete", input=PostIdInput)
async def delete(ctx: RequestContext, data: PostIdInput):
    await ctx.storage.require()
    post = await post_db.get_post_by_id(ctx.storage, data.id)
    if not post:
        raise NotFound("Post not found")
    ensure_can_modify(ctx.user, post["author_id"], "delete this post")
    await post_db.delete_post(ctx.storage, data.id)
    return {"success": True}
