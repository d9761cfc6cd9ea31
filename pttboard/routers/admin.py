# pttboard/routers/admin.py
import logging

from pttboard.errors import NotFound
from pttboard.models import posts as post_db
from pttboard.models import users as user_db
from pttboard.rpc import ProcedureRouter, RequestContext
from pttboard.schemas import AdminPageInput, AdminPostIdInput, AdminUserIdInput, RoleUpdate
from .security import ensure_admin

logger = logging.getLogger(__name__)

router = ProcedureRouter()


@router.query("posts", input=AdminPageInput, protected=True)
async def all_posts(ctx: RequestContext, data: AdminPageInput):
    ensure_admin(ctx.user)
    return await post_db.get_all_posts(ctx.storage, data.limit, data.offset)


@router.query("users", input=AdminPageInput, protected=True)
async def all_users(ctx: RequestContext, data: AdminPageInput):
    ensure_admin(ctx.user)
    return await user_db.get_all_users(ctx.storage, data.limit, data.offset)


@router.mutation("deletePost", input=AdminPostIdInput)
async def delete_post(ctx: RequestContext, data: AdminPostIdInput):
    ensure_admin(ctx.user)
    await ctx.storage.require()
    if not await post_db.get_post_by_id(ctx.storage, data.postId):
        raise NotFound("Post not found")
    await post_db.delete_post(ctx.storage, data.postId)
    logger.info("Admin %s deleted post %s", ctx.user["id"], data.postId)
    return {"success": True}


@router.mutation("deleteUser", input=AdminUserIdInput)
async def delete_user(ctx: RequestContext, data: AdminUserIdInput):
    ensure_admin(ctx.user)
    if not await user_db.delete_user(ctx.storage, data.userId):
        raise NotFound("User not found")
    logger.info("Admin %s deleted user %s", ctx.user["id"], data.userId)
    return {"success": True}


@router.mutation("updateUserRole", input=RoleUpdate)
async def update_user_role(ctx: RequestContext, data: RoleUpdate):
    ensure_admin(ctx.user)
    if not await user_db.update_user_role(ctx.storage, data.userId, data.role):
        raise NotFound("User not found")
    return {"success": True}
