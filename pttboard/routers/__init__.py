# pttboard/routers/__init__.py
from pttboard.rpc import ProcedureRouter

from .admin import router as admin_router
from .auth import router as auth_router
from .boards import router as boards_router
from .bookmarks import router as bookmarks_router
from .comments import router as comments_router
from .posts import router as posts_router

app_router = ProcedureRouter()

# 리소스별 프로시저 묶음 → "posts.create" 같은 이름
app_router.include_router(auth_router, prefix="auth")
app_router.include_router(boards_router, prefix="boards")
app_router.include_router(posts_router, prefix="posts")
app_router.include_router(comments_router, prefix="comments")
app_router.include_router(bookmarks_router, prefix="bookmarks")
app_router.include_router(admin_router, prefix="admin")
