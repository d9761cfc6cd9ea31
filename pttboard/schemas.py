# pttboard/schemas.py
# 프로시저 입력 모델
from typing import Literal, Optional

from pydantic import BaseModel, Field

CommentType = Literal["push", "boo", "neutral"]
Reaction = Literal["like", "dislike"]
Role = Literal["user", "admin"]


class SearchInput(BaseModel):
    query: str = Field(min_length=1)


class PageInput(BaseModel):
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)


class AdminPageInput(BaseModel):
    limit: int = Field(50, ge=1, le=200)
    offset: int = Field(0, ge=0)


# ── 게시판 ────────────────────────────────────────────────
class BoardNameInput(BaseModel):
    name: str


class BoardCreate(BaseModel):
    name: str = Field(min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")
    displayName: str = Field(min_length=1, max_length=128)
    category: str = Field(min_length=1, max_length=32)
    description: Optional[str] = None


class BoardModeratorUpdate(BaseModel):
    boardId: int
    moderatorId: int


# ── 게시글 ────────────────────────────────────────────────
class PostIdInput(BaseModel):
    id: int


class PostListInput(PageInput):
    boardId: int


class PostCreate(BaseModel):
    boardId: int
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)


class PostUpdate(BaseModel):
    id: int
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)


# ── 댓글 ──────────────────────────────────────────────────
class CommentListInput(BaseModel):
    postId: int


class CommentCreate(BaseModel):
    postId: int
    content: str = Field(min_length=1, max_length=500)
    type: CommentType


class CommentUpdate(BaseModel):
    id: int
    content: str = Field(min_length=1, max_length=500)


class CommentIdInput(BaseModel):
    id: int


class CommentReact(BaseModel):
    commentId: int
    reaction: Reaction


# ── 북마크 / 관리자 ───────────────────────────────────────
class BookmarkInput(BaseModel):
    postId: int


class AdminPostIdInput(BaseModel):
    postId: int


class AdminUserIdInput(BaseModel):
    userId: int


class RoleUpdate(BaseModel):
    userId: int
    role: Role
