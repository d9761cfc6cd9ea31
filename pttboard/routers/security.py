# pttboard/routers/security.py
from typing import Any, Dict, Optional

from pttboard.errors import PermissionDenied, Unauthenticated


def is_admin(user: Optional[Dict[str, Any]]) -> bool:
    return bool(user) and user.get("role") == "admin"


def can_modify(user: Optional[Dict[str, Any]], owner_id: Optional[int]) -> bool:
    """작성자 본인 또는 관리자만 수정/삭제 가능"""
    if not user:
        return False
    return user.get("id") == owner_id or is_admin(user)


def ensure_can_modify(user: Optional[Dict[str, Any]], owner_id: Optional[int], action: str) -> None:
    """action 예: "edit this post" → "You don't have permission to edit this post" """
    if not user:
        raise Unauthenticated("Please login to continue")
    if not can_modify(user, owner_id):
        raise PermissionDenied(f"You don't have permission to {action}")


def ensure_admin(user: Optional[Dict[str, Any]]) -> None:
    """관리자 전용 보호"""
    if not user:
        raise Unauthenticated("Please login to continue")
    if not is_admin(user):
        raise PermissionDenied("You don't have permission to access admin functions")
