# pttboard/errors.py
from typing import Any, Optional

from starlette import status


class ProcedureError(Exception):
    """프로시저 호출 실패. code/status_code 는 HTTP 응답으로 그대로 매핑된다."""

    code = "INTERNAL_SERVER_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"code": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class NotFound(ProcedureError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class InvalidInput(ProcedureError):
    code = "BAD_REQUEST"
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthenticated(ProcedureError):
    code = "UNAUTHORIZED"
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDenied(ProcedureError):
    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN


class MethodNotSupported(ProcedureError):
    code = "METHOD_NOT_SUPPORTED"
    status_code = status.HTTP_405_METHOD_NOT_ALLOWED


class Conflict(ProcedureError):
    code = "CONFLICT"
    status_code = status.HTTP_409_CONFLICT


class StorageUnavailable(ProcedureError):
    code = "SERVICE_UNAVAILABLE"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
