"""Result values returned by dashboard operations.

Business outcomes (denials, missing documents, rule rejections) come back as
values so callers can branch on them; routers turn them into HTTP errors.
"""

import enum
import functools
from dataclasses import dataclass, field
from typing import Any, Optional

from libs.auth.resolver import AuthorizationResult
from libs.common.logging import get_logger
from libs.db.documents import DocumentStoreError

logger = get_logger(__name__)


class ResultCode(str, enum.Enum):
    OK = "ok"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    REJECTED = "rejected"
    CONFLICT = "conflict"
    ERROR = "error"


_STATUS_FOR_CODE = {
    ResultCode.OK: 200,
    ResultCode.UNAUTHORIZED: 401,
    ResultCode.FORBIDDEN: 403,
    ResultCode.NOT_FOUND: 404,
    ResultCode.REJECTED: 400,
    ResultCode.CONFLICT: 409,
    ResultCode.ERROR: 500,
}


@dataclass
class ActionResult:
    success: bool
    code: ResultCode = ResultCode.OK
    error: Optional[str] = None
    id: Optional[str] = None
    data: Any = None
    message: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def status_code(self) -> int:
        return _STATUS_FOR_CODE[self.code]

    @classmethod
    def ok(cls, data: Any = None, id: Optional[str] = None, message: Optional[str] = None, **extra):
        return cls(True, ResultCode.OK, id=id, data=data, message=message, extra=extra)

    @classmethod
    def fail(cls, code: ResultCode, error: str, **extra):
        return cls(False, code, error=error, extra=extra)

    @classmethod
    def not_found(cls, error: str):
        return cls.fail(ResultCode.NOT_FOUND, error)

    @classmethod
    def rejected(cls, error: str):
        return cls.fail(ResultCode.REJECTED, error)

    @classmethod
    def conflict(cls, error: str):
        return cls.fail(ResultCode.CONFLICT, error)

    @classmethod
    def denied(cls, auth: AuthorizationResult):
        """Convert a failed authorization check."""
        code = {
            401: ResultCode.UNAUTHORIZED,
            404: ResultCode.NOT_FOUND,
        }.get(auth.status_code, ResultCode.FORBIDDEN)
        return cls.fail(code, auth.error or "Insufficient permissions")

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": self.success}
        if self.error is not None:
            body["error"] = self.error
        if self.id is not None:
            body["id"] = self.id
        if self.data is not None:
            body["data"] = self.data
        if self.message is not None:
            body["message"] = self.message
        body.update(self.extra)
        return body


def handles_store_errors(message: str):
    """Turn document-store failures in a service method into an error result."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except DocumentStoreError:
                logger.exception("%s (%s)", message, func.__qualname__)
                return ActionResult.fail(ResultCode.ERROR, message)

        return wrapper

    return decorator
