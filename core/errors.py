# core/errors.py
import logging
from dataclasses import dataclass, field as dc_field
from functools import wraps
from typing import Any, Optional

from django.utils.translation import gettext as _

logger = logging.getLogger(__name__)


# -----------------------------
# Error taxonomy
# -----------------------------
class RecordsError(Exception):
    """Base class for expected failures; the message is safe to show to users."""

    kind = "error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(RecordsError):
    kind = "validation"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class AuthorizationError(RecordsError):
    kind = "forbidden"


class NotFoundError(RecordsError):
    kind = "not_found"


class ConflictError(RecordsError):
    kind = "conflict"


class ServerError(RecordsError):
    kind = "server"


# -----------------------------
# Operation results
# -----------------------------
@dataclass
class OperationResult:
    success: bool
    message: str = ""
    data: Any = None
    error: Optional[str] = None
    field: Optional[str] = None
    extra: dict = dc_field(default_factory=dict)

    @classmethod
    def ok(cls, message: str = "", data: Any = None) -> "OperationResult":
        return cls(success=True, message=str(message), data=data)

    @classmethod
    def fail(cls, exc: RecordsError) -> "OperationResult":
        return cls(
            success=False,
            message=str(exc.message),
            error=exc.kind,
            field=getattr(exc, "field", None),
        )

    def as_dict(self) -> dict:
        payload = {"success": self.success, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        if self.error:
            payload["error"] = self.error
        if self.field:
            payload["field"] = self.field
        payload.update(self.extra)
        return payload


def server_error_message() -> str:
    return _("A server error occurred. Please try again later.")


def guarded(func):
    """
    Boundary decorator for public operations.
    Expected failures become failure results; anything else is logged with its
    traceback and reported to the caller as a generic server error.
    """
    @wraps(func)
    def _wrapped(*args, **kwargs):
        try:
            result = func(*args, **kwargs)
        except RecordsError as exc:
            logger.info("%s rejected (%s): %s", func.__name__, exc.kind, exc.message)
            return OperationResult.fail(exc)
        except Exception:
            logger.exception("Unexpected failure in %s", func.__name__)
            return OperationResult.fail(ServerError(server_error_message()))
        if isinstance(result, OperationResult):
            return result
        return OperationResult.ok(data=result)

    return _wrapped
