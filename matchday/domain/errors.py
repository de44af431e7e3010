"""Error taxonomy shared by the ledger and the admin credential service.

Each error carries a stable ``code`` string, mirroring the remote procedure
surface so callers can map failures without inspecting messages.
"""

from __future__ import annotations

from typing import ClassVar


class ServiceError(RuntimeError):
    """Base class for typed service failures."""

    code: ClassVar[str] = "internal"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def as_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class Unauthenticated(ServiceError):
    code = "unauthenticated"


class InvalidArgument(ServiceError):
    code = "invalid-argument"


class FailedPrecondition(ServiceError):
    code = "failed-precondition"


class NotFound(ServiceError):
    code = "not-found"


class PermissionDenied(ServiceError):
    code = "permission-denied"
