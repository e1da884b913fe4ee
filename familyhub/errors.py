"""HTTP-facing error taxonomy.

Every class is an ``HTTPException`` so FastAPI's stock handler renders it
as ``{"detail": ...}`` with the matching status code. Nothing here is
caught locally; failures surface straight to the caller.
"""
from fastapi import HTTPException, status


class ValidationError(HTTPException):
    def __init__(self, detail: str = "Invalid data"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Unauthenticated(HTTPException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class Unauthorized(HTTPException):
    def __init__(self, detail: str = "Not authorized"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class UpstreamFailure(HTTPException):
    """An external service (Google Calendar) call failed."""

    def __init__(self, detail: str = "Upstream service failed"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


__all__ = ["ValidationError", "Unauthenticated", "Unauthorized", "NotFound", "UpstreamFailure"]
