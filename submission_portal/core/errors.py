from fastapi import Request, status
from fastapi.responses import JSONResponse


class PortalError(Exception):
    """Base for domain failures; handlers turn these into HTTP responses."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(PortalError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(PortalError):
    status_code = status.HTTP_409_CONFLICT


class InvalidInput(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST


class Forbidden(PortalError):
    status_code = status.HTTP_403_FORBIDDEN


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    # same body shape as HTTPException so clients see one format
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
