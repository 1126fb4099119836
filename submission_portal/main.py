import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from submission_portal.core.errors import PortalError, portal_error_handler
from submission_portal.core.logging_middleware import LoggingMiddleware
from submission_portal.db.init_db import init_db
from submission_portal.routers.admin import router as admin_router
from submission_portal.routers.assignments import router as assignments_router
from submission_portal.routers.auth import router as auth_router
from submission_portal.routers.submissions import router as submissions_router

logging.basicConfig(level=logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Submission Portal", lifespan=lifespan)

# Middleware
app.add_middleware(LoggingMiddleware)

# Domain errors -> HTTP
app.add_exception_handler(PortalError, portal_error_handler)


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Include routers
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(assignments_router, prefix="/assignments", tags=["assignments"])
app.include_router(submissions_router, prefix="/submissions", tags=["submissions"])
app.include_router(admin_router, prefix="/admin", tags=["admin"])
