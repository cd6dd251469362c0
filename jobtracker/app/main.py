"""Main FastAPI application module."""
from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobtracker.core.config import get_settings
from jobtracker.core.database import init_database
from jobtracker.core.errors import TrackerError
from jobtracker.core.logging import setup_logging
from jobtracker.core.schemas import ErrorDetail, OperationResult

from .routers import analytics, applications, reminders, users
from .dependencies import get_current_user

# Initialize logging
logger = setup_logging('api')

settings = get_settings()

# Error kind -> HTTP status
STATUS_CODES = {
    "validation_error": 400,
    "not_found": 404,
    "access_denied": 403,
    "consistency_risk": 500,
    "internal_error": 500,
}

# Initialize the FastAPI application
app = FastAPI(
    title="Job Application Tracker API",
    description="""
    REST API for tracking a job search:

    * Applications with an append-only status history
    * Communications and notes per application
    * Follow-up and interview reminders
    * Dashboards, timelines and statistics

    ## Authentication

    Every endpoint requires a JWT bearer token whose ``sub`` claim is the
    user id:
    ```
    Authorization: Bearer <your_token>
    ```
    """,
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Static paths (/stats, /reminders, ...) must be registered before /{application_id}
app.include_router(
    analytics.router,
    prefix="/api/applications",
    tags=["analytics"],
    dependencies=[Depends(get_current_user)]
)
app.include_router(
    reminders.router,
    prefix="/api/applications",
    tags=["reminders"],
    dependencies=[Depends(get_current_user)]
)
app.include_router(
    applications.router,
    prefix="/api/applications",
    tags=["applications"],
    dependencies=[Depends(get_current_user)]
)
app.include_router(
    users.router,
    prefix="/api/users",
    tags=["users"],
    dependencies=[Depends(get_current_user)]
)


@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError):
    status_code = STATUS_CODES.get(exc.kind, 500)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.kind}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.kind}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content=OperationResult.failure(exc).model_dump(mode="json"),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    detail = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    result = OperationResult(
        success=False,
        message="Invalid request",
        error=ErrorDetail(kind="validation_error", message=detail),
    )
    return JSONResponse(status_code=422, content=result.model_dump(mode="json"))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}")
    result = OperationResult(
        success=False,
        message="An unexpected error occurred",
        error=ErrorDetail(kind="internal_error", message="The operation could not be completed"),
    )
    return JSONResponse(status_code=500, content=result.model_dump(mode="json"))


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    try:
        init_database()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Error during startup: {str(e)}")
        raise


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "Job Application Tracker API",
        "version": "1.0.0"
    }
