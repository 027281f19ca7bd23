"""
Fan CMS API - JSON-document backed content and music service.
"""

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from util.logging import logger
from ..core.config import VERSION, debug_enabled, get_cors_origins, validate_config
from ..core.dao import DocumentLocks, Repositories
from ..core.errors import FanCMSError, RateLimitedError
from ..core.ratelimit import RateLimiter
from . import content, music, posts
from .deps import get_repositories
from .schemas import ErrorResponse, HealthResponse

# Initialize the FastAPI application
app = FastAPI(
    title="Fan CMS API",
    version=VERSION,
    description="Content management and music streaming API over JSON documents",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Process-wide state shared by every request
app.state.rate_limiter = RateLimiter()
app.state.document_locks = DocumentLocks()


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint(repos: Repositories = Depends(get_repositories)):
    """Check that the core documents load."""
    documents = {
        "posts": repos.posts.count(),
        "tracks": repos.tracks.count(),
        "albums": repos.albums.count(),
        "news": repos.news.count(),
    }
    issues = validate_config()

    return HealthResponse(
        status="healthy" if not issues else "degraded",
        version=VERSION,
        data_root=str(repos.store.root),
        documents=documents,
        config_issues=issues,
    )


app.include_router(posts.router, prefix="/api", tags=["posts"])
app.include_router(music.router, prefix="/api/music", tags=["music"])
app.include_router(content.router, prefix="/api", tags=["content"])


@app.exception_handler(FanCMSError)
async def domain_exception_handler(request: Request, exc: FanCMSError):
    """Turn domain errors into the structured failure envelope."""
    logger.log_domain_error(exc.error_type, exc.message, request.url.path, exc.status_code)
    body = ErrorResponse(error=exc.message, error_type=exc.error_type)

    headers = None
    if isinstance(exc, RateLimitedError) and exc.retry_after:
        headers = {"Retry-After": str(exc.retry_after)}

    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Request bodies and query parameters that fail validation are 400s."""
    errors = [
        {"field": ".".join(str(part) for part in e.get("loc", ())), "message": e.get("msg", "")}
        for e in exc.errors()
    ]
    logger.log_domain_error("VALIDATION_ERROR", str(errors), request.url.path, 400)

    content = ErrorResponse(error="Invalid request", error_type="VALIDATION_ERROR").model_dump(mode="json")
    content["details"] = errors
    return JSONResponse(status_code=400, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}")
    content = ErrorResponse(error="Internal server error", error_type="INTERNAL_ERROR").model_dump(mode="json")
    if debug_enabled():
        content["debug"] = str(exc)
    return JSONResponse(status_code=500, content=content)
