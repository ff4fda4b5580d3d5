import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.api.routes import check_weeks, pr_actions, webhooks
from app.integrations.github.auth import AuthError
from app.integrations.github.models import UpstreamQueryError

settings = get_settings()

# Configure application logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Set log level for app modules
logger = logging.getLogger("app")
logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

app = FastAPI(
    title=settings.app_name,
    description="GitHub App enforcing Week assignment on study PRs",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Include routers
app.include_router(check_weeks.router, tags=["Week Check"])
app.include_router(webhooks.router, tags=["Webhooks"])
app.include_router(pr_actions.router, tags=["PR Actions"])

STATUS_MESSAGES = {404: "Not found", 405: "Method not allowed"}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = STATUS_MESSAGES.get(exc.status_code) or str(exc.detail)
    return _error(exc.status_code, message)


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    logger.error(f"GitHub App authentication failed: {exc}")
    return _error(500, str(exc))


@app.exception_handler(UpstreamQueryError)
async def upstream_error_handler(request: Request, exc: UpstreamQueryError):
    logger.error(f"GitHub request failed: {exc}")
    return _error(500, f"Internal server error: {exc}")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}")
    return _error(500, f"Internal server error: {exc}")


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": settings.app_name}
