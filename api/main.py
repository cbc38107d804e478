"""FastAPI application for the 21 Hold'em table."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from api.routes import table
from api.session import get_session_store
from config import config

HEALTH_LIMIT = f"{config.rate_limit.requests_per_minute}/minute"

limiter = Limiter(
    key_func=get_remote_address,
    enabled=config.rate_limit.enabled,
    default_limits=[HEALTH_LIMIT],
)


async def _rate_limit_exceeded(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={"detail": f"Rate limit exceeded: {exc.detail}"},
    )


def create_app() -> FastAPI:
    """Build the app: CORS, rate limiting, health check and the table routes."""
    application = FastAPI(
        title="21 Hold'em",
        description="Three-seat 21 Hold'em table against two bots",
        version="0.1.0",
        debug=config.debug,
    )
    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors.allowed_origins,
        allow_credentials=config.cors.allow_credentials,
        allow_methods=config.cors.allow_methods,
        allow_headers=config.cors.allow_headers,
    )

    application.include_router(table.router, prefix="/api/table", tags=["table"])
    return application


app = create_app()


@app.get("/api/health")
@limiter.limit(HEALTH_LIMIT)
async def health_check(request: Request) -> dict[str, str | int]:
    """Liveness plus the number of open tables."""
    return {"status": "healthy", "open_tables": len(get_session_store())}
