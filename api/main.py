"""FastAPI application for the shoe counter."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from api.routes import tracker
from config import config

logger = logging.getLogger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    enabled=config.rate_limit.enabled,
    default_limits=[config.rate_limit.limit],
)


def configure_logging() -> None:
    """Send module loggers to stderr at the configured level."""
    logging.basicConfig(
        level=logging.DEBUG if config.debug else config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _too_many_requests(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.info("Rate limit hit by %s", get_remote_address(request))
    return JSONResponse(
        status_code=429,
        content={"detail": f"Rate limit exceeded: {exc.detail}"},
    )


def create_app() -> FastAPI:
    """Build the API: CORS, rate limiting, health check and tracker routes."""
    configure_logging()

    app = FastAPI(
        title="Shoe Counter",
        description="Manual blackjack card-counting aid: remaining cards and draw probabilities",
        version="0.1.0",
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _too_many_requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors.allowed_origins,
        allow_credentials=config.cors.allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    @limiter.limit(config.rate_limit.limit)
    async def health_check(request: Request) -> dict[str, str]:
        return {"status": "healthy"}

    app.include_router(tracker.router, prefix="/api/tracker", tags=["tracker"])
    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    uvicorn.run("api.main:app", host=config.host, port=config.port, reload=config.debug)
