"""RSS Gallery - Main application entry point."""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

from rss_gallery.api import gallery_router, health_router
from rss_gallery.config import get_settings
from rss_gallery.logging import setup_logging


class EmbeddingHeadersMiddleware(BaseHTTPMiddleware):
    """Headers for a gallery that is framed by its hosting portal."""

    def __init__(self, app, portal_origin: str = ""):
        super().__init__(app)
        ancestors = " ".join(filter(None, ["'self'", portal_origin]))
        # item images are hot-linked from whatever host the feed names
        self.policy = (
            "default-src 'self'; "
            "style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data: https:; "
            "connect-src 'self' ws: wss:; "
            f"frame-ancestors {ancestors}"
        )

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Content-Security-Policy"] = self.policy
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    setup_logging()
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="RSS Gallery",
        description="Fetch an RSS feed and serve it as a paginated card gallery",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.limiter = Limiter(key_func=get_remote_address)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(EmbeddingHeadersMiddleware, portal_origin=settings.portal_origin)

    # the portal page also calls the API from its own origin
    origins = [o for o in (settings.frontend_origin, settings.portal_origin) if o]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
    )

    app.include_router(health_router)
    app.include_router(gallery_router)

    # built gallery front end, when shipped alongside
    static_dir = Path(__file__).parent / "static"
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    return app


app = create_app()


def main():
    """Entry point for running the application."""
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )


if __name__ == "__main__":
    main()
