import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pagescan.database import DATABASE_URL, DATABASE_ECHO
from pagescan.store import RecordStore
from .middleware import RequestLoggingMiddleware
from .routes import router
from .schemas import ErrorResponse

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("PAGESCAN_CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]


def create_app(store: RecordStore | None = None) -> FastAPI:
    """
    Build the API around a record store. Without one, a store for
    PAGESCAN_DATABASE_URL is created when the app starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "store", None) is None:
            app.state.store = RecordStore.from_url(DATABASE_URL, echo=DATABASE_ECHO)
        app.state.store.create_schema()
        yield
        app.state.store.engine.dispose()

    app = FastAPI(
        title="Page Scan",
        description=(
            "Given a URL, returns its markup version, title, heading counts, internal/external "
            "and broken link counts, and whether it carries a login form. Results are stored "
            "per URL and can be listed, deleted and re-run in bulk."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.store = store

    # middleware stack; outermost runs first on request, last on response
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
        expose_headers=["Content-Length"],
        max_age=12 * 60 * 60,
    )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logging.getLogger(__name__).error("Unhandled error: %s", exc, exc_info=True)
        body = ErrorResponse(detail="An unexpected error occurred.", code="internal_error")
        return JSONResponse(status_code=500, content=body.model_dump())

    app.include_router(router)
    return app


app = create_app()
