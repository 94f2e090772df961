"""Shared Slot Albums - FastAPI Entry Point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .application.errors import AlbumError
from .config import LOG_LEVEL, ROOT_PATH
from .database import create_connection, init_db
from .middleware import IdentityMiddleware

# Import routers
from .routes.albums import router as albums_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup: runs before the application starts accepting requests
    db = create_connection()
    try:
        init_db(db)
    finally:
        db.close()
    logger.info("Album schema ready")
    yield


app = FastAPI(title="Shared Slot Albums", lifespan=lifespan, root_path=ROOT_PATH)

app.add_middleware(IdentityMiddleware)


@app.exception_handler(AlbumError)
async def album_error_handler(request: Request, exc: AlbumError):
    """Translate domain errors into JSON responses."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code}
    )


@app.get("/health")
def health():
    return {"status": "ok"}


# Include routers
app.include_router(albums_router)
