from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from app.core.errors import register_exception_handlers
from app.core.logging_config import configure_logging
from app.core.settings import get_settings
from app.db.seed import seed_database
from app.db.session import SessionLocal, engine
from app.models import Base
from app.routers.auth import router as auth_router
from app.routers.books import router as books_router
from app.routers.reviews import router as reviews_router
from app.routers.users import router as users_router

settings = get_settings()
logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    Base.metadata.create_all(bind=engine)
    if settings.seed_database:
        with SessionLocal() as session:
            seed_database(session)
    logger.info("%s started", settings.title)
    yield


app = FastAPI(title=settings.title, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


@app.get("/health")
def health():
    return {"success": True, "message": "Book Review API is running"}


app.include_router(auth_router)
app.include_router(books_router)
app.include_router(reviews_router)
app.include_router(users_router)
