import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from eventdrop.api import admin, analytics, drafts, extract, internal, submissions
from eventdrop.config import settings
from eventdrop.core.env import load_env
from eventdrop.core.errors import EventDropError
from eventdrop.db.session import init_db
from eventdrop.logging import configure_logging
from eventdrop.services.storage.poster_store import POSTER_URL_PREFIX

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    load_env()
    configure_logging()
    init_db()
    yield


app = FastAPI(title="eventdrop", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EventDropError)
async def handle_eventdrop_error(request: Request, exc: EventDropError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": describe_validation_error(exc)})


def describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid request"
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "header")]
    if not loc:
        return "Invalid request"
    return f"Invalid {loc[-1]}"


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(submissions.router)
app.include_router(extract.router)
app.include_router(analytics.router)
app.include_router(drafts.router)
app.include_router(admin.router)
app.include_router(internal.router)

Path(settings.POSTER_STORAGE_DIR).mkdir(parents=True, exist_ok=True)
app.mount(POSTER_URL_PREFIX, StaticFiles(directory=settings.POSTER_STORAGE_DIR), name="posters")


if __name__ == "__main__":
    uvicorn.run("eventdrop.main:app", host="0.0.0.0", port=8000, reload=settings.ENV == "development")
