import logging
import os
import sys
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import get_settings
from .db import Base, engine
from .errors import CvTailorError, MalformedJson, NoJsonFound
from . import models  # noqa: F401  (register tables on Base)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    stream=sys.stdout,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)
http_logger = logging.getLogger("cvtailor.http")

app = FastAPI(title="CV Tailor Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Cv-Id", "Content-Disposition"],
)

os.makedirs(settings.files_dir, exist_ok=True)
app.mount("/files", StaticFiles(directory=settings.files_dir), name="files")

Base.metadata.create_all(bind=engine)


def client_ip(request: Request) -> str:
    return (
        request.headers.get("x-forwarded-for")
        or request.headers.get("x-real-ip")
        or (request.client.host if request.client else "-")
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    http_logger.info(
        f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.2f}ms {client_ip(request)}"
    )
    return response


@app.exception_handler(CvTailorError)
async def cv_tailor_error_handler(request: Request, exc: CvTailorError):
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} on {request.method} {request.url.path}: {exc.detail}")
    content = {"error": exc.kind, "detail": exc.detail}
    # Completion text the caller needs to diagnose or repair an unusable reply
    if isinstance(exc, (NoJsonFound, MalformedJson)):
        content["raw"] = exc.raw
    return JSONResponse(status_code=exc.status_code, content=content)


@app.get("/health")
def health():
    return {"ok": True}

from .api.routes_profiles import router as profiles_router
from .api.routes_cvs import router as cvs_router
app.include_router(profiles_router)
app.include_router(cvs_router)
