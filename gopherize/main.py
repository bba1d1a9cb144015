# gopherize/main.py
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Optional
from urllib.parse import urlparse

import requests
from fastapi import Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, Response

from . import __version__
from .assets import OverlayAssets, load_overlay_assets
from .config import get_settings, load_api_key
from .detection import FaceDetector, VisionAPIDetector
from .errors import (
    DecodeError,
    GopherizeError,
    ImageFetchError,
    ImageFetchUnavailable,
    ServiceError,
    ServiceUnavailable,
)
from .logger import console
from .metrics import router as metrics_router, GOPHERIZE_FAILURES, GOPHERIZE_REQUESTS, record_result
from .processing import Gopherizer


@lru_cache(maxsize=1)
def get_assets() -> OverlayAssets:
    return load_overlay_assets(get_settings().asset_dir)


@lru_cache(maxsize=1)
def get_detector() -> FaceDetector:
    settings = get_settings()
    return VisionAPIDetector(
        api_key=load_api_key(settings),
        endpoint=settings.vision_endpoint,
        timeout=settings.detect_timeout_seconds,
        max_results=settings.max_results,
    )


def resolve_gopherizer(app: FastAPI) -> Gopherizer:
    """Build the pipeline on demand, honouring dependency overrides."""
    overrides = app.dependency_overrides
    detector = overrides.get(get_detector, get_detector)()
    assets = overrides.get(get_assets, get_assets)()
    return Gopherizer(detector, assets)


def get_gopherizer(
    detector: FaceDetector = Depends(get_detector),
    assets: OverlayAssets = Depends(get_assets),
) -> Gopherizer:
    return Gopherizer(detector, assets)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Missing sprites or credentials stop the service at boot
    if get_assets not in app.dependency_overrides:
        get_assets()
    if get_detector not in app.dependency_overrides:
        get_detector()
    yield


app = FastAPI(title="Gopherize API", version=__version__, lifespan=lifespan)
app.add_middleware(GZipMiddleware, minimum_size=1000)

# Include /metrics endpoint
app.include_router(metrics_router)


@app.exception_handler(GopherizeError)
async def gopherize_error_handler(request: Request, exc: GopherizeError) -> JSONResponse:
    console.log(f"[red]{type(exc).__name__} while serving {request.url.path}: {exc}[/red]")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def status_for(exc: GopherizeError, source: str) -> int:
    """HTTP status for a failed request; decode failures depend on who sent the bytes."""
    if isinstance(exc, DecodeError):
        return 502 if source == "url" else 400
    if isinstance(exc, (ServiceUnavailable, ImageFetchUnavailable)):
        return 504
    if isinstance(exc, (ServiceError, ImageFetchError)):
        return 502
    return 500


def fetch_image(url: str, timeout: float) -> bytes:
    """Download the photo behind url."""
    try:
        resp = requests.get(url, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        raise ImageFetchUnavailable(f"failed to get image: {exc}") from exc
    if resp.status_code >= 400:
        raise ImageFetchError(f"image host returned HTTP {resp.status_code}")
    return resp.content


def _gopherize(gopherizer: Gopherizer, data: bytes, source: str) -> Response:
    try:
        result = gopherizer.run(data)
    except GopherizeError as exc:
        GOPHERIZE_FAILURES.labels(error=type(exc).__name__).inc()
        raise HTTPException(status_code=status_for(exc, source), detail=str(exc)) from exc

    record_result(result)
    return Response(content=result.content, media_type=result.media_type)


@app.get("/")
def read_root(
    request: Request,
    url: Optional[str] = Query(None, description="Image URL to fetch and gopherize"),
):
    if not url:
        return {"status": "ok", "message": "Gopherize API"}

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise HTTPException(status_code=400, detail="Invalid image URL provided")

    GOPHERIZE_REQUESTS.labels(source="url").inc()
    gopherizer = resolve_gopherizer(request.app)
    console.log(f"[blue]Fetching {url}[/blue]")
    try:
        data = fetch_image(url, get_settings().fetch_timeout_seconds)
    except ImageFetchError as exc:
        console.log(f"[red]{exc}[/red]")
        GOPHERIZE_FAILURES.labels(error=type(exc).__name__).inc()
        raise HTTPException(status_code=status_for(exc, "url"), detail=str(exc)) from exc

    return _gopherize(gopherizer, data, source="url")


@app.post("/")
def upload_image(
    image: Optional[UploadFile] = File(None),
    gopherizer: Gopherizer = Depends(get_gopherizer),
):
    """
    Gopherize an uploaded photo.

    Multipart body with a PNG or JPEG in the "image" field; the response is
    the decorated photo in the same format.
    """
    if image is None:
        raise HTTPException(status_code=400, detail="image file required")
    GOPHERIZE_REQUESTS.labels(source="upload").inc()

    console.log(f"[blue]Received upload {image.filename}[/blue]")
    data = image.file.read()
    return _gopherize(gopherizer, data, source="upload")
