# gopherize/metrics.py
"""
Prometheus metrics and /metrics endpoint for the FastAPI app.
"""

from fastapi import APIRouter, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

router = APIRouter()

# Count gopherize requests by where the photo came from
GOPHERIZE_REQUESTS = Counter(
    "gopherize_requests_total",
    "Total number of gopherize requests",
    ["source"],  # url, upload
)

# Count failed requests by error class
GOPHERIZE_FAILURES = Counter(
    "gopherize_failures_total",
    "Total number of failed gopherize requests by error",
    ["error"],
)

# Time spent in the pipeline (decode, detect, composite, encode)
PIPELINE_SECONDS = Histogram(
    "gopherize_pipeline_seconds",
    "Time spent gopherizing one image in seconds",
)

FACES_DETECTED = Histogram(
    "gopherize_faces_detected",
    "Number of faces returned by the detection service per image",
    buckets=(0, 1, 2, 3, 5, 8, 13, 21),
)

OVERLAYS_DRAWN = Counter(
    "gopherize_overlays_drawn_total",
    "Total number of sprites drawn by feature",
    ["feature"],  # eye, mouth
)

FACES_SKIPPED = Counter(
    "gopherize_faces_skipped_total",
    "Faces left undecorated for a feature because a landmark was missing",
    ["feature"],
)


def record_result(result) -> None:
    """Feed a GopherizeResult into the counters."""
    PIPELINE_SECONDS.observe(result.elapsed_seconds)
    FACES_DETECTED.observe(result.face_count)
    for placement in result.placements:
        OVERLAYS_DRAWN.labels(feature=placement.feature).inc()
    for skipped in result.skipped:
        FACES_SKIPPED.labels(feature=skipped.feature).inc()


@router.get("/metrics")
def metrics() -> Response:
    """
    Expose Prometheus metrics in text format.
    """
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
