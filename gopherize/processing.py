# gopherize/processing.py
"""
Gopherize pipeline.
Decodes the photo, asks the detector for faces, pastes resized gopher eye and
mouth sprites onto each face and re-encodes in the input format.
"""

import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence, Tuple

from PIL import Image

from .assets import OverlayAssets
from .detection import FaceDetector
from .errors import GopherizeError, LandmarkNotFound
from .logger import console
from .models import FaceLandmarks, LandmarkType, Point
from .utils import decode_image, encode_image, media_type_for


# ==========================
# CONSTANTS
# ==========================

EYE = "eye"
MOUTH = "mouth"

EYE_LANDMARKS = (LandmarkType.LEFT_EYE, LandmarkType.RIGHT_EYE)
MOUTH_LANDMARKS = (LandmarkType.NOSE_TIP, LandmarkType.MOUTH_LEFT, LandmarkType.MOUTH_RIGHT)

# Smooth filter so sprites stay clean at any scale factor
RESAMPLE_FILTER = Image.Resampling.LANCZOS

TRANSPARENT = (0, 0, 0, 0)


# ==========================
# GEOMETRY
# ==========================

def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def overlay_size(a: float, b: float) -> int:
    """Sprite width from the horizontal distance between two landmarks."""
    return round_half_up(abs(a - b))


def centered_anchor(point: Point, size: int) -> Tuple[int, int]:
    """Top-left corner that centres a size x size box on the point."""
    half = size // 2
    return int(point.x) - half, int(point.y) - half


def hanging_anchor(point: Point, width: int) -> Tuple[int, int]:
    """Top-left corner that centres the sprite horizontally below the point."""
    return int(point.x) - width // 2, int(point.y)


# ==========================
# OVERLAY RESIZE / BLEND
# ==========================

def resize_overlay(asset: Image.Image, target_width: int) -> Image.Image:
    """
    Scale a sprite to target_width keeping its aspect ratio.
    A width of 0 gives an empty image; the asset itself is never modified.
    """
    if target_width < 0:
        raise ValueError(f"target width must be >= 0, got {target_width}")
    if target_width == 0:
        return Image.new(asset.mode, (0, 0))

    src_w, src_h = asset.size
    height = max(1, round_half_up(target_width * src_h / src_w))
    return asset.resize((target_width, height), resample=RESAMPLE_FILTER)


def blend_overlay(canvas: Image.Image, sprite: Image.Image, anchor: Tuple[int, int]) -> bool:
    """
    Alpha-composite sprite onto canvas in place with its top-left at anchor.
    Parts hanging off the canvas are clipped. Returns False when nothing of
    the sprite lands on the canvas.
    """
    x, y = anchor
    w, h = sprite.size
    if w == 0 or h == 0:
        return False

    left = max(0, -x)
    top = max(0, -y)
    right = min(w, canvas.width - x)
    bottom = min(h, canvas.height - y)
    if left >= right or top >= bottom:
        return False

    if sprite.mode != "RGBA":
        sprite = sprite.convert("RGBA")
    canvas.alpha_composite(sprite, dest=(x + left, y + top), source=(left, top, right, bottom))
    return True


def new_canvas(source: Image.Image) -> Image.Image:
    """Transparent RGBA canvas of the source's size with the source pasted at (0, 0)."""
    if source.mode not in ("RGB", "RGBA"):
        source = source.convert("RGBA")
    canvas = Image.new("RGBA", source.size, TRANSPARENT)
    canvas.paste(source, (0, 0))
    return canvas


# ==========================
# FACE COMPOSITOR
# ==========================

@dataclass(frozen=True)
class Placement:
    feature: str
    face_index: int
    anchor: Tuple[int, int]
    size: Tuple[int, int]


@dataclass(frozen=True)
class SkippedFace:
    feature: str
    face_index: int
    landmark: str


@dataclass
class CompositeReport:
    placements: List[Placement] = field(default_factory=list)
    skipped: List[SkippedFace] = field(default_factory=list)

    def count(self, feature: str) -> int:
        return sum(1 for p in self.placements if p.feature == feature)


def _landmarks(face: FaceLandmarks, names: Sequence[LandmarkType]) -> List[Point]:
    return [face.get(name) for name in names]


def place_eyes(
    canvas: Image.Image,
    faces: Sequence[FaceLandmarks],
    eye_asset: Image.Image,
    report: CompositeReport,
) -> None:
    for index, face in enumerate(faces):
        try:
            left_eye, right_eye = _landmarks(face, EYE_LANDMARKS)
        except LandmarkNotFound as exc:
            console.log(f"[yellow]Face {index}: no eyes drawn ({exc})[/yellow]")
            report.skipped.append(SkippedFace(EYE, index, exc.name))
            continue

        size = overlay_size(left_eye.x, right_eye.x)
        sprite = resize_overlay(eye_asset, size)
        for point in (left_eye, right_eye):
            anchor = centered_anchor(point, size)
            if blend_overlay(canvas, sprite, anchor):
                report.placements.append(Placement(EYE, index, anchor, sprite.size))


def place_mouths(
    canvas: Image.Image,
    faces: Sequence[FaceLandmarks],
    mouth_asset: Image.Image,
    report: CompositeReport,
) -> None:
    for index, face in enumerate(faces):
        try:
            nose, mouth_left, mouth_right = _landmarks(face, MOUTH_LANDMARKS)
        except LandmarkNotFound as exc:
            console.log(f"[yellow]Face {index}: no mouth drawn ({exc})[/yellow]")
            report.skipped.append(SkippedFace(MOUTH, index, exc.name))
            continue

        size = overlay_size(mouth_right.x, mouth_left.x)
        sprite = resize_overlay(mouth_asset, size)
        anchor = hanging_anchor(nose, sprite.width)
        if blend_overlay(canvas, sprite, anchor):
            report.placements.append(Placement(MOUTH, index, anchor, sprite.size))


def composite_faces(
    canvas: Image.Image,
    faces: Sequence[FaceLandmarks],
    assets: OverlayAssets,
) -> CompositeReport:
    """
    Draw eyes for every face, then mouths for every face, onto canvas.

    A face missing a landmark is skipped for that feature only; other faces
    and the other feature are unaffected.
    """
    report = CompositeReport()
    place_eyes(canvas, faces, assets.eye, report)
    place_mouths(canvas, faces, assets.mouth, report)
    return report


# ==========================
# PIPELINE
# ==========================

class PipelineState(str, Enum):
    RECEIVED = "received"
    DECODED = "decoded"
    DETECTED = "detected"
    COMPOSITED = "composited"
    ENCODED = "encoded"
    DONE = "done"
    FAILED = "failed"


@dataclass
class GopherizeResult:
    content: bytes
    format: str
    size: Tuple[int, int]
    face_count: int
    report: CompositeReport
    history: List[PipelineState]
    elapsed_seconds: float = 0.0

    @property
    def media_type(self) -> str:
        return media_type_for(self.format)

    @property
    def placements(self) -> List[Placement]:
        return self.report.placements

    @property
    def skipped(self) -> List[SkippedFace]:
        return self.report.skipped


class Gopherizer:
    """
    Runs one photo through decode -> detect -> composite -> encode.

    The detector and sprites are handed in already configured; each call
    to run() works on its own canvas, so one instance can serve many
    requests.
    """

    def __init__(self, detector: FaceDetector, assets: OverlayAssets):
        self.detector = detector
        self.assets = assets

    def run(self, image_bytes: bytes) -> GopherizeResult:
        started = time.perf_counter()
        history = [PipelineState.RECEIVED]
        try:
            source, fmt = decode_image(image_bytes)
            history.append(PipelineState.DECODED)

            # Re-encoded so coordinates refer to the decoded raster (no EXIF)
            faces = list(self.detector.detect(encode_image(source, fmt)))
            history.append(PipelineState.DETECTED)

            canvas = new_canvas(source)
            report = composite_faces(canvas, faces, self.assets)
            history.append(PipelineState.COMPOSITED)

            content = encode_image(canvas, fmt)
            history.append(PipelineState.ENCODED)
        except GopherizeError as exc:
            exc.stage = history[-1].value
            history.append(PipelineState.FAILED)
            console.log(f"[red]Gopherize failed after {exc.stage}: {exc}[/red]")
            raise

        history.append(PipelineState.DONE)
        elapsed = time.perf_counter() - started
        console.log(
            f"[green]Gopherized {fmt} {canvas.size[0]}x{canvas.size[1]}: "
            f"{len(faces)} face(s), {report.count(EYE)} eye(s), "
            f"{report.count(MOUTH)} mouth(s) in {elapsed:.2f}s[/green]"
        )
        return GopherizeResult(
            content=content,
            format=fmt,
            size=canvas.size,
            face_count=len(faces),
            report=report,
            history=history,
            elapsed_seconds=elapsed,
        )
