from __future__ import annotations

import io
from typing import Dict, Optional, Tuple

import pytest
from PIL import Image

from gopherize.assets import OverlayAssets
from gopherize.models import FaceLandmarks, LandmarkType, Point

EYE_COLOR = (255, 0, 0, 255)
MOUTH_COLOR = (0, 0, 255, 255)
SOURCE_COLOR = (0, 200, 0)


def solid_sprite(size: Tuple[int, int], color) -> Image.Image:
    return Image.new("RGBA", size, color)


def make_face(**points: Optional[Tuple[float, float]]) -> FaceLandmarks:
    """make_face(LEFT_EYE=(80, 90), ...) with None or omitted meaning not detected."""
    landmarks: Dict[LandmarkType, Point] = {}
    for name, xy in points.items():
        if xy is not None:
            landmarks[LandmarkType(name)] = Point(x=xy[0], y=xy[1])
    return FaceLandmarks(landmarks=landmarks)


def image_bytes(fmt: str = "PNG", size=(200, 200), color=SOURCE_COLOR) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def eye_sprite() -> Image.Image:
    # 2:1 aspect so derived heights are easy to check
    return solid_sprite((20, 10), EYE_COLOR)


@pytest.fixture
def mouth_sprite() -> Image.Image:
    return solid_sprite((30, 15), MOUTH_COLOR)


@pytest.fixture
def assets(eye_sprite, mouth_sprite) -> OverlayAssets:
    return OverlayAssets(eye=eye_sprite, mouth=mouth_sprite)


@pytest.fixture
def asset_dir(tmp_path, eye_sprite, mouth_sprite):
    eye_sprite.save(tmp_path / "eye.png")
    mouth_sprite.save(tmp_path / "mouth.png")
    return tmp_path


@pytest.fixture
def full_face() -> FaceLandmarks:
    return make_face(
        LEFT_EYE=(80, 90),
        RIGHT_EYE=(120, 90),
        NOSE_TIP=(100, 120),
        MOUTH_LEFT=(85, 140),
        MOUTH_RIGHT=(115, 140),
    )


def mpo_bytes(size=(200, 200), color=SOURCE_COLOR) -> bytes:
    """Two-frame multi-picture JPEG, as written by phones and stereo cameras."""
    buf = io.BytesIO()
    first = Image.new("RGB", size, color)
    second = Image.new("RGB", size, (10, 10, 10))
    first.save(buf, format="MPO", save_all=True, append_images=[second])
    return buf.getvalue()
