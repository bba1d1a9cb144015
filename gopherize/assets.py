# gopherize/assets.py
"""
Loading of the gopher overlay sprites.

Both sprites are read once, converted to RGBA and then only ever read from:
resizing always produces a new image, so a loaded ``OverlayAssets`` can be
shared between concurrent requests.
"""

import os
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from .errors import AssetLoadError
from .logger import console

EYE_ASSET = "eye.png"
MOUTH_ASSET = "mouth.png"


@dataclass(frozen=True)
class OverlayAssets:
    eye: Image.Image
    mouth: Image.Image


def load_sprite(path: str) -> Image.Image:
    """Load one PNG sprite as RGBA."""
    if not os.path.isfile(path):
        raise AssetLoadError(f"overlay asset not found: {path}")
    try:
        with Image.open(path) as img:
            if img.format != "PNG":
                raise AssetLoadError(f"overlay asset is not a PNG: {path}")
            sprite = img.convert("RGBA")
    except (UnidentifiedImageError, OSError) as exc:
        raise AssetLoadError(f"failed to decode overlay asset {path}: {exc}") from exc
    if sprite.width == 0 or sprite.height == 0:
        raise AssetLoadError(f"overlay asset is empty: {path}")
    return sprite


def load_overlay_assets(asset_dir: str) -> OverlayAssets:
    assets = OverlayAssets(
        eye=load_sprite(os.path.join(asset_dir, EYE_ASSET)),
        mouth=load_sprite(os.path.join(asset_dir, MOUTH_ASSET)),
    )
    console.log(
        f"[green]Loaded overlay assets from {asset_dir} "
        f"(eye {assets.eye.size}, mouth {assets.mouth.size})[/green]"
    )
    return assets
