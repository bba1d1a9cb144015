# gopherize/utils.py
import base64
import io
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError, EncodeError, InvalidFormat, UnsupportedFormat

SUPPORTED_FORMATS = ("png", "jpeg")

# Multi-picture JPEGs (phones, stereo cameras) open as MPO; the primary frame is a plain JPEG
FORMAT_ALIASES = {"mpo": "jpeg"}


def decode_image(data: bytes) -> Tuple[Image.Image, str]:
    """
    Decode PNG or JPEG bytes.
    Returns the fully loaded image and its format name ("png" or "jpeg").
    """
    if not data:
        raise DecodeError("empty image payload")
    try:
        img = Image.open(io.BytesIO(data))
        fmt = (img.format or "").lower()
        fmt = FORMAT_ALIASES.get(fmt, fmt)
        if fmt not in SUPPORTED_FORMATS:
            raise UnsupportedFormat(f"unsupported image format: {img.format or 'unknown'}")
        img.load()
    except UnsupportedFormat:
        raise
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"cannot decode image: {exc}") from exc
    return img, fmt


def encode_image(img: Image.Image, fmt: str) -> bytes:
    """Encode to png or jpeg. JPEG has no alpha, so the canvas is flattened to RGB."""
    if fmt not in SUPPORTED_FORMATS:
        raise InvalidFormat(f"invalid format {fmt}")

    buf = io.BytesIO()
    try:
        if fmt == "jpeg":
            if img.mode != "RGB":
                img = img.convert("RGB")
            img.save(buf, format="JPEG", quality=75)
        else:
            img.save(buf, format="PNG")
    except (OSError, ValueError) as exc:
        raise EncodeError(f"failed to encode {fmt}: {exc}") from exc
    return buf.getvalue()


def bytes_to_base64(data: bytes) -> str:
    """Plain base64 (no data URI header), as the Vision API expects."""
    return base64.b64encode(data).decode("ascii")


def media_type_for(fmt: str) -> str:
    return f"image/{fmt}"
