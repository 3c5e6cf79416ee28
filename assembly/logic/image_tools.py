"""
Raster helpers (Pillow):
- probe encoding and pixel size
- optional pre-compression: cap the long edge, re-encode as JPEG
"""
from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from core.exceptions.errors import CorruptSource

SUPPORTED_ENCODINGS = ("JPEG", "PNG")


@dataclass(frozen=True)
class ImageInfo:
    encoding: str        # Pillow format name, e.g. "PNG"
    width: int
    height: int


def probe_image(data: bytes, *, name: str = "image") -> ImageInfo:
    """Read encoding and pixel dimensions; CorruptSource if Pillow cannot decode it."""
    try:
        with Image.open(BytesIO(data)) as img:
            img.verify()
        # verify() leaves the image unusable, size needs a fresh handle
        with Image.open(BytesIO(data)) as img:
            return ImageInfo(encoding=str(img.format or "").upper(), width=img.width, height=img.height)
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise CorruptSource(f"'{name}' is not a decodable image ({exc})") from exc


def fit_within(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """Scale (width, height) so the long edge is at most *max_dimension*, keeping aspect."""
    if max_dimension <= 0 or (width <= max_dimension and height <= max_dimension):
        return width, height
    if width > height:
        return max_dimension, max(1, round(height * max_dimension / width))
    return max(1, round(width * max_dimension / height)), max_dimension


def compress_image(data: bytes, *, max_dimension: int = 2000, quality: int = 70) -> bytes:
    """
    Down-sample to *max_dimension* on the long edge and re-encode as JPEG.
    Transparent pixels are flattened onto white.
    """
    with Image.open(BytesIO(data)) as img:
        img.load()
        target = fit_within(img.width, img.height, max_dimension)
        if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
            rgba = img.convert("RGBA")
            flat = Image.new("RGB", rgba.size, (255, 255, 255))
            flat.paste(rgba, mask=rgba.getchannel("A"))
        else:
            flat = img.convert("RGB")
        if flat.size != target:
            flat = flat.resize(target, Image.Resampling.LANCZOS)
        buf = BytesIO()
        flat.save(buf, format="JPEG", quality=int(quality), optimize=True)
        return buf.getvalue()
