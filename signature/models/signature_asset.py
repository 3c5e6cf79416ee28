from __future__ import annotations
from dataclasses import dataclass
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from core.exceptions.errors import EmbedFailure
from .signature_enums import AssetEncoding


@dataclass(frozen=True)
class SignatureAsset:
    """Signature raster: bytes, declared encoding and intrinsic pixel size."""
    data: bytes
    encoding: AssetEncoding
    width: int
    height: int

    @classmethod
    def from_bytes(cls, data: bytes, declared_encoding: str) -> "SignatureAsset":
        """
        Validate the declared encoding (PNG/JPEG only) and read the pixel size.
        Raises EmbedFailure for any other encoding or undecodable bytes.
        """
        try:
            encoding = AssetEncoding.parse(declared_encoding)
        except ValueError as exc:
            raise EmbedFailure(f"signature must be a PNG or JPEG image, got '{declared_encoding}'") from exc
        try:
            with Image.open(BytesIO(data)) as img:
                width, height = img.size
                # header-only reads miss truncated pixel data
                img.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise EmbedFailure(f"signature image cannot be decoded ({exc})") from exc
        if width <= 0 or height <= 0:
            raise EmbedFailure("signature image has no pixels")
        return cls(data=data, encoding=encoding, width=width, height=height)

    def footprint(self, scale: float) -> tuple[float, float]:
        """Size on the page in points for *scale* points per pixel."""
        return (self.width * scale, self.height * scale)
