# signature/models/signature_enums.py
from __future__ import annotations
from enum import Enum


class Corner(str, Enum):
    """Fixed-corner placement of the signature."""
    TOP_LEFT = "TL"
    TOP_RIGHT = "TR"
    BOTTOM_LEFT = "BL"
    BOTTOM_RIGHT = "BR"


class PageSelection(str, Enum):
    """Which pages of each target document receive the signature."""
    ALL = "all"
    FIRST = "first"
    LAST = "last"


class AssetEncoding(str, Enum):
    """Raster encodings that can be embedded into a page."""
    PNG = "png"
    JPEG = "jpeg"

    @classmethod
    def parse(cls, value: str) -> "AssetEncoding":
        """Accepts MIME types ("image/png") and format names ("JPG", "jpeg")."""
        v = (value or "").strip().lower()
        if v.startswith("image/"):
            v = v[len("image/"):]
        if v == "jpg":
            v = "jpeg"
        return cls(v)
