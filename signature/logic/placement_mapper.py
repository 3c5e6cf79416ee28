"""
Placement geometry.

Preview space: pixels of the scaled on-screen render, origin top-left, y down.
Page space:    PDF points of one page, origin bottom-left, y up.

Interactive placements are stored as fractions of the preview and re-applied to
each target page's size; the asset footprint (intrinsic size x scale) is the
same on every page, so pages of a different size show the signature at a
different relative size. Fixed-corner placements are recomputed from each
page's own size. No clamping happens in page space.
"""
from __future__ import annotations

from typing import List, Sequence, Tuple

from ..models.signature_asset import SignatureAsset
from ..models.signature_enums import Corner, PageSelection
from ..models.signature_placement import PlacementRect, PlacementSpec

Size = Tuple[float, float]


# --------------------------------------------------------------------------- #
#  Page selection                                                             #
# --------------------------------------------------------------------------- #

def resolve_target_pages(selection: PageSelection, page_count: int) -> List[int]:
    """ALL -> every page; FIRST/LAST -> that one page; nothing for an empty document."""
    if page_count <= 0:
        return []
    if selection == PageSelection.FIRST:
        return [0]
    if selection == PageSelection.LAST:
        return [page_count - 1]
    return list(range(page_count))


# --------------------------------------------------------------------------- #
#  Page-space mapping                                                         #
# --------------------------------------------------------------------------- #

def map_interactive(fx: float, fy: float, footprint: Size, page_size: Size) -> Tuple[float, float]:
    aw, ah = footprint
    wt, ht = page_size
    px = fx * wt
    py = ht - fy * ht - ah
    return px, py


def map_corner(corner: Corner, margin: float, footprint: Size, page_size: Size) -> Tuple[float, float]:
    aw, ah = footprint
    wt, ht = page_size
    if corner == Corner.TOP_LEFT:
        return margin, ht - ah - margin
    if corner == Corner.TOP_RIGHT:
        return wt - aw - margin, ht - ah - margin
    if corner == Corner.BOTTOM_LEFT:
        return margin, margin
    return wt - aw - margin, margin


def place_on_page(spec: PlacementSpec, asset_size: Size, page_size: Size,
                  page_index: int = 0) -> PlacementRect:
    """Draw rectangle for one target page."""
    footprint = (asset_size[0] * spec.scale, asset_size[1] * spec.scale)
    if spec.position is not None:
        x, y = map_interactive(spec.position[0], spec.position[1], footprint, page_size)
    else:
        x, y = map_corner(spec.corner, spec.margin, footprint, page_size)
    return PlacementRect(page_index=page_index, x=x, y=y, width=footprint[0], height=footprint[1])


def plan_placements(spec: PlacementSpec, asset: SignatureAsset,
                    page_sizes: Sequence[Size]) -> List[PlacementRect]:
    """Rectangles for every page of one document picked by the page selection rule."""
    asset_size = (float(asset.width), float(asset.height))
    return [
        place_on_page(spec, asset_size, page_sizes[i], page_index=i)
        for i in resolve_target_pages(spec.page_selection, len(page_sizes))
    ]


# --------------------------------------------------------------------------- #
#  Preview helpers (interactive capture)                                      #
# --------------------------------------------------------------------------- #

def preview_footprint(asset: SignatureAsset, scale: float, preview_size: Size,
                      reference_page_size: Size) -> Size:
    """
    Size of the signature overlay in preview pixels so that it matches the
    page-space footprint on the reference page.
    """
    ratio = preview_size[0] / reference_page_size[0]
    width = asset.width * scale * ratio
    return width, width * (asset.height / asset.width)


def clamp_to_preview(x: float, y: float, footprint: Size, preview_size: Size) -> Tuple[float, float]:
    """Keep the whole footprint inside [0, W] x [0, H]."""
    w, h = preview_size
    fw, fh = footprint
    x = max(0.0, min(x, w - fw))
    y = max(0.0, min(y, h - fh))
    return x, y


def capture_drag(pointer: Size, preview_size: Size, footprint: Size) -> Tuple[float, float]:
    """
    Top-left corner of the footprint for a pointer position: the footprint is
    centred on the pointer, then clamped into the preview.
    """
    x = pointer[0] - footprint[0] / 2
    y = pointer[1] - footprint[1] / 2
    return clamp_to_preview(x, y, footprint, preview_size)


def to_fractions(x: float, y: float, preview_size: Size) -> Tuple[float, float]:
    w, h = preview_size
    if w <= 0 or h <= 0:
        raise ValueError("preview size must be positive")
    return x / w, y / h


def interactive_spec(pointer: Size, preview_size: Size, asset: SignatureAsset,
                     reference_page_size: Size, *, scale: float,
                     pages: PageSelection = PageSelection.ALL) -> PlacementSpec:
    """Commit a drag gesture (final pointer position) into a PlacementSpec."""
    footprint = preview_footprint(asset, scale, preview_size, reference_page_size)
    x, y = capture_drag(pointer, preview_size, footprint)
    fx, fy = to_fractions(x, y, preview_size)
    # float noise at the clamp boundary
    fx = min(max(fx, 0.0), 1.0)
    fy = min(max(fy, 0.0), 1.0)
    return PlacementSpec.interactive(fx, fy, scale=scale, pages=pages)
