from __future__ import annotations

import unittest

from assembly.tests.builders import make_image
from signature.logic.placement_mapper import (
    capture_drag,
    interactive_spec,
    map_corner,
    place_on_page,
    plan_placements,
    preview_footprint,
    resolve_target_pages,
)
from signature.models.signature_asset import SignatureAsset
from signature.models.signature_enums import Corner, PageSelection
from signature.models.signature_placement import PlacementSpec


class TestPageSelection(unittest.TestCase):
    def test_rules(self) -> None:
        self.assertEqual(resolve_target_pages(PageSelection.ALL, 3), [0, 1, 2])
        self.assertEqual(resolve_target_pages(PageSelection.FIRST, 3), [0])
        self.assertEqual(resolve_target_pages(PageSelection.LAST, 3), [2])

    def test_empty_document_is_a_no_op(self) -> None:
        for rule in PageSelection:
            self.assertEqual(resolve_target_pages(rule, 0), [])


class TestCornerMapping(unittest.TestCase):
    def test_each_corner(self) -> None:
        fp, page, m = (50.0, 20.0), (600.0, 800.0), 20.0
        self.assertEqual(map_corner(Corner.TOP_LEFT, m, fp, page), (20.0, 760.0))
        self.assertEqual(map_corner(Corner.TOP_RIGHT, m, fp, page), (530.0, 760.0))
        self.assertEqual(map_corner(Corner.BOTTOM_LEFT, m, fp, page), (20.0, 20.0))
        self.assertEqual(map_corner(Corner.BOTTOM_RIGHT, m, fp, page), (530.0, 20.0))

    def test_recomputed_per_page_size(self) -> None:
        spec = PlacementSpec.fixed_corner(Corner.TOP_RIGHT, margin=10, scale=0.5)
        small = place_on_page(spec, (100, 40), (200, 300))
        large = place_on_page(spec, (100, 40), (1000, 2000))
        self.assertEqual((small.x, small.y), (140.0, 270.0))
        self.assertEqual((large.x, large.y), (940.0, 1970.0))
        self.assertEqual((small.width, small.height), (large.width, large.height))


class TestInteractiveMapping(unittest.TestCase):
    def test_half_fractions_anchor_at_page_centre(self) -> None:
        aw, ah = 100.0, 40.0
        scale = 0.5
        for wt, ht in ((612.0, 792.0), (842.0, 595.0), (300.0, 300.0)):
            # drag position already offset by half the footprint
            spec = PlacementSpec.interactive(0.5, 0.5, scale=scale)
            rect = place_on_page(spec, (aw, ah), (wt, ht))
            self.assertAlmostEqual(rect.x, wt / 2)
            self.assertAlmostEqual(rect.y, ht / 2 - ah * scale)

    def test_vertical_flip(self) -> None:
        rect = place_on_page(PlacementSpec.interactive(0.0, 0.0, scale=1.0), (10, 10), (100, 200))
        self.assertEqual((rect.x, rect.y), (0.0, 190.0))

    def test_plan_uses_page_selection(self) -> None:
        asset = SignatureAsset.from_bytes(make_image(200, 100), "image/png")
        spec = PlacementSpec.interactive(0.25, 0.25, scale=0.2, pages=PageSelection.LAST)
        rects = plan_placements(spec, asset, [(600, 800), (300, 400)])
        self.assertEqual(len(rects), 1)
        self.assertEqual(rects[0].page_index, 1)
        self.assertEqual((rects[0].width, rects[0].height), (40.0, 20.0))
        self.assertAlmostEqual(rects[0].x, 75.0)
        self.assertAlmostEqual(rects[0].y, 280.0)

    def test_fractions_out_of_range_rejected(self) -> None:
        with self.assertRaises(ValueError):
            PlacementSpec.interactive(1.2, 0.5)
        with self.assertRaises(ValueError):
            PlacementSpec(scale=0)


class TestPreviewCapture(unittest.TestCase):
    def setUp(self) -> None:
        self.asset = SignatureAsset.from_bytes(make_image(200, 100), "png")

    def test_footprint_follows_preview_ratio(self) -> None:
        # page 600 pt wide rendered 300 px wide: 200 px * 0.2 = 40 pt -> 20 px
        self.assertEqual(preview_footprint(self.asset, 0.2, (300, 400), (600, 800)), (20.0, 10.0))

    def test_drag_is_centred_and_clamped(self) -> None:
        self.assertEqual(capture_drag((100, 100), (300, 400), (20, 10)), (90.0, 95.0))
        self.assertEqual(capture_drag((-50, 1000), (300, 400), (20, 10)), (0.0, 390.0))
        self.assertEqual(capture_drag((299, 0), (300, 400), (20, 10)), (280.0, 0.0))

    def test_interactive_spec_from_gesture(self) -> None:
        spec = interactive_spec((150, 200), (300, 400), self.asset, (600, 800), scale=0.2)
        self.assertTrue(spec.is_interactive)
        self.assertAlmostEqual(spec.position[0], 140 / 300)
        self.assertAlmostEqual(spec.position[1], 195 / 400)
        self.assertEqual(spec.scale, 0.2)


if __name__ == "__main__":
    unittest.main()
