import math
import unittest

from pdfstencil.coords import (
    ContainerSize,
    NormalizedRect,
    PixelRect,
    Point,
    apply_drag,
    container_ready,
    is_noop_drag,
    rect_from_drag,
    to_normalized,
    to_pixels,
)


class TestNormalize(unittest.TestCase):
    def test_to_normalized(self):
        r = to_normalized(PixelRect(60, 80, 180, 40), ContainerSize(600, 800))
        self.assertAlmostEqual(r.x, 0.1)
        self.assertAlmostEqual(r.y, 0.1)
        self.assertAlmostEqual(r.width, 0.3)
        self.assertAlmostEqual(r.height, 0.05)

    def test_round_trip(self):
        cases = [
            (PixelRect(0, 0, 10, 10), ContainerSize(612, 792)),
            (PixelRect(13.5, 700.25, 120.75, 33.1), ContainerSize(918, 1188)),
            (PixelRect(1, 2, 3, 4), ContainerSize(7.3, 9.9)),
        ]
        for rect, size in cases:
            back = to_pixels(to_normalized(rect, size), size)
            for a, b in zip(back, rect):
                self.assertTrue(math.isclose(a, b, rel_tol=1e-6, abs_tol=1e-9), (rect, back))

    def test_to_pixels_scales_with_container(self):
        norm = NormalizedRect(0.25, 0.5, 0.5, 0.25)
        self.assertEqual(to_pixels(norm, ContainerSize(400, 200)), PixelRect(100, 100, 200, 50))
        self.assertEqual(to_pixels(norm, ContainerSize(800, 400)), PixelRect(200, 200, 400, 100))

    def test_container_ready(self):
        self.assertTrue(container_ready(ContainerSize(10, 10)))
        self.assertFalse(container_ready(ContainerSize(0, 10)))
        self.assertFalse(container_ready(ContainerSize(10, 0)))


class TestDrag(unittest.TestCase):
    def test_rect_from_drag_any_direction(self):
        self.assertEqual(rect_from_drag(Point(50, 40), Point(10, 100)), PixelRect(10, 40, 40, 60))

    def test_noop_drag(self):
        self.assertTrue(is_noop_drag(PixelRect(0, 0, 8, 50)))
        self.assertTrue(is_noop_drag(PixelRect(0, 0, 50, 3)))
        self.assertFalse(is_noop_drag(PixelRect(0, 0, 9, 9)))

    def test_move_is_clamped_inside_container(self):
        size = ContainerSize(100, 100)
        moved = apply_drag(PixelRect(10, 10, 20, 20), "move", 200, -50, size)
        self.assertEqual(moved, PixelRect(80, 0, 20, 20))

    def test_resize_keeps_minimum(self):
        size = ContainerSize(100, 100)
        shrunk = apply_drag(PixelRect(10, 10, 20, 20), "se", -50, -50, size)
        self.assertEqual(shrunk, PixelRect(10, 10, 8, 8))

    def test_nw_handle_moves_origin(self):
        size = ContainerSize(100, 100)
        r = apply_drag(PixelRect(20, 20, 40, 40), "nw", 5, 10, size)
        self.assertEqual(r, PixelRect(25, 30, 35, 30))


if __name__ == "__main__":
    unittest.main()
