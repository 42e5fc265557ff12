import unittest

from timetable_normalizer.colors import PALETTE, cycle_colors, random_color


class TestColors(unittest.TestCase):
    def test_random_color_is_from_palette(self) -> None:
        for _ in range(20):
            self.assertIn(random_color(), PALETTE)

    def test_cycle_colors_wraps_around(self) -> None:
        assign = cycle_colors(["#111", "#222"])
        self.assertEqual([assign() for _ in range(3)], ["#111", "#222", "#111"])

    def test_cycle_colors_rejects_empty_palette(self) -> None:
        with self.assertRaises(ValueError):
            cycle_colors([])


if __name__ == "__main__":
    unittest.main()
