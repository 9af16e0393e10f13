import re
import unittest

from coursehours.colors import assign_module_colors, color_for_module, css_color_to_rgb


class TestModuleColors(unittest.TestCase):
    def test_known_hash_values(self) -> None:
        self.assertEqual(color_for_module("A"), "hsl(65, 50%, 25%)")
        self.assertEqual(color_for_module("AB"), "hsl(281, 50%, 25%)")

    def test_color_is_stable_and_well_formed(self) -> None:
        label = "SAe 3.OSC.03 (apprentice)"
        self.assertEqual(color_for_module(label), color_for_module(label))
        self.assertRegex(color_for_module(label), re.compile(r"^hsl\(-?\d{1,3}, 50%, 25%\)$"))

    def test_assign_keeps_existing_colors(self) -> None:
        colors = assign_module_colors(["R1.01 (standard)", "R2.01 (standard)"], {"R1.01 (standard)": "#000000"})
        self.assertEqual(colors["R1.01 (standard)"], "#000000")
        self.assertEqual(colors["R2.01 (standard)"], color_for_module("R2.01 (standard)"))

    def test_css_color_to_rgb(self) -> None:
        self.assertEqual(css_color_to_rgb("#ff0000"), (1.0, 0.0, 0.0))
        r, g, b = css_color_to_rgb("hsl(0, 100%, 50%)")
        self.assertAlmostEqual(r, 1.0)
        self.assertAlmostEqual(g, 0.0)
        self.assertAlmostEqual(b, 0.0)
        self.assertIsNotNone(css_color_to_rgb("hsl(-120, 50%, 25%)"))
        self.assertIsNone(css_color_to_rgb("blue"))


if __name__ == "__main__":
    unittest.main()
