import unittest

from invoice_pdf.theme import (
    BLACK,
    DEFAULT_ACCENT,
    DEFAULT_FONT_FAMILY,
    DEFAULT_TEXT,
    darken,
    lighten,
    lightness,
    parse_hex_color,
    resolve_font_family,
    resolve_theme,
    to_rgb255,
)


class HexColorTests(unittest.TestCase):
    def test_parses_with_and_without_hash(self) -> None:
        self.assertEqual(parse_hex_color("#ff0000", BLACK), (1.0, 0.0, 0.0))
        self.assertEqual(parse_hex_color("00ff00", BLACK), (0.0, 1.0, 0.0))

    def test_accepts_settings_color_object(self) -> None:
        self.assertEqual(parse_hex_color({"hex": "#0000ff"}, BLACK), (0.0, 0.0, 1.0))

    def test_falls_back_on_bad_input(self) -> None:
        fallback = (0.5, 0.5, 0.5)
        for value in (None, "", "#fff", "zzzzzz", "#1234567", 123, {"alpha": 1}):
            with self.subTest(value=value):
                self.assertEqual(parse_hex_color(value, fallback), fallback)


class ThemeTests(unittest.TestCase):
    def test_defaults(self) -> None:
        theme = resolve_theme()
        self.assertEqual(theme.accent, DEFAULT_ACCENT)
        self.assertEqual(theme.text, DEFAULT_TEXT)
        self.assertEqual(theme.font_family, DEFAULT_FONT_FAMILY)

    def test_derived_colors_are_ordered_by_lightness(self) -> None:
        theme = resolve_theme(text="#334155")
        self.assertLess(lightness(theme.heading), lightness(theme.text))
        self.assertLess(lightness(theme.text), lightness(theme.muted))
        self.assertLess(lightness(theme.border), lightness(theme.header_line))
        self.assertLess(lightness(theme.header_line), lightness(theme.table_header_bg))
        self.assertLess(lightness(theme.table_header_bg), lightness(theme.table_alt_bg))
        self.assertLess(lightness(theme.accent), lightness(theme.totals_highlight))

    def test_explicit_secondary_drives_table_colors(self) -> None:
        theme = resolve_theme(secondary="#000000")
        self.assertEqual(theme.border, lighten(BLACK, 0.45))

    def test_lighten_and_darken_stay_in_range(self) -> None:
        self.assertEqual(lighten((0.2, 0.4, 0.6), 1.0), (1.0, 1.0, 1.0))
        self.assertEqual(darken((0.2, 0.4, 0.6), 1.5), (0.0, 0.0, 0.0))

    def test_to_rgb255(self) -> None:
        self.assertEqual(to_rgb255((1.0, 0.0, 0.5)), (255, 0, 128))

    def test_font_family_aliases(self) -> None:
        self.assertEqual(resolve_font_family("Arial"), "helvetica")
        self.assertEqual(resolve_font_family("Times New Roman"), "times")
        self.assertEqual(resolve_font_family("Courier"), "courier")
        self.assertEqual(resolve_font_family("Comic Sans"), DEFAULT_FONT_FAMILY)
        self.assertEqual(resolve_font_family(None), DEFAULT_FONT_FAMILY)


if __name__ == "__main__":
    unittest.main()
