import unittest

from pdfstencil.models import FieldStyle
from pdfstencil.style import hex_to_rgb, parse_style, resolve_style
from pdfstencil.values import FieldValue, coerce_form_input, coerce_value, parse_checkbox, to_text


class TestCheckboxParser(unittest.TestCase):
    def test_truthy(self):
        for raw in [True, "true", "YES", "1", "on", "X", " checked ", "y", 1, 2.5]:
            self.assertTrue(parse_checkbox(raw), raw)

    def test_falsy(self):
        for raw in [False, "false", "no", "0", "", "banana", 0, 0.0, None, []]:
            self.assertFalse(parse_checkbox(raw), raw)


class TestCoerce(unittest.TestCase):
    def test_absent_is_none(self):
        self.assertIsNone(coerce_value("text", None))

    def test_text_forms(self):
        self.assertEqual(coerce_value("number", 3), FieldValue("text", "3"))
        self.assertEqual(coerce_value("number", 3.0), FieldValue("text", "3"))
        self.assertEqual(coerce_value("number", 2.5), FieldValue("text", "2.5"))
        self.assertEqual(coerce_value("date", "2024-03-20"), FieldValue("text", "2024-03-20"))
        self.assertEqual(to_text(True), "true")

    def test_checkbox(self):
        self.assertEqual(coerce_value("checkbox", "yes"), FieldValue("checkbox", True))
        self.assertEqual(coerce_value("checkbox", ""), FieldValue("checkbox", False))

    def test_form_input(self):
        self.assertEqual(coerce_form_input("number", "42"), 42)
        self.assertEqual(coerce_form_input("number", "4.5"), 4.5)
        self.assertEqual(coerce_form_input("number", ""), "")
        self.assertEqual(coerce_form_input("number", "abc"), "abc")
        self.assertIs(coerce_form_input("checkbox", "on"), True)
        self.assertEqual(coerce_form_input("text", "hi"), "hi")


class TestStyle(unittest.TestCase):
    def test_hard_defaults(self):
        s = resolve_style(None, None)
        self.assertEqual(s.font_size, 10)
        self.assertEqual(s.color, "#000000")
        self.assertEqual(s.rgb, (0.0, 0.0, 0.0))

    def test_cascade(self):
        default = FieldStyle(font_size=12, color="#00ff00")
        self.assertEqual(resolve_style(None, default).font_size, 12)
        s = resolve_style(FieldStyle(color="#ff0000"), default)
        self.assertEqual(s.font_size, 12)
        self.assertEqual(s.color, "#ff0000")
        self.assertEqual(resolve_style(FieldStyle(font_size=20), default).font_size, 20)

    def test_bad_values_fall_through(self):
        s = resolve_style(FieldStyle(font_size=0, color="not-a-color"), None)
        self.assertEqual(s.font_size, 10)
        self.assertEqual(s.color, "#000000")

    def test_bad_field_color_keeps_default_color(self):
        default = FieldStyle(font_size=12, color="#00ff00")
        s = resolve_style(FieldStyle(color="not-a-color"), default)
        self.assertEqual(s.color, "#00ff00")
        self.assertEqual(s.rgb, (0.0, 1.0, 0.0))

    def test_hex_to_rgb(self):
        self.assertEqual(hex_to_rgb("#ffffff"), (1.0, 1.0, 1.0))
        self.assertEqual(hex_to_rgb("f00"), (1.0, 0.0, 0.0))
        self.assertIsNone(hex_to_rgb("#12345"))

    def test_parse_style(self):
        self.assertIsNone(parse_style("", "  "))
        self.assertEqual(parse_style("14", ""), FieldStyle(font_size=14))
        self.assertEqual(parse_style("big", "#123456"), FieldStyle(color="#123456"))


if __name__ == "__main__":
    unittest.main()
