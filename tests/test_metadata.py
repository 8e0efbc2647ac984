import unittest

from invoice_pdf.metadata import (
    derive_options_from_metadata,
    humanize,
    normalize_metadata_entries,
    should_display_metadata_segment,
)


class MetadataTests(unittest.TestCase):
    def test_option_name_value_pairs(self) -> None:
        derived = derive_options_from_metadata(
            [
                {"key": "option1_name", "value": "Size"},
                {"key": "option1_value", "value": "Large"},
            ]
        )

        self.assertEqual(derived.option_details, ("Size: Large",))
        self.assertEqual(derived.option_summary, "Size: Large")
        self.assertEqual(set(derived.consumed_keys), {"option1_name", "option1_value"})

    def test_keyword_keys_from_mapping(self) -> None:
        derived = derive_options_from_metadata({"vehicle": "2020 Civic", "engraving": "Bob"})

        self.assertEqual(derived.option_details, ("Vehicle: 2020 Civic",))
        self.assertEqual(derived.consumed_keys, ("vehicle",))

    def test_upgrades_are_split(self) -> None:
        derived = derive_options_from_metadata([{"key": "upgrades", "value": "Wax, Polish"}])

        self.assertEqual(derived.upgrades, ("Wax", "Polish"))
        self.assertIsNone(derived.option_summary)

    def test_zero_amount_values_are_skipped(self) -> None:
        derived = derive_options_from_metadata({"color": "$0.00"})
        self.assertEqual(derived.option_details, ())

    def test_malformed_entries_are_dropped(self) -> None:
        entries = normalize_metadata_entries(
            [{"key": "a"}, "junk", None, {"key": "", "value": "x"}, {"key": "color", "value": "Red"}]
        )

        self.assertEqual([(e.key, e.value) for e in entries], [("color", "Red")])

    def test_empty_metadata(self) -> None:
        derived = derive_options_from_metadata(None)
        self.assertIsNone(derived.option_summary)
        self.assertEqual(derived.upgrades, ())

    def test_humanize(self) -> None:
        self.assertEqual(humanize("shipping_carrier"), "Shipping Carrier")
        self.assertEqual(humanize("productName"), "Product Name")

    def test_hidden_segments(self) -> None:
        self.assertFalse(should_display_metadata_segment("Base price: 10"))
        self.assertFalse(should_display_metadata_segment("  "))
        self.assertTrue(should_display_metadata_segment("Engraving: Bob"))


if __name__ == "__main__":
    unittest.main()
