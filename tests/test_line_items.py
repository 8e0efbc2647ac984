import unittest

from invoice_pdf.line_items import (
    combine_line_items,
    normalize_invoice_line_items,
    reconcile_line_items,
)


class ReconcileTests(unittest.TestCase):
    def test_sku_match_merges_cart_details(self) -> None:
        invoice = {
            "lineItems": [{"sku": "ABC", "quantity": 2, "unitPrice": 10}],
            "orderRef": {
                "cart": [{"sku": "abc", "name": "Widget", "price": 12, "optionSummary": "Blue"}]
            },
        }

        items = normalize_invoice_line_items(invoice)

        self.assertEqual(len(items), 1)
        item = items[0]
        self.assertEqual(item.display_name(0), "Widget")
        self.assertEqual(item.description, "Widget")
        self.assertEqual(item.quantity, 2)
        self.assertEqual(item.unit_price, 10)
        self.assertEqual(item.line_total, 20)
        self.assertEqual(item.display_description(), "Blue • SKU ABC")

    def test_empty_invoice_rows_keep_their_position(self) -> None:
        items = reconcile_line_items([{"name": "First"}, {}, {"name": "Third"}])

        self.assertEqual(len(items), 3)
        self.assertEqual(items[1].display_name(1), "Item 2")
        self.assertEqual(items[1].quantity, 1.0)
        self.assertEqual(items[1].line_total, 0.0)
        self.assertEqual(items[2].name, "Third")

    def test_empty_cart_entries_are_not_appended(self) -> None:
        items = reconcile_line_items([], [[{}, {"name": "Gift wrap"}]])
        self.assertEqual([item.name for item in items], ["Gift wrap"])

    def test_unmatched_cart_items_are_appended(self) -> None:
        items = reconcile_line_items(
            [{"name": "Widget", "unitPrice": 5}],
            [[{"name": "Widget", "sku": "W1"}, {"name": "Gift wrap", "price": 3}]],
        )

        self.assertEqual([item.display_name(i) for i, item in enumerate(items)], ["Widget", "Gift wrap"])
        self.assertEqual(items[0].sku, "W1")
        self.assertEqual(items[1].quantity, 1.0)
        self.assertEqual(items[1].line_total, 3.0)

    def test_duplicate_cart_entries_across_orders_are_pooled_once(self) -> None:
        cart = [{"_key": "k1", "name": "Widget", "sku": "W1", "price": 4}]
        invoice = {"lineItems": [], "orderRef": {"cart": cart}, "order": {"cart": list(cart)}}

        items = normalize_invoice_line_items(invoice)

        self.assertEqual(len(items), 1)

    def test_reconciliation_is_idempotent(self) -> None:
        invoice_items = [{"sku": "A", "quantity": 1, "unitPrice": 2}, {"name": "B"}]
        cart = [[{"sku": "a", "name": "Alpha"}, {"name": "C", "price": 1}]]

        self.assertEqual(
            reconcile_line_items(invoice_items, cart),
            reconcile_line_items(invoice_items, cart),
        )

    def test_each_cart_item_is_claimed_once(self) -> None:
        items = reconcile_line_items(
            [{"sku": "A"}, {"sku": "A"}],
            [[{"sku": "A", "name": "Alpha"}]],
        )

        self.assertEqual(len(items), 2)
        self.assertEqual(items[0].name, "Alpha")
        self.assertEqual(items[1].name, "")


class CombineTests(unittest.TestCase):
    def test_invoice_values_take_precedence(self) -> None:
        item = combine_line_items(
            {"name": "Invoice name", "quantity": 3, "price": 7},
            {"name": "Cart name", "quantity": 9, "price": 1},
        )

        assert item is not None
        self.assertEqual(item.name, "Invoice name")
        self.assertEqual(item.quantity, 3)
        self.assertEqual(item.unit_price, 7)
        self.assertEqual(item.line_total, 21)

    def test_line_total_override_is_authoritative(self) -> None:
        item = combine_line_items({"quantity": 2, "unitPrice": 10, "lineTotal": 15})
        assert item is not None
        self.assertEqual(item.line_total, 15)

    def test_quantity_text_with_digits_defaults_to_one(self) -> None:
        item = combine_line_items({"quantity": "3 sets of 2", "unitPrice": 4})
        assert item is not None
        self.assertEqual(item.quantity, 1.0)
        self.assertEqual(item.line_total, 4.0)

    def test_invalid_quantity_defaults_to_one(self) -> None:
        item = combine_line_items({"quantity": "abc", "unitPrice": 5})
        assert item is not None
        self.assertEqual(item.quantity, 1.0)
        self.assertEqual(item.line_total, 5.0)

    def test_display_name_falls_back_to_position(self) -> None:
        item = combine_line_items({"quantity": 1})
        assert item is not None
        self.assertEqual(item.display_name(2), "Item 3")

    def test_leftover_metadata_becomes_extras(self) -> None:
        item = combine_line_items(
            {
                "name": "Plate",
                "description": "Custom plate",
                "metadata": [
                    {"key": "engraving", "value": "Bob"},
                    {"key": "sku", "value": "X"},
                    {"key": "base_price", "value": "10"},
                ],
            }
        )

        assert item is not None
        self.assertEqual(item.extras, ("Engraving: Bob",))
        self.assertEqual(item.display_description(), "Engraving: Bob")

    def test_description_used_when_nothing_else(self) -> None:
        item = combine_line_items({"description": "Labour", "sku": "L1"})
        assert item is not None
        self.assertEqual(item.display_description(), "Labour • SKU L1")

    def test_nothing_to_combine(self) -> None:
        self.assertIsNone(combine_line_items(None, None))


if __name__ == "__main__":
    unittest.main()
