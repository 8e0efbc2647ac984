import unittest

from invoice_pdf.totals import (
    compute_discount,
    compute_invoice_totals,
    resolve_shipping,
    resolve_shipping_amount,
)


class TotalsTests(unittest.TestCase):
    def test_percent_discount_with_tax(self) -> None:
        totals = compute_invoice_totals(
            {
                "lineItems": [{"quantity": 1, "unitPrice": 25}],
                "discountType": "percent",
                "discountValue": 10,
                "taxRate": 8,
            }
        )

        self.assertAlmostEqual(totals.subtotal, 25.0)
        self.assertAlmostEqual(totals.discount_amount, 2.5)
        self.assertAlmostEqual(totals.taxable_base, 22.5)
        self.assertAlmostEqual(totals.tax_amount, 1.8)
        self.assertAlmostEqual(totals.total, 24.3)

    def test_explicit_and_derived_line_totals(self) -> None:
        totals = compute_invoice_totals(
            {
                "lineItems": [
                    {"quantity": 2, "unitPrice": 10},
                    {"quantity": 1, "lineTotal": 5},
                ],
                "discountType": "percent",
                "discountValue": 10,
                "taxRate": 8,
            }
        )

        self.assertAlmostEqual(totals.subtotal, 25.0)
        self.assertAlmostEqual(totals.discount_amount, 2.5)
        self.assertAlmostEqual(totals.taxable_base, 22.5)
        self.assertAlmostEqual(totals.tax_amount, 1.8)
        self.assertAlmostEqual(totals.total, 24.3)

    def test_negative_inputs_keep_total_non_negative(self) -> None:
        cases = (
            {"discountType": "amount", "discountValue": -5},
            {"discountType": "percent", "discountValue": -50},
            {"taxRate": -200},
            {"taxRate": -200, "discountValue": -5},
            {"amountShipping": -100},
        )
        for extra in cases:
            with self.subTest(extra=extra):
                invoice = {"lineItems": [{"quantity": 1, "unitPrice": 10}]}
                invoice.update(extra)
                totals = compute_invoice_totals(invoice)
                self.assertGreaterEqual(totals.taxable_base, 0.0)
                self.assertGreaterEqual(totals.total, 0.0)

    def test_negative_tax_rate_clamps_total(self) -> None:
        totals = compute_invoice_totals({"lineItems": [{"quantity": 1, "unitPrice": 10}], "taxRate": -200})
        self.assertAlmostEqual(totals.tax_amount, -20.0)
        self.assertEqual(totals.total, 0.0)

    def test_subtotal_sums_line_totals(self) -> None:
        totals = compute_invoice_totals(
            {
                "lineItems": [
                    {"quantity": 2, "unitPrice": 10},
                    {"quantity": 1, "unitPrice": 99, "lineTotal": 50},
                    {"quantity": "n/a", "unitPrice": 3},
                ]
            }
        )

        self.assertAlmostEqual(totals.subtotal, 73.0)
        self.assertAlmostEqual(totals.total, 73.0)

    def test_total_never_negative(self) -> None:
        totals = compute_invoice_totals(
            {
                "lineItems": [{"quantity": 1, "unitPrice": 10}],
                "discountType": "amount",
                "discountValue": 50,
                "taxRate": 8,
            }
        )

        self.assertEqual(totals.taxable_base, 0.0)
        self.assertEqual(totals.tax_amount, 0.0)
        self.assertEqual(totals.total, 0.0)

    def test_larger_discount_never_raises_total(self) -> None:
        previous_total = None
        for value in range(0, 60, 5):
            totals = compute_invoice_totals(
                {
                    "lineItems": [{"quantity": 2, "unitPrice": 20}],
                    "discountType": "amount",
                    "discountValue": value,
                    "taxRate": 5,
                }
            )
            if previous_total is not None:
                self.assertLessEqual(totals.total, previous_total)
            previous_total = totals.total

    def test_unknown_discount_type_is_flat_amount(self) -> None:
        self.assertEqual(compute_discount(100.0, "weird", 3), 3.0)
        self.assertEqual(compute_discount(100.0, "PERCENT", 3), 3.0)
        self.assertEqual(compute_discount(100.0, None, "junk"), 0.0)

    def test_shipping_is_added(self) -> None:
        totals = compute_invoice_totals(
            {"lineItems": [{"quantity": 1, "unitPrice": 10}], "amountShipping": 4.5}
        )
        self.assertAlmostEqual(totals.total, 14.5)

    def test_empty_invoice(self) -> None:
        totals = compute_invoice_totals(None)
        self.assertEqual(totals.subtotal, 0.0)
        self.assertEqual(totals.total, 0.0)


class ShippingTests(unittest.TestCase):
    def test_invoice_fields_win_over_linked_order(self) -> None:
        self.assertEqual(resolve_shipping_amount({"shipping": 5, "orderRef": {"amountShipping": 9}}), 5.0)

    def test_explicit_order_amount_wins_over_selected_service(self) -> None:
        invoice = {"orderRef": {"amountShipping": 9}, "selectedService": {"amount": 4}}
        self.assertEqual(resolve_shipping_amount(invoice), 9.0)

    def test_selected_service_used_last(self) -> None:
        self.assertEqual(resolve_shipping_amount({"selectedService": {"amount": 4}}), 4.0)

    def test_non_numeric_values_are_skipped(self) -> None:
        self.assertEqual(resolve_shipping_amount({"amountShipping": "n/a", "shippingAmount": 7}), 7.0)
        self.assertEqual(resolve_shipping_amount({}), 0.0)

    def test_delivery_estimate_text_is_not_an_amount(self) -> None:
        self.assertEqual(resolve_shipping_amount({"shipping": "2 to 3 days", "shippingCost": 6}), 6.0)
        totals = compute_invoice_totals(
            {"lineItems": [{"quantity": 1, "unitPrice": 10}], "shipping": "2 to 3 days"}
        )
        self.assertEqual(totals.shipping, 0.0)
        self.assertAlmostEqual(totals.total, 10.0)

    def test_carrier_and_tracking(self) -> None:
        details = resolve_shipping(
            {"fulfillment": {"carrier": "UPS"}, "order": {"trackingNumber": "1Z999"}}
        )

        self.assertEqual(details.carrier, "UPS")
        self.assertEqual(details.tracking_number, "1Z999")


if __name__ == "__main__":
    unittest.main()
