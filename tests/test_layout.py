import unittest

from invoice_pdf.layout import DEFAULT_COLUMNS, allocate_column_widths, column_edges


class ColumnWidthTests(unittest.TestCase):
    def test_total_column_takes_remainder(self) -> None:
        columns = allocate_column_widths(532.0)

        self.assertEqual([c.width for c in columns], [80.0, 220.0, 60.0, 80.0, 92.0])
        self.assertEqual([c.key for c in columns], [c.key for c in DEFAULT_COLUMNS])

    def test_description_shrinks_on_narrow_tables(self) -> None:
        columns = allocate_column_widths(400.0)

        self.assertEqual(columns[1].width, 120.0)
        self.assertEqual(columns[-1].width, 60.0)

    def test_description_has_a_floor(self) -> None:
        columns = allocate_column_widths(300.0)
        self.assertEqual(columns[1].width, 90.0)

    def test_widths_sum_to_table_width(self) -> None:
        for width in (300.0, 400.0, 455.0, 532.0, 700.0):
            with self.subTest(width=width):
                columns = allocate_column_widths(width)
                self.assertAlmostEqual(sum(c.width for c in columns), width)

    def test_column_edges(self) -> None:
        columns = allocate_column_widths(532.0)
        edges = column_edges(40.0, columns)

        self.assertEqual(edges[0], 40.0)
        self.assertEqual(edges[2], 340.0)
        self.assertAlmostEqual(edges[-1], 572.0)


if __name__ == "__main__":
    unittest.main()
