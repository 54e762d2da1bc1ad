# tests/test_charts.py
import unittest
from decimal import Decimal

from mei_facil.core import charts
from mei_facil.core.models import CategorySummary, MonthlySummary

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class TestCharts(unittest.TestCase):
    def setUp(self):
        self.monthly = [
            MonthlySummary("Dez/2024", Decimal("300"), Decimal("0"), Decimal("300"), 2024, 12),
            MonthlySummary("Jan/2025", Decimal("1000"), Decimal("250"), Decimal("750"), 2025, 1),
        ]

    def test_monthly_summary_frame_keeps_order(self):
        df = charts.monthly_summary_frame(self.monthly)
        self.assertEqual(list(df.index), ["Dez/2024", "Jan/2025"])
        self.assertEqual(df.loc["Jan/2025", "Saldo"], 750.0)

    def test_monthly_chart_is_png(self):
        buf = charts.generate_monthly_chart(self.monthly, 2025)
        self.assertTrue(buf.getvalue().startswith(PNG_SIGNATURE))

    def test_monthly_chart_empty(self):
        self.assertIsNone(charts.generate_monthly_chart([]))

    def test_pie_chart(self):
        summary = [CategorySummary("Aluguel", Decimal("200")), CategorySummary("Luz", Decimal("90"))]
        buf = charts.generate_category_pie_chart(summary, "Despesas por Categoria (2025)")
        self.assertTrue(buf.getvalue().startswith(PNG_SIGNATURE))

    def test_pie_chart_without_values(self):
        self.assertIsNone(charts.generate_category_pie_chart([], "Vazio"))
        self.assertIsNone(charts.generate_category_pie_chart([CategorySummary("X", Decimal("0"))], "Zero"))


if __name__ == "__main__":
    unittest.main()
