# tests/test_main.py
import io
import tempfile
import unittest
from contextlib import redirect_stdout
from datetime import date
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock, patch

from mei_facil import main as cli
from mei_facil.core.models import ReportFilters, SavedReportConfig, Transaction


@patch("mei_facil.core.db.get_company_profile", new=MagicMock(return_value=None))
@patch("mei_facil.core.db.get_saved_reports")
@patch("mei_facil.core.db.get_transactions")
@patch("mei_facil.core.db.get_mei_settings")
@patch("mei_facil.core.db.get_supabase_client")
class TestMain(unittest.TestCase):
    def setUp(self):
        self.transactions = [
            Transaction(id="1", description="Venda", amount=Decimal("1000"), date=date(2024, 3, 5),
                        type="income", category="Venda de Produtos"),
            Transaction(id="2", description="Aluguel", amount=Decimal("200"), date=date(2024, 3, 10),
                        type="expense", category="Aluguel (Espaço/Equipamento)"),
        ]

    def run_cli(self, argv):
        out = io.StringIO()
        with redirect_stdout(out):
            code = cli.main(argv)
        return code, out.getvalue()

    @patch("mei_facil.main.IS_ADMIN", False)
    @patch("mei_facil.main.USER_PLAN", "free")
    def test_free_plan_is_locked(self, mock_client, mock_settings, mock_get_tx, mock_get_reports):
        mock_client.return_value = MagicMock()
        mock_settings.return_value = None
        code, _ = self.run_cli([])
        self.assertEqual(code, 1)
        mock_get_tx.assert_not_called()

    @patch("mei_facil.main.USER_PLAN", "paid")
    def test_prints_report_for_year(self, mock_client, mock_settings, mock_get_tx, mock_get_reports):
        mock_client.return_value = MagicMock()
        mock_settings.return_value = {"das_paid_this_month": True}
        mock_get_tx.return_value = self.transactions
        mock_get_reports.return_value = []

        code, output = self.run_cli(["--ano", "2024"])

        self.assertEqual(code, 0)
        self.assertIn("Mar/2024", output)
        self.assertIn("R$ 800,00", output)

    @patch("mei_facil.main.USER_PLAN", "paid")
    def test_loads_saved_report_and_writes_outputs(self, mock_client, mock_settings, mock_get_tx, mock_get_reports):
        mock_client.return_value = MagicMock()
        mock_settings.return_value = None
        mock_get_tx.return_value = self.transactions
        mock_get_reports.return_value = [
            SavedReportConfig(id="r1", report_name="Ano 2024", filters=ReportFilters.for_year(2024)),
        ]

        with tempfile.TemporaryDirectory() as tmp:
            code, output = self.run_cli(["--relatorio", "Ano 2024", "--saida", tmp])
            files = sorted(p.name for p in Path(tmp).iterdir())

        self.assertEqual(code, 0)
        self.assertIn('"Ano 2024"', output)
        self.assertIn("receitas_despesas_mensais.png", files)
        self.assertTrue(any(name.endswith(".csv") for name in files))

    @patch("mei_facil.main.USER_PLAN", "paid")
    def test_unknown_report_name(self, mock_client, mock_settings, mock_get_tx, mock_get_reports):
        mock_client.return_value = MagicMock()
        mock_settings.return_value = None
        mock_get_tx.return_value = self.transactions
        mock_get_reports.return_value = []

        code, _ = self.run_cli(["--relatorio", "Inexistente"])
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()
