# tests/test_session.py
import dataclasses
import unittest
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

from supabase import Client

from mei_facil.core.errors import AccessDeniedError, FetchError
from mei_facil.core.models import DateRange, ReportFilters, SavedReportConfig, Transaction
from mei_facil.core.reports import DeleteResult, ReportStore, UpsertResult
from mei_facil.core.session import (
    CONFIGS_ERROR_MESSAGE,
    LOAD_ERROR_MESSAGE,
    ReportSession,
    SessionState,
    default_report_year,
)

TODAY = date(2025, 7, 15)


def make_tx(id, day, amount, type, category=None):
    return Transaction(id=id, description=f"tx {id}", amount=Decimal(str(amount)), date=day, type=type, category=category)


def echo_upsert(config):
    """Simula o banco: atribui id a relatórios novos e devolve o registro gravado."""
    saved = dataclasses.replace(config, id=config.id or f"id-{config.report_name}", updated_at="2025-07-15T12:00:00+00:00")
    return UpsertResult(report=saved, is_update=bool(config.id))


class TestReportSession(unittest.TestCase):
    def setUp(self):
        self.mock_supabase_client = MagicMock(spec=Client)
        self.mock_store = MagicMock(spec=ReportStore)
        self.mock_store.fetch_configs.return_value = []
        self.mock_store.upsert_config.side_effect = echo_upsert
        self.mock_store.delete_config.return_value = DeleteResult(success=True)

        self.transactions = [
            make_tx("1", date(2025, 3, 5), 1000, "income", "Vendas"),
            make_tx("2", date(2025, 3, 10), 200, "expense", "Aluguel"),
            make_tx("3", date(2025, 3, 12), 50, "expense"),
            make_tx("4", date(2024, 11, 2), 700, "income", "Consultoria"),
        ]

        patcher = patch("mei_facil.core.db.get_transactions")
        self.mock_get_transactions = patcher.start()
        self.mock_get_transactions.return_value = self.transactions
        self.addCleanup(patcher.stop)

    def make_session(self, has_access=True):
        return ReportSession(self.mock_supabase_client, has_access, store=self.mock_store, today=TODAY)

    def loaded_session(self):
        session = self.make_session()
        self.assertEqual(session.load(), SessionState.READY)
        return session

    # --- Carga ---
    def test_load_defaults_to_current_year(self):
        session = self.loaded_session()
        self.assertEqual(session.active_filters.date_range, DateRange.full_year(2025))
        self.assertEqual([t.id for t in session.filtered_transactions], ["1", "2", "3"])
        self.assertEqual(session.monthly_summary[0].month, "Mar/2025")
        self.assertEqual(session.monthly_summary[0].saldo, Decimal("750"))
        self.assertEqual(session.available_years, [2025, 2024])

    def test_load_falls_back_to_latest_year_with_data(self):
        self.mock_get_transactions.return_value = [t for t in self.transactions if t.date.year == 2024]
        session = self.loaded_session()
        self.assertEqual(session.current_filter_year, 2024)

    def test_load_without_transactions_uses_current_year(self):
        self.mock_get_transactions.return_value = []
        session = self.loaded_session()
        self.assertEqual(session.current_filter_year, 2025)
        self.assertEqual(session.monthly_summary, [])
        self.assertEqual(session.available_years, [2025])

    def test_load_failure_faults_session(self):
        self.mock_get_transactions.side_effect = FetchError("Não foi possível buscar as transações.")
        session = self.make_session()

        self.assertEqual(session.load(), SessionState.FAULTED)
        self.assertEqual(session.error, LOAD_ERROR_MESSAGE)
        self.assertEqual(session.all_transactions, [])
        self.assertEqual(session.saved_configs, [])

    def test_saved_reports_failure_keeps_transactions(self):
        self.mock_store.fetch_configs.side_effect = FetchError("Não foi possível buscar os relatórios salvos.")
        session = self.make_session()

        self.assertEqual(session.load(), SessionState.READY)
        self.assertEqual(len(session.all_transactions), 4)
        self.assertEqual(session.saved_configs, [])
        self.assertEqual(session.error, CONFIGS_ERROR_MESSAGE)
        self.assertEqual(session.current_filter_year, 2025)
        self.assertEqual(session.monthly_summary[0].month, "Mar/2025")

    def test_reload_clears_previous_notice(self):
        self.mock_store.fetch_configs.side_effect = FetchError("Não foi possível buscar os relatórios salvos.")
        session = self.make_session()
        session.load()

        self.mock_store.fetch_configs.side_effect = None
        self.assertEqual(session.reload(), SessionState.READY)
        self.assertIsNone(session.error)

    def test_locked_session_does_not_fetch(self):
        session = self.make_session(has_access=False)

        self.assertEqual(session.load(), SessionState.LOCKED)
        self.mock_get_transactions.assert_not_called()
        self.mock_store.fetch_configs.assert_not_called()
        self.assertTrue(session.actions_disabled)
        with self.assertRaises(AccessDeniedError):
            session.apply_filters(ReportFilters())

    def test_default_report_year(self):
        self.assertEqual(default_report_year(self.transactions, 2025), 2025)
        self.assertEqual(default_report_year(self.transactions, 2026), 2025)
        self.assertEqual(default_report_year([], 2026), 2026)

    # --- Filtros ---
    def test_apply_filters_recomputes_views(self):
        session = self.loaded_session()
        session.apply_filters(ReportFilters(date_range=DateRange.full_year(2025), transaction_types=["expense"]))

        self.assertEqual(session.state, SessionState.READY)
        self.assertEqual([t.id for t in session.filtered_transactions], ["2", "3"])
        self.assertEqual(session.income_by_category, [])
        self.assertEqual(session.expense_by_category[0].name, "Aluguel")
        self.assertFalse(session.actions["apply_filter"].in_flight)

    # --- Relatórios salvos ---
    def test_save_new_then_load_restores_filters(self):
        session = self.loaded_session()
        q1 = ReportFilters(date_range=DateRange(date(2025, 1, 1), date(2025, 3, 31)), categories=["Aluguel"])
        session.apply_filters(q1)
        saved = session.save_as_new("Primeiro trimestre")

        self.assertIsNotNone(saved)
        self.assertEqual(saved.filters, q1)
        self.assertEqual(len(session.saved_configs), 1)

        session.apply_filters(ReportFilters.for_year(2024))
        session.load_config(session.find_config("Primeiro trimestre"))

        self.assertEqual(session.active_filters, q1)
        self.assertEqual([t.id for t in session.filtered_transactions], ["2"])

    def test_loaded_filters_are_independent_of_saved_entry(self):
        saved = SavedReportConfig(
            id="r1", report_name="Aluguel", filters=ReportFilters(categories=["Aluguel"], transaction_types=["expense"]),
        )
        self.mock_store.fetch_configs.return_value = [saved]
        session = self.loaded_session()

        session.load_config(saved)
        session.active_filters.categories.append("Vendas")
        session.active_filters.transaction_types.append("income")

        self.assertEqual(saved.filters.categories, ["Aluguel"])
        self.assertEqual(saved.filters.transaction_types, ["expense"])
        self.assertEqual(session.saved_configs[0].filters.categories, ["Aluguel"])

    def test_save_keeps_list_sorted_by_name(self):
        session = self.loaded_session()
        session.save_as_new("Zebra")
        session.save_as_new("Água")
        session.save_as_new("banco")
        self.assertEqual([c.report_name for c in session.saved_configs], ["Água", "banco", "Zebra"])

    def test_save_edit_replaces_existing_entry(self):
        existing = SavedReportConfig(
            id="r1",
            report_name="Ano",
            filters=ReportFilters.for_year(2024),
            selected_fields=["date", "amount"],
            visualization_type="table",
        )
        self.mock_store.fetch_configs.return_value = [existing]
        session = self.loaded_session()

        updated = session.save_edit(existing, "Ano corrente")

        self.assertEqual(len(session.saved_configs), 1)
        self.assertEqual(session.saved_configs[0].report_name, "Ano corrente")
        self.assertEqual(updated.id, "r1")
        # campos de exibição vêm do relatório em edição
        self.assertEqual(updated.selected_fields, ["date", "amount"])
        self.assertEqual(updated.visualization_type, "table")
        self.assertEqual(updated.filters, session.active_filters)

    def test_save_with_blank_name_is_rejected(self):
        session = self.loaded_session()
        self.assertIsNone(session.save_as_new("   "))
        self.assertEqual(session.actions["save_new"].last_error, "Informe um nome para o relatório.")
        self.mock_store.upsert_config.assert_not_called()

    def test_save_failure_leaves_list_untouched(self):
        self.mock_store.upsert_config.side_effect = None
        self.mock_store.upsert_config.return_value = UpsertResult(
            report=None, is_update=False, error="Falha ao salvar configuração do relatório."
        )
        session = self.loaded_session()

        self.assertIsNone(session.save_as_new("Q1"))
        self.assertEqual(session.saved_configs, [])
        self.assertEqual(session.actions["save_new"].last_error, "Falha ao salvar configuração do relatório.")
        self.assertFalse(session.is_processing_config_action)

    def test_delete_removes_entry(self):
        configs = [
            SavedReportConfig(id="r1", report_name="A", filters=ReportFilters()),
            SavedReportConfig(id="r2", report_name="B", filters=ReportFilters()),
        ]
        self.mock_store.fetch_configs.return_value = configs
        session = self.loaded_session()

        self.assertTrue(session.delete_config_action("r1"))
        self.assertEqual([c.id for c in session.saved_configs], ["r2"])
        self.mock_store.delete_config.assert_called_once_with("r1")

    def test_delete_failure_keeps_entry(self):
        self.mock_store.fetch_configs.return_value = [SavedReportConfig(id="r1", report_name="A", filters=ReportFilters())]
        self.mock_store.delete_config.return_value = DeleteResult(success=False, error="Falha ao excluir relatório salvo.")
        session = self.loaded_session()

        self.assertFalse(session.delete_config_action("r1"))
        self.assertEqual(len(session.saved_configs), 1)
        self.assertEqual(session.actions["delete"].last_error, "Falha ao excluir relatório salvo.")

    def test_duplicate_submit_is_ignored(self):
        session = self.loaded_session()
        session.actions["save_new"].in_flight = True
        self.assertIsNone(session.save_as_new("Q1"))
        self.mock_store.upsert_config.assert_not_called()


if __name__ == "__main__":
    unittest.main()
