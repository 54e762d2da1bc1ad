# mei_facil/main.py
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from mei_facil.config import COMPANY_PROFILE_ID, IS_ADMIN, LOGGING_CONFIG, MEI_SETTINGS_ID, USER_PLAN
from mei_facil.core import charts, db
from mei_facil.core.aggregation import compute_totals
from mei_facil.core.deadlines import das_status, dasn_status
from mei_facil.core.export import default_export_filename, export_transactions_csv
from mei_facil.core.filters import transactions_in_year
from mei_facil.core.limits import has_pro_access, plan_label, revenue_progress
from mei_facil.core.models import DateRange
from mei_facil.core.session import PRO_ONLY_MESSAGE, ReportSession, SessionState
from mei_facil.utils.text_utils import format_brl

logger = logging.getLogger(__name__)


def print_dashboard(session: ReportSession, profile: Optional[dict], das_paid: bool, has_access: bool) -> None:
    """Resumo do painel: faturamento do ano e prazos do DAS/DASN."""
    today = session.today
    if profile:
        print(f"Empresa: {profile.get('razao_social') or '-'} (CNPJ {profile.get('cnpj') or '-'})")
    totals = compute_totals(transactions_in_year(session.all_transactions, today.year))
    progress = revenue_progress(totals.annual_revenue)

    print(f"Plano: {plan_label(USER_PLAN, IS_ADMIN)}")
    print(f"Faturamento {today.year}: {format_brl(totals.annual_revenue)} "
          f"({progress.percent:.1f}% do limite de {format_brl(progress.limit)})")
    if progress.message:
        print(f"  ! {progress.message}")
    print(f"DAS: {das_status(today, das_paid).message}")
    print(f"DASN-SIMEI: {dasn_status(today, has_access).message}")


def print_report(session: ReportSession) -> None:
    year = session.current_filter_year or "Período"
    print(f"\nReceitas vs. Despesas Mensais ({year})")
    if not session.filtered_transactions:
        print("  Nenhuma transação encontrada para os filtros aplicados.")
        return

    for m in session.monthly_summary:
        print(f"  {m.month:<9} Receitas {format_brl(m.receitas):>16}  "
              f"Despesas {format_brl(m.despesas):>16}  Saldo {format_brl(m.saldo):>16}")

    print(f"\nDespesas por Categoria ({year})")
    for c in session.expense_by_category or []:
        print(f"  {c.name:<45} {format_brl(c.value):>16}")
    if not session.expense_by_category:
        print("  Nenhuma despesa categorizada neste período e filtros.")

    print(f"\nReceitas por Categoria ({year})")
    for c in session.income_by_category:
        print(f"  {c.name:<45} {format_brl(c.value):>16}")
    if not session.income_by_category:
        print("  Nenhuma receita categorizada neste período e filtros.")


def write_outputs(session: ReportSession, output_dir: Path) -> List[Path]:
    """Grava os gráficos (PNG) e a exportação CSV das transações filtradas."""
    output_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    year = session.current_filter_year

    images = {
        "receitas_despesas_mensais.png": charts.generate_monthly_chart(session.monthly_summary, year),
        "despesas_por_categoria.png": charts.generate_category_pie_chart(
            session.expense_by_category, f"Despesas por Categoria ({year or 'Período'})"),
        "receitas_por_categoria.png": charts.generate_category_pie_chart(
            session.income_by_category, f"Receitas por Categoria ({year or 'Período'})"),
    }
    for filename, buf in images.items():
        if buf is None:
            continue
        path = output_dir / filename
        path.write_bytes(buf.getvalue())
        written.append(path)

    csv_path = output_dir / default_export_filename(session.today)
    export_transactions_csv(session.filtered_transactions, csv_path, session.has_elevated_access)
    written.append(csv_path)
    logger.info("Relatórios gravados em %s", output_dir)
    return written


def main(argv: Optional[List[str]] = None) -> int:
    """Ponto de entrada da linha de comando."""
    parser = argparse.ArgumentParser(
        description="MEI Fácil - relatórios avançados de receitas e despesas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exemplos:
  mei-facil
  mei-facil --ano 2024
  mei-facil --relatorio "Primeiro trimestre" --saida ./relatorios
  mei-facil --ano 2025 --salvar "Ano 2025"
  mei-facil --listar
        """,
    )
    parser.add_argument("--ano", type=int, help="Ano a exibir (padrão: ano atual ou o mais recente com dados)")
    parser.add_argument("--relatorio", help="Nome de um relatório salvo a carregar")
    parser.add_argument("--salvar", metavar="NOME", help="Salva os filtros aplicados como novo relatório")
    parser.add_argument("--excluir", metavar="NOME", help="Exclui um relatório salvo")
    parser.add_argument("--listar", action="store_true", help="Lista os relatórios salvos")
    parser.add_argument("--saida", type=Path, help="Diretório para gravar gráficos e CSV")
    args = parser.parse_args(argv)

    logging.basicConfig(**LOGGING_CONFIG)

    has_access = has_pro_access(USER_PLAN, IS_ADMIN)
    supabase_client = db.get_supabase_client()
    session = ReportSession(supabase_client, has_elevated_access=has_access)

    settings = db.get_mei_settings(supabase_client, MEI_SETTINGS_ID)
    das_paid = bool(settings and settings.get("das_paid_this_month"))
    profile = db.get_company_profile(supabase_client, COMPANY_PROFILE_ID)

    state = session.load()
    if state == SessionState.LOCKED:
        print(f"Recurso Exclusivo Pro. {PRO_ONLY_MESSAGE}", file=sys.stderr)
        return 1
    if state == SessionState.FAULTED:
        print(f"Erro ao Carregar Relatórios: {session.error}", file=sys.stderr)
        return 1
    if session.error:
        print(f"Aviso: {session.error}", file=sys.stderr)

    print_dashboard(session, profile, das_paid, has_access)

    if args.listar:
        print("\nRelatórios salvos:")
        for config in session.saved_configs:
            print(f"  - {config.report_name}")
        if not session.saved_configs:
            print("  (nenhum)")
        return 0

    if args.excluir:
        config = session.find_config(args.excluir)
        if config is None:
            print(f"Relatório '{args.excluir}' não encontrado.", file=sys.stderr)
            return 1
        if not session.delete_config_action(config.id):
            print(f"Erro ao Excluir: {session.actions['delete'].last_error}", file=sys.stderr)
            return 1
        print(f"Relatório '{args.excluir}' excluído.")
        return 0

    if args.relatorio:
        config = session.find_config(args.relatorio)
        if config is None:
            print(f"Relatório '{args.relatorio}' não encontrado.", file=sys.stderr)
            return 1
        session.load_config(config)
        print(f"\nConfiguração \"{config.report_name}\" aplicada.")
    elif args.ano:
        session.apply_filters(session.active_filters.with_date_range(DateRange.full_year(args.ano)))

    if not session.all_transactions:
        print("\nNenhuma transação encontrada. Adicione transações para visualizar os relatórios.")
        return 0

    print_report(session)

    if args.salvar:
        saved = session.save_as_new(args.salvar)
        if saved is None:
            print(f"Erro ao Salvar: {session.actions['save_new'].last_error}", file=sys.stderr)
            return 1
        print(f"\nRelatório \"{saved.report_name}\" foi salvo com sucesso.")

    if args.saida:
        for path in write_outputs(session, args.saida):
            print(f"Gravado: {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
