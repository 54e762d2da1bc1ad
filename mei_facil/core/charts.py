# mei_facil/core/charts.py
import io
from typing import List, Optional, Sequence, Union

import matplotlib

matplotlib.use("Agg")  # geração de imagens sem display

import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import pandas as pd

from mei_facil.core.models import CategorySummary, MonthlySummary

# Configurações globais para os gráficos (cores, fontes, etc.)
plt.style.use('seaborn-v0_8-darkgrid')
plt.rcParams['font.family'] = 'sans-serif'
plt.rcParams['font.size'] = 10
plt.rcParams['axes.labelsize'] = 12
plt.rcParams['axes.titlesize'] = 14
plt.rcParams['xtick.labelsize'] = 10
plt.rcParams['ytick.labelsize'] = 10
plt.rcParams['legend.fontsize'] = 10

COLORS = {
    'Receitas': '#00C49F',
    'Despesas': '#FF8042',
    'Saldo': '#0088FE',
    'Fatias': ['#0088FE', '#00C49F', '#FFBB28', '#FF8042', '#8884D8', '#82CA9D', '#FF5733', '#C70039', '#900C3F'],
}


def _to_png(fig) -> io.BytesIO:
    buf = io.BytesIO()
    fig.savefig(buf, format='png', dpi=150)
    buf.seek(0)
    plt.close(fig)
    return buf


def _brl_thousands(value: float, _pos) -> str:
    return f"R${value / 1000:.0f}k" if abs(value) >= 1000 else f"R${value:.0f}"


def monthly_summary_frame(monthly_summary: Sequence[MonthlySummary]) -> pd.DataFrame:
    """DataFrame indexado pelo rótulo do mês, com Receitas, Despesas e Saldo em float."""
    df = pd.DataFrame([m.to_dict() for m in monthly_summary], columns=['month', 'Receitas', 'Despesas', 'Saldo'])
    df = df.set_index('month')
    return df.astype(float)


def generate_monthly_chart(
    monthly_summary: Sequence[MonthlySummary],
    period_label: Union[int, str, None] = None,
) -> Optional[io.BytesIO]:
    """Gráfico de linhas com receitas, despesas e saldo por mês (PNG)."""
    if not monthly_summary:
        return None

    df = monthly_summary_frame(monthly_summary)

    fig, ax = plt.subplots(figsize=(12, 7))
    df[['Receitas', 'Despesas', 'Saldo']].plot(
        kind='line',
        ax=ax,
        marker='o',
        linewidth=2,
        color=[COLORS['Receitas'], COLORS['Despesas'], COLORS['Saldo']],
    )

    label = period_label if period_label is not None else "Período"
    ax.set_title(f'Receitas vs. Despesas Mensais ({label})', fontsize=16, fontweight='bold')
    ax.set_ylabel('Valor (R$)')
    ax.set_xlabel('Mês/Ano')
    ax.set_xticks(range(len(df.index)))
    ax.set_xticklabels(df.index, rotation=45, ha='right')
    ax.yaxis.set_major_formatter(mticker.FuncFormatter(_brl_thousands))
    ax.grid(axis='y', linestyle='--', alpha=0.7)
    ax.legend(title='Tipo')
    fig.tight_layout()

    return _to_png(fig)


def generate_category_pie_chart(summary: Sequence[CategorySummary], title: str) -> Optional[io.BytesIO]:
    """Gráfico de pizza da distribuição por categoria, com percentuais (PNG)."""
    if not summary:
        return None

    names: List[str] = [c.name for c in summary]
    values: List[float] = [float(c.value) for c in summary]
    if sum(values) <= 0:
        return None

    colors = [COLORS['Fatias'][i % len(COLORS['Fatias'])] for i in range(len(values))]

    fig, ax = plt.subplots(figsize=(10, 7))
    wedges, _texts, _autotexts = ax.pie(
        values,
        autopct=lambda p: f'{p:.0f}%',
        startangle=90,
        colors=colors,
        pctdistance=0.8,
    )
    ax.set_title(title, fontsize=16, fontweight='bold')
    ax.axis('equal')

    labels = [f"{name}: R${value:.2f}" for name, value in zip(names, values)]
    ax.legend(wedges, labels, title="Categoria", loc="center left", bbox_to_anchor=(1, 0, 0.5, 1))
    fig.tight_layout()

    return _to_png(fig)
