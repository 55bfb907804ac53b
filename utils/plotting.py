# utils/plotting.py

from typing import List, Sequence

import plotly.graph_objects as go
import plotly.express as px

from engine.projector import snapshots_to_frame
from models import SimulationSummary, YearSnapshot
from utils.ui_components import vanguard_color


def _empty_figure(title, height, text="No data available"):
    fig = go.Figure()
    fig.add_annotation(
        text=text,
        xref="paper", yref="paper", x=0.5, y=0.5,
        showarrow=False, font_size=20
    )
    fig.update_layout(title=title, height=height, template="plotly_white")
    return fig


# ------------------------------------------------------------------
# HELPER: Stacked area chart of account balances
# ------------------------------------------------------------------
def create_balance_figure(snapshots: Sequence[YearSnapshot], title="Portfolio Balance by Account"):
    """
    One stacked area per account across the projected ages.
    """
    if not snapshots:
        return _empty_figure(title, 500)

    df = snapshots_to_frame(snapshots)
    account_cols = [c for c in df.columns if c.startswith("account: ")]
    colors = px.colors.qualitative.Vivid

    fig = go.Figure()
    for idx, col in enumerate(account_cols):
        label = col[len("account: "):]
        fig.add_trace(go.Scatter(
            x=df["age"],
            y=df[col],
            mode='lines',
            line=dict(width=0),
            fillcolor=colors[idx % len(colors)],
            stackgroup='one',
            name=label,
            hovertemplate=f'<b>{label}</b><br>Age: %{{x}}<br>Balance: $%{{y:,.0f}}<extra></extra>'
        ))

    fig.update_layout(
        title=title,
        xaxis_title="Age",
        yaxis_title="Balance ($)",
        template="plotly_white",
        hovermode="x unified",
        height=500,
        legend=dict(x=1, y=1, xanchor="right", yanchor="top", bgcolor="rgba(255,255,255,0.9)")
    )
    return fig


# ------------------------------------------------------------------
# HELPER: Income composition (withdrawals + each fixed stream)
# ------------------------------------------------------------------
def create_income_figure(snapshots: Sequence[YearSnapshot], title="Annual Income Composition"):
    """
    Stacked bars for the investment withdrawal and each income stream,
    with net income and taxes overlaid as lines.
    """
    if not snapshots:
        return _empty_figure(title, 500)

    df = snapshots_to_frame(snapshots)
    stream_cols = [c for c in df.columns if c.startswith("income: ")]
    colors = px.colors.qualitative.Plotly

    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=df["age"], y=df["withdrawal"], name="Investment Withdrawals",
        marker_color=colors[0],
        hovertemplate='<b>Investment Withdrawals</b><br>Age: %{x}<br>$%{y:,.0f}<extra></extra>'
    ))
    for idx, col in enumerate(stream_cols, start=1):
        label = col[len("income: "):]
        fig.add_trace(go.Bar(
            x=df["age"], y=df[col], name=label,
            marker_color=colors[idx % len(colors)],
            hovertemplate=f'<b>{label}</b><br>Age: %{{x}}<br>$%{{y:,.0f}}<extra></extra>'
        ))

    fig.add_trace(go.Scatter(
        x=df["age"], y=df["total_net_income"], mode='lines', name="Net Income",
        line=dict(color="black", width=3)
    ))
    fig.add_trace(go.Scatter(
        x=df["age"], y=df["total_taxes"], mode='lines', name="Total Taxes",
        line=dict(color="firebrick", width=2, dash='dash')
    ))

    fig.update_layout(
        title=title,
        barmode="stack",
        xaxis_title="Age",
        yaxis_title="Annual Income ($)",
        template="plotly_white",
        hovermode="x unified",
        height=500,
        legend=dict(x=1, y=1, xanchor="right", yanchor="top", bgcolor="rgba(255,255,255,0.9)")
    )
    return fig


# ------------------------------------------------------------------
# HELPERS: Monte Carlo summary charts
# ------------------------------------------------------------------
def create_percentile_figure(summary: SimulationSummary, title="Final Balance Percentiles"):
    if summary is None or summary.total_simulations == 0:
        return _empty_figure(title, 400, text="0 simulations")

    labels = ["10th", "25th", "50th (Median)", "75th", "90th"]
    values = [summary.p10, summary.p25, summary.p50, summary.p75, summary.p90]

    fig = go.Figure(go.Bar(
        x=labels, y=values,
        marker_color=px.colors.qualitative.Vivid[:len(values)],
        text=[f"${v:,.0f}" for v in values],
        textposition="outside",
        hovertemplate='<b>%{x} percentile</b><br>$%{y:,.0f}<extra></extra>'
    ))
    fig.update_layout(
        title=f"{title} ({summary.total_simulations:,} trials)",
        xaxis_title="Percentile",
        yaxis_title="Final Balance ($)",
        template="plotly_white",
        height=400,
    )
    return fig


def create_survival_figure(summary: SimulationSummary, title="Portfolio Survival Probability"):
    if summary is None or summary.total_simulations == 0:
        return _empty_figure(title, 400, text="0 simulations")

    ages = sorted(summary.survival_probabilities)
    pct = [summary.survival_probabilities[age] * 100 for age in ages]

    fig = go.Figure(go.Bar(
        x=[f"Age {age}" for age in ages], y=pct,
        marker_color=[vanguard_color(p) for p in pct],
        text=[f"{p:.1f}%" for p in pct],
        textposition="outside",
        hovertemplate='<b>%{x}</b><br>%{y:.1f}% of trials solvent<extra></extra>'
    ))
    fig.update_layout(
        title=title,
        yaxis_title="Trials Still Funded (%)",
        yaxis=dict(range=[0, 105]),
        template="plotly_white",
        height=400,
    )
    return fig


# ------------------------------------------------------------------
# MAIN FUNCTIONS
# ------------------------------------------------------------------
def generate_projection_plots(snapshots: Sequence[YearSnapshot]) -> List[go.Figure]:
    return [create_balance_figure(snapshots), create_income_figure(snapshots)]


def generate_monte_carlo_plots(summary: SimulationSummary) -> List[go.Figure]:
    return [create_percentile_figure(summary), create_survival_figure(summary)]


def get_figure_ids():
    return ["balance-chart", "income-chart"]


def get_monte_carlo_figure_ids():
    return ["percentile-chart", "survival-chart"]
