# callbacks/simulation_callbacks.py

import logging
import time
import traceback

from dash import Input, Output, State
from dash.exceptions import PreventUpdate
from dash import html
import plotly.graph_objects as go

from engine import project, simulate, snapshots_to_frame
from models import InvalidScenarioError
from utils.input_adapter import get_planner_inputs
from utils.plotting import (
    generate_monte_carlo_plots,
    generate_projection_plots,
    get_figure_ids,
    get_monte_carlo_figure_ids,
)
from utils.ui_components import create_rate_header

logger = logging.getLogger(__name__)

# Scenario inputs shared by the projection and the Monte Carlo callbacks,
# in the order they are passed to build_inputs_from_ui
SCENARIO_FIELDS = [
    ("starting_year", "value"),
    ("max_age", "value"),
    ("current_age", "value"),
    ("retirement_age", "value"),
    ("tax_rate", "value"),
    ("filing_status", "value"),
    ("pre_retirement_return", "value"),
    ("post_retirement_return", "value"),
    ("withdrawal-mode", "value"),
    ("accounts-grid", "rowData"),
    ("income-grid", "rowData"),
    ("tier-grid", "rowData"),
]


def build_inputs_from_ui(starting_year, max_age, current_age, retirement_age, tax_rate, filing_status,
                         pre_return, post_return, withdrawal_mode, account_rows, income_rows, tier_rows,
                         **kwargs):
    """Build inputs from current UI"""
    return get_planner_inputs(
        account_rows=account_rows,
        income_rows=income_rows,
        tier_rows=tier_rows,
        starting_year=starting_year,
        max_age=max_age,
        current_age=current_age,
        retirement_age=retirement_age,
        tax_rate=tax_rate,
        filing_status=filing_status,
        pre_retirement_return=pre_return,
        post_retirement_return=post_return,
        withdrawal_mode=withdrawal_mode,
        **kwargs
    )


def yearly_table(snapshots):
    """(columnDefs, rowData) for the year-by-year AG Grid."""
    df = snapshots_to_frame(snapshots)
    column_defs = []
    for col in df.columns:
        col_def = {"field": col, "headerName": col.replace("_", " ").title()}
        if col not in ("age", "year"):
            col_def["valueFormatter"] = {"function": "'$' + Number(params.value).toLocaleString()"}
            col_def["type"] = "rightAligned"
        else:
            col_def["pinned"] = "left"
            col_def["maxWidth"] = 90
        column_defs.append(col_def)
    return column_defs, df.to_dict("records")


def register_simulation_callbacks(app):

    # ----------------------------------------------------------------
    # 1. Deterministic projection, recomputed on every input change
    # ----------------------------------------------------------------
    PROJECTION_FIGURES = [Output(id, "figure") for id in get_figure_ids()]

    @app.callback(
        *PROJECTION_FIGURES,
        Output("yearly-table", "columnDefs"),
        Output("yearly-table", "rowData"),
        Output("projection-status", "children"),
        *[Input(id, prop) for id, prop in SCENARIO_FIELDS],
        Input("accounts-grid", "cellValueChanged"),
        Input("income-grid", "cellValueChanged"),
        Input("tier-grid", "cellValueChanged"),
    )
    def update_projection(*values):
        scenario_values = values[:len(SCENARIO_FIELDS)]
        try:
            inputs = build_inputs_from_ui(*scenario_values)
            snapshots = project(inputs)
            figure_list = generate_projection_plots(snapshots)
            column_defs, rows = yearly_table(snapshots)

            last = snapshots[-1]
            status = f"Projected ages {snapshots[0].age}-{last.age}; ending balance ${last.balance:,.0f}"
            if last.balance <= 0:
                status += f" (portfolio depleted at age {last.age})"

            return *figure_list, column_defs, rows, status

        except InvalidScenarioError as e:
            logger.warning(f"Invalid scenario: {e}")
            empty_figures = [go.Figure() for _ in get_figure_ids()]
            return *empty_figures, [], [], html.Span(str(e), style={"color": "red"})

        except Exception as e:
            tb = traceback.format_exc()
            logger.error(f"Projection failed: {e}\n{tb}")
            empty_figures = [go.Figure() for _ in get_figure_ids()]
            error_div = html.Div(f"Projection failed: {e}", style={"color": "red", "whiteSpace": "pre-wrap"})
            return *empty_figures, [], [], error_div

    # ----------------------------------------------------------------
    # 2. Monte Carlo, run on demand
    # ----------------------------------------------------------------
    MC_FIGURES = [Output(id, "figure") for id in get_monte_carlo_figure_ids()]

    @app.callback(
        # Header
        Output("success_header", "children"),
        # Figures
        *MC_FIGURES,
        # Debug outputs
        Output("debug-output", "children"),

        # Input
        Input("run", "n_clicks"),

        *[State(id, prop) for id, prop in SCENARIO_FIELDS],
        State("nsims", "value"),
        State("volatility", "value"),

        prevent_initial_call=True
    )
    def run_simulation(n_clicks, *values):
        if not n_clicks:
            raise PreventUpdate

        scenario_values = values[:len(SCENARIO_FIELDS)]
        n_sims, volatility = values[len(SCENARIO_FIELDS):]
        start_time = time.time()

        try:
            inputs = build_inputs_from_ui(*scenario_values, num_simulations=n_sims, volatility=volatility)

            summary = simulate(inputs)   # ← fresh every time
            elapsed = time.time() - start_time

            figure_list = generate_monte_carlo_plots(summary)
            success_header = create_rate_header(summary, elapsed)

            survival = ", ".join(
                f"{age}: {p * 100:.1f}%" for age, p in sorted(summary.survival_probabilities.items())
            )
            debug_output = html.Div(
                f"Simulation completed in {elapsed:.2f}s\n"
                f"p10 ${summary.p10:,.0f} | p50 ${summary.p50:,.0f} | p90 ${summary.p90:,.0f}\n"
                f"Survival by age: {survival}",
                style={'whiteSpace': 'pre-wrap', 'fontSize': '14px', 'color': 'blue', 'marginTop': '10px'}
            )

            return success_header, *figure_list, debug_output

        except Exception as e:
            tb = traceback.format_exc()
            logger.error(f"Simulation failed: {e}\n{tb}")
            error_msg = f"Simulation failed: {str(e)}"

            error_header = html.Div("Simulation Failed", style={'color': 'red', 'fontSize': '28px'})
            empty_figures = [go.Figure() for _ in get_monte_carlo_figure_ids()]
            error_div = html.Div(error_msg, style={"color": "red", "whiteSpace": "pre-wrap"})

            return error_header, *empty_figures, error_div
