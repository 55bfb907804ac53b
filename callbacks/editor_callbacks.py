import copy
import logging
from dataclasses import asdict
from typing import Dict, Any, List

from dash import Input, Output, State, no_update, ctx
from dash.exceptions import PreventUpdate

from models import InvalidScenarioError
from engine.withdrawal_policy import anchor_tiers, next_tier, preset_strategy
from utils.currency import clean_currency, clean_int, clean_percent, format_percent_output
from utils.input_adapter import row_to_account, row_to_tier
from utils.ui_components import create_balance_readout
from utils.xml_loader import DEFAULT_ACCOUNTS, DEFAULT_INCOME_STREAMS

logger = logging.getLogger(__name__)

PERCENT_INPUT_IDS = [
    "tax_rate",
    "pre_retirement_return",
    "post_retirement_return",
    "volatility",
]


# --- Row helpers ---
def _next_id(rows: List[Dict[str, Any]]) -> int:
    return max((clean_int(row.get("id")) for row in rows), default=0) + 1


def new_account_row(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Blank account: next id, drained last, no age restriction."""
    return {
        "id": _next_id(rows),
        "name": "New Account",
        "balance": 0.0,
        "type": "taxable",
        "withdrawal_order": len(rows) + 1,
        "min_age": 0.0,
    }


def new_stream_row(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "id": _next_id(rows),
        "name": "New Income",
        "amount": 1000.0,
        "start_age": 65,
        "end_age": 95,
        "taxable": True,
        "cola": 2.0,
        "is_annual": False,
    }


def tiers_to_rows(tiers) -> List[Dict[str, Any]]:
    return [asdict(tier) for tier in tiers]


def remove_selected(rows: List[Dict[str, Any]], selected: List[Dict[str, Any]], keep_one: bool = False):
    """Rows minus the selected ones; with keep_one the last row is never removed."""
    if not selected:
        return rows
    remaining = [row for row in rows if row not in selected]
    if keep_one and not remaining:
        return rows
    return remaining


def register_editor_callbacks(app):

    # ----------------------------------------------------------------------
    # 1. Accounts Grid (Add, Delete, Reset)
    # ----------------------------------------------------------------------
    @app.callback(
        Output('accounts-grid', 'rowData'),
        Input('add-account-btn', 'n_clicks'),
        Input('delete-account-btn', 'n_clicks'),
        Input('reset-accounts-btn', 'n_clicks'),
        State('accounts-grid', 'rowData'),
        State('accounts-grid', 'selectedRows'),
        prevent_initial_call=True
    )
    def edit_accounts(n_add, n_delete, n_reset, rows, selected):
        trigger_id = ctx.triggered_id
        rows = rows or []

        if trigger_id == "add-account-btn":
            return rows + [new_account_row(rows)]
        if trigger_id == "delete-account-btn":
            return remove_selected(rows, selected)
        if trigger_id == "reset-accounts-btn":
            return copy.deepcopy(DEFAULT_ACCOUNTS)
        raise PreventUpdate

    # ----------------------------------------------------------------------
    # 2. Income Streams Grid (Add, Delete, Reset)
    # ----------------------------------------------------------------------
    @app.callback(
        Output('income-grid', 'rowData'),
        Input('add-stream-btn', 'n_clicks'),
        Input('delete-stream-btn', 'n_clicks'),
        Input('reset-streams-btn', 'n_clicks'),
        State('income-grid', 'rowData'),
        State('income-grid', 'selectedRows'),
        prevent_initial_call=True
    )
    def edit_streams(n_add, n_delete, n_reset, rows, selected):
        trigger_id = ctx.triggered_id
        rows = rows or []

        if trigger_id == "add-stream-btn":
            return rows + [new_stream_row(rows)]
        if trigger_id == "delete-stream-btn":
            return remove_selected(rows, selected)
        if trigger_id == "reset-streams-btn":
            return copy.deepcopy(DEFAULT_INCOME_STREAMS)
        raise PreventUpdate

    # ----------------------------------------------------------------------
    # 3. Withdrawal Tiers (Preset, Add, Delete, Re-anchor on retirement age)
    # ----------------------------------------------------------------------
    @app.callback(
        Output('tier-grid', 'rowData'),
        Output('withdrawal-mode', 'value'),
        Input('preset-strategy', 'value'),
        Input('add-tier-btn', 'n_clicks'),
        Input('delete-tier-btn', 'n_clicks'),
        Input('retirement_age', 'value'),
        State('tier-grid', 'rowData'),
        State('tier-grid', 'selectedRows'),
        State('max_age', 'value'),
        State('accounts-grid', 'rowData'),
        prevent_initial_call=True
    )
    def edit_tiers(preset, n_add, n_delete, retirement_age, rows, selected, max_age, account_rows):
        trigger_id = ctx.triggered_id
        rows = rows or []
        retirement_age = clean_int(retirement_age)
        max_age = clean_int(max_age)

        if trigger_id == "preset-strategy":
            if not preset:
                raise PreventUpdate
            try:
                accounts = [row_to_account(row, i) for i, row in enumerate(account_rows or [])]
            except InvalidScenarioError as e:
                logger.warning(f"Cannot apply preset '{preset}': {e}")
                raise PreventUpdate
            tiers, mode = preset_strategy(preset, retirement_age, max_age, accounts)
            logger.info(f"Applied withdrawal preset '{preset}' ({len(tiers)} tier(s), {mode.value} mode)")
            return tiers_to_rows(tiers), mode.value

        tiers = [row_to_tier(row) for row in rows]

        if trigger_id == "add-tier-btn":
            return tiers_to_rows(tiers + [next_tier(tiers, max_age, retirement_age)]), no_update
        if trigger_id == "delete-tier-btn":
            return remove_selected(rows, selected, keep_one=True), no_update
        if trigger_id == "retirement_age":
            if not tiers:
                raise PreventUpdate
            return tiers_to_rows(anchor_tiers(tiers, retirement_age)), no_update
        raise PreventUpdate

    # ----------------------------------------------------------------------
    # 4. UI Collapse Toggle
    # ----------------------------------------------------------------------
    @app.callback(
        Output("editor-collapse-content", "style"),
        Output("editor-collapse-button", "children"),
        Input("editor-collapse-button", "n_clicks"),
        State("editor-collapse-content", "style"),
        prevent_initial_call=True
    )
    def toggle_editor_collapse(n_clicks, current_style):
        """Toggles the visibility and button text of the scenario editors."""
        if not ctx.triggered or ctx.triggered_id != "editor-collapse-button":
            return no_update, no_update

        if current_style and current_style.get("display") == "block":
            return {"display": "none"}, "Scenario Editor – Click to Open"
        else:
            return {"display": "block"}, "Scenario Editor – Click to Close"

    # ======================================================================
    # PERCENT FORMATTING CALLBACK (Handles immediate UI reformatting)
    # ======================================================================
    PERCENT_OUTPUTS = [Output(id, 'value') for id in PERCENT_INPUT_IDS]
    PERCENT_INPUTS = [Input(id, 'value') for id in PERCENT_INPUT_IDS]

    @app.callback(
        PERCENT_OUTPUTS,
        PERCENT_INPUTS,
        prevent_initial_call=True
    )
    def format_percent_inputs(*input_values):
        """
        Reformats the edited percent input ('7' -> '7.0%'); others stay untouched.
        """
        formatted_values = [no_update] * len(input_values)

        try:
            triggered_index = PERCENT_INPUT_IDS.index(ctx.triggered_id)
        except ValueError:
            return formatted_values

        val = input_values[triggered_index]
        numeric_val = clean_percent(val)
        if numeric_val is None:
            return formatted_values

        formatted_str = format_percent_output(numeric_val)
        if formatted_str != str(val):
            formatted_values[triggered_index] = formatted_str
        return formatted_values

    # ----------------------------------------------------------------------
    # 5. Total portfolio value, updated while editing
    # ----------------------------------------------------------------------
    @app.callback(
        Output('total-portfolio-balance', 'children'),
        Input('accounts-grid', 'rowData'),
        Input('accounts-grid', 'cellValueChanged'),
        prevent_initial_call=True
    )
    def update_total_portfolio_balance(row_data, cell_value_change):
        total_balance = sum(clean_currency(row.get('balance', 0.0)) for row in row_data or [])
        return create_balance_readout(total_balance)
