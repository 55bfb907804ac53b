# main_layout.py
from dash import dcc
from dash import html

import dash_ag_grid as dag

from utils.xml_loader import DEFAULT_SETUP, DEFAULT_ACCOUNTS, DEFAULT_INCOME_STREAMS, DEFAULT_WITHDRAWAL
from utils.currency import pretty_number_input, pretty_percent_input
from utils.ui_components import create_balance_readout
from engine.withdrawal_policy import PRESET_NAMES

from layout.results_layout import create_results_layout

# Calculate the initial total balance from the default data
INITIAL_TOTAL_BALANCE = sum(row.get('balance', 0) for row in DEFAULT_ACCOUNTS)

BUTTON_STYLE = {
    'padding': '10px 20px',
    'color': 'white',
    'border': 'none',
    'borderRadius': '4px',
    'cursor': 'pointer',
    'marginRight': '10px',
}

PANEL_STYLE = {
    'padding': '25px',
    'border': '2px solid #ddd',
    'borderRadius': '12px',
    'backgroundColor': '#fff',
    'boxShadow': '0 8px 25px rgba(0,0,0,0.1)',
    'marginBottom': '30px'
}

ROW_STYLE = {
    'display': 'flex',
    'gap': '15px 15px',
    'flexWrap': 'wrap',
    'marginBottom': '15px',
    'width': '100%',
    'boxSizing': 'border-box'
}

CURRENCY_FORMATTER = {"function": "params.value == null ? '' : '$' + Math.round(Number(params.value)).toLocaleString()"}
PERCENT_FORMATTER = {"function": "params.value == null ? '' : Number(params.value).toFixed(1) + '%'"}

DEFAULT_COL_DEF = {
    "flex": 1,
    "minWidth": 100,
    "resizable": True,
    "editable": True,
}

SELECT_COLUMN = {
    "headerName": "Select",
    "checkboxSelection": True,
    "headerCheckboxSelection": True,
    "width": 90,
    "maxWidth": 90,
    "pinned": "right",
    "editable": False,
    "sortable": False,
}


def _input_cell(children, min_width='120px'):
    return html.Div(children, style={'flex': '1', 'minWidth': min_width, 'textAlign': 'center'})


def _button(label, id, color):
    return html.Button(label, id=id, n_clicks=0, style=dict(BUTTON_STYLE, backgroundColor=color))


# ----------------------------------------------------------------------
# Editors
# ----------------------------------------------------------------------

accounts_editor = html.Div(style=PANEL_STYLE, children=[
    html.H3("Investment Accounts"),
    html.Div([
        _button("Add New Account", "add-account-btn", '#27ae60'),
        _button("Delete Selected", "delete-account-btn", 'red'),
        _button("Reset to Defaults", "reset-accounts-btn", 'blue'),
        html.Div(
            id="total-portfolio-balance",
            children=create_balance_readout(INITIAL_TOTAL_BALANCE),
            style={'marginLeft': 'auto', 'fontSize': '18px', 'color': '#34495e'}
        ),
    ], style={'marginBottom': '15px', 'display': 'flex', 'alignItems': 'center'}),

    dag.AgGrid(
        id='accounts-grid',
        columnDefs=[
            {"field": "name", "headerName": "Account Name", "pinned": "left", "minWidth": 180},
            {"field": "balance", "headerName": "Balance ($)", "type": "rightAligned",
             "valueFormatter": CURRENCY_FORMATTER, "cellDataType": "number"},
            {"field": "type", "headerName": "Tax Type", "cellEditor": "agSelectCellEditor",
             "cellEditorParams": {"values": ["taxable", "traditional", "roth", "hsa"]}},
            {"field": "withdrawal_order", "headerName": "Withdrawal Order", "cellDataType": "number"},
            {"field": "min_age", "headerName": "Min Age", "cellDataType": "number"},
            SELECT_COLUMN,
        ],
        rowData=DEFAULT_ACCOUNTS,
        getRowId="params.data.id",
        defaultColDef=DEFAULT_COL_DEF,
        dashGridOptions={"rowHeight": 42, "animateRows": False, "rowSelection": "multiple",
                         "suppressRowClickSelection": True},
        style={"height": 340},
        className="ag-theme-alpine",
    ),
])

income_editor = html.Div(style=PANEL_STYLE, children=[
    html.H3("Fixed Income Streams"),
    html.Div([
        _button("Add Income Stream", "add-stream-btn", '#27ae60'),
        _button("Delete Selected", "delete-stream-btn", 'red'),
        _button("Reset to Defaults", "reset-streams-btn", 'blue'),
    ], style={'marginBottom': '15px', 'display': 'flex', 'alignItems': 'center'}),

    dag.AgGrid(
        id='income-grid',
        columnDefs=[
            {"field": "name", "headerName": "Income Source", "pinned": "left", "minWidth": 200},
            {"field": "amount", "headerName": "Amount ($)", "type": "rightAligned",
             "valueFormatter": CURRENCY_FORMATTER, "cellDataType": "number"},
            {"field": "is_annual", "headerName": "Annual?", "cellDataType": "boolean"},
            {"field": "start_age", "headerName": "Start Age", "cellDataType": "number"},
            {"field": "end_age", "headerName": "End Age", "cellDataType": "number"},
            {"field": "taxable", "headerName": "Taxable", "cellDataType": "boolean"},
            {"field": "cola", "headerName": "COLA %", "valueFormatter": PERCENT_FORMATTER,
             "cellDataType": "number"},
            SELECT_COLUMN,
        ],
        rowData=DEFAULT_INCOME_STREAMS,
        getRowId="params.data.id",
        defaultColDef=DEFAULT_COL_DEF,
        dashGridOptions={"rowHeight": 42, "animateRows": False, "rowSelection": "multiple",
                         "suppressRowClickSelection": True},
        style={"height": 340},
        className="ag-theme-alpine",
    ),
])

withdrawal_editor = html.Div(style=PANEL_STYLE, children=[
    html.H3("Withdrawal Strategy"),
    html.Div([
        html.Div([
            html.Label("Preset Strategy", style={'fontWeight': 'bold', 'display': 'block', 'marginBottom': '6px'}),
            dcc.Dropdown(
                id='preset-strategy',
                options=[{'label': label, 'value': key} for key, label in PRESET_NAMES.items()],
                placeholder="Custom",
            ),
        ], style={'flex': '1', 'minWidth': '220px'}),
        html.Div([
            html.Label("Withdrawal Type", style={'fontWeight': 'bold', 'display': 'block', 'marginBottom': '6px'}),
            dcc.RadioItems(
                id='withdrawal-mode',
                options=[
                    {'label': ' Percentage of balance', 'value': 'percentage'},
                    {'label': ' Fixed dollar amount', 'value': 'dollar'},
                ],
                value=DEFAULT_WITHDRAWAL["mode"],
                inline=True,
                inputStyle={'marginLeft': '12px'},
            ),
        ], style={'flex': '2', 'minWidth': '300px'}),
        html.Div([
            _button("Add Tier", "add-tier-btn", '#27ae60'),
            _button("Delete Selected", "delete-tier-btn", 'red'),
        ], style={'alignSelf': 'flex-end'}),
    ], style=dict(ROW_STYLE, alignItems='flex-end')),

    dag.AgGrid(
        id='tier-grid',
        columnDefs=[
            {"field": "age_start", "headerName": "Age Start", "cellDataType": "number"},
            {"field": "age_end", "headerName": "Age End", "cellDataType": "number"},
            {"field": "rate", "headerName": "Rate %", "valueFormatter": PERCENT_FORMATTER,
             "cellDataType": "number"},
            {"field": "dollar_amount", "headerName": "Dollar Amount ($)", "type": "rightAligned",
             "valueFormatter": CURRENCY_FORMATTER, "cellDataType": "number"},
            SELECT_COLUMN,
        ],
        rowData=DEFAULT_WITHDRAWAL["tiers"],
        defaultColDef=DEFAULT_COL_DEF,
        dashGridOptions={"rowHeight": 42, "animateRows": False, "rowSelection": "multiple",
                         "suppressRowClickSelection": True},
        style={"height": 260},
        className="ag-theme-alpine",
    ),
    html.Div("Tiers are applied in order; ages not covered by any tier withdraw 4% of the balance.",
             style={'color': '#7f8c8d', 'fontSize': '13px', 'marginTop': '8px'}),
])

# ----------------------------------------------------------------------
# Application Layout Definition
# ----------------------------------------------------------------------

main_layout = html.Div(
    style={'fontFamily': 'Arial, sans-serif', 'margin': '2%', 'backgroundColor': '#f9f9fb'},
    children=[
        html.H1(
            "Retirement Projection Planner",
            style={'textAlign': 'center', 'color': 'black', 'marginBottom': 20}
        ),

        # ----------------------------------------------------------------------
        # ROW 1: Basic Settings
        # ----------------------------------------------------------------------
        html.Div([
            _input_cell(pretty_number_input('starting_year', DEFAULT_SETUP['starting_year'], label="Starting Year",
                                            min_val=1900, max_val=2200)),
            _input_cell(pretty_number_input('current_age', DEFAULT_SETUP['current_age'], label="Current Age",
                                            min_val=0, max_val=120)),
            _input_cell(pretty_number_input('retirement_age', DEFAULT_SETUP['retirement_age'], label="Retirement Age",
                                            min_val=0, max_val=120)),
            _input_cell(pretty_number_input('max_age', DEFAULT_SETUP['max_age'], label="Max Age",
                                            min_val=0, max_val=120)),
            _input_cell(pretty_percent_input('tax_rate', DEFAULT_SETUP['tax_rate'], label="Ordinary Tax Rate")),
            _input_cell([
                html.Label("Filing Status", style={'fontWeight': 'bold', 'display': 'block', 'fontSize': 14, 'marginBottom': '6px'}),
                dcc.Dropdown(
                    id='filing_status',
                    options=[
                        {'label': 'Single', 'value': 'single'},
                        {'label': 'Married Filing Jointly', 'value': 'married_joint'},
                        {'label': 'Married Filing Separately', 'value': 'married_separate'},
                        {'label': 'Head of Household', 'value': 'head_of_household'},
                    ],
                    value=DEFAULT_SETUP['filing_status'],
                    clearable=False,
                ),
            ], min_width='200px'),
        ], style=ROW_STYLE),

        # ----------------------------------------------------------------------
        # ROW 2: Returns and Monte Carlo controls
        # ----------------------------------------------------------------------
        html.Div([
            _input_cell(pretty_percent_input('pre_retirement_return', DEFAULT_SETUP['pre_retirement_return'],
                                             label="Pre-Retirement Return")),
            _input_cell(pretty_percent_input('post_retirement_return', DEFAULT_SETUP['post_retirement_return'],
                                             label="Post-Retirement Return")),
            _input_cell(pretty_percent_input('volatility', DEFAULT_SETUP['volatility'], label="Volatility (+/-)")),

            html.Div([
                html.Label("Number of Simulations", style={'fontSize': 14, 'fontWeight': 'bold'}),
                dcc.Slider(
                    id='nsims', min=100, max=10000, step=100, value=DEFAULT_SETUP['nsims'],
                    marks={i: f"{i//1000}k" for i in range(0, 10001, 2000)},
                    tooltip={"placement": "bottom", "always_visible": True},
                ),
            ], style={'flex': 2, 'minWidth': '300px', 'padding': '0 20px'}),

            html.Button(
                "Run Monte Carlo",
                id="run",
                n_clicks=0,
                style={
                    'padding': '12px 20px',
                    'fontSize': '16px',
                    'fontWeight': 'bold',
                    'backgroundColor': '#3498db',
                    'color': 'white',
                    'border': 'none',
                    'borderRadius': '8px',
                    'cursor': 'pointer',
                    'boxShadow': '0 4px 8px rgba(0,0,0,0.1)',
                    'whiteSpace': 'nowrap',
                    'height': '50px',
                    'alignSelf': 'flex-end',
                }
            ),
        ], style=dict(ROW_STYLE, alignItems='flex-end', marginBottom='30px')),

        # Monte Carlo summary header
        html.Div(
            id='success_header',
            children="Click 'Run Monte Carlo' to load results",
            style={
                'textAlign': 'center',
                'fontWeight': 'bold',
                'fontSize': '20px',
                'color': '#1a1a1a',
                'backgroundColor': '#e3f2fd',
                'border': '2px solid #0052CC',
                'borderRadius': '8px',
                'minHeight': '60px',
                'marginBottom': '30px',
                'display': 'flex',
                'alignItems': 'center',
                'justifyContent': 'center'
            }
        ),

        # ----------------------------------------------------------------------
        # COLLAPSIBLE EDITORS
        # ----------------------------------------------------------------------
        html.Button(
            "Scenario Editor – Click to Close",
            id="editor-collapse-button",
            n_clicks=0,
            style={
                'padding': '12px 20px',
                'fontSize': '16px',
                'fontWeight': 'bold',
                'backgroundColor': 'purple',
                'color': 'white',
                'border': 'none',
                'borderRadius': '8px',
                'cursor': 'pointer',
                'marginBottom': '15px',
            }
        ),
        html.Div(
            id="editor-collapse-content",
            style={'display': 'block'},
            children=[accounts_editor, income_editor, withdrawal_editor],
        ),

        # ----------------------------------------------------------------------
        # PLOTS SECTION
        # ----------------------------------------------------------------------
        html.Div(id="results", children=[
            create_results_layout(),
        ]),

        # ----------------------------------------------------------------------
        # DEBUG LOG
        # ----------------------------------------------------------------------
        html.Div(id="debug-output", style={"whiteSpace": "pre-wrap", "fontSize": 12}),
    ]
)
