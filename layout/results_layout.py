# results_layout.py
from dash import html, dcc
import dash_ag_grid as dag


def create_results_layout():
    """
    Static layout for the projection plots, yearly table and Monte Carlo charts.
    """
    return html.Div([

        # Deterministic projection (recomputed on every input change)
        html.Div(id="projection-status", style={'color': '#7f8c8d', 'fontSize': '14px'}),
        html.Div([dcc.Graph(id='balance-chart')], style={'margin': '40px 0'}),
        html.Div([dcc.Graph(id='income-chart')], style={'margin': '40px 0'}),

        html.H3("Year-by-Year Detail"),
        dag.AgGrid(
            id="yearly-table",
            columnDefs=[],
            rowData=[],
            defaultColDef={"resizable": True, "sortable": True, "minWidth": 110},
            dashGridOptions={"rowHeight": 36, "animateRows": False},
            style={"height": 500},
            className="ag-theme-alpine",
        ),

        # Monte Carlo (run on demand)
        html.H3("Monte Carlo Analysis", style={'marginTop': '40px'}),
        html.Div([dcc.Graph(id='percentile-chart')], style={'margin': '20px 0'}),
        html.Div([dcc.Graph(id='survival-chart')], style={'margin': '20px 0'}),

    ], style={'maxWidth': '1400px', 'margin': '0 auto'})
