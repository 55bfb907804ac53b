# utils/ui_components.py
import numpy as np
from dash import html

from utils.currency import format_currency_output


def vanguard_color(success_rate):
    """Returns a color based on the success rate (percent) for styling: green high, red low."""

    # Check for valid numeric input. If not, return a safe, default color.
    if not isinstance(success_rate, (int, float)) or np.isnan(success_rate):
        return 'rgb(128, 128, 128)'  # Gray

    sr = max(0, min(100, success_rate))

    if sr >= 80:
        return 'rgb(0, 128, 0)' # Green
    elif sr >= 50:
        return 'rgb(255, 165, 0)' # Orange
    else:
        return 'rgb(255, 0, 0)' # Red


def create_rate_header(summary, elapsed=None):
    """Creates the HTML Div for the Monte Carlo summary header."""
    ages = sorted(summary.survival_probabilities)
    if summary.horizon_age is not None:
        ages = [age for age in ages if age <= summary.horizon_age]
    last_age = ages[-1] if ages else None
    last_rate = summary.survival_probabilities[last_age] * 100 if ages else float("nan")

    rate_style = {
        "color": vanguard_color(last_rate),
        "fontWeight": "bold",
        "fontSize": "22px",
        "margin": "0 10px",
        "textAlign": "center"
    }
    median_style = dict(rate_style, color="rgb(31, 119, 180)")

    children = [
        html.H3(f"Median Final Balance: {format_currency_output(summary.p50)}", style=median_style),
    ]
    if last_age is not None:
        children.append(html.H3(f"Funded to Age {last_age}: {last_rate:.1f}%", style=rate_style))
    if elapsed is not None:
        children.append(html.Small(f"{summary.total_simulations:,} trials in {elapsed:.1f}s",
                                   style={"alignSelf": "center", "color": "#666"}))

    return html.Div(children, style={'display': 'flex', 'justifyContent': 'center', 'padding': '15px'})


def create_balance_readout(total_balance):
    """Current total of all investment accounts."""
    return html.Div([
        html.Span("Total Investment Balance: ", style={"fontWeight": "bold"}),
        html.Span(format_currency_output(total_balance), style={"fontFamily": "monospace", "fontSize": "18px"}),
    ], style={"padding": "8px 0"})
