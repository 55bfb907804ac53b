# utils/currency.py
from dash import dcc, html
from typing import Union

INPUT_STYLE = {
    'width': '80%',
    'height': '36px',
    'textAlign': 'center',
    'fontSize': '16px',
    'fontFamily': 'monospace',
    'fontWeight': '500',
    'border': '1px solid #ccc',
    'borderRadius': '6px'
}

LABEL_STYLE = {
    'fontWeight': 'bold',
    'fontSize': 14,
    'textAlign': 'center',
    'marginBottom': '6px',
    'display': 'block'
}


def _label_text(id, label):
    """Explicit label, or one derived from the component id ('max-age' -> 'Max Age')."""
    if label is None:
        return " ".join(word.capitalize() for word in id.replace('-', '_').split('_'))
    return label or None


def _labelled(id, label, input_component):
    children = []
    label_text = _label_text(id, label)
    if label_text is not None:
        children.append(html.Label(label_text, style=LABEL_STYLE))
    children.append(input_component)
    return children


def pretty_percent_input(id, value, label=None, placeholder="0.0%", decimals=1):
    """
    Generates a stylized percentage input using type='text' for custom formatting.
    value is in percent points (7.0 for 7%).
    """
    return _labelled(id, label, dcc.Input(
        id=id,
        type='text',
        value=format_percent_output(value, decimals),
        placeholder=placeholder,
        style=INPUT_STYLE,
        debounce=True,
    ))


def pretty_number_input(id, value, label=None, min_val=None, max_val=None, step=1):
    """
    Plain integer input (ages, years, trial counts) in the same style.
    """
    input_props = {}
    if min_val is not None:
        input_props['min'] = min_val
    if max_val is not None:
        input_props['max'] = max_val

    return _labelled(id, label, dcc.Input(
        id=id,
        type='number',
        value=int(value),
        step=step,
        style=INPUT_STYLE,
        debounce=True,
        **input_props
    ))


# ----------------------------------------------------------------------
# Parsing helpers
# ----------------------------------------------------------------------

def clean_currency(val) -> float:
    """
    Cleans a currency string (e.g., "$140,000.00") into a float (140000.0).
    Unparseable input becomes 0.0.
    """
    if not val:
        return 0.0

    try:
        cleaned_val = str(val).replace('$', '').replace(',', '').strip()
        if not cleaned_val:
            return 0.0
        return float(cleaned_val)
    except ValueError:
        return 0.0


def clean_percent(raw_input: Union[str, float, int]) -> Union[float, None]:
    """
    Cleans raw input ('7%', '7', 7.0) into percent points (7.0).
    Returns None for empty or unparseable input.
    """
    if raw_input is None:
        return None

    if isinstance(raw_input, (float, int)):
        return float(raw_input)

    s = str(raw_input).replace('%', '').replace(',', '').replace(' ', '').strip()
    if not s:
        return None

    try:
        return float(s)
    except ValueError:
        return None


def clean_int(raw_input, default: int = 0) -> int:
    """Integer from grid/input values such as '65', 65.0 or '1,000'."""
    if raw_input is None or raw_input == "":
        return default
    try:
        return int(float(str(raw_input).replace(',', '').strip()))
    except ValueError:
        return default


# ----------------------------------------------------------------------
# Display helpers
# ----------------------------------------------------------------------

def format_percent_output(value: Union[float, None], decimal_places: int = 1) -> str:
    """Formats percent points (7.0) to a display string ('7.0%')."""
    if value is None:
        return ""
    return f"{float(value):.{decimal_places}f}%"


def format_currency_output(val, decimals=0):
    """
    Formats a float/int into a clean currency string ($1,234,567).

    Args:
        val (float): The numerical value to format.
        decimals (int): Number of decimal places.
    """
    if val is None:
        val = 0.0
    return f"${val:,.{decimals}f}"
