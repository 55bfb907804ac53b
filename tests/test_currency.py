from utils.currency import (
    clean_currency,
    clean_int,
    clean_percent,
    format_currency_output,
    format_percent_output,
)


def test_clean_currency():
    assert clean_currency("$140,000.00") == 140_000.0
    assert clean_currency(2500) == 2500.0
    assert clean_currency("") == 0.0
    assert clean_currency(None) == 0.0
    assert clean_currency("lots") == 0.0


def test_clean_percent_returns_percent_points():
    assert clean_percent("7%") == 7.0
    assert clean_percent(" 22 ") == 22.0
    assert clean_percent(0.5) == 0.5
    assert clean_percent("") is None
    assert clean_percent("abc") is None


def test_clean_int():
    assert clean_int("65") == 65
    assert clean_int(59.0) == 59
    assert clean_int("1,000") == 1000
    assert clean_int(None, 7) == 7
    assert clean_int("x", 3) == 3


def test_formatting():
    assert format_currency_output(1234567.4) == "$1,234,567"
    assert format_currency_output(None) == "$0"
    assert format_percent_output(7) == "7.0%"
    assert format_percent_output(None) == ""
