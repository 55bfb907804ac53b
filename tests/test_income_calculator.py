import pytest

from engine.income_calculator import (
    accrued_amount,
    fixed_income_totals,
    is_active,
    is_taxable,
    stream_payments,
    taxable_fixed_income,
)
from models import IncomeStream


def make_stream(**overrides):
    params = dict(id=1, name="Pension", amount=1000, start_age=65, end_age=95, taxable=True, cola=0.0)
    params.update(overrides)
    return IncomeStream(**params)


def test_active_range_is_inclusive():
    stream = make_stream(start_age=65, end_age=70)
    assert not is_active(stream, 64)
    assert is_active(stream, 65)
    assert is_active(stream, 70)
    assert not is_active(stream, 71)


def test_inactive_stream_pays_nothing():
    stream = make_stream(start_age=67)
    assert accrued_amount(stream, 66) == 0.0
    assert accrued_amount(stream, 96) == 0.0


def test_monthly_amount_is_annualized():
    assert accrued_amount(make_stream(amount=1000), 65) == 12_000


def test_annual_amount_is_used_as_is():
    assert accrued_amount(make_stream(amount=30_000, is_annual=True), 65) == 30_000


def test_cola_compounds_from_start_age():
    stream = make_stream(amount=1000, cola=2.5)
    assert accrued_amount(stream, 75) == pytest.approx(12_000 * 1.025 ** 10)
    assert accrued_amount(stream, 75) == pytest.approx(15_361, abs=1)


def test_totals_split_taxable_and_tax_free():
    streams = [
        make_stream(id=1, amount=1000, taxable=True),
        make_stream(id=2, amount=500, taxable=False),
        make_stream(id=3, amount=800, start_age=70),
    ]
    gross, taxable = fixed_income_totals(streams, 66)
    assert gross == 18_000
    assert taxable == 12_000
    assert not is_taxable(streams[1])
    assert taxable_fixed_income(streams, 66) == 12_000
    assert taxable_fixed_income(streams, 70) == 12_000 + 9_600


def test_stream_payments_lists_active_streams_only():
    streams = [make_stream(id=1), make_stream(id=2, name="Later", start_age=80)]
    payments = stream_payments(streams, 70)
    assert [p.id for p in payments] == [1]
    assert payments[0].amount == 12_000
    assert payments[0].taxable
