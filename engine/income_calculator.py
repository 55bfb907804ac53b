# income_calculator.py
#
# Manages fixed income accrual (pensions, Social Security, disability, annuities)
#

from typing import Iterable, List, Tuple

from models import IncomeStream, StreamPayment


def is_active(stream: IncomeStream, age: int) -> bool:
    """A stream pays in every year from start_age through end_age inclusive."""
    return stream.start_age <= age <= stream.end_age


def is_taxable(stream: IncomeStream) -> bool:
    return bool(stream.taxable)


def base_annual_amount(stream: IncomeStream) -> float:
    """Annual payment in the stream's first year (monthly amounts x 12)."""
    return stream.amount if stream.is_annual else stream.amount * 12


def accrued_amount(stream: IncomeStream, age: int) -> float:
    """
    Calculates the nominal payment of a fixed income stream at a given age,
    compounding the cost-of-living adjustment from the stream's start age.

    Returns:
        float: The annual payment, or 0.0 if the stream is not active.
    """
    if not is_active(stream, age):
        return 0.0

    years_from_start = age - stream.start_age
    return base_annual_amount(stream) * (1 + stream.cola / 100) ** years_from_start


def fixed_income_totals(streams: Iterable[IncomeStream], age: int) -> Tuple[float, float]:
    """
    Returns:
        (gross_fixed_income, taxable_fixed_income) for the given age.
    """
    gross = 0.0
    taxable = 0.0
    for stream in streams:
        amount = accrued_amount(stream, age)
        gross += amount
        if is_taxable(stream):
            taxable += amount
    return gross, taxable


def taxable_fixed_income(streams: Iterable[IncomeStream], age: int) -> float:
    return fixed_income_totals(streams, age)[1]


def stream_payments(streams: Iterable[IncomeStream], age: int) -> List[StreamPayment]:
    """Per-stream payment detail for the active streams only."""
    return [
        StreamPayment(
            id=stream.id,
            name=stream.name,
            amount=accrued_amount(stream, age),
            taxable=is_taxable(stream),
        )
        for stream in streams
        if is_active(stream, age)
    ]
