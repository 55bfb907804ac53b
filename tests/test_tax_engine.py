import pytest

from engine.tax_engine import account_tax_rate, capital_gains_rate
from models import AccountType, FilingStatus


def test_capital_gains_breakpoints_married_joint():
    assert capital_gains_rate(96_700, FilingStatus.MARRIED_JOINT) == 0.0
    assert capital_gains_rate(96_701, FilingStatus.MARRIED_JOINT) == 0.15
    assert capital_gains_rate(600_050, FilingStatus.MARRIED_JOINT) == 0.15
    assert capital_gains_rate(600_051, FilingStatus.MARRIED_JOINT) == 0.20


@pytest.mark.parametrize("status, bracket0, bracket15", [
    (FilingStatus.SINGLE, 48_350, 533_400),
    (FilingStatus.MARRIED_SEPARATE, 48_350, 300_000),
    (FilingStatus.HEAD_OF_HOUSEHOLD, 64_750, 566_700),
])
def test_capital_gains_breakpoints_by_status(status, bracket0, bracket15):
    assert capital_gains_rate(bracket0, status) == 0.0
    assert capital_gains_rate(bracket0 + 1, status) == 0.15
    assert capital_gains_rate(bracket15 + 1, status) == 0.20


def test_camel_case_status_is_accepted():
    assert capital_gains_rate(60_000, "headOfHousehold") == 0.0
    assert capital_gains_rate(60_000, "marriedSeparate") == 0.15


def test_unknown_status_falls_back_to_married_joint(caplog):
    with caplog.at_level("WARNING"):
        assert capital_gains_rate(90_000, "widowed") == 0.0
        assert capital_gains_rate(100_000, "widowed") == 0.15
    assert "widowed" in caplog.text


def test_roth_and_hsa_are_never_taxed():
    for acct_type in (AccountType.ROTH, AccountType.HSA):
        assert account_tax_rate(acct_type, 0, 0.22) == 0.0
        assert account_tax_rate(acct_type, 10_000_000, 0.37) == 0.0


def test_traditional_uses_flat_rate():
    assert account_tax_rate(AccountType.TRADITIONAL, 1_000_000, 0.22) == 0.22
    assert account_tax_rate("traditional", 0, 0.12) == 0.12


def test_taxable_uses_capital_gains_brackets():
    assert account_tax_rate(AccountType.TAXABLE, 50_000, 0.22, FilingStatus.SINGLE) == 0.15
    assert account_tax_rate(AccountType.TAXABLE, 50_000, 0.22, FilingStatus.MARRIED_JOINT) == 0.0
