from models import (
    AccountType,
    IncomeStream,
    InvalidScenarioError,
    InvestmentAccount,
    PlannerInputs,
    WithdrawalMode,
    WithdrawalTier,
)
from utils.xml_loader import DEFAULT_SETUP, DEFAULT_ACCOUNTS, DEFAULT_INCOME_STREAMS, DEFAULT_WITHDRAWAL
from utils.currency import clean_currency, clean_int, clean_percent
from utils.tax_utils import normalize_filing_status
from dataclasses import fields
from typing import List, Dict, Any, Optional


def _to_bool(val, default: bool = False) -> bool:
    if val is None or val == "":
        return default
    if isinstance(val, str):
        return val.strip().lower() in ("true", "yes", "1", "y")
    return bool(val)


def _percent(val, default: float = 0.0) -> float:
    cleaned = clean_percent(val)
    return default if cleaned is None else cleaned


def row_to_account(row: Dict[str, Any], index: int = 0) -> InvestmentAccount:
    raw_type = str(row.get("type", "taxable")).strip().lower()
    try:
        acct_type = AccountType(raw_type)
    except ValueError:
        raise InvalidScenarioError(
            f"Unknown account type '{row.get('type')}' for account '{row.get('name')}'"
        ) from None

    min_age = row.get("min_age")
    return InvestmentAccount(
        id=clean_int(row.get("id"), index + 1),
        name=str(row.get("name") or f"Account {index + 1}"),
        balance=clean_currency(row.get("balance")),
        type=acct_type,
        withdrawal_order=clean_int(row.get("withdrawal_order"), index + 1),
        min_age=float(min_age) if min_age not in (None, "") else 0.0,
    )


def row_to_stream(row: Dict[str, Any], index: int = 0) -> IncomeStream:
    return IncomeStream(
        id=clean_int(row.get("id"), index + 1),
        name=str(row.get("name") or f"Income {index + 1}"),
        amount=clean_currency(row.get("amount")),
        start_age=clean_int(row.get("start_age")),
        end_age=clean_int(row.get("end_age")),
        taxable=_to_bool(row.get("taxable"), True),
        cola=_percent(row.get("cola")),
        is_annual=_to_bool(row.get("is_annual"), False),
    )


def row_to_tier(row: Dict[str, Any]) -> WithdrawalTier:
    return WithdrawalTier(
        age_start=clean_int(row.get("age_start")),
        age_end=clean_int(row.get("age_end")),
        rate=_percent(row.get("rate")),
        dollar_amount=clean_currency(row.get("dollar_amount")),
    )


def parse_withdrawal_mode(val) -> WithdrawalMode:
    try:
        return WithdrawalMode(str(val).strip().lower())
    except ValueError:
        raise InvalidScenarioError(f"Unknown withdrawal mode '{val}'") from None


def get_planner_inputs(
    account_rows: Optional[List[Dict]] = None,   # grid rows that need special processing
    income_rows: Optional[List[Dict]] = None,
    tier_rows: Optional[List[Dict]] = None,
    **kwargs: Any                                # Catch all other UI inputs dynamically
) -> PlannerInputs:
    """
    Dynamically generates PlannerInputs by merging XML defaults and all UI inputs,
    using reflection (dataclasses.fields) to ensure only valid fields are passed.
    Missing grid rows fall back to the XML defaults.
    """

    # 1. Start with defaults loaded from the XML setup file
    inputs_dict = DEFAULT_SETUP.copy()
    inputs_dict["withdrawal_mode"] = DEFAULT_WITHDRAWAL["mode"]

    # 2. Merge ALL UI inputs (passed via **kwargs) into the defaults, skipping
    # cleared fields so the default stays in place
    inputs_dict.update({k: v for k, v in kwargs.items() if v is not None and v != ""})

    # 3. Handle the 'nsims' naming convention mismatch
    if 'num_simulations' in inputs_dict:
        inputs_dict['nsims'] = inputs_dict.pop('num_simulations')

    # 4. Coerce scalar types
    for key in ("starting_year", "max_age", "current_age", "retirement_age", "nsims"):
        if key in inputs_dict:
            inputs_dict[key] = clean_int(inputs_dict[key])
    for key in ("tax_rate", "pre_retirement_return", "post_retirement_return", "volatility"):
        if key in inputs_dict:
            inputs_dict[key] = _percent(inputs_dict[key])

    status = inputs_dict.get("filing_status")
    # Unrecognised statuses are passed through; the tax engine falls back to married joint
    inputs_dict["filing_status"] = normalize_filing_status(status) or status
    inputs_dict["withdrawal_mode"] = parse_withdrawal_mode(inputs_dict["withdrawal_mode"])

    # 5. Handle the special cases: grid rows -> typed records
    if account_rows is None:
        account_rows = DEFAULT_ACCOUNTS
    if income_rows is None:
        income_rows = DEFAULT_INCOME_STREAMS
    if tier_rows is None:
        tier_rows = DEFAULT_WITHDRAWAL["tiers"]

    inputs_dict["accounts"] = tuple(row_to_account(row, i) for i, row in enumerate(account_rows))
    inputs_dict["income_streams"] = tuple(row_to_stream(row, i) for i, row in enumerate(income_rows))
    inputs_dict["withdrawal_tiers"] = tuple(row_to_tier(row) for row in tier_rows)

    # 6. DYNAMIC FIELD MAPPING AND FILTERING (Reflection)
    planner_field_names = {f.name for f in fields(PlannerInputs)}
    final_inputs = {
        key: value
        for key, value in inputs_dict.items()
        if key in planner_field_names
    }

    # 7. Create the PlannerInputs object (validates the age ordering)
    return PlannerInputs(**final_inputs)
