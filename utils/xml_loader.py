# utils/xml_loader.py
import xml.etree.ElementTree as ET
from typing import Any, Dict, List
from pathlib import Path

# Child elements whose own children are flattened into the setup dict
SETUP_GROUPS = ("returns", "simulation")


def parse_setup_xml(file_path) -> Dict[str, Any]:
    tree = ET.parse(file_path)
    root = tree.getroot()

    setup_dict: Dict[str, Any] = {}

    for child in root:
        if child.tag in SETUP_GROUPS:
            for sub in child:
                setup_dict[sub.tag] = try_cast(sub.text)
        else:
            val = try_cast(child.text)
            if child.tag in ["starting_year", "max_age", "current_age", "retirement_age"]:
                val = int(val) if val is not None else val
            if child.tag == "filing_status" and isinstance(val, str):
                val = val.strip().lower()
            setup_dict[child.tag] = val

    return setup_dict


def try_cast(value: str) -> Any:
    """Try to convert string to int or float if possible, else leave as str."""
    if value is None:
        return None
    value = value.strip()
    # Booleans
    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    # Integers (try first)
    try:
        if '.' not in value: # Optimization: check for decimal to avoid unnecessary exception
            return int(value)
    except ValueError:
        pass

    # Floats (try second)
    try:
        return float(value)
    except ValueError:
        pass

    return value # Return as string if all else fails


def _parse_rows(file_path, row_tag: str) -> List[Dict[str, Any]]:
    """Each <row_tag id=".." name=".."> element becomes one grid row dict."""
    tree = ET.parse(file_path)
    root = tree.getroot()
    rows: List[Dict[str, Any]] = []

    for elem in root.findall(row_tag):
        row: Dict[str, Any] = {
            "id": int(elem.get("id", len(rows) + 1)),
            "name": elem.get("name", f"{row_tag.title()} {len(rows) + 1}"),
        }
        for field in elem:
            row[field.tag] = try_cast(field.text)
        rows.append(row)

    return rows


def parse_portfolio_xml(file_path) -> List[Dict[str, Any]]:
    """Load investment accounts as account grid rows, with normalized values."""
    rows = _parse_rows(file_path, "account")
    for row in rows:
        # Normalize key fields
        if isinstance(row.get("type"), str):
            row["type"] = row["type"].strip().lower()
        for key in ("balance", "min_age"):
            if row.get(key) is not None:
                row[key] = float(row[key])  # ensure numeric types are floats
    return rows


def parse_income_xml(file_path) -> List[Dict[str, Any]]:
    """Load fixed income streams as income grid rows."""
    rows = _parse_rows(file_path, "stream")
    for row in rows:
        for key in ("amount", "cola"):
            if row.get(key) is not None:
                row[key] = float(row[key])
    return rows


def parse_withdrawal_xml(file_path) -> Dict[str, Any]:
    """Load the withdrawal mode and tier rows."""
    tree = ET.parse(file_path)
    root = tree.getroot()

    mode = try_cast(root.findtext("mode", default="percentage"))
    tiers = []
    for tier in root.findall("tier"):
        tiers.append({field.tag: try_cast(field.text) for field in tier})

    return {"mode": str(mode).strip().lower(), "tiers": tiers}


CONFIG_DIR = Path(__file__).parent.parent / "config"

DEFAULT_SETUP = parse_setup_xml(CONFIG_DIR / "default_setup.xml")
DEFAULT_ACCOUNTS = parse_portfolio_xml(CONFIG_DIR / "default_portfolio.xml")
DEFAULT_INCOME_STREAMS = parse_income_xml(CONFIG_DIR / "default_income.xml")
DEFAULT_WITHDRAWAL = parse_withdrawal_xml(CONFIG_DIR / "default_withdrawal.xml")
