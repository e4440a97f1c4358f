"""
loader.py
----------
Reads a transaction export (CSV or JSON records) and turns it into
Transaction objects.

Exports are usually one file per account, or one combined file with an
account_id column. Either way the result is a single flat table.
"""

import logging
import os
from typing import List

import pandas as pd

from core.models import Transaction
from config.config_loader import get_input_config

logger = logging.getLogger(__name__)


def load_transactions(path: str) -> pd.DataFrame:
    """
    Load a transactions file into a DataFrame.

    Args:
        path: .csv file, or .json file holding a list of transaction records.

    Returns:
        DataFrame with the required columns plus `category` (None where absent).

    Raises:
        ValueError: Unsupported file type or missing required columns.
    """
    ext = os.path.splitext(path)[1].lower()

    # ids and descriptions stay as text; a numeric-looking id must not become a float
    text_columns = {"id": str, "account_id": str, "description": str}

    if ext == ".csv":
        df = pd.read_csv(path, dtype=text_columns, keep_default_na=False, na_values=[""])
    elif ext == ".json":
        df = pd.read_json(path, orient="records", dtype=text_columns, convert_dates=False)
    else:
        raise ValueError(f"Unsupported transactions file type '{ext}'. Expected .csv or .json.")

    df = _validate(df)
    logger.info(f"Loaded {len(df):,} transactions across {df['account_id'].nunique():,} accounts from {path}.")
    return df


def concat_transactions(frames: List[pd.DataFrame]) -> pd.DataFrame:
    """Combines per-account frames into one table."""
    if not frames:
        return _validate(pd.DataFrame(columns=_all_columns()))
    return _validate(pd.concat(frames, ignore_index=True))


def to_transactions(df: pd.DataFrame) -> List[Transaction]:
    """
    Converts DataFrame rows into Transaction objects, preserving row order.

    Amounts that cannot be read as numbers become NaN, which the detector
    treats as non-expenses.
    """
    df = _validate(df)
    amounts = pd.to_numeric(df["amount"], errors="coerce")

    transactions = []
    for row, amount in zip(df.itertuples(index=False), amounts):
        category = row.category
        if category is not None and pd.isna(category):
            category = None

        transactions.append(Transaction(
            id=str(row.id),
            account_id=str(row.account_id),
            date=row.date,
            description="" if pd.isna(row.description) else str(row.description),
            amount=float(amount),
            category=category,
        ))

    return transactions


def _all_columns() -> list[str]:
    cfg = get_input_config()
    return list(cfg["required_columns"]) + list(cfg["optional_columns"])


def _validate(df: pd.DataFrame) -> pd.DataFrame:
    required_cols = get_input_config()["required_columns"]
    missing = [c for c in required_cols if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    df = df.copy()
    if "category" not in df.columns:
        df["category"] = None

    return df
