from datetime import date, datetime
from io import BytesIO
from typing import Any

import pandas as pd

Grid = list[list[Any]]


class UnsupportedSpreadsheet(ValueError):
    pass


def _cell(value: Any):
    if value is None:
        return None
    if pd.isna(value):
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if hasattr(value, "item"):
        # numpy scalar
        value = value.item()
    if isinstance(value, float) and value in (float("inf"), float("-inf")):
        return None
    return value


def read_grid(contents: bytes, filename: str) -> Grid:
    """
    Parse the first sheet of an uploaded workbook (or a CSV file) into a
    grid: row 0 holds the headers, the remaining rows hold the values.
    """
    name = (filename or "").lower()
    buffer = BytesIO(contents)

    if name.endswith(".csv"):
        df = pd.read_csv(buffer, header=None)
    elif name.endswith(".xlsx") or name.endswith(".xls"):
        df = pd.read_excel(buffer, header=None, sheet_name=0)
    else:
        raise UnsupportedSpreadsheet("Only .csv, .xls, and .xlsx are supported")

    df = df.dropna(how="all")
    if df.empty:
        return []

    rows = [[_cell(v) for v in row] for row in df.astype(object).itertuples(index=False, name=None)]
    headers = ["" if h is None else str(h).strip() for h in rows[0]]
    return [headers, *rows[1:]]
