"""Shared parsing utilities for spreadsheet ingestion."""
from __future__ import annotations

import re
from io import BytesIO
from pathlib import Path

import pandas as pd

XLSX_MAGIC = b"PK\x03\x04"
XLS_MAGIC = b"\xd0\xcf\x11\xe0"


def ensure_bytes(source: BytesIO | Path | bytes | str) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, str):
        source = Path(source)
    if isinstance(source, Path):
        return source.read_bytes()
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def _list_sheets(raw: bytes, engine: str) -> list[str]:
    xls = pd.ExcelFile(BytesIO(raw), engine=engine)
    return xls.sheet_names


def _pick_sheet(raw: bytes, engine: str, preferred: str | None) -> str:
    sheets = _list_sheets(raw, engine)
    if not sheets:
        raise ValueError("Workbook has no sheets")
    if preferred is None:
        return sheets[0]
    if preferred in sheets:
        return preferred
    lower_map = {name.lower(): name for name in sheets}
    if preferred.lower() in lower_map:
        return lower_map[preferred.lower()]
    for name in sheets:
        if preferred.lower() in name.lower():
            return name
    return sheets[0]


def read_table(raw: bytes, sheet_name: str | None = None) -> pd.DataFrame:
    """Read an .xlsx, .xls or CSV payload into a string-typed frame."""
    if raw.startswith(XLSX_MAGIC):
        engine = "openpyxl"
    elif raw.startswith(XLS_MAGIC):
        engine = "xlrd"
    else:
        return pd.read_csv(BytesIO(raw), dtype=str, keep_default_na=False)
    sheet = _pick_sheet(raw, engine, sheet_name)
    return pd.read_excel(BytesIO(raw), sheet_name=sheet, engine=engine, dtype=str, keep_default_na=False)


def normalize_header(name: object) -> str:
    """``Machine ID``, ``machine_id`` and ``machineId`` all become ``machineid``."""
    return re.sub(r"[^0-9a-z]", "", str(name).lower())


def resolve_columns(df: pd.DataFrame, aliases: dict[str, tuple[str, ...]], required: tuple[str, ...]) -> dict[str, str]:
    by_normalized = {normalize_header(column): column for column in df.columns}
    resolved: dict[str, str] = {}
    for field_name, names in aliases.items():
        for name in names:
            column = by_normalized.get(normalize_header(name))
            if column is not None:
                resolved[field_name] = column
                break
    missing = [name for name in required if name not in resolved]
    if missing:
        raise ValueError(f"Missing required column(s): {', '.join(missing)}")
    return resolved


def cell_text(value: object) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    text = str(value).strip()
    if text.upper() == "NAN":
        return ""
    return text
