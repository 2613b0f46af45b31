"""Uploaded file -> list of raw rows.

Two tabular formats are accepted: delimited text (``.csv``) and Excel
workbooks (``.xlsx``/``.xls``). The first row is always the header. Every
decoded row is a plain ``dict`` of header -> cell text; typing happens later
in :mod:`shiptrack.services.etl.validators`.
"""

from __future__ import annotations

import datetime as dt
import io
from pathlib import Path
from typing import Any
from zipfile import BadZipFile

import pandas as pd
from charset_normalizer import from_bytes
from openpyxl.utils.exceptions import InvalidFileException
from xlrd import XLRDError

from shiptrack.core.logging import logger

RawRow = dict[str, str]

CSV_EXTENSIONS = (".csv",)
EXCEL_EXTENSIONS = (".xlsx", ".xls")
_UTF8_FAMILY = {"utf_8", "utf_8_sig", "ascii"}


class ImportFormatError(Exception):
    """The file as a whole cannot be imported; nothing is persisted."""


class UnsupportedFormat(ImportFormatError):
    pass


class EmptyFile(ImportFormatError):
    pass


class UnreadableFile(ImportFormatError):
    pass


class FileTooLarge(ImportFormatError):
    pass


def decode_table(content: bytes, file_name: str) -> list[RawRow]:
    ext = Path(file_name or "").suffix.lower()
    if ext in CSV_EXTENSIONS:
        df = _read_csv(content)
    elif ext in EXCEL_EXTENSIONS:
        df = _read_excel(content, ext)
    else:
        raise UnsupportedFormat(f"Unsupported file format '{ext or file_name}'; use .csv, .xlsx or .xls")

    rows = _to_rows(df)
    if not rows:
        raise EmptyFile("The file contains no data rows")
    logger.info("table_decoded", file_name=file_name, rows=len(rows), columns=len(df.columns))
    return rows


def decode_text(content: bytes) -> str:
    """Best-effort transcoding of CSV bytes to text.

    Non UTF-8 encodings (Shift_JIS exports from Excel are the usual case) are
    detected and transcoded; if detection fails the bytes are read as UTF-8.
    """
    try:
        match = from_bytes(content).best()
        if match is not None and match.encoding not in _UTF8_FAMILY:
            logger.info("csv_encoding_detected", encoding=match.encoding)
            return str(match)
    except (LookupError, UnicodeError, ValueError, RuntimeError) as e:
        logger.warning("csv_encoding_detection_failed", error=str(e))
    return content.decode("utf-8-sig", errors="replace")


def _read_csv(content: bytes) -> pd.DataFrame:
    text = decode_text(content)
    try:
        return pd.read_csv(
            io.StringIO(text),
            header=0,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        raise EmptyFile("The file contains no data rows")
    except (pd.errors.ParserError, UnicodeError) as e:
        raise UnreadableFile(f"Could not parse CSV: {e}")


def _read_excel(content: bytes, ext: str) -> pd.DataFrame:
    engine = "openpyxl" if ext == ".xlsx" else "xlrd"
    try:
        # first sheet only
        return pd.read_excel(io.BytesIO(content), sheet_name=0, header=0, dtype=object, engine=engine)
    except (ValueError, KeyError, OSError, BadZipFile, InvalidFileException, XLRDError) as e:
        raise UnreadableFile(f"Could not read workbook: {e}")


def _cell_text(v: Any) -> str:
    if v is None or (not isinstance(v, str) and pd.isna(v)):
        return ""
    if isinstance(v, float):
        if v.is_integer():
            return str(int(v))
        return str(v)
    if isinstance(v, pd.Timestamp):
        return v.to_pydatetime().isoformat()
    if isinstance(v, (dt.datetime, dt.date)):
        return v.isoformat()
    return str(v)


def _to_rows(df: pd.DataFrame) -> list[RawRow]:
    headers = [str(c).strip() for c in df.columns]
    rows: list[RawRow] = []
    for values in df.itertuples(index=False, name=None):
        row = {h: _cell_text(v) for h, v in zip(headers, values)}
        if all(not s.strip() for s in row.values()):
            continue
        rows.append(row)
    return rows
