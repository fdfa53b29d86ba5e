"""Read uploaded tabular files into raw rows."""

import csv
import io
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pandas as pd

from fieldmap.constants import SUPPORTED_EXTENSIONS
from fieldmap.exceptions import FileDecodeError, UnsupportedFileTypeError

logger = logging.getLogger(__name__)

CSV_DELIMITERS = ",;\t|"
TEXT_ENCODINGS = ("utf-8-sig", "latin-1")


def _decode_text(content: bytes) -> str:
    for encoding in TEXT_ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise FileDecodeError("File is not valid text")


def _sniff_delimiter(text: str) -> str:
    try:
        return csv.Sniffer().sniff(text[:4096], delimiters=CSV_DELIMITERS).delimiter
    except csv.Error:
        return ","


def _frame_to_rows(df: pd.DataFrame) -> Tuple[List[Dict[str, Any]], List[str]]:
    """Convert a DataFrame to row dicts; missing cells become None."""
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records"), list(df.columns)


def _read_delimited(content: bytes, sep: str = None) -> pd.DataFrame:
    text = _decode_text(content)
    if not text.strip():
        return pd.DataFrame()
    delimiter = sep or _sniff_delimiter(text)
    return pd.read_csv(io.StringIO(text), sep=delimiter, dtype=str, skipinitialspace=True)


def _read_json(content: bytes) -> pd.DataFrame:
    try:
        payload = json.loads(_decode_text(content))
    except json.JSONDecodeError as e:
        raise FileDecodeError(f"Invalid JSON: {e}") from e

    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        payload = payload["data"]
    if not isinstance(payload, list) or not all(isinstance(r, dict) for r in payload):
        raise FileDecodeError('JSON must be a list of records or {"data": [records]}')
    if not payload:
        return pd.DataFrame()
    return pd.json_normalize(payload)


def read_tabular(file_name: str, content: bytes) -> Tuple[List[Dict[str, Any]], List[str]]:
    """
    Parse an uploaded file into raw rows.

    CSV and TSV cells are kept as strings so raw encodings ("$1,200",
    "00123") reach the classifier unchanged. Excel cells keep their native
    types. Nested JSON objects are flattened with dotted column names.

    Args:
        file_name: Original file name (extension selects the reader)
        content: Raw file bytes

    Returns:
        Tuple of (rows, columns in source order)

    Raises:
        UnsupportedFileTypeError: If the extension is not supported
        FileDecodeError: If the content cannot be parsed
    """
    extension = Path(file_name or "").suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFileTypeError(
            f"Unsupported file type {extension or '(none)'!r}. "
            f"Supported: {', '.join(SUPPORTED_EXTENSIONS)}"
        )

    try:
        if extension == ".json":
            df = _read_json(content)
        elif extension in (".xlsx", ".xlsm"):
            df = pd.read_excel(io.BytesIO(content), engine="openpyxl")
        elif extension == ".tsv":
            df = _read_delimited(content, sep="\t")
        else:
            df = _read_delimited(content)
    except (FileDecodeError, UnsupportedFileTypeError):
        raise
    except pd.errors.EmptyDataError:
        df = pd.DataFrame()
    except Exception as e:
        raise FileDecodeError(f"Could not read {file_name}: {e}") from e

    rows, columns = _frame_to_rows(df)
    logger.info(f"Read {file_name}: {len(rows)} rows, {len(columns)} columns")
    return rows, columns
