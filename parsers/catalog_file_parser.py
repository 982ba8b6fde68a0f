"""
Catalog file parser.

Reads an uploaded spreadsheet (.xlsx) or CSV file into raw rows keyed
by header. No field mapping happens here; see catalog_row_normalizer.
"""

from io import BytesIO
from pathlib import Path
from typing import Any, Optional, Union
import structlog

import pandas as pd

from exceptions import ImportFileParseError

logger = structlog.get_logger(__name__)


EXCEL_EXTENSIONS = {".xlsx", ".xlsm"}
CSV_EXTENSIONS = {".csv", ".txt"}
SUPPORTED_EXTENSIONS = EXCEL_EXTENSIONS | CSV_EXTENSIONS


def parse_catalog_file(
    file: Union[str, Path, BytesIO],
    filename: Optional[str] = None,
) -> list[dict[str, Any]]:
    """
    Parse a catalog file into raw rows.

    The first sheet of a workbook is used. Blank cells become None.
    Blank lines are kept so row numbers match the sheet.

    Args:
        file: File path (str/Path) or file-like object (BytesIO)
        filename: Original upload name, used to pick the reader
                  when file is a buffer

    Returns:
        List of dicts, one per data row, keyed by trimmed header

    Raises:
        ImportFileParseError: If the file cannot be read
    """
    name = filename or (str(file) if isinstance(file, (str, Path)) else "")
    extension = Path(name).suffix.lower()

    logger.info("parsing_catalog_file", filename=name, extension=extension)

    try:
        if extension in CSV_EXTENSIONS:
            df = pd.read_csv(file, dtype=object, skip_blank_lines=False)
        else:
            df = pd.read_excel(file, sheet_name=0, dtype=object, engine="openpyxl")
    except Exception as e:
        logger.error("catalog_file_read_failed", filename=name, error=str(e))
        raise ImportFileParseError(
            message="Failed to read catalog file",
            details={"filename": name, "original_error": str(e)}
        )

    df.columns = [str(col).strip() for col in df.columns]

    # NaN -> None so blank cells read as blank downstream
    df = df.astype(object).where(pd.notna(df), None)

    rows = df.to_dict(orient="records")

    logger.info(
        "catalog_file_parsed",
        filename=name,
        rows=len(rows),
        columns=len(df.columns)
    )

    return rows
