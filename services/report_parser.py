"""
Lenient parser for delimited (TSV) report documents.

Amazon ledger reports are tab separated but not always well formed: stray
quote characters show up inside product titles and some rows carry more or
fewer columns than the header. Parsing is line oriented so a stray quote can
never swallow the following rows:

    - BOM is stripped, first non-blank line is the header
    - rows end at "\n" (or "\r" in CR-only documents); blank lines are skipped
    - a quote inside a field is kept literally; a field that opens with a
      quote is unwrapped, even when the closing quote is missing
    - short rows are padded with "", long rows are truncated to the header
"""

from __future__ import annotations

import csv
import logging
from typing import Dict, List, Optional

from services.report_errors import MalformedReportError

logger = logging.getLogger(__name__)

RawRecord = Dict[str, str]

DEFAULT_DELIMITER = "\t"
BOM = "\ufeff"


def _split_line(line: str, delimiter: str) -> List[str]:
    # strict=False keeps malformed quoting literal instead of raising.
    reader = csv.reader([line], delimiter=delimiter, strict=False)
    return next(reader, [])


def _iter_lines(text: str):
    # CR-only documents use "\r" as the row separator; otherwise a stray
    # "\r" inside a row is kept in its field as a space.
    separator = "\n" if "\n" in text else "\r"
    for line in text.split(separator):
        if line.endswith("\r"):
            line = line[:-1]
        line = line.replace("\r", " ")
        if not line.strip():
            continue
        yield line


def parse_delimited_records(text: str, delimiter: str = DEFAULT_DELIMITER) -> List[RawRecord]:
    if text.startswith(BOM):
        text = text[len(BOM):]

    lines = _iter_lines(text)
    header_line: Optional[str] = next(lines, None)
    if header_line is None:
        raise MalformedReportError("Report document has no header line", text)

    try:
        header = _split_line(header_line, delimiter)
        records: List[RawRecord] = []
        irregular = 0
        for line in lines:
            values = _split_line(line, delimiter)
            if len(values) != len(header):
                irregular += 1
                values = (values + [""] * len(header))[: len(header)]
            records.append(dict(zip(header, values)))
    except csv.Error as exc:
        logger.error("[report_parser] Delimited parse failed: %s", exc)
        raise MalformedReportError(f"Delimited parse failed: {exc}", text) from exc

    if irregular:
        logger.warning(
            "[report_parser] %s of %s rows had a column count different from the header (%s)",
            irregular,
            len(records),
            len(header),
        )
    return records
