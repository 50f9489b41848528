"""
import_engine.csv_parser - Low-level CSV reading and header checks.

Responsibilities:
  • BOM removal (UTF-8 / UTF-8-SIG) and decoding
  • Line splitting on LF / CRLF, blank-line removal, per-line trim
  • Field splitting (plain, or double-quote aware for news)
  • Exact header validation

Everything here is a pure function of its input.
"""

from __future__ import annotations

import csv
import re

from import_engine.errors import EmptyInputError, HeaderFormatError, RowParseError

_LINE_BREAK = re.compile(r"\r?\n")


def split_lines(raw: str | bytes) -> list[str]:
    """
    Split raw content into trimmed, non-blank lines.
    Raises EmptyInputError when nothing remains.
    """
    text = _decode(raw)
    lines = [ln.strip() for ln in _LINE_BREAK.split(text)]
    lines = [ln for ln in lines if ln]
    if not lines:
        raise EmptyInputError()
    return lines


def split_fields(line: str) -> list[str]:
    """Plain comma split with per-field trim."""
    return [col.strip() for col in line.split(",")]


def split_quoted_fields(line: str) -> list[str]:
    """
    Comma split that ignores commas inside double quotes.

    "" inside a quoted field is an escaped quote.  A single pair of
    wrapping quotes left on a field is stripped afterwards.
    """
    values = next(csv.reader([line], skipinitialspace=True), [""])
    return [strip_quotes(v.strip()) for v in values]


def strip_quotes(value: str) -> str:
    """Remove one leading and/or one trailing double quote."""
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def validate_header(fields: list[str], expected: tuple[str, ...] | list[str]) -> None:
    """Raise HeaderFormatError unless fields equal expected, in order."""
    actual = list(fields)
    if len(actual) != len(expected):
        raise HeaderFormatError(list(expected), actual)
    for idx, (want, got) in enumerate(zip(expected, actual), start=1):
        if want != got:
            raise HeaderFormatError(list(expected), actual, column=idx)


def read_table(
    raw: str | bytes,
    headers: tuple[str, ...],
    *,
    quoted: bool = False,
) -> list[tuple[int, list[str]]]:
    """
    Tokenize, check the header, and return [(line_number, fields)] for
    every data line.  line_number is 1-based with the header on line 1.
    A header-only input yields an empty list.
    """
    lines = split_lines(raw)
    splitter = split_quoted_fields if quoted else split_fields
    table = []
    for idx, line in enumerate(lines, start=1):
        try:
            fields = splitter(line)
        except csv.Error as exc:
            raise RowParseError(idx, f"unreadable CSV line: {exc}")
        if idx == 1:
            validate_header(fields, headers)
        else:
            table.append((idx, fields))
    return table


def _decode(raw: str | bytes) -> str:
    if isinstance(raw, bytes):
        # Strip UTF-8 BOM
        if raw.startswith(b"\xef\xbb\xbf"):
            raw = raw[3:]
        return raw.decode("utf-8", errors="replace")
    if raw.startswith("\ufeff"):
        return raw[1:]
    return raw
