"""
Delimiter-agnostic CSV tokenizer.

Responsibilities:
- strip a leading UTF-8 BOM
- pick the delimiter from the header line
- split text into rows of trimmed fields (quote aware)
- drop blank rows
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from .models import ErrorCode, Row, Severity, ValidationIssue
from .rules import BOM, CSV_DELIMITERS, DEFAULT_DELIMITER

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class _State(Enum):
    DEFAULT = "default"
    IN_QUOTED_FIELD = "in_quoted_field"


class TokenizeResult(BaseModel):
    rows: List[Row] = Field(default_factory=list)
    delimiter: str = DEFAULT_DELIMITER
    errors: List[ValidationIssue] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


def remove_bom(content: str) -> str:
    if content.startswith(BOM):
        return content[len(BOM):]
    return content


def detect_delimiter(content: str) -> str:
    """Most frequent candidate delimiter on the first line; comma when none wins."""
    first_line = _LINE_BREAK.split(content, maxsplit=1)[0]
    best = DEFAULT_DELIMITER
    max_count = 0
    for delimiter in CSV_DELIMITERS:
        count = first_line.count(delimiter)
        if count > max_count:
            max_count = count
            best = delimiter
    return best


def _has_content(fields: List[str]) -> bool:
    return any(f for f in fields)


def split_rows(content: str, delimiter: str) -> List[Row]:
    rows: List[Row] = []
    fields: List[str] = []
    buf: List[str] = []
    state = _State.DEFAULT

    line = 1
    row_start = 1
    i = 0
    n = len(content)

    def end_row():
        fields.append("".join(buf).strip())
        if _has_content(fields):
            rows.append(Row(line=row_start, fields=list(fields)))
        fields.clear()
        buf.clear()

    while i < n:
        char = content[i]

        if char == '"':
            if state is _State.IN_QUOTED_FIELD and content[i + 1:i + 2] == '"':
                buf.append('"')
                i += 2
                continue
            state = _State.DEFAULT if state is _State.IN_QUOTED_FIELD else _State.IN_QUOTED_FIELD

        elif state is _State.IN_QUOTED_FIELD:
            # line breaks inside quotes belong to the field
            if char == "\r" and content[i + 1:i + 2] == "\n":
                buf.append("\r\n")
                line += 1
                i += 2
                continue
            if char in "\r\n":
                line += 1
            buf.append(char)

        elif char == delimiter:
            fields.append("".join(buf).strip())
            buf.clear()

        elif char in "\r\n":
            if char == "\r" and content[i + 1:i + 2] == "\n":
                i += 1
            end_row()
            line += 1
            row_start = line

        else:
            buf.append(char)

        i += 1

    if state is _State.IN_QUOTED_FIELD:
        logger.debug("unterminated quoted field starting on line %d", row_start)

    if buf or fields:
        end_row()

    return rows


def tokenize(content: str) -> TokenizeResult:
    """Turn raw CSV text into rows, or a fatal PARSE_ERROR when nothing is left."""
    clean = remove_bom(content or "")
    delimiter = detect_delimiter(clean)
    rows = split_rows(clean, delimiter)

    logger.debug("tokenized %d rows with delimiter %r", len(rows), delimiter)

    if not rows:
        return TokenizeResult(
            delimiter=delimiter,
            errors=[
                ValidationIssue(
                    code=ErrorCode.PARSE_ERROR,
                    severity=Severity.FATAL,
                    message="CSV file is empty or invalid",
                )
            ],
        )

    return TokenizeResult(rows=rows, delimiter=delimiter)
