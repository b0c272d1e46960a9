"""
Per-row validation.

Each data row is checked against the rules of its level and, when clean,
turned into a typed entry (Chapter, Subchapter, Section or Item). Field
rules live on the entry models; their validation errors are reported here as
VALIDATION_ERROR issues. A row with any error produces no entry; its errors
are reported and the row is skipped.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from pydantic import ValidationError

from .models import (
    Chapter,
    ErrorCode,
    FieldMap,
    Item,
    ParsedEntry,
    Row,
    Section,
    Severity,
    Subchapter,
    ValidationIssue,
    parse_number,
)
from .rules import CONTAINER_DEPTHS, LEVEL_MAP
from .structure import slugify

logger = logging.getLogger(__name__)

ENTRY_TYPES = {"chapter": Chapter, "subchapter": Subchapter, "section": Section, "item": Item}

# model field -> name shown in messages
FIELD_LABELS = {
    "id": "ID",
    "name": "name",
    "unit": "unit",
    "iva_percentage": "%IVA",
    "pvp": "PVP",
}

__all__ = ["parse_number", "validate_row", "validate_rows"]


def _issue(row: Row, field: str, message: str) -> ValidationIssue:
    return ValidationIssue(
        code=ErrorCode.VALIDATION_ERROR,
        severity=Severity.ERROR,
        line=row.line,
        field=field,
        original_row=list(row.fields),
        message=f"{field} {message}",
    )


def _describe(error: dict) -> str:
    kind = error["type"]
    ctx = error.get("ctx", {})
    if kind == "value_error":
        return str(ctx["error"])
    if kind == "string_too_short":
        return "must not be empty"
    if kind == "string_pattern_mismatch":
        return "has an invalid format (expected numbers separated by dots)"
    if kind == "greater_than_equal":
        return f"must be greater than or equal to {ctx['ge']}"
    if kind == "less_than_equal":
        return f"must be less than or equal to {ctx['le']}"
    return error["msg"]


def _model_issues(row: Row, exc: ValidationError) -> List[ValidationIssue]:
    issues = []
    for error in exc.errors():
        name = str(error["loc"][0]) if error["loc"] else "id"
        issues.append(_issue(row, FIELD_LABELS.get(name, name), _describe(error)))
    return issues


def validate_row(row: Row, field_map: FieldMap) -> Tuple[Optional[ParsedEntry], List[ValidationIssue]]:
    raw_level = field_map.value(row, "level")
    level = LEVEL_MAP.get(slugify(raw_level))
    if level is None:
        return None, [_issue(row, "level", f'is invalid: "{raw_level}"')]

    values = dict(
        id=field_map.value(row, "id"),
        name=field_map.value(row, "name"),
        line=row.line,
        original_row=list(row.fields),
    )
    if level == "item":
        values.update(
            description=field_map.value(row, "description"),
            unit=field_map.value(row, "unit"),
            iva_percentage=field_map.value(row, "iva_percentage"),
            pvp=field_map.value(row, "pvp"),
        )

    try:
        entry = ENTRY_TYPES[level].model_validate(values)
    except ValidationError as exc:
        return None, _model_issues(row, exc)

    expected_depth = CONTAINER_DEPTHS.get(level)
    if expected_depth is not None and entry.depth != expected_depth:
        return None, [
            _issue(row, "ID", f"of a {level} must have {expected_depth} level(s), found {entry.depth}")
        ]
    return entry, []


def validate_rows(rows: List[Row], field_map: FieldMap) -> Tuple[List[ParsedEntry], List[ValidationIssue]]:
    """Validate every data row; ``rows`` includes the header, which is skipped."""
    entries: List[ParsedEntry] = []
    errors: List[ValidationIssue] = []

    for row in rows[1:]:
        entry, row_errors = validate_row(row, field_map)
        if row_errors:
            errors.extend(row_errors)
            continue
        entries.append(entry)

    logger.debug("row validation: %d valid, %d errors", len(entries), len(errors))
    return entries, errors
