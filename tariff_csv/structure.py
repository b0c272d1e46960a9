from __future__ import annotations

import logging
import re
import unicodedata
from typing import List, Optional, Tuple

from .models import ErrorCode, FieldMap, Row, Severity, ValidationIssue
from .rules import REQUIRED_FIELDS

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def slugify(text: Optional[str]) -> str:
    """Lowercase, accent-free, alphanumeric-only form used for comparisons."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return _NON_ALNUM.sub("", stripped)


def _structure_error(message: str) -> ValidationIssue:
    return ValidationIssue(code=ErrorCode.STRUCTURE_ERROR, severity=Severity.FATAL, message=message)


def map_fields(headers: List[str]) -> Tuple[Optional[FieldMap], List[ValidationIssue]]:
    header_slugs = [slugify(h) for h in headers]

    for language, fields in REQUIRED_FIELDS.items():
        if all(slugify(f) in header_slugs for f in fields):
            columns = {f: header_slugs.index(slugify(f)) for f in fields}
            logger.debug("header matched %s field set: %s", language, columns)
            return FieldMap(language=language, columns=columns), []

    required = " | ".join(", ".join(fields) for fields in REQUIRED_FIELDS.values())
    return None, [_structure_error(f"Missing required fields. Expected one of: {required}")]


def validate_structure(rows: List[Row]) -> Tuple[Optional[FieldMap], List[ValidationIssue]]:
    """Check there is data under the header and build the field map from it."""
    if len(rows) < 2:
        return None, [_structure_error("CSV must have a header row and at least one data row")]
    return map_fields(rows[0].fields)
