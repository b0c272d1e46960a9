"""
CSV -> price list conversion pipeline.

Stages run strictly in order:
- PARSED: text tokenized into rows
- STRUCTURE_VALIDATED: header mapped to the canonical fields
- DATA_VALIDATED: rows checked one by one, then across the whole set
- TRANSFORMED: surviving entries mapped to the output schema

A fatal failure at any stage returns the issues collected so far and later
stages never run. Every call builds its own state, so the functions here are
safe to use concurrently on independent inputs.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .config import ConverterSettings, get_settings
from .constraints import check_constraints
from .encoding import UnreadableCsvError, decode_csv_bytes
from .models import (
    ConversionResult,
    ErrorCode,
    ParsedEntry,
    Severity,
    ValidationIssue,
)
from .row_validator import validate_rows
from .structure import validate_structure
from .tokenizer import tokenize
from .transform import transform

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    PARSED = "parsed"
    STRUCTURE_VALIDATED = "structure_validated"
    DATA_VALIDATED = "data_validated"
    TRANSFORMED = "transformed"


class ValidationOutcome(BaseModel):
    stage: PipelineStage
    failed: bool = False
    entries: List[ParsedEntry] = Field(default_factory=list)
    errors: List[ValidationIssue] = Field(default_factory=list)

    def has_errors(self) -> bool:
        return any(e.severity != Severity.WARNING for e in self.errors)


def _run_validation(content: str) -> ValidationOutcome:
    parsed = tokenize(content)
    if not parsed.success:
        return ValidationOutcome(stage=PipelineStage.PARSED, failed=True, errors=parsed.errors)

    field_map, structure_errors = validate_structure(parsed.rows)
    if field_map is None:
        return ValidationOutcome(
            stage=PipelineStage.STRUCTURE_VALIDATED, failed=True, errors=structure_errors
        )

    entries, errors = validate_rows(parsed.rows, field_map)
    if not entries:
        # every data row was rejected
        return ValidationOutcome(stage=PipelineStage.DATA_VALIDATED, failed=True, errors=errors)

    report = check_constraints(entries)
    errors = errors + report.errors
    kept = [e for e in entries if e.line not in report.rejected_lines]

    return ValidationOutcome(
        stage=PipelineStage.DATA_VALIDATED,
        failed=not kept,
        entries=kept,
        errors=errors,
    )


def _failure(errors: List[ValidationIssue], stage: PipelineStage) -> ConversionResult:
    logger.warning("CSV conversion failed at stage %s with %d issue(s)", stage.value, len(errors))
    return ConversionResult(success=False, data=None, errors=errors)


def convert_csv(content: str, settings: Optional[ConverterSettings] = None) -> ConversionResult:
    """Convert CSV text into the normalized price list."""
    settings = settings or get_settings()
    outcome = _run_validation(content)

    if outcome.failed:
        return _failure(outcome.errors, outcome.stage)
    if settings.strict_mode and outcome.has_errors():
        return _failure(outcome.errors, outcome.stage)

    data = transform(outcome.entries)
    logger.info(
        "CSV conversion reached stage %s: %d entries, %d issue(s)",
        PipelineStage.TRANSFORMED.value,
        len(data),
        len(outcome.errors),
    )
    return ConversionResult(success=True, data=data, errors=outcome.errors)


def validate_csv(content: str, settings: Optional[ConverterSettings] = None) -> ConversionResult:
    """Run every check without producing output data."""
    settings = settings or get_settings()
    outcome = _run_validation(content)
    success = not outcome.failed and not (settings.strict_mode and outcome.has_errors())
    return ConversionResult(success=success, data=None, errors=outcome.errors)


def _decode(raw: bytes):
    try:
        text, encoding = decode_csv_bytes(raw)
    except UnreadableCsvError as exc:
        issue = ValidationIssue(code=ErrorCode.PARSE_ERROR, severity=Severity.FATAL, message=str(exc))
        return None, _failure([issue], PipelineStage.PARSED)

    logger.debug("decoded %d bytes as %s", len(raw), encoding)
    return text, None


def convert_csv_bytes(raw: bytes, settings: Optional[ConverterSettings] = None) -> ConversionResult:
    text, failure = _decode(raw)
    if failure is not None:
        return failure
    return convert_csv(text, settings)


def validate_csv_bytes(raw: bytes, settings: Optional[ConverterSettings] = None) -> ConversionResult:
    text, failure = _decode(raw)
    if failure is not None:
        return failure
    return validate_csv(text, settings)
