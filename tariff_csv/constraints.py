"""
Cross-row checks over the entries that survived row validation:
duplicate ids, item ancestry and sibling numbering.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Set, Tuple

from pydantic import BaseModel, Field

from .models import ErrorCode, Item, ParsedEntry, Severity, ValidationIssue
from .rules import ANCESTOR_LEVELS, ITEM_DEPTHS

logger = logging.getLogger(__name__)


class ConstraintReport(BaseModel):
    errors: List[ValidationIssue] = Field(default_factory=list)
    # lines of items rejected by the hierarchy check
    rejected_lines: Set[int] = Field(default_factory=set)


def find_duplicates(entries: List[ParsedEntry]) -> List[ValidationIssue]:
    errors: List[ValidationIssue] = []
    first_seen: Dict[str, ParsedEntry] = {}

    for entry in entries:
        first = first_seen.get(entry.id)
        if first is None:
            first_seen[entry.id] = entry
            continue
        errors.append(
            ValidationIssue(
                code=ErrorCode.DUPLICATE_ERROR,
                severity=Severity.ERROR,
                line=entry.line,
                field="ID",
                original_row=entry.original_row,
                message=f"Duplicate ID: {entry.id} (first seen on line {first.line})",
            )
        )
    return errors


def check_item_hierarchy(item: Item, existing_ids: Set[str]) -> List[ValidationIssue]:
    def issue(message: str) -> ValidationIssue:
        return ValidationIssue(
            code=ErrorCode.HIERARCHY_ERROR,
            severity=Severity.ERROR,
            line=item.line,
            field="ID",
            original_row=item.original_row,
            message=message,
        )

    if item.depth not in ITEM_DEPTHS:
        return [issue(f"Item {item.id}: invalid depth ({item.depth} levels)")]

    segments = item.segments
    missing = []
    for depth in range(1, item.depth):
        ancestor = ".".join(segments[:depth])
        if ancestor not in existing_ids:
            missing.append(f"{ANCESTOR_LEVELS[depth]} {ancestor}")

    if missing:
        return [issue(f"Item {item.id}: missing ancestors: {', '.join(missing)}")]
    return []


def check_hierarchy(entries: List[ParsedEntry]) -> List[ValidationIssue]:
    existing_ids = {e.id for e in entries}
    errors: List[ValidationIssue] = []
    for entry in entries:
        if isinstance(entry, Item):
            errors.extend(check_item_hierarchy(entry, existing_ids))
    return errors


def check_sequences(entries: List[ParsedEntry]) -> List[ValidationIssue]:
    groups: Dict[Tuple[int, str], List[ParsedEntry]] = defaultdict(list)
    for entry in entries:
        groups[(entry.depth, entry.parent_id)].append(entry)

    errors: List[ValidationIssue] = []
    for key in sorted(groups):
        siblings = sorted(groups[key], key=lambda e: e.sequence_key)
        for expected, entry in enumerate(siblings, start=1):
            if entry.sequence == str(expected):
                continue
            errors.append(
                ValidationIssue(
                    code=ErrorCode.SEQUENCE_ERROR,
                    severity=Severity.WARNING,
                    line=entry.line,
                    field="ID",
                    original_row=entry.original_row,
                    message=f"Wrong sequence for {entry.id}: expected {expected}, found {entry.sequence}",
                )
            )
    return errors


def check_constraints(entries: List[ParsedEntry]) -> ConstraintReport:
    duplicates = find_duplicates(entries)
    hierarchy = check_hierarchy(entries)
    sequences = check_sequences(entries)

    logger.debug(
        "global checks: %d duplicates, %d hierarchy, %d sequence",
        len(duplicates),
        len(hierarchy),
        len(sequences),
    )
    return ConstraintReport(
        errors=duplicates + hierarchy + sequences,
        rejected_lines={e.line for e in hierarchy},
    )
