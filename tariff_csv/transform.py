"""
Validated entries -> canonical output rows, plus helpers the quoting app uses
on the converted list (filters, grouping, stats, CSV export).
"""

from __future__ import annotations

import csv
import io
from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List

from .models import BudgetEntry, ConversionStats, Item, ParsedEntry, parse_number
from .rules import EMPTY_DESCRIPTION, EXPORT_HEADERS, EXPORT_LEVEL_NAMES, ZERO_AMOUNT

_CENT = Decimal("0.01")


def _two_decimals(number: Decimal) -> str:
    amount = number.quantize(_CENT, rounding=ROUND_HALF_UP)
    if amount == 0:
        # no "-0.00"
        amount = amount.copy_abs()
    return str(amount)


def format_amount(value) -> str:
    number = parse_number(value)
    if number is None:
        return ZERO_AMOUNT
    return _two_decimals(number)


def to_budget_entry(entry: ParsedEntry) -> BudgetEntry:
    if not isinstance(entry, Item):
        return BudgetEntry(level=entry.level, id=entry.id, name=entry.name)

    return BudgetEntry(
        level="item",
        id=entry.id,
        name=entry.name,
        description=entry.description or EMPTY_DESCRIPTION,
        unit=entry.unit,
        iva_percentage=format_amount(entry.iva_percentage),
        pvp=format_amount(entry.pvp),
    )


def transform(entries: List[ParsedEntry]) -> List[BudgetEntry]:
    return [to_budget_entry(e) for e in entries]


def items_only(data: List[BudgetEntry]) -> List[BudgetEntry]:
    return [e for e in data if e.level == "item"]


def group_by_parent(data: List[BudgetEntry]) -> Dict[str, List[BudgetEntry]]:
    """Children keyed by parent id; top-level chapters sit under ``""``."""
    groups: Dict[str, List[BudgetEntry]] = defaultdict(list)
    for entry in data:
        parent = entry.id.rpartition(".")[0]
        groups[parent].append(entry)
    return dict(groups)


def iva_rates(data: List[BudgetEntry]) -> List[str]:
    rates = {format_amount(e.iva_percentage) for e in items_only(data)}
    return sorted(rates, key=Decimal)


def calculate_stats(data: List[BudgetEntry]) -> ConversionStats:
    counts: Dict[str, int] = defaultdict(int)
    pvp_total = Decimal("0")
    iva_total = Decimal("0")
    for entry in data:
        counts[entry.level] += 1
        if entry.level == "item":
            pvp_total += parse_number(entry.pvp) or Decimal("0")
            iva_total += parse_number(entry.iva_percentage) or Decimal("0")

    items = counts["item"]
    average_iva = iva_total / items if items else Decimal("0")

    return ConversionStats(
        chapters=counts["chapter"],
        subchapters=counts["subchapter"],
        sections=counts["section"],
        items=items,
        total=len(data),
        pvp_total=_two_decimals(pvp_total),
        average_iva=_two_decimals(average_iva),
        iva_rates=iva_rates(data),
    )


def _decimal_comma(value) -> str:
    return value.replace(".", ",") if value else ""


def to_csv(data: List[BudgetEntry]) -> str:
    """Export entries back to the Spanish spreadsheet layout."""
    if not data:
        return ""

    outp = io.StringIO(newline="")
    writer = csv.writer(outp, delimiter=",", lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for entry in data:
        writer.writerow([
            EXPORT_LEVEL_NAMES[entry.level],
            entry.id,
            entry.name,
            entry.description or "",
            entry.unit or "",
            _decimal_comma(entry.iva_percentage),
            _decimal_comma(entry.pvp),
        ])
    return outp.getvalue()
