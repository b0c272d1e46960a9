from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .rules import ENGLISH_TO_SPANISH, ID_PATTERN, IVA_RANGE, MAX_AMOUNT_EXPONENT, PVP_MIN


class ErrorCode(str, Enum):
    PARSE_ERROR = "PARSE_ERROR"
    STRUCTURE_ERROR = "STRUCTURE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    HIERARCHY_ERROR = "HIERARCHY_ERROR"
    DUPLICATE_ERROR = "DUPLICATE_ERROR"
    SEQUENCE_ERROR = "SEQUENCE_ERROR"


class Severity(str, Enum):
    FATAL = "fatal"
    ERROR = "error"
    WARNING = "warning"


class ValidationIssue(BaseModel):
    """A single finding from any stage of the conversion."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    code: ErrorCode
    severity: Severity
    message: str
    line: Optional[int] = None
    field: Optional[str] = None
    original_row: Optional[List[str]] = None


class Row(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=1)
    fields: List[str]


class FieldMap(BaseModel):
    """Column index of every canonical field of the matched header language.

    ``columns`` is keyed by the matched language's own field names; ``value``
    accepts the English name regardless of language.
    """

    model_config = ConfigDict(frozen=True)

    language: Literal["spanish", "english"]
    columns: Dict[str, int]

    def index(self, field: str) -> Optional[int]:
        if self.language == "spanish":
            field = ENGLISH_TO_SPANISH.get(field, field)
        return self.columns.get(field)

    def value(self, row: Row, field: str) -> str:
        idx = self.index(field)
        if idx is None or idx >= len(row.fields):
            return ""
        return row.fields[idx].strip()


def parse_number(value) -> Optional[Decimal]:
    """Parse a decimal accepting either ``.`` or ``,`` as separator."""
    if value is None:
        return None
    text = str(value).strip().replace(",", ".")
    if not text:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite() or number.adjusted() > MAX_AMOUNT_EXPONENT:
        return None
    return number


def _amount(value) -> Decimal:
    raw = "" if value is None else str(value).strip()
    if not raw:
        raise ValueError("must not be empty")
    number = parse_number(raw)
    if number is None:
        raise ValueError(f'must be a valid number (found: "{raw}")')
    return number


Amount = Annotated[Decimal, BeforeValidator(_amount)]


class _EntryBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, pattern=ID_PATTERN.pattern)
    name: str = Field(min_length=1)
    line: int
    original_row: List[str] = Field(default_factory=list)

    @property
    def segments(self) -> List[str]:
        return self.id.split(".")

    @property
    def depth(self) -> int:
        return len(self.segments)

    @property
    def parent_id(self) -> str:
        return ".".join(self.segments[:-1])

    @property
    def sequence(self) -> str:
        """Trailing segment without leading zeros."""
        return self.segments[-1].lstrip("0") or "0"

    @property
    def sequence_key(self) -> Tuple[int, str]:
        # numeric order of digit strings of any length
        return len(self.sequence), self.sequence


class Chapter(_EntryBase):
    level: Literal["chapter"] = "chapter"


class Subchapter(_EntryBase):
    level: Literal["subchapter"] = "subchapter"


class Section(_EntryBase):
    level: Literal["section"] = "section"


class Item(_EntryBase):
    level: Literal["item"] = "item"
    description: str = ""
    unit: str = Field(min_length=1)
    iva_percentage: Amount = Field(ge=IVA_RANGE[0], le=IVA_RANGE[1])
    pvp: Amount = Field(ge=PVP_MIN)


ParsedEntry = Annotated[Union[Chapter, Subchapter, Section, Item], Field(discriminator="level")]


class BudgetEntry(BaseModel):
    """One row of the normalized price list handed to the quoting app."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    level: Literal["chapter", "subchapter", "section", "item"]
    id: str
    name: str
    description: Optional[str] = None
    unit: Optional[str] = None
    iva_percentage: Optional[str] = None
    pvp: Optional[str] = None


class ConversionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    success: bool
    data: Optional[List[BudgetEntry]] = None
    errors: List[ValidationIssue] = Field(default_factory=list)

    def issues_with(self, code: ErrorCode) -> List[ValidationIssue]:
        return [e for e in self.errors if e.code == code]

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ConversionStats(BaseModel):
    chapters: int = 0
    subchapters: int = 0
    sections: int = 0
    items: int = 0
    total: int = 0
    pvp_total: str = "0.00"
    average_iva: str = "0.00"
    iva_rates: List[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    ok: bool = True
