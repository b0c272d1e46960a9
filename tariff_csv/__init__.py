from .converter import (
    PipelineStage,
    convert_csv,
    convert_csv_bytes,
    validate_csv,
    validate_csv_bytes,
)
from .models import (
    BudgetEntry,
    ConversionResult,
    ConversionStats,
    ErrorCode,
    Severity,
    ValidationIssue,
)
from .transform import calculate_stats, group_by_parent, items_only, iva_rates, to_csv

__all__ = [
    "PipelineStage",
    "convert_csv",
    "convert_csv_bytes",
    "validate_csv",
    "validate_csv_bytes",
    "BudgetEntry",
    "ConversionResult",
    "ConversionStats",
    "ErrorCode",
    "Severity",
    "ValidationIssue",
    "calculate_stats",
    "group_by_parent",
    "items_only",
    "iva_rates",
    "to_csv",
]
