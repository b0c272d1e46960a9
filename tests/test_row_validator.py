from decimal import Decimal

from tariff_csv.models import Chapter, ErrorCode, Item, Row, Section, Severity, Subchapter
from tariff_csv.row_validator import parse_number, validate_row, validate_rows
from tariff_csv.structure import map_fields

SPANISH, _ = map_fields(["Nivel", "ID", "Nombre", "Descripción", "Ud", "%IVA", "PVP"])
ENGLISH, _ = map_fields(["level", "id", "name", "description", "unit", "iva_percentage", "pvp"])


def row(*fields, line=2):
    return Row(line=line, fields=list(fields))


def error_fields(errors):
    return [e.field for e in errors]


def test_parse_number():
    assert parse_number("21,50") == Decimal("21.50")
    assert parse_number(" 12.3 ") == Decimal("12.3")
    assert parse_number("abc") is None
    assert parse_number("") is None
    assert parse_number("NaN") is None
    assert parse_number(None) is None


def test_valid_item_with_decimal_comma():
    entry, errors = validate_row(row("Partida", "1.1", "Cable", "UTP", "m", "21,50", "3,5"), SPANISH)
    assert errors == []
    assert isinstance(entry, Item)
    assert entry.iva_percentage == Decimal("21.50")
    assert entry.pvp == Decimal("3.5")
    assert entry.unit == "m"
    assert entry.line == 2
    assert entry.original_row == ["Partida", "1.1", "Cable", "UTP", "m", "21,50", "3,5"]


def test_non_numeric_iva():
    entry, errors = validate_row(row("Partida", "1.1", "Cable", "", "m", "abc", "3", line=7), SPANISH)
    assert entry is None
    [error] = errors
    assert error.code == ErrorCode.VALIDATION_ERROR
    assert error.severity == Severity.ERROR
    assert error.field == "%IVA"
    assert error.line == 7
    assert '"abc"' in error.message


def test_numeric_ranges():
    _, errors = validate_row(row("Partida", "1.1", "Cable", "", "m", "100,01", "-1"), SPANISH)
    assert error_fields(errors) == ["%IVA", "PVP"]
    assert errors[0].message == "%IVA must be less than or equal to 100"
    assert errors[1].message == "PVP must be greater than or equal to 0"

    entry, errors = validate_row(row("Partida", "1.1", "Cable", "", "m", "100", "0"), SPANISH)
    assert errors == []
    assert entry.pvp == 0


def test_item_required_fields():
    _, errors = validate_row(row("Partida", "", "", "", "", "", ""), SPANISH)
    assert error_fields(errors) == ["ID", "name", "unit", "%IVA", "PVP"]


def test_container_needs_only_id_and_name():
    entry, errors = validate_row(row("Capítulo", "1", "Electricidad", "", "", "", ""), SPANISH)
    assert errors == []
    assert isinstance(entry, Chapter)

    _, errors = validate_row(row("Apartado", "1.1.1", "", "", "", "", ""), SPANISH)
    assert error_fields(errors) == ["name"]


def test_level_is_accent_and_case_insensitive():
    entry, errors = validate_row(row("APARTADO", "1.1.1", "Baja tensión"), SPANISH)
    assert errors == []
    assert isinstance(entry, Section)


def test_english_level_values():
    entry, errors = validate_row(row("Item", "2.1", "Pipe", "", "m", "10", "12.30"), ENGLISH)
    assert errors == []
    assert entry.level == "item"


def test_unknown_level():
    entry, errors = validate_row(row("Grupo", "1", "X"), SPANISH)
    assert entry is None
    [error] = errors
    assert error.field == "level"
    assert "Grupo" in error.message


def test_id_format():
    for bad_id in ("1.a", "1..2", ".1", "1.", "-1", "1 2"):
        _, errors = validate_row(row("Capítulo", bad_id, "X"), SPANISH)
        assert error_fields(errors) == ["ID"], bad_id


def test_short_row_reports_missing_values():
    _, errors = validate_row(row("Partida", "1.1", "Cable"), SPANISH)
    assert error_fields(errors) == ["unit", "%IVA", "PVP"]


def test_validate_rows_skips_header_and_keeps_going():
    rows = [
        row("Nivel", "ID", "Nombre", "Descripción", "Ud", "%IVA", "PVP", line=1),
        row("Capítulo", "1", "A", line=2),
        row("Partida", "1.1", "B", "", "m", "abc", "1", line=3),
        row("Partida", "1.2", "C", "", "m", "21", "1", line=4),
    ]
    entries, errors = validate_rows(rows, SPANISH)
    assert [e.id for e in entries] == ["1", "1.2"]
    assert [e.line for e in errors] == [3]


def test_container_id_depth_must_match_level():
    _, errors = validate_row(row("Capítulo", "1.2.3", "X"), SPANISH)
    assert error_fields(errors) == ["ID"]
    assert "found 3" in errors[0].message

    _, errors = validate_row(row("Subcapítulo", "1", "X"), SPANISH)
    assert error_fields(errors) == ["ID"]

    entry, errors = validate_row(row("Subcapítulo", "1.2", "X"), SPANISH)
    assert errors == []
    assert isinstance(entry, Subchapter)


def test_items_may_sit_at_depths_two_to_four():
    for item_id in ("1.1", "1.1.1", "1.1.1.1"):
        entry, errors = validate_row(row("Partida", item_id, "C", "", "m", "21", "1"), SPANISH)
        assert errors == []
        assert isinstance(entry, Item)


def test_amounts_with_huge_exponent_are_rejected():
    assert parse_number("1e5000000") is None
    assert parse_number("1e16") is None
    assert parse_number("9999999999999999") == Decimal("9999999999999999")

    _, errors = validate_row(row("Partida", "1.1", "C", "", "m", "21", "1e5000000"), SPANISH)
    assert error_fields(errors) == ["PVP"]
    assert '"1e5000000"' in errors[0].message


def test_negative_zero_amounts_are_accepted():
    entry, errors = validate_row(row("Partida", "1.1", "C", "", "m", "-0", "-0,00"), SPANISH)
    assert errors == []
    assert entry.pvp == 0
