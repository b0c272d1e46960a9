"""
Fixed conversion rules.

Header vocabularies, level names, delimiters and formats accepted by the
converter. Nothing here is configurable at runtime.
"""

import re

CSV_DELIMITERS = (",", ";", "\t", "|")
DEFAULT_DELIMITER = ","

BOM = "\ufeff"

REQUIRED_FIELDS = {
    "spanish": ("nivel", "id", "nombre", "descripcion", "ud", "%iva", "pvp"),
    "english": ("level", "id", "name", "description", "unit", "iva_percentage", "pvp"),
}

# Canonical field -> same concept in the other vocabulary
ENGLISH_TO_SPANISH = dict(zip(REQUIRED_FIELDS["english"], REQUIRED_FIELDS["spanish"]))

# Slug of the level cell -> output level
LEVEL_MAP = {
    "capitulo": "chapter",
    "subcapitulo": "subchapter",
    "apartado": "section",
    "partida": "item",
    "chapter": "chapter",
    "subchapter": "subchapter",
    "section": "section",
    "item": "item",
}

CONTAINER_LEVELS = ("chapter", "subchapter", "section")

# Depth of an id prefix -> level the ancestor must be
ANCESTOR_LEVELS = {1: "chapter", 2: "subchapter", 3: "section"}
ITEM_DEPTHS = (2, 3, 4)
CONTAINER_DEPTHS = {"chapter": 1, "subchapter": 2, "section": 3}

ID_PATTERN = re.compile(r"^[0-9]+(\.[0-9]+)*$")

IVA_RANGE = (0, 100)
PVP_MIN = 0
# amounts at or above 10**16 are rejected
MAX_AMOUNT_EXPONENT = 15

EMPTY_DESCRIPTION = " "
ZERO_AMOUNT = "0.00"

EXPORT_HEADERS = ("Nivel", "ID", "Nombre", "Descripción", "Ud", "%IVA", "PVP")
EXPORT_LEVEL_NAMES = {
    "chapter": "Capítulo",
    "subchapter": "Subcapítulo",
    "section": "Apartado",
    "item": "Partida",
}
