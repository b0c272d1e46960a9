from __future__ import annotations

import logging
from typing import Tuple

from charset_normalizer import from_bytes

logger = logging.getLogger(__name__)


class UnreadableCsvError(ValueError):
    """Raised when the bytes cannot be decoded as text."""


def decode_csv_bytes(raw: bytes) -> Tuple[str, str]:
    """
    Decode uploaded bytes to text.

    UTF-8 is tried first (BOM removed); otherwise the best guess from
    charset-normalizer is used, which covers legacy spreadsheet exports
    such as cp1252.
    Returns ``(text, encoding_used)``.
    """
    if not raw:
        return "", "utf-8"

    try:
        return raw.decode("utf-8-sig"), "utf-8"
    except UnicodeDecodeError:
        pass

    match = from_bytes(raw).best()
    if match is None:
        raise UnreadableCsvError("could not detect the text encoding of the CSV")

    logger.debug("CSV is not UTF-8, decoded as %s", match.encoding)
    return str(match), match.encoding
