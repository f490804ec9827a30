"""GS1/UDI barcode parsing for scanned inventory identifiers."""

import re
from dataclasses import dataclass

# ASCII 29 group separator (FNC1) between variable-length element strings
GS = "\x1d"

_GTIN_PATTERN = re.compile(r"(?:^|\]C1|\(01\)|01)([0-9]{14})")
_EXPIRY_PATTERN = re.compile(r"(?:\(17\)|17)([0-9]{6})")
_LOT_PATTERN = re.compile(r"(?:\(10\)|10)([A-Za-z0-9\-.]+)")
_SERIAL_PATTERN = re.compile(r"(?:\(21\)|21)([A-Za-z0-9\-.]+)")
_NON_ALPHANUMERIC = re.compile(r"[^0-9A-Za-z]")


@dataclass(frozen=True)
class ParsedIdentifier:
    """Fields extracted from a scanned identifier.

    ``None`` means the field was not present in the scan.
    """

    product_id: str | None = None
    lot: str | None = None
    expiration_date: str | None = None
    serial: str | None = None

    @property
    def is_empty(self) -> bool:
        """Check if nothing at all was extracted."""
        return all(
            value is None
            for value in (self.product_id, self.lot, self.expiration_date, self.serial)
        )


def _variable_length_value(pattern: re.Pattern[str], code: str) -> str | None:
    match = pattern.search(code)
    if match is None:
        return None

    value = match.group(1)
    # Over-captured into the next bracketed AI
    next_ai = value.find("(")
    if next_ai > -1:
        value = value[:next_ai]
    return value


def _expiration_date(code: str) -> str | None:
    match = _EXPIRY_PATTERN.search(code)
    if match is None:
        return None

    yymmdd = match.group(1)
    # Century is always 20xx, no pivot year
    return f"20{yymmdd[0:2]}-{yymmdd[2:4]}-{yymmdd[4:6]}"


def parse_identifier(raw: str | None) -> ParsedIdentifier:
    """Parse a raw scan into product id, lot, expiration date and serial.

    Understands GS1 element strings with bracketed ``(01)`` or bare ``01``
    application identifiers for GTIN (01), expiration date (17), lot (10)
    and serial (21). When no GTIN is found, the whole scan stripped to its
    alphanumeric characters is used as the product id, so plain UPC/EAN
    codes still resolve.

    Never raises: partial or unrecognized input yields a partial result.

    Args:
        raw: Raw string from the scanner

    Returns:
        ParsedIdentifier with whatever fields could be extracted

    Known limitations:
        * ``17YYMMDD`` always decodes to ``20YY``.
        * A lot or serial followed by an unbracketed AI swallows it,
          e.g. ``(10)L8842X21SN001`` gives lot ``L8842X21SN001``.

    Examples:
        >>> parse_identifier("(01)00885544112233(17)250615(10)L8842X")
        ParsedIdentifier(product_id='00885544112233', lot='L8842X', expiration_date='2025-06-15', serial=None)
        >>> parse_identifier("012345678905")
        ParsedIdentifier(product_id='012345678905', lot=None, expiration_date=None, serial=None)
    """
    if not raw:
        return ParsedIdentifier()

    code = raw.replace(GS, "")

    gtin_match = _GTIN_PATTERN.search(code)
    product_id = gtin_match.group(1) if gtin_match else None

    if product_id is None:
        stripped = _NON_ALPHANUMERIC.sub("", code)
        if stripped:
            product_id = stripped

    return ParsedIdentifier(
        product_id=product_id,
        lot=_variable_length_value(_LOT_PATTERN, code),
        expiration_date=_expiration_date(code),
        serial=_variable_length_value(_SERIAL_PATTERN, code),
    )
