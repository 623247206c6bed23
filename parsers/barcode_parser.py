"""
Barcode payload decoder.

Turns a scanned label into a part identifier and a serial number. Two label
families are understood:

    GS1-128  "01" + 14-digit GTIN, optional date AI (11/13/17), optional
             serial AI (21), then the serial.
    HIBC     primary (part) segment and secondary (serial) segment joined by
             the "/$+" link characters.

decode() is pure and total: it never raises and never touches the part map
beyond reading it. Input must already be normalized (see normalize_scan).
sanitize_serial() is a separate step applied by the caller.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional
import re


# GS1 Application Identifiers
GTIN_AI = "01"
GS1_PREFIX_LENGTH = 16  # AI "01" + 14-digit GTIN
DATE_AIS = ("11", "17", "13")  # production, expiry, packaging date
DATE_FIELD_LENGTH = 8  # 2-digit AI + YYMMDD
SERIAL_AI = "21"

# HIBC link characters between primary and secondary data
HIBC_DELIMITER = "/$+"
HIBC_TERMINATOR = "/"

UNKNOWN_PART = "UNKNOWN"

# Label variant whose trailing serial digit is part of the serial
HIBC_KEEP_TRAILING_DIGIT_PART = "P5556100"

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1F\x7F]")
_EMBEDDED_PART_RE = re.compile(r"^(PFR[A-Z0-9]{3,10})", re.IGNORECASE)
_LEADING_NOISE_RE = re.compile(r"^[^A-Z0-9]+")
_TRAILING_DIGIT_RE = re.compile(r"[0-9]\Z")
_TRAILING_NON_DIGITS_RE = re.compile(r"[^0-9]+\Z")


class Symbology(str, Enum):
    """Label family detected by the decoder."""
    GS1_128 = "GS1_128"
    HIBC = "HIBC"
    UNRECOGNIZED = "UNRECOGNIZED"


@dataclass(frozen=True)
class DecodedScan:
    """Part/serial pair extracted from a scan."""
    part: str
    serial: str
    symbology: Symbology = Symbology.UNRECOGNIZED

    @property
    def is_recognized(self) -> bool:
        """True if the scan matched GS1-128 or HIBC."""
        return self.symbology != Symbology.UNRECOGNIZED

    @property
    def is_unknown_part(self) -> bool:
        """True if a GS1 prefix was not found in the part map."""
        return self.part == UNKNOWN_PART

    def to_dict(self) -> dict:
        """Convert to {part, serial} for payloads and responses."""
        return {"part": self.part, "serial": self.serial}


UNRECOGNIZED_SCAN = DecodedScan(part="", serial="", symbology=Symbology.UNRECOGNIZED)


def normalize_scan(raw: Optional[str]) -> str:
    """
    Prepare scanner output for decode().

    Trims, drops ASCII control characters, drops one leading apostrophe
    (scanners emulating a spreadsheet paste) and upper-cases.
    """
    if raw is None:
        return ""

    text = str(raw).strip()
    text = _CONTROL_CHARS_RE.sub("", text)
    if text.startswith("'"):
        text = text[1:]
    return text.upper().strip()


def decode(raw: str, part_map: Mapping[str, str]) -> DecodedScan:
    """
    Decode a normalized scan into part and serial.

    Args:
        raw: Normalized scan text
        part_map: GS1 prefix (16 chars) -> part identifier. Read only.

    Returns:
        DecodedScan. Unrecognized input gives part == serial == "".
    """
    if not raw:
        return UNRECOGNIZED_SCAN

    if raw.startswith(GTIN_AI):
        return _decode_gs1(raw, part_map)

    if HIBC_DELIMITER in raw:
        return _decode_hibc(raw)

    return UNRECOGNIZED_SCAN


def sanitize_serial(raw_serial: Optional[str]) -> str:
    """
    Strip trailing non-digit noise from a serial, then trim.

    Only the end of the string is touched, so serials starting with letters
    are kept intact: "12345ABC" -> "12345", "ABC123" -> "ABC123".
    """
    if not raw_serial:
        return ""

    cleaned = _TRAILING_NON_DIGITS_RE.sub("", str(raw_serial))
    return cleaned.strip()


# ===================
# GS1-128
# ===================

def _decode_gs1(raw: str, part_map: Mapping[str, str]) -> DecodedScan:
    prefix = raw[:GS1_PREFIX_LENGTH]
    part = part_map.get(prefix)
    remainder = raw[GS1_PREFIX_LENGTH:]

    if remainder.startswith(DATE_AIS):
        remainder = remainder[DATE_FIELD_LENGTH:]

    if remainder.startswith(SERIAL_AI):
        serial = remainder[len(SERIAL_AI):]
    else:
        serial = remainder

    embedded = _extract_embedded_part(serial)
    if embedded is not None:
        return embedded

    if part:
        return DecodedScan(part=part, serial=serial, symbology=Symbology.GS1_128)

    # Unmapped prefix: keep the serial so the scan can be fixed up later
    return DecodedScan(part=UNKNOWN_PART, serial=serial, symbology=Symbology.GS1_128)


def _extract_embedded_part(serial: str) -> Optional[DecodedScan]:
    """
    PFR labels carry the real part code at the start of the serial field.

    The GTIN on these labels is shared across parts, so the embedded code wins
    over any part map entry.
    """
    match = _EMBEDDED_PART_RE.match(serial)
    if match is None:
        return None

    part = match.group(1).upper()
    rest = serial[len(part):]
    if not rest:
        # Label printed the part code only; it doubles as the serial
        rest = part
    else:
        rest = _LEADING_NOISE_RE.sub("", rest)

    return DecodedScan(part=part, serial=rest, symbology=Symbology.GS1_128)


# ===================
# HIBC
# ===================

def _decode_hibc(raw: str) -> DecodedScan:
    segments = raw.split(HIBC_DELIMITER)
    if len(segments) < 2:
        return UNRECOGNIZED_SCAN

    part, serial = segments[0], segments[1]

    if part.startswith("+B"):
        part = part[1:]
        # Some label generators emit a doubled "B" after the "+" flag
        if part.startswith("B"):
            part = part[1:]
    if serial.startswith("+"):
        serial = serial[1:]

    if serial.endswith(HIBC_TERMINATOR):
        serial = serial[:-1]
    elif _TRAILING_DIGIT_RE.search(serial):
        # Trailing digit is the HIBC check character, except on P5556100
        # labels where it belongs to the serial
        if part != HIBC_KEEP_TRAILING_DIGIT_PART:
            serial = serial[:-1]

    part = _repair_446_part(part)

    return DecodedScan(part=part, serial=serial, symbology=Symbology.HIBC)


def _repair_446_part(part: str) -> str:
    """
    Remove the "446" labeler prefix and trailing check character.

    This label family prints the part code wrapped as 446<code><check>; only
    codes containing PUL or ending in 1/0 are affected.
    """
    if (
        part.startswith("446")
        and len(part) > 4
        and ("PUL" in part or part.endswith("1") or part.endswith("0"))
    ):
        return part[3:-1]
    return part
