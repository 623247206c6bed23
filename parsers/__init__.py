"""
Scan parsers module.
"""

from parsers.barcode_parser import (
    decode,
    normalize_scan,
    sanitize_serial,
    DecodedScan,
    Symbology,
    UNKNOWN_PART,
)

__all__ = [
    "decode",
    "normalize_scan",
    "sanitize_serial",
    "DecodedScan",
    "Symbology",
    "UNKNOWN_PART",
]
