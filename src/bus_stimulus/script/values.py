#
# Bus Stimulus Engine - Value Parsing
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Hex literals for addresses and data, decimal literals for counts.
#

import string

from bus_stimulus.errors import ValueParseError


HEX_DIGITS = frozenset(string.hexdigits)
DEC_DIGITS = frozenset(string.digits)


def parse_unsigned(text: str, width_bits: int) -> int:
    """
    Parse a hex literal into a width_bits unsigned value.

    Accepts an optional 0x/0X prefix and '_' digit separators. Literals with
    more than width_bits/4 digits are rejected rather than truncated.

    Args:
        text: Literal as written in the script
        width_bits: Field width (multiple of 4)

    Returns:
        Parsed value

    Raises:
        ValueParseError: Malformed literal or value wider than the field
    """
    digits = text
    if digits[:2] in ("0x", "0X"):
        digits = digits[2:]
    digits = digits.replace("_", "")

    if not digits:
        raise ValueParseError("malformed hex literal", token=text)

    max_digits = width_bits // 4
    if len(digits) > max_digits:
        raise ValueParseError(f"value exceeds {width_bits}-bit width", token=text)

    if any(c not in HEX_DIGITS for c in digits):
        raise ValueParseError("malformed hex literal", token=text)

    return int(digits, 16) & ((1 << width_bits) - 1)


def parse_count(text: str, what: str = "count", maximum: int = None) -> int:
    """
    Parse a non-negative decimal count (cycles, burst length, poll limit).

    Raises:
        ValueParseError: Not a decimal number, or above maximum
    """
    # ASCII only: str.isdigit() also accepts digits int() cannot parse
    if not text or any(c not in DEC_DIGITS for c in text):
        raise ValueParseError(f"malformed {what}", token=text)
    value = int(text, 10)
    if maximum is not None and value > maximum:
        raise ValueParseError(f"{what} exceeds maximum of {maximum}", token=text)
    return value


def format_hex(value: int, width_bits: int) -> str:
    """Zero-padded hex text for a width_bits value."""
    return f"0x{value:0{width_bits // 4}X}"
