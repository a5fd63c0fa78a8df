#
# Bus Stimulus Engine - Common Protocol Definitions
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Script keywords, bus enumerations and burst addressing shared between the
# script front end, the interpreter and the behavioural model.
#
# IMPORTANT: This module must have NO simulator dependencies (no cocotb).
#

from enum import Enum, IntEnum
from typing import Optional, Union


# =============================================================================
# Script Keywords
# =============================================================================

KW_AHB      = "AHB"
KW_AXI      = "AXI"
KW_WAIT     = "WAIT"
KW_PRELOAD  = "PRELOAD"

COMMENT_MARKER = "#"


# =============================================================================
# Widths
# =============================================================================

ADDR_WIDTH = 32
AHB_DATA_WIDTH = 32
AXI_DATA_WIDTHS = (64, 128)

AXI_MAX_LENGTH = 255            # AxLEN is 8 bits
AXI_WRAP_BEATS = (2, 4, 8, 16)
AXI_FIXED_MAX_BEATS = 16


# =============================================================================
# Enums
# =============================================================================

class Protocol(Enum):
    """Command families recognised by the classifier."""
    AHB     = "ahb"
    AXI     = "axi"
    WAIT    = "wait"
    PRELOAD = "preload"


class Operation(Enum):
    """Bus operations (absent for WAIT and PRELOAD)."""
    WRITE       = "write"
    READ        = "read"
    BURST_WRITE = "burst_write"
    BURST_READ  = "burst_read"
    POLL        = "poll"


class AHBBurst(IntEnum):
    """HBURST encoding."""
    SINGLE = 0b000
    INCR   = 0b001
    WRAP4  = 0b010
    INCR4  = 0b011
    WRAP8  = 0b100
    INCR8  = 0b101
    WRAP16 = 0b110
    INCR16 = 0b111


class AHBSize(IntEnum):
    """HSIZE encoding (log2 of the transfer size in bytes)."""
    BYTE     = 0b000
    HALFWORD = 0b001
    WORD     = 0b010


class AXIBurst(IntEnum):
    """AxBURST encoding."""
    FIXED = 0b00
    INCR  = 0b01
    WRAP  = 0b10


BurstKind = Union[AHBBurst, AXIBurst]


# =============================================================================
# Keyword Tables (script text -> enum)
# =============================================================================
# Lookups are made on the upper-cased token.

PROTOCOL_KEYWORDS = {
    KW_AHB:     Protocol.AHB,
    KW_AXI:     Protocol.AXI,
    KW_WAIT:    Protocol.WAIT,
    KW_PRELOAD: Protocol.PRELOAD,
}

OPERATION_KEYWORDS = {
    "WRITE":       Operation.WRITE,
    "READ":        Operation.READ,
    "BURST_WRITE": Operation.BURST_WRITE,
    "BURST_READ":  Operation.BURST_READ,
    "POLL":        Operation.POLL,
}

AHB_BURST_KEYWORDS = {
    "SINGLE": AHBBurst.SINGLE,
    "INCR":   AHBBurst.INCR,
    "INCR4":  AHBBurst.INCR4,
    "INCR8":  AHBBurst.INCR8,
    "INCR16": AHBBurst.INCR16,
    "WRAP4":  AHBBurst.WRAP4,
    "WRAP8":  AHBBurst.WRAP8,
    "WRAP16": AHBBurst.WRAP16,
}

AHB_SIZE_KEYWORDS = {
    "BYTE":     AHBSize.BYTE,
    "HALFWORD": AHBSize.HALFWORD,
    "WORD":     AHBSize.WORD,
}

AXI_BURST_KEYWORDS = {
    "FIXED": AXIBurst.FIXED,
    "INCR":  AXIBurst.INCR,
    "WRAP":  AXIBurst.WRAP,
}


# =============================================================================
# Name Tables (enum -> trace text)
# =============================================================================

PROTOCOL_NAMES = {
    Protocol.AHB:     "AHB",
    Protocol.AXI:     "AXI",
    Protocol.WAIT:    "WAIT",
    Protocol.PRELOAD: "PRELOAD",
}

OPERATION_NAMES = {
    Operation.WRITE:       "WRITE",
    Operation.READ:        "READ",
    Operation.BURST_WRITE: "BURST_WRITE",
    Operation.BURST_READ:  "BURST_READ",
    Operation.POLL:        "POLL",
}

AHB_BURST_NAMES = {
    AHBBurst.SINGLE: "SINGLE",
    AHBBurst.INCR:   "INCR",
    AHBBurst.WRAP4:  "WRAP4",
    AHBBurst.INCR4:  "INCR4",
    AHBBurst.WRAP8:  "WRAP8",
    AHBBurst.INCR8:  "INCR8",
    AHBBurst.WRAP16: "WRAP16",
    AHBBurst.INCR16: "INCR16",
}

AHB_SIZE_NAMES = {
    AHBSize.BYTE:     "BYTE",
    AHBSize.HALFWORD: "HALFWORD",
    AHBSize.WORD:     "WORD",
}

AXI_BURST_NAMES = {
    AXIBurst.FIXED: "FIXED",
    AXIBurst.INCR:  "INCR",
    AXIBurst.WRAP:  "WRAP",
}


def burst_name(burst: BurstKind) -> str:
    """Trace text for either protocol's burst kind."""
    if isinstance(burst, AHBBurst):
        return AHB_BURST_NAMES[burst]
    return AXI_BURST_NAMES[burst]


# =============================================================================
# Defaults
# =============================================================================

DEFAULT_AHB_BURST = AHBBurst.SINGLE
DEFAULT_AHB_BURST_OP = AHBBurst.INCR     # BURST_WRITE / BURST_READ
DEFAULT_AHB_SIZE = AHBSize.WORD
DEFAULT_AXI_BURST = AXIBurst.INCR
DEFAULT_AXI_LENGTH = 0                   # one beat


# =============================================================================
# Burst Geometry
# =============================================================================

# Fixed beat counts per AHB burst kind; None means undefined length (INCR).
AHB_BURST_BEATS = {
    AHBBurst.SINGLE: 1,
    AHBBurst.INCR:   None,
    AHBBurst.WRAP4:  4,
    AHBBurst.INCR4:  4,
    AHBBurst.WRAP8:  8,
    AHBBurst.INCR8:  8,
    AHBBurst.WRAP16: 16,
    AHBBurst.INCR16: 16,
}

AHB_WRAPPING = (AHBBurst.WRAP4, AHBBurst.WRAP8, AHBBurst.WRAP16)


def ahb_size_bytes(size: AHBSize) -> int:
    """Bytes per transfer for an HSIZE value."""
    return 1 << int(size)


def ahb_burst_beats(burst: AHBBurst) -> Optional[int]:
    """Fixed beat count of an AHB burst, None for INCR."""
    return AHB_BURST_BEATS[burst]


def beat_address(start: int, index: int, beat_bytes: int, beats: int,
                 wrapping: bool = False, fixed: bool = False) -> int:
    """
    Address of beat `index` in a burst.

    Args:
        start: Address of the first beat
        index: Beat index (0-based)
        beat_bytes: Bytes transferred per beat (power of two)
        beats: Total beats in the burst (used for the wrap container)
        wrapping: Wrap inside the beats * beat_bytes aligned container
        fixed: Every beat targets the start address

    Returns:
        32-bit beat address
    """
    if fixed or index == 0:
        return start & 0xFFFFFFFF

    if wrapping:
        container = beats * beat_bytes
        lower = start & ~(container - 1)
        offset = (start - lower + index * beat_bytes) % container
        return (lower + offset) & 0xFFFFFFFF

    aligned = start & ~(beat_bytes - 1)
    return (aligned + index * beat_bytes) & 0xFFFFFFFF
