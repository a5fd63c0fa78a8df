#
# Bus Stimulus Engine - Resolved Script Actions
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# One action is produced per script line by the grammar and consumed by the
# interpreter. Actions are immutable and discarded once executed.
#

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from bus_stimulus.common.protocol import (
    Protocol, Operation, AHBSize, AXIBurst, BurstKind,
    AHB_WRAPPING, ahb_size_bytes, beat_address,
)


Payload = Union[int, Tuple[int, ...]]


@dataclass(frozen=True)
class Transaction:
    """
    A fully resolved bus transaction.

    payload and expected hold a scalar for single-word operations (AHB WRITE,
    AHB READ, AXI WRITE) and a tuple of beats otherwise.
    """
    protocol: Protocol
    operation: Operation
    address: int
    burst: BurstKind
    width: int                          # data width in bits
    size: Optional[AHBSize] = None      # AHB only
    length: int = 0                     # beats - 1
    payload: Optional[Payload] = None
    expected: Optional[Payload] = None
    line: Optional[int] = None
    arity_error: Optional[str] = None   # set when expected beats are unusable

    @property
    def beats(self) -> int:
        return self.length + 1

    @property
    def is_read(self) -> bool:
        return self.operation in (Operation.READ, Operation.BURST_READ)

    @property
    def beat_bytes(self) -> int:
        """Bytes transferred per beat."""
        if self.size is not None:
            return ahb_size_bytes(self.size)
        return self.width // 8

    @property
    def size_or_length(self):
        """Value passed to the transactor: HSIZE for AHB, AxLEN for AXI."""
        if self.protocol == Protocol.AHB:
            return self.size
        return self.length

    def beat_address(self, index: int) -> int:
        """Address of beat `index` following the burst's addressing rule."""
        if self.protocol == Protocol.AHB:
            wrapping = self.burst in AHB_WRAPPING
            fixed = False
        else:
            wrapping = self.burst == AXIBurst.WRAP
            fixed = self.burst == AXIBurst.FIXED
        return beat_address(self.address, index, self.beat_bytes, self.beats,
                            wrapping=wrapping, fixed=fixed)


@dataclass(frozen=True)
class PollRequest:
    """Read a register until (value & mask) == (expected & mask)."""
    protocol: Protocol
    address: int
    expected: int
    mask: int
    max_polls: int
    width: int
    line: Optional[int] = None


@dataclass(frozen=True)
class WaitRequest:
    """Idle for a number of clock cycles."""
    cycles: int
    line: Optional[int] = None


@dataclass(frozen=True)
class PreloadRequest:
    """Bulk-load a memory instance from a data file."""
    target_path: str
    data_file: str
    line: Optional[int] = None


Action = Union[Transaction, PollRequest, WaitRequest, PreloadRequest]
