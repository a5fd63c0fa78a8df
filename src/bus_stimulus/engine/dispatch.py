#
# Bus Stimulus Engine - Transaction Dispatch
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Issues resolved transactions through the protocol transactors and emits one
# trace record per processed command.
#

"""
Transactor capability and dispatcher.

A transactor performs the clocked handshake for one bus operation. The
dispatcher only needs the four coroutines defined on BusTransactor; any
object providing them can be attached (signal-level BFMs in a cocotb
testbench, or the behavioural model in bus_stimulus.model).

Argument conventions:
- AHB: burst is an AHBBurst, size_or_len an AHBSize.
- AXI: burst is an AXIBurst, size_or_len the AxLEN value (beats - 1).
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Union

from bus_stimulus.common.protocol import (
    Protocol, Operation, AHBBurst, AHBSize, AXIBurst,
    AHB_SIZE_NAMES, PROTOCOL_NAMES, OPERATION_NAMES,
    burst_name,
)
from bus_stimulus.common.transaction import Transaction, PollRequest, WaitRequest, PreloadRequest
from bus_stimulus.errors import TransactorMissingError
from bus_stimulus.script.values import format_hex


log = logging.getLogger("cocotb.bus_stimulus.trace")


class BusTransactor:
    """
    Abstract bus transactor.

    Each method suspends the caller until the transfer completes.
    """

    async def write(self, address: int, data: int, burst, size_or_len) -> None:
        """Single write."""
        raise NotImplementedError

    async def read(self, address: int, burst, size_or_len) -> int:
        """Single read, returns the read word."""
        raise NotImplementedError

    async def write_burst(self, address: int, beats: Sequence[int], burst, size_or_len) -> None:
        """Multi-beat write of len(beats) beats."""
        raise NotImplementedError

    async def read_burst(self, address: int, burst, length: int, size=None) -> List[int]:
        """Multi-beat read, returns length + 1 beats in order."""
        raise NotImplementedError


# =============================================================================
# Trace
# =============================================================================

@dataclass
class TraceRecord:
    """
    One processed command, for logs and trace export.

    Bus commands (including POLL) fill the address/burst fields. WAIT and
    PRELOAD leave them empty and describe themselves in `detail`.
    """
    line: Optional[int]
    protocol: str
    operation: Optional[str] = None
    address: Optional[int] = None
    burst: Optional[str] = None
    size: Optional[str] = None
    length: int = 0
    width: int = 32
    data: List[int] = field(default_factory=list)
    expected: Optional[List[int]] = None
    status: str = "done"      # done | pass | fail | unscored | timeout
    detail: Optional[str] = None

    def __str__(self) -> str:
        if self.address is None:
            text = self.protocol
        else:
            data = " ".join(format_hex(d, self.width) for d in self.data)
            text = f"{self.protocol} {self.operation} addr=0x{self.address:08X} data=[{data}] burst={self.burst}"
            if self.size is not None:
                text += f" size={self.size}"
            else:
                text += f" len={self.length}"
        if self.detail is not None:
            text += f" {self.detail}"
        if self.line is not None:
            text = f"line {self.line}: {text}"
        return text

    def to_dict(self) -> dict:
        """Dictionary form for JSON/CSV export."""
        return {
            'line': self.line,
            'protocol': self.protocol,
            'operation': self.operation,
            'address': None if self.address is None else f"0x{self.address:08x}",
            'burst': self.burst,
            'size': self.size,
            'length': self.length,
            'data': [format_hex(d, self.width) for d in self.data],
            'expected': None if self.expected is None else [format_hex(d, self.width) for d in self.expected],
            'status': self.status,
            'detail': self.detail,
        }


def _as_list(value) -> List[int]:
    if value is None:
        return []
    if isinstance(value, int):
        return [value]
    return list(value)


def make_trace(txn: Transaction, data: Union[int, Sequence[int], None]) -> TraceRecord:
    return TraceRecord(
        line=txn.line,
        protocol=PROTOCOL_NAMES[txn.protocol],
        operation=OPERATION_NAMES[txn.operation],
        address=txn.address,
        burst=burst_name(txn.burst),
        size=AHB_SIZE_NAMES[txn.size] if txn.size is not None else None,
        length=txn.length,
        width=txn.width,
        data=_as_list(data),
        expected=None if txn.expected is None else _as_list(txn.expected),
    )


def poll_trace(poll: PollRequest, observed: Optional[int], matched: bool, reads: int) -> TraceRecord:
    ahb = poll.protocol == Protocol.AHB
    return TraceRecord(
        line=poll.line,
        protocol=PROTOCOL_NAMES[poll.protocol],
        operation=OPERATION_NAMES[Operation.POLL],
        address=poll.address,
        burst=burst_name(AHBBurst.SINGLE if ahb else AXIBurst.INCR),
        size=AHB_SIZE_NAMES[AHBSize.WORD] if ahb else None,
        width=poll.width,
        data=_as_list(observed),
        expected=[poll.expected],
        status="pass" if matched else "fail",
        detail=f"mask={format_hex(poll.mask, poll.width)} reads={reads}",
    )


def wait_trace(req: WaitRequest) -> TraceRecord:
    return TraceRecord(line=req.line, protocol=PROTOCOL_NAMES[Protocol.WAIT], detail=f"cycles={req.cycles}")


def preload_trace(req: PreloadRequest, completed: bool) -> TraceRecord:
    """`completed` is False when the wait for the previous preload timed out."""
    return TraceRecord(
        line=req.line,
        protocol=PROTOCOL_NAMES[Protocol.PRELOAD],
        status="done" if completed else "timeout",
        detail=f"{req.target_path} <- {req.data_file}",
    )


TraceSink = Callable[[TraceRecord], None]


# =============================================================================
# Dispatcher
# =============================================================================

class TransactionDispatcher:
    """
    Routes transactions to the transactor for their protocol.

    Args:
        ahb: AHB transactor (optional)
        axi: AXI transactor (optional)
        sinks: Callables receiving each TraceRecord
    """

    def __init__(self, ahb: Optional[BusTransactor] = None, axi: Optional[BusTransactor] = None,
                 sinks: Optional[List[TraceSink]] = None):
        self.transactors = {
            Protocol.AHB: ahb,
            Protocol.AXI: axi,
        }
        self.sinks: List[TraceSink] = list(sinks or [])

    def transactor(self, protocol: Protocol, line: Optional[int] = None) -> BusTransactor:
        xtor = self.transactors.get(protocol)
        if xtor is None:
            raise TransactorMissingError(f"no {PROTOCOL_NAMES[protocol]} transactor attached", line=line)
        return xtor

    async def execute(self, txn: Transaction):
        """
        Perform the transaction.

        Returns:
            None for writes, an int for AHB READ, a list of beats for burst reads
            and all AXI reads
        """
        xtor = self.transactor(txn.protocol, txn.line)
        op = txn.operation

        if op == Operation.WRITE:
            await xtor.write(txn.address, txn.payload, txn.burst, txn.size_or_length)
            observed = None
        elif op == Operation.BURST_WRITE:
            await xtor.write_burst(txn.address, list(txn.payload), txn.burst, txn.size_or_length)
            observed = None
        elif op == Operation.READ and txn.protocol == Protocol.AHB:
            observed = await xtor.read(txn.address, txn.burst, txn.size)
        else:
            observed = await xtor.read_burst(txn.address, txn.burst, txn.length, txn.size)
            observed = list(observed)

        return observed

    def emit(self, record: TraceRecord) -> None:
        """Log a trace record and hand it to the sinks."""
        log.info("%s%s", record, "" if record.status == "done" else f" -> {record.status}")
        for sink in self.sinks:
            sink(record)
