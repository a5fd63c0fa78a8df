#
# Bus Stimulus Engine - Result Validation and Statistics
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Compares observed read data against script expectations and keeps the
# pass/fail counters for a run.
#

import logging
from dataclasses import dataclass, asdict
from typing import Optional, Sequence

from bus_stimulus.common.protocol import PROTOCOL_NAMES
from bus_stimulus.common.transaction import Transaction, PollRequest
from bus_stimulus.script.values import format_hex


log = logging.getLogger("cocotb.bus_stimulus.results")


@dataclass
class TestResults:
    """
    Run statistics.

    total == passed + failed holds after every validated transaction.
    errors counts script diagnostics and timeouts counts preload waits that
    hit their bound; neither contributes to total.
    """
    __test__ = False  # not a pytest test class

    total: int = 0
    passed: int = 0
    failed: int = 0
    errors: int = 0
    timeouts: int = 0
    aborted: bool = False
    last_error: str = ""

    def record_pass(self) -> None:
        self.total += 1
        self.passed += 1

    def record_fail(self, message: str) -> None:
        self.total += 1
        self.failed += 1
        self.last_error = message
        log.error(message)

    def record_error(self) -> None:
        self.errors += 1

    def record_timeout(self) -> None:
        self.timeouts += 1

    def abort(self, message: str) -> None:
        """The script could not be read; nothing after this point ran."""
        self.aborted = True
        self.last_error = message

    def ok(self, strict: bool = False) -> bool:
        """True when the run passed."""
        if self.aborted or self.failed > 0:
            return False
        if strict and (self.errors > 0 or self.timeouts > 0):
            return False
        return True

    def as_dict(self) -> dict:
        return asdict(self)


def _where(txn_line: Optional[int], protocol) -> str:
    proto = PROTOCOL_NAMES[protocol]
    if txn_line is None:
        return proto
    return f"{proto} line {txn_line}"


def check_scalar(results: TestResults, txn: Transaction, observed: int) -> Optional[bool]:
    """
    Score a single-word read.

    Returns:
        None if the transaction carries no expectation, else pass/fail
    """
    if txn.expected is None:
        return None

    if observed == txn.expected:
        results.record_pass()
        return True

    results.record_fail(
        f"{_where(txn.line, txn.protocol)}: mismatch at 0x{txn.address:08X}: "
        f"expected {format_hex(txn.expected, txn.width)}, observed {format_hex(observed, txn.width)}"
    )
    return False


def check_beats(results: TestResults, txn: Transaction, observed: Sequence[int]) -> Optional[bool]:
    """
    Score a multi-beat read beat by beat.

    Beat counts must match and every beat must match positionally. Only the
    first mismatching beat is reported.

    Returns:
        None if the transaction carries no expectation, else pass/fail
    """
    if txn.expected is None:
        return None

    expected = tuple(txn.expected)
    observed = tuple(observed)
    where = _where(txn.line, txn.protocol)

    if len(observed) != len(expected):
        results.record_fail(
            f"{where}: beat count mismatch at 0x{txn.address:08X}: "
            f"expected {len(expected)} beats, observed {len(observed)}"
        )
        return False

    for i, (exp, obs) in enumerate(zip(expected, observed)):
        if exp != obs:
            results.record_fail(
                f"{where}: mismatch at 0x{txn.beat_address(i):08X} beat {i}: "
                f"expected {format_hex(exp, txn.width)}, observed {format_hex(obs, txn.width)}"
            )
            return False

    results.record_pass()
    return True


def check_poll(results: TestResults, poll: PollRequest, observed: Optional[int], matched: bool,
               reads: int) -> bool:
    """Score a completed POLL."""
    if matched:
        results.record_pass()
        return True

    last = "nothing" if observed is None else format_hex(observed, poll.width)
    results.record_fail(
        f"{_where(poll.line, poll.protocol)}: poll timeout at 0x{poll.address:08X} after {reads} reads: "
        f"expected {format_hex(poll.expected, poll.width)} mask {format_hex(poll.mask, poll.width)}, "
        f"observed {last}"
    )
    return False
