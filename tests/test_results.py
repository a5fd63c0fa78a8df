#
# Result Validation Tests
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Verifies scalar and beat-by-beat comparison and the statistics invariants.
#

from bus_stimulus.common.protocol import Protocol, Operation, AHBBurst, AHBSize, AXIBurst
from bus_stimulus.common.transaction import Transaction, PollRequest
from bus_stimulus.engine.results import TestResults, check_scalar, check_beats, check_poll


def ahb_read(expected, address=0x1000):
    return Transaction(Protocol.AHB, Operation.READ, address, AHBBurst.SINGLE, 32,
                       size=AHBSize.WORD, expected=expected, line=3)


def axi_read(expected, burst=AXIBurst.INCR, length=1, address=0x2000):
    return Transaction(Protocol.AXI, Operation.READ, address, burst, 64,
                       length=length, expected=expected, line=8)


def test_no_expectation_leaves_statistics_untouched():
    results = TestResults()
    assert check_scalar(results, ahb_read(None), 0x1234) is None
    assert check_beats(results, axi_read(None), [1, 2]) is None
    assert results == TestResults()


def test_scalar_pass_and_fail():
    results = TestResults()
    assert check_scalar(results, ahb_read(0xDEAD), 0xDEAD) is True
    assert check_scalar(results, ahb_read(0xDEAD), 0xBEEF) is False

    assert (results.total, results.passed, results.failed) == (2, 1, 1)
    assert results.last_error == (
        "AHB line 3: mismatch at 0x00001000: expected 0x0000DEAD, observed 0x0000BEEF"
    )


def test_wrap_beat_mismatch_reports_beat_address():
    """
    AXI READ 0x2000 WRAP 1 expecting [0xAAAA, 0xBBBB], observing [0xAAAA, 0xCCCC].

    Verifies:
    1. The comparison fails at beat 1
    2. last_error names 0x2000 + 8, the expected and the observed value
    """
    results = TestResults()
    txn = axi_read((0xAAAA, 0xBBBB), burst=AXIBurst.WRAP)
    assert check_beats(results, txn, [0xAAAA, 0xCCCC]) is False

    assert results.failed == 1
    assert "0x00002008 beat 1" in results.last_error
    assert "expected 0x000000000000BBBB" in results.last_error
    assert "observed 0x000000000000CCCC" in results.last_error


def test_first_mismatch_only_is_reported():
    results = TestResults()
    txn = axi_read((1, 2, 3, 4), length=3)
    check_beats(results, txn, [1, 9, 9, 9])
    assert "beat 1" in results.last_error
    assert results.total == 1


def test_observed_beat_count_mismatch_fails():
    results = TestResults()
    check_beats(results, axi_read((1, 2)), [1])
    assert results.failed == 1
    assert "expected 2 beats, observed 1" in results.last_error


def test_total_is_passed_plus_failed_after_every_check():
    results = TestResults()
    observations = [(0x1, 0x1), (0x1, 0x2), (0x5, 0x5), (0x0, 0xF)]
    for expected, observed in observations:
        check_scalar(results, ahb_read(expected), observed)
        assert results.total == results.passed + results.failed
    assert (results.passed, results.failed) == (2, 2)


def test_poll_scoring():
    results = TestResults()
    poll = PollRequest(Protocol.AHB, 0x40, 0x1, 0x1, 3, 32, line=2)
    assert check_poll(results, poll, 0x1, True, 1) is True
    assert check_poll(results, poll, 0x0, False, 3) is False
    assert results.total == 2
    assert "poll timeout at 0x00000040 after 3 reads" in results.last_error


def test_ok_and_strict():
    results = TestResults()
    results.record_error()
    assert results.ok()
    assert not results.ok(strict=True)

    results.record_fail("boom")
    assert not results.ok()


def test_abort_fails_the_run():
    results = TestResults()
    results.abort("cannot open script x")
    assert not results.ok()
    assert results.total == 0
