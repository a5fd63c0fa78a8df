#
# Stimulus Engine Tests
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# End-to-end script execution against scripted and behavioural transactors.
#

import io

import pytest

from bus_stimulus import StimulusEngine, EngineConfig
from bus_stimulus.common.protocol import AHBBurst, AHBSize, AXIBurst
from bus_stimulus.errors import ConfigurationError, PreloadTimeoutError
from bus_stimulus.model import MemoryStore, ModelClock, ModelTransactor

from tests.common import ScriptedTransactor, FakeClock, FakePreloadPort, run


def model_engine(**config):
    memory = MemoryStore()
    clock = ModelClock()
    engine = StimulusEngine(
        ahb=ModelTransactor(memory, 32, clock),
        axi=ModelTransactor(memory, config.get('axi_data_width', 64), clock),
        clock=clock,
        config=EngineConfig(**config),
    )
    return engine, memory


def run_text(engine, text):
    return run(engine.run(io.StringIO(text)))


# =============================================================================
# Basic execution
# =============================================================================

def test_ahb_write_then_read_back():
    """
    Write then read back the same word.

    Verifies:
    1. The read is scored as a pass
    2. No errors are recorded
    """
    engine, memory = model_engine()
    results = run_text(engine, "AHB WRITE 0x1000 0xDEAD\nAHB READ 0x1000 0xDEAD\n")

    assert (results.total, results.passed, results.failed) == (1, 1, 0)
    assert results.errors == 0
    assert memory.read(0x1000, 4) == 0xDEAD
    assert engine.report_results()


def test_operations_execute_in_script_order():
    ahb = ScriptedTransactor()
    axi = ScriptedTransactor()
    engine = StimulusEngine(ahb=ahb, axi=axi)
    run_text(engine, (
        "AHB WRITE 0x10 0x1\n"
        "AXI WRITE 0x20 0x2 INCR 1\n"
        "AHB BURST_WRITE 0x30 INCR4 1 2 3 4\n"
        "AHB READ 0x10\n"
    ))

    assert ahb.calls == [
        ('write', 0x10, 0x1, AHBBurst.SINGLE, AHBSize.WORD),
        ('write_burst', 0x30, [1, 2, 3, 4], AHBBurst.INCR4, AHBSize.WORD),
        ('read', 0x10, AHBBurst.SINGLE, AHBSize.WORD),
    ]
    assert axi.calls == [('write', 0x20, 0x2, AXIBurst.INCR, 1)]


def test_read_without_expectation_is_not_scored():
    ahb = ScriptedTransactor(reads=[0x55])
    engine = StimulusEngine(ahb=ahb)
    results = run_text(engine, "AHB READ 0x0\n")
    assert results.total == 0
    assert ahb.ops() == ['read']


def test_ahb_read_mismatch():
    ahb = ScriptedTransactor(reads=[0xBEEF])
    engine = StimulusEngine(ahb=ahb)
    results = run_text(engine, "AHB READ 0x1000 0xDEAD\n")

    assert results.failed == 1
    assert "expected 0x0000DEAD, observed 0x0000BEEF" in results.last_error
    assert not engine.report_results()


def test_axi_wrap_read_mismatch_names_beat_address():
    """
    AXI READ 0x2000 WRAP 1 0xAAAA 0xBBBB against observed [0xAAAA, 0xCCCC].

    Verifies:
    1. One AxLEN=1 WRAP read is issued
    2. The failure reports 0x2008 and both values at 64-bit width
    """
    axi = ScriptedTransactor(reads=[[0xAAAA, 0xCCCC]])
    engine = StimulusEngine(axi=axi)
    results = run_text(engine, "AXI READ 0x2000 WRAP 1 0xAAAA 0xBBBB\n")

    assert axi.calls == [('read_burst', 0x2000, AXIBurst.WRAP, 1)]
    assert results.failed == 1
    assert "0x00002008" in results.last_error
    assert "0x000000000000BBBB" in results.last_error
    assert "0x000000000000CCCC" in results.last_error


def test_burst_read_beat_count_mismatch_executes_but_does_not_score():
    """
    AXI BURST_READ with len=3 and only three expected values.

    Verifies:
    1. The four-beat read is still issued
    2. Nothing is scored
    3. One script error is counted
    """
    axi = ScriptedTransactor()
    traces = []
    engine = StimulusEngine(axi=axi, trace=[traces.append])
    results = run_text(engine, "AXI BURST_READ 0x0 INCR 3 1 2 3\n")

    assert axi.calls == [('read_burst', 0x0, AXIBurst.INCR, 3)]
    assert results.total == 0
    assert results.errors == 1
    assert traces[0].status == "unscored"
    assert len(traces[0].data) == 4


def test_burst_write_beat_count_mismatch_is_not_executed():
    ahb = ScriptedTransactor()
    engine = StimulusEngine(ahb=ahb)
    results = run_text(engine, "AHB BURST_WRITE 0x0 INCR8 1 2\n")
    assert ahb.calls == []
    assert results.errors == 1


# =============================================================================
# Error handling
# =============================================================================

def test_syntax_errors_skip_the_line_and_continue():
    ahb = ScriptedTransactor()
    engine = StimulusEngine(ahb=ahb)
    results = run_text(engine, (
        "APB WRITE 0x0 0x1\n"
        "AHB WRITE 0xZZ 0x1\n"
        "AHB WRITE 0x4 0x2\n"
    ))

    assert results.errors == 2
    assert ahb.calls == [('write', 0x4, 0x2, AHBBurst.SINGLE, AHBSize.WORD)]
    assert engine.report_results()


def test_strict_mode_fails_on_script_errors():
    engine = StimulusEngine(ahb=ScriptedTransactor(), config=EngineConfig(strict=True))
    run_text(engine, "AHB FETCH 0x0\n")
    assert engine.results.errors == 1
    assert not engine.report_results()


def test_missing_transactor_is_a_script_error():
    ahb = ScriptedTransactor()
    engine = StimulusEngine(ahb=ahb)
    results = run_text(engine, "AXI WRITE 0x0 0x1\nAHB WRITE 0x0 0x1\n")
    assert results.errors == 1
    assert ahb.ops() == ['write']


def test_unreadable_script_issues_nothing(tmp_path):
    ahb = ScriptedTransactor()
    engine = StimulusEngine(ahb=ahb)
    results = run(engine.run(tmp_path / "missing.stim"))

    assert results.aborted
    assert "cannot open script" in results.last_error
    assert ahb.calls == []
    assert not engine.report_results()


def test_script_file(tmp_path):
    script = tmp_path / "smoke.stim"
    script.write_text("# smoke\nAHB WRITE 0x0 0x12  # store\n\nAHB READ 0x0 0x12\n")
    engine, _ = model_engine()
    results = run(engine.run(script))
    assert results.passed == 1


def test_bad_configuration():
    with pytest.raises(ConfigurationError):
        StimulusEngine(config=EngineConfig(axi_data_width=96))


# =============================================================================
# WAIT / POLL / PRELOAD
# =============================================================================

def test_wait_advances_clock():
    clock = FakeClock()
    engine = StimulusEngine(clock=clock)
    results = run_text(engine, "WAIT 10\nWAIT 0\nWAIT\n")
    assert clock.waits == [10, 1]
    assert results.errors == 0


def test_wait_without_clock_is_an_error():
    engine = StimulusEngine()
    results = run_text(engine, "WAIT 5\n")
    assert results.errors == 1


def test_poll_passes_once_masked_value_matches():
    """
    Status register reads 0x0, 0x0, then 0x3.

    Verifies:
    1. Polling stops on the first masked match
    2. The configured interval is waited between reads
    3. One pass is scored
    """
    ahb = ScriptedTransactor(reads=[0x0, 0x0, 0x3])
    clock = FakeClock()
    engine = StimulusEngine(ahb=ahb, clock=clock, config=EngineConfig(poll_interval=4))
    results = run_text(engine, "AHB POLL 0x40 0x1 0x1\n")

    assert ahb.ops() == ['read', 'read', 'read']
    assert clock.waits == [4, 4]
    assert (results.total, results.passed) == (1, 1)


def test_poll_fails_after_limit():
    axi = ScriptedTransactor(default=0)
    engine = StimulusEngine(axi=axi, clock=FakeClock())
    results = run_text(engine, "AXI POLL 0x40 0x1 0x1 3\n")

    assert axi.calls == [('read_burst', 0x40, AXIBurst.INCR, 0)] * 3
    assert results.failed == 1
    assert "after 3 reads" in results.last_error


def test_preload_is_forwarded_and_settled():
    port = FakePreloadPort(fires_during_wait=True)
    engine = StimulusEngine(preload=port)
    results = run_text(engine, "PRELOAD top.u_mem data/a.hex\n")

    assert port.requests == [("top.u_mem", "data/a.hex")]
    assert port.handles[0].waits == [engine.config.preload_timeout]
    assert results.timeouts == 0


def test_back_to_back_preload_timeout_is_recorded():
    port = FakePreloadPort(fires_during_wait=False)
    engine = StimulusEngine(preload=port, config=EngineConfig(preload_timeout=100))
    results = run_text(engine, "PRELOAD top.a a.hex\nPRELOAD top.b b.hex\n")

    assert len(port.requests) == 2
    # Second request and the end-of-script settle both time out
    assert results.timeouts == 2
    assert engine.report_results()
    engine.config.strict = True
    assert not engine.report_results()


def test_preload_without_port_is_an_error():
    engine = StimulusEngine()
    results = run_text(engine, "PRELOAD top.a a.hex\n")
    assert results.errors == 1


def test_abort_policy_preload_timeout_ends_the_run():
    port = FakePreloadPort(fires_during_wait=False)
    ahb = ScriptedTransactor()
    engine = StimulusEngine(ahb=ahb, preload=port,
                            config=EngineConfig(preload_timeout=100, preload_timeout_policy="abort"))

    with pytest.raises(PreloadTimeoutError):
        run_text(engine, "PRELOAD top.a a.hex\nPRELOAD top.b b.hex\nAHB WRITE 0x0 0x1\n")
    assert ahb.calls == []
    assert engine.results.timeouts == 1


def test_non_ascii_count_skips_only_that_line():
    """
    A count written with a non-ASCII digit is a syntax error on its own line.

    Verifies:
    1. WAIT and POLL lines with '²' are counted as errors
    2. The following write still executes
    """
    ahb = ScriptedTransactor()
    engine = StimulusEngine(ahb=ahb, clock=FakeClock())
    results = run_text(engine, "WAIT ²\nAHB POLL 0x40 0x1 0x1 ²\nAHB WRITE 0x4 0x2\n")

    assert results.errors == 2
    assert ahb.calls == [('write', 0x4, 0x2, AHBBurst.SINGLE, AHBSize.WORD)]


def test_every_command_reaches_the_trace():
    """
    One trace record per processed command, in script order.

    Verifies:
    1. WAIT, POLL and PRELOAD produce records alongside bus transactions
    2. Each record carries its line number and outcome
    """
    ahb = ScriptedTransactor(reads=[0x1])
    port = FakePreloadPort(fires_during_wait=True)
    traces = []
    engine = StimulusEngine(ahb=ahb, clock=FakeClock(), preload=port, trace=[traces.append])
    run_text(engine, (
        "WAIT 5\n"
        "PRELOAD top.a a.hex\n"
        "AHB POLL 0x40 0x1\n"
        "AHB WRITE 0x0 0x2\n"
    ))

    assert [(t.line, t.protocol, t.operation) for t in traces] == [
        (1, "WAIT", None),
        (2, "PRELOAD", None),
        (3, "AHB", "POLL"),
        (4, "AHB", "WRITE"),
    ]
    assert traces[0].detail == "cycles=5"
    assert traces[1].detail == "top.a <- a.hex"
    assert traces[2].status == "pass"
    assert traces[2].data == [0x1]
    assert str(traces[0]) == "line 1: WAIT cycles=5"


def test_preload_trace_marks_timeout():
    port = FakePreloadPort(fires_during_wait=False)
    traces = []
    engine = StimulusEngine(preload=port, trace=[traces.append],
                            config=EngineConfig(preload_timeout=100))
    run_text(engine, "PRELOAD top.a a.hex\nPRELOAD top.b b.hex\n")
    assert [t.status for t in traces] == ["done", "timeout"]
