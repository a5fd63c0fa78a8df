#
# Bus Stimulus Engine - Script Interpreter
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Executes a stimulus script line by line against the attached transactors.
#

"""
Script interpreter.

Typical use from a cocotb test:

    engine = StimulusEngine(ahb=ahb_bfm, axi=axi_bfm, clock=CocotbClock(dut.clk),
                            preload=CocotbPreloadPort(loader))
    await engine.run("tests/smoke.stim")
    assert engine.report_results()

Lines execute strictly in script order. Syntax errors skip the offending line
and are counted; mismatches are scored; an unreadable script ends the run
before any transaction is issued.
"""

import logging
from typing import List, Optional

from bus_stimulus.common.protocol import Protocol, AHBBurst, AHBSize, AXIBurst
from bus_stimulus.common.transaction import (
    Action, Transaction, PollRequest, WaitRequest, PreloadRequest,
)
from bus_stimulus.engine.config import EngineConfig
from bus_stimulus.engine.dispatch import (
    BusTransactor, TransactionDispatcher, TraceSink,
    make_trace, poll_trace, wait_trace, preload_trace,
)
from bus_stimulus.engine.preload import PreloadCoordinator
from bus_stimulus.engine.results import TestResults, check_scalar, check_beats, check_poll
from bus_stimulus.errors import (
    ScriptSyntaxError, ScriptResourceError, BeatCountError, StimulusError,
)
from bus_stimulus.script.classifier import classify
from bus_stimulus.script.grammar import CommandResolver
from bus_stimulus.script.source import ScriptSource, ScriptInput
from bus_stimulus.script.tokenizer import tokenize


log = logging.getLogger("cocotb.bus_stimulus")


class StimulusEngine:
    """
    Interprets stimulus scripts.

    Args:
        ahb: AHB transactor
        axi: AXI transactor
        clock: Clock capability with `await wait_cycles(n)`
        preload: Preload port capability (see engine.preload)
        config: Engine configuration (validated here)
        trace: Extra trace sinks

    Raises:
        ConfigurationError: Unsupported configuration
    """

    def __init__(self, ahb: Optional[BusTransactor] = None, axi: Optional[BusTransactor] = None,
                 clock=None, preload=None, config: Optional[EngineConfig] = None,
                 trace: Optional[List[TraceSink]] = None):
        self.config = (config or EngineConfig()).validate()
        self.results = TestResults()
        self.clock = clock
        self.resolver = CommandResolver(self.config.axi_data_width, self.config.max_polls)
        self.dispatcher = TransactionDispatcher(ahb=ahb, axi=axi, sinks=trace)
        self.preloads = None
        if preload is not None:
            self.preloads = PreloadCoordinator(
                preload,
                timeout=self.config.preload_timeout,
                results=self.results,
                policy=self.config.preload_timeout_policy,
            )

    # -------------------------------------------------------------------------
    # Front end
    # -------------------------------------------------------------------------

    def parse(self, text: str, line: Optional[int] = None) -> Action:
        """Tokenize, classify and resolve one (already stripped) line."""
        cmd = classify(tokenize(text), line)
        return self.resolver.resolve(cmd)

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def run(self, script: ScriptInput) -> TestResults:
        """
        Execute every line of a script.

        Returns:
            The run statistics (also available as self.results)
        """
        source = script if isinstance(script, ScriptSource) else ScriptSource(script)

        try:
            source.open()
        except ScriptResourceError as e:
            self.results.abort(str(e))
            log.error("%s", e)
            return self.results

        log.info("Running stimulus script %s", source.name)
        try:
            for line_number, text in source:
                await self.execute_line(text, line_number)
        except ScriptResourceError as e:
            self.results.abort(str(e))
            log.error("%s", e)

        if self.preloads is not None:
            await self.preloads.settle()

        return self.results

    async def execute_line(self, text: str, line: Optional[int] = None) -> None:
        """Execute one line; syntax errors are logged and counted."""
        try:
            action = self.parse(text, line)
            await self.execute(action)
        except ScriptSyntaxError as e:
            self.results.record_error()
            log.error("%s", e)

    async def execute(self, action: Action) -> None:
        if isinstance(action, Transaction):
            await self._transaction(action)
        elif isinstance(action, PollRequest):
            await self._poll(action)
        elif isinstance(action, WaitRequest):
            await self._wait(action.cycles, action.line)
            self.dispatcher.emit(wait_trace(action))
        elif isinstance(action, PreloadRequest):
            await self._preload(action)
        else:
            raise StimulusError(f"unknown action {action!r}")

    async def _transaction(self, txn: Transaction) -> None:
        observed = await self.dispatcher.execute(txn)

        if txn.is_read:
            record = make_trace(txn, observed)
            if txn.arity_error is not None:
                record.status = "unscored"
            elif txn.expected is not None:
                if isinstance(observed, list) and isinstance(txn.expected, tuple):
                    passed = check_beats(self.results, txn, observed)
                else:
                    passed = check_scalar(self.results, txn, observed)
                record.status = "pass" if passed else "fail"
        else:
            record = make_trace(txn, txn.payload)

        self.dispatcher.emit(record)

        if txn.arity_error is not None:
            raise BeatCountError(txn.arity_error, line=txn.line)

    async def _read_word(self, poll: PollRequest) -> int:
        xtor = self.dispatcher.transactor(poll.protocol, poll.line)
        if poll.protocol == Protocol.AHB:
            return await xtor.read(poll.address, AHBBurst.SINGLE, AHBSize.WORD)
        beats = await xtor.read_burst(poll.address, AXIBurst.INCR, 0)
        return beats[0]

    async def _poll(self, poll: PollRequest) -> None:
        target = poll.expected & poll.mask
        observed = None
        reads = 0
        matched = False

        while reads < poll.max_polls:
            observed = await self._read_word(poll)
            reads += 1
            if observed & poll.mask == target:
                matched = True
                break
            if reads < poll.max_polls:
                await self._wait(self.config.poll_interval, poll.line)

        check_poll(self.results, poll, observed, matched, reads)
        self.dispatcher.emit(poll_trace(poll, observed, matched, reads))

    async def _wait(self, cycles: int, line: Optional[int] = None) -> None:
        if cycles == 0:
            return
        if self.clock is None:
            raise ScriptSyntaxError("WAIT needs a clock, none attached", line=line)
        await self.clock.wait_cycles(cycles)

    async def _preload(self, req: PreloadRequest) -> None:
        if self.preloads is None:
            raise ScriptSyntaxError("PRELOAD needs a preload port, none attached", line=req.line)
        completed = await self.preloads.request(req)
        self.dispatcher.emit(preload_trace(req, completed))

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def report_results(self) -> bool:
        """
        Log the run summary.

        Returns:
            True if the run passed (no failed checks; in strict mode also no
            script errors or preload timeouts)
        """
        r = self.results
        passed = r.ok(self.config.strict)
        summary = (
            f"Results: total={r.total} passed={r.passed} failed={r.failed} "
            f"errors={r.errors} timeouts={r.timeouts}"
        )
        if passed:
            log.info("%s - PASS", summary)
        else:
            log.error("%s - FAIL", summary)
            if r.last_error:
                log.error("Last error: %s", r.last_error)
        return passed
