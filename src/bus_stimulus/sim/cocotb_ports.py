#
# Bus Stimulus Engine - cocotb Bindings
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

"""
cocotb implementations of the clock and preload capabilities.

Provides:
- CocotbClock: WAIT and POLL spacing on a DUT clock
- CocotbPreloadPort: background preloads signalled through a cocotb Event
- run_stimulus: one-call helper for @cocotb.test() bodies

Example:

    @cocotb.test()
    async def test_smoke(dut):
        cocotb.start_soon(Clock(dut.clk, 10, unit="ns").start())
        await run_stimulus(dut, "smoke.stim", ahb=MyAHBMaster(dut), axi=MyAXIMaster(dut),
                           loader=my_loader, clk=dut.clk)
"""

import cocotb
from cocotb.triggers import ClockCycles, Event, SimTimeoutError, with_timeout

from bus_stimulus.engine.config import EngineConfig
from bus_stimulus.engine.interpreter import StimulusEngine


class CocotbClock:
    """Clock capability over a DUT clock signal."""

    def __init__(self, clk, rising: bool = True):
        self.clk = clk
        self.rising = rising

    async def wait_cycles(self, n: int) -> None:
        await ClockCycles(self.clk, n, rising=self.rising)


class CocotbCompletion:
    """One-shot completion handle backed by a cocotb Event."""

    def __init__(self, name: str, timeout_unit: str):
        self.event = Event()
        self.name = name
        self.timeout_unit = timeout_unit

    def done(self) -> bool:
        return self.event.is_set()

    def fire(self) -> None:
        self.event.set()

    async def wait(self, timeout: float) -> bool:
        if self.event.is_set():
            return True
        try:
            await with_timeout(self.event.wait(), timeout, self.timeout_unit)
        except SimTimeoutError:
            return False
        return True


class CocotbPreloadPort:
    """
    Preload capability for cocotb testbenches.

    Each request starts `loader(target_path, data_file)` as a background
    coroutine and fires the returned handle when it finishes.

    Args:
        loader: async callable performing the load (e.g. writing a memory
            array through DUT handles)
        timeout_unit: Unit of the engine's preload timeout
    """

    def __init__(self, loader, timeout_unit: str = "ns"):
        self.loader = loader
        self.timeout_unit = timeout_unit

    async def _run(self, handle: CocotbCompletion, path: str, data_file: str) -> None:
        try:
            await self.loader(path, data_file)
        finally:
            handle.fire()

    def request_preload(self, path: str, data_file: str) -> CocotbCompletion:
        handle = CocotbCompletion(path, self.timeout_unit)
        cocotb.start_soon(self._run(handle, path, data_file))
        return handle


async def run_stimulus(dut, script, ahb=None, axi=None, loader=None, clk=None,
                       config: EngineConfig = None, trace=None) -> StimulusEngine:
    """
    Run a stimulus script inside a cocotb test and assert that it passed.

    Configuration defaults come from STIM_* environment variables.

    Returns:
        The engine, for inspecting results and trace
    """
    config = config or EngineConfig.from_env()
    engine = StimulusEngine(
        ahb=ahb,
        axi=axi,
        clock=CocotbClock(clk if clk is not None else dut.clk),
        preload=CocotbPreloadPort(loader, config.preload_timeout_unit) if loader is not None else None,
        config=config,
        trace=trace,
    )
    await engine.run(script)
    assert engine.report_results(), f"Stimulus failed: {engine.results.last_error}"
    return engine
