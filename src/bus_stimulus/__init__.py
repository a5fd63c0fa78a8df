#
# Bus Stimulus Engine
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Script-driven AHB/AXI stimulus for cocotb testbenches.
#
# The interpreter has no simulator dependency; cocotb bindings live in
# bus_stimulus.sim and are imported explicitly by testbenches.
#

from bus_stimulus.engine.config import EngineConfig
from bus_stimulus.engine.dispatch import BusTransactor, TraceRecord
from bus_stimulus.engine.interpreter import StimulusEngine
from bus_stimulus.engine.results import TestResults
from bus_stimulus.errors import (
    StimulusError,
    ConfigurationError,
    ScriptResourceError,
    ScriptSyntaxError,
    PreloadTimeoutError,
)

__all__ = [
    'EngineConfig',
    'BusTransactor',
    'TraceRecord',
    'StimulusEngine',
    'TestResults',
    'StimulusError',
    'ConfigurationError',
    'ScriptResourceError',
    'ScriptSyntaxError',
    'PreloadTimeoutError',
]
