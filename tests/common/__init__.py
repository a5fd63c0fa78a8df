#
# Bus Stimulus Engine - Common Test Infrastructure
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

"""
Common test infrastructure for the stimulus engine unit tests.

This package provides:
- ScriptedTransactor: Transactor returning queued read data and logging calls
- FakeClock: Clock capability counting cycles
- FakePreloadPort: Preload capability with controllable completion
- run: Drive a coroutine to completion
"""

from tests.common.fakes import ScriptedTransactor, FakeClock, FakePreloadPort, FakeCompletion, run

__all__ = [
    'ScriptedTransactor',
    'FakeClock',
    'FakePreloadPort',
    'FakeCompletion',
    'run',
]
