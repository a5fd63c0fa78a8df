#
# Bus Stimulus Engine - Behavioural Model
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

from bus_stimulus.model.memory import MemoryStore, ModelClock, ModelTransactor, ModelPreloadPort

__all__ = [
    'MemoryStore',
    'ModelClock',
    'ModelTransactor',
    'ModelPreloadPort',
]
