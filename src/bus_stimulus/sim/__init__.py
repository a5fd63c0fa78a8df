#
# Bus Stimulus Engine - cocotb Bindings
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Requires cocotb. Import from testbench code only.
#

from bus_stimulus.sim.cocotb_ports import CocotbClock, CocotbPreloadPort, run_stimulus

__all__ = [
    'CocotbClock',
    'CocotbPreloadPort',
    'run_stimulus',
]
