#
# cocotb Binding Tests
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Builds stim_top with Icarus Verilog and runs tb_stimulus.py under cocotb.
# Skipped when iverilog is not installed.
#

import shutil
import sys
from pathlib import Path

import pytest


SIM_DIR = Path(__file__).resolve().parent


@pytest.mark.skipif(shutil.which("iverilog") is None, reason="Icarus Verilog not installed")
def test_cocotb_bindings(tmp_path):
    from cocotb_tools.runner import get_runner, get_results

    # The simulator process inherits sys.path as its PYTHONPATH
    if str(SIM_DIR) not in sys.path:
        sys.path.insert(0, str(SIM_DIR))

    runner = get_runner("icarus")
    runner.build(
        sources=[SIM_DIR / "stim_top.v"],
        hdl_toplevel="stim_top",
        build_dir=tmp_path / "sim_build",
        timescale=("1ns", "1ps"),
    )
    results_xml = runner.test(
        hdl_toplevel="stim_top",
        test_module="tb_stimulus",
        build_dir=tmp_path / "sim_build",
        test_dir=tmp_path,
    )

    num_tests, num_failed = get_results(results_xml)
    assert num_tests == 4
    assert num_failed == 0
