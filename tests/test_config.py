#
# Engine Configuration Tests
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

import pytest

from bus_stimulus.engine.config import EngineConfig, POLICY_ABORT, DEFAULT_PRELOAD_TIMEOUT
from bus_stimulus.errors import ConfigurationError


def test_defaults():
    config = EngineConfig().validate()
    assert config.axi_data_width == 64
    assert config.preload_timeout == DEFAULT_PRELOAD_TIMEOUT
    assert config.preload_timeout_unit == "ns"
    assert config.preload_timeout_policy == "last-wins"
    assert not config.strict


def test_from_env():
    env = {
        "STIM_AXI_WIDTH": "128",
        "STIM_PRELOAD_TIMEOUT": "500",
        "STIM_PRELOAD_TIMEOUT_UNIT": "us",
        "STIM_PRELOAD_POLICY": POLICY_ABORT,
        "STIM_POLL_INTERVAL": "2",
        "STIM_MAX_POLLS": "20",
        "STIM_STRICT": "yes",
        "UNRELATED": "x",
    }
    config = EngineConfig.from_env(env)
    assert config == EngineConfig(
        axi_data_width=128, preload_timeout=500.0, preload_timeout_unit="us",
        preload_timeout_policy=POLICY_ABORT, poll_interval=2, max_polls=20, strict=True,
    )


def test_from_env_overrides_win():
    config = EngineConfig.from_env({"STIM_AXI_WIDTH": "128"}, axi_data_width=64)
    assert config.axi_data_width == 64


def test_from_env_strict_off():
    assert not EngineConfig.from_env({"STIM_STRICT": "0"}).strict


@pytest.mark.parametrize("env", [
    {"STIM_AXI_WIDTH": "wide"},
    {"STIM_AXI_WIDTH": "32"},
    {"STIM_PRELOAD_POLICY": "retry"},
    {"STIM_MAX_POLLS": "0"},
])
def test_from_env_rejects_bad_settings(env):
    with pytest.raises(ConfigurationError):
        EngineConfig.from_env(env)


@pytest.mark.parametrize("kwargs", [
    {"axi_data_width": 256},
    {"preload_timeout": 0},
    {"poll_interval": -1},
])
def test_validate_rejects(kwargs):
    with pytest.raises(ConfigurationError):
        EngineConfig(**kwargs).validate()


@pytest.mark.parametrize("value", ["nan", "inf", "-inf"])
def test_preload_timeout_must_be_finite(value):
    with pytest.raises(ConfigurationError, match="preload timeout"):
        EngineConfig.from_env({"STIM_PRELOAD_TIMEOUT": value})
