#
# Bus Stimulus Engine - Engine Configuration
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Construction-time parameters. Testbenches usually set these through
# STIM_* environment variables (see EngineConfig.from_env).
#

import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from bus_stimulus.common.protocol import AXI_DATA_WIDTHS
from bus_stimulus.errors import ConfigurationError


# Preload wait bound, in simulation time units.
DEFAULT_PRELOAD_TIMEOUT = 1_000_000
DEFAULT_PRELOAD_TIMEOUT_UNIT = "ns"

# What to do when a preload wait hits the bound.
POLICY_LAST_WINS = "last-wins"    # record the timeout, issue the new request anyway
POLICY_ABORT     = "abort"        # raise PreloadTimeoutError
PRELOAD_POLICIES = (POLICY_LAST_WINS, POLICY_ABORT)

DEFAULT_POLL_INTERVAL = 10        # cycles between POLL reads
DEFAULT_MAX_POLLS = 1000

ENV_PREFIX = "STIM_"


@dataclass
class EngineConfig:
    """
    Stimulus engine configuration.

    Attributes:
        axi_data_width: AXI data bus width in bits (64 or 128)
        preload_timeout: Bound on waiting for an outstanding preload
        preload_timeout_unit: Time unit of preload_timeout
        preload_timeout_policy: 'last-wins' or 'abort'
        poll_interval: Cycles waited between POLL reads
        max_polls: Default POLL read limit
        strict: Script errors and preload timeouts also fail the run
    """
    axi_data_width: int = 64
    preload_timeout: float = DEFAULT_PRELOAD_TIMEOUT
    preload_timeout_unit: str = DEFAULT_PRELOAD_TIMEOUT_UNIT
    preload_timeout_policy: str = POLICY_LAST_WINS
    poll_interval: int = DEFAULT_POLL_INTERVAL
    max_polls: int = DEFAULT_MAX_POLLS
    strict: bool = False

    def validate(self) -> "EngineConfig":
        """Raise ConfigurationError for unsupported settings."""
        if self.axi_data_width not in AXI_DATA_WIDTHS:
            raise ConfigurationError(
                f"unsupported AXI data width {self.axi_data_width} (expected one of {AXI_DATA_WIDTHS})"
            )
        if not math.isfinite(self.preload_timeout) or self.preload_timeout <= 0:
            raise ConfigurationError(f"preload timeout must be positive, got {self.preload_timeout}")
        if self.preload_timeout_policy not in PRELOAD_POLICIES:
            raise ConfigurationError(
                f"unknown preload timeout policy '{self.preload_timeout_policy}' "
                f"(expected one of {PRELOAD_POLICIES})"
            )
        if self.poll_interval < 0:
            raise ConfigurationError(f"poll interval must not be negative, got {self.poll_interval}")
        if self.max_polls < 1:
            raise ConfigurationError(f"max polls must be at least 1, got {self.max_polls}")
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "EngineConfig":
        """
        Build a configuration from STIM_* environment variables.

        Recognised: STIM_AXI_WIDTH, STIM_PRELOAD_TIMEOUT, STIM_PRELOAD_TIMEOUT_UNIT,
        STIM_PRELOAD_POLICY, STIM_POLL_INTERVAL, STIM_MAX_POLLS, STIM_STRICT.
        Keyword overrides win over the environment.
        """
        env = os.environ if environ is None else environ
        values = {}

        def get(name):
            return env.get(ENV_PREFIX + name)

        try:
            if get("AXI_WIDTH") is not None:
                values["axi_data_width"] = int(get("AXI_WIDTH"))
            if get("PRELOAD_TIMEOUT") is not None:
                values["preload_timeout"] = float(get("PRELOAD_TIMEOUT"))
            if get("POLL_INTERVAL") is not None:
                values["poll_interval"] = int(get("POLL_INTERVAL"))
            if get("MAX_POLLS") is not None:
                values["max_polls"] = int(get("MAX_POLLS"))
        except ValueError as e:
            raise ConfigurationError(f"bad {ENV_PREFIX}* setting: {e}") from e

        if get("PRELOAD_TIMEOUT_UNIT") is not None:
            values["preload_timeout_unit"] = get("PRELOAD_TIMEOUT_UNIT")
        if get("PRELOAD_POLICY") is not None:
            values["preload_timeout_policy"] = get("PRELOAD_POLICY")
        if get("STRICT") is not None:
            values["strict"] = get("STRICT").strip().lower() in ("1", "true", "yes", "on")

        values.update(overrides)
        return cls(**values).validate()
