#
# Bus Stimulus Engine - Preload Coordinator
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Serialises memory preload requests: at most one is in flight at a time.
#

"""
Preload coordination.

A preload is handed to the simulation environment and runs in the background
while the script continues. A second request arriving before the first has
completed waits for the first one's completion handle, bounded by a timeout.

    IDLE --request--> IN_PROGRESS
    IN_PROGRESS --completion--> IDLE
    IN_PROGRESS --request--> wait(completion | timeout) --> IN_PROGRESS

The preload port capability is:

    port.request_preload(target_path, data_file) -> handle
    handle.done() -> bool
    await handle.wait(timeout) -> bool     # False on timeout
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from bus_stimulus.common.transaction import PreloadRequest
from bus_stimulus.engine.config import POLICY_LAST_WINS, POLICY_ABORT, PRELOAD_POLICIES
from bus_stimulus.engine.results import TestResults
from bus_stimulus.errors import ConfigurationError, PreloadTimeoutError


log = logging.getLogger("cocotb.bus_stimulus.preload")


class PreloadPhase(Enum):
    IDLE        = "idle"
    IN_PROGRESS = "in_progress"


@dataclass
class PreloadState:
    """Owned state of the coordinator."""
    in_progress: bool = False
    completion: Optional[object] = None
    last_request: Optional[PreloadRequest] = None

    @property
    def phase(self) -> PreloadPhase:
        return PreloadPhase.IN_PROGRESS if self.in_progress else PreloadPhase.IDLE


class PreloadCoordinator:
    """
    Serialises preload requests against a preload port.

    Args:
        port: Preload capability (see module docstring)
        timeout: Bound on waiting for an outstanding preload
        results: Statistics receiving timeout diagnostics
        policy: 'last-wins' (record and continue) or 'abort' (raise)
        state: Initial state, normally left as default
    """

    def __init__(self, port, timeout: float, results: Optional[TestResults] = None,
                 policy: str = POLICY_LAST_WINS, state: Optional[PreloadState] = None):
        if policy not in PRELOAD_POLICIES:
            raise ConfigurationError(f"unknown preload timeout policy '{policy}'")
        self.port = port
        self.timeout = timeout
        self.results = results if results is not None else TestResults()
        self.policy = policy
        self.state = state if state is not None else PreloadState()

    @property
    def phase(self) -> PreloadPhase:
        self.poll()
        return self.state.phase

    def poll(self) -> None:
        """Move to IDLE if the outstanding preload has completed."""
        state = self.state
        if state.in_progress and state.completion is not None and state.completion.done():
            log.debug("Preload of %s complete", state.last_request.target_path)
            state.in_progress = False
            state.completion = None

    async def _wait_outstanding(self, reason: str) -> bool:
        """Wait for the in-flight preload. Returns False on timeout."""
        self.poll()
        state = self.state
        if not state.in_progress:
            return True

        prev = state.last_request
        log.info("Waiting for preload of %s (%s)", prev.target_path, reason)
        completed = await state.completion.wait(self.timeout)
        if completed:
            self.poll()
            # A handle reporting completion is final even if done() lags
            state.in_progress = False
            state.completion = None
            return True

        message = f"preload of {prev.target_path} from {prev.data_file} did not complete within {self.timeout}"
        if prev.line is not None:
            message = f"line {prev.line}: {message}"
        self.results.record_timeout()
        log.error("Timeout: %s", message)

        if self.policy == POLICY_ABORT:
            raise PreloadTimeoutError(message)
        return False

    async def request(self, req: PreloadRequest) -> bool:
        """
        Issue a preload, waiting first for any outstanding one.

        On timeout under the last-wins policy the new request is issued anyway
        and the outstanding preload is not cancelled.

        Returns:
            False if the wait for a previous preload timed out
        """
        completed = await self._wait_outstanding(f"new request for {req.target_path}")

        state = self.state
        state.last_request = req
        state.completion = self.port.request_preload(req.target_path, req.data_file)
        state.in_progress = True
        log.info("Preload %s <- %s", req.target_path, req.data_file)
        return completed

    async def settle(self) -> bool:
        """Wait for any outstanding preload at end of script."""
        return await self._wait_outstanding("end of script")
