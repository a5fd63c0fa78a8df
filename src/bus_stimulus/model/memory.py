#
# Bus Stimulus Engine - Behavioural Memory Model
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Simulator-free stand-ins for the transactor, clock and preload capabilities.
# Used by the host CLI to dry-run scripts and by the unit tests.
#
# Model simplifications:
#   - Little-endian, byte-addressed; a narrow write stores the low-order
#     bytes of the data word at the transfer address (no byte-lane steering).
#   - Every transfer completes after a fixed number of model clock cycles.
#

import asyncio
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from bus_stimulus.common.protocol import (
    AHBBurst, AHBSize, AXIBurst,
    AHB_WRAPPING, ahb_size_bytes, beat_address,
)
from bus_stimulus.engine.dispatch import BusTransactor


log = logging.getLogger("cocotb.bus_stimulus.model")


# =============================================================================
# Storage
# =============================================================================

class MemoryStore:
    """Sparse byte-addressed memory. Unwritten bytes read as `fill`."""

    def __init__(self, fill: int = 0x00):
        self.fill = fill & 0xFF
        self._bytes: Dict[int, int] = {}

    def write(self, address: int, value: int, nbytes: int) -> None:
        for i in range(nbytes):
            self._bytes[(address + i) & 0xFFFFFFFF] = (value >> (8 * i)) & 0xFF

    def read(self, address: int, nbytes: int) -> int:
        value = 0
        for i in range(nbytes):
            value |= self._bytes.get((address + i) & 0xFFFFFFFF, self.fill) << (8 * i)
        return value

    def __len__(self) -> int:
        return len(self._bytes)


# =============================================================================
# Clock
# =============================================================================

class ModelClock:
    """Clock capability that counts cycles and yields to the event loop."""

    def __init__(self):
        self.cycles = 0

    async def wait_cycles(self, n: int) -> None:
        for _ in range(n):
            self.cycles += 1
            await asyncio.sleep(0)


# =============================================================================
# Transactor
# =============================================================================

class ModelTransactor(BusTransactor):
    """
    Transactor backed by a MemoryStore.

    Args:
        memory: Backing store (may be shared between transactors)
        data_width: Bus data width in bits (32 for AHB, 64/128 for AXI)
        clock: Optional ModelClock advanced per beat
        latency: Cycles per beat
    """

    def __init__(self, memory: MemoryStore, data_width: int,
                 clock: Optional[ModelClock] = None, latency: int = 1):
        self.memory = memory
        self.data_width = data_width
        self.clock = clock
        self.latency = latency
        self.transfers = 0

    def _geometry(self, burst, size_or_len, beats: int):
        """Return (beat_bytes, wrapping, fixed) for a transfer."""
        if isinstance(burst, AHBBurst):
            nbytes = ahb_size_bytes(size_or_len if size_or_len is not None else AHBSize.WORD)
            return nbytes, burst in AHB_WRAPPING, False
        return self.data_width // 8, burst == AXIBurst.WRAP, burst == AXIBurst.FIXED

    async def _tick(self, beats: int) -> None:
        self.transfers += 1
        if self.clock is not None:
            await self.clock.wait_cycles(beats * self.latency)
        else:
            await asyncio.sleep(0)

    async def write(self, address, data, burst, size_or_len):
        if isinstance(burst, AXIBurst):
            # AXI WRITE drives the same word on every beat
            await self.write_burst(address, [data] * (size_or_len + 1), burst, size_or_len)
            return
        nbytes, _, _ = self._geometry(burst, size_or_len, 1)
        self.memory.write(address, data, nbytes)
        await self._tick(1)

    async def read(self, address, burst, size_or_len):
        nbytes, _, _ = self._geometry(burst, size_or_len, 1)
        await self._tick(1)
        return self.memory.read(address, nbytes)

    async def write_burst(self, address, beats: Sequence[int], burst, size_or_len):
        nbytes, wrapping, fixed = self._geometry(burst, size_or_len, len(beats))
        for i, value in enumerate(beats):
            addr = beat_address(address, i, nbytes, len(beats), wrapping=wrapping, fixed=fixed)
            self.memory.write(addr, value, nbytes)
        await self._tick(len(beats))

    async def read_burst(self, address, burst, length, size=None) -> List[int]:
        beats = length + 1
        nbytes, wrapping, fixed = self._geometry(burst, size, beats)
        await self._tick(beats)
        return [
            self.memory.read(beat_address(address, i, nbytes, beats, wrapping=wrapping, fixed=fixed), nbytes)
            for i in range(beats)
        ]


# =============================================================================
# Preload
# =============================================================================

_HEX_COMMENT = re.compile(r"//.*$")


def parse_hex_image(text: str) -> Dict[int, int]:
    """
    Parse $readmemh-style text into {word_index: value}.

    Supports whitespace-separated hex words, '@<hex>' address directives,
    '//' comments and '_' separators.
    """
    words: Dict[int, int] = {}
    index = 0
    for lineno, raw in enumerate(text.splitlines(), 1):
        line = _HEX_COMMENT.sub("", raw)
        for item in line.split():
            try:
                if item.startswith("@"):
                    index = int(item[1:], 16)
                    continue
                words[index] = int(item.replace("_", ""), 16)
            except ValueError:
                raise ValueError(f"line {lineno}: bad hex item '{item}'") from None
            index += 1
    return words


class ModelCompletion:
    """One-shot completion handle over an asyncio task."""

    def __init__(self, task: "asyncio.Task", time_scale: float):
        self.task = task
        self.time_scale = time_scale

    def done(self) -> bool:
        return self.task.done()

    async def wait(self, timeout: float) -> bool:
        try:
            await asyncio.wait_for(asyncio.shield(self.task), timeout * self.time_scale)
        except asyncio.TimeoutError:
            return False
        return True


class ModelPreloadPort:
    """
    Preload capability that loads hex images into memory stores.

    Args:
        memories: Hierarchical path -> MemoryStore. With `default` set,
            unknown paths load into it instead of failing.
        default: Store used for unlisted paths
        word_bytes: Bytes per image word
        base_dir: Directory relative data file paths are resolved against
        time_scale: Seconds per timeout unit (1e-9 treats the timeout as ns)
        load_delay: Seconds each load takes (models a slow loader)
    """

    def __init__(self, memories: Optional[Dict[str, MemoryStore]] = None,
                 default: Optional[MemoryStore] = None, word_bytes: int = 4,
                 base_dir: Optional[Path] = None, time_scale: float = 1e-9,
                 load_delay: float = 0.0):
        self.memories = dict(memories or {})
        self.default = default
        self.word_bytes = word_bytes
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.time_scale = time_scale
        self.load_delay = load_delay
        self.loaded: List[str] = []

    def _target(self, path: str) -> Optional[MemoryStore]:
        return self.memories.get(path, self.default)

    async def _load(self, path: str, data_file: str) -> None:
        if self.load_delay:
            await asyncio.sleep(self.load_delay)

        target = self._target(path)
        if target is None:
            log.error("Preload target %s not found", path)
            return

        file_path = Path(data_file)
        if self.base_dir is not None and not file_path.is_absolute():
            file_path = self.base_dir / file_path
        try:
            words = parse_hex_image(file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.error("Preload of %s from %s failed: %s", path, file_path, e)
            return

        for index, value in words.items():
            target.write(index * self.word_bytes, value, self.word_bytes)
        self.loaded.append(path)
        log.info("Preloaded %d words into %s", len(words), path)

    def request_preload(self, path: str, data_file: str) -> ModelCompletion:
        task = asyncio.ensure_future(self._load(path, data_file))
        return ModelCompletion(task, self.time_scale)
