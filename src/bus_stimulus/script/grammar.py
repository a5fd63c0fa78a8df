#
# Bus Stimulus Engine - Command Grammar
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Resolves classified commands into actions. Optional trailing parameters
# share token positions with expected data, so they are recognised by content
# using the ordered rule tables below rather than by position.
#

"""
Parameter disambiguation and command resolution.

Optional parameters are described by ordered, named rules. Two consumers
apply them:

- consume_positional(): every trailing token must match the rule at its
  position (used for WRITE, where nothing follows the optional parameters).
- consume_optional(): rules are tried in order against the head token; the
  first token no rule accepts ends the scan and everything left over is the
  remainder (expected data or burst data).

Rule order is the precedence. For example, with AHB_READ_RULES:

    AHB READ 0x1000 0xDEAD          -> expected=0xDEAD
    AHB READ 0x1000 INCR4 WORD 0x1  -> burst=INCR4 size=WORD expected=0x1
    AHB READ 0x1000 HALFWORD        -> size=HALFWORD

and with AXI_READ_RULES:

    AXI READ 0x2000 WRAP 1 0xAAAA 0xBBBB  -> burst=WRAP len=1, two beats
    AXI READ 0x2000 3                     -> len=3
"""

import string
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from bus_stimulus.common.protocol import (
    Protocol, Operation, AXIBurst,
    ADDR_WIDTH, AHB_DATA_WIDTH, AXI_DATA_WIDTHS,
    AXI_MAX_LENGTH, AXI_WRAP_BEATS, AXI_FIXED_MAX_BEATS,
    AHB_BURST_KEYWORDS, AHB_SIZE_KEYWORDS, AXI_BURST_KEYWORDS, AHB_BURST_NAMES,
    DEFAULT_AHB_BURST, DEFAULT_AHB_BURST_OP, DEFAULT_AHB_SIZE,
    DEFAULT_AXI_BURST, DEFAULT_AXI_LENGTH,
    ahb_burst_beats,
)
from bus_stimulus.common.transaction import (
    Action, Transaction, PollRequest, WaitRequest, PreloadRequest,
)
from bus_stimulus.engine.config import DEFAULT_MAX_POLLS
from bus_stimulus.errors import ScriptSyntaxError, BeatCountError, ConfigurationError
from bus_stimulus.script.classifier import Command
from bus_stimulus.script.values import parse_unsigned, parse_count




# =============================================================================
# Disambiguation Rules
# =============================================================================

def is_ahb_burst(token: str) -> bool:
    return token.upper() in AHB_BURST_KEYWORDS


def is_ahb_size(token: str) -> bool:
    return token.upper() in AHB_SIZE_KEYWORDS


def is_axi_burst(token: str) -> bool:
    return token.upper() in AXI_BURST_KEYWORDS


def looks_like_length(token: str) -> bool:
    """AXI length: at most three characters, starting with a decimal digit."""
    return 0 < len(token) <= 3 and token[0] in string.digits


@dataclass(frozen=True)
class Rule:
    """A named recogniser for one optional parameter."""
    name: str
    field: str
    matches: Callable[[str], bool]


AHB_BURST_RULE  = Rule("burst-keyword", "burst", is_ahb_burst)
AHB_SIZE_RULE   = Rule("size-keyword", "size", is_ahb_size)
AXI_BURST_RULE  = Rule("burst-keyword", "burst", is_axi_burst)
AXI_LENGTH_RULE = Rule("length-token", "length", looks_like_length)

AHB_WRITE_RULES = (AHB_BURST_RULE, AHB_SIZE_RULE)
AHB_READ_RULES  = (AHB_BURST_RULE, AHB_SIZE_RULE)
AXI_WRITE_RULES = (AXI_BURST_RULE, AXI_LENGTH_RULE)
AXI_READ_RULES  = (AXI_BURST_RULE, AXI_LENGTH_RULE)

# BURST_WRITE/BURST_READ: optional parameters, then the beat data
AHB_BURST_RULES = (AHB_BURST_RULE, AHB_SIZE_RULE)
AXI_BURST_RULES = (AXI_BURST_RULE, AXI_LENGTH_RULE)


@dataclass
class Disambiguation:
    """Outcome of applying a rule table to trailing tokens."""
    fields: Dict[str, str] = field(default_factory=dict)
    remainder: List[str] = field(default_factory=list)
    applied: List[str] = field(default_factory=list)


def consume_optional(tokens: Sequence[str], rules: Sequence[Rule]) -> Disambiguation:
    """
    Apply rules in order, each consuming the head token if it matches.

    Rules that do not match are skipped; the scan continues with the next rule
    against the same head token. Tokens left once the rules are exhausted form
    the remainder.
    """
    result = Disambiguation()
    pos = 0
    for rule in rules:
        if pos < len(tokens) and rule.matches(tokens[pos]):
            result.fields[rule.field] = tokens[pos]
            result.applied.append(rule.name)
            pos += 1
    result.remainder = list(tokens[pos:])
    return result


def consume_positional(tokens: Sequence[str], rules: Sequence[Rule]) -> Disambiguation:
    """
    Match trailing tokens one-to-one against rules in fixed order.

    Raises:
        ScriptSyntaxError: A token does not match its rule, or tokens remain
    """
    result = Disambiguation()
    for rule, token in zip(rules, tokens):
        if not rule.matches(token):
            raise ScriptSyntaxError(f"expected {rule.name}", token=token)
        result.fields[rule.field] = token
        result.applied.append(rule.name)
    if len(tokens) > len(rules):
        raise ScriptSyntaxError("too many tokens", token=tokens[len(rules)])
    return result


# =============================================================================
# Command Resolution
# =============================================================================

# len is beats - 1; default 0 (one beat)
AXI_LEN_NOTE = " (WRAP needs len 1, 3, 7 or 15; FIXED at most len 15)"

USAGE = {
    (Protocol.AHB, Operation.WRITE):       "AHB WRITE <addr> <data> [burst] [size]",
    (Protocol.AHB, Operation.READ):        "AHB READ <addr> [burst] [size] [expected]",
    (Protocol.AHB, Operation.BURST_WRITE): "AHB BURST_WRITE <addr> [burst] [size] <data>...",
    (Protocol.AHB, Operation.BURST_READ):  "AHB BURST_READ <addr> [burst] [size] [expected]...",
    (Protocol.AHB, Operation.POLL):        "AHB POLL <addr> <expected> [mask] [max_polls]",
    (Protocol.AXI, Operation.WRITE):       "AXI WRITE <addr> <data> [burst] [len]" + AXI_LEN_NOTE,
    (Protocol.AXI, Operation.READ):        "AXI READ <addr> [burst] [len] [expected]..." + AXI_LEN_NOTE,
    (Protocol.AXI, Operation.BURST_WRITE): "AXI BURST_WRITE <addr> [burst] [len] <data>..." + AXI_LEN_NOTE,
    (Protocol.AXI, Operation.BURST_READ):  "AXI BURST_READ <addr> [burst] [len] [expected]..." + AXI_LEN_NOTE,
    (Protocol.AXI, Operation.POLL):        "AXI POLL <addr> <expected> [mask] [max_polls]",
    (Protocol.WAIT, None):                 "WAIT [cycles]",
    (Protocol.PRELOAD, None):              "PRELOAD <hier_path> <data_file>",
}


class CommandResolver:
    """
    Turns classified commands into actions for the interpreter.

    Args:
        axi_data_width: AXI data width in bits (64 or 128)
        max_polls: Default read limit for POLL commands
    """

    def __init__(self, axi_data_width: int = 64, max_polls: int = DEFAULT_MAX_POLLS):
        if axi_data_width not in AXI_DATA_WIDTHS:
            raise ConfigurationError(
                f"unsupported AXI data width {axi_data_width} (expected one of {AXI_DATA_WIDTHS})"
            )
        self.axi_data_width = axi_data_width
        self.max_polls = max_polls

        self._handlers = {
            (Protocol.AHB, Operation.WRITE):       self._ahb_write,
            (Protocol.AHB, Operation.READ):        self._ahb_read,
            (Protocol.AHB, Operation.BURST_WRITE): self._ahb_burst_write,
            (Protocol.AHB, Operation.BURST_READ):  self._ahb_burst_read,
            (Protocol.AHB, Operation.POLL):        self._poll,
            (Protocol.AXI, Operation.WRITE):       self._axi_write,
            (Protocol.AXI, Operation.READ):        self._axi_read,
            (Protocol.AXI, Operation.BURST_WRITE): self._axi_burst_write,
            (Protocol.AXI, Operation.BURST_READ):  self._axi_read,
            (Protocol.AXI, Operation.POLL):        self._poll,
            (Protocol.WAIT, None):                 self._wait,
            (Protocol.PRELOAD, None):              self._preload,
        }

    def resolve(self, cmd: Command) -> Action:
        """
        Resolve a command into an action.

        Raises:
            ScriptSyntaxError: Wrong arity, bad keyword or bad literal
        """
        handler = self._handlers[(cmd.protocol, cmd.operation)]
        try:
            return handler(cmd)
        except ScriptSyntaxError as e:
            raise e.at_line(cmd.line)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _require(self, cmd: Command, count: int) -> Tuple[str, ...]:
        args = cmd.args
        if len(args) < count:
            usage = USAGE[(cmd.protocol, cmd.operation)]
            raise ScriptSyntaxError(f"{cmd.name} needs {count} argument(s), usage: {usage}", line=cmd.line)
        return args

    def _data_width(self, protocol: Protocol) -> int:
        return AHB_DATA_WIDTH if protocol == Protocol.AHB else self.axi_data_width

    @staticmethod
    def _address(token: str) -> int:
        return parse_unsigned(token, ADDR_WIDTH)

    @staticmethod
    def _axi_length(token: Optional[str]) -> int:
        if token is None:
            return DEFAULT_AXI_LENGTH
        return parse_count(token, "burst length", AXI_MAX_LENGTH)

    def _check_axi_geometry(self, cmd: Command, burst: AXIBurst, length: int) -> None:
        beats = length + 1
        usage = USAGE[(cmd.protocol, cmd.operation)]
        if burst == AXIBurst.WRAP and beats not in AXI_WRAP_BEATS:
            raise ScriptSyntaxError(f"WRAP burst must be 2, 4, 8 or 16 beats, got {beats}, usage: {usage}")
        if burst == AXIBurst.FIXED and beats > AXI_FIXED_MAX_BEATS:
            raise ScriptSyntaxError(
                f"FIXED burst must be at most {AXI_FIXED_MAX_BEATS} beats, got {beats}, usage: {usage}"
            )

    # -------------------------------------------------------------------------
    # AHB
    # -------------------------------------------------------------------------

    def _ahb_write(self, cmd: Command) -> Transaction:
        args = self._require(cmd, 2)
        opt = consume_positional(args[2:], AHB_WRITE_RULES)
        return Transaction(
            protocol=Protocol.AHB,
            operation=Operation.WRITE,
            address=self._address(args[0]),
            payload=parse_unsigned(args[1], AHB_DATA_WIDTH),
            burst=AHB_BURST_KEYWORDS.get(opt.fields.get("burst", "").upper(), DEFAULT_AHB_BURST),
            size=AHB_SIZE_KEYWORDS.get(opt.fields.get("size", "").upper(), DEFAULT_AHB_SIZE),
            width=AHB_DATA_WIDTH,
            line=cmd.line,
        )

    def _ahb_read(self, cmd: Command) -> Transaction:
        args = self._require(cmd, 1)
        opt = consume_optional(args[1:], AHB_READ_RULES)
        if len(opt.remainder) > 1:
            raise ScriptSyntaxError("too many tokens", token=opt.remainder[1])

        expected = None
        if opt.remainder:
            expected = parse_unsigned(opt.remainder[0], AHB_DATA_WIDTH)

        return Transaction(
            protocol=Protocol.AHB,
            operation=Operation.READ,
            address=self._address(args[0]),
            burst=AHB_BURST_KEYWORDS.get(opt.fields.get("burst", "").upper(), DEFAULT_AHB_BURST),
            size=AHB_SIZE_KEYWORDS.get(opt.fields.get("size", "").upper(), DEFAULT_AHB_SIZE),
            width=AHB_DATA_WIDTH,
            expected=expected,
            line=cmd.line,
        )

    def _ahb_burst_params(self, opt: Disambiguation):
        burst = AHB_BURST_KEYWORDS.get(opt.fields.get("burst", "").upper(), DEFAULT_AHB_BURST_OP)
        size = AHB_SIZE_KEYWORDS.get(opt.fields.get("size", "").upper(), DEFAULT_AHB_SIZE)
        return burst, size

    def _ahb_burst_write(self, cmd: Command) -> Transaction:
        args = self._require(cmd, 2)
        opt = consume_optional(args[1:], AHB_BURST_RULES)
        burst, size = self._ahb_burst_params(opt)
        if not opt.remainder:
            raise ScriptSyntaxError("missing burst data")

        data = tuple(parse_unsigned(t, AHB_DATA_WIDTH) for t in opt.remainder)
        fixed = ahb_burst_beats(burst)
        if fixed is not None and len(data) != fixed:
            raise BeatCountError(f"beat count mismatch: {AHB_BURST_NAMES[burst]} burst needs {fixed} data beats, got {len(data)}")

        return Transaction(
            protocol=Protocol.AHB,
            operation=Operation.BURST_WRITE,
            address=self._address(args[0]),
            burst=burst,
            size=size,
            length=len(data) - 1,
            width=AHB_DATA_WIDTH,
            payload=data,
            line=cmd.line,
        )

    def _ahb_burst_read(self, cmd: Command) -> Transaction:
        args = self._require(cmd, 1)
        opt = consume_optional(args[1:], AHB_BURST_RULES)
        burst, size = self._ahb_burst_params(opt)
        expected = tuple(parse_unsigned(t, AHB_DATA_WIDTH) for t in opt.remainder)

        beats = ahb_burst_beats(burst)
        if beats is None:
            beats = max(len(expected), 1)

        arity_error = None
        if expected and len(expected) != beats:
            arity_error = f"beat count mismatch: {beats} beats read, {len(expected)} expected values given"

        return Transaction(
            protocol=Protocol.AHB,
            operation=Operation.BURST_READ,
            address=self._address(args[0]),
            burst=burst,
            size=size,
            length=beats - 1,
            width=AHB_DATA_WIDTH,
            expected=(expected or None) if arity_error is None else None,
            line=cmd.line,
            arity_error=arity_error,
        )

    # -------------------------------------------------------------------------
    # AXI
    # -------------------------------------------------------------------------

    def _axi_write(self, cmd: Command) -> Transaction:
        args = self._require(cmd, 2)
        opt = consume_positional(args[2:], AXI_WRITE_RULES)
        burst = AXI_BURST_KEYWORDS.get(opt.fields.get("burst", "").upper(), DEFAULT_AXI_BURST)
        length = self._axi_length(opt.fields.get("length"))
        self._check_axi_geometry(cmd, burst, length)

        return Transaction(
            protocol=Protocol.AXI,
            operation=Operation.WRITE,
            address=self._address(args[0]),
            payload=parse_unsigned(args[1], self.axi_data_width),
            burst=burst,
            length=length,
            width=self.axi_data_width,
            line=cmd.line,
        )

    def _axi_read(self, cmd: Command) -> Transaction:
        args = self._require(cmd, 1)
        rules = AXI_BURST_RULES if cmd.operation == Operation.BURST_READ else AXI_READ_RULES
        opt = consume_optional(args[1:], rules)
        burst = AXI_BURST_KEYWORDS.get(opt.fields.get("burst", "").upper(), DEFAULT_AXI_BURST)
        length = self._axi_length(opt.fields.get("length"))
        self._check_axi_geometry(cmd, burst, length)
        expected = tuple(parse_unsigned(t, self.axi_data_width) for t in opt.remainder)

        arity_error = None
        if expected and len(expected) != length + 1:
            arity_error = (
                f"beat count mismatch: len={length} reads {length + 1} beats, "
                f"{len(expected)} expected values given"
            )

        return Transaction(
            protocol=Protocol.AXI,
            operation=cmd.operation,
            address=self._address(args[0]),
            burst=burst,
            length=length,
            width=self.axi_data_width,
            expected=(expected or None) if arity_error is None else None,
            line=cmd.line,
            arity_error=arity_error,
        )

    def _axi_burst_write(self, cmd: Command) -> Transaction:
        args = self._require(cmd, 2)
        opt = consume_optional(args[1:], AXI_BURST_RULES)
        burst = AXI_BURST_KEYWORDS.get(opt.fields.get("burst", "").upper(), DEFAULT_AXI_BURST)
        if not opt.remainder:
            raise ScriptSyntaxError("missing burst data")

        data = tuple(parse_unsigned(t, self.axi_data_width) for t in opt.remainder)
        if "length" in opt.fields:
            length = self._axi_length(opt.fields["length"])
            if len(data) != length + 1:
                raise BeatCountError(
                    f"beat count mismatch: len={length} writes {length + 1} beats, {len(data)} data values given"
                )
        else:
            length = len(data) - 1
            if length > AXI_MAX_LENGTH:
                raise ScriptSyntaxError(f"burst exceeds {AXI_MAX_LENGTH + 1} beats")
        self._check_axi_geometry(cmd, burst, length)

        return Transaction(
            protocol=Protocol.AXI,
            operation=Operation.BURST_WRITE,
            address=self._address(args[0]),
            burst=burst,
            length=length,
            width=self.axi_data_width,
            payload=data,
            line=cmd.line,
        )

    # -------------------------------------------------------------------------
    # Shared
    # -------------------------------------------------------------------------

    def _poll(self, cmd: Command) -> PollRequest:
        args = self._require(cmd, 2)
        if len(args) > 4:
            raise ScriptSyntaxError("too many tokens", token=args[4])

        width = self._data_width(cmd.protocol)
        mask = (1 << width) - 1
        if len(args) > 2:
            mask = parse_unsigned(args[2], width)
        max_polls = self.max_polls
        if len(args) > 3:
            max_polls = parse_count(args[3], "poll limit")
            if max_polls == 0:
                raise ScriptSyntaxError("poll limit must be at least 1", token=args[3])

        return PollRequest(
            protocol=cmd.protocol,
            address=self._address(args[0]),
            expected=parse_unsigned(args[1], width),
            mask=mask,
            max_polls=max_polls,
            width=width,
            line=cmd.line,
        )

    def _wait(self, cmd: Command) -> WaitRequest:
        args = cmd.args
        if len(args) > 1:
            raise ScriptSyntaxError("too many tokens", token=args[1])
        cycles = parse_count(args[0], "cycle count") if args else 1
        return WaitRequest(cycles=cycles, line=cmd.line)

    def _preload(self, cmd: Command) -> PreloadRequest:
        args = cmd.args
        if len(args) != 2:
            raise ScriptSyntaxError(f"wrong number of arguments, usage: {USAGE[(Protocol.PRELOAD, None)]}",
                                    token=" ".join(args) or None)
        return PreloadRequest(target_path=args[0], data_file=args[1], line=cmd.line)
