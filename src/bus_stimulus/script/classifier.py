#
# Bus Stimulus Engine - Command Classifier
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Maps the leading tokens of a line to a (protocol, operation) pair. Arity is
# checked later by the per-protocol grammar.
#

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from bus_stimulus.common.protocol import (
    Protocol, Operation,
    PROTOCOL_KEYWORDS, OPERATION_KEYWORDS,
    PROTOCOL_NAMES, OPERATION_NAMES,
)
from bus_stimulus.errors import ScriptSyntaxError


# Protocols dispatched on the first token alone.
SINGLE_TOKEN_PROTOCOLS = (Protocol.WAIT, Protocol.PRELOAD)


@dataclass(frozen=True)
class Command:
    """A classified script line."""
    protocol: Protocol
    operation: Optional[Operation]
    tokens: Tuple[str, ...]
    line: Optional[int] = None

    @property
    def args(self) -> Tuple[str, ...]:
        """Tokens after the protocol (and operation, if any) keywords."""
        skip = 1 if self.operation is None else 2
        return self.tokens[skip:]

    @property
    def name(self) -> str:
        """Keyword pair for diagnostics, e.g. 'AHB READ'."""
        proto = PROTOCOL_NAMES[self.protocol]
        if self.operation is None:
            return proto
        return f"{proto} {OPERATION_NAMES[self.operation]}"


def classify(tokens: Sequence[str], line: Optional[int] = None) -> Command:
    """
    Classify a tokenized line.

    Raises:
        ScriptSyntaxError: Empty line, unknown protocol or unknown operation
    """
    if not tokens:
        raise ScriptSyntaxError("empty command", line=line)

    protocol = PROTOCOL_KEYWORDS.get(tokens[0].upper())
    if protocol is None:
        raise ScriptSyntaxError("unrecognized protocol", line=line, token=tokens[0])

    if protocol in SINGLE_TOKEN_PROTOCOLS:
        return Command(protocol, None, tuple(tokens), line)

    if len(tokens) < 2:
        raise ScriptSyntaxError(f"missing operation after {tokens[0]}", line=line)

    operation = OPERATION_KEYWORDS.get(tokens[1].upper())
    if operation is None:
        raise ScriptSyntaxError("unrecognized operation", line=line, token=tokens[1])

    return Command(protocol, operation, tuple(tokens), line)
