#
# Bus Stimulus Engine - Tokenizer
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

import re
from typing import List

from bus_stimulus.common.protocol import KW_PRELOAD


# Last maximal whitespace run: the file path that follows it holds no whitespace.
_LAST_GAP = re.compile(r"\s+(?=\S+$)")


def tokenize(line: str) -> List[str]:
    """
    Split a script line into tokens.

    Lines starting with the PRELOAD keyword (exact case) are split into at most
    three tokens: keyword, hierarchical path and data file, separated at the
    last whitespace run of the remainder. Every other line is split on
    whitespace.
    """
    parts = line.split(None, 1)
    if not parts:
        return []

    if parts[0] != KW_PRELOAD:
        return line.split()

    if len(parts) == 1:
        return [KW_PRELOAD]

    remainder = parts[1].strip()
    gap = _LAST_GAP.search(remainder)
    if gap is None:
        # Malformed: left for the PRELOAD arity check to reject
        return [KW_PRELOAD, remainder]

    return [KW_PRELOAD, remainder[:gap.start()], remainder[gap.end():]]
