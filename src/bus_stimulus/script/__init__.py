#
# Bus Stimulus Engine - Script Front End
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Line source, tokenizer, value parser, classifier and grammar.
#

from bus_stimulus.script.source import ScriptSource
from bus_stimulus.script.tokenizer import tokenize
from bus_stimulus.script.values import parse_unsigned
from bus_stimulus.script.classifier import Command, classify
from bus_stimulus.script.grammar import CommandResolver

__all__ = [
    'ScriptSource',
    'tokenize',
    'parse_unsigned',
    'Command',
    'classify',
    'CommandResolver',
]
