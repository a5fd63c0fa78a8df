#
# Bus Stimulus Engine - Error Taxonomy
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Resource and configuration errors are fatal to a run. Syntax errors skip
# the offending line. Preload timeouts are recorded and, depending on the
# configured policy, either tolerated or raised.
#

from typing import Optional


class StimulusError(Exception):
    """Base class for all stimulus engine errors."""


class ConfigurationError(StimulusError, ValueError):
    """Unsupported engine configuration (fatal at construction)."""


class ScriptResourceError(StimulusError, OSError):
    """The script could not be opened or read."""


class ScriptSyntaxError(StimulusError, ValueError):
    """
    A script line could not be turned into a command.

    Attributes:
        line: 1-based script line number (None when parsing outside a script)
        token: Offending token, if one can be named
    """

    def __init__(self, message: str, line: Optional[int] = None, token: Optional[str] = None):
        self.reason = message
        self.line = line
        self.token = token
        super().__init__(self._format())

    def _format(self) -> str:
        text = self.reason
        if self.token is not None:
            text = f"{text} ('{self.token}')"
        if self.line is not None:
            text = f"line {self.line}: {text}"
        return text

    def at_line(self, line: int) -> "ScriptSyntaxError":
        """Attach a line number if the raiser did not know it."""
        if self.line is None:
            self.line = line
            self.args = (self._format(),)
        return self


class ValueParseError(ScriptSyntaxError):
    """Malformed numeric literal or value wider than its field."""


class BeatCountError(ScriptSyntaxError):
    """Expected-data beat count does not match the burst length."""


class TransactorMissingError(ScriptSyntaxError):
    """Script uses a protocol with no transactor attached."""


class PreloadTimeoutError(StimulusError, TimeoutError):
    """A preload did not complete within the configured bound."""
