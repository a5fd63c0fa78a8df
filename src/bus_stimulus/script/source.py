#
# Bus Stimulus Engine - Script Line Source
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Reads a stimulus script and yields comment-stripped, non-empty lines.
#

import io
from pathlib import Path
from typing import Iterator, Optional, TextIO, Tuple, Union

from bus_stimulus.common.protocol import COMMENT_MARKER
from bus_stimulus.errors import ScriptResourceError


ScriptInput = Union[str, Path, TextIO]

# Characters trimmed from both ends of a line after comment removal.
TRIM_CHARS = " \t\r\n"


def strip_line(raw: str) -> str:
    """Drop everything from the first comment marker and trim whitespace."""
    idx = raw.find(COMMENT_MARKER)
    if idx >= 0:
        raw = raw[:idx]
    return raw.strip(TRIM_CHARS)


class ScriptSource:
    """
    Line source over a script file or text stream.

    Paths are opened lazily on the first read. Streams are read as given and
    are not closed by the source.

    Attributes:
        line_number: 1-based number of the last physical line read
    """

    def __init__(self, script: ScriptInput):
        self.script = script
        self.line_number = 0
        self._stream: Optional[TextIO] = None
        self._owns_stream = False

    @classmethod
    def from_text(cls, text: str) -> "ScriptSource":
        """Build a source over an in-memory script."""
        return cls(io.StringIO(text))

    @property
    def name(self) -> str:
        """Script name for diagnostics."""
        if isinstance(self.script, (str, Path)):
            return str(self.script)
        return getattr(self.script, "name", "<stream>")

    def open(self) -> None:
        """Open the underlying resource, raising ScriptResourceError on failure."""
        if self._stream is not None:
            return

        if isinstance(self.script, (str, Path)):
            try:
                self._stream = open(self.script, "r", encoding="utf-8")
            except OSError as e:
                raise ScriptResourceError(f"cannot open script {self.script}: {e.strerror or e}") from e
            self._owns_stream = True
        else:
            self._stream = self.script

    def close(self) -> None:
        if self._stream is not None and self._owns_stream:
            self._stream.close()
        self._stream = None
        self._owns_stream = False

    def next_line(self) -> Optional[str]:
        """
        Return the next line with content, or None at end of input.

        Blank and comment-only lines are skipped but still counted.
        """
        self.open()

        while True:
            try:
                raw = self._stream.readline()
            except (OSError, UnicodeDecodeError) as e:
                raise ScriptResourceError(f"cannot read script {self.name}: {e}") from e
            if not raw:
                return None
            self.line_number += 1
            text = strip_line(raw)
            if text:
                return text

    def __iter__(self) -> Iterator[Tuple[int, str]]:
        try:
            while True:
                text = self.next_line()
                if text is None:
                    return
                yield self.line_number, text
        finally:
            self.close()

    def __enter__(self) -> "ScriptSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
