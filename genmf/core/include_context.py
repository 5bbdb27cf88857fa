"""
Error-context reporter for missing include files.

When a compile inside the preprocessing sub-make fails with

    foo.c:12:10: fatal error: bar.h: No such file or directory

older compilers print nothing else useful.  The offending source line is
reprinted with a caret under the column, unless the compiler already
echoed the ``#include`` line itself right after the diagnostic.  This is
a visual aid: if the source cannot be read, nothing is added.
"""
from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, TextIO

logger = logging.getLogger(__name__)

NO_SUCH_FILE_RE = re.compile(
    r"^(.*):([0-9]+):([0-9]+): fatal error:.*: No such file or directory$"
)
# Also matches the "  12 | #include <bar.h>" echo of newer compilers
INCLUDE_RE = re.compile(r'^\s*(?:[0-9]*\s*\|)?\s*#[ \t]*include\s*[<"](\S+)[">]')


@dataclass(frozen=True)
class MissingInclude:
    file: str
    line: int
    column: int


def parse_missing_include(line: str) -> Optional[MissingInclude]:
    m = NO_SUCH_FILE_RE.match(line)
    if m is None:
        return None
    return MissingInclude(file=m.group(1), line=int(m.group(2)), column=int(m.group(3)))


def read_source_line(path: str, lineno: int) -> Optional[str]:
    """Line *lineno* (1-based) of *path*, or None if unavailable."""
    try:
        with open(Path(path), encoding="utf-8", errors="replace") as fh:
            for count, text in enumerate(fh, start=1):
                if count == lineno:
                    return text.rstrip("\r\n")
    except OSError as exc:
        logger.debug("cannot read %s: %s", path, exc)
    return None


def annotate_missing_includes(
    lines: Iterable[str],
    out: TextIO | None = None,
) -> None:
    """
    Echo every diagnostic line to *out* (default stderr), inserting the
    source line and a caret after each missing-include diagnostic whose
    follower is not already an ``#include`` echo.

    The check only looks one line ahead; diagnostics spread over more
    lines may be annotated at the wrong spot.
    """
    if out is None:
        out = sys.stderr

    pending: Optional[MissingInclude] = None
    for raw in lines:
        line = raw.rstrip("\r\n")
        hit = parse_missing_include(line)
        if hit is not None:
            pending = hit
        else:
            if pending is not None and not INCLUDE_RE.match(line):
                source_line = read_source_line(pending.file, pending.line)
                if source_line is not None:
                    out.write(" " + source_line + "\n")
                    out.write(" " * pending.column + "^\n")
            pending = None
        out.write(line + "\n")
        logger.debug("%s", line)
