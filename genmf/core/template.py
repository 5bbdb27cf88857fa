"""
Template engine — line-oriented ``###<<<TOKEN>>>###`` substitution.

Tokens must sit entirely on one line.  A line is rewritten only when
every token on it has a replacement; otherwise it passes through
unchanged, so a template can carry markers meant for a later pass.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator, List, Mapping

from genmf.errors import TemplateError

logger = logging.getLogger(__name__)

TOKEN_RE = re.compile(r"###\s*<<<([^<>\s]*)>>>\s*###")


def find_tokens(line: str) -> List[str]:
    """Token names on *line*, in order of appearance."""
    return TOKEN_RE.findall(line)


def substitute_line(line: str, replacements: Mapping[str, str]) -> str:
    """Replace every marker on *line*, or return *line* untouched."""
    names = find_tokens(line)
    if not names:
        return line
    if any(name not in replacements for name in names):
        return line
    # Replacement values are literal text (Makefile continuations carry
    # backslashes), so a function is used instead of a template string.
    return TOKEN_RE.sub(lambda m: replacements[m.group(1)], line)


def render_lines(
    lines: Iterable[str],
    replacements: Mapping[str, str],
) -> Iterator[str]:
    for line in lines:
        yield substitute_line(line, replacements) + "\n"


def _strip_eol(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def render_template(template: Path, replacements: Mapping[str, str]) -> str:
    """
    Render *template* with *replacements*.

    Every output line ends in exactly one ``\\n``; only LF ends a line.
    Bytes that are not UTF-8 survive as surrogate escapes and are
    written back unchanged by ``write_text_replace``.  Raises
    TemplateError if the template cannot be read.
    """
    logger.debug("template: %s", template)
    logger.debug("replacements: %s", dict(replacements))
    try:
        with open(template, encoding="utf-8", errors="surrogateescape", newline="\n") as fh:
            return "".join(
                render_lines((_strip_eol(line) for line in fh), replacements)
            )
    except OSError as exc:
        raise TemplateError(str(template), exc) from exc
