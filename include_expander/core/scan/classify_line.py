from __future__ import annotations

import re
from typing import Iterable, Iterator

from include_expander.core.model import Directive


# Directives must sit alone on one line; the name token cannot span lines.
LOCAL_INCLUDE = re.compile(r'\s*#\s*include\s*"([^"]*)"\s*')
GLOBAL_INCLUDE = re.compile(r"\s*#\s*include\s*<([^>]*)>\s*")


def strip_eol(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith(("\n", "\r")):
        return line[:-1]
    return line


def classify_line(line: str) -> Directive:
    """Classify one line as a local include, a global include or plain text.

    A trailing line terminator is ignored for matching; text lines are
    returned verbatim (terminator stripped, nothing else touched).
    """
    body = strip_eol(line)

    m = LOCAL_INCLUDE.fullmatch(body)
    if m:
        return Directive.local(m.group(1), body)

    m = GLOBAL_INCLUDE.fullmatch(body)
    if m:
        return Directive.global_(m.group(1), body)

    return Directive.text(body)


def iter_directives(lines: Iterable[str]) -> Iterator[tuple[int, Directive]]:
    """Yield (1-based line number, Directive) for every line."""
    for line_number, line in enumerate(lines, start=1):
        yield line_number, classify_line(line)
