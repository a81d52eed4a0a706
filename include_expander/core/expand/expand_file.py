from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional, Sequence, TextIO, Union

import typer

from include_expander.core.errors import (
    ExpandLoadError,
    IncludeError,
    cyclic_include,
    input_unreadable,
    unknown_include,
)
from include_expander.core.model import SourceLocation
from include_expander.core.resolve.resolve_include import resolve_include
from include_expander.core.scan.classify_line import classify_line


PathLike = Union[str, Path]
Report = Callable[[str], None]
OnInclude = Callable[[SourceLocation, Path], None]

# Undecodable bytes pass through unchanged instead of aborting the splice.
SOURCE_ENCODING = "utf-8"
SOURCE_ERRORS = "surrogateescape"
# Lines end at "\n" only; a stray "\r" inside a line does not shift line numbers.
SOURCE_NEWLINE = "\n"


def expand(
    file: PathLike,
    output: TextIO,
    search_paths: Sequence[PathLike],
    referencing_file: PathLike = "",
    referencing_line: int = 0,
    *,
    report: Optional[Report] = None,
    on_include: Optional[OnInclude] = None,
) -> bool:
    """Expand `file` into `output`, recursively splicing its includes.

    Returns True only if the whole file (and everything it includes) was
    written. On failure a single diagnostic is passed to `report` (stdout by
    default) and whatever was already written stays in `output`.

    An unreadable file with no referencing context (the top-level input)
    fails without a diagnostic; the driver reports that case itself.
    """
    report = report or typer.echo
    dirs = tuple(Path(d) for d in search_paths)
    referencing = SourceLocation(file=str(referencing_file), line=referencing_line)

    try:
        _expand_file(Path(file), output, dirs, referencing, (), on_include)
    except IncludeError as e:
        report(str(e))
        return False
    except ExpandLoadError:
        return False
    return True


def _expand_file(
    file: Path,
    output: TextIO,
    search_paths: tuple[Path, ...],
    referencing: SourceLocation,
    chain: tuple[Path, ...],
    on_include: Optional[OnInclude],
) -> None:
    try:
        f = open(file, "r", encoding=SOURCE_ENCODING, errors=SOURCE_ERRORS, newline=SOURCE_NEWLINE)
    except OSError as e:
        if referencing.is_top():
            raise input_unreadable(str(file), e) from e
        raise unknown_include(
            file.name, referencing.file, referencing.line, code="E_UNREADABLE_INCLUDE"
        ) from e

    with f:
        chain = chain + (file.resolve(),)
        for line_number, raw in enumerate(f, start=1):
            directive = classify_line(raw)
            if not directive.is_include:
                output.write(directive.line + "\n")
                continue

            target = resolve_include(directive, file.parent, search_paths)
            if target is None:
                raise unknown_include(directive.name, str(file), line_number)
            if target.resolve() in chain:
                raise cyclic_include(directive.name, str(file), line_number)

            here = SourceLocation(file=str(file), line=line_number)
            if on_include is not None:
                on_include(here, target)
            _expand_file(target, output, search_paths, here, chain, on_include)
