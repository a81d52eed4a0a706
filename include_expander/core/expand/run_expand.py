from __future__ import annotations

import errno
import os
import tempfile
from pathlib import Path
from typing import Optional, Sequence

import typer

from include_expander.core.errors import ExpandLoadError, input_unreadable
from include_expander.core.expand.expand_file import (
    SOURCE_ENCODING,
    SOURCE_ERRORS,
    OnInclude,
    PathLike,
    Report,
    expand,
)


def run(
    input_file: PathLike,
    output_file: PathLike,
    search_paths: Sequence[PathLike],
    *,
    atomic: bool = False,
    report: Optional[Report] = None,
    on_include: Optional[OnInclude] = None,
) -> bool:
    """Expand `input_file` into `output_file`.

    By default the output is written as expansion proceeds, so a failure
    leaves a truncated file holding everything spliced before the failing
    directive. With atomic=True the output path is only replaced once the
    whole expansion succeeded.
    """
    report = report or typer.echo
    src = Path(input_file)
    dst = Path(output_file)

    try:
        _check_input(src)
    except ExpandLoadError as e:
        report(str(e))
        return False

    if atomic:
        return _run_atomic(src, dst, search_paths, report, on_include)

    try:
        out = open(dst, "w", encoding=SOURCE_ENCODING, errors=SOURCE_ERRORS, newline="\n")
    except OSError as e:
        report(str(_unwritable(dst, e)))
        return False

    try:
        with out:
            return expand(src, out, search_paths, "", 0, report=report, on_include=on_include)
    except OSError as e:
        report(str(_unwritable(dst, e)))
        return False


def _run_atomic(
    src: Path,
    dst: Path,
    search_paths: Sequence[PathLike],
    report: Report,
    on_include: Optional[OnInclude],
) -> bool:
    try:
        _check_replaceable(dst)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{dst.name}.", suffix=".tmp", dir=str(dst.parent)
        )
    except OSError as e:
        report(str(_unwritable(dst, e)))
        return False

    tmp = Path(tmp_name)
    ok = False
    try:
        with open(fd, "w", encoding=SOURCE_ENCODING, errors=SOURCE_ERRORS, newline="\n") as out:
            ok = expand(src, out, search_paths, "", 0, report=report, on_include=on_include)
        if ok:
            os.replace(tmp, dst)
    except OSError as e:
        report(str(_unwritable(dst, e)))
        ok = False
    finally:
        if not ok:
            tmp.unlink(missing_ok=True)
    return ok


def _check_replaceable(dst: Path) -> None:
    """Directories and device nodes are never replaced by the finished output."""
    if dst.is_dir():
        raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR))
    if dst.exists() and not dst.is_file():
        raise OSError(errno.EINVAL, "not a regular file")


def _check_input(src: Path) -> None:
    try:
        with open(src, "rb"):
            pass
    except OSError as e:
        raise input_unreadable(str(src), e) from e


def _unwritable(dst: Path, e: OSError) -> ExpandLoadError:
    return ExpandLoadError(
        code="E_OUTPUT_UNWRITABLE",
        message=f"cannot open output file: {e.strerror or e}",
        file=str(dst),
    )
