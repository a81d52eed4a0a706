from __future__ import annotations

from pathlib import Path
from typing import Iterator, Optional, Sequence

from include_expander.core.model import Directive


def candidate_paths(
    directive: Directive,
    including_dir: Path,
    search_paths: Sequence[Path],
) -> Iterator[Path]:
    """Yield candidate paths in probing order.

    Local includes try the including file's directory first; global includes
    only ever look at the search list.
    """
    if not directive.is_include:
        raise ValueError(f"not an include directive: {directive.line!r}")

    if directive.kind == "local":
        yield including_dir / directive.name
    for d in search_paths:
        yield Path(d) / directive.name


def resolve_include(
    directive: Directive,
    including_dir: Path,
    search_paths: Sequence[Path],
) -> Optional[Path]:
    """Return the first existing candidate, or None.

    A candidate whose existence check fails (name too long, no permission on
    a parent) counts as absent.
    """
    for candidate in candidate_paths(directive, including_dir, search_paths):
        try:
            if candidate.exists():
                return candidate
        except OSError:
            continue
    return None
