from __future__ import annotations

from pathlib import Path
from typing import Sequence

from include_expander.core.errors import (
    IncludeError,
    cyclic_include,
    input_unreadable,
    unknown_include,
)
from include_expander.core.expand.expand_file import (
    SOURCE_ENCODING,
    SOURCE_ERRORS,
    SOURCE_NEWLINE,
    PathLike,
)
from include_expander.core.model import IncludeNode, SourceLocation
from include_expander.core.resolve.resolve_include import resolve_include
from include_expander.core.scan.classify_line import iter_directives


def include_tree(file: PathLike, search_paths: Sequence[PathLike]) -> IncludeNode:
    """Build the include tree of `file` without writing any output.

    Resolution follows the same rules as expansion. Unlike expansion the walk
    does not stop at the first failure: unresolved, unreadable and cyclic
    includes become leaves carrying the diagnostic text.
    """
    dirs = tuple(Path(d) for d in search_paths)
    root = IncludeNode(path=Path(file), location=SourceLocation.top())
    _walk(root, dirs, ())
    return root


def tree_errors(node: IncludeNode) -> list[str]:
    out: list[str] = []
    if node.error:
        out.append(node.error)
    for child in node.children:
        out.extend(tree_errors(child))
    return out


def _walk(node: IncludeNode, search_paths: tuple[Path, ...], chain: tuple[Path, ...]) -> None:
    file = node.path
    try:
        f = open(file, "r", encoding=SOURCE_ENCODING, errors=SOURCE_ERRORS, newline=SOURCE_NEWLINE)
    except OSError as e:
        if node.location.is_top():
            node.error = str(input_unreadable(str(file), e))
        else:
            node.error = str(
                unknown_include(
                    file.name, node.location.file, node.location.line, code="E_UNREADABLE_INCLUDE"
                )
            )
        return

    with f:
        chain = chain + (file.resolve(),)
        directives = [(n, d) for n, d in iter_directives(f) if d.is_include]

    for line_number, directive in directives:
        here = SourceLocation(file=str(file), line=line_number)
        target = resolve_include(directive, file.parent, search_paths)

        err: IncludeError | None = None
        if target is None:
            err = unknown_include(directive.name, here.file, here.line)
        elif target.resolve() in chain:
            err = cyclic_include(directive.name, here.file, here.line)

        child = IncludeNode(path=target or Path(directive.name), location=here)
        node.children.append(child)
        if err is not None:
            child.error = str(err)
            continue
        _walk(child, search_paths, chain)
