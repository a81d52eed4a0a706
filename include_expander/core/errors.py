from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ExpandError(Exception):
    """Base error envelope. Callers print these rather than raw OS errors."""

    code: str
    message: str
    file: Optional[str] = None
    line: Optional[int] = None

    def __str__(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
        if self.line:
            parts.append(str(self.line))
        loc = ":".join(parts) if parts else "<expander>"
        return f"{loc}: {self.code}: {self.message}"


class ExpandLoadError(ExpandError):
    """Top-level input or output could not be opened."""


class ConfigError(ExpandError):
    pass


class IncludeError(ExpandError):
    """A directive could not be expanded.

    The message already carries the referencing file and line, so the
    printed form is the bare message.
    """

    def __str__(self) -> str:
        return self.message


def unknown_include(name: str, file: str, line: int, *, code: str = "E_UNKNOWN_INCLUDE") -> IncludeError:
    return IncludeError(
        code=code,
        message=f"unknown include file {name} at file {file} at line {line}",
        file=file,
        line=line,
    )


def cyclic_include(name: str, file: str, line: int) -> IncludeError:
    return IncludeError(
        code="E_CYCLIC_INCLUDE",
        message=f"cyclic include file {name} at file {file} at line {line}",
        file=file,
        line=line,
    )


def input_unreadable(file: str, e: OSError) -> ExpandLoadError:
    return ExpandLoadError(
        code="E_INPUT_UNREADABLE",
        message=f"cannot open input file: {e.strerror or e}",
        file=file,
    )
