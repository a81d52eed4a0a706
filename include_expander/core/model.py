from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional


DirectiveKind = Literal["local", "global", "text"]


@dataclass(frozen=True)
class SourceLocation:
    file: str
    line: int

    @classmethod
    def top(cls) -> "SourceLocation":
        return cls(file="", line=0)

    def is_top(self) -> bool:
        return not self.file

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class Directive:
    kind: DirectiveKind
    name: str
    line: str

    @classmethod
    def local(cls, name: str, line: str) -> "Directive":
        return cls(kind="local", name=name, line=line)

    @classmethod
    def global_(cls, name: str, line: str) -> "Directive":
        return cls(kind="global", name=name, line=line)

    @classmethod
    def text(cls, line: str) -> "Directive":
        return cls(kind="text", name="", line=line)

    @property
    def is_include(self) -> bool:
        return self.kind != "text"


@dataclass
class IncludeNode:
    path: Path
    location: SourceLocation
    children: list["IncludeNode"] = field(default_factory=list)
    error: Optional[str] = None
