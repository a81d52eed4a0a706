from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


# Relative path -> contents. b.h deliberately has no trailing newline.
REFERENCE_FILES: dict[str, str] = {
    "a.cpp": (
        "// this comment before include\n"
        '#include "dir1/b.h"\n'
        "// text between b.h and c.h\n"
        '#include "dir1/d.h"\n'
        "\n"
        "int SayHello() {\n"
        '    cout << "hello, world!" << endl;\n'
        "#   include<dummy.txt>\n"
        "}\n"
    ),
    "dir1/b.h": (
        "// text from b.h before include\n"
        '#include "subdir/c.h"\n'
        "// text from b.h after include"
    ),
    "dir1/subdir/c.h": (
        "// text from c.h before include\n"
        "#include <std1.h>\n"
        "// text from c.h after include\n"
    ),
    "dir1/d.h": (
        "// text from d.h before include\n"
        '#include "lib/std2.h"\n'
        "// text from d.h after include\n"
    ),
    "include1/std1.h": "// std1\n",
    "include2/lib/std2.h": "// std2\n",
}

# Everything spliced before a.cpp line 8, where <dummy.txt> fails to resolve.
REFERENCE_EXPECTED = (
    "// this comment before include\n"
    "// text from b.h before include\n"
    "// text from c.h before include\n"
    "// std1\n"
    "// text from c.h after include\n"
    "// text from b.h after include\n"
    "// text between b.h and c.h\n"
    "// text from d.h before include\n"
    "// std2\n"
    "// text from d.h after include\n"
    "\n"
    "int SayHello() {\n"
    '    cout << "hello, world!" << endl;\n'
)

REFERENCE_FAILING_NAME = "dummy.txt"
REFERENCE_FAILING_LINE = 8


@dataclass(frozen=True)
class ReferenceFixture:
    root: Path
    input_file: Path
    output_file: Path
    include_dirs: list[Path]
    expected_output: str

    @property
    def expected_diagnostic(self) -> str:
        return (
            f"unknown include file {REFERENCE_FAILING_NAME} "
            f"at file {self.input_file} at line {REFERENCE_FAILING_LINE}"
        )


def build_reference_fixture(root: str | Path) -> ReferenceFixture:
    """Write the reference source tree under `root`.

    a.cpp pulls in dir1/b.h (-> subdir/c.h -> <std1.h>) and dir1/d.h
    (-> lib/std2.h via the second include dir), then fails on <dummy.txt>.
    """
    base = Path(root)
    for rel, text in REFERENCE_FILES.items():
        p = base / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")

    return ReferenceFixture(
        root=base,
        input_file=base / "a.cpp",
        output_file=base / "a.in",
        include_dirs=[base / "include1", base / "include2"],
        expected_output=REFERENCE_EXPECTED,
    )
