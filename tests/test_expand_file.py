import io
from pathlib import Path

from include_expander.core.expand.expand_file import expand


def _write(p: Path, text: str) -> Path:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    return p


def _expand(file: Path, search_paths=(), **kwargs) -> tuple[bool, str, list[str]]:
    out = io.StringIO()
    diagnostics: list[str] = []
    ok = expand(file, out, list(search_paths), report=diagnostics.append, **kwargs)
    return ok, out.getvalue(), diagnostics


def test_identity_without_directives(tmp_path: Path):
    a = _write(tmp_path / "a.txt", "one\n  two  \n\nthree\n")
    ok, out, diags = _expand(a)
    assert ok
    assert out == "one\n  two  \n\nthree\n"
    assert diags == []


def test_missing_final_newline_is_added(tmp_path: Path):
    a = _write(tmp_path / "a.txt", "one\ntwo")
    ok, out, _ = _expand(a)
    assert ok
    assert out == "one\ntwo\n"


def test_crlf_is_normalized(tmp_path: Path):
    a = tmp_path / "a.txt"
    a.write_bytes(b'one\r\n#include "b.h"\r\nthree\r\n')
    (tmp_path / "b.h").write_bytes(b"two\r\n")
    ok, out, _ = _expand(a)
    assert ok
    assert out == "one\ntwo\nthree\n"


def test_single_local_substitution(tmp_path: Path):
    a = _write(tmp_path / "a", 'before\n#include "b.h"\nafter\n')
    _write(tmp_path / "b.h", "X\n")
    ok, out, _ = _expand(a)
    assert ok
    assert out == "before\nX\nafter\n"


def test_search_precedence_local_wins(tmp_path: Path):
    a = _write(tmp_path / "src" / "a", '#include "x.h"\n')
    _write(tmp_path / "src" / "x.h", "local\n")
    _write(tmp_path / "inc" / "x.h", "search\n")
    ok, out, _ = _expand(a, [tmp_path / "inc"])
    assert ok
    assert out == "local\n"


def test_global_fails_where_local_succeeds(tmp_path: Path):
    _write(tmp_path / "src" / "x.h", "local\n")
    loc = _write(tmp_path / "src" / "loc", '#include "x.h"\n')
    glob = _write(tmp_path / "src" / "glob", "#include <x.h>\n")

    ok, out, _ = _expand(loc, [tmp_path / "inc"])
    assert ok
    assert out == "local\n"

    ok, out, diags = _expand(glob, [tmp_path / "inc"])
    assert not ok
    assert out == ""
    assert diags == [f"unknown include file x.h at file {glob} at line 1"]


def test_depth_first_ordering(tmp_path: Path):
    a = _write(tmp_path / "A", 'a1\n#include "B"\na2\n')
    _write(tmp_path / "B", 'b1\n#include "C"\nb2\n')
    _write(tmp_path / "C", "c1\nc2\n")
    ok, out, _ = _expand(a)
    assert ok
    assert out == "a1\nb1\nc1\nc2\nb2\na2\n"


def test_nested_relative_base_is_included_file_dir(tmp_path: Path):
    a = _write(tmp_path / "a", '#include "dir/b.h"\n')
    _write(tmp_path / "dir" / "b.h", '#include "c.h"\n')
    _write(tmp_path / "dir" / "c.h", "deep\n")
    _write(tmp_path / "c.h", "wrong\n")
    ok, out, _ = _expand(a)
    assert ok
    assert out == "deep\n"


def test_failure_short_circuits_enclosing_files(tmp_path: Path):
    a = _write(tmp_path / "a", 'a1\n#include "b"\na2\n')
    b = _write(tmp_path / "b", "b1\n#include <missing.h>\nb2\n")
    ok, out, diags = _expand(a)
    assert not ok
    assert out == "a1\nb1\n"
    # Reported once, at the deepest point.
    assert diags == [f"unknown include file missing.h at file {b} at line 2"]


def test_unreadable_nested_include_uses_basename(tmp_path: Path):
    a = _write(tmp_path / "a", 'x\n#include "sub"\n')
    (tmp_path / "sub").mkdir()
    ok, out, diags = _expand(a)
    assert not ok
    assert out == "x\n"
    assert diags == [f"unknown include file sub at file {a} at line 2"]


def test_unreadable_top_level_has_no_diagnostic(tmp_path: Path):
    ok, out, diags = _expand(tmp_path / "missing.cpp")
    assert not ok
    assert out == ""
    assert diags == []


def test_referencing_context_is_used_for_open_failure(tmp_path: Path):
    out = io.StringIO()
    diagnostics: list[str] = []
    ok = expand(
        tmp_path / "gone" / "x.h",
        out,
        [],
        "main.cpp",
        7,
        report=diagnostics.append,
    )
    assert not ok
    assert diagnostics == ["unknown include file x.h at file main.cpp at line 7"]


def test_direct_cycle_is_detected(tmp_path: Path):
    a = _write(tmp_path / "a", 'top\n#include "a"\n')
    ok, out, diags = _expand(a)
    assert not ok
    assert out == "top\n"
    assert diags == [f"cyclic include file a at file {a} at line 2"]


def test_indirect_cycle_is_detected(tmp_path: Path):
    a = _write(tmp_path / "a", '#include "b"\n')
    b = _write(tmp_path / "b", 'b\n#include "sub/../a"\n')
    (tmp_path / "sub").mkdir()
    ok, out, diags = _expand(a)
    assert not ok
    assert out == "b\n"
    assert diags == [f"cyclic include file sub/../a at file {b} at line 2"]


def test_repeated_non_cyclic_include_is_expanded_each_time(tmp_path: Path):
    a = _write(tmp_path / "a", '#include "x"\n#include "x"\n')
    _write(tmp_path / "x", "x\n")
    ok, out, _ = _expand(a)
    assert ok
    assert out == "x\nx\n"


def test_on_include_sees_each_resolution(tmp_path: Path):
    a = _write(tmp_path / "a", 'a\n#include "b"\n')
    _write(tmp_path / "b", "b\n")
    seen = []
    ok, _, _ = _expand(a, on_include=lambda loc, target: seen.append((loc.line, target.name)))
    assert ok
    assert seen == [(2, "b")]


def test_overlong_include_name_is_unknown(tmp_path: Path):
    name = "x" * 300
    a = _write(tmp_path / "a.cpp", f'before\n#include "{name}"\n')
    ok, out, diags = _expand(a)
    assert not ok
    assert out == "before\n"
    assert diags == [f"unknown include file {name} at file {a} at line 2"]


def test_lone_carriage_return_does_not_split_lines(tmp_path: Path):
    a = tmp_path / "a.cpp"
    a.write_bytes(b"one\rtwo\n#include <missing.h>\n")
    ok, out, diags = _expand(a)
    assert not ok
    assert out == "one\rtwo\n"
    assert diags == [f"unknown include file missing.h at file {a} at line 2"]
