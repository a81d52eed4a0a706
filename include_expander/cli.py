from __future__ import annotations

import shutil
import tempfile
from pathlib import Path

import typer
from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from include_expander.core.errors import ConfigError, ExpandError
from include_expander.core.expand.include_tree import include_tree, tree_errors
from include_expander.core.expand.run_expand import run
from include_expander.core.io.load_config import ExpanderConfig, load_config, search_list
from include_expander.core.io.reference_fixture import build_reference_fixture
from include_expander.core.model import IncludeNode, SourceLocation

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def _callback() -> None:
    """Include expander CLI."""
    return


@app.command("expand")
def expand_cmd(
    path: str = typer.Argument(..., help="Source file to expand"),
    out: str = typer.Option(..., "--out", help="Path to write the expanded file"),
    include_dir: list[str] = typer.Option(
        [],
        "--include-dir",
        "-I",
        help="Search directory for includes (repeatable, searched in order)",
    ),
    config: str | None = typer.Option(
        None, "--config", help="Optional YAML file with include_dirs/atomic settings"
    ),
    atomic: bool = typer.Option(
        False, "--atomic", help="Only replace --out once the whole expansion succeeded"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Echo each resolved include"),
) -> None:
    """Expand #include directives in a file into a single flattened output."""
    cfg = _load_config_or_exit(config)
    dirs = search_list(include_dir, cfg)

    def on_include(loc: SourceLocation, target: Path) -> None:
        typer.echo(f"{loc} -> {target}", err=True)

    ok = run(
        path,
        out,
        dirs,
        atomic=atomic or (cfg is not None and cfg.atomic),
        on_include=on_include if verbose else None,
    )
    if not ok:
        raise typer.Exit(code=1)
    typer.echo(f"OK: wrote expanded file to {out}")


@app.command("tree")
def tree_cmd(
    path: str = typer.Argument(..., help="Source file to inspect"),
    include_dir: list[str] = typer.Option(
        [],
        "--include-dir",
        "-I",
        help="Search directory for includes (repeatable, searched in order)",
    ),
    config: str | None = typer.Option(
        None, "--config", help="Optional YAML file with include_dirs settings"
    ),
) -> None:
    """Print the include tree of a file without writing anything."""
    cfg = _load_config_or_exit(config)
    root = include_tree(path, search_list(include_dir, cfg))

    console = Console()
    console.print(_render_tree(root))

    errors = tree_errors(root)
    if errors:
        for e in errors:
            typer.echo(e, err=True)
        raise typer.Exit(code=2)


@app.command("selftest")
def selftest_cmd(
    keep: bool = typer.Option(False, "--keep", help="Keep the fixture directory for inspection"),
) -> None:
    """Build the reference source tree in a temp dir and check the expansion."""
    base_dir = Path(tempfile.mkdtemp(prefix="expander-selftest-"))
    try:
        fixture = build_reference_fixture(base_dir / "sources")
        diagnostics: list[str] = []
        ok = run(
            fixture.input_file,
            fixture.output_file,
            fixture.include_dirs,
            report=diagnostics.append,
        )

        problems: list[str] = []
        if ok:
            problems.append("expansion succeeded, expected failure at dummy.txt")
        if diagnostics != [fixture.expected_diagnostic]:
            problems.append(f"unexpected diagnostics: {diagnostics}")
        got = fixture.output_file.read_text(encoding="utf-8")
        if got != fixture.expected_output:
            problems.append("expanded output differs from the expected text")

        if keep:
            typer.echo(f"fixture kept at {base_dir}")
        if problems:
            for p in problems:
                typer.echo(f"FAIL: {p}", err=True)
            raise typer.Exit(code=1)
        typer.echo("OK: selftest passed")
    finally:
        if not keep:
            shutil.rmtree(base_dir, ignore_errors=True)


def _load_config_or_exit(config: str | None) -> ExpanderConfig | None:
    if not config:
        return None
    try:
        return load_config(config)
    except ConfigError as e:
        _print_errors([e])
        raise typer.Exit(code=1 if e.code == "E_CONFIG_NOT_FOUND" else 2)


def _render_tree(node: IncludeNode, parent: Tree | None = None) -> Tree:
    label = Text(str(node.path))
    if not node.location.is_top():
        label.append(f" (line {node.location.line})", style="dim")
    if node.error:
        label.append(f" ! {node.error}", style="red")

    branch = Tree(label) if parent is None else parent.add(label)
    for child in node.children:
        _render_tree(child, branch)
    return branch


def _print_errors(errors: list[ExpandError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.line or 0, e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="expander")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
