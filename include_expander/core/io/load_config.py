from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from include_expander.core.errors import ConfigError


@dataclass(frozen=True)
class ExpanderConfig:
    include_dirs: list[Path] = field(default_factory=list)
    atomic: bool = False
    source: str | None = None


def load_config(path: str | Path) -> ExpanderConfig:
    """Load expander settings from a YAML file.

    Format:
      include_dirs: ["include1", "/usr/local/include"]
      atomic: false

    Relative include_dirs are taken relative to the config file's directory.
    """
    p = Path(path)
    if not p.exists():
        raise ConfigError(code="E_CONFIG_NOT_FOUND", message="config file does not exist", file=str(p))

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(code="E_CONFIG_PARSE", message=str(e), file=str(p)) from e
    except OSError as e:
        raise ConfigError(code="E_CONFIG_READ", message=str(e), file=str(p)) from e

    if raw is None:
        return ExpanderConfig(source=str(p))
    if not isinstance(raw, dict):
        raise _invalid(p, "config file must be a mapping")

    unknown = sorted(set(raw) - {"include_dirs", "atomic"})
    if unknown:
        raise _invalid(p, f"unknown keys: {', '.join(str(k) for k in unknown)}")

    return ExpanderConfig(
        include_dirs=_include_dirs(p, raw.get("include_dirs")),
        atomic=_atomic(p, raw.get("atomic", False)),
        source=str(p),
    )


def search_list(cli_dirs: list[str] | None, config: ExpanderConfig | None) -> list[Path]:
    """Command-line dirs first, then config dirs, in order."""
    dirs = [Path(d) for d in (cli_dirs or [])]
    if config is not None:
        dirs.extend(config.include_dirs)
    return dirs


def _include_dirs(p: Path, value: Any) -> list[Path]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise _invalid(p, "include_dirs must be a list of strings")

    out: list[Path] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise _invalid(p, "include_dirs items must be non-empty strings")
        d = Path(item.strip())
        out.append(d if d.is_absolute() else p.parent / d)
    return out


def _atomic(p: Path, value: Any) -> bool:
    if not isinstance(value, bool):
        raise _invalid(p, "atomic must be true or false")
    return value


def _invalid(p: Path, message: str) -> ConfigError:
    return ConfigError(code="E_CONFIG_INVALID", message=message, file=str(p))
