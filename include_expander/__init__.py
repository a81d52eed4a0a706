from include_expander.core.expand.expand_file import expand
from include_expander.core.expand.run_expand import run

__all__ = ["expand", "run"]
