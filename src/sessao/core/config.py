"""
Analyzer configuration.

Options are read from the `[analysis]` table of a `sessao.toml` file, or
from `[tool.sessao.analysis]` in a `pyproject.toml`:

    [analysis]
    unreachable_phases = "error"      # "warning" (default) | "error" | "off"
    unreachable_statements = "off"    # "warning" (default) | "error" | "off"
    warnings_as_errors = false
"""

import tomllib
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError

CHECK_LEVELS = ("warning", "error", "off")


@dataclass(frozen=True)
class AnalyzerOptions:
    """
    Tunable behaviour of semantic analysis.

    Attributes:
        unreachable_phases: Severity of phases the entry phase never reaches
        unreachable_statements: Severity of statements after end/continue/parallel
        warnings_as_errors: Promote every warning to an error
    """

    unreachable_phases: str = "warning"
    unreachable_statements: str = "warning"
    warnings_as_errors: bool = False

    def __post_init__(self) -> None:
        for name in ("unreachable_phases", "unreachable_statements"):
            value = getattr(self, name)
            if value not in CHECK_LEVELS:
                raise ConfigError(
                    f"Invalid value {value!r} for '{name}'; "
                    f"expected one of {', '.join(CHECK_LEVELS)}"
                )
        if not isinstance(self.warnings_as_errors, bool):
            raise ConfigError("'warnings_as_errors' must be true or false")


def options_from_dict(data: dict) -> AnalyzerOptions:
    """Build options from an `[analysis]` table, rejecting unknown keys."""
    known = {"unreachable_phases", "unreachable_statements", "warnings_as_errors"}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown analysis option(s): {', '.join(sorted(unknown))}")

    return AnalyzerOptions(
        unreachable_phases=data.get("unreachable_phases", "warning"),
        unreachable_statements=data.get("unreachable_statements", "warning"),
        warnings_as_errors=data.get("warnings_as_errors", False),
    )


def load_options(path: Path) -> AnalyzerOptions:
    """
    Load analyzer options from a TOML file.

    Args:
        path: A sessao.toml or pyproject.toml

    Returns:
        AnalyzerOptions (defaults when the file has no analysis table)

    Raises:
        ConfigError: If the file is not valid TOML or holds invalid options
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    if path.name == "pyproject.toml":
        data = data.get("tool", {}).get("sessao", {})

    return options_from_dict(data.get("analysis", {}))
