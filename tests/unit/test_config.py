"""Tests for analyzer options loaded from sessao.toml / pyproject.toml."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from sessao.core.config import AnalyzerOptions, load_options, options_from_dict
from sessao.core.errors import ConfigError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write(tmp_path: Path, name: str, content: str) -> Path:
    p = tmp_path / name
    p.write_text(textwrap.dedent(content), encoding="utf-8")
    return p


# ---------------------------------------------------------------------------
# AnalyzerOptions
# ---------------------------------------------------------------------------


class TestAnalyzerOptions:
    def test_defaults(self) -> None:
        options = AnalyzerOptions()
        assert options.unreachable_phases == "warning"
        assert options.unreachable_statements == "warning"
        assert options.warnings_as_errors is False

    @pytest.mark.parametrize("field", ["unreachable_phases", "unreachable_statements"])
    def test_invalid_level(self, field: str) -> None:
        with pytest.raises(ConfigError, match="expected one of warning, error, off"):
            AnalyzerOptions(**{field: "loud"})

    def test_warnings_as_errors_must_be_bool(self) -> None:
        with pytest.raises(ConfigError):
            AnalyzerOptions(warnings_as_errors="yes")  # type: ignore[arg-type]

    def test_from_dict(self) -> None:
        options = options_from_dict({"unreachable_phases": "off", "warnings_as_errors": True})
        assert options == AnalyzerOptions(unreachable_phases="off", warnings_as_errors=True)

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError, match="unreachable_phase"):
            options_from_dict({"unreachable_phase": "off"})


# ---------------------------------------------------------------------------
# load_options
# ---------------------------------------------------------------------------


class TestLoadOptions:
    def test_sessao_toml(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "sessao.toml",
            """\
            [analysis]
            unreachable_phases = "error"
            unreachable_statements = "off"
            """,
        )
        options = load_options(path)
        assert options.unreachable_phases == "error"
        assert options.unreachable_statements == "off"
        assert options.warnings_as_errors is False

    def test_pyproject_tool_table(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "pyproject.toml",
            """\
            [project]
            name = "protocols"

            [tool.sessao.analysis]
            warnings_as_errors = true
            """,
        )
        assert load_options(path).warnings_as_errors is True

    def test_pyproject_top_level_analysis_ignored(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "pyproject.toml",
            """\
            [analysis]
            warnings_as_errors = true
            """,
        )
        assert load_options(path) == AnalyzerOptions()

    def test_missing_table_gives_defaults(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "sessao.toml", "")
        assert load_options(path) == AnalyzerOptions()

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "sessao.toml", "[analysis\n")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_options(path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "sessao.toml",
            """\
            [analysis]
            unreachable_phases = "sometimes"
            """,
        )
        with pytest.raises(ConfigError, match="sometimes"):
            load_options(path)
