from __future__ import annotations

"""
Unit tests for the CLI Application Controller.

The analyzer coordinator is mocked; these tests cover configuration
resolution, exit codes and result rendering.
"""

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from pendant.domain.analysis_models import FormattedAnalysisResult
from pendant.domain.constants import RuntimeContext
from pendant.domain.errors import AnalyzerError
from pendant.infra.logging import shutdown_logging
from pendant.interface.cli import app


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run every command inside the temp project with a private HOME."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    yield
    shutdown_logging()
    logging.getLogger().setLevel(logging.WARNING)


def _result(total: int = 0) -> FormattedAnalysisResult:
    return FormattedAnalysisResult(
        lines=[f"[00:00:00] Analysis complete. Found {total} issues. Completed in 1ms."],
        issues_by_context={RuntimeContext.SHARED: total},
        problems_file_content="",
        total_issues=total,
    )


@pytest.fixture
def coordinator(project_dir: Path):
    with patch.object(app, "AnalysisCoordinator") as cls:
        instance = MagicMock()
        instance.run_analysis.return_value = _result()
        cls.return_value = instance
        yield instance


def test_analyze_prints_summary(coordinator: MagicMock, capsys: pytest.CaptureFixture) -> None:
    """TC-01: Without a configuration file the metadata defaults are used."""
    assert app.main(["analyze"]) == app.EXIT_OK

    options = coordinator.run_analysis.call_args[0][0]
    assert options.paths[RuntimeContext.SHARED] == ["src/shared/**", "Packages/**"]
    assert options.output_file == "problematic"
    assert "Analysis complete" in capsys.readouterr().out


def test_analyze_json_report(coordinator: MagicMock, capsys: pytest.CaptureFixture) -> None:
    """TC-02: --json prints the path map and counts."""
    assert app.main(["analyze", "--json"]) == app.EXIT_OK

    report = json.loads(capsys.readouterr().out)
    assert report["paths"]["Server"] == ["src/server/**"]
    assert report["total_issues"] == 0


def test_analyze_gitignore_filters_paths(project_dir: Path, coordinator: MagicMock) -> None:
    """TC-03: The project .gitignore removes globs unless disabled."""
    (project_dir / ".gitignore").write_text("Packages/\n", encoding="utf-8")

    app.main(["analyze"])
    assert coordinator.run_analysis.call_args[0][0].paths[RuntimeContext.SHARED] == ["src/shared/**"]

    app.main(["analyze", "--no-gitignore"])
    assert "Packages/**" in coordinator.run_analysis.call_args[0][0].paths[RuntimeContext.SHARED]


def test_analyze_uses_discovered_configuration(project_dir: Path, coordinator: MagicMock, mock_config_dict) -> None:
    """TC-04: A discovered pendant.json drives ignores and the problems file."""
    config = dict(mock_config_dict, outputFileName="issues.txt", knownProblematicFiles=["src/old.luau"])
    (project_dir / "pendant.json").write_text(json.dumps(config), encoding="utf-8")

    assert app.main(["analyze"]) == app.EXIT_OK
    options = coordinator.run_analysis.call_args[0][0]
    assert options.output_file == "issues.txt"
    assert options.ignore_patterns == ("Packages/**", "src/old.luau")


def test_analyze_invalid_explicit_configuration(project_dir: Path, coordinator: MagicMock) -> None:
    """TC-05: An invalid explicit configuration file is an input error."""
    (project_dir / "broken.json").write_text('{"files": {"client": []}}', encoding="utf-8")
    assert app.main(["analyze", "-c", "broken.json"]) == app.EXIT_INPUT_ERROR
    coordinator.run_analysis.assert_not_called()


def test_analyze_missing_project(project_dir: Path, coordinator: MagicMock) -> None:
    """TC-06: A missing project file is an input error."""
    assert app.main(["analyze", "--rojo-project", "missing.project.json"]) == app.EXIT_INPUT_ERROR


def test_analyze_fail_on_issues(coordinator: MagicMock) -> None:
    """TC-07: Issues only fail the run when requested."""
    coordinator.run_analysis.return_value = _result(total=2)
    assert app.main(["analyze"]) == app.EXIT_OK
    assert app.main(["analyze", "--fail-on-issues"]) == app.EXIT_FAILURE


def test_analyze_tool_failure(coordinator: MagicMock) -> None:
    """TC-08: Analyzer failures map to exit code 1."""
    coordinator.run_analysis.side_effect = AnalyzerError("rojo missing")
    assert app.main(["analyze"]) == app.EXIT_FAILURE


def test_init_and_schema_commands(project_dir: Path) -> None:
    """TC-09: init writes configuration, schema and .gitignore entry."""
    assert app.main(["init", "-c", "src"]) == app.EXIT_OK

    assert (project_dir / "pendant.json").is_file()
    assert (project_dir / ".schemas" / "pendant-configuration.schema.json").is_file()
    assert "problematic" in (project_dir / ".gitignore").read_text(encoding="utf-8")

    assert app.main(["generate-schema", "-p", "out/custom.schema.json"]) == app.EXIT_OK
    assert (project_dir / "out" / "custom.schema.json").is_file()


def test_init_without_project(tmp_path: Path) -> None:
    """TC-10: init outside a Rojo project is an input error."""
    assert app.main(["init", "-c", "src"]) == app.EXIT_INPUT_ERROR


def test_clean_logs(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    """TC-11: clean-logs removes the persisted log files."""
    assert app.main(["clean-logs"]) == app.EXIT_OK
    assert "Removed" in capsys.readouterr().out
    assert not list((tmp_path / "home" / ".pendant" / "logs").glob("*.log*"))


def test_analyze_configured_ignores_filter_paths(project_dir: Path, coordinator: MagicMock, mock_config_dict) -> None:
    """TC-12: ignoreGlobs drop matching globs from the analyzed paths."""
    (project_dir / "pendant.json").write_text(json.dumps(mock_config_dict), encoding="utf-8")

    app.main(["analyze", "--no-gitignore"])
    options = coordinator.run_analysis.call_args[0][0]
    assert options.paths[RuntimeContext.SHARED] == ["src/shared/**"]
    assert options.ignore_patterns == ("Packages/**",)


def test_analyze_gitignore_reaches_analyzer_ignores(project_dir: Path, coordinator: MagicMock) -> None:
    """TC-13: .gitignore lines are passed to the analyzer as ignore globs."""
    (project_dir / ".gitignore").write_text("# build\n/out\nlegacy/\n", encoding="utf-8")

    app.main(["analyze"])
    assert coordinator.run_analysis.call_args[0][0].ignore_patterns == ("out", "legacy/**")

    app.main(["analyze", "--no-gitignore"])
    assert coordinator.run_analysis.call_args[0][0].ignore_patterns == ()


def test_analyze_project_glob_ignores(project_dir: Path, coordinator: MagicMock, basic_project_dict) -> None:
    """TC-14: The project's globIgnorePaths filter paths and reach the analyzer."""
    data = dict(basic_project_dict, globIgnorePaths=["Packages/**"])
    (project_dir / "default.project.json").write_text(json.dumps(data), encoding="utf-8")

    app.main(["analyze"])
    options = coordinator.run_analysis.call_args[0][0]
    assert options.paths[RuntimeContext.SHARED] == ["src/shared/**"]
    assert options.ignore_patterns == ("Packages/**",)
