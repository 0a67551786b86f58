# tests/unit/test_cli.py
"""Tests for the typedprefs CLI."""

from __future__ import annotations

import logging
import os
import textwrap
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog
from typer.testing import CliRunner

from typedprefs.cli import app

runner = CliRunner()

PREFS = """
from typing import Protocol, overload

from typedprefs import SettingsActions, default, preferences


@preferences("app")
class AppPrefs(SettingsActions, Protocol):
    @overload
    @default("guest")
    def username(self) -> str: ...
    @overload
    def username(self, value: str) -> None: ...
"""

GETTER_ONLY = """
from typing import Protocol

from typedprefs import preferences


@preferences("app")
class AppPrefs(Protocol):
    def username(self) -> str: ...
"""

BROKEN = """
from typing import Protocol

from typedprefs import preferences


@preferences("app")
class AppPrefs(Protocol):
    def pair(self, a: str, b: str) -> None: ...
"""

MISSING_ANCESTOR = """
from typing import Protocol

from elsewhere.prefs import BasePrefs
from typedprefs import preferences


@preferences("app")
class AppPrefs(BasePrefs, Protocol):
    def username(self) -> str: ...
"""


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty working directory with a ``src`` root."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "src").mkdir()
    return tmp_path


def write_prefs(root: Path, source: str) -> None:
    package = root / "src" / "app"
    package.mkdir(parents=True, exist_ok=True)
    (package / "__init__.py").write_text("")
    (package / "prefs.py").write_text(textwrap.dedent(source))


class TestCLIBasics:
    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "typedprefs version" in result.stdout

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "generate" in result.stdout
        assert "check" in result.stdout


class TestGenerateCommand:
    def test_writes_implementation_next_to_interface(self, workspace: Path) -> None:
        write_prefs(workspace, PREFS)

        result = runner.invoke(app, ["--no-dotenv", "generate", "src"])

        assert result.exit_code == 0, result.output
        target = workspace / "src" / "app" / "app_prefs_impl.py"
        assert target.exists()
        assert f"wrote {Path('src') / 'app' / 'app_prefs_impl.py'}" in result.output
        assert "1 implementation(s), 0 error(s), 0 warning(s)" in result.output

    def test_default_source_root_is_src(self, workspace: Path) -> None:
        write_prefs(workspace, PREFS)
        result = runner.invoke(app, ["--no-dotenv", "generate"])
        assert result.exit_code == 0, result.output
        assert (workspace / "src" / "app" / "app_prefs_impl.py").exists()

    def test_out_directory(self, workspace: Path) -> None:
        write_prefs(workspace, PREFS)

        result = runner.invoke(app, ["--no-dotenv", "generate", "src", "--out", "build"])

        assert result.exit_code == 0, result.output
        assert (workspace / "build" / "app" / "app_prefs_impl.py").exists()
        assert not (workspace / "src" / "app" / "app_prefs_impl.py").exists()

    def test_regeneration_is_stable(self, workspace: Path) -> None:
        write_prefs(workspace, PREFS)
        runner.invoke(app, ["--no-dotenv", "generate", "src"])
        first = (workspace / "src" / "app" / "app_prefs_impl.py").read_text()

        result = runner.invoke(app, ["--no-dotenv", "generate", "src"])

        assert result.exit_code == 0, result.output
        assert "1 implementation(s)" in result.output
        assert (workspace / "src" / "app" / "app_prefs_impl.py").read_text() == first

    def test_errors_exit_non_zero(self, workspace: Path) -> None:
        write_prefs(workspace, BROKEN)

        result = runner.invoke(app, ["--no-dotenv", "generate", "src"])

        assert result.exit_code == 1
        assert "error[structural]" in result.output
        assert "Method 'pair' is neither a getter nor a putter" in result.output

    def test_warnings_pass_unless_strict(self, workspace: Path) -> None:
        write_prefs(workspace, GETTER_ONLY)

        relaxed = runner.invoke(app, ["--no-dotenv", "generate", "src"])
        strict = runner.invoke(app, ["--no-dotenv", "generate", "src", "--strict"])

        assert relaxed.exit_code == 0
        assert "warning[consistency]: No putter found for getter 'username'" in relaxed.output
        assert strict.exit_code == 1

    def test_no_introspection_reports_unresolved_ancestor(self, workspace: Path) -> None:
        write_prefs(workspace, MISSING_ANCESTOR)

        result = runner.invoke(app, ["--no-dotenv", "generate", "src", "--no-introspection"])

        assert result.exit_code == 1
        assert "Could not load interface 'elsewhere.prefs.BasePrefs' for generation." in result.output

    def test_emission_failure(self, workspace: Path) -> None:
        write_prefs(workspace, PREFS)
        (workspace / "build").write_text("not a directory")

        result = runner.invoke(app, ["--no-dotenv", "generate", "src", "--out", "build"])

        assert result.exit_code == 1
        assert "Error: Failed to write" in result.output


class TestSettingsFile:
    def test_missing_settings_file(self, workspace: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "generate", "--settings", "missing.yaml"])
        assert result.exit_code == 1
        assert "Settings file not found" in result.output

    def test_settings_file_applies(self, workspace: Path) -> None:
        write_prefs(workspace, PREFS)
        (workspace / "typedprefs.yaml").write_text("output:\n  class_suffix: Generated\n  module_suffix: _generated\n")

        result = runner.invoke(app, ["--no-dotenv", "generate"])

        assert result.exit_code == 0, result.output
        assert "class AppPrefsGenerated(" in (workspace / "src" / "app" / "app_prefs_generated.py").read_text()

    def test_fail_on_warning_from_settings(self, workspace: Path) -> None:
        write_prefs(workspace, GETTER_ONLY)
        (workspace / "typedprefs.yaml").write_text("fail_on_warning: true\n")

        result = runner.invoke(app, ["--no-dotenv", "check"])

        assert result.exit_code == 1

    def test_invalid_settings(self, workspace: Path) -> None:
        (workspace / "typedprefs.yaml").write_text("output:\n  class_suffix: '-'\n")

        result = runner.invoke(app, ["--no-dotenv", "check"])

        assert result.exit_code == 1
        assert "Configuration errors:" in result.output
        assert "output.class_suffix" in result.output

    def test_env_file_overrides(self, workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TYPEDPREFS_FAIL_ON_WARNING", raising=False)
        write_prefs(workspace, GETTER_ONLY)
        (workspace / "typedprefs.yaml").write_text("fail_on_warning: false\n")
        (workspace / "local.env").write_text("TYPEDPREFS_FAIL_ON_WARNING=true\n")

        try:
            result = runner.invoke(app, ["--env-file", "local.env", "check"])
        finally:
            # load_dotenv writes os.environ directly
            os.environ.pop("TYPEDPREFS_FAIL_ON_WARNING", None)

        assert result.exit_code == 1

    def test_environment_applies_without_settings_file(self, workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        write_prefs(workspace, PREFS)
        monkeypatch.setenv("TYPEDPREFS_OUTPUT__CLASS_SUFFIX", "Generated")

        result = runner.invoke(app, ["--no-dotenv", "generate"])

        assert result.exit_code == 0, result.output
        assert "class AppPrefsGenerated(" in (workspace / "src" / "app" / "app_prefs_impl.py").read_text()

    def test_missing_env_file(self, workspace: Path) -> None:
        result = runner.invoke(app, ["--env-file", "nope.env", "check"])
        assert result.exit_code == 1
        assert ".env file not found" in result.output


class TestCheckCommand:
    def test_reports_modules_without_writing(self, workspace: Path) -> None:
        write_prefs(workspace, PREFS)

        result = runner.invoke(app, ["--no-dotenv", "check", "src"])

        assert result.exit_code == 0, result.output
        assert "ok app.app_prefs_impl" in result.output
        assert not (workspace / "src" / "app" / "app_prefs_impl.py").exists()

    def test_reports_errors(self, workspace: Path) -> None:
        write_prefs(workspace, BROKEN)
        result = runner.invoke(app, ["--no-dotenv", "check", "src"])
        assert result.exit_code == 1
        assert "0 warning(s)" in result.output
