"""Tests for the ninjaforge command-line interface."""

import logging
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from ninjaforge.build.orchestrator import BuildResult
from ninjaforge.cli import main
from ninjaforge.config.options import OptimizeLevel
from ninjaforge.errors import ExecutorInvocationFailure, ToolchainPlatformMismatch
from ninjaforge.log_setup import DiagnosticFormatter

CONFIG = """[project]
name = hello
sources = src

[options]
compiler = gcc

[profile:release]
optimization = speed
"""


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop the CLI's stderr handler after each test."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler.formatter, DiagnosticFormatter):
            root.removeHandler(handler)


@pytest.fixture
def project_dir(tmp_path):
    """Create a project with a ninjaforge.ini so CLI lookup passes."""
    (tmp_path / "ninjaforge.ini").write_text(CONFIG)
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.cpp").write_text("int main() { return 0; }\n")
    return tmp_path


@pytest.fixture
def success_result(project_dir):
    """Create successful build result."""
    return BuildResult(
        success=True,
        output_path=project_dir / "build" / "hello",
        script_path=project_dir / ".ninjaforge" / "build.ninja",
        script_written=True,
        source_count=1,
        build_time=1.25,
        message="Build successful",
    )


@pytest.fixture
def mock_orchestrator():
    """Mock BuildOrchestrator used by the CLI."""
    with patch("ninjaforge.cli.BuildOrchestrator") as mock_orch_class:
        mock_instance = MagicMock()
        mock_orch_class.return_value = mock_instance
        yield mock_instance


class TestCLIBuild:
    """Tests for the 'ninjaforge build' command."""

    def test_build_success(self, mock_orchestrator, success_result, project_dir, monkeypatch, capsys):
        mock_orchestrator.build.return_value = success_result
        monkeypatch.setattr(sys, "argv", ["ninjaforge", "build", str(project_dir)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "Build successful" in captured.out
        assert "build/hello" in captured.out.replace("\\", "/")

        mock_orchestrator.build.assert_called_once()
        workspace = mock_orchestrator.build.call_args.args[0]
        assert workspace.output_name == "hello"
        assert workspace.source_directories == ["src"]
        assert mock_orchestrator.build.call_args.kwargs["run_executor"] is True

    def test_build_with_profile(self, mock_orchestrator, success_result, project_dir, monkeypatch):
        mock_orchestrator.build.return_value = success_result
        monkeypatch.setattr(sys, "argv", ["ninjaforge", "build", "-p", "release", str(project_dir)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 0
        workspace = mock_orchestrator.build.call_args.args[0]
        assert workspace.options.optimization is OptimizeLevel.SPEED

    def test_build_unknown_profile(self, mock_orchestrator, project_dir, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["ninjaforge", "build", "--profile", "nope", str(project_dir)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        mock_orchestrator.build.assert_not_called()
        assert "[ninjaforge] error: Profile 'nope' not found" in capsys.readouterr().err

    def test_build_dry_run(self, mock_orchestrator, success_result, project_dir, monkeypatch, capsys):
        success_result.message = "Build script generated"
        mock_orchestrator.build.return_value = success_result
        monkeypatch.setattr(sys, "argv", ["ninjaforge", "build", "--dry-run", str(project_dir)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 0
        assert mock_orchestrator.build.call_args.kwargs["run_executor"] is False
        assert "Build script:" in capsys.readouterr().out

    def test_build_clean(self, mock_orchestrator, success_result, project_dir, monkeypatch):
        (project_dir / ".ninjaforge").mkdir()
        (project_dir / "build").mkdir()
        mock_orchestrator.build.return_value = success_result
        monkeypatch.setattr(sys, "argv", ["ninjaforge", "build", "-c", str(project_dir)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 0
        assert not (project_dir / ".ninjaforge").exists()
        assert not (project_dir / "build").exists()

    def test_build_backtrack(self, mock_orchestrator, success_result, project_dir, monkeypatch):
        nested = project_dir / "src" / "deep"
        nested.mkdir()
        mock_orchestrator.build.return_value = success_result
        monkeypatch.setattr(sys, "argv", ["ninjaforge", "build", "-b", str(nested)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 0
        workspace = mock_orchestrator.build.call_args.args[0]
        assert workspace.root == project_dir.resolve()

    def test_build_without_config(self, mock_orchestrator, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["ninjaforge", "build", str(tmp_path)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "[ninjaforge] error: ninjaforge.ini not found" in capsys.readouterr().err

    def test_build_engine_error(self, mock_orchestrator, project_dir, monkeypatch, capsys):
        mock_orchestrator.build.side_effect = ToolchainPlatformMismatch(
            "MSVC compiler is only supported on Windows (host: Linux)"
        )
        monkeypatch.setattr(sys, "argv", ["ninjaforge", "build", str(project_dir)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "[ninjaforge] error: MSVC compiler is only supported on Windows" in capsys.readouterr().err

    def test_build_executor_failure(self, mock_orchestrator, project_dir, monkeypatch, capsys):
        mock_orchestrator.build.side_effect = ExecutorInvocationFailure("build failed.", returncode=1)
        monkeypatch.setattr(sys, "argv", ["ninjaforge", "build", str(project_dir)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "[ninjaforge] error: build failed." in capsys.readouterr().err

    def test_build_keyboard_interrupt(self, mock_orchestrator, project_dir, monkeypatch):
        mock_orchestrator.build.side_effect = KeyboardInterrupt()
        monkeypatch.setattr(sys, "argv", ["ninjaforge", "build", str(project_dir)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 130

    def test_build_unexpected_error(self, mock_orchestrator, project_dir, monkeypatch, capsys):
        mock_orchestrator.build.side_effect = RuntimeError("boom")
        monkeypatch.setattr(sys, "argv", ["ninjaforge", "build", str(project_dir)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "unexpected RuntimeError: boom" in capsys.readouterr().err

    def test_build_invalid_path(self, tmp_path, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["ninjaforge", "build", str(tmp_path / "missing")])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 2

    def test_program_args_only_for_run(self, project_dir):
        with pytest.raises(SystemExit) as exc_info:
            main(["build", str(project_dir), "--", "x"])

        assert exc_info.value.code == 2


class TestCLIRun:
    """Tests for the 'ninjaforge run' command."""

    def test_run_forwards_args_and_exit_code(self, mock_orchestrator, success_result, project_dir):
        mock_orchestrator.build.return_value = success_result

        with patch("ninjaforge.cli.subprocess.run", return_value=MagicMock(returncode=3)) as run:
            with pytest.raises(SystemExit) as exc_info:
                main(["run", str(project_dir), "--", "--input", "data.txt"])

        assert exc_info.value.code == 3
        run.assert_called_once_with(
            [str(success_result.output_path), "--input", "data.txt"],
            cwd=str(project_dir.resolve()),
        )

    def test_run_library_refused(self, mock_orchestrator, project_dir, capsys):
        (project_dir / "ninjaforge.ini").write_text(CONFIG.replace("sources = src", "sources = src\noutput = static"))

        with patch("ninjaforge.cli.subprocess.run") as run:
            with pytest.raises(SystemExit) as exc_info:
                main(["run", str(project_dir)])

        assert exc_info.value.code == 1
        run.assert_not_called()
        mock_orchestrator.build.assert_not_called()
        assert "only executables can be run" in capsys.readouterr().err

    def test_run_build_failure(self, mock_orchestrator, project_dir):
        mock_orchestrator.build.side_effect = ExecutorInvocationFailure("build failed.", returncode=1)

        with patch("ninjaforge.cli.subprocess.run") as run:
            with pytest.raises(SystemExit) as exc_info:
                main(["run", str(project_dir)])

        assert exc_info.value.code == 1
        run.assert_not_called()


class TestCLIClean:
    def test_clean(self, project_dir, capsys):
        (project_dir / ".ninjaforge").mkdir()
        (project_dir / "build").mkdir()

        with pytest.raises(SystemExit) as exc_info:
            main(["clean", str(project_dir)])

        assert exc_info.value.code == 0
        assert not (project_dir / ".ninjaforge").exists()
        assert "Removed" in capsys.readouterr().out

    def test_clean_nothing(self, project_dir, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["clean", str(project_dir)])

        assert exc_info.value.code == 0
        assert "Nothing to clean" in capsys.readouterr().out


class TestCLINew:
    def test_new_project(self, tmp_path, capsys):
        target = tmp_path / "widget"

        with pytest.raises(SystemExit) as exc_info:
            main(["new", str(target)])

        assert exc_info.value.code == 0
        assert (target / "src" / "main.cpp").exists()
        assert "name = widget" in (target / "ninjaforge.ini").read_text()

    def test_new_refuses_existing(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["new", str(tmp_path)])

        assert exc_info.value.code == 1
        assert "cannot create project: path already exists" in capsys.readouterr().err


class TestCLIMisc:
    def test_no_command_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 0
        assert "usage: ninjaforge" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "ninjaforge 0.1.0" in capsys.readouterr().out

    def test_default_project_dir_is_cwd(self, mock_orchestrator, success_result, project_dir, monkeypatch):
        mock_orchestrator.build.return_value = success_result
        monkeypatch.chdir(project_dir)

        with pytest.raises(SystemExit) as exc_info:
            main(["build"])

        assert exc_info.value.code == 0
        workspace = mock_orchestrator.build.call_args.args[0]
        assert workspace.root == Path(project_dir).resolve()
