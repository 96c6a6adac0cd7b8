"""
Command-line interface for ninjaforge.

This module provides the `ninjaforge` CLI tool for building C++ projects
described by a ninjaforge.ini file.
"""

import argparse
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ninjaforge import __version__
from ninjaforge.build import BuildOrchestrator, BuildResult, clean_project
from ninjaforge.cli_utils import (
    ErrorFormatter,
    PathValidator,
    ProjectLocator,
    ProjectScaffolder,
    reported_errors,
)
from ninjaforge.config import OutputKind, ProjectConfig
from ninjaforge.config.ini_parser import CONFIG_FILE_NAME
from ninjaforge.log_setup import setup_logging
from ninjaforge.workspace import Workspace


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    project_dir: Path
    profile: Optional[str] = None
    backtrack: bool = False
    clean: bool = False
    verbose: bool = False
    dry_run: bool = False


@dataclass
class RunArgs:
    """Arguments for the run command."""

    project_dir: Path
    profile: Optional[str] = None
    backtrack: bool = False
    clean: bool = False
    verbose: bool = False
    program_args: List[str] = field(default_factory=list)


@dataclass
class CleanArgs:
    project_dir: Path
    backtrack: bool = False
    verbose: bool = False


@dataclass
class NewArgs:
    name: Path
    compiler: str = "clang"


def _load_workspace(project_dir: Path, profile: Optional[str], backtrack: bool) -> Workspace:
    project_dir = ProjectLocator.find_project_dir(project_dir, backtrack=backtrack)
    return ProjectConfig(project_dir / CONFIG_FILE_NAME).to_workspace(profile)


def _build_workspace(
    workspace: Workspace,
    profile: Optional[str],
    clean: bool,
    verbose: bool,
    run_executor: bool = True,
) -> BuildResult:
    if clean:
        for removed in clean_project(workspace.root):
            if verbose:
                print(f"Removed {removed}")

    if verbose:
        print(f"Building project: {workspace.root}")
        print(f"Profile: {profile or 'default'}")
        print()
    else:
        print(f"Building {workspace.output_name}...")

    return BuildOrchestrator(verbose=verbose).build(workspace, run_executor=run_executor)


def build_command(args: BuildArgs) -> None:
    """Build a project.

    Examples:
        ninjaforge build                 # Build project in current directory
        ninjaforge build examples/hello  # Build specific project
        ninjaforge build -p release      # Build with the 'release' profile
        ninjaforge build --clean         # Clean build
        ninjaforge build --dry-run       # Only write .ninjaforge/build.ninja
    """
    print(f"ninjaforge v{__version__}")

    with reported_errors(args.verbose):
        workspace = _load_workspace(args.project_dir, args.profile, args.backtrack)
        result = _build_workspace(
            workspace,
            args.profile,
            args.clean,
            args.verbose,
            run_executor=not args.dry_run,
        )

    ErrorFormatter.print_success(f"{result.message}!")
    print()
    if args.dry_run:
        print(f"Build script: {result.script_path}")
    else:
        print(f"Output: {result.output_path}")
    print(f"Build time: {result.build_time:.2f}s")
    sys.exit(0)


def run_command(args: RunArgs) -> None:
    """Build a project and run the produced executable.

    Arguments after `--` are forwarded to the program and its exit code
    becomes the exit code of this command.

    Examples:
        ninjaforge run
        ninjaforge run -p release -- --input data.txt
    """
    with reported_errors(args.verbose):
        workspace = _load_workspace(args.project_dir, args.profile, args.backtrack)
        kind = workspace.options.output_kind
        if kind is not OutputKind.EXECUTABLE:
            ErrorFormatter.fail(f"cannot run a {kind.value} output, only executables can be run")

        result = _build_workspace(workspace, args.profile, args.clean, args.verbose)

        if args.verbose:
            print(f"Running {result.output_path} {' '.join(args.program_args)}")
        print()

        completed = subprocess.run(
            [str(result.output_path), *args.program_args],
            cwd=str(workspace.root),
        )

    sys.exit(completed.returncode)


def clean_command(args: CleanArgs) -> None:
    """Remove the .ninjaforge/ and build/ directories of a project."""
    with reported_errors(args.verbose):
        project_dir = ProjectLocator.find_project_dir(args.project_dir, backtrack=args.backtrack)
        removed = clean_project(project_dir)

    for path in removed:
        print(f"Removed {path}")
    if not removed:
        print("Nothing to clean")
    sys.exit(0)


def new_command(args: NewArgs) -> None:
    """Scaffold a new project directory."""
    try:
        target = ProjectScaffolder.create(args.name, compiler=args.compiler)
    except FileExistsError as e:
        ErrorFormatter.fail(f"cannot create project: {e}")

    ErrorFormatter.print_success(f"Created project {target.name}")
    print()
    print(f"  cd {target}")
    print("  ninjaforge run")
    sys.exit(0)


def _add_project_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    subparser.add_argument(
        "-b",
        "--backtrack",
        action="store_true",
        help=f"Search parent directories for {CONFIG_FILE_NAME}",
    )
    subparser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress, full command lines and debug diagnostics",
    )


def _add_build_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "-p",
        "--profile",
        default=None,
        help="Profile section to layer over [options] (e.g. release)",
    )
    subparser.add_argument(
        "-c",
        "--clean",
        action="store_true",
        help="Remove .ninjaforge/ and build/ before building",
    )


def _create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ninjaforge",
        description="ninjaforge - declarative C++ builds on top of ninja",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"ninjaforge {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    build_parser = subparsers.add_parser("build", help="Generate the build script and build")
    _add_project_arguments(build_parser)
    _add_build_arguments(build_parser)
    build_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Write .ninjaforge/build.ninja without running ninja",
    )

    run_parser = subparsers.add_parser("run", help="Build and run the executable")
    _add_project_arguments(run_parser)
    _add_build_arguments(run_parser)

    clean_parser = subparsers.add_parser("clean", help="Remove build artifacts")
    _add_project_arguments(clean_parser)

    new_parser = subparsers.add_parser("new", help="Create a new project")
    new_parser.add_argument("name", type=Path, help="Directory of the new project")
    new_parser.add_argument(
        "--compiler",
        default="clang",
        choices=["clang", "gcc", "msvc"],
        help="Compiler written into the new ninjaforge.ini (default: clang)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """ninjaforge - declarative C++ builds on top of ninja."""
    argv = list(sys.argv[1:] if argv is None else argv)

    # Everything after `--` belongs to the program started by `run`
    program_args: List[str] = []
    if "--" in argv:
        split = argv.index("--")
        argv, program_args = argv[:split], argv[split + 1:]

    parser = _create_parser()
    parsed_args = parser.parse_args(argv)

    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    if program_args and parsed_args.command != "run":
        parser.error("arguments after '--' are only accepted by 'run'")

    setup_logging(getattr(parsed_args, "verbose", False))

    if hasattr(parsed_args, "project_dir"):
        PathValidator.validate_project_dir(parsed_args.project_dir)

    if parsed_args.command == "build":
        build_command(
            BuildArgs(
                project_dir=parsed_args.project_dir,
                profile=parsed_args.profile,
                backtrack=parsed_args.backtrack,
                clean=parsed_args.clean,
                verbose=parsed_args.verbose,
                dry_run=parsed_args.dry_run,
            )
        )
    elif parsed_args.command == "run":
        run_command(
            RunArgs(
                project_dir=parsed_args.project_dir,
                profile=parsed_args.profile,
                backtrack=parsed_args.backtrack,
                clean=parsed_args.clean,
                verbose=parsed_args.verbose,
                program_args=program_args,
            )
        )
    elif parsed_args.command == "clean":
        clean_command(
            CleanArgs(
                project_dir=parsed_args.project_dir,
                backtrack=parsed_args.backtrack,
                verbose=parsed_args.verbose,
            )
        )
    elif parsed_args.command == "new":
        new_command(NewArgs(name=parsed_args.name, compiler=parsed_args.compiler))


if __name__ == "__main__":
    main()
