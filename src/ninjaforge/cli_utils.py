"""CLI utility functions for ninjaforge.

This module provides common utilities used across CLI commands including:
- Locating the project directory from ninjaforge.ini
- Scaffolding new projects
- Reporting outcomes and mapping failures to exit codes

Exit codes:
    0   success
    1   build, configuration or program failure
    2   invalid project path
    130 interrupted (Ctrl-C)
"""

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ninjaforge.config.ini_parser import CONFIG_FILE_NAME
from ninjaforge.errors import NinjaForgeError

EXIT_FAILURE = 1
EXIT_INVALID_PATH = 2
EXIT_INTERRUPTED = 130

MAIN_TEMPLATE = """#include <iostream>

auto main() -> int {
    std::cout << "hello, ninjaforge!" << '\\n';
    return 0;
}
"""

CONFIG_TEMPLATE = """[project]
name = {name}
output = executable
sources = src

[options]
compiler = {compiler}
standard = 20
recommended_warnings = yes
enable = warnings_are_errors

[profile:release]
optimization = speed
"""


class ProjectLocator:
    """Finds the project directory holding ninjaforge.ini."""

    @staticmethod
    def find_project_dir(start_dir: Path, backtrack: bool = False) -> Path:
        """Find the directory containing ninjaforge.ini.

        Args:
            start_dir: Directory (or ninjaforge.ini path) to start from
            backtrack: Also search parent directories

        Returns:
            Resolved project directory

        Raises:
            FileNotFoundError: If no ninjaforge.ini is found
        """
        current = Path(start_dir).expanduser().resolve()
        if current.name == CONFIG_FILE_NAME and current.is_file():
            return current.parent

        while True:
            candidate = current / CONFIG_FILE_NAME
            logging.debug(f"Checking for build configuration at: {candidate}")
            if candidate.is_file():
                return current

            if not backtrack or current.parent == current:
                where = "current or parent directories" if backtrack else str(current)
                raise FileNotFoundError(f"{CONFIG_FILE_NAME} not found in {where}")

            current = current.parent


class ProjectScaffolder:
    """Creates the skeleton of a new project."""

    @staticmethod
    def create(target_dir: Path, compiler: str = "clang") -> Path:
        """Create src/main.cpp and ninjaforge.ini in a new directory.

        Raises:
            FileExistsError: If the target path already exists
        """
        target_dir = Path(target_dir)
        if target_dir.exists():
            raise FileExistsError(f"path already exists '{target_dir}'")

        (target_dir / "src").mkdir(parents=True)
        (target_dir / "src" / "main.cpp").write_text(MAIN_TEMPLATE, encoding="utf-8")
        (target_dir / CONFIG_FILE_NAME).write_text(
            CONFIG_TEMPLATE.format(name=target_dir.name, compiler=compiler),
            encoding="utf-8",
        )
        return target_dir


class ErrorFormatter:
    """Reports command outcomes.

    Successes and notices are colored lines on stdout. Failures go through
    the diagnostic logger, so they reach stderr with the [ninjaforge] prefix
    like every other diagnostic.
    """

    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_success(message: str) -> None:
        print()
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_notice(message: str) -> None:
        print()
        print(f"{ErrorFormatter.YELLOW}! {message}{ErrorFormatter.RESET}")

    @staticmethod
    def fail(message: str, exit_code: int = EXIT_FAILURE) -> None:
        """Log an error diagnostic and exit.

        Raises:
            SystemExit: Always, with exit_code
        """
        logging.error(message)
        sys.exit(exit_code)

    @staticmethod
    def handle_build_error(error: NinjaForgeError) -> None:
        ErrorFormatter.fail(str(error))

    @staticmethod
    def handle_file_not_found(error: FileNotFoundError) -> None:
        ErrorFormatter.fail(
            f"{error} (run inside a project with a {CONFIG_FILE_NAME}, or pass -b to search parent directories)"
        )

    @staticmethod
    def handle_permission_error(error: PermissionError) -> None:
        ErrorFormatter.fail(f"permission denied: {error}")

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        ErrorFormatter.print_notice("Build interrupted")
        sys.exit(EXIT_INTERRUPTED)

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Report an error ninjaforge has no specific handling for.

        Args:
            error: The exception to report
            verbose: Include the traceback
        """
        logging.error(f"unexpected {type(error).__name__}: {error}", exc_info=verbose)
        sys.exit(EXIT_FAILURE)


@contextmanager
def reported_errors(verbose: bool = False) -> Iterator[None]:
    """Map exceptions raised by a command body to diagnostics and exit codes.

    SystemExit raised inside the block passes through untouched.
    """
    try:
        yield
    except NinjaForgeError as e:
        ErrorFormatter.handle_build_error(e)
    except FileNotFoundError as e:
        ErrorFormatter.handle_file_not_found(e)
    except PermissionError as e:
        ErrorFormatter.handle_permission_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, verbose)


class PathValidator:
    @staticmethod
    def validate_project_dir(project_dir: Path) -> None:
        """Exit with EXIT_INVALID_PATH unless project_dir is an existing directory."""
        if not project_dir.exists():
            ErrorFormatter.fail(f"path does not exist -> '{project_dir}'", EXIT_INVALID_PATH)
        if not project_dir.is_dir():
            ErrorFormatter.fail(f"path is not a directory -> '{project_dir}'", EXIT_INVALID_PATH)
