"""
Build orchestration for ninjaforge projects.

This module coordinates one build from a configured Workspace to a finished
artifact:
- Option validation and normalization
- Output naming
- Source discovery, graph construction and script rendering
- Cache/build directory setup and script writing
- Handing the script to the external ninja executor

Validation and translation happen before anything touches the disk, so a
configuration error never leaves a half-written script behind.
"""

import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from ..config.platform_utils import HostPlatform
from .executor import NinjaExecutor
from .graph import BUILD_DIR, OBJECTS_DIR, apply_output_suffix
from .script_cache import ScriptCache
from .script_generator import CACHE_DIR, SCRIPT_NAME, GeneratedScript, ScriptGenerator

if TYPE_CHECKING:
    from ..workspace import Workspace


@dataclass
class BuildResult:
    """Result of a complete build operation."""

    success: bool
    output_path: Path
    script_path: Path
    script_written: bool
    source_count: int
    build_time: float
    message: str


class BuildOrchestrator:
    """
    Orchestrates the build of one workspace.

    Phases:
    1. Validate and normalize build options
    2. Generate the build script (discovery, graph, serialization)
    3. Create the cache and build directories, write the script
    4. Run ninja on the script

    Example usage:
        orchestrator = BuildOrchestrator(verbose=True)
        result = orchestrator.build(workspace)
        print(f"Output: {result.output_path}")
    """

    def __init__(
        self,
        verbose: bool = False,
        host: Optional[HostPlatform] = None,
        ninja: Optional[str] = None
    ):
        """
        Initialize build orchestrator.

        Args:
            verbose: Enable verbose output
            host: Platform to generate for (defaults to the current one)
            ninja: ninja executable override
        """
        self.verbose = verbose
        self.host = host or HostPlatform.current()
        self.ninja = ninja

    def prepare(self, workspace: "Workspace") -> GeneratedScript:
        """
        Validate the workspace and render its build script without writing it.

        Raises:
            ToolchainPlatformMismatch: If the toolchain cannot run on the host
            InvalidStandardValue: If the language standard cannot be translated
            UnhandledOutputKind: If the output kind has no link rule
        """
        options = workspace.options
        options.validate(self.host)
        options.normalize()

        output_name = apply_output_suffix(workspace.output_name, options.output_kind, self.host)
        generated = ScriptGenerator(workspace, host=self.host).generate(output_name)

        if generated.sources.missing_roots:
            logging.warning(
                f"{len(generated.sources.missing_roots)} source search root(s) were skipped"
            )
        if not generated.graph.compile_edges:
            logging.warning("no source files found, the build has nothing to compile")

        return generated

    def build(self, workspace: "Workspace", run_executor: bool = True) -> BuildResult:
        """
        Execute the build.

        Args:
            workspace: Configured workspace (consumed by this call)
            run_executor: Run ninja after writing the script

        Returns:
            BuildResult with output paths and timing

        Raises:
            NinjaForgeError: If any fatal phase fails
        """
        start_time = time.time()
        root = Path(workspace.root).resolve()

        if self.verbose:
            print("[1/3] Generating build script...")

        generated = self.prepare(workspace)

        if self.verbose:
            print(f"      Compiler: {workspace.options.compiler.executable}")
            print(f"      Sources: {len(generated.graph.compile_edges)}")
            print(f"      Output: {BUILD_DIR}/{generated.output_name}")
            print("[2/3] Writing build script...")

        cache = ScriptCache(root)
        cache.ensure_directories(root / OBJECTS_DIR)
        written = cache.write_script(generated.text)

        if self.verbose and not written:
            print("      Using cached build script (no changes detected)")

        if workspace.options.print_build_script:
            print(f"--- {SCRIPT_NAME} ---\n{generated.text}\n-------------------")

        output_path = root / BUILD_DIR / generated.output_name

        if run_executor:
            if self.verbose:
                print("[3/3] Running ninja...")
            NinjaExecutor(root, ninja=self.ninja, jobs=workspace.options.jobs, verbose=self.verbose).run()
            message = "Build successful"
        else:
            message = "Build script generated"

        return BuildResult(
            success=True,
            output_path=output_path,
            script_path=cache.script_path,
            script_written=written,
            source_count=len(generated.graph.compile_edges),
            build_time=time.time() - start_time,
            message=message,
        )


def clean_project(project_dir: Path) -> List[Path]:
    """Remove the cache and build directories of a project.

    Returns:
        Directories that were removed
    """
    removed = []
    for name in (CACHE_DIR, BUILD_DIR):
        target = Path(project_dir) / name
        if target.exists():
            logging.debug(f"Removing {target}")
            shutil.rmtree(target)
            removed.append(target)
    return removed
