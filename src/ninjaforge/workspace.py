"""Workspace: the root aggregate of one build invocation.

A Workspace owns the build options, the project root, the output base name
and every path/flag list the generated script is built from. It is
configured through additive add_* calls and handed to the orchestrator once.

Usage:
    ws = Workspace(root=Path("."))
    ws.add_source_directories("src")
    ws.add_includes("include")
    ws.options.compiler = CompilerKind.GCC
    ws.options.enable_recommended_warnings()
    result = ws.build()
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .config.options import BuildOptions


@dataclass
class Workspace:
    options: BuildOptions = field(default_factory=BuildOptions)
    root: Path = field(default_factory=Path.cwd)
    output_name: str = ""

    build_files: List[str] = field(default_factory=list)
    source_directories: List[str] = field(default_factory=list)
    include_directories: List[str] = field(default_factory=list)
    system_include_directories: List[str] = field(default_factory=list)
    definitions: List[str] = field(default_factory=list)
    force_includes: List[str] = field(default_factory=list)
    library_directories: List[str] = field(default_factory=list)
    libraries: List[str] = field(default_factory=list)
    linker_flags: List[str] = field(default_factory=list)
    resource_file: Optional[str] = None

    def __post_init__(self):
        self.root = Path(self.root)
        if not self.output_name:
            self.output_name = self.root.resolve().name

    def add_build_files(self, *files: str) -> None:
        self.build_files.extend(str(f) for f in files)

    def add_source_directories(self, *paths: str) -> None:
        self.source_directories.extend(str(p) for p in paths)

    def add_includes(self, *folders: str) -> None:
        self.include_directories.extend(str(f) for f in folders)

    def add_system_includes(self, *folders: str) -> None:
        self.system_include_directories.extend(str(f) for f in folders)

    def add_definitions(self, *definitions: str) -> None:
        self.definitions.extend(definitions)

    def add_force_includes(self, *headers: str) -> None:
        self.force_includes.extend(str(h) for h in headers)

    def add_library_directories(self, *folders: str) -> None:
        self.library_directories.extend(str(f) for f in folders)

    def add_libraries(self, *libraries: str) -> None:
        self.libraries.extend(libraries)

    def add_linker_flags(self, *flags: str) -> None:
        self.linker_flags.extend(flags)

    def set_resource_file(self, path: Optional[str]) -> None:
        """Set the resource script (ignored by toolchains without a resource compiler)."""
        self.resource_file = str(path) if path else None

    def set_build_options(self, options: BuildOptions) -> None:
        self.options = options

    def build(self, run_executor: bool = True, verbose: bool = False):
        """Generate the build script and run the build.

        Returns:
            BuildResult from the orchestrator
        """
        from .build.orchestrator import BuildOrchestrator

        return BuildOrchestrator(verbose=verbose).build(self, run_executor=run_executor)
