"""Build script generation.

Turns a Workspace into a complete script document: toolchain variables,
the compile rule with dependency tracking, the resource rule when needed,
the link rule for the requested output kind, and every graph edge.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..config.platform_utils import HostPlatform
from .flag_builder import FlagBuilder
from .graph import COMPILE_RULE, RESOURCE_RULE, BuildGraph, GraphBuilder, link_rule_for
from .script_builder import NinjaScriptBuilder, ScriptBuilder
from .source_scanner import SourceCollection, SourceScanner
from .toolchain import Toolchain, get_toolchain

if TYPE_CHECKING:
    from ..workspace import Workspace

CACHE_DIR = ".ninjaforge"
SCRIPT_NAME = "build.ninja"


@dataclass
class GeneratedScript:
    """Output of one generation pass."""

    text: str
    graph: BuildGraph
    sources: SourceCollection
    output_name: str


class ScriptGenerator:
    """Generates the build script for a workspace.

    The workspace is only read; options are expected to be validated and
    normalized already.
    """

    def __init__(
        self,
        workspace: "Workspace",
        host: Optional[HostPlatform] = None,
        toolchain: Optional[Toolchain] = None,
    ):
        self.workspace = workspace
        self.host = host or HostPlatform.current()
        self.toolchain = toolchain or get_toolchain(workspace.options.compiler, self.host)

    def create_builder(self) -> ScriptBuilder:
        return NinjaScriptBuilder(build_dir=CACHE_DIR)

    def generate(self, output_name: str) -> GeneratedScript:
        """
        Generate the script.

        Args:
            output_name: Final artifact name with its suffix applied

        Returns:
            GeneratedScript with the rendered text and the graph behind it

        Raises:
            InvalidStandardValue: If the language standard cannot be translated
            UnhandledOutputKind: If the output kind has no link rule
        """
        ws = self.workspace
        tc = self.toolchain
        kind = ws.options.output_kind

        flags = FlagBuilder(ws, tc).build_flags()
        link_rule = link_rule_for(kind)

        scanner = SourceScanner(ws.root)
        sources = scanner.scan(ws.source_directories, ws.build_files)
        resource_file = scanner.relative_to_project(ws.resource_file) if ws.resource_file else None
        graph = GraphBuilder(tc).build(sources.all_sources(), output_name, kind, resource_file)

        builder = self.create_builder()
        builder.add_variable("cxx", tc.compiler_executable)
        builder.add_variable("cflags", flags["cflags"])
        builder.add_variable("lflags", flags["lflags"])

        builder.add_rule(
            COMPILE_RULE,
            tc.compile_command,
            description="$in -> $out",
            depfile="$out.d",
            deps=tc.dependency_format,
        )
        if graph.resource_edge is not None:
            builder.add_rule(RESOURCE_RULE, tc.resource_command, description="[resource] $in -> $out")
        builder.add_rule(link_rule, tc.link_command(kind), description=_LINK_DESCRIPTIONS[link_rule])

        for edge in graph.edges:
            builder.add_build_edge(edge.output, edge.rule, edge.inputs)

        return GeneratedScript(
            text=builder.render(),
            graph=graph,
            sources=sources,
            output_name=output_name,
        )


_LINK_DESCRIPTIONS = {
    "link_exe": "[linked] -> $out",
    "link_static": "[archive] -> $out",
    "link_shared": "[shared] -> $out",
}
