"""Build graph construction.

Maps the merged source list and output settings onto compile edges, an
optional resource-compile edge, and exactly one link edge. The resulting
BuildGraph is plain data; the script generator turns it into script records.
"""

import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import List, Optional, Sequence

from ..config.options import OutputKind
from ..config.platform_utils import HostPlatform
from ..errors import NinjaForgeError, UnhandledOutputKind
from .toolchain import Toolchain

BUILD_DIR = "build"
OBJECTS_DIR = f"{BUILD_DIR}/objects"
PARENT_DIR_PLACEHOLDER = "__"

COMPILE_RULE = "compile"
RESOURCE_RULE = "compile_rc"

LINK_RULES = {
    OutputKind.EXECUTABLE: "link_exe",
    OutputKind.STATIC_LIBRARY: "link_static",
    OutputKind.DYNAMIC_LIBRARY: "link_shared",
}


class BuildGraphError(NinjaForgeError):
    """Raised when a constructed graph violates its invariants."""
    pass


@dataclass(frozen=True)
class GraphEdge:
    """One output produced from its inputs by a named rule."""

    output: str
    rule: str
    inputs: tuple


@dataclass
class BuildGraph:
    compile_edges: List[GraphEdge] = field(default_factory=list)
    link_edge: Optional[GraphEdge] = None
    resource_edge: Optional[GraphEdge] = None

    @property
    def edges(self) -> List[GraphEdge]:
        """All edges in emission order: compiles, resource, link."""
        edges = list(self.compile_edges)
        if self.resource_edge is not None:
            edges.append(self.resource_edge)
        if self.link_edge is not None:
            edges.append(self.link_edge)
        return edges

    @property
    def object_outputs(self) -> List[str]:
        outputs = [edge.output for edge in self.compile_edges]
        if self.resource_edge is not None:
            outputs.append(self.resource_edge.output)
        return outputs

    def validate(self) -> None:
        """Check that the link edge consumes exactly the compiled outputs.

        Raises:
            BuildGraphError: If an input is dangling or an output is unused
        """
        if self.link_edge is None:
            raise BuildGraphError("Build graph has no link edge")
        outputs = self.object_outputs
        if len(set(outputs)) != len(outputs):
            clashes = sorted({out for out in outputs if outputs.count(out) > 1})
            raise BuildGraphError(f"Multiple sources compile to the same object: {clashes}")
        if list(self.link_edge.inputs) != self.object_outputs:
            dangling = set(self.link_edge.inputs) - set(self.object_outputs)
            unused = set(self.object_outputs) - set(self.link_edge.inputs)
            raise BuildGraphError(
                f"Link inputs do not match compile outputs (dangling: {sorted(dangling)}, "
                f"unused: {sorted(unused)})"
            )


def link_rule_for(kind: OutputKind) -> str:
    """Name of the link rule producing an output kind.

    Raises:
        UnhandledOutputKind: If the kind has no link rule
    """
    try:
        return LINK_RULES[kind]
    except KeyError:
        raise UnhandledOutputKind(f"No link rule for output kind: {kind!r}") from None


def object_path_for(source: str, toolchain: Toolchain) -> str:
    """Object file path for a project-relative source path.

    Sources outside the project (`../shared/x.cpp`) keep their layout under
    the objects directory, with each `..` segment renamed to `__`.
    """
    parts = [
        PARENT_DIR_PLACEHOLDER if part == ".." else part
        for part in PurePosixPath(source).parts
        if part != "/"
    ]
    relative = PurePosixPath(*parts).with_suffix(toolchain.object_extension)
    return f"{OBJECTS_DIR}/{relative}"


def apply_output_suffix(name: str, kind: OutputKind, host: HostPlatform) -> str:
    """Append the host-conventional suffix for an output kind.

    Applying this more than once yields the same name.
    """
    if kind is OutputKind.EXECUTABLE:
        suffix = host.executable_suffix
    elif kind is OutputKind.STATIC_LIBRARY:
        suffix = host.static_library_suffix
    elif kind is OutputKind.DYNAMIC_LIBRARY:
        suffix = host.shared_library_suffix
    else:
        raise UnhandledOutputKind(f"No output suffix for output kind: {kind!r}")

    if not suffix or name.lower().endswith(suffix):
        return name
    return name + suffix


class GraphBuilder:
    """Builds the compile/link graph for one toolchain."""

    def __init__(self, toolchain: Toolchain):
        self.toolchain = toolchain

    def build(
        self,
        sources: Sequence[str],
        output_name: str,
        kind: OutputKind,
        resource_file: Optional[str] = None,
    ) -> BuildGraph:
        """
        Build the graph.

        Args:
            sources: Project-relative source paths
            output_name: Final artifact file name, already suffixed
            kind: Output kind selecting the link rule
            resource_file: Optional resource script

        Returns:
            Validated BuildGraph
        """
        link_rule = link_rule_for(kind)
        graph = BuildGraph()

        for source in sources:
            graph.compile_edges.append(
                GraphEdge(object_path_for(source, self.toolchain), COMPILE_RULE, (source,))
            )

        if resource_file:
            if self.toolchain.supports_resource_compilation:
                stem = PurePosixPath(resource_file.replace("\\", "/")).stem
                graph.resource_edge = GraphEdge(f"{BUILD_DIR}/{stem}.res", RESOURCE_RULE, (resource_file,))
            else:
                logging.debug(
                    f"Resource file {resource_file} ignored: {self.toolchain!r} has no resource compiler"
                )

        graph.link_edge = GraphEdge(f"{BUILD_DIR}/{output_name}", link_rule, tuple(graph.object_outputs))
        graph.validate()
        return graph
