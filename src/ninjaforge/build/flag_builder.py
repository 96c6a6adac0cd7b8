"""Compilation Flag Builder.

This module joins the toolchain's flag translation with the workspace's
include/definition/library lists into the two flag strings the generated
script stores as variables.

Design:
    - cflags: option flags, standard, output type, includes, force includes,
      definitions
    - lflags: option flags, output link flags, library paths, libraries,
      user linker flags
    - MSVC link flags are handed to link.exe through a leading /link
"""

from typing import TYPE_CHECKING, Dict

from ..config.options import ToolchainFamily
from .toolchain import Toolchain, join_flags

if TYPE_CHECKING:
    from ..workspace import Workspace


class FlagBuilder:
    """Builds the compile and link flag strings for a workspace."""

    def __init__(self, workspace: "Workspace", toolchain: Toolchain):
        """Initialize flag builder.

        Args:
            workspace: Workspace providing options and path lists
            toolchain: Toolchain strategy used for translation
        """
        self.workspace = workspace
        self.toolchain = toolchain

    def compile_flags(self) -> str:
        ws = self.workspace
        tc = self.toolchain
        return join_flags([
            tc.compile_flags(ws.options),
            tc.standard_flag(ws.options.standard),
            tc.output_type_flags(ws.options.output_kind),
            tc.include_directory_flags(ws.include_directories),
            tc.system_include_directory_flags(ws.system_include_directories),
            tc.force_include_flags(ws.force_includes),
            tc.definition_flags(ws.definitions),
        ])

    def link_flags(self) -> str:
        ws = self.workspace
        tc = self.toolchain
        flags = join_flags([
            tc.link_flags(ws.options),
            tc.output_link_flags(ws.options.output_kind),
            tc.library_directory_flags(ws.library_directories),
            tc.library_file_flags(ws.libraries),
            join_flags(ws.linker_flags),
        ])
        if tc.family is ToolchainFamily.MSVC and flags:
            flags = f"/link {flags}"
        return flags

    def build_flags(self) -> Dict[str, str]:
        """Build both flag strings.

        Returns:
            Dictionary with 'cflags' and 'lflags' keys
        """
        return {
            "cflags": self.compile_flags(),
            "lflags": self.link_flags(),
        }
