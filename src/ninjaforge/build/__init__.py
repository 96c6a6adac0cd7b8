"""
Build system components for ninjaforge.

This module provides the build engine:
- Toolchain strategies translating options into flags
- Source file discovery
- Build graph construction
- Script building and ninja serialization
- Build orchestration and executor invocation
"""

from .executor import NinjaExecutor
from .flag_builder import FlagBuilder
from .graph import BuildGraph, GraphBuilder, GraphEdge, apply_output_suffix, link_rule_for
from .orchestrator import BuildOrchestrator, BuildResult, clean_project
from .script_builder import NinjaScriptBuilder, ScriptBuilder
from .script_cache import ScriptCache
from .script_generator import ScriptGenerator
from .source_scanner import SourceCollection, SourceScanner
from .toolchain import MsvcToolchain, Toolchain, UnixToolchain, get_toolchain

__all__ = [
    "BuildGraph",
    "BuildOrchestrator",
    "BuildResult",
    "FlagBuilder",
    "GraphBuilder",
    "GraphEdge",
    "MsvcToolchain",
    "NinjaExecutor",
    "NinjaScriptBuilder",
    "ScriptBuilder",
    "ScriptCache",
    "ScriptGenerator",
    "SourceCollection",
    "SourceScanner",
    "Toolchain",
    "UnixToolchain",
    "apply_output_suffix",
    "clean_project",
    "get_toolchain",
    "link_rule_for",
]
