"""Configuration modules for ninjaforge."""

from .ini_parser import ProjectConfig
from .options import (
    COMPILE_OPTION_REGISTRY,
    BuildOptions,
    CompileOption,
    CompilerKind,
    LanguageStandard,
    LinkMode,
    OptimizeLevel,
    OutputKind,
    SanitizerMode,
    Section,
    ToolchainFamily,
)
from .platform_utils import HostPlatform

__all__ = [
    "ProjectConfig",
    "BuildOptions",
    "CompileOption",
    "COMPILE_OPTION_REGISTRY",
    "CompilerKind",
    "HostPlatform",
    "LanguageStandard",
    "LinkMode",
    "OptimizeLevel",
    "OutputKind",
    "SanitizerMode",
    "Section",
    "ToolchainFamily",
]
