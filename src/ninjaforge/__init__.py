"""ninjaforge: compiles declarative C++ build descriptions into ninja build graphs."""

from .config.options import (
    BuildOptions,
    CompilerKind,
    LanguageStandard,
    LinkMode,
    OptimizeLevel,
    OutputKind,
    SanitizerMode,
)
from .config.platform_utils import HostPlatform
from .workspace import Workspace

__version__ = "0.1.0"

__all__ = [
    "BuildOptions",
    "CompilerKind",
    "HostPlatform",
    "LanguageStandard",
    "LinkMode",
    "OptimizeLevel",
    "OutputKind",
    "SanitizerMode",
    "Workspace",
    "__version__",
]
