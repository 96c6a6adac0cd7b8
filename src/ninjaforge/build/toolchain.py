"""Toolchain strategies.

This module defines the interface for toolchain families and their concrete
implementations. A toolchain turns BuildOptions and workspace lists into
flag strings for one command-line grammar, and knows the rule templates,
object extension and output naming that go with it.

Design:
    - One Toolchain subclass per family (MSVC-style, Unix-style)
    - Every flag method is pure: same inputs, byte-identical output
    - Unsupported flags on a family are empty strings and never leave a
      stray separator in the joined result
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional, Sequence

from ..config.options import (
    BuildOptions,
    CompilerKind,
    LanguageStandard,
    LinkMode,
    OptimizeLevel,
    OutputKind,
    SanitizerMode,
    Section,
    ToolchainFamily,
)
from ..config.platform_utils import HostPlatform
from ..errors import UnhandledOutputKind


def join_flags(tokens: Iterable[str]) -> str:
    """Join flag tokens with single spaces, dropping empty ones."""
    return " ".join(token.strip() for token in tokens if token and token.strip())


class Toolchain(ABC):
    """Interface for toolchain families.

    Subclasses provide the family-specific vocabulary through the prefix
    attributes and the abstract mapping methods; list formatting and the
    compile/link flag assembly are shared.
    """

    family: ToolchainFamily
    object_extension: str
    dependency_format: str
    supports_resource_compilation: bool = False

    INCLUDE_PREFIX: str
    SYSTEM_INCLUDE_PREFIX: str
    FORCE_INCLUDE_PREFIX: str
    LIBRARY_DIRECTORY_PREFIX: str
    DEFINITION_PREFIX: str

    def __init__(self, compiler: CompilerKind, host: Optional[HostPlatform] = None):
        """Initialize toolchain.

        Args:
            compiler: Compiler driver this toolchain emits commands for
            host: Platform the build runs on (defaults to the current one)
        """
        if compiler.family is not self.family:
            raise ValueError(
                f"{compiler.value} does not belong to the {self.family.value} toolchain family"
            )
        self.compiler = compiler
        self.host = host or HostPlatform.current()

    @property
    def compiler_executable(self) -> str:
        return self.compiler.executable

    # Option model translation

    def compile_flags(self, options: BuildOptions) -> str:
        """Flags passed to every compile command."""
        tokens = [
            option.flag_for(self.family)
            for option in options
            if option.enabled and option.applies_to(Section.COMPILE)
        ]
        tokens.append(self.link_mode_flags(options.link_mode))
        tokens.append(self.sanitizer_flag(options.sanitizer))
        tokens.append(self.optimization_flag(options.optimization))
        return join_flags(tokens)

    def link_flags(self, options: BuildOptions) -> str:
        """Flags passed to the link command."""
        tokens = [
            option.flag_for(self.family)
            for option in options
            if option.enabled and option.applies_to(Section.LINK)
        ]
        tokens.extend(self.link_time_runtime_flags(options))
        return join_flags(tokens)

    def link_time_runtime_flags(self, options: BuildOptions) -> Sequence[str]:
        """Mode flags the driver also needs at link time."""
        return ()

    @abstractmethod
    def link_mode_flags(self, mode: LinkMode) -> str:
        pass

    @abstractmethod
    def sanitizer_flag(self, mode: SanitizerMode) -> str:
        pass

    @abstractmethod
    def optimization_flag(self, level: OptimizeLevel) -> str:
        pass

    @abstractmethod
    def standard_flag(self, standard) -> str:
        """Flag selecting the language standard.

        Raises:
            InvalidStandardValue: If the standard has no known mapping
        """
        pass

    # Workspace list formatting

    @staticmethod
    def _prefixed(prefix: str, items: Iterable[str]) -> str:
        return join_flags(f"{prefix}{item}" for item in items if item)

    def include_directory_flags(self, directories: Iterable[str]) -> str:
        return self._prefixed(self.INCLUDE_PREFIX, directories)

    def system_include_directory_flags(self, directories: Iterable[str]) -> str:
        return self._prefixed(self.SYSTEM_INCLUDE_PREFIX, directories)

    def force_include_flags(self, headers: Iterable[str]) -> str:
        return self._prefixed(self.FORCE_INCLUDE_PREFIX, headers)

    def library_directory_flags(self, directories: Iterable[str]) -> str:
        return self._prefixed(self.LIBRARY_DIRECTORY_PREFIX, directories)

    def definition_flags(self, definitions: Iterable[str]) -> str:
        return self._prefixed(self.DEFINITION_PREFIX, definitions)

    @abstractmethod
    def library_file_flags(self, libraries: Iterable[str]) -> str:
        pass

    @abstractmethod
    def output_type_flags(self, kind: OutputKind) -> str:
        """Compile-side flags selecting the kind of artifact."""
        pass

    def output_link_flags(self, kind: OutputKind) -> str:
        """Link-side flags selecting the kind of artifact."""
        return ""

    # Script templates

    @property
    @abstractmethod
    def compile_command(self) -> str:
        pass

    @property
    @abstractmethod
    def link_commands(self) -> Dict[OutputKind, str]:
        pass

    @property
    def resource_command(self) -> str:
        return ""

    def link_command(self, kind: OutputKind) -> str:
        try:
            return self.link_commands[kind]
        except KeyError:
            raise UnhandledOutputKind(f"No link command for output kind: {kind!r}") from None

    def output_suffix(self, kind: OutputKind) -> str:
        """Host-conventional file suffix for the final artifact."""
        if kind is OutputKind.EXECUTABLE:
            return self.host.executable_suffix
        if kind is OutputKind.STATIC_LIBRARY:
            return self.host.static_library_suffix
        if kind is OutputKind.DYNAMIC_LIBRARY:
            return self.host.shared_library_suffix
        raise UnhandledOutputKind(f"No output suffix for output kind: {kind!r}")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.compiler.value}, {self.host.value})"


class MsvcToolchain(Toolchain):
    """cl.exe / lib.exe / rc.exe command grammar."""

    family = ToolchainFamily.MSVC
    object_extension = ".obj"
    dependency_format = "msvc"
    supports_resource_compilation = True

    INCLUDE_PREFIX = "/I"
    SYSTEM_INCLUDE_PREFIX = "/external:I"
    FORCE_INCLUDE_PREFIX = "/FI"
    LIBRARY_DIRECTORY_PREFIX = "/LIBPATH:"
    DEFINITION_PREFIX = "/D"

    _OPTIMIZATION = {
        OptimizeLevel.DEBUG: "/Od",
        OptimizeLevel.SIZE: "/Os",
        OptimizeLevel.SPEED: "/O2",
        OptimizeLevel.MAX_SPEED: "/O2",
    }

    def link_mode_flags(self, mode: LinkMode) -> str:
        # cl selects the runtime library at compile time
        return "" if mode is LinkMode.DYNAMICALLY else "/MT"

    def sanitizer_flag(self, mode: SanitizerMode) -> str:
        if mode in (SanitizerMode.ADDRESS, SanitizerMode.ADDRESS_AND_UNDEFINED):
            return "/fsanitize=address"
        return ""

    def optimization_flag(self, level: OptimizeLevel) -> str:
        return self._OPTIMIZATION[OptimizeLevel(level)]

    def standard_flag(self, standard) -> str:
        standard = LanguageStandard.parse(standard)
        if standard is LanguageStandard.latest():
            return "/std:c++latest"
        return f"/std:c++{standard.year}"

    def library_file_flags(self, libraries: Iterable[str]) -> str:
        return join_flags(lib if lib.endswith(".lib") else f"{lib}.lib" for lib in libraries if lib)

    def output_type_flags(self, kind: OutputKind) -> str:
        flags = {
            OutputKind.EXECUTABLE: "",
            OutputKind.STATIC_LIBRARY: "/c",
            OutputKind.DYNAMIC_LIBRARY: "/LD",
        }
        if kind not in flags:
            raise UnhandledOutputKind(f"No output type flags for: {kind!r}")
        return flags[kind]

    def output_link_flags(self, kind: OutputKind) -> str:
        return "/DLL" if kind is OutputKind.DYNAMIC_LIBRARY else ""

    @property
    def compile_command(self) -> str:
        return (
            "$cxx /nologo /EHsc /showIncludes /Zc:__cplusplus /FS /Fd:build/vc140.pdb "
            "$cflags /Fo$out /c $in"
        )

    @property
    def link_commands(self) -> Dict[OutputKind, str]:
        return {
            OutputKind.EXECUTABLE: "$cxx /nologo /Fe$out $in $lflags",
            OutputKind.STATIC_LIBRARY: "lib /nologo /out:$out $in",
            OutputKind.DYNAMIC_LIBRARY: "$cxx /nologo /LD /Fe$out $in $lflags",
        }

    @property
    def resource_command(self) -> str:
        return "rc.exe /nologo /fo$out $in"


class UnixToolchain(Toolchain):
    """gcc/clang driver command grammar."""

    family = ToolchainFamily.UNIX
    object_extension = ".o"
    dependency_format = "gcc"

    INCLUDE_PREFIX = "-I"
    SYSTEM_INCLUDE_PREFIX = "-isystem "
    FORCE_INCLUDE_PREFIX = "-include "
    LIBRARY_DIRECTORY_PREFIX = "-L"
    DEFINITION_PREFIX = "-D"

    _LINK_MODE = {
        LinkMode.STATICALLY: "-static",
        LinkMode.DYNAMICALLY: "",
        LinkMode.MOSTLY_STATIC: "-static-libgcc -static-libstdc++",
    }

    _SANITIZER = {
        SanitizerMode.NONE: "",
        SanitizerMode.ADDRESS: "-fsanitize=address",
        SanitizerMode.UNDEFINED: "-fsanitize=undefined",
        SanitizerMode.THREAD: "-fsanitize=thread",
        SanitizerMode.MEMORY: "-fsanitize=memory",
        SanitizerMode.ADDRESS_AND_UNDEFINED: "-fsanitize=address,undefined",
    }

    _OPTIMIZATION = {
        OptimizeLevel.DEBUG: "-Og",
        OptimizeLevel.SIZE: "-Os",
        OptimizeLevel.SPEED: "-O2",
        OptimizeLevel.MAX_SPEED: "-O3",
    }

    def link_mode_flags(self, mode: LinkMode) -> str:
        return self._LINK_MODE[mode]

    def sanitizer_flag(self, mode: SanitizerMode) -> str:
        return self._SANITIZER[mode]

    def optimization_flag(self, level: OptimizeLevel) -> str:
        return self._OPTIMIZATION[OptimizeLevel(level)]

    def link_time_runtime_flags(self, options: BuildOptions) -> Sequence[str]:
        # The driver only pulls in static runtimes and sanitizer libraries
        # when it sees these flags on the link line.
        return (
            self.link_mode_flags(options.link_mode),
            self.sanitizer_flag(options.sanitizer),
        )

    def standard_flag(self, standard) -> str:
        standard = LanguageStandard.parse(standard)
        return f"-std=c++{standard.year}"

    def library_file_flags(self, libraries: Iterable[str]) -> str:
        return self._prefixed("-l", libraries)

    def output_type_flags(self, kind: OutputKind) -> str:
        if kind is OutputKind.EXECUTABLE:
            return ""
        if kind is OutputKind.STATIC_LIBRARY:
            return "-c"
        if kind is OutputKind.DYNAMIC_LIBRARY:
            return join_flags(["-shared", "-fPIC" if self.host.requires_pic_for_shared else ""])
        raise UnhandledOutputKind(f"No output type flags for: {kind!r}")

    @property
    def compile_command(self) -> str:
        return "$cxx $cflags -MD -MF $out.d -o $out -c $in"

    @property
    def link_commands(self) -> Dict[OutputKind, str]:
        return {
            OutputKind.EXECUTABLE: "$cxx -o $out $in $lflags",
            OutputKind.STATIC_LIBRARY: "ar rcs $out $in",
            OutputKind.DYNAMIC_LIBRARY: "$cxx -shared -o $out $in $lflags",
        }


_TOOLCHAINS = {
    ToolchainFamily.MSVC: MsvcToolchain,
    ToolchainFamily.UNIX: UnixToolchain,
}


def get_toolchain(compiler: CompilerKind, host: Optional[HostPlatform] = None) -> Toolchain:
    """Create the toolchain strategy for a compiler driver."""
    return _TOOLCHAINS[compiler.family](compiler, host)
