"""
Build option model.

This module holds the typed configuration for one build: compiler choice,
language standard, link/sanitizer/optimization modes, output kind, and the
ordered registry of named compile options. Each compile option carries one
flag per toolchain family and a section tag saying whether it applies when
compiling, when linking, or both.

Cross-option rules are enforced here before any flag translation happens:
- MSVC can only be selected on Windows hosts
- debug symbols force the optimization level down to debug
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from ..errors import InvalidStandardValue, ToolchainPlatformMismatch, UnknownCompileOption
from .platform_utils import HostPlatform


def _lookup(cls, value: str, aliases: Dict[str, str]):
    key = str(value).strip().lower().replace("-", "_")
    key = aliases.get(key, key)
    for member in cls:
        if member.name.lower() == key:
            return member
    choices = ", ".join(sorted(m.name.lower() for m in cls))
    raise ValueError(f"Invalid {cls.__name__} '{value}' (expected one of: {choices})")


class ToolchainFamily(Enum):
    """Command-line grammar class of a compiler driver."""

    MSVC = "msvc"
    UNIX = "unix"


class CompilerKind(Enum):
    """Supported compiler drivers."""

    GCC = "gcc"
    CLANG = "clang"
    MSVC = "msvc"

    @property
    def family(self) -> ToolchainFamily:
        return ToolchainFamily.MSVC if self is CompilerKind.MSVC else ToolchainFamily.UNIX

    @property
    def executable(self) -> str:
        return {
            CompilerKind.GCC: "g++",
            CompilerKind.CLANG: "clang++",
            CompilerKind.MSVC: "cl",
        }[self]

    @classmethod
    def from_string(cls, value: str) -> "CompilerKind":
        return _lookup(cls, value, {"g++": "gcc", "clang++": "clang", "cl": "msvc"})


class LanguageStandard(IntEnum):
    """C++ language standards, valued by their two-digit year."""

    CXX98 = 98
    CXX03 = 3
    CXX11 = 11
    CXX14 = 14
    CXX17 = 17
    CXX20 = 20
    CXX23 = 23

    @property
    def year(self) -> str:
        return f"{self.value:02d}"

    @classmethod
    def chronological(cls) -> List["LanguageStandard"]:
        return [cls.CXX98, cls.CXX03, cls.CXX11, cls.CXX14, cls.CXX17, cls.CXX20, cls.CXX23]

    @classmethod
    def latest(cls) -> "LanguageStandard":
        return cls.chronological()[-1]

    @classmethod
    def parse(cls, value) -> "LanguageStandard":
        """Parse a standard from an enum member, an int, or a string like 'c++20'.

        Raises:
            InvalidStandardValue: If the value has no known mapping
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for prefix in ("c++", "cxx", "std_"):
            if text.startswith(prefix):
                text = text[len(prefix):]
        try:
            return cls(int(text))
        except ValueError:
            raise InvalidStandardValue(f"Unknown C++ standard: {value!r}") from None


class LinkMode(Enum):
    STATICALLY = "statically"
    DYNAMICALLY = "dynamically"
    MOSTLY_STATIC = "mostly_static"  # static runtime, dynamic system libraries

    @classmethod
    def from_string(cls, value: str) -> "LinkMode":
        return _lookup(cls, value, {"static": "statically", "dynamic": "dynamically"})


class SanitizerMode(Enum):
    NONE = "none"
    ADDRESS = "address"
    UNDEFINED = "undefined"
    THREAD = "thread"
    MEMORY = "memory"
    ADDRESS_AND_UNDEFINED = "address_and_undefined"

    @classmethod
    def from_string(cls, value: str) -> "SanitizerMode":
        return _lookup(cls, value, {
            "asan": "address",
            "ubsan": "undefined",
            "tsan": "thread",
            "msan": "memory",
            "address,undefined": "address_and_undefined",
            "address+undefined": "address_and_undefined",
        })


class OptimizeLevel(IntEnum):
    DEBUG = 0
    SIZE = 1
    SPEED = 2
    MAX_SPEED = 3

    @classmethod
    def from_string(cls, value: str) -> "OptimizeLevel":
        return _lookup(cls, value, {"release": "speed", "max": "max_speed", "fastest": "max_speed"})


class OutputKind(Enum):
    EXECUTABLE = "executable"
    STATIC_LIBRARY = "static_library"
    DYNAMIC_LIBRARY = "dynamic_library"

    @classmethod
    def from_string(cls, value: str) -> "OutputKind":
        return _lookup(cls, value, {
            "exe": "executable",
            "static": "static_library",
            "staticlib": "static_library",
            "shared": "dynamic_library",
            "shared_library": "dynamic_library",
            "dynamic": "dynamic_library",
        })


class Section(Enum):
    """Build phase a compile option contributes to."""

    COMPILE = "compile"
    LINK = "link"
    BOTH = "both"


@dataclass
class CompileOption:
    """A named toggle with one flag per toolchain family.

    An empty flag means the option is not supported by that family and
    contributes nothing.
    """

    name: str
    msvc_flag: str
    unix_flag: str
    section: Section
    enabled: bool = False

    def flag_for(self, family: ToolchainFamily) -> str:
        return self.msvc_flag if family is ToolchainFamily.MSVC else self.unix_flag

    def applies_to(self, section: Section) -> bool:
        """Check whether this option contributes to the given phase."""
        return self.section is Section.BOTH or self.section is section


C, L, B = Section.COMPILE, Section.LINK, Section.BOTH

# Visitation order of this table is the order flags appear on command lines.
COMPILE_OPTION_REGISTRY: Tuple[CompileOption, ...] = (
    CompileOption("warn_all", "/Wall", "-Wall", C),
    CompileOption("warn_extra", "/W4", "-Wextra", C),
    CompileOption("warn_extra_tokens", "", "-Wextra-tokens", C),
    CompileOption("warn_pedantic", "/permissive-", "-Wpedantic", C),
    CompileOption("warn_old_style_casts", "", "-Wold-style-cast", C),
    CompileOption("warn_cast_qualifiers", "", "-Wcast-qual", C),
    CompileOption("warnings_are_errors", "/WX", "-Werror", C),
    CompileOption("warn_unused", "/wd4101 /wd4102 /wd4189", "-Wunused", C),
    CompileOption("warn_uninitialized", "/we4700", "-Wuninitialized", C),
    CompileOption("warn_array_bounds", "", "-Warray-bounds", C),
    CompileOption("warn_sign_conversion", "/we4365", "-Wsign-conversion", C),
    CompileOption("warn_from_system_headers", "/external:W4", "-Wsystem-headers", C),
    CompileOption("warn_shadow", "/we4456 /we4457 /we4458 /we4459", "-Wshadow", C),
    CompileOption("warn_non_virtual_dtor", "/we4265", "-Wnon-virtual-dtor", C),
    CompileOption("warn_conversion", "/we4244 /we4267", "-Wconversion", C),
    CompileOption("warn_misleading_indentation", "", "-Wmisleading-indentation", C),
    CompileOption("warn_null_dereference", "", "-Wnull-dereference", C),
    CompileOption("warn_implicit_fallthrough", "/we5262", "-Wimplicit-fallthrough", C),
    CompileOption("error_pedantic", "/permissive-", "-pedantic-errors", C),
    CompileOption("warn_undef", "", "-Wundef", C),
    CompileOption("warn_float_equal", "", "-Wfloat-equal", C),
    CompileOption("warn_pointer_arith", "", "-Wpointer-arith", C),
    CompileOption("warn_cast_align", "", "-Wcast-align", C),
    CompileOption("warn_switch_default", "/w14062", "-Wswitch-default", C),
    CompileOption("warn_switch_enum", "/w14061", "-Wswitch-enum", C),
    CompileOption("warn_unreachable_code", "/w14702", "-Wunreachable-code", C),
    CompileOption("warn_aggregate_return", "", "-Waggregate-return", C),
    CompileOption("warn_write_strings", "", "-Wwrite-strings", C),
    CompileOption("warn_strict_prototypes", "", "-Wstrict-prototypes", C),
    CompileOption("warn_missing_prototypes", "", "-Wmissing-prototypes", C),
    CompileOption("warn_old_style_definition", "", "-Wold-style-definition", C),
    CompileOption("save_temps", "/EP", "-save-temps", C),
    CompileOption("strip_executable_symbols", "/DEBUG:NONE", "-s", L),
    CompileOption("link_time_optimization", "/GL", "-flto", C),
    CompileOption("debug_symbols", "/Zi", "-g", C),
    CompileOption("pthread", "", "-pthread", B),
    CompileOption("coverage", "", "--coverage", B),
)

del C, L, B

# Conservative warning preset applied by enable_recommended_warnings()
RECOMMENDED_WARNINGS = (
    "warn_all",
    "warn_extra",
    "warn_shadow",
    "warn_non_virtual_dtor",
    "warn_pedantic",
)


def _fresh_registry() -> Dict[str, CompileOption]:
    return {option.name: replace(option) for option in COMPILE_OPTION_REGISTRY}


@dataclass
class BuildOptions:
    """The full knob set for one build.

    Each instance owns its own copy of the compile option registry, so
    toggling an option never leaks into another BuildOptions.
    """

    compiler: CompilerKind = CompilerKind.CLANG
    standard: LanguageStandard = LanguageStandard.CXX11
    output_kind: OutputKind = OutputKind.EXECUTABLE
    link_mode: LinkMode = LinkMode.DYNAMICALLY
    sanitizer: SanitizerMode = SanitizerMode.NONE
    optimization: OptimizeLevel = OptimizeLevel.DEBUG
    print_build_script: bool = False
    jobs: Optional[int] = None
    compile_options: Dict[str, CompileOption] = field(default_factory=_fresh_registry)

    @property
    def family(self) -> ToolchainFamily:
        return self.compiler.family

    def option(self, name: str) -> CompileOption:
        try:
            return self.compile_options[name]
        except KeyError:
            raise UnknownCompileOption(f"Unknown compile option: '{name}'") from None

    def set_option(self, name: str, enabled: bool) -> None:
        self.option(name).enabled = enabled

    def enable(self, *names: str) -> None:
        for name in names:
            self.set_option(name, True)

    def disable(self, *names: str) -> None:
        for name in names:
            self.set_option(name, False)

    def is_enabled(self, name: str) -> bool:
        return self.option(name).enabled

    def enabled_options(self) -> List[str]:
        return [option.name for option in self if option.enabled]

    def __iter__(self) -> Iterator[CompileOption]:
        return iter(self.compile_options.values())

    def visit_options(self, visitor: Callable[[CompileOption], None]) -> None:
        """Call visitor for every compile option in registry order."""
        for option in self:
            visitor(option)

    def enable_recommended_warnings(self) -> bool:
        """Turn on the recommended warning preset.

        Only Unix-style drivers get the preset; for MSVC this is a no-op.

        Returns:
            True if the preset was applied
        """
        if self.family is not ToolchainFamily.UNIX:
            logging.debug(f"Recommended warnings are not defined for {self.compiler.value}, skipping")
            return False
        self.enable(*RECOMMENDED_WARNINGS)
        return True

    def validate(self, host: Optional[HostPlatform] = None) -> None:
        """Check that the configuration can run on the host.

        Raises:
            ToolchainPlatformMismatch: If MSVC is requested off Windows
        """
        host = host or HostPlatform.current()
        if self.family is ToolchainFamily.MSVC and host is not HostPlatform.WINDOWS:
            raise ToolchainPlatformMismatch(
                f"MSVC compiler is only supported on Windows (host: {host.display_name})"
            )

    def normalize(self) -> bool:
        """Apply non-fatal corrections to the configuration.

        Returns:
            True if any setting was changed
        """
        if self.is_enabled("debug_symbols") and self.optimization > OptimizeLevel.DEBUG:
            self.optimization = OptimizeLevel.DEBUG
            logging.warning("debug symbols enabled, forcing optimization to debug level")
            return True
        return False
