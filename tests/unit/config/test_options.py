"""
Unit tests for the build option model.
"""

import logging

import pytest

from ninjaforge.config.options import (
    COMPILE_OPTION_REGISTRY,
    RECOMMENDED_WARNINGS,
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
from ninjaforge.config.platform_utils import HostPlatform
from ninjaforge.errors import (
    InvalidStandardValue,
    ToolchainPlatformMismatch,
    UnknownCompileOption,
)


class TestEnums:
    """Test parsing of the option enums."""

    def test_compiler_family(self):
        assert CompilerKind.MSVC.family is ToolchainFamily.MSVC
        assert CompilerKind.GCC.family is ToolchainFamily.UNIX
        assert CompilerKind.CLANG.family is ToolchainFamily.UNIX

    def test_compiler_from_string_aliases(self):
        assert CompilerKind.from_string("g++") is CompilerKind.GCC
        assert CompilerKind.from_string("Clang") is CompilerKind.CLANG
        assert CompilerKind.from_string("cl") is CompilerKind.MSVC

    def test_compiler_from_string_invalid(self):
        with pytest.raises(ValueError, match="expected one of"):
            CompilerKind.from_string("tcc")

    def test_standard_parse_forms(self):
        assert LanguageStandard.parse(20) is LanguageStandard.CXX20
        assert LanguageStandard.parse("c++17") is LanguageStandard.CXX17
        assert LanguageStandard.parse("cxx14") is LanguageStandard.CXX14
        assert LanguageStandard.parse("03") is LanguageStandard.CXX03
        assert LanguageStandard.parse(LanguageStandard.CXX98) is LanguageStandard.CXX98

    @pytest.mark.parametrize("value", [99, "c++2x", "", "latest-ish"])
    def test_standard_parse_invalid(self, value):
        with pytest.raises(InvalidStandardValue):
            LanguageStandard.parse(value)

    def test_standard_year_is_two_digits(self):
        assert LanguageStandard.CXX03.year == "03"
        assert LanguageStandard.CXX98.year == "98"

    def test_standard_chronological_order(self):
        assert LanguageStandard.chronological()[0] is LanguageStandard.CXX98
        assert LanguageStandard.latest() is LanguageStandard.CXX23

    def test_output_kind_aliases(self):
        assert OutputKind.from_string("exe") is OutputKind.EXECUTABLE
        assert OutputKind.from_string("static") is OutputKind.STATIC_LIBRARY
        assert OutputKind.from_string("shared") is OutputKind.DYNAMIC_LIBRARY
        assert OutputKind.from_string("dynamic-library") is OutputKind.DYNAMIC_LIBRARY

    def test_sanitizer_aliases(self):
        assert SanitizerMode.from_string("asan") is SanitizerMode.ADDRESS
        assert SanitizerMode.from_string("address+undefined") is SanitizerMode.ADDRESS_AND_UNDEFINED

    def test_link_mode_and_optimization(self):
        assert LinkMode.from_string("static") is LinkMode.STATICALLY
        assert LinkMode.from_string("mostly-static") is LinkMode.MOSTLY_STATIC
        assert OptimizeLevel.from_string("release") is OptimizeLevel.SPEED
        assert OptimizeLevel.from_string("max") is OptimizeLevel.MAX_SPEED


class TestRegistry:
    """Test the compile option registry table."""

    def test_names_are_unique(self):
        names = [option.name for option in COMPILE_OPTION_REGISTRY]
        assert len(names) == len(set(names))

    def test_all_disabled_by_default(self):
        assert not any(option.enabled for option in COMPILE_OPTION_REGISTRY)

    def test_sections(self):
        options = BuildOptions()
        assert options.option("strip_executable_symbols").section is Section.LINK
        assert options.option("pthread").section is Section.BOTH
        assert options.option("warn_all").section is Section.COMPILE

    def test_applies_to(self):
        options = BuildOptions()
        pthread = options.option("pthread")
        assert pthread.applies_to(Section.COMPILE)
        assert pthread.applies_to(Section.LINK)
        strip = options.option("strip_executable_symbols")
        assert strip.applies_to(Section.LINK)
        assert not strip.applies_to(Section.COMPILE)

    def test_flag_for_family(self):
        warn_all = BuildOptions().option("warn_all")
        assert warn_all.flag_for(ToolchainFamily.MSVC) == "/Wall"
        assert warn_all.flag_for(ToolchainFamily.UNIX) == "-Wall"


class TestBuildOptions:
    """Test BuildOptions behavior."""

    def test_defaults(self):
        options = BuildOptions()
        assert options.compiler is CompilerKind.CLANG
        assert options.standard is LanguageStandard.CXX11
        assert options.output_kind is OutputKind.EXECUTABLE
        assert options.link_mode is LinkMode.DYNAMICALLY
        assert options.sanitizer is SanitizerMode.NONE
        assert options.optimization is OptimizeLevel.DEBUG
        assert options.enabled_options() == []

    def test_instances_do_not_share_registry(self):
        first = BuildOptions()
        second = BuildOptions()
        first.enable("warn_all")
        assert first.is_enabled("warn_all")
        assert not second.is_enabled("warn_all")
        assert not any(option.enabled for option in COMPILE_OPTION_REGISTRY)

    def test_enable_disable(self):
        options = BuildOptions()
        options.enable("warn_all", "pthread")
        assert options.enabled_options() == ["warn_all", "pthread"]
        options.disable("warn_all")
        assert options.enabled_options() == ["pthread"]

    def test_unknown_option(self):
        with pytest.raises(UnknownCompileOption, match="warn_everything"):
            BuildOptions().enable("warn_everything")

    def test_visit_options_in_registry_order(self):
        visited = []
        BuildOptions().visit_options(lambda option: visited.append(option.name))
        assert visited == [option.name for option in COMPILE_OPTION_REGISTRY]

    def test_recommended_warnings_unix(self):
        options = BuildOptions(compiler=CompilerKind.GCC)
        assert options.enable_recommended_warnings() is True
        assert set(options.enabled_options()) == set(RECOMMENDED_WARNINGS)

    def test_recommended_warnings_msvc_is_noop(self):
        options = BuildOptions(compiler=CompilerKind.MSVC)
        assert options.enable_recommended_warnings() is False
        assert options.enabled_options() == []

    def test_validate_msvc_off_windows(self):
        options = BuildOptions(compiler=CompilerKind.MSVC)
        with pytest.raises(ToolchainPlatformMismatch, match="only supported on Windows"):
            options.validate(HostPlatform.LINUX)

    def test_validate_msvc_on_windows(self):
        BuildOptions(compiler=CompilerKind.MSVC).validate(HostPlatform.WINDOWS)

    @pytest.mark.parametrize("host", list(HostPlatform))
    def test_validate_unix_anywhere(self, host):
        BuildOptions(compiler=CompilerKind.GCC).validate(host)

    def test_normalize_forces_debug_optimization(self, caplog):
        options = BuildOptions(optimization=OptimizeLevel.MAX_SPEED)
        options.enable("debug_symbols")

        with caplog.at_level(logging.WARNING):
            changed = options.normalize()

        assert changed is True
        assert options.optimization is OptimizeLevel.DEBUG
        assert "forcing optimization to debug level" in caplog.text

    def test_normalize_without_debug_symbols(self, caplog):
        options = BuildOptions(optimization=OptimizeLevel.SPEED)

        with caplog.at_level(logging.WARNING):
            changed = options.normalize()

        assert changed is False
        assert options.optimization is OptimizeLevel.SPEED
        assert caplog.text == ""
