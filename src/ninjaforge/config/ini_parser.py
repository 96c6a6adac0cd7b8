"""
ninjaforge.ini configuration parser.

This module parses the declarative project description and turns it into a
Workspace ready to build.

Example ninjaforge.ini:
    [project]
    name = hello
    output = executable
    sources = src
    includes = include

    [options]
    compiler = clang
    standard = 20
    recommended_warnings = yes
    enable = warnings_are_errors

    [profile:release]
    optimization = speed
    enable = link_time_optimization

Usage:
    config = ProjectConfig(Path("ninjaforge.ini"))
    workspace = config.to_workspace(profile="release")
"""

import configparser
import shlex
from pathlib import Path
from typing import Dict, List, Optional

from ..errors import InvalidStandardValue, ProjectConfigError, UnknownCompileOption
from .options import (
    BuildOptions,
    CompilerKind,
    LanguageStandard,
    LinkMode,
    OptimizeLevel,
    OutputKind,
    SanitizerMode,
)

CONFIG_FILE_NAME = "ninjaforge.ini"

# [project] keys holding lists, mapped to Workspace attributes
LIST_FIELDS = {
    "files": "build_files",
    "sources": "source_directories",
    "includes": "include_directories",
    "system_includes": "system_include_directories",
    "definitions": "definitions",
    "force_includes": "force_includes",
    "library_dirs": "library_directories",
    "libraries": "libraries",
    "linker_flags": "linker_flags",
}

OPTION_KEYS = {
    "compiler",
    "standard",
    "output",
    "link_mode",
    "sanitizer",
    "optimization",
    "recommended_warnings",
    "enable",
    "disable",
    "print_build_script",
    "jobs",
}


def split_list(value: str) -> List[str]:
    """Split a list value on whitespace and newlines.

    A comma ending an item is a separator too; commas inside an item
    (-Wl,--as-needed) are kept. Quoted items keep their spaces.

    Example:
        >>> split_list('NDEBUG, "GREETING=hello world"\\n  VERSION=2')
        ['NDEBUG', 'GREETING=hello world', 'VERSION=2']

    Raises:
        ValueError: If a quote is left unbalanced
    """
    if not value:
        return []
    tokens = value.split()
    # Only quoted values go through shlex, which would eat Windows backslashes
    if '"' in value or "'" in value:
        try:
            tokens = shlex.split(value)
        except ValueError as e:
            raise ValueError(f"cannot split list value {value!r}: {e}") from e
    return [token.rstrip(",") for token in tokens if token.rstrip(",")]


class ProjectConfig:
    """
    Parser for ninjaforge.ini configuration files.

    Sections:
        [project]           name, output kind, sources and path lists
        [options]           base build options
        [profile:<name>]    overrides layered on top of [options]
    """

    def __init__(self, ini_path: Path):
        """
        Initialize the parser with a ninjaforge.ini file.

        Args:
            ini_path: Path to the ninjaforge.ini file

        Raises:
            ProjectConfigError: If the file doesn't exist or cannot be parsed
        """
        self.ini_path = Path(ini_path)

        if not self.ini_path.exists():
            raise ProjectConfigError(f"Configuration file not found: {self.ini_path}")

        self.config = configparser.ConfigParser(
            allow_no_value=True, interpolation=configparser.ExtendedInterpolation()
        )

        try:
            self.config.read(self.ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise ProjectConfigError(f"Failed to parse {self.ini_path}: {e}") from e

    @property
    def project_dir(self) -> Path:
        return self.ini_path.resolve().parent

    def _section(self, name: str) -> Dict[str, str]:
        if name not in self.config:
            return {}
        try:
            return {key: (value or "").strip() for key, value in self.config[name].items()}
        except configparser.Error as e:
            raise ProjectConfigError(f"Invalid value in [{name}]: {e}") from e

    def get_profiles(self) -> List[str]:
        """
        Get list of all profile names defined in the config.

        Example:
            For [profile:release], [profile:asan], returns ['release', 'asan']
        """
        return [
            section.split(":", 1)[1]
            for section in self.config.sections()
            if section.startswith("profile:")
        ]

    def has_profile(self, name: str) -> bool:
        return f"profile:{name}" in self.config

    def get_project(self) -> Dict[str, str]:
        return self._section("project")

    def get_options(self, profile: Optional[str] = None) -> Dict[str, str]:
        """
        Get the option settings for a profile.

        Profile values override [options]. build_options() applies the
        'enable' and 'disable' lists of both sections in turn.

        Raises:
            ProjectConfigError: If the profile does not exist
        """
        options = self._section("options")
        if profile is None:
            return options

        if not self.has_profile(profile):
            available = ", ".join(self.get_profiles())
            raise ProjectConfigError(
                f"Profile '{profile}' not found. "
                + f"Available profiles: {available or 'none'}"
            )

        return {**options, **self._section(f"profile:{profile}")}

    def build_options(self, profile: Optional[str] = None) -> BuildOptions:
        """
        Create BuildOptions from [options] and an optional profile.

        Raises:
            ProjectConfigError: If a value is invalid
        """
        values = self.get_options(profile)
        project = self.get_project()
        unknown = set(values) - OPTION_KEYS
        if unknown:
            raise ProjectConfigError(f"Unknown option keys: {', '.join(sorted(unknown))}")

        options = BuildOptions()
        try:
            if values.get("compiler"):
                options.compiler = CompilerKind.from_string(values["compiler"])
            if values.get("standard"):
                options.standard = LanguageStandard.parse(values["standard"])
            output = values.get("output") or project.get("output")
            if output:
                options.output_kind = OutputKind.from_string(output)
            if values.get("link_mode"):
                options.link_mode = LinkMode.from_string(values["link_mode"])
            if values.get("sanitizer"):
                options.sanitizer = SanitizerMode.from_string(values["sanitizer"])
            if values.get("optimization"):
                options.optimization = OptimizeLevel.from_string(values["optimization"])
            if values.get("jobs"):
                from ..build.executor import resolve_jobs
                options.jobs = resolve_jobs(values["jobs"])

            options.print_build_script = self._boolean(values, "print_build_script")
            if self._boolean(values, "recommended_warnings"):
                options.enable_recommended_warnings()

            # Base toggles first, then the profile's, so a profile can undo either
            for layer in self._toggle_layers(profile):
                options.enable(*split_list(layer.get("enable", "")))
                options.disable(*split_list(layer.get("disable", "")))
        except (ValueError, InvalidStandardValue, UnknownCompileOption) as e:
            raise ProjectConfigError(f"{self.ini_path}: {e}") from e

        return options

    def _toggle_layers(self, profile: Optional[str]) -> List[Dict[str, str]]:
        layers = [self._section("options")]
        if profile is not None:
            layers.append(self._section(f"profile:{profile}"))
        return layers

    def _boolean(self, values: Dict[str, str], key: str) -> bool:
        value = values.get(key, "")
        if not value:
            return False
        lowered = value.lower()
        if lowered not in configparser.ConfigParser.BOOLEAN_STATES:
            raise ProjectConfigError(f"{self.ini_path}: '{key}' must be a boolean, got '{value}'")
        return configparser.ConfigParser.BOOLEAN_STATES[lowered]

    def to_workspace(self, profile: Optional[str] = None):
        """
        Build a Workspace from this configuration.

        Args:
            profile: Optional profile to layer over [options]

        Returns:
            Configured Workspace rooted at the config file's directory
        """
        from ..workspace import Workspace

        project = self.get_project()
        workspace = Workspace(
            options=self.build_options(profile),
            root=self.project_dir,
            output_name=project.get("name", ""),
        )

        for key, attribute in LIST_FIELDS.items():
            try:
                items = split_list(project.get(key, ""))
            except ValueError as e:
                raise ProjectConfigError(f"{self.ini_path}: [project] {key}: {e}") from e
            getattr(workspace, attribute).extend(items)

        if project.get("resource_file"):
            workspace.set_resource_file(project["resource_file"])

        return workspace
