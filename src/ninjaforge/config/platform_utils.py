"""Host Platform Detection.

This module detects the operating system ninjaforge is running on and exposes
the file naming conventions that depend on it.

Supported Platforms:
    - Windows: .exe executables, .lib archives, .dll shared libraries
    - Linux: no executable suffix, .a archives, .so shared libraries
    - macOS: no executable suffix, .a archives, .dylib shared libraries
"""

import platform
from enum import Enum

from ..errors import NinjaForgeError


class PlatformError(NinjaForgeError):
    """Raised when platform detection fails or platform is unsupported."""

    pass


class HostPlatform(Enum):
    """Operating system families ninjaforge can generate builds for."""

    WINDOWS = "windows"
    LINUX = "linux"
    MACOS = "macos"

    @classmethod
    def current(cls) -> "HostPlatform":
        """Detect the platform of the running interpreter.

        Returns:
            HostPlatform for the current system

        Raises:
            PlatformError: If the system is not Windows, Linux or macOS
        """
        system = platform.system().lower()

        if system == "windows":
            return cls.WINDOWS
        elif system == "linux":
            return cls.LINUX
        elif system == "darwin":
            return cls.MACOS
        else:
            raise PlatformError(f"Unsupported platform: {system}")

    @property
    def display_name(self) -> str:
        return {
            HostPlatform.WINDOWS: "Windows",
            HostPlatform.LINUX: "Linux",
            HostPlatform.MACOS: "MacOS",
        }[self]

    @property
    def executable_suffix(self) -> str:
        return ".exe" if self is HostPlatform.WINDOWS else ""

    @property
    def static_library_suffix(self) -> str:
        return ".lib" if self is HostPlatform.WINDOWS else ".a"

    @property
    def shared_library_suffix(self) -> str:
        if self is HostPlatform.WINDOWS:
            return ".dll"
        if self is HostPlatform.MACOS:
            return ".dylib"
        return ".so"

    @property
    def requires_pic_for_shared(self) -> bool:
        """Whether shared objects must be built with -fPIC on this host."""
        return self is HostPlatform.LINUX
