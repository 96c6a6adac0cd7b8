"""Exception hierarchy for ninjaforge.

Every failure the engine can report derives from NinjaForgeError so the CLI
can catch them in one place. Fatal kinds abort before anything is written to
disk; MissingSearchRoot is only ever recorded and logged by source discovery.
"""


class NinjaForgeError(Exception):
    """Base class for all ninjaforge errors."""
    pass


class ToolchainPlatformMismatch(NinjaForgeError):
    """Raised when a toolchain family is requested on a host that cannot run it."""
    pass


class InvalidStandardValue(NinjaForgeError):
    """Raised when a language standard has no known flag mapping."""
    pass


class UnknownCompileOption(NinjaForgeError):
    """Raised when a compile option name is not in the registry."""
    pass


class UnhandledOutputKind(NinjaForgeError):
    """Raised when no link rule exists for an output kind."""
    pass


class MissingSearchRoot(NinjaForgeError):
    """A configured source search root does not exist (recoverable)."""

    def __init__(self, path):
        super().__init__(f"path does not exist -> '{path}'")
        self.path = path


class CacheDirectoryCreationFailure(NinjaForgeError):
    """Raised when the cache or build directory cannot be created."""
    pass


class ExecutorInvocationFailure(NinjaForgeError):
    """Raised when the external build executor fails or cannot be started."""

    def __init__(self, message: str, returncode=None):
        super().__init__(message)
        self.returncode = returncode


class ProjectConfigError(NinjaForgeError):
    """Raised for ninjaforge.ini configuration errors."""
    pass
