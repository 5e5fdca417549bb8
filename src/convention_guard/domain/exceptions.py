"""Domain exceptions for Convention Guard."""


class ConventionGuardError(Exception):
    """Base error for every failure raised by the engine."""


class SetupError(ConventionGuardError):
    """Fatal error detected before scanning starts. No report is produced."""


class RootNotFoundError(SetupError):
    """The project root does not exist or is not a directory."""

    def __init__(self, root: str) -> None:
        super().__init__(f"Project root not found: {root}")
        self.root = root


class RootNotReadableError(SetupError):
    """The project root exists but cannot be listed."""

    def __init__(self, root: str, reason: str) -> None:
        super().__init__(f"Project root not readable: {root} ({reason})")
        self.root = root
        self.reason = reason


class CatalogError(SetupError):
    """The rule catalog is unreadable or structurally invalid."""


class ConfigurationError(SetupError):
    """The [tool.convention-guard] section or a CLI option is invalid."""


class FileUnreadableError(ConventionGuardError):
    """A single source file could not be read or decoded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path
        self.reason = reason


class RunCancelledError(ConventionGuardError):
    """The run was cancelled before every file was evaluated."""

    def __init__(self, completed: int, total: int) -> None:
        super().__init__(f"Run cancelled after {completed}/{total} files")
        self.completed = completed
        self.total = total


class FixApplicationError(ConventionGuardError):
    """A single fix mutation could not be applied. The file is left untouched."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Fix failed for {path}: {reason}")
        self.path = path
        self.reason = reason
