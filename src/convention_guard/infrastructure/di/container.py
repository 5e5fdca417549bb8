from typing import TYPE_CHECKING, Any, cast

from convention_guard.domain.constants import OutputFormat
from convention_guard.domain.rules.registry import EvaluatorRegistry
from convention_guard.infrastructure.catalog_loader import CatalogLoader
from convention_guard.infrastructure.gateways.filesystem_gateway import FileSystemGateway, PathLockRegistry
from convention_guard.infrastructure.gateways.libcst_fixer_gateway import LibCSTFixerGateway
from convention_guard.infrastructure.project_loader import ProjectTreeLoader
from convention_guard.infrastructure.reporters import StructuredReporter, TerminalReporter
from convention_guard.infrastructure.telemetry import ConsoleTelemetry

if TYPE_CHECKING:
    from convention_guard.domain.protocols import (
        FileSystemProtocol,
        FixerGatewayProtocol,
        PathLockProtocol,
        ProjectLoaderProtocol,
        ReporterProtocol,
        TelemetryPort,
    )


class ConventionGuardContainer:
    """
    Dependency Injection Container for Convention Guard.

    One container per process entry point. There is no global instance:
    everything run-scoped is built per command, and only the path lock
    registry is meant to be shared between concurrent runs.
    """

    def __init__(self) -> None:
        self._singletons: dict[str, Any] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        """Register default implementations for protocols."""
        self.register_singleton("TelemetryPort", ConsoleTelemetry())
        registry = EvaluatorRegistry.default()
        self.register_singleton("EvaluatorRegistry", registry)
        self.register_singleton("CatalogLoader", CatalogLoader(registry.scopes))
        self.register_singleton("ProjectTreeLoader", ProjectTreeLoader())
        self.register_singleton("FileSystemGateway", FileSystemGateway())
        self.register_singleton("LibCSTFixerGateway", LibCSTFixerGateway())
        self.register_singleton("PathLockRegistry", PathLockRegistry())
        self.register_singleton(
            "Reporters",
            {OutputFormat.TABLE: TerminalReporter(), OutputFormat.STRUCTURED: StructuredReporter()},
        )

    # JUSTIFICATION: DI Container must handle any type of service
    def register_singleton(self, key: str, instance: Any) -> None:
        """Register a singleton instance."""
        self._singletons[key] = instance

    # JUSTIFICATION: DI Container must return any type of service
    def get(self, key: str) -> Any:
        """Retrieve a dependency by key. Prefer explicit get_* methods for type safety."""
        if key in self._singletons:
            return self._singletons[key]
        raise ValueError(f"Dependency '{key}' not registered.")

    def get_telemetry_port(self) -> "TelemetryPort":
        """Return the telemetry/UI port."""
        return cast("TelemetryPort", self.get("TelemetryPort"))

    def get_evaluator_registry(self) -> EvaluatorRegistry:
        """Return the evaluator registry."""
        return cast(EvaluatorRegistry, self.get("EvaluatorRegistry"))

    def get_catalog_loader(self) -> CatalogLoader:
        """Return the catalog loader bound to the registry's evaluator keys."""
        return cast(CatalogLoader, self.get("CatalogLoader"))

    def get_project_loader(self) -> "ProjectLoaderProtocol":
        """Return the project tree loader."""
        return cast("ProjectLoaderProtocol", self.get("ProjectTreeLoader"))

    def get_filesystem_gateway(self) -> "FileSystemProtocol":
        """Return the filesystem gateway."""
        return cast("FileSystemProtocol", self.get("FileSystemGateway"))

    def get_fixer_gateway(self) -> "FixerGatewayProtocol":
        """Return the LibCST fixer gateway."""
        return cast("FixerGatewayProtocol", self.get("LibCSTFixerGateway"))

    def get_path_locks(self) -> "PathLockProtocol":
        """Return the shared per-path lock registry."""
        return cast("PathLockProtocol", self.get("PathLockRegistry"))

    def get_reporters(self) -> dict[OutputFormat, "ReporterProtocol"]:
        """Return the reporter for each output format."""
        return cast("dict[OutputFormat, ReporterProtocol]", self.get("Reporters"))
