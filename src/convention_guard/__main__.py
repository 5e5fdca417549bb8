"""Package entry point - composition root. Wire dependencies and run the CLI app."""

import sys

import click

from convention_guard.domain.constants import EXIT_CANCELLED, EXIT_SETUP_ERROR
from convention_guard.infrastructure.config_file_loader import ConfigFileLoader
from convention_guard.infrastructure.di.container import ConventionGuardContainer
from convention_guard.interface.cli import CLIAppFactory, CLIDependencies


def main() -> None:
    """Entry point: wire dependencies at composition root, create app, run."""
    container = ConventionGuardContainer()

    deps = CLIDependencies(
        telemetry=container.get_telemetry_port(),
        registry=container.get_evaluator_registry(),
        catalog_loader=container.get_catalog_loader(),
        config_file_loader=ConfigFileLoader(),
        project_loader=container.get_project_loader(),
        filesystem=container.get_filesystem_gateway(),
        fixer_gateway=container.get_fixer_gateway(),
        path_locks=container.get_path_locks(),
        reporters=container.get_reporters(),
    )

    app = CLIAppFactory.create_app(deps)
    # Usage errors would otherwise exit 2, which means critical-fail here.
    try:
        app(standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        sys.exit(EXIT_SETUP_ERROR)
    except click.Abort:
        sys.exit(EXIT_CANCELLED)


if __name__ == "__main__":
    main()
