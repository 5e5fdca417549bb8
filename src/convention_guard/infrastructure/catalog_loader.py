"""Catalog Loader - reads the rule catalog YAML and applies pyproject overrides."""

import logging
from collections.abc import Mapping
from importlib.resources import files
from pathlib import Path
from typing import Optional

import yaml

from convention_guard.domain.catalog import RuleCatalog
from convention_guard.domain.config import ConfigurationLoader
from convention_guard.domain.exceptions import CatalogError

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_RESOURCE = "default_catalog.yaml"


class CatalogLoader:
    """Loads the packaged default catalog, or a catalog file supplied by the caller."""

    def __init__(self, evaluator_scopes: Mapping[str, str], package: str = "convention_guard") -> None:
        self._evaluator_scopes = evaluator_scopes
        self._package = package

    def load(self, catalog_path: Optional[Path] = None) -> RuleCatalog:
        """
        Parse and validate a catalog.

        Args:
            catalog_path: Replacement catalog file; the packaged default when None.

        Returns:
            The catalog, before any pyproject overrides.

        Raises:
            CatalogError: If the file is unreadable, not YAML, or structurally invalid.
        """
        if catalog_path is None:
            source = f"{self._package}/resources/{DEFAULT_CATALOG_RESOURCE}"
            try:
                resource = files(self._package).joinpath("resources").joinpath(DEFAULT_CATALOG_RESOURCE)
                text = resource.read_text(encoding="utf-8")
            except OSError as exc:
                raise CatalogError(f"Cannot read default catalog: {exc}") from exc
        else:
            source = str(catalog_path)
            try:
                text = catalog_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise CatalogError(f"Cannot read catalog {catalog_path}: {exc}") from exc
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise CatalogError(f"Invalid YAML in catalog {source}: {exc}") from exc
        catalog = RuleCatalog.from_mapping(data, self._evaluator_scopes)
        logger.debug("Loaded catalog %s version %s with %d rules", source, catalog.version, len(catalog.rules))
        return catalog

    def load_resolved(
        self,
        config: ConfigurationLoader,
        catalog_path: Optional[Path] = None,
        config_dir: Optional[Path] = None,
    ) -> RuleCatalog:
        """
        Load the effective catalog for a run.

        An explicit catalog_path wins over the configured `catalog` key, which
        is resolved relative to config_dir. Overrides from config are applied last.
        """
        path = catalog_path
        if path is None and config.catalog_path is not None:
            path = Path(config.catalog_path)
            if not path.is_absolute() and config_dir is not None:
                path = config_dir / path
        return self.load(path).with_overrides(config, self._evaluator_scopes)
