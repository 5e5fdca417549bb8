"""Load [tool.convention-guard] and [tool] from pyproject.toml. Infrastructure I/O only."""

import logging
import tomllib
from pathlib import Path
from typing import Optional

from convention_guard.domain.constants import CONFIG_TOOL_SECTION
from convention_guard.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ConfigFileLoader:
    """
    Loads config from the nearest pyproject.toml at or above the scanned root.
    """

    @staticmethod
    def find_config_file(start: Path) -> Optional[Path]:
        """Nearest pyproject.toml at or above start, or None."""
        current_path = start.resolve()
        for directory in (current_path, *current_path.parents):
            config_file = directory / "pyproject.toml"
            if config_file.is_file():
                return config_file
        return None

    @staticmethod
    def load_config_from_fs(start: Path) -> tuple[dict[str, object], dict[str, object]]:
        """Return (config_dict, tool_section); both empty when no pyproject.toml is found."""
        empty: dict[str, object] = {}
        config_file = ConfigFileLoader.find_config_file(start)
        if config_file is None:
            return (empty, empty)
        try:
            with config_file.open("rb") as f:
                data = tomllib.load(f)
        except OSError as exc:
            raise ConfigurationError(f"Cannot read {config_file}: {exc.strerror or exc}") from exc
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"Invalid TOML in {config_file}: {exc}") from exc
        tool_section = data.get("tool", {}) or {}
        config_dict = tool_section.get(CONFIG_TOOL_SECTION, {}) or {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError(f"[tool.{CONFIG_TOOL_SECTION}] in {config_file} must be a table")
        logger.debug("Loaded configuration from %s", config_file)
        return (config_dict, tool_section)
