"""Pytest configuration and shared fixtures.

Run pytest from this project's root. pythonpath in pyproject.toml puts src/
on the import path, so the tests exercise the working tree rather than an
installed copy.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Optional
from unittest.mock import MagicMock

import pytest

from convention_guard.domain.config import MatcherSettings
from convention_guard.domain.entities import FileFacts, ProjectTree, SourceFile
from convention_guard.domain.matchers.facts_builder import FileFactsBuilder
from convention_guard.infrastructure.config_file_loader import ConfigFileLoader
from convention_guard.infrastructure.di.container import ConventionGuardContainer
from convention_guard.interface.cli import CLIDependencies

# A small project that satisfies every rule of the default catalog.
CLEAN_PROJECT: dict[str, str] = {
    "pyproject.toml": '[project]\nname = "shop"\n\n[tool.convention-guard]\nworkers = 2\n',
    "src/shop/__init__.py": "",
    "src/shop/base.py": '''"""Shared model base."""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base of every shop model."""

    model_config = ConfigDict(frozen=True)
''',
    "src/shop/exceptions.py": '''"""Shop errors."""


class ShopError(Exception):
    """Base error of the shop package."""


class PriceError(ShopError):
    """A price is invalid."""
''',
    "src/shop/pricing.py": '''"""Price calculations."""

from decimal import Decimal

from shop.exceptions import PriceError

TAX_RATE = Decimal("0.2")


def gross_price(net: Decimal) -> Decimal:
    """
    Add tax to a net price.

    Args:
        net: Net price.

    Returns:
        The gross price.

    Raises:
        PriceError: If net is negative.
    """
    if net < 0:
        raise PriceError(f"negative price: {net}")
    return net * (1 + TAX_RATE)
''',
    "src/shop/product.py": '''"""Product model."""

from decimal import Decimal

from shop.base import BaseSchema


class Product(BaseSchema):
    """A product with its net price."""

    name: str
    net_price: Decimal
''',
    "tests/test_pricing.py": '''"""Tests for gross_price."""

from decimal import Decimal

from shop.pricing import gross_price


def test_gross_price_adds_tax() -> None:
    """Gross price includes the tax."""
    assert gross_price(Decimal("10")) == Decimal("12.0")
''',
}


def write_files(root: Path, files: dict[str, str]) -> Path:
    """Write relative path -> content under root and return root."""
    for rel, content in files.items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def write_tree() -> Callable[[Path, dict[str, str]], Path]:
    """Writer for small on-disk projects."""
    return write_files


@pytest.fixture
def clean_project(tmp_path: Path) -> Path:
    """A compliant project root on disk."""
    return write_files(tmp_path / "shop", CLEAN_PROJECT)


@pytest.fixture
def analyze() -> Callable[..., tuple[ProjectTree, SourceFile, FileFacts]]:
    """Build facts for in-memory source, as the engine would for one file."""

    def _analyze(
        source: str,
        path: str = "src/pkg/module.py",
        settings: Optional[MatcherSettings] = None,
    ) -> tuple[ProjectTree, SourceFile, FileFacts]:
        source_file = SourceFile(path, Path(path), reader=lambda _: source.encode("utf-8"))
        tree = ProjectTree(root=Path("."), files=(source_file,))
        builder = FileFactsBuilder(settings or MatcherSettings(), tree.top_level_names)
        return tree, source_file, builder.build(source_file)

    return _analyze


@pytest.fixture
def telemetry() -> MagicMock:
    """Telemetry mock; keeps stderr quiet in CLI tests."""
    return MagicMock()


@pytest.fixture
def cli_deps(telemetry: MagicMock) -> CLIDependencies:
    """Real CLI dependencies from a fresh container, with mocked telemetry."""
    container = ConventionGuardContainer()
    return CLIDependencies(
        telemetry=telemetry,
        registry=container.get_evaluator_registry(),
        catalog_loader=container.get_catalog_loader(),
        config_file_loader=ConfigFileLoader(),
        project_loader=container.get_project_loader(),
        filesystem=container.get_filesystem_gateway(),
        fixer_gateway=container.get_fixer_gateway(),
        path_locks=container.get_path_locks(),
        reporters=container.get_reporters(),
    )
