from __future__ import annotations

import logging
from pathlib import Path

import pytest

from plgen.golang.formatter import SyntaxCheckFormatter
from tests._fixtures.package_builder import (
    DEMO_SOURCES,
    PackageBuilder,
    StaticTemplateProvider,
    StubNativeConfig,
)


@pytest.fixture
def package_builder(tmp_path: Path) -> PackageBuilder:
    """Provide a reusable Go package builder rooted at the pytest tmp_path."""
    return PackageBuilder(tmp_path)


@pytest.fixture
def demo_package(package_builder: PackageBuilder) -> Path:
    """A two-file package exporting Add and Greet."""
    return package_builder.write(DEMO_SOURCES)


@pytest.fixture
def writer_options() -> dict:
    """ModuleWriter collaborators that never touch the host toolchain."""
    return {
        "template_provider": StaticTemplateProvider(),
        "native_config": StubNativeConfig(),
        "formatter": SyntaxCheckFormatter(),
    }


@pytest.fixture(autouse=True)
def reset_plgen_logger():
    """Undo configure_logging() calls made by CLI tests."""
    yield
    logger = logging.getLogger("plgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
