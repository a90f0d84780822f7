"""pytest integration.

Enable it from a ``conftest.py``::

    pytest_plugins = ["sqlfixture.pytest_plugin"]

The configuration file is taken from ``--sqlfixture-config``, then from the
``sqlfixture_config`` ini value, then from the default locations.
"""

import logging
from typing import Iterator

import pytest

from sqlfixture.config.parser import ConfigParser
from sqlfixture.fixture.module import DatabaseModule

logger = logging.getLogger(__name__)


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("sqlfixture", "database fixtures")
    group.addoption(
        "--sqlfixture-config",
        action="store",
        default=None,
        help="Path to the sqlfixture YAML configuration",
    )
    parser.addini("sqlfixture_config", "Path to the sqlfixture YAML configuration", default="")


def _config_path(config: pytest.Config):
    path = config.getoption("sqlfixture_config") or config.getini("sqlfixture_config")
    if not path:
        return None
    return config.rootpath / path


@pytest.fixture(scope="session")
def db_module(pytestconfig: pytest.Config) -> Iterator[DatabaseModule]:
    """Database module prepared for the whole session."""
    fixture_config = ConfigParser().load_config(_config_path(pytestconfig))
    module = DatabaseModule(fixture_config)
    module.before_suite()
    logger.debug("Databases ready: %s", ", ".join(module.databases()))
    try:
        yield module
    finally:
        module.after_suite()


@pytest.fixture
def db(db_module: DatabaseModule) -> Iterator[DatabaseModule]:
    """Database module reset for the current test."""
    db_module.before_test()
    try:
        yield db_module
    finally:
        db_module.after_test()
