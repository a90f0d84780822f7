"""Tests for the connection registry."""

from unittest.mock import Mock

import pytest

from sqlfixture.config.models import DatabaseDescriptor
from sqlfixture.db.driver import DRIVER_NOT_FOUND
from sqlfixture.db.registry import ConnectionRegistry
from sqlfixture.exceptions import DatabaseConnectionError, NoConnectionError


def make_descriptor(**kwargs) -> DatabaseDescriptor:
    values = {"dsn": "sqlite::memory:", "user": "", "password": ""}
    values.update(kwargs)
    return DatabaseDescriptor(**values)


class TestConnectionRegistry:
    """Connecting, looking up and closing drivers."""

    def test_connect_is_idempotent(self):
        driver = Mock(is_closed=False, database_name="app")
        factory = Mock(return_value=driver)
        registry = ConnectionRegistry(driver_factory=factory)
        descriptor = make_descriptor()

        registry.connect("default", descriptor)
        registry.connect("default", descriptor)

        factory.assert_called_once_with("sqlite::memory:", "", "", {})
        assert registry.get_driver("default") is driver

    def test_tls_options_forwarded(self):
        factory = Mock(return_value=Mock(is_closed=False))
        registry = ConnectionRegistry(driver_factory=factory)
        descriptor = make_descriptor(
            dsn="mysql:host=db;dbname=app",
            ssl_ca="/certs/ca.pem",
            ssl_key="",
            options={"connect_timeout": 5},
        )

        registry.connect("default", descriptor)

        options = factory.call_args[0][3]
        assert options == {"connect_timeout": 5, "ssl_ca": "/certs/ca.pem"}

    def test_driver_not_found_names_scheme(self):
        factory = Mock(side_effect=DatabaseConnectionError(DRIVER_NOT_FOUND))
        registry = ConnectionRegistry(driver_factory=factory)

        with pytest.raises(DatabaseConnectionError) as exc_info:
            registry.connect("default", make_descriptor(dsn="oci:dbname=//db/xe"))

        assert exc_info.value.message == "could not find oci driver while creating database connection"
        assert exc_info.value.database_key == "default"
        assert not registry.is_connected("default")

    def test_other_failures_keep_cause(self):
        factory = Mock(side_effect=DatabaseConnectionError("Access denied for user 'root'"))
        registry = ConnectionRegistry(driver_factory=factory)

        with pytest.raises(DatabaseConnectionError) as exc_info:
            registry.connect("default", make_descriptor(dsn="mysql:host=db;dbname=app"))

        assert exc_info.value.message == "Access denied for user 'root' while creating database connection"

    def test_unknown_scheme_with_real_driver(self):
        registry = ConnectionRegistry()

        with pytest.raises(DatabaseConnectionError, match="could not find oci driver"):
            registry.connect("default", make_descriptor(dsn="oci:dbname=xe"))

    def test_lookup_without_connection(self):
        registry = ConnectionRegistry()

        with pytest.raises(NoConnectionError):
            registry.lookup("default")
        with pytest.raises(NoConnectionError):
            registry.get_driver("reporting")

    def test_disconnect_only_with_reconnect(self):
        driver = Mock(is_closed=False)
        registry = ConnectionRegistry(driver_factory=Mock(return_value=driver))
        registry.connect("default", make_descriptor())

        registry.disconnect("default", make_descriptor())
        assert registry.is_connected("default")

        registry.disconnect("default", make_descriptor(reconnect=True))
        assert not registry.is_connected("default")
        driver.close.assert_called_once()

    def test_close_all_continues_after_failure(self):
        failing = Mock(is_closed=False)
        failing.close.side_effect = RuntimeError("boom")
        healthy = Mock(is_closed=False)
        registry = ConnectionRegistry(driver_factory=Mock(side_effect=[failing, healthy]))
        registry.connect("default", make_descriptor())
        registry.connect("reporting", make_descriptor())

        registry.close_all()

        healthy.close.assert_called_once()
        assert registry.connected_keys() == []

    def test_real_sqlite_connection(self):
        registry = ConnectionRegistry()
        registry.connect("default", make_descriptor())
        try:
            assert registry.lookup("default").exec_driver_sql("SELECT 1").scalar() == 1
            status = registry.status({"default": make_descriptor()})
            assert status["default"]["connected"] is True
            assert status["default"]["scheme"] == "sqlite"
        finally:
            registry.close_all()
