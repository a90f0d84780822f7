"""Tests for record assertions against a populated SQLite database."""

import pandas as pd
import pytest

from sqlfixture.exceptions import DatabaseAssertionError
from sqlfixture.fixture.assertions import (
    assert_equals,
    assert_greater_than,
    assert_less_than,
    serialize_criteria,
)
from sqlfixture.fixture.module import DatabaseModule


class TestPredicates:
    """Raw comparison helpers."""

    def test_assertion_error_is_assertion(self):
        with pytest.raises(AssertionError):
            assert_equals(1, 2, "mismatch")

    def test_carries_details(self):
        with pytest.raises(DatabaseAssertionError) as exc_info:
            assert_greater_than(0, 0, "nothing found", table="users")

        assert exc_info.value.table == "users"
        assert exc_info.value.expected == 0
        assert exc_info.value.actual == 0

    def test_passing(self):
        assert_greater_than(0, 1, "unused")
        assert_less_than(1, 0, "unused")
        assert_equals(3, 3, "unused")

    def test_serialize_criteria(self):
        assert serialize_criteria({"name": "a", "age >": 3}) == '{"name": "a", "age >": 3}'
        assert serialize_criteria(None) == "{}"


class TestRecordAssertions:
    """Assertions through the database module."""

    def test_see_num_records(self, module: DatabaseModule):
        module.before_test()

        module.see_num_records(3, "users")
        module.have_in_database("users", {"name": "dave", "email": "dave@example.com"})
        module.see_num_records(4, "users")

    def test_see_num_records_failure_message(self, module: DatabaseModule):
        module.before_test()

        with pytest.raises(DatabaseAssertionError) as exc_info:
            module.see_num_records(5, "users", {"name": "alice"})

        assert str(exc_info.value) == (
            "The number of found rows (1) does not match expected number 5 "
            'for criteria {"name": "alice"} in table users'
        )

    def test_dont_see_then_have(self, module: DatabaseModule):
        module.before_test()

        module.dont_see_in_database("users", {"name": "dave"})
        module.have_in_database("users", {"name": "dave"})
        module.see_in_database("users", {"name": "dave"})

        with pytest.raises(DatabaseAssertionError, match="Unexpectedly found matching records"):
            module.dont_see_in_database("users", {"name": "dave"})

    def test_see_failure(self, module: DatabaseModule):
        module.before_test()

        with pytest.raises(DatabaseAssertionError, match="No matching records found"):
            module.see_in_database("users", {"name": "nobody"})

    def test_like_and_null_criteria(self, module: DatabaseModule):
        module.before_test()

        assert module.grab_num_records("users", {"name like": "a%"}) == 1
        assert module.grab_num_records("users", {"email": None}) == 1
        assert module.grab_num_records("users", {"id >": 1}) == 2

    def test_not_like_criteria(self, module: DatabaseModule):
        module.before_test()

        assert module.grab_num_records("users", {"name not like": "a%"}) == 2
        module.see_in_database("users", {"name NOT  LIKE": "a%", "email": None})
        module.dont_see_in_database("users", {"name not like": "%"})

    def test_grab_helpers(self, module: DatabaseModule):
        module.before_test()

        assert module.grab_from_database("users", "email", {"name": "bob"}) == "bob@example.com"
        assert module.grab_from_database("users", "email", {"name": "nobody"}) is None
        assert sorted(module.grab_column_from_database("users", "name")) == ["alice", "bob", "carol"]

        frame = module.grab_entries_from_database("users", {"name !=": "carol"})
        assert isinstance(frame, pd.DataFrame)
        assert list(frame.columns) == ["id", "name", "email"]
        assert len(frame) == 2

    def test_empty_frame_keeps_columns(self, module: DatabaseModule):
        module.before_test()

        frame = module.grab_entries_from_database("users", {"name": "nobody"})

        assert frame.empty
        assert list(frame.columns) == ["id", "name", "email"]
