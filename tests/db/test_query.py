"""Tests for SQL generation from criteria."""

import pytest

from sqlfixture.db.query import (
    Query,
    build_criteria_clause,
    build_delete,
    build_insert,
    build_select,
    build_update,
    quote_name,
    split_criteria_key,
)


class TestSplitCriteriaKey:
    """Operator suffixes on criteria keys."""

    @pytest.mark.parametrize(
        "key, expected",
        [
            ("id", ("id", "=")),
            ("email like", ("email", "LIKE")),
            ("email LIKE", ("email", "LIKE")),
            ("name not   like", ("name", "NOT LIKE")),
            ("age <=", ("age", "<=")),
            ("age >=", ("age", ">=")),
            ("age <", ("age", "<")),
            ("age >", ("age", ">")),
            ("status !=", ("status", "!=")),
            ("status <>", ("status", "<>")),
        ],
    )
    def test_operators(self, key, expected):
        assert split_criteria_key(key) == expected

    def test_column_containing_operator_word(self):
        assert split_criteria_key("likes") == ("likes", "=")


class TestCriteriaClause:
    """WHERE clause construction."""

    def test_empty_criteria(self):
        assert build_criteria_clause(None) == ("", [])
        assert build_criteria_clause({}) == ("", [])

    def test_equality_and_operators_joined_with_and(self):
        clause, params = build_criteria_clause({"name": "alice", "age >": 30})

        assert clause == 'WHERE "name" = :p0 AND "age" > :p1'
        assert params == ["alice", 30]

    def test_none_matches_null(self):
        clause, params = build_criteria_clause({"email": None, "name": "carol"})

        assert clause == 'WHERE "email" IS NULL AND "name" = :p0'
        assert params == ["carol"]

    def test_none_with_not_equal(self):
        clause, params = build_criteria_clause({"email !=": None})

        assert clause == 'WHERE "email" IS NOT NULL'
        assert params == []

    def test_custom_quote_and_start(self):
        clause, params = build_criteria_clause(
            {"id": 1}, quote=lambda name: quote_name(name, "`"), start=2
        )

        assert clause == "WHERE `id` = :p2"
        assert params == [1]


class TestStatementBuilders:
    """INSERT / UPDATE / SELECT / DELETE generation."""

    def test_insert(self):
        query = build_insert("users", {"name": "dave", "email": "dave@example.com"})

        assert query.sql == 'INSERT INTO "users" ("name", "email") VALUES (:p0, :p1)'
        assert query.parameters == ("dave", "dave@example.com")
        assert query.bind_parameters() == {"p0": "dave", "p1": "dave@example.com"}

    def test_update_numbers_criteria_after_data(self):
        query = build_update("users", {"name": "x", "email": "y"}, {"id": 1})

        assert query.sql == 'UPDATE "users" SET "name" = :p0, "email" = :p1 WHERE "id" = :p2'
        assert query.parameters == ("x", "y", 1)

    def test_update_without_criteria(self):
        query = build_update("users", {"name": "x"})

        assert query.sql == 'UPDATE "users" SET "name" = :p0'

    def test_select_uses_column_verbatim(self):
        query = build_select("count(*)", "users", {"email like": "%@example.com"})

        assert query.sql == 'SELECT count(*) FROM "users" WHERE "email" LIKE :p0'
        assert query.parameters == ("%@example.com",)
        assert str(query) == query.sql

    def test_delete(self):
        query = build_delete("memberships", {"user_id": 1, "group_id": 2})

        assert query == Query(
            sql='DELETE FROM "memberships" WHERE "user_id" = :p0 AND "group_id" = :p1',
            parameters=(1, 2),
        )


class TestQuoteName:
    """Identifier quoting."""

    def test_schema_qualified(self):
        assert quote_name("main.users") == '"main"."users"'

    def test_escapes_quote_char(self):
        assert quote_name("we`ird", "`") == "`we``ird`"
        assert quote_name('we"ird') == '"we""ird"'
