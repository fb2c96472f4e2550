"""
Unit tests for the SQL metadata extractor.
"""

import hashlib
from pathlib import Path

import pytest

from cadac.exceptions import ModelParseError, MultipleStatementsError, ParseError
from cadac.parser.parsers.sql_parser import SQLParser, parse
from cadac.parser.shared.types import ModelIdentity, RawReference


class TestSQLParser:
    """Test cases for SQLParser."""

    @pytest.fixture
    def parser(self):
        """Create a SQLParser instance."""
        return SQLParser()

    @pytest.fixture
    def identity(self):
        """Identity of a model in the marts schema."""
        return ModelIdentity(
            file_path=Path("models/marts/user_orders.sql"),
            table_name="user_orders",
            schema_name="marts",
        )

    @pytest.fixture
    def documented_sql(self):
        return (
            "-- Users with their orders\n"
            "/* Refreshed daily */\n"
            "SELECT\n"
            "    u.id AS user_id, -- Primary key\n"
            "    u.name,\n"
            "    COUNT(*) AS order_count\n"
            "FROM raw.users AS u\n"
            "LEFT JOIN raw.orders o ON o.user_id = u.id\n"
            "GROUP BY u.id, u.name\n"
        )

    def test_columns_in_select_order(self, parser, documented_sql):
        """Test that columns keep their position, name and alias."""
        metadata = parser.parse(documented_sql)

        assert [c.position for c in metadata.columns] == [0, 1, 2]
        assert [c.name for c in metadata.columns] == ["id", "name", "COUNT(*)"]
        assert [c.alias for c in metadata.columns] == ["user_id", None, "order_count"]
        assert [c.output_name for c in metadata.columns] == ["user_id", "name", "order_count"]

    def test_column_description_from_trailing_comment(self, parser, documented_sql):
        """Test that a comment after a column describes it."""
        metadata = parser.parse(documented_sql)

        assert metadata.columns[0].description == "Primary key"
        assert metadata.columns[1].description is None

    def test_model_description_from_leading_comments(self, parser, documented_sql):
        """Test that line and block comments before the statement are joined."""
        metadata = parser.parse(documented_sql)

        assert metadata.description == "Users with their orders Refreshed daily"

    def test_no_leading_comment_means_no_description(self, parser):
        metadata = parser.parse("SELECT id FROM users -- trailing")

        assert metadata.description is None

    def test_sources_in_order_of_appearance(self, parser, documented_sql):
        """Test that FROM and JOIN tables are collected with their qualifiers."""
        metadata = parser.parse(documented_sql)

        assert metadata.sources == (
            RawReference(name="users", schema="raw"),
            RawReference(name="orders", schema="raw"),
        )

    def test_aliases_bind_to_tables(self, parser, documented_sql):
        """Test that FROM and JOIN aliases map to their references."""
        metadata = parser.parse(documented_sql)

        assert metadata.aliases["u"].qualified == "raw.users"
        assert metadata.aliases["o"].qualified == "raw.orders"

    def test_column_source_substitutes_alias(self, parser, documented_sql):
        """Test that a column's qualifier resolves through the alias map."""
        metadata = parser.parse(documented_sql)

        assert metadata.columns[0].source == "raw.users"
        assert metadata.columns[2].source is None

    def test_duplicate_references_are_collapsed(self, parser):
        sql = "SELECT a.id FROM events a JOIN events b ON a.parent_id = b.id"

        metadata = parser.parse(sql)

        assert metadata.sources == (RawReference(name="events"),)

    def test_three_part_reference(self, parser):
        metadata = parser.parse("SELECT * FROM analytics.raw.events")

        assert metadata.sources == (
            RawReference(name="events", schema="raw", database="analytics"),
        )
        assert metadata.sources[0].parts == 3
        assert metadata.sources[0].qualified == "analytics.raw.events"

    def test_star_column(self, parser):
        metadata = parser.parse("SELECT * FROM users")

        assert len(metadata.columns) == 1
        assert metadata.columns[0].name == "*"
        assert metadata.columns[0].position == 0

    def test_duplicate_column_names_are_kept(self, parser):
        metadata = parser.parse("SELECT a.id, b.id FROM a JOIN b ON a.id = b.id")

        assert [c.name for c in metadata.columns] == ["id", "id"]
        assert [c.source for c in metadata.columns] == ["a", "b"]

    def test_cte_names_are_not_sources(self, parser):
        """Test that references to CTEs stay local to the model."""
        sql = (
            "WITH recent AS (\n"
            "    SELECT * FROM raw.orders WHERE created_at > '2024-01-01'\n"
            ")\n"
            "SELECT r.id, c.name\n"
            "FROM recent r\n"
            "JOIN staging.customers c ON c.id = r.customer_id\n"
        )

        metadata = parser.parse(sql)

        assert set(metadata.sources) == {
            RawReference(name="orders", schema="raw"),
            RawReference(name="customers", schema="staging"),
        }
        assert metadata.ctes == frozenset({"recent"})

    def test_union_uses_leftmost_select_for_columns(self, parser):
        sql = "SELECT a, b FROM x UNION ALL SELECT c, d FROM y"

        metadata = parser.parse(sql)

        assert [c.name for c in metadata.columns] == ["a", "b"]
        assert set(metadata.sources) == {RawReference(name="x"), RawReference(name="y")}

    def test_subquery_tables_are_sources(self, parser):
        sql = "SELECT t.id FROM (SELECT id FROM raw.items) AS t"

        metadata = parser.parse(sql)

        assert metadata.sources == (RawReference(name="items", schema="raw"),)

    def test_table_function_is_not_a_source(self, parser):
        metadata = parser.parse("SELECT * FROM generate_series(1, 10)")

        assert metadata.sources == ()

    def test_trailing_semicolon_is_one_statement(self, parser):
        metadata = parser.parse("SELECT 1 AS one;\n")

        assert metadata.columns[0].alias == "one"

    def test_multiple_statements_rejected(self, parser):
        """Test that two statements fail with the statement count."""
        with pytest.raises(MultipleStatementsError) as exc_info:
            parser.parse("SELECT 1; SELECT 2")

        assert exc_info.value.count == 2
        assert "Found 2 SQL statements" in str(exc_info.value)

    def test_multiple_statements_rejected_even_if_one_is_malformed(self, parser):
        with pytest.raises(MultipleStatementsError):
            parser.parse("SELECT 1; SELEC FROM WHERE")

    @pytest.mark.parametrize("sql", ["", "   \n", "-- only a comment\n"])
    def test_empty_input_rejected(self, parser, sql):
        with pytest.raises(ParseError):
            parser.parse(sql)

    def test_malformed_sql_rejected(self, parser):
        with pytest.raises(ParseError):
            parser.parse("SELECT * FROM users WHERE (id = 1")

    @pytest.mark.parametrize(
        "sql",
        ["CREATE TABLE t (id INT)", "INSERT INTO t VALUES (1)", "DROP TABLE t"],
    )
    def test_non_query_rejected(self, parser, sql):
        with pytest.raises(ParseError):
            parser.parse(sql)

    def test_parse_error_carries_model_context(self, parser, identity):
        with pytest.raises(ModelParseError) as exc_info:
            parser.parse("SELECT 1; SELECT 2", identity=identity)

        assert exc_info.value.qualified_name == "marts.user_orders"
        assert str(exc_info.value).startswith("marts.user_orders:")

    def test_identity_and_hash_attached(self, parser, identity):
        sql = "SELECT id FROM users"

        metadata = parser.parse(sql, identity=identity)

        assert metadata.identity == identity
        assert metadata.qualified_name == "marts.user_orders"
        assert metadata.sql == sql
        assert metadata.sql_hash == hashlib.sha256(sql.encode("utf-8")).hexdigest()

    def test_extraction_is_deterministic(self, documented_sql):
        """Test that two parsers produce identical metadata."""
        first = SQLParser().parse(documented_sql)
        second = SQLParser().parse(documented_sql)

        assert first == second
        assert first.aliases == second.aliases

    def test_cache_returns_same_metadata(self, parser):
        sql = "SELECT id FROM users"

        assert parser.parse(sql) is parser.parse(sql)

        parser.clear_cache()
        assert parser.parse(sql) == parser.parse(sql)

    def test_parse_file(self, parser, tmp_path):
        path = tmp_path / "model.sql"
        path.write_text("SELECT id FROM users", encoding="utf-8")

        metadata = parser.parse_file(path)

        assert metadata.sources == (RawReference(name="users"),)

    def test_parse_missing_file(self, parser, tmp_path):
        with pytest.raises(ParseError):
            parser.parse_file(tmp_path / "missing.sql")

    def test_module_level_parse(self):
        metadata = parse("SELECT id FROM staging.users")

        assert metadata.sources == (RawReference(name="users", schema="staging"),)

    def test_dialect_is_used(self):
        metadata = SQLParser(dialect="postgres").parse("SELECT id::text AS id_text FROM users")

        assert metadata.columns[0].alias == "id_text"
        assert metadata.sources == (RawReference(name="users"),)
