"""
SQL metadata extractor built on sqlglot.

Turns the text of a single model into a ModelMetadata: the columns of the
top-level select list, the tables read in FROM and JOIN clauses, the alias
bindings, and the description written in the comments leading the statement.
"""

import logging
import re
from pathlib import Path

import sqlglot
from sqlglot import exp
from sqlglot.errors import ParseError as SqlglotParseError
from sqlglot.errors import TokenError
from sqlglot.tokens import Token, TokenType

from cadac.exceptions import MultipleStatementsError, ParseError

from ..shared.hashing import compute_sql_hash
from ..shared.types import ColumnMetadata, FilePath, ModelIdentity, ModelMetadata, RawReference
from .base import BaseParser

logger = logging.getLogger(__name__)

# Line and block comments in the text that precedes the first token
_COMMENT_PATTERN = re.compile(r"--([^\n]*)|/\*(.*?)\*/", re.DOTALL)


class SQLParser(BaseParser):
    """Extracts model metadata from SQL text using sqlglot."""

    def __init__(self, dialect: str | None = None):
        """
        Initialize the SQL parser.

        Args:
            dialect: sqlglot dialect used to read the SQL (None for the generic dialect)
        """
        super().__init__()
        self.dialect = dialect

    def parse(
        self, content: str, file_path: FilePath = None, identity: ModelIdentity | None = None
    ) -> ModelMetadata:
        """
        Parse the SQL of a single model.

        Args:
            content: The SQL text
            file_path: Optional file path, used for error context and caching
            identity: Optional identity attached to the returned metadata

        Returns:
            ModelMetadata describing the statement

        Raises:
            MultipleStatementsError: If the text holds more than one statement
            ParseError: If the text is empty, malformed or not a query
        """
        if file_path is None and identity is not None:
            file_path = identity.file_path
        qualified_name = identity.qualified_name if identity else None

        cache_key = self._get_cache_key(content, f"{file_path}|{qualified_name}")
        cached = self._get_from_cache(cache_key)
        if cached is not None:
            logger.debug(f"Using cached metadata for {qualified_name or file_path}")
            return cached

        tokens = self._tokenize(content, file_path, qualified_name)
        statement_count = self._count_statements(tokens)
        if statement_count == 0:
            raise ParseError(
                "No SQL statement found", file_path=file_path, qualified_name=qualified_name
            )
        if statement_count > 1:
            raise MultipleStatementsError(
                statement_count, file_path=file_path, qualified_name=qualified_name
            )

        statement = self._parse_statement(content, file_path, qualified_name)
        if not isinstance(statement, exp.Query):
            raise ParseError(
                f"Expected a query, found a {statement.key.upper()} statement",
                file_path=file_path,
                qualified_name=qualified_name,
            )

        sources, aliases, ctes = self._extract_references(statement)
        columns = self._extract_columns(statement, aliases)
        description = self._extract_description(content, tokens)

        metadata = ModelMetadata(
            sql=content,
            columns=tuple(columns),
            sources=tuple(sources),
            description=description,
            identity=identity,
            aliases=aliases,
            ctes=frozenset(ctes),
            sql_hash=compute_sql_hash(content),
        )

        logger.debug(
            f"Parsed {qualified_name or file_path or 'SQL'}: "
            f"{len(columns)} columns, {len(sources)} sources"
        )
        self._set_cache(cache_key, metadata)
        return metadata

    def parse_file(self, file_path: FilePath, identity: ModelIdentity | None = None) -> ModelMetadata:
        """
        Read and parse a SQL file.

        Args:
            file_path: Path to the SQL file
            identity: Optional identity attached to the returned metadata

        Returns:
            ModelMetadata describing the file

        Raises:
            ParseError: If the file cannot be read or parsed
        """
        file_path = Path(file_path)
        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(
                f"Could not read file: {e}",
                file_path=file_path,
                qualified_name=identity.qualified_name if identity else None,
            ) from e
        return self.parse(content, file_path=file_path, identity=identity)

    def _tokenize(self, content: str, file_path: FilePath, qualified_name: str | None) -> list[Token]:
        try:
            return sqlglot.tokenize(content, read=self.dialect)
        except TokenError as e:
            raise ParseError(
                f"Error tokenizing SQL: {e}", file_path=file_path, qualified_name=qualified_name
            ) from e

    @staticmethod
    def _count_statements(tokens: list[Token]) -> int:
        """Count the non-empty, semicolon separated statements in a token stream."""
        count = 0
        in_statement = False
        for token in tokens:
            if token.token_type == TokenType.SEMICOLON:
                in_statement = False
            elif not in_statement:
                in_statement = True
                count += 1
        return count

    def _parse_statement(
        self, content: str, file_path: FilePath, qualified_name: str | None
    ) -> exp.Expression:
        try:
            parsed = sqlglot.parse(content, read=self.dialect)
        except (SqlglotParseError, TokenError) as e:
            raise ParseError(
                f"Error parsing SQL: {e}", file_path=file_path, qualified_name=qualified_name
            ) from e

        # A semicolon that carries comments comes back as its own expression
        statements = [s for s in parsed if s is not None and s.key != "semicolon"]
        if not statements:
            raise ParseError(
                "No SQL statement found", file_path=file_path, qualified_name=qualified_name
            )
        return statements[0]

    def _extract_references(
        self, statement: exp.Expression
    ) -> tuple[list[RawReference], dict[str, RawReference], set[str]]:
        """
        Walk the statement once, collecting table references, aliases and CTE names.

        Returns:
            Tuple of (sources in first-appearance order, alias bindings, CTE names)
        """
        candidates: list[RawReference] = []
        aliases: dict[str, RawReference] = {}
        ctes: set[str] = set()

        for node in statement.walk(bfs=False):
            if isinstance(node, exp.CTE):
                if node.alias:
                    ctes.add(node.alias)
            elif isinstance(node, exp.Table):
                reference = self._table_reference(node)
                if reference is None:
                    continue
                candidates.append(reference)
                if node.alias:
                    aliases[node.alias] = reference

        sources: list[RawReference] = []
        for reference in candidates:
            if reference.parts == 1 and reference.name in ctes:
                continue
            if reference not in sources:
                sources.append(reference)

        return sources, aliases, ctes

    @staticmethod
    def _table_reference(table: exp.Table) -> RawReference | None:
        # Table functions such as generate_series(...) carry no identifier
        if not isinstance(table.this, exp.Identifier) or not table.name:
            logger.debug(f"Skipping non-table source: {table.sql()}")
            return None

        span = None
        parts = table.parts
        start = parts[0].meta.get("start") if parts else None
        end = parts[-1].meta.get("end") if parts else None
        if isinstance(start, int) and isinstance(end, int):
            span = (start, end + 1)

        return RawReference(
            name=table.name,
            schema=table.db or None,
            database=table.catalog or None,
            span=span,
        )

    def _extract_columns(
        self, statement: exp.Expression, aliases: dict[str, RawReference]
    ) -> list[ColumnMetadata]:
        select = self._top_level_select(statement)
        if select is None:
            return []

        columns = []
        for position, item in enumerate(select.expressions):
            alias = None
            inner = item
            if isinstance(item, exp.Alias):
                alias = item.alias or None
                inner = item.this

            columns.append(
                ColumnMetadata(
                    name=self._column_name(inner),
                    position=position,
                    alias=alias,
                    description=self._column_description(item, inner),
                    source=self._column_source(inner, aliases),
                )
            )
        return columns

    @staticmethod
    def _top_level_select(statement: exp.Expression) -> exp.Select | None:
        """Find the select whose list defines the output columns (the leftmost of a set operation)."""
        node = statement
        while isinstance(node, exp.Expression) and not isinstance(node, exp.Select):
            node = node.this
        return node if isinstance(node, exp.Select) else None

    def _column_name(self, expression: exp.Expression) -> str:
        if isinstance(expression, (exp.Column, exp.Star)):
            return expression.name
        return expression.sql(dialect=self.dialect, comments=False)

    @staticmethod
    def _column_source(expression: exp.Expression, aliases: dict[str, RawReference]) -> str | None:
        if not isinstance(expression, exp.Column) or not expression.table:
            return None
        qualifier = expression.table
        reference = aliases.get(qualifier)
        return reference.qualified if reference else qualifier

    @staticmethod
    def _column_description(item: exp.Expression, inner: exp.Expression) -> str | None:
        comments: list[str] = []
        nodes = [item]
        if inner is not item:
            nodes.append(inner)
            alias_identifier = item.args.get("alias")
            if isinstance(alias_identifier, exp.Expression):
                nodes.append(alias_identifier)
        if isinstance(inner, exp.Column) and isinstance(inner.this, exp.Expression):
            nodes.append(inner.this)

        for node in nodes:
            for comment in node.comments or []:
                text = comment.strip()
                if text and text not in comments:
                    comments.append(text)

        return " ".join(comments) or None

    @staticmethod
    def _extract_description(content: str, tokens: list[Token]) -> str | None:
        """Join the comments that appear before the first token of the statement."""
        first = next((t for t in tokens if t.token_type != TokenType.SEMICOLON), None)
        if first is None:
            return None

        prefix = content[: first.start]
        texts = []
        for match in _COMMENT_PATTERN.finditer(prefix):
            text = match.group(1) if match.group(1) is not None else match.group(2)
            text = text.strip()
            if text:
                texts.append(text)
        return " ".join(texts) or None


def parse(sql: str, identity: ModelIdentity | None = None, dialect: str | None = None) -> ModelMetadata:
    """
    Extract metadata from the SQL of a single model.

    Args:
        sql: The SQL text
        identity: Optional identity attached to the returned metadata
        dialect: Optional sqlglot dialect

    Returns:
        ModelMetadata describing the statement

    Raises:
        ModelParseError: If the text is not exactly one well-formed query
    """
    return SQLParser(dialect=dialect).parse(sql, identity=identity)


