"""
SQLAlchemy-backed merge store for the shared competitor price table.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import (
    Connection,
    MetaData,
    String,
    Table,
    Text,
    insert,
    inspect,
    select,
    text,
    update,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.types import TypeEngine

from app.scraping.config.models import SourceConfig
from app.scraping.logging_utils import log_event
from app.scraping.storage.base import PersistenceError, PriceStore
from app.scraping.types import ScrapeResult
from db.models import UnifiedCompetitorPrice

BASELINE_COLUMN = "my_price"
# Dialects that support positioning a new column with AFTER.
_POSITIONAL_DIALECTS = {"mysql", "mariadb"}


class SQLAlchemyPriceStore(PriceStore):
    """
    Upserts one source's results without touching any other source's columns.

    The table's fixed columns come from `UnifiedCompetitorPrice`; the
    `<Source>_price` / `<Source>_link` pairs are added on first use and the
    table is reflected afterwards, so the column set only ever grows.
    """

    def __init__(self, *, session: Session, logger: logging.Logger | None = None) -> None:
        self._session = session
        self._logger = logger or logging.getLogger(__name__)

    def migrate(self, *, source: SourceConfig) -> list[str]:
        try:
            added = self._ensure_schema(self._session.connection(), source)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise PersistenceError(f"Schema migration failed for {source.name}: {exc}") from exc

        if added:
            log_event(
                self._logger,
                logging.INFO,
                "source_columns_added",
                source=source.name,
                columns=added,
            )
        return added

    def persist(self, results: Sequence[ScrapeResult], *, source: SourceConfig) -> int:
        if not results:
            return 0

        self.migrate(source=source)
        try:
            table = self._reflect_table(self._session.connection())
            for result in results:
                self._upsert(table, result, source)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise PersistenceError(f"Saving {source.name} prices failed: {exc}") from exc

        log_event(
            self._logger,
            logging.INFO,
            "prices_persisted",
            source=source.name,
            rows=len(results),
        )
        return len(results)

    def _ensure_schema(self, connection: Connection, source: SourceConfig) -> list[str]:
        table_name = UnifiedCompetitorPrice.__tablename__
        UnifiedCompetitorPrice.metadata.create_all(
            connection,
            tables=[UnifiedCompetitorPrice.__table__],
        )
        existing = {column["name"] for column in inspect(connection).get_columns(table_name)}

        wanted: list[tuple[str, TypeEngine, str]] = [
            (source.price_column, String(50), BASELINE_COLUMN),
            (source.link_column, Text(), source.price_column),
        ]
        added: list[str] = []
        for name, column_type, after in wanted:
            if name in existing:
                continue
            connection.execute(text(_add_column_ddl(connection, table_name, name, column_type, after)))
            existing.add(name)
            added.append(name)
        return added

    @staticmethod
    def _reflect_table(connection: Connection) -> Table:
        return Table(
            UnifiedCompetitorPrice.__tablename__,
            MetaData(),
            autoload_with=connection,
        )

    def _upsert(self, table: Table, result: ScrapeResult, source: SourceConfig) -> None:
        values = {
            BASELINE_COLUMN: result.baseline_price,
            source.price_column: result.competitor_price,
            source.link_column: result.competitor_url,
        }
        existing_id = self._session.execute(
            select(table.c.id).where(table.c.sku == result.sku)
        ).scalar_one_or_none()

        if existing_id is None:
            self._session.execute(insert(table).values(sku=result.sku, **values))
        else:
            self._session.execute(update(table).where(table.c.id == existing_id).values(**values))


def _add_column_ddl(
    connection: Connection,
    table_name: str,
    column_name: str,
    column_type: TypeEngine,
    after: str,
) -> str:
    dialect = connection.dialect
    quote = dialect.identifier_preparer.quote
    ddl = (
        f"ALTER TABLE {quote(table_name)} ADD COLUMN {quote(column_name)} "
        f"{column_type.compile(dialect=dialect)}"
    )
    if dialect.name in _POSITIONAL_DIALECTS:
        ddl += f" AFTER {quote(after)}"
    return ddl
