"""
tests/test_price_store.py

Merge store tests on in-memory SQLite, plus the CSV snapshot writer.
"""

from __future__ import annotations

import csv
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import mock

from sqlalchemy import MetaData, Table, create_engine, inspect, select
from sqlalchemy.dialects import mysql, sqlite
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import String

from app.scraping.config.models import SourceConfig
from app.scraping.storage import CsvSnapshotWriter, PersistenceError, SQLAlchemyPriceStore
from app.scraping.storage.sqlalchemy_storage import _add_column_ddl
from app.scraping.types import ScrapeResult

NAHEED = SourceConfig(name="Naheed", link_column_index=4, min_columns=6)
DIAMOND = SourceConfig(name="Diamond", link_column_index=3, min_columns=6)


def _result(sku: str, price: str, url: str = "", baseline: str = "1000") -> ScrapeResult:
    return ScrapeResult(sku=sku, baseline_price=baseline, competitor_price=price, competitor_url=url)


class TestSQLAlchemyPriceStore(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        self.session = Session(self.engine)
        self.addCleanup(self.engine.dispose)
        self.addCleanup(self.session.close)
        self.store = SQLAlchemyPriceStore(session=self.session)

    def _rows(self) -> dict[str, dict]:
        table = Table("unified_competitor_prices", MetaData(), autoload_with=self.engine)
        with self.engine.connect() as connection:
            rows = connection.execute(select(table)).mappings().all()
        return {row["sku"]: dict(row) for row in rows}

    def test_migrate_creates_table_and_source_columns_once(self) -> None:
        added = self.store.migrate(source=NAHEED)
        again = self.store.migrate(source=NAHEED)

        self.assertEqual(added, ["Naheed_price", "Naheed_link"])
        self.assertEqual(again, [])
        columns = [column["name"] for column in inspect(self.engine).get_columns("unified_competitor_prices")]
        self.assertEqual(columns[:3], ["id", "sku", "my_price"])
        self.assertIn("Naheed_price", columns)
        self.assertIn("Naheed_link", columns)

    def test_persist_inserts_new_skus(self) -> None:
        written = self.store.persist(
            [_result("A", "2500.00", "https://naheed.pk/a"), _result("C", "none")],
            source=NAHEED,
        )

        rows = self._rows()
        self.assertEqual(written, 2)
        self.assertEqual(rows["A"]["Naheed_price"], "2500.00")
        self.assertEqual(rows["A"]["Naheed_link"], "https://naheed.pk/a")
        self.assertEqual(rows["A"]["my_price"], "1000")
        self.assertEqual(rows["C"]["Naheed_price"], "none")

    def test_repeat_persist_is_idempotent_and_last_write_wins(self) -> None:
        self.store.persist([_result("A", "2500.00", "https://naheed.pk/a")], source=NAHEED)
        self.store.persist(
            [_result("A", "2399.00", "https://naheed.pk/a2", baseline="1100")],
            source=NAHEED,
        )

        rows = self._rows()
        self.assertEqual(list(rows), ["A"])
        self.assertEqual(rows["A"]["Naheed_price"], "2399.00")
        self.assertEqual(rows["A"]["Naheed_link"], "https://naheed.pk/a2")
        self.assertEqual(rows["A"]["my_price"], "1100")

    def test_other_source_columns_are_untouched(self) -> None:
        self.store.persist([_result("A", "2500.00", "https://naheed.pk/a")], source=NAHEED)
        self.store.persist([_result("A", "2450.00", "https://diamond.pk/a")], source=DIAMOND)
        self.store.persist([_result("A", "2600.00", "https://naheed.pk/a")], source=NAHEED)

        row = self._rows()["A"]
        self.assertEqual(row["Naheed_price"], "2600.00")
        self.assertEqual(row["Diamond_price"], "2450.00")
        self.assertEqual(row["Diamond_link"], "https://diamond.pk/a")

    def test_new_sku_leaves_other_source_columns_empty(self) -> None:
        self.store.persist([_result("A", "2500.00")], source=NAHEED)
        self.store.persist([_result("B", "300.00")], source=DIAMOND)

        row = self._rows()["B"]
        self.assertIsNone(row["Naheed_price"])
        self.assertIsNone(row["Naheed_link"])

    def test_empty_result_set_writes_nothing(self) -> None:
        self.assertEqual(self.store.persist([], source=NAHEED), 0)
        self.assertFalse(inspect(self.engine).has_table("unified_competitor_prices"))

    def test_database_errors_become_persistence_error(self) -> None:
        session = mock.Mock(spec=Session)
        session.connection.side_effect = OperationalError("SELECT 1", {}, Exception("db down"))
        store = SQLAlchemyPriceStore(session=session)

        with self.assertRaises(PersistenceError):
            store.persist([_result("A", "2500.00")], source=NAHEED)
        session.rollback.assert_called_once()


class TestAddColumnDdl(unittest.TestCase):
    def _connection(self, dialect: object) -> mock.Mock:
        return mock.Mock(dialect=dialect)

    def test_mysql_positions_column_after_baseline(self) -> None:
        ddl = _add_column_ddl(
            self._connection(mysql.dialect()),
            "unified_competitor_prices",
            "Naheed_price",
            String(50),
            "my_price",
        )

        self.assertIn("`Naheed_price` VARCHAR(50)", ddl)
        self.assertTrue(ddl.endswith("AFTER my_price"))

    def test_other_dialects_append_column(self) -> None:
        ddl = _add_column_ddl(
            self._connection(sqlite.dialect()),
            "unified_competitor_prices",
            "Naheed_price",
            String(50),
            "my_price",
        )

        self.assertNotIn("AFTER", ddl)


class TestCsvSnapshotWriter(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.writer = CsvSnapshotWriter(output_dir=Path(self._tmp.name) / "out")

    def _read(self, path: Path) -> list[list[str]]:
        with path.open(encoding="utf-8", newline="") as handle:
            return list(csv.reader(handle))

    def test_writes_header_and_rows(self) -> None:
        path = self.writer.write(
            [_result("A", "2500.00", "https://naheed.pk/a"), _result("C", "none")],
            source=NAHEED,
        )

        self.assertEqual(path.name, "naheed.csv")
        self.assertEqual(
            self._read(path),
            [
                ["SKU", "my_price", "Naheed_price", "Naheed_link"],
                ["A", "1000", "2500.00", "https://naheed.pk/a"],
                ["C", "1000", "none", ""],
            ],
        )

    def test_overwrites_previous_snapshot(self) -> None:
        self.writer.write([_result("A", "1.00"), _result("B", "2.00")], source=NAHEED)
        path = self.writer.write([_result("Z", "3.00")], source=NAHEED)

        self.assertEqual(len(self._read(path)), 2)
