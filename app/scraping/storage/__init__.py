"""
Storage layer exports.
"""

from app.scraping.storage.base import PersistenceError, PriceStore
from app.scraping.storage.csv_snapshot import CsvSnapshotWriter
from app.scraping.storage.sqlalchemy_storage import SQLAlchemyPriceStore

__all__ = ["CsvSnapshotWriter", "PersistenceError", "PriceStore", "SQLAlchemyPriceStore"]
