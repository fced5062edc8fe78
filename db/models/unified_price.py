"""
db/models/unified_price.py

Shared wide table of competitor prices keyed by SKU.
"""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class UnifiedCompetitorPrice(Base):
    """
    Fixed columns only. Each source adds its own `<Source>_price` and
    `<Source>_link` columns at run time, so they are not mapped here.
    """

    __tablename__ = "unified_competitor_prices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sku: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    my_price: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="Baseline price from the catalog",
    )
