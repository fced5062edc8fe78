"""
Model package exports.

Import all SQLAlchemy models here so metadata registration works without
extra imports.
"""

from db.models.unified_price import UnifiedCompetitorPrice

__all__ = ["UnifiedCompetitorPrice"]
