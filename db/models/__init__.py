"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.kpi_weekly_data import KpiWeeklyData

__all__ = [
    "KpiWeeklyData",
]
