"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector, SourceUnavailableError
from app.connectors.google_sheets_connector import GoogleSheetsConnector

__all__ = [
    "BaseConnector",
    "GoogleSheetsConnector",
    "SourceUnavailableError",
]
