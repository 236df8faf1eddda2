"""
app/connectors/google_sheets_connector.py

Published Google Sheets CSV export connector.
"""

from __future__ import annotations

import logging

import requests

from app.config import GoogleSheetsSettings
from app.connectors.base import BaseConnector

logger = logging.getLogger(__name__)


class GoogleSheetsConnector(BaseConnector):
    """
    Fetch the weekly KPI sheet as CSV text.

    An empty body is returned as "" so callers can treat it as a no-data
    result rather than a failure.
    """

    def __init__(
        self,
        *,
        settings: GoogleSheetsSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(
            source="google_sheets",
            timeout_seconds=settings.timeout_seconds,
            user_agent=settings.user_agent,
            session=session,
        )
        self._csv_url = settings.csv_url

    @property
    def csv_url(self) -> str:
        return self._csv_url

    def fetch_text(self) -> str:
        text = self._request_text(url=self._csv_url)
        if not text.strip():
            logger.warning("Google Sheets export is empty url=%s", self._csv_url)
            return ""
        logger.info("Google Sheets export fetched chars=%s", len(text))
        return text
