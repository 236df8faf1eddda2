"""
app/connectors/base.py

Base connector abstraction and shared HTTP mechanics.

Upstream fetches are single-attempt with a bounded timeout; a failed fetch
aborts the whole ingestion run and is reported to the caller.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import requests

logger = logging.getLogger(__name__)


class SourceUnavailableError(RuntimeError):
    """
    Raised when an upstream source fails, times out or answers non-2xx.
    """

    def __init__(self, message: str, *, source: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.source = source
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "status_code": self.status_code,
            "message": str(self),
        }


class BaseConnector(ABC):
    """
    Connector interface for fetching raw spreadsheet exports.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        timeout_seconds: float,
        user_agent: str,
        session: requests.Session | None = None,
    ) -> None:
        self.source = source
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds
        self._user_agent = user_agent

    @abstractmethod
    def fetch_text(self) -> str:
        """
        Fetch the upstream export and return it as text.
        """

    def _request_text(
        self,
        *,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> str:
        """
        GET ``url`` and return the body decoded as UTF-8.
        """

        request_headers = {"User-Agent": self._user_agent, "Cache-Control": "no-cache"}
        request_headers.update(headers or {})
        try:
            response = self._session.get(
                url,
                params=params,
                headers=request_headers,
                timeout=self._timeout_seconds,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            logger.error(
                "Connector request failed source=%s status=%s url=%s error=%s",
                self.source,
                status_code,
                url,
                exc,
            )
            raise SourceUnavailableError(
                f"{self.source}: upstream answered HTTP {status_code}.",
                source=self.source,
                status_code=status_code,
            ) from exc
        except requests.Timeout as exc:
            logger.error(
                "Connector request timed out source=%s timeout_seconds=%s url=%s",
                self.source,
                self._timeout_seconds,
                url,
            )
            raise SourceUnavailableError(
                f"{self.source}: request timed out after {self._timeout_seconds:g}s.",
                source=self.source,
            ) from exc
        except requests.RequestException as exc:
            logger.error("Connector request error source=%s url=%s error=%s", self.source, url, exc)
            raise SourceUnavailableError(f"{self.source}: {exc}", source=self.source) from exc

        return response.content.decode("utf-8", errors="replace")
