"""
app/connectors/sheet_csv_connector.py

Fetches a published spreadsheet tab as CSV text.
"""

from __future__ import annotations

import logging

import requests

from app.config import ExternalHTTPSettings
from app.connectors.base import BaseConnector, ConnectorRequestError
from app.parsing.tabular import looks_like_markup

logger = logging.getLogger(__name__)


class SheetCSVConnector(BaseConnector):
    """
    Connector for a spreadsheet published to the web in CSV format.

    Sharing or permission problems come back as an HTML sign-in page with a
    200 status, so markup bodies are treated as fetch failures.
    """

    def __init__(
        self,
        *,
        source: str,
        csv_url: str,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
        **kwargs,
    ) -> None:
        super().__init__(source=source, http_settings=http_settings, session=session, **kwargs)
        self._csv_url = csv_url

    def fetch_text(self) -> str:
        response = self._request(method="GET", url=self._csv_url, headers={"Accept": "text/csv"})

        content_type = response.headers.get("Content-Type", "").lower()
        if "charset" not in content_type:
            response.encoding = "utf-8"
        text = response.text

        if "text/html" in content_type or looks_like_markup(text):
            logger.error(
                "Source returned markup instead of CSV source=%s content_type=%s",
                self.source,
                content_type or "unknown",
            )
            raise ConnectorRequestError(
                f"{self.source}: source returned a web page instead of CSV; check the sheet's sharing settings."
            )

        logger.info("Fetched source document source=%s bytes=%s", self.source, len(response.content))
        return text
