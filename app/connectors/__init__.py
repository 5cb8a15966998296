"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector, ConnectorRequestError
from app.connectors.sheet_csv_connector import SheetCSVConnector

__all__ = [
    "BaseConnector",
    "ConnectorRequestError",
    "SheetCSVConnector",
]
