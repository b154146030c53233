"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector, ConnectorFetchResult, ConnectorRequestError
from app.connectors.rappel_conso_connector import RappelConsoConnector

__all__ = [
    "BaseConnector",
    "ConnectorFetchResult",
    "ConnectorRequestError",
    "RappelConsoConnector",
]
