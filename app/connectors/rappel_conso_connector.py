"""
app/connectors/rappel_conso_connector.py

Connector for the RappelConso dataset on the data.economie.gouv.fr
Explore v2.1 API.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from app.config import ExternalHTTPSettings, RappelConsoSettings
from app.connectors.base import BaseConnector, ConnectorFetchResult
from app.domain.recall import RAW_RECALL_FIELDS, RawRecallRecord

logger = logging.getLogger(__name__)

SOURCE_NAME = "rappel_conso"


class RappelConsoConnector(BaseConnector):
    """
    Pull the newest recall sheets, most recent publication first.
    """

    def __init__(
        self,
        *,
        settings: RappelConsoSettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source=SOURCE_NAME, http_settings=http_settings, session=session)
        self._settings = settings

    @property
    def records_url(self) -> str:
        return (
            f"{self._settings.base_url.rstrip('/')}/catalog/datasets/"
            f"{self._settings.dataset}/records"
        )

    def fetch_records(self, *, limit: int | None = None, offset: int = 0) -> ConnectorFetchResult:
        if not self._settings.enabled:
            logger.info("RappelConso connector disabled; skipping fetch")
            return ConnectorFetchResult(source=self.source)

        page_size = self._settings.page_size if limit is None else max(1, min(limit, self._settings.page_size))
        payload = self._get_json(
            self.records_url,
            params={
                "limit": page_size,
                "offset": max(0, offset),
                "order_by": self._settings.order_by,
            },
        )

        rows = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            logger.error("Unexpected RappelConso payload shape: %s", type(payload).__name__)
            return ConnectorFetchResult(source=self.source, failed_records=1)

        records: list[RawRecallRecord] = []
        failed_records = 0
        for index, row in enumerate(rows):
            record = self._select_fields(row)
            if record is None:
                failed_records += 1
                logger.warning("Skipping malformed RappelConso row index=%s", index)
                continue
            records.append(record)

        logger.info(
            "RappelConso fetch limit=%s offset=%s records=%s failed=%s total_count=%s",
            page_size,
            offset,
            len(records),
            failed_records,
            payload.get("total_count"),
        )
        return ConnectorFetchResult(
            source=self.source,
            records=records,
            failed_records=failed_records,
        )

    @staticmethod
    def _select_fields(row: Any) -> dict[str, Any] | None:
        if not isinstance(row, dict):
            return None
        return {name: row.get(name) for name in RAW_RECALL_FIELDS}
