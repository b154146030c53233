"""
tests/test_rappel_conso_connector.py

Pytest unit tests for the RappelConso connector with a fake HTTP session.
"""

from __future__ import annotations

from typing import Any

import pytest
import requests

from app.config import ExternalHTTPSettings, RappelConsoSettings
from app.connectors import ConnectorRequestError, RappelConsoConnector
from app.domain.recall import RAW_RECALL_FIELDS


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


class FakeSession:
    def __init__(self, responses: list[FakeResponse]) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def request(self, **kwargs: Any) -> FakeResponse:
        self.calls.append(kwargs)
        return self._responses.pop(0)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    waits: list[float] = []
    monkeypatch.setattr("app.connectors.base.time.sleep", waits.append)
    return waits


def _connector(session: FakeSession, **overrides: Any) -> RappelConsoConnector:
    settings = RappelConsoSettings(**overrides)
    http_settings = ExternalHTTPSettings(
        timeout_seconds=5.0,
        max_retries=2,
        backoff_initial_seconds=0.5,
        backoff_multiplier=2.0,
        rate_limit_per_second=0.0,
    )
    return RappelConsoConnector(settings=settings, http_settings=http_settings, session=session)  # type: ignore[arg-type]


def _payload(*rows: Any) -> dict[str, Any]:
    return {"total_count": len(rows), "results": list(rows)}


class TestFetch:
    def test_request_shape(self) -> None:
        session = FakeSession([FakeResponse(200, _payload())])
        _connector(session).fetch_records()

        [call] = session.calls
        assert call["method"] == "GET"
        assert call["url"] == (
            "https://data.economie.gouv.fr/api/explore/v2.1/catalog/datasets/"
            "rappelconso-v2-gtin-espaces/records"
        )
        assert call["params"] == {"limit": 100, "offset": 0, "order_by": "date_publication DESC"}
        assert call["timeout"] == 5.0

    def test_limit_is_capped_by_page_size(self) -> None:
        session = FakeSession([FakeResponse(200, _payload())])
        _connector(session, page_size=50).fetch_records(limit=500, offset=100)
        assert session.calls[0]["params"]["limit"] == 50
        assert session.calls[0]["params"]["offset"] == 100

    def test_rows_restricted_to_known_fields(self) -> None:
        row = {"numero_fiche": "2024-01-0001", "marque_produit": "Marque", "unexpected": "drop me"}
        session = FakeSession([FakeResponse(200, _payload(row))])
        result = _connector(session).fetch_records()

        assert result.source == "rappel_conso"
        assert result.failed_records == 0
        [record] = result.records
        assert set(record) == set(RAW_RECALL_FIELDS)
        assert record["numero_fiche"] == "2024-01-0001"
        assert record["libelle"] is None
        assert "unexpected" not in record

    def test_non_mapping_rows_count_as_failed(self) -> None:
        session = FakeSession([FakeResponse(200, _payload({"numero_fiche": "A"}, "junk", None))])
        result = _connector(session).fetch_records()
        assert len(result.records) == 1
        assert result.failed_records == 2

    def test_unexpected_payload_shape(self) -> None:
        session = FakeSession([FakeResponse(200, [1, 2, 3])])
        result = _connector(session).fetch_records()
        assert result.records == []
        assert result.failed_records == 1

    def test_disabled_connector_does_not_call_upstream(self) -> None:
        session = FakeSession([])
        result = _connector(session, enabled=False).fetch_records()
        assert result.records == []
        assert session.calls == []


class TestRetry:
    def test_retries_on_503_then_succeeds(self, no_sleep: list[float]) -> None:
        session = FakeSession(
            [
                FakeResponse(503),
                FakeResponse(200, _payload({"numero_fiche": "A"})),
            ]
        )
        result = _connector(session).fetch_records()
        assert len(result.records) == 1
        assert len(session.calls) == 2
        assert no_sleep == [0.5]

    def test_gives_up_after_max_retries(self, no_sleep: list[float]) -> None:
        session = FakeSession([FakeResponse(503), FakeResponse(502), FakeResponse(429)])
        with pytest.raises(ConnectorRequestError):
            _connector(session).fetch_records()
        assert len(session.calls) == 3
        assert no_sleep == [0.5, 1.0]

    def test_non_retryable_status_fails_fast(self) -> None:
        session = FakeSession([FakeResponse(404)])
        with pytest.raises(ConnectorRequestError):
            _connector(session).fetch_records()
        assert len(session.calls) == 1

    def test_invalid_json_raises(self) -> None:
        session = FakeSession([FakeResponse(200, ValueError("bad json"))])
        with pytest.raises(ConnectorRequestError):
            _connector(session).fetch_records()
