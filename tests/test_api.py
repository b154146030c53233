"""
tests/test_api.py

HTTP contract tests for the recall routers.

Routers are mounted on a bare FastAPI app with dependency overrides, so
no database, scheduler or network is involved.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.routers import cache_router, recalls_router, statistics_router, sync_router
from app.cache import CacheConfig, PayloadCache
from app.domain.recall import SyncSummary
from app.services.recall_data_service import RecallDataService, get_recall_data_service
from app.services.recall_sync_service import RecallSyncError, get_recall_sync_service
from db.session import get_db

ROWS = [
    {
        "id": 3,
        "numero_fiche": "2024-06-0003",
        "libelle": "Fromage au lait cru",
        "marque_produit": "Les Alpages",
        "categorie_produit": "Alimentation",
        "motif_rappel": "Listeria monocytogenes",
        "distributeurs": "Carrefour¤Leclerc",
        "conduites_a_tenir_par_le_consommateur": "Ne plus consommer|Rapporter le produit",
        "liens_vers_les_images": "https://img/a.jpg|https://img/b.jpg",
        "date_publication": "2024-06-03T00:00:00+00:00",
    },
    {
        "id": 2,
        "numero_fiche": "2023-11-0002",
        "libelle": "Peluche lapin",
        "marque_produit": "Doudou & Co",
        "categorie_produit": "Jouets",
        "motif_rappel": "Risque d'étouffement",
        "date_publication": "2023-11-20T00:00:00+00:00",
    },
    {
        "id": 1,
        "numero_fiche": "2023-02-0001",
        "libelle": "Yaourt nature",
        "categorie_produit": "Alimentation",
        "motif_rappel": "Défaut d'étiquetage",
        "date_publication": "2023-02-01T00:00:00+00:00",
    },
]


class FakeRepository:
    def __init__(self, db: Any) -> None:
        self.db = db

    def load_all(self) -> list[dict[str, Any]]:
        return [dict(row) for row in ROWS]

    def query(
        self,
        *,
        category: str | None = None,
        search_text: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> tuple[list[dict[str, Any]], int]:
        rows = [row for row in ROWS if category is None or row.get("categorie_produit") == category]
        if search_text:
            needle = search_text.lower()
            rows = [
                row
                for row in rows
                if any(needle in (row.get(name) or "").lower() for name in ("marque_produit", "motif_rappel"))
            ]
        end = None if limit is None else offset + limit
        return [dict(row) for row in rows[offset:end]], len(rows)

    def get_by_record_number(self, numero_fiche: str) -> dict[str, Any] | None:
        return next((dict(row) for row in ROWS if row["numero_fiche"] == numero_fiche), None)

    def get_by_upstream_id(self, upstream_id: int) -> dict[str, Any] | None:
        return next((dict(row) for row in ROWS if row["id"] == upstream_id), None)


class FakeSyncService:
    def __init__(self, summary: SyncSummary) -> None:
        self._summary = summary

    def sync_or_raise(self, db: Any, *, limit: int | None = None) -> SyncSummary:
        if self._summary.status != "success":
            raise RecallSyncError(self._summary)
        return self._summary


def _override_db():
    yield None


@pytest.fixture()
def data_service(tmp_path: Path) -> RecallDataService:
    return RecallDataService(
        repository_factory=FakeRepository,  # type: ignore[arg-type]
        recent_cache=PayloadCache(CacheConfig(key="recent", freshness_seconds=1800), directory=tmp_path),
        historical_cache=PayloadCache(CacheConfig(key="historical", freshness_seconds=3600), directory=tmp_path),
    )


@pytest.fixture()
def application(data_service: RecallDataService) -> FastAPI:
    application = FastAPI()
    for router in (recalls_router, statistics_router, sync_router, cache_router):
        application.include_router(router)
    application.dependency_overrides[get_db] = _override_db
    application.dependency_overrides[get_recall_data_service] = lambda: data_service
    return application


@pytest.fixture()
def client(application: FastAPI) -> TestClient:
    return TestClient(application)


class TestRecalls:
    def test_list(self, client: TestClient) -> None:
        response = client.get("/recalls")
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 3
        assert body["limit"] == 50
        assert [item["id"] for item in body["items"]] == ["2024-06-0003", "2023-11-0002", "2023-02-0001"]
        assert body["items"][2]["brand"] == "Marque inconnue"

    def test_search_and_category(self, client: TestClient) -> None:
        body = client.get("/recalls", params={"q": "listeria", "category": "Alimentation"}).json()
        assert [item["id"] for item in body["items"]] == ["2024-06-0003"]
        assert body["total"] == 1
        assert body["limit"] == 100

    def test_search_with_explicit_limit(self, client: TestClient) -> None:
        body = client.get("/recalls", params={"q": "a", "limit": 2}).json()
        assert body["limit"] == 2
        assert len(body["items"]) <= 2

    def test_risk_level_filter(self, client: TestClient) -> None:
        body = client.get("/recalls", params={"risk_level": "high"}).json()
        assert [item["risk_level"] for item in body["items"]] == ["high"]

    def test_invalid_risk_level_is_rejected(self, client: TestClient) -> None:
        assert client.get("/recalls", params={"risk_level": "severe"}).status_code == 422

    def test_paging(self, client: TestClient) -> None:
        body = client.get("/recalls", params={"limit": 1, "offset": 1}).json()
        assert [item["id"] for item in body["items"]] == ["2023-11-0002"]
        assert (body["limit"], body["offset"]) == (1, 1)

    def test_recent(self, client: TestClient) -> None:
        body = client.get("/recalls/recent", params={"limit": 2}).json()
        assert len(body["items"]) == 2
        assert body["total"] == 3
        stats = body["stats"]
        assert stats["total"] == 2
        assert {entry["key"]: entry["count"] for entry in stats["risks"]} == {
            "critical": 1,
            "high": 1,
            "medium": 0,
            "low": 0,
        }
        assert [(entry["label"], entry["count"]) for entry in stats["top_categories"]] == [
            ("Alimentation", 1),
            ("Jouets", 1),
        ]

    def test_recent_stats_cover_the_default_page(self, client: TestClient) -> None:
        stats = client.get("/recalls/recent").json()["stats"]
        assert stats["total"] == 3
        assert [entry["label"] for entry in stats["top_categories"]] == ["Alimentation", "Jouets"]
        assert stats["top_categories"][0]["count"] == 2

    def test_detail(self, client: TestClient) -> None:
        response = client.get("/recalls/2024-06-0003")
        assert response.status_code == 200
        body = response.json()
        assert body["risk_level"] == "critical"
        assert body["risk_label"] == "Danger critique"
        assert body["distributor_list"] == ["Carrefour", "Leclerc"]
        assert body["consumer_action_list"] == ["Ne plus consommer", "Rapporter le produit"]
        assert body["image"] == "https://img/a.jpg"
        assert body["image_list"] == ["https://img/a.jpg", "https://img/b.jpg"]

    def test_detail_not_found(self, client: TestClient) -> None:
        assert client.get("/recalls/9999-99-9999").status_code == 404


class TestStatistics:
    def test_unfiltered(self, client: TestClient) -> None:
        response = client.get("/statistics")
        assert response.status_code == 200
        body = response.json()
        assert body["total_recalls"] == body["filtered_recalls"] == 3
        assert body["options"] == {"years": ["2024", "2023"], "categories": ["Alimentation", "Jouets"]}
        report = body["report"]
        assert report["kpis"]["total"] == 3
        assert [entry["year"] for entry in report["yearly"]] == [2023, 2024]
        assert report["top_categories"][0]["label"] == "Alimentation"

    def test_filtered(self, client: TestClient) -> None:
        body = client.get("/statistics", params={"year": "2023", "category": "Alimentation"}).json()
        assert body["total_recalls"] == 3
        assert body["filtered_recalls"] == 1
        assert body["filters"]["year"] == "2023"
        assert body["report"]["risk_distribution"][2]["count"] == 1

    def test_empty_selection(self, client: TestClient) -> None:
        body = client.get("/statistics", params={"year": "2020"}).json()
        assert body["filtered_recalls"] == 0
        assert body["report"]["kpis"] is None

    def test_invalid_year(self, client: TestClient) -> None:
        assert client.get("/statistics", params={"year": "twenty"}).status_code == 422


class TestSyncAndCache:
    def test_sync_success(self, application: FastAPI, client: TestClient) -> None:
        summary = SyncSummary(
            source="rappel_conso",
            records_fetched=100,
            records_upserted=100,
            failed_records=0,
            status="success",
        )
        application.dependency_overrides[get_recall_sync_service] = lambda: FakeSyncService(summary)
        response = client.post("/sync")
        assert response.status_code == 200
        assert response.json()["records_upserted"] == 100

    def test_sync_failure_is_503(self, application: FastAPI, client: TestClient) -> None:
        summary = SyncSummary(
            source="rappel_conso",
            records_fetched=0,
            records_upserted=0,
            failed_records=1,
            status="failed",
            error="upstream unavailable",
        )
        application.dependency_overrides[get_recall_sync_service] = lambda: FakeSyncService(summary)
        response = client.post("/sync")
        assert response.status_code == 503
        assert response.json()["detail"]["error"] == "upstream unavailable"

    def test_cache_info_and_clear(self, client: TestClient) -> None:
        assert client.get("/cache").json() == {"recent": None, "historical": None}
        client.get("/statistics")
        info = client.get("/cache").json()
        assert info["historical"]["age_minutes"] == 0
        assert client.delete("/cache").json() == {"recent": None, "historical": None}
