"""
app/repositories/recall_repository.py

Persistence and query layer for synchronized RappelConso rows.

Rows are written and read with upstream (vendor) field names so the
normalizer sees the same shape whether a record comes from the open-data
API or from the store.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import ColumnElement, func, or_, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from app.domain.recall import RAW_RECALL_FIELDS, parse_recall_date
from db.models.rappel import RappelRecord

logger = logging.getLogger(__name__)

_DEFAULT_BATCH_SIZE = 500
_UPSERT_CONSTRAINT = "uq_rappel_numero_fiche"
_INTEGER_FIELDS = frozenset({"id", "numero_version"})
_SEARCH_FIELDS = ("marque_produit", "modeles_ou_references", "motif_rappel")


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _as_int(value: Any) -> int | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


def _to_payload(record: Mapping[str, Any], synced_at: datetime) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for name in RAW_RECALL_FIELDS:
        value = record.get(name)
        if name in _INTEGER_FIELDS:
            payload[name] = _as_int(value)
        elif name == "date_publication":
            payload[name] = parse_recall_date(value)
        else:
            payload[name] = _as_text(value)
    payload["synced_at"] = synced_at
    return payload


def _to_raw(row: RappelRecord) -> dict[str, Any]:
    raw: dict[str, Any] = {name: getattr(row, name) for name in RAW_RECALL_FIELDS}
    published = raw.get("date_publication")
    if isinstance(published, datetime):
        raw["date_publication"] = published.isoformat()
    return raw


class RecallRepository:
    """
    Repository for the ``rappel`` table.

    The caller owns the session and its transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert_records(
        self,
        records: Sequence[Mapping[str, Any]],
        *,
        synced_at: datetime | None = None,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        Insert or update rows keyed by ``numero_fiche``.

        Rows without a record number are skipped. Within one call the
        last occurrence of a record number wins. Returns the number of
        rows written.
        """

        stamp = synced_at or datetime.now(timezone.utc)
        deduped: dict[str, dict[str, Any]] = {}
        skipped = 0
        for record in records:
            payload = _to_payload(record, stamp)
            key = payload.get("numero_fiche")
            if not key:
                skipped += 1
                continue
            deduped[key] = payload

        if skipped:
            logger.warning("upsert_records skipped %d row(s) without numero_fiche", skipped)

        payloads = list(deduped.values())
        size = max(1, batch_size)
        written = 0
        for start in range(0, len(payloads), size):
            chunk = payloads[start : start + size]
            stmt = insert(RappelRecord).values(chunk)
            update_columns = {
                name: stmt.excluded[name]
                for name in (*RAW_RECALL_FIELDS, "synced_at")
                if name != "numero_fiche"
            }
            update_columns["updated_at"] = func.now()
            stmt = stmt.on_conflict_do_update(
                constraint=_UPSERT_CONSTRAINT,
                set_=update_columns,
            )
            self._session.execute(stmt)
            written += len(chunk)

        return written

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def load_all(self) -> list[dict[str, Any]]:
        """
        Every stored row, most recent publication first.
        """

        stmt = select(RappelRecord).order_by(RappelRecord.date_publication.desc().nulls_last())
        rows = self._session.scalars(stmt).all()
        logger.debug("load_all → %d rows", len(rows))
        return [_to_raw(row) for row in rows]

    def query(
        self,
        *,
        category: str | None = None,
        search_text: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Filtered, paged rows plus the total count of matching rows.

        ``search_text`` matches brand, model/reference and reason,
        case-insensitively.
        """

        conditions: list[ColumnElement[bool]] = []
        if category:
            conditions.append(RappelRecord.categorie_produit == category)
        if search_text and search_text.strip():
            pattern = f"%{_escape_like(search_text.strip())}%"
            conditions.append(
                or_(
                    *(
                        getattr(RappelRecord, name).ilike(pattern, escape="\\")
                        for name in _SEARCH_FIELDS
                    )
                )
            )

        count_stmt = select(func.count()).select_from(RappelRecord).where(*conditions)
        total = int(self._session.scalar(count_stmt) or 0)

        stmt = (
            select(RappelRecord)
            .where(*conditions)
            .order_by(RappelRecord.date_publication.desc().nulls_last())
            .offset(max(0, offset))
        )
        if limit is not None:
            stmt = stmt.limit(max(0, limit))

        rows = self._session.scalars(stmt).all()
        logger.debug(
            "query category=%r search=%r limit=%s offset=%d → %d/%d rows",
            category, search_text, limit, offset, len(rows), total,
        )
        return [_to_raw(row) for row in rows], total

    def get_by_record_number(self, numero_fiche: str) -> dict[str, Any] | None:
        stmt = select(RappelRecord).where(RappelRecord.numero_fiche == numero_fiche).limit(1)
        row = self._session.scalars(stmt).first()
        return _to_raw(row) if row is not None else None

    def get_by_upstream_id(self, upstream_id: int) -> dict[str, Any] | None:
        stmt = select(RappelRecord).where(RappelRecord.id == upstream_id).limit(1)
        row = self._session.scalars(stmt).first()
        return _to_raw(row) if row is not None else None
