"""
Run one RappelConso recall sync from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import asdict

from app.services.recall_sync_service import STATUS_SUCCESS, get_recall_sync_service
from db.session import session_scope


def main() -> int:
    parser = argparse.ArgumentParser(description="Sync the newest RappelConso recalls into the store.")
    parser.add_argument(
        "--limit",
        dest="limit",
        type=int,
        default=None,
        help="Rows to fetch (capped by the API page size).",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    service = get_recall_sync_service()
    with session_scope() as db:
        summary = service.sync(db, limit=args.limit)

    print(json.dumps(asdict(summary), indent=2, ensure_ascii=False))
    return 0 if summary.status == STATUS_SUCCESS else 1


if __name__ == "__main__":
    raise SystemExit(main())
