"""
Service layer: fetch → audit core → store.
"""
from __future__ import annotations

from typing import Optional

import requests

from analyzers.orchestrator import audit_snapshot
from crawler.fetcher import FetchError, fetch_snapshot
from logger import get_logger
from models import AuditConfig, AuditReport
from storage.store import AuditRecord, Store

logger = get_logger(__name__)


def normalize_url(url: str) -> str:
    url = (url or "").strip()
    if url and not url.lower().startswith(("http://", "https://")):
        url = "https://" + url
    return url


def run_audit(
    url: str,
    config: Optional[AuditConfig] = None,
    store: Optional[Store] = None,
    session: Optional[requests.Session] = None,
) -> AuditReport:
    """
    Audit one page end to end.

    The audit is recorded in `store` when one is given. A FetchError, or any
    other exception, is logged, recorded as a failed audit and re-raised.
    """
    config = config or AuditConfig()
    url = normalize_url(url)
    if not url:
        raise ValueError("A URL is required")

    record = AuditRecord.start(url)
    if store is not None:
        store.save(record)

    logger.info("Starting audit of %s", url)
    try:
        snapshot = fetch_snapshot(url, session=session, config=config)
        report = audit_snapshot(snapshot, config)
    except FetchError as exc:
        logger.error("Audit of %s failed: %s", url, exc.reason)
        if store is not None:
            store.save(record.fail(str(exc)))
        raise
    except Exception as exc:
        logger.exception("Audit of %s crashed", url)
        if store is not None:
            store.save(record.fail(f"{type(exc).__name__}: {exc}"))
        raise

    logger.info(
        "Audit of %s complete: score %d (%s), %d issues",
        url, report.overall.score, report.overall.grade, report.recommendations.total_issues,
    )
    if store is not None:
        store.save(record.complete(report))
    return report
