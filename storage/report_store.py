"""
Report storage.

Reports are append-only: save() assigns an id and never overwrites an existing
report. Two interchangeable backends are provided: Redis (shareable across
instances) and an in-process dict.
"""

import json
import logging
import threading
from typing import Dict, Optional

import redis

from config.settings import settings
from models.exceptions import ReportStoreError
from models.schemas import VisibilityReport
from utils.helpers import generate_report_id

logger = logging.getLogger(__name__)


class ReportStore:
    """Interface for report persistence."""

    def save(self, report: VisibilityReport) -> str:
        """Persist a report and return its id."""
        raise NotImplementedError

    def get(self, report_id: str) -> Optional[VisibilityReport]:
        raise NotImplementedError

    def latest_for_domain(self, domain: str) -> Optional[VisibilityReport]:
        raise NotImplementedError


class InMemoryReportStore(ReportStore):
    """Process-local store for single-instance deployments and tests."""

    def __init__(self):
        self._lock = threading.Lock()
        self._reports: Dict[str, VisibilityReport] = {}
        self._latest: Dict[str, str] = {}

    def save(self, report: VisibilityReport) -> str:
        report_id = report.id or generate_report_id()
        with self._lock:
            if report_id in self._reports:
                raise ReportStoreError("duplicate_report", f"Report {report_id} already exists")
            self._reports[report_id] = report.model_copy(update={"id": report_id})
            self._latest[report.domain] = report_id
        return report_id

    def get(self, report_id: str) -> Optional[VisibilityReport]:
        return self._reports.get(report_id)

    def latest_for_domain(self, domain: str) -> Optional[VisibilityReport]:
        report_id = self._latest.get(domain)
        return self._reports.get(report_id) if report_id else None


class RedisReportStore(ReportStore):
    """
    Redis-backed store.

    Keys:
        report:{id}              JSON report (optional TTL)
        report:domain:{domain}   id of the latest report for a domain
    """

    def __init__(self, client: redis.Redis, ttl_seconds: int = 0):
        self.client = client
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _report_key(report_id: str) -> str:
        return f"report:{report_id}"

    @staticmethod
    def _domain_key(domain: str) -> str:
        return f"report:domain:{domain}"

    def save(self, report: VisibilityReport) -> str:
        report_id = report.id or generate_report_id()
        stored = report.model_copy(update={"id": report_id})
        ttl = self.ttl_seconds or None

        try:
            created = self.client.set(
                self._report_key(report_id),
                stored.model_dump_json(by_alias=True),
                nx=True,
                ex=ttl,
            )
            if not created:
                raise ReportStoreError("duplicate_report", f"Report {report_id} already exists")
            self.client.set(self._domain_key(report.domain), report_id, ex=ttl)
        except redis.RedisError as e:
            raise ReportStoreError("store_unavailable", f"Failed to save report: {e}")

        logger.info(f"💾 Saved report {report_id} for {report.domain}")
        return report_id

    def get(self, report_id: str) -> Optional[VisibilityReport]:
        try:
            raw = self.client.get(self._report_key(report_id))
        except redis.RedisError as e:
            raise ReportStoreError("store_unavailable", f"Failed to load report: {e}")

        if not raw:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return VisibilityReport.model_validate(json.loads(raw))

    def latest_for_domain(self, domain: str) -> Optional[VisibilityReport]:
        try:
            report_id = self.client.get(self._domain_key(domain))
        except redis.RedisError as e:
            raise ReportStoreError("store_unavailable", f"Failed to load report: {e}")

        if not report_id:
            return None
        if isinstance(report_id, bytes):
            report_id = report_id.decode("utf-8")
        return self.get(report_id)


# Singleton instance
_report_store: Optional[ReportStore] = None


def get_report_store() -> ReportStore:
    """
    Get or create the report store for the configured backend.

    Raises:
        ReportStoreError: If the Redis backend is selected but unreachable
    """
    global _report_store
    if _report_store is None:
        if settings.REPORT_STORE_BACKEND == "redis":
            from config.database import get_redis_client
            try:
                client = get_redis_client()
            except ConnectionError as e:
                raise ReportStoreError("store_unavailable", str(e))
            _report_store = RedisReportStore(client, ttl_seconds=settings.REPORT_TTL_SECONDS)
        else:
            _report_store = InMemoryReportStore()
    return _report_store


def set_report_store(store: Optional[ReportStore]):
    """Replace the report store (None resets to the configured backend)."""
    global _report_store
    _report_store = store
