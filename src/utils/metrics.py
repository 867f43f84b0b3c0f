"""
Metrics collection and monitoring utilities.

This module provides the Prometheus metrics exposed by VoidBox on
``/metrics`` and small helpers to record them.
"""

import time
from contextlib import contextmanager
from typing import Optional, Tuple

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    Info,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

from src.utils.logger import get_logger
from src.config.constants import SERVICE_NAME, SERVICE_VERSION

# Initialize logger
logger = get_logger(__name__)


class MetricsCollector:
    """
    Centralized metrics collection.

    Every collector lives on a private registry so that repeated app
    creation (tests, reloads) never registers a metric twice globally.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize metrics collector.

        Args:
            registry: Registry to attach collectors to
        """
        self.registry = registry or CollectorRegistry()
        self._setup_prometheus_metrics()

        logger.debug("Metrics collector initialized", service=SERVICE_NAME)

    def _setup_prometheus_metrics(self) -> None:
        """Setup Prometheus metrics collectors."""
        self.service_info = Info(
            'voidbox_service',
            'Service information',
            registry=self.registry
        )
        self.service_info.info({"name": SERVICE_NAME, "version": SERVICE_VERSION})

        # Request metrics
        self.request_counter = Counter(
            'voidbox_requests_total',
            'Total number of HTTP requests',
            ['method', 'endpoint', 'status_code'],
            registry=self.registry
        )

        self.request_duration = Histogram(
            'voidbox_request_duration_seconds',
            'HTTP request duration in seconds',
            ['method', 'endpoint'],
            registry=self.registry
        )

        # File metrics
        self.uploads_total = Counter(
            'voidbox_uploads_total',
            'Total number of uploaded files and notes',
            ['type'],
            registry=self.registry
        )

        self.upload_bytes_total = Counter(
            'voidbox_upload_bytes_total',
            'Total number of uploaded bytes',
            registry=self.registry
        )

        self.downloads_total = Counter(
            'voidbox_downloads_total',
            'Total number of downloads',
            ['outcome'],
            registry=self.registry
        )

        # Auth metrics
        self.auth_attempts_total = Counter(
            'voidbox_auth_attempts_total',
            'Authentication attempts by step and outcome',
            ['step', 'outcome'],
            registry=self.registry
        )

        # Telegram metrics
        self.telegram_duration = Histogram(
            'voidbox_telegram_operation_duration_seconds',
            'Duration of Telegram operations',
            ['operation'],
            registry=self.registry
        )

        # Background jobs
        self.cleanup_removed_total = Counter(
            'voidbox_cleanup_removed_total',
            'Expired files removed by the cleanup job',
            registry=self.registry
        )

    def record_request(self, method: str, endpoint: str, status_code: int, duration: float) -> None:
        self.request_counter.labels(
            method=method, endpoint=endpoint, status_code=str(status_code)
        ).inc()
        self.request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def record_upload(self, file_type: str, size: int) -> None:
        self.uploads_total.labels(type=file_type).inc()
        self.upload_bytes_total.inc(max(size, 0))

    def record_download(self, outcome: str = "success") -> None:
        self.downloads_total.labels(outcome=outcome).inc()

    def record_auth_attempt(self, step: str, outcome: str) -> None:
        self.auth_attempts_total.labels(step=step, outcome=outcome).inc()

    def record_cleanup(self, removed: int) -> None:
        if removed:
            self.cleanup_removed_total.inc(removed)

    @contextmanager
    def time_telegram(self, operation: str):
        """Time a Telegram operation."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.telegram_duration.labels(operation=operation).observe(
                time.perf_counter() - start
            )

    def render(self) -> Tuple[bytes, str]:
        """
        Render metrics in the Prometheus exposition format.

        Returns:
            Tuple of payload and content type
        """
        return generate_latest(self.registry), CONTENT_TYPE_LATEST


# Global metrics collector
metrics = MetricsCollector()
