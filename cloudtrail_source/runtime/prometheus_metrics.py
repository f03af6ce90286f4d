from __future__ import annotations

import json
import logging
import os

from prometheus_client import CollectorRegistry, Gauge, push_to_gateway

LOGGER = logging.getLogger(__name__)


class SourceMetricsClient:
    """Pushes end-of-run stream counters to a Prometheus Pushgateway.

    Expected environment:
    - PROMETHEUS_PUSHGATEWAY_URL: URL to the Pushgateway.

    Optional:
    - PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON: JSON object of string labels
      used as grouping key, e.g. {"host": "collector-1"}.

    Delivery is best-effort: push failures are logged, never raised.
    """

    def __init__(self) -> None:
        self._pushgateway_url = os.environ.get("PROMETHEUS_PUSHGATEWAY_URL")
        self._grouping_key = self._load_grouping_key()
        self._registry = CollectorRegistry()

    def is_enabled(self) -> bool:
        return self._pushgateway_url is not None

    @staticmethod
    def _load_grouping_key() -> dict[str, str]:
        raw = os.environ.get("PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON")
        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            LOGGER.warning(
                "Invalid PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON; ignoring"
            )
            return {}

        if not isinstance(data, dict):
            return {}

        return {
            key: value
            for key, value in data.items()
            if isinstance(key, str) and isinstance(value, str)
        }

    def record_run(
        self,
        *,
        root_dir: str,
        files_opened: int,
        records_emitted: int,
        failed: bool,
    ) -> None:
        """Register the counters of one finished run."""
        if not self._pushgateway_url:
            return

        labels = {"root_dir": root_dir}
        values = {
            "cloudtrail_source_files_opened": float(files_opened),
            "cloudtrail_source_records_emitted": float(records_emitted),
            "cloudtrail_source_run_failed": 1.0 if failed else 0.0,
        }
        for name, value in values.items():
            gauge = Gauge(
                name,
                documentation=name,
                labelnames=list(labels.keys()),
                registry=self._registry,
            )
            gauge.labels(**labels).set(value)

    def push(self, *, job: str = "cloudtrail_source") -> None:
        if not self._pushgateway_url:
            return

        try:
            push_to_gateway(
                gateway=self._pushgateway_url,
                job=job,
                registry=self._registry,
                grouping_key=self._grouping_key,
            )
        except OSError:
            LOGGER.exception("Prometheus push failed")
            return

        LOGGER.info(
            "Prometheus metrics pushed",
            extra={"job": job, "grouping_key": self._grouping_key},
        )
