"""Pull-based scrape endpoint for the bundle's registry."""

import logging
from typing import Any

from prometheus_client import CollectorRegistry, start_http_server

from .bundle import MetricsBackendUnavailable

logger = logging.getLogger(__name__)


def serve_metrics(port: int, addr: str, registry: CollectorRegistry) -> Any:
    """
    Start the scrape endpoint in a daemon thread.

    Serves OpenMetrics (with exemplars) to scrapers that ask for it and the
    classic text format otherwise.

    Raises:
        MetricsBackendUnavailable: if the endpoint cannot bind.
    """
    try:
        server = start_http_server(port, addr=addr, registry=registry)
    except OSError as exc:
        raise MetricsBackendUnavailable(
            f"Failed to start metrics endpoint on {addr}:{port}: {exc}"
        ) from exc
    logger.info("Serving metrics on http://%s:%d/metrics", addr, port)
    return server
