"""
app.py - FastAPI application exposing MySQL server metrics
"""
import sys
from typing import Optional, Sequence

from fastapi import FastAPI, Response
from fastapi.responses import HTMLResponse
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)
from pydantic import BaseModel

from collector import MySQLCollector
from config import ConfigurationError, Settings, settings
from database import StatusSource
from logger import configure_root_logger, get_logger

logger = get_logger(__name__)

LANDING_PAGE = """<html>
<head><title>MySQLd exporter</title></head>
<body>
<h1>MySQLd exporter</h1>
<p><a href='{telemetry_path}'>Metrics</a></p>
</body>
</html>
"""


class HealthResponse(BaseModel):
    status: str
    version: str
    last_scrape_error: bool
    last_scrape_duration_seconds: float
    scrapes_total: float


def build_registry(collector: MySQLCollector) -> CollectorRegistry:
    """Registry holding the MySQL collector plus process metrics"""
    registry = CollectorRegistry()
    registry.register(collector)
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    return registry


def create_app(collector: MySQLCollector, telemetry_path: Optional[str] = None) -> FastAPI:
    """
    Build the exporter application around a collector.

    The metrics route is a plain def so FastAPI runs every scrape in its
    threadpool; concurrent requests are serialized by the collector lock.
    """
    telemetry_path = telemetry_path or settings.get('web_telemetry_path', '/metrics')
    registry = build_registry(collector)

    app = FastAPI(
        title=settings.get('app_name'),
        version=settings.get('version'),
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.collector = collector
    app.state.registry = registry

    @app.get(telemetry_path, tags=["System"])
    def metrics():
        """Prometheus metrics endpoint; every request runs one scrape"""
        return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    @app.get("/", response_class=HTMLResponse, tags=["UI"])
    def home():
        return LANDING_PAGE.format(telemetry_path=telemetry_path)

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    def health_check():
        """Report the last scrape outcome without querying the database"""
        outcome = collector.last_outcome
        return HealthResponse(
            status="unhealthy" if outcome.errored else "healthy",
            version=settings.version,
            last_scrape_error=outcome.errored,
            last_scrape_duration_seconds=outcome.duration_seconds,
            scrapes_total=collector.scrapes_total,
        )

    return app


def main(argv: Optional[Sequence[str]] = None):
    configure_root_logger()
    config = Settings.from_args(argv)

    try:
        config.validate_settings()
        host, port = config.listen_host_port
        source = StatusSource(config.data_source_name, timeout=config.scrape_timeout)
    except ConfigurationError as e:
        logger.critical(str(e))
        sys.exit(1)

    app = create_app(MySQLCollector(source), config.web_telemetry_path)

    import uvicorn

    log_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
        },
        "handlers": {
            "default": {
                "formatter": "default",
                "class": "logging.StreamHandler",
            },
        },
        "root": {
            "level": config.log_level,
            "handlers": ["default"],
        },
    }

    logger.info(f"Starting {config.app_name} v{config.version} on {host}:{port}")
    try:
        uvicorn.run(app, host=host, port=port, log_config=log_config)
    finally:
        source.close()


if __name__ == "__main__":
    main()
