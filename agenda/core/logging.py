import logging
import sys
from agenda.core.config import settings
import newrelic.agent

def setup_logging():
    """
    Configures logging for the application.
    Integrates with New Relic if configured.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level.upper())

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    plain_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # New Relic's formatter adds trace/entity metadata (Logs in Context)
    if settings.new_relic_license_key:
        try:
            handler.setFormatter(newrelic.agent.NewRelicContextFormatter())
        except Exception:
            handler.setFormatter(plain_formatter)
    else:
        handler.setFormatter(plain_formatter)

    root_logger.addHandler(handler)

    # Set log levels for specific libraries to reduce noise
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)
