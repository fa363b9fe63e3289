"""
Logging configuration.

On Cloud Run the root logger is routed to Google Cloud Logging.
Everywhere else logs go to stdout, with any json_fields passed through
``extra`` rendered under the message.
"""

import json
import logging
import os
import sys

# Flag to track if logging is already configured
_logging_configured = False


class LocalFormatter(logging.Formatter):
    """Formatter that appends the json_fields from the extra dict."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)

        json_fields = getattr(record, "json_fields", None)
        if json_fields:
            fields_str = json.dumps(json_fields, indent=2, default=str)
            message = f"{message}\n{fields_str}"

        return message


class CompactFormatter(logging.Formatter):
    """Single-line formatter for production log collectors."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)

        json_fields = getattr(record, "json_fields", None)
        if json_fields:
            message = f"{message} {json.dumps(json_fields, default=str)}"

        return message


def setup_logging(service_name: str = "scanstation", production: bool = False):
    """
    Configure root logging once per process.

    Args:
        service_name: Name of the service for log identification
        production: Use single-line log records instead of indented fields
    """
    global _logging_configured

    if _logging_configured:
        return

    # Cloud Run sets K_SERVICE
    if os.getenv("K_SERVICE"):
        _setup_cloud_logging(service_name, production)
    else:
        _setup_local_logging(production)

    _logging_configured = True


def _setup_cloud_logging(service_name: str, production: bool):
    """Configure logging for Cloud Run using google-cloud-logging."""
    try:
        import google.cloud.logging

        client = google.cloud.logging.Client()
        client.setup_logging(log_level=logging.INFO)

        logging.info(f"Cloud Logging configured for service: {service_name}")
    except Exception as e:
        _setup_local_logging(production)
        logging.warning(f"Failed to setup Cloud Logging, using local logging: {e}")


def _setup_local_logging(production: bool = False):
    """Configure logging to stdout."""
    handler = logging.StreamHandler(sys.stdout)
    fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    handler.setFormatter(CompactFormatter(fmt) if production else LocalFormatter(fmt))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.addHandler(handler)
