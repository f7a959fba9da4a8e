"""
Logging utilities for the application.
"""
import logging

CALLBACK_FAILURE_CHANNEL = "render-callback-failures"


def setup_logging(service_name: str, log_level: str = "INFO") -> logging.Logger:
    """
    Setup logging configuration for a service.

    Args:
        service_name: Name of the service for log identification
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(service_name)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            f"%(asctime)s - {service_name} - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def get_callback_failure_logger(log_level: str = "WARNING") -> logging.Logger:
    """
    Logger reserved for best-effort callback delivery failures.

    Kept separate from the pipeline logger so failed webhooks can be routed
    and alerted on independently of render outcomes.
    """
    return setup_logging(CALLBACK_FAILURE_CHANNEL, log_level)
