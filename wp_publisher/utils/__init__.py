"""
Utility helpers used by the publisher.

This subpackage exposes the error taxonomy, structured logging helpers,
configuration loading, request pacing and the connectivity pre-flight
check.
"""

from .config import PublisherConfig, load_config, normalize_site_url
from .errors import ERRORS, log_message, report_error, report_ok
from .pacing import PacingPolicy
from .pre_flight_checks import run_wordpress_pre_flight_checks

__all__ = [
    "ERRORS",
    "PacingPolicy",
    "PublisherConfig",
    "load_config",
    "log_message",
    "normalize_site_url",
    "report_error",
    "report_ok",
    "run_wordpress_pre_flight_checks",
]
