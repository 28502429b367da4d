"""
Observability: logging configuration, correlation ids and request logging.
"""

from researchly.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from researchly.observability.logger import configure_logging

__all__ = [
    "clear_correlation_id",
    "configure_logging",
    "get_correlation_id",
    "set_correlation_id",
]
