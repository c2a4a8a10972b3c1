"""
Observability for arcbar.

Provides structured logging for the chart render pipeline.
"""

from arcbar.observability.logging import (
    ArcbarLogger,
    HumanReadableFormatter,
    StructuredFormatter,
    configure_logging,
    get_logger,
)

__all__ = [
    "ArcbarLogger",
    "HumanReadableFormatter",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
]
