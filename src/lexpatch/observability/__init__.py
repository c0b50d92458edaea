"""Observability: JSON logging and metrics hooks for lexpatch."""

from __future__ import annotations

from .logger import RESERVED_KEYS, StructuredFormatter, get_logger
from .metrics import MetricsHook, NoopMetricsHook, resolve_metrics

__all__ = [
    "RESERVED_KEYS",
    "MetricsHook",
    "NoopMetricsHook",
    "StructuredFormatter",
    "get_logger",
    "resolve_metrics",
]
