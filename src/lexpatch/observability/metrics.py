"""Pluggable metrics for lexpatch.

Counters and timings are pushed to whatever object is set as
``LexpatchConfig.metrics``.  Anything with ``increment`` and ``timing``
methods of the right shape qualifies; with nothing configured the data
points go to :class:`NoopMetricsHook`.

Names in use:

========================================  ========  ==============================
name                                      kind      emitted for
========================================  ========  ==============================
``lexpatch.patch_ops_total``              counter   ops handed to the engine
``lexpatch.patch_ops_skipped_total``      counter   ops naming unknown block ids
``lexpatch.versions_recorded_total``      counter   history entries added
``lexpatch.requests_total``               counter   HTTP blob-store requests
``lexpatch.retries_total``                counter   HTTP retries, tagged by reason
``lexpatch.request_duration_ms``          timing    HTTP round trips
========================================  ========  ==============================
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """What a metrics backend must provide.

    ``tags`` maps label names to string values; backends translate them
    however they like.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Add *value* to the counter *name*."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record one duration sample, in milliseconds."""
        ...


class NoopMetricsHook:
    """Backend that drops every data point."""

    __slots__ = ()

    def increment(self, name: str, value: int = 1, tags: dict[str, str] | None = None) -> None:
        return None

    def timing(self, name: str, ms: float, tags: dict[str, str] | None = None) -> None:
        return None


def resolve_metrics(hook: Any | None) -> MetricsHook:
    """Return *hook*, or a :class:`NoopMetricsHook` when it is ``None``.

    Raises
    ------
    TypeError
        If *hook* lacks ``increment`` or ``timing``.
    """
    if hook is None:
        return NoopMetricsHook()
    if not isinstance(hook, MetricsHook):
        raise TypeError(
            f"metrics hook {type(hook).__name__} must define increment() and timing()"
        )
    return hook
