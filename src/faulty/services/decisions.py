"""Prometheus accounting for fault middleware decisions.

Terminated requests never reach Flask, so prometheus-flask-exporter does not
see them. The ``status`` label carries the injected status code for those
requests (empty for every other decision) so error rates stay visible.
"""

from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter

from faulty.constants import DECISIONS_METRIC_NAME
from faulty.middleware.fault import FaultDecision


class DecisionRecorder:
    """Counts fault decisions per outcome and injected status.

    Pass ``record`` as the middleware's ``on_decision`` hook.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.counter = Counter(
            DECISIONS_METRIC_NAME,
            "Fault injection decisions by outcome and injected status",
            ["decision", "status"],
            registry=registry if registry is not None else REGISTRY,
        )
        # Export every decision at zero so dashboards see the series up front
        for decision in FaultDecision:
            self.counter.labels(decision=decision.value, status="")

    def record(self, decision: FaultDecision, path: str, status_code: Optional[int] = None) -> None:
        status = str(status_code) if status_code is not None else ""
        self.counter.labels(decision=decision.value, status=status).inc()
