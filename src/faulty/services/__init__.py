"""Services module for Faulty.

This module provides service abstractions for:
- Calling the backend microservice (MicroserviceClient)
- Counting fault decisions in Prometheus (DecisionRecorder)
"""

from faulty.services.decisions import DecisionRecorder
from faulty.services.microservice import MicroserviceClient, MicroserviceResult

__all__ = [
    "DecisionRecorder",
    "MicroserviceClient",
    "MicroserviceResult",
]
