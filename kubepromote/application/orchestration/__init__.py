"""
Application Orchestration Package

Architectural Intent:
- Coordination primitives shared by the decision engines
"""

from kubepromote.application.orchestration.workload_locks import WorkloadLocks

__all__ = ["WorkloadLocks"]
