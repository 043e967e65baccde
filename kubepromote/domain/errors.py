"""
Domain Errors

Architectural Intent:
- Typed failures for every terminal outcome of promotion, rollback and observation
- Raised by ports and use cases, translated to operator messages only at the
  command surface
- AlreadyCurrent is informational: it reports a no-op, not a failure
"""

from __future__ import annotations
from typing import Optional


class PromoterError(Exception):
    """Base class for all kubepromote failures."""

    informational = False


class ClusterConnectionError(PromoterError):
    """The cluster API could not be reached, even after reconnecting."""


class EmptyNamespace(PromoterError):
    def __init__(self, namespace: str) -> None:
        super().__init__(f"no pods found in namespace {namespace}")
        self.namespace = namespace


class QueryError(PromoterError):
    """Transport failure while querying cluster state. Retryable."""

    def __init__(self, message: str, namespace: str = "", attempts: int = 0) -> None:
        super().__init__(message)
        self.namespace = namespace
        self.attempts = attempts


class NamespaceNotAllowed(PromoterError):
    def __init__(self, namespace: str, allowed: tuple[str, ...]) -> None:
        super().__init__(
            f"Namespace `{namespace}` is not allowed. "
            f"Please choose from: {', '.join(allowed)}."
        )
        self.namespace = namespace
        self.allowed = allowed


class LabelNotFound(PromoterError):
    def __init__(self, label: str, namespace: str) -> None:
        super().__init__(
            f"No pods with label `{label}` found in namespace `{namespace}`."
        )
        self.label = label
        self.namespace = namespace


class LabelNotFoundInSource(LabelNotFound):
    def __init__(self, label: str, namespace: str) -> None:
        PromoterError.__init__(
            self,
            f"No pods with label `{label}` found in source namespace `{namespace}`.",
        )
        self.label = label
        self.namespace = namespace


class AlreadyCurrent(PromoterError):
    informational = True

    def __init__(self, version: str, namespace: str) -> None:
        super().__init__(
            f"Version `{version}` is already deployed in namespace `{namespace}`. "
            "No promotion needed."
        )
        self.version = version
        self.namespace = namespace


class NoPriorVersion(PromoterError):
    def __init__(self, namespace: str, label: str, current_version: str) -> None:
        super().__init__("No previous version found for rollback.")
        self.namespace = namespace
        self.label = label
        self.current_version = current_version


class ExternalMutationFailed(PromoterError):
    """The GitOps version-set call failed. Nothing was recorded."""

    def __init__(self, namespace: str, version: str, reason: str) -> None:
        super().__init__(
            f"Failed to set version `{version}` in namespace `{namespace}`: {reason}"
        )
        self.namespace = namespace
        self.version = version
        self.reason = reason


class PersistenceError(PromoterError):
    """History ledger read/write failure.

    When raised after a successful version-set the cluster is changing but the
    ledger does not know about it; callers must surface this distinctly.
    """

    def __init__(self, message: str, namespace: Optional[str] = None) -> None:
        super().__init__(message)
        self.namespace = namespace
