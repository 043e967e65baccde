"""
GitOps Port

Architectural Intent:
- Port interface for requesting a version change from the reconciling
  deployment system
- The engine only needs an idempotent "set version" contract; the file format
  and repository layout belong to the adapter
"""

from abc import ABC, abstractmethod


class GitOpsPort(ABC):
    """
    Port interface for pinning a namespace to a version.
    """

    @abstractmethod
    async def set_version(
        self, namespace: str, version: str, change_description: str
    ) -> bool:
        """
        Pins ``namespace`` to ``version``. Safe to call when the pin already
        equals ``version``: returns False when nothing had to change and True
        when a change was committed. Raises on failure.
        """
        pass
