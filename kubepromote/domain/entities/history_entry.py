from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class HistoryEntry:
    """
    Entity recording one promoted version. Never updated or deleted.

    Ordering by ``sequence`` within a (namespace, label) pair is promotion order.
    """
    namespace: str
    version: str
    label: str
    sequence: int
    timestamp: datetime

    def __str__(self) -> str:
        return f"#{self.sequence} {self.namespace}/{self.label}@{self.version}"
