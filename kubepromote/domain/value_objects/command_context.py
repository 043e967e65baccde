from dataclasses import dataclass, field
from datetime import datetime, UTC


@dataclass(frozen=True)
class CommandContext:
    """
    Value Object identifying the operator command an outcome belongs to.

    Copied into confirmation watchers at spawn time, so it must stay immutable.
    """
    command: str
    initiator: str = "Unknown user"
    channel: str = ""
    issued_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __str__(self) -> str:
        return self.command
