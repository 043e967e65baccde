"""
Domain Services Package

Architectural Intent:
- Contains domain services implementing business logic
"""

from kubepromote.domain.services.rollout_confirmation import (
    RolloutConfirmation,
    Verdict,
    WatchState,
)

__all__ = ["RolloutConfirmation", "Verdict", "WatchState"]
