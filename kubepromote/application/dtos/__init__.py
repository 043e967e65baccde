from kubepromote.application.dtos.promotion_dtos import (
    PromotionResult,
    RollbackResult,
    InstanceStatusLine,
    NamespaceReport,
    StageVersion,
    VersionDiff,
)

__all__ = [
    "PromotionResult",
    "RollbackResult",
    "InstanceStatusLine",
    "NamespaceReport",
    "StageVersion",
    "VersionDiff",
]
