"""
Promotion Chain Value Object

Architectural Intent:
- Static, ordered chain of environments a version moves through
- The source of a namespace is a pure function of its position in the chain
- Also carries the allow-lists for promotable and listable namespaces
"""

from dataclasses import dataclass
from typing import Optional

DEFAULT_STAGES = ("dev", "qa", "stage", "prod")


@dataclass(frozen=True)
class PromotionChain:
    """
    Value Object for the dev -> qa -> stage -> prod chain.
    """
    stages: tuple[str, ...] = DEFAULT_STAGES
    promotable: tuple[str, ...] = ()
    listable: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if len(self.stages) < 2:
            raise ValueError("Promotion chain needs at least two stages")
        if len(set(self.stages)) != len(self.stages):
            raise ValueError(f"Duplicate stage in chain: {self.stages}")
        # The first stage has no upstream, so it can never be promoted into.
        if not self.promotable:
            object.__setattr__(self, "promotable", self.stages[1:])
        if not self.listable:
            object.__setattr__(self, "listable", self.stages)
        unknown = set(self.promotable) - set(self.stages[1:])
        if unknown:
            raise ValueError(f"Promotable namespaces not in chain: {sorted(unknown)}")

    def source_of(self, namespace: str) -> Optional[str]:
        if namespace not in self.stages:
            return None
        index = self.stages.index(namespace)
        if index == 0:
            return None
        return self.stages[index - 1]

    def can_promote(self, namespace: str) -> bool:
        return namespace in self.promotable

    def can_list(self, namespace: str) -> bool:
        return namespace in self.listable
