from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class MulticastResult:
    """Outcome of one multicast call; ``results`` is aligned with the tokens sent."""

    success_count: int = 0
    failure_count: int = 0
    results: list[bool] = field(default_factory=list)

    @classmethod
    def from_results(cls, results: list[bool]) -> MulticastResult:
        ok = sum(1 for r in results if r)
        return cls(success_count=ok, failure_count=len(results) - ok, results=results)
