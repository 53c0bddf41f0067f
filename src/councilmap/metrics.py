"""Resolution outcome observers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol


class MatchMethod(Enum):
    MAPPING = "mapping"
    FUZZY = "fuzzy"
    NOT_FOUND = "not_found"


class ResolutionObserver(Protocol):
    def record_resolution(self, method: MatchMethod, name: str | None) -> None: ...

    def record_degraded(self, reason: str) -> None: ...


class NullObserver:
    def record_resolution(self, method: MatchMethod, name: str | None) -> None:
        return None

    def record_degraded(self, reason: str) -> None:
        return None


@dataclass(slots=True)
class ResolutionStats:
    """Counting observer for hit/miss/degraded outcomes."""

    counts: dict[MatchMethod, int] = field(
        default_factory=lambda: {method: 0 for method in MatchMethod}
    )
    missed_names: set[str] = field(default_factory=set)
    degraded_reasons: list[str] = field(default_factory=list)

    def record_resolution(self, method: MatchMethod, name: str | None) -> None:
        self.counts[method] += 1
        if method is MatchMethod.NOT_FOUND and name:
            self.missed_names.add(name)

    def record_degraded(self, reason: str) -> None:
        self.degraded_reasons.append(reason)

    @property
    def degraded(self) -> bool:
        return bool(self.degraded_reasons)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def hits(self) -> int:
        return self.counts[MatchMethod.MAPPING] + self.counts[MatchMethod.FUZZY]

    @property
    def match_rate(self) -> float:
        return self.hits / self.total if self.total else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "hits": self.hits,
            "by_method": {method.value: self.counts[method] for method in MatchMethod},
            "match_rate": round(self.match_rate, 4),
            "degraded": self.degraded,
            "degraded_reasons": list(self.degraded_reasons),
            "missed_names": sorted(self.missed_names),
        }
