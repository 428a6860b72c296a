from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from threading import Lock
from typing import Dict


@dataclass
class LoyaltySnapshot:
    additions: Dict[str, Dict[str, int]]
    points_awarded: int
    failures: Dict[str, int]

    def as_dict(self) -> Dict[str, object]:
        return {
            "additions": {key: dict(value) for key, value in self.additions.items()},
            "points_awarded": self.points_awarded,
            "failures": dict(self.failures),
        }


class LoyaltyObservabilityStore:
    """Collect point-accrual telemetry for dashboards and alerting."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._by_event_type: Dict[str, int] = defaultdict(int)
        self._by_tier: Dict[str, int] = defaultdict(int)
        self._points_awarded = 0
        self._failures: Dict[str, int] = defaultdict(int)

    def record_points_added(self, event_type: str, tier: str, delta_points: int) -> None:
        with self._lock:
            self._by_event_type[event_type] += 1
            self._by_tier[tier] += 1
            self._points_awarded += delta_points

    def record_failure(self, code: str) -> None:
        with self._lock:
            self._failures[code or "unknown"] += 1

    def snapshot(self) -> LoyaltySnapshot:
        with self._lock:
            additions = {
                "by_event_type": dict(self._by_event_type),
                "by_tier": dict(self._by_tier),
            }
            points_awarded = self._points_awarded
            failures = dict(self._failures)
        return LoyaltySnapshot(additions=additions, points_awarded=points_awarded, failures=failures)

    def reset(self) -> None:
        with self._lock:
            self._by_event_type.clear()
            self._by_tier.clear()
            self._points_awarded = 0
            self._failures.clear()


_STORE = LoyaltyObservabilityStore()


def get_loyalty_store() -> LoyaltyObservabilityStore:
    return _STORE


__all__ = ["get_loyalty_store", "LoyaltyObservabilityStore", "LoyaltySnapshot"]
