"""In-memory arm registry: arm id -> Variant.

Keeps the current state of every arm of one experiment and serializes
updates, so that several threads can select and observe concurrently.

Usage:
    arms = ArmSet(["red", "green", "blue"])
    arm_id = arms.select(bandit.ucb1)
    arms.observe(arm_id, reward)
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Hashable, Iterable, List, Optional

from bandit import mean, sigma
from variant import RewardOutOfRange, Variant

logger = logging.getLogger(__name__)

Strategy = Callable[..., Optional[Variant]]


class ArmSet:
    def __init__(self, arm_ids: Iterable[Hashable]):
        # dict keeps first-seen order and drops duplicates
        self._variants: Dict[Hashable, Variant] = {a: Variant() for a in arm_ids}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._variants)

    def __contains__(self, arm_id) -> bool:
        return arm_id in self._variants

    @property
    def arm_ids(self) -> List[Hashable]:
        return list(self._variants)

    def get(self, arm_id) -> Variant:
        return self._variants[arm_id]

    def variants(self) -> List[Variant]:
        with self._lock:
            return list(self._variants.values())

    def select(self, strategy: Strategy, *args, **kwargs) -> Optional[Hashable]:
        """Run `strategy(*args, snapshot, **kwargs)` and map the chosen
        variant back to its arm id.
        """
        with self._lock:
            ids = list(self._variants)
            snapshot = list(self._variants.values())
        chosen = strategy(*args, snapshot, **kwargs)
        if chosen is None:
            return None
        # identity, not equality: two arms may hold equal statistics
        for arm_id, v in zip(ids, snapshot):
            if v is chosen:
                return arm_id
        raise ValueError("strategy returned a variant that is not in the snapshot")

    def observe(self, arm_id, reward: float) -> Variant:
        with self._lock:
            current = self._variants[arm_id]
            try:
                updated = current.observe(reward)
            except RewardOutOfRange:
                logger.warning("Rejected reward %r for arm %r", reward, arm_id)
                raise
            self._variants[arm_id] = updated
        return updated

    def compare_and_swap(self, arm_id, expected: Variant, new: Variant) -> bool:
        """Store `new` only if the arm still holds `expected`."""
        with self._lock:
            if self._variants[arm_id] is not expected:
                logger.debug("CAS conflict on arm %r", arm_id)
                return False
            self._variants[arm_id] = new
            return True

    def to_dict(self) -> Dict[Hashable, dict]:
        with self._lock:
            items = list(self._variants.items())
        return {
            a: {
                "reward_sum": v.reward_sum,
                "reward_square_sum": v.reward_square_sum,
                "observation_count": v.observation_count,
                "mean": mean(v),
                "sigma": sigma(v),
            }
            for a, v in items
        }
