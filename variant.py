"""Reward accumulator for a single bandit arm.
A `Variant` keeps the sufficient statistics of the rewards seen so far:
sum, sum of squares and number of pulls. It is immutable; `observe`
returns a new value.
"""
from __future__ import annotations

from dataclasses import dataclass


class RewardOutOfRange(ValueError):
    """Raised by `Variant.observe` when the reward is not in [0, 1).
    The rejected variant is left untouched and travels on `.variant`.
    """
    def __init__(self, reward: float, variant: "Variant"):
        self.reward = reward
        self.variant = variant
        super().__init__(f"Reward {reward!r} is out of range [0, 1)")


@dataclass(frozen=True)
class Variant:
    reward_sum: float = 0.0
    reward_square_sum: float = 0.0
    observation_count: int = 0

    def __post_init__(self) -> None:
        if self.observation_count < 0:
            raise ValueError(f"observation_count must be >= 0, got {self.observation_count}")
        # negated so NaN sums are rejected as well
        if not (0.0 <= self.reward_sum <= self.observation_count):
            raise ValueError(f"reward_sum must lie in [0, observation_count], got {self.reward_sum}")
        if not (self.reward_square_sum >= 0.0):
            raise ValueError(f"reward_square_sum must be >= 0, got {self.reward_square_sum}")

    def observe(self, reward: float) -> "Variant":
        check_reward(reward, self)
        return Variant(
            self.reward_sum + reward,
            self.reward_square_sum + reward * reward,
            self.observation_count + 1,
        )


def new_variant() -> Variant:
    return Variant()


def check_reward(reward: float, variant: Variant) -> None:
    if not (0.0 <= reward < 1.0):  # NaN fails the comparison too
        raise RewardOutOfRange(reward, variant)
