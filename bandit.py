"""Selection strategies for the stochastic multi-armed bandit problem.

All functions work on a snapshot (an ordered sequence of `Variant`) and
never mutate it:
    epsilon_greedy(epsilon, variants)   -> Variant | None
    epsilon_decreasing(e0, variants)    -> Variant | None
    ucb1(variants)                      -> Variant | None

Strategies return None for an empty collection. Each accepts an optional
`rng` (numpy Generator); by default a shared, lock-guarded source is used.
"""
from __future__ import annotations

import logging
import math
import threading
from typing import Optional, Sequence

import numpy as np

from variant import Variant

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 0.1
DEFAULT_E0 = 5.0


class LockedRandom:
    """numpy Generator behind a lock so strategies can run from many threads."""
    def __init__(self, seed: Optional[int] = None):
        self._lock = threading.Lock()
        self._rng = np.random.default_rng(seed)

    def seed(self, seed: Optional[int] = None) -> None:
        with self._lock:
            self._rng = np.random.default_rng(seed)

    def random(self) -> float:
        with self._lock:
            return float(self._rng.random())

    def integers(self, high: int) -> int:
        with self._lock:
            return int(self._rng.integers(high))

    def permutation(self, n: int) -> np.ndarray:
        with self._lock:
            return self._rng.permutation(n)


_shared_rng = LockedRandom()


def seed(value: Optional[int] = None) -> None:
    """Reseed the shared random source."""
    _shared_rng.seed(value)


# ----------------- aggregate statistics -----------------
def round_index(variants: Sequence[Variant]) -> int:
    """Total pulls across all variants."""
    return sum(v.observation_count for v in variants)


def observed_count(variants: Sequence[Variant]) -> int:
    return sum(1 for v in variants if v.observation_count > 0)


def twice_observed_count(variants: Sequence[Variant]) -> int:
    return sum(1 for v in variants if v.observation_count > 1)


def mean(v: Variant) -> float:
    # 0 for an unobserved variant
    return v.reward_sum / max(v.observation_count, 1)


def sigma(v: Variant) -> float:
    """Population standard deviation of the observed rewards, NaN if unobserved."""
    n = v.observation_count
    if n == 0:
        return math.nan
    mu = mean(v)
    variance = v.reward_square_sum / n - mu * mu
    # rounding can push a zero variance slightly negative
    return math.sqrt(max(variance, 0.0))


def sigma_sum(variants: Sequence[Variant]) -> float:
    if not variants:
        return 0.0
    return float(np.nansum([sigma(v) for v in variants]))


def rank(v: Variant, total_observations: int) -> float:
    """UCB1 score: mean + sqrt(2 ln(t) / n)."""
    return mean(v) + math.sqrt(2.0 * math.log(total_observations) / v.observation_count)


# ----------------- strategies -----------------
def epsilon_greedy(epsilon: float, variants: Sequence[Variant], rng=None) -> Optional[Variant]:
    """Pull the variant with the highest mean, except with probability
    `epsilon` (or on the very first round) when a random one is pulled.
    """
    if not variants:
        return None
    rng = rng or _shared_rng
    if round_index(variants) == 0 or rng.random() < epsilon:
        return _explore(variants, rng)
    return _greatest_mean(variants)


def epsilon_decreasing(e0: float, variants: Sequence[Variant], rng=None) -> Optional[Variant]:
    """Epsilon-greedy with epsilon_t = min(1, e0 / t), t the round index.

    Analysed in Auer, Cesa-Bianchi and Fischer, "Finite-time analysis of
    the multiarmed bandit problem", Machine Learning (2002).
    """
    if not variants:
        return None
    rng = rng or _shared_rng
    epsilon_t = min(1.0, e0 / max(round_index(variants), 1))
    if rng.random() < epsilon_t:
        return _explore(variants, rng)
    return _greatest_mean(variants)


def ucb1(variants: Sequence[Variant], rng=None) -> Optional[Variant]:
    """UCB1 (Auer et al. 2002). Untried variants are always played first.

    Variants are visited in a fresh random order so that ties and untried
    arms are not always resolved to the same index.
    """
    if not variants:
        return None
    rng = rng or _shared_rng
    total = round_index(variants)

    best: Optional[Variant] = None
    best_score = -math.inf
    for i in rng.permutation(len(variants)):
        v = variants[int(i)]
        if v.observation_count == 0:
            logger.debug("ucb1: playing untried variant at index %d", i)
            return v
        score = rank(v, total)
        if score > best_score:
            best_score = score
            best = v

    logger.debug("ucb1: best score %.6f over %d variants", best_score, len(variants))
    return best


# ----------------- helpers -----------------
def _explore(variants: Sequence[Variant], rng) -> Variant:
    i = int(rng.integers(len(variants)))
    logger.debug("explore: random variant at index %d", i)
    return variants[i]


def _greatest_mean(variants: Sequence[Variant]) -> Variant:
    # strict '>' keeps the first maximum in collection order
    best = variants[0]
    best_mean = -math.inf
    for v in variants:
        m = mean(v)
        if m > best_mean:
            best_mean = m
            best = v
    logger.debug("exploit: greatest mean %.6f", best_mean)
    return best
