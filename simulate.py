# ===================== simulate.py =====================
"""Replay a selection strategy against synthetic arms.

Run examples:
  # UCB1 on three arms
  python simulate.py --strategy ucb1 --means 0.2,0.5,0.7 --rounds 2000

  # Epsilon-greedy with 5% exploration
  python simulate.py --strategy epsilon_greedy --epsilon 0.05 --means 0.2,0.5,0.7

  # Epsilon-decreasing, e0 = 10
  python simulate.py --strategy epsilon_decreasing --e0 10 --means 0.2,0.5,0.7

Each arm's reward is Beta distributed around its true mean and kept in [0, 1).
Outputs land in <outdir>/<strategy>/summary.txt
"""
from __future__ import annotations
import argparse, logging, os
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

import bandit
from arms import ArmSet

logger = logging.getLogger("simulate")

STRATEGIES = ("epsilon_greedy", "epsilon_decreasing", "ucb1")
CONCENTRATION = 10.0
MAX_REWARD = float(np.nextafter(1.0, 0.0))


def draw_reward(rng: np.random.Generator, true_mean: float) -> float:
    a = max(true_mean * CONCENTRATION, 1e-6)
    b = max((1.0 - true_mean) * CONCENTRATION, 1e-6)
    return min(float(rng.beta(a, b)), MAX_REWARD)


def pick(arms: ArmSet, strategy: str, epsilon: float, e0: float, rng: np.random.Generator):
    if strategy == "epsilon_greedy":
        return arms.select(bandit.epsilon_greedy, epsilon, rng=rng)
    if strategy == "epsilon_decreasing":
        return arms.select(bandit.epsilon_decreasing, e0, rng=rng)
    if strategy == "ucb1":
        return arms.select(bandit.ucb1, rng=rng)
    raise ValueError(f"Unknown strategy: {strategy}")


def run(
    strategy: str,
    means: Sequence[float],
    rounds: int,
    *,
    epsilon: float = bandit.DEFAULT_EPSILON,
    e0: float = bandit.DEFAULT_E0,
    seed: Optional[int] = None,
) -> dict:
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown strategy: {strategy}")
    true_means = np.asarray(means, dtype=np.float64)
    if true_means.size == 0:
        raise ValueError("at least one arm mean is required")
    # written as a positive check so NaN fails it
    if not np.all((true_means >= 0.0) & (true_means <= 1.0)):
        raise ValueError("arm means must lie in [0, 1]")

    rng = np.random.default_rng(seed)
    arms = ArmSet(range(true_means.size))
    best = float(true_means.max())

    rewards = np.zeros(rounds, dtype=np.float64)
    regret = 0.0
    for t in range(rounds):
        arm = pick(arms, strategy, epsilon, e0, rng)
        r = draw_reward(rng, float(true_means[arm]))
        arms.observe(arm, r)
        rewards[t] = r
        regret += best - float(true_means[arm])

    stats = arms.to_dict()
    pulls = [stats[a]["observation_count"] for a in arms.arm_ids]
    logger.info("%s: %d rounds, regret %.3f", strategy, rounds, regret)
    return {
        "strategy": strategy,
        "rounds": rounds,
        "pulls": pulls,
        "total_reward": float(rewards.sum()),
        "mean_reward": float(rewards.mean()) if rounds else 0.0,
        "regret": regret,
        "arms": stats,
    }


def format_summary(result: dict, means: Sequence[float]) -> str:
    lines = [
        f"Strategy: {result['strategy']}",
        f"Rounds: {result['rounds']}",
        f"Total Reward: {result['total_reward']:.2f}",
        f"Mean Reward: {result['mean_reward']:.4f}",
        f"Regret: {result['regret']:.2f}",
    ]
    for arm, mu in enumerate(means):
        s = result["arms"][arm]
        lines.append(
            f"Arm {arm}: true {mu:.3f} | pulls {s['observation_count']} | est {s['mean']:.3f}"
        )
    return "\n".join(lines) + "\n"


def main(argv: Optional[Sequence[str]] = None) -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    p = argparse.ArgumentParser(description="Replay a bandit strategy against synthetic arms")
    p.add_argument("--strategy", choices=STRATEGIES, default="ucb1")
    p.add_argument("--means", default="0.2,0.5,0.7", help="Comma separated true arm means in [0, 1]")
    p.add_argument("--rounds", type=int, default=1000)
    p.add_argument("--epsilon", type=float, default=bandit.DEFAULT_EPSILON, help="Exploration rate for epsilon_greedy")
    p.add_argument("--e0", type=float, default=bandit.DEFAULT_E0, help="Initial rate for epsilon_decreasing")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--outdir", default="results")
    args = p.parse_args(argv)

    try:
        means = [float(x) for x in args.means.split(",") if x.strip()]
    except ValueError:
        p.error(f"--means must be comma separated numbers, got {args.means!r}")
    if args.rounds < 0:
        p.error("--rounds must be >= 0")

    try:
        result = run(args.strategy, means, args.rounds, epsilon=args.epsilon, e0=args.e0, seed=args.seed)
    except ValueError as e:
        p.error(str(e))
    summary = format_summary(result, means)

    out_dir = Path(args.outdir) / args.strategy
    out_dir.mkdir(parents=True, exist_ok=True)
    with open(out_dir / "summary.txt", "w", encoding="utf-8") as f:
        f.write(summary)
    print(summary, end="")


if __name__ == "__main__":
    main()
