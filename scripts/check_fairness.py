#!/usr/bin/env python3
"""Estimate how evenly the shuffle and the lottery spread their picks.

Usage:
    python scripts/check_fairness.py --participants 6 --trials 20000
"""

from __future__ import annotations

import argparse
import random
import statistics
from collections import Counter

from teamdraw.core.draw_engine import DrawEngine, RevealTiming
from teamdraw.core.models import Participant
from teamdraw.core.scheduler import ManualScheduler
from teamdraw.core.shuffle import shuffled

SEEDS = (101, 202, 303)


def _roster(size: int) -> list[Participant]:
    return [Participant(id=f"p{index}", name=f"Person {index + 1}") for index in range(size)]


def first_slot_counts(roster: list[Participant], trials: int, seed: int) -> Counter[str]:
    rng = random.Random(seed)
    return Counter(shuffled(roster, rng)[0].id for _ in range(trials))


def winner_counts(roster: list[Participant], trials: int, seed: int) -> Counter[str]:
    scheduler = ManualScheduler()
    engine = DrawEngine(
        lambda: roster,
        scheduler=scheduler,
        rng=random.Random(seed),
        timing=RevealTiming(duration=0.0),
        allow_repeat=True,
    )
    for _ in range(trials):
        engine.start_draw()
        scheduler.run_until_idle()
    return Counter(record.id for record in engine.winners)


def chi_square(counts: Counter[str], categories: int, trials: int) -> float:
    expected = trials / categories
    return sum((counts.get(f"p{index}", 0) - expected) ** 2 / expected for index in range(categories))


def main() -> None:
    parser = argparse.ArgumentParser(description="Check shuffle and draw uniformity.")
    parser.add_argument("--participants", type=int, default=6)
    parser.add_argument("--trials", type=int, default=20000)
    parser.add_argument("--verbose", action="store_true", help="Print per-seed scores")
    args = parser.parse_args()

    roster = _roster(max(2, args.participants))
    for label, sampler in (("shuffle first slot", first_slot_counts), ("lottery winner", winner_counts)):
        scores = [chi_square(sampler(roster, args.trials, seed), len(roster), args.trials) for seed in SEEDS]
        print(f"{label}: chi² {statistics.fmean(scores):.2f} over {len(roster) - 1} dof")
        if args.verbose:
            for seed, score in zip(SEEDS, scores):
                print(f"  seed {seed}: {score:.2f}")


if __name__ == "__main__":
    main()
