#enhancer_sim.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from data_structures import EnhancerParams, EnhanceRate
from rates import generate_rates
from transitions import roll_outcome, apply_outcome
from aggregate import per_level_distributions, flattened_trajectory_points


class SimulationNotConverged(RuntimeError):
    """Raised when a caller-supplied round budget runs out before every actor is maxed."""

    def __init__(self, rounds: int, unfinished: int):
        super().__init__(f"{unfinished} actor(s) still below max level after {rounds} rounds")
        self.rounds = rounds
        self.unfinished = unfinished


class EnhancerActor:
    """
    One entity climbing the level ladder.

    history[i] is the attempt count at which level i was first reached;
    history[0] is always 0. The rate table is shared and never written to.
    """

    def __init__(self, rates: Tuple[EnhanceRate, ...]):
        if len(rates) == 0:
            raise ValueError("Rate table must contain at least level 0")
        self.rates = rates
        self.level = 0
        self.attempt_count = 0
        self.history: List[int] = [0]

    @property
    def max_level(self) -> int:
        return len(self.rates) - 1

    @property
    def is_maxed(self) -> bool:
        return self.level >= self.max_level

    def attempt(self, sample: float) -> bool:
        """
        Run one attempt with the given uniform sample. Returns True if now at
        max level. A maxed actor is left untouched.
        """
        if self.is_maxed:
            return True
        outcome = roll_outcome(self.rates[self.level], sample)
        self.level = apply_outcome(self.level, outcome)
        self.attempt_count += 1

        # Levels are only ever gained one at a time, so a first arrival
        # always lands exactly at the end of the history.
        if self.level == len(self.history):
            self.history.append(self.attempt_count)

        return self.is_maxed

    def advance(self, rng: np.random.Generator) -> bool:
        # Maxed actors draw nothing.
        if self.is_maxed:
            return True
        return self.attempt(float(rng.random()))

    def __repr__(self) -> str:
        return f"EnhancerActor(level={self.level}, attempt_count={self.attempt_count}, history={self.history!r})"


@dataclass
class EnhancementResult:
    rates: Tuple[EnhanceRate, ...]
    actors: List[EnhancerActor]
    rounds: int
    distributions: Dict[int, List[int]]
    points: List[Tuple[int, int]]


class EnhancerSimulator:
    def __init__(
        self,
        params: EnhancerParams,
        actor_count: int = 10000,
        rng: np.random.Generator | None = None,
        verbose: bool = False,
        progress: bool = False,
        report_every: int = 2500,
    ):
        if actor_count < 0:
            raise ValueError(f"actor_count must be >= 0, got {actor_count}")
        self.params = params
        self.rates = generate_rates(params)
        self.actor_count = actor_count
        self.rng = rng if rng is not None else np.random.default_rng()
        self.verbose = verbose
        self.progress = progress
        self.report_every = report_every
        self.rounds = 0
        self.actors: List[EnhancerActor] = self.create_many(actor_count)

    def create_many(self, count: int) -> List[EnhancerActor]:
        return [EnhancerActor(self.rates) for _ in range(count)]

    def enhance_many(self) -> bool:
        """One round over every actor. Returns True once all of them are maxed."""
        all_maxed = True
        for actor in self.actors:
            if not actor.advance(self.rng):
                all_maxed = False
        return all_maxed

    def unfinished(self) -> int:
        return sum(1 for actor in self.actors if not actor.is_maxed)

    def run(self, max_rounds: Optional[int] = None) -> EnhancementResult:
        """
        Start a fresh population and run rounds until every actor is maxed.

        There is no cap unless the caller passes max_rounds, in which case
        SimulationNotConverged is raised once that many rounds have run
        without convergence.
        """
        if max_rounds is not None and max_rounds < 1:
            raise ValueError(f"max_rounds must be >= 1, got {max_rounds}")

        self.actors = self.create_many(self.actor_count)
        self.rounds = 0

        if self.verbose:
            print(f"Starting simulation of {len(self.actors)} actors")

        pbar = tqdm(desc="Enhancement rounds", unit="round") if self.progress else None
        try:
            all_maxed = False
            while not all_maxed:
                if max_rounds is not None and self.rounds >= max_rounds:
                    raise SimulationNotConverged(self.rounds, self.unfinished())

                self.rounds += 1
                all_maxed = self.enhance_many()

                if pbar is not None:
                    pbar.update(1)
                if self.verbose and self.report_every and self.rounds % self.report_every == 0:
                    print(f"Reached {self.rounds} iterations")
        finally:
            if pbar is not None:
                pbar.close()

        if self.verbose:
            print(f"Simulation complete at {self.rounds} iterations")

        return EnhancementResult(
            rates=self.rates,
            actors=self.actors,
            rounds=self.rounds,
            distributions=per_level_distributions(self.actors),
            points=flattened_trajectory_points(self.actors),
        )
