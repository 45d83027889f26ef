"""Hill-climbing optimizer: one committed shape per round.

Round state machine: Init -> Explore -> Refine -> Commit.

- Init: K independent random candidates of the round's variant.
- Explore: score every candidate (optionally on a thread pool) and keep the
  lowest-error one as the seed.
- Refine: mutate the current best; a strictly lower score is accepted and
  resets its age, anything else ages it. The round ends at ``max_age``.
- Commit: composite onto the canvas, update the running error, append the
  record. A round always commits, even a shape that does not help.

Every random stream is derived from ``(seed, round, candidate index)``, so a
seeded run is reproducible regardless of the worker count.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Generator, Iterator
from concurrent.futures import Executor, ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
from functools import partial
from typing import Any

import numpy as np

from primsight.engine.accumulator import OutputAccumulator
from primsight.engine.buffer import PixelBuffer
from primsight.engine.compositor import composite
from primsight.engine.config import OptimizerConfig
from primsight.engine.rasterizer import Coverage
from primsight.engine.scorer import ScoreContext, optimal_color, score
from primsight.engine.shapes import CanvasBounds, Shape, ShapeType, get_registry
from primsight.models.shapes import ApproximationResult, ShapeRecord
from primsight.utils.color import RGB, parse_hex

logger = logging.getLogger(__name__)


@dataclass
class CandidateState:
    """A shape under search with its paint, score and failed-mutation age."""

    shape: Shape
    coverage: Coverage
    color: RGB
    alpha: float
    score: float
    age: int = 0


@dataclass
class RoundReport:
    index: int
    kind: ShapeType
    # Running total before and after the commit
    previous_total: float
    score: float
    attempts: int
    improvements: int
    elapsed_ms: float
    record: ShapeRecord

    @property
    def adverse(self) -> bool:
        """The committed shape made the approximation worse."""
        return self.score > self.previous_total


class HillClimber:
    """Drives the rounds over one target buffer."""

    def __init__(self, target: PixelBuffer, config: OptimizerConfig | None = None) -> None:
        self.config = config or OptimizerConfig()
        self.config.validate(target.width, target.height)

        self.target = target
        self.seed = self.config.resolved_seed()
        background = parse_hex(self.config.background) if self.config.background else target.average_color()

        self.canvas = PixelBuffer.filled(target.width, target.height, background)
        self.context = ScoreContext.from_buffers(self.canvas, self.target)
        self.output = OutputAccumulator(background)
        self.bounds = CanvasBounds(target.width, target.height, self.config.border_extension)
        self.rounds_completed = 0

    # ── scoring ──

    def evaluate(self, shape: Shape) -> CandidateState:
        """Rasterize, solve paint, and score ``shape`` against the current canvas."""
        coverage = shape.rasterize(self.target.width, self.target.height, self.config.supersample)
        color, alpha = optimal_color(coverage, self.target, self.canvas, self.config.alpha)
        value = score(coverage, color, alpha, self.canvas, self.target, self.context)
        return CandidateState(shape=shape, coverage=coverage, color=color, alpha=alpha, score=value)

    # ── round phases ──

    def _round_streams(self, round_index: int) -> tuple[np.random.Generator, list[np.random.SeedSequence]]:
        """Round generator (variant choice + Refine) and one stream per candidate."""
        sequence = np.random.SeedSequence(self.seed, spawn_key=(round_index,))
        children = sequence.spawn(self.config.candidates + 1)
        return np.random.default_rng(children[0]), children[1:]

    def _choose_kind(self, rng: np.random.Generator) -> ShapeType:
        if self.config.shape_type is not ShapeType.MIXED:
            return self.config.shape_type
        kinds = get_registry().kinds()
        return kinds[int(rng.integers(len(kinds)))]

    def _seed_candidate(self, cls: type[Shape], stream: np.random.SeedSequence) -> CandidateState:
        rng = np.random.default_rng(stream)
        return self.evaluate(cls.randomize(rng, self.bounds, self.config.mutation_step))

    def explore(
        self,
        cls: type[Shape],
        streams: list[np.random.SeedSequence],
        executor: Executor | None = None,
    ) -> CandidateState:
        """Init + Explore: best of the random candidates, ties to the lowest index."""
        if executor is None:
            states = [self._seed_candidate(cls, s) for s in streams]
        else:
            # map() yields in submission order, so selection ignores scheduling
            states = list(executor.map(partial(self._seed_candidate, cls), streams))
        return min(states, key=lambda s: s.score)

    def refine(self, state: CandidateState, rng: np.random.Generator) -> tuple[CandidateState, int, int]:
        """Hill-climb until ``max_age`` consecutive mutations fail.

        Returns the final state, mutation attempts, accepted improvements.
        """
        attempts = improvements = 0
        while state.age < self.config.max_age:
            attempts += 1
            mutated = state.shape.mutate(rng, self.bounds, self.config.mutation_step)
            candidate = self.evaluate(mutated)
            if candidate.score < state.score:
                state = candidate
                improvements += 1
            else:
                state.age += 1
        return state, attempts, improvements

    def commit(self, state: CandidateState) -> ShapeRecord:
        composite(self.canvas, state.coverage, state.color, state.alpha)
        self.context.update_region(state.coverage.box, self.canvas, self.target)
        return self.output.append(state.shape, state.color, state.alpha)

    def step(self, executor: Executor | None = None) -> RoundReport:
        """Run one full round and commit its winner."""
        round_index = self.rounds_completed
        t0 = time.perf_counter()

        rng, streams = self._round_streams(round_index)
        kind = self._choose_kind(rng)
        cls = get_registry().get(kind)
        previous_total = self.context.total

        seed_state = self.explore(cls, streams, executor)
        final, attempts, improvements = self.refine(seed_state, rng)
        record = self.commit(final)
        self.rounds_completed += 1

        report = RoundReport(
            index=round_index,
            kind=kind,
            previous_total=previous_total,
            score=self.context.total,
            attempts=attempts,
            improvements=improvements,
            elapsed_ms=round((time.perf_counter() - t0) * 1000, 1),
            record=record,
        )
        if report.adverse:
            logger.warning(
                "Round %d committed a %s that raised the error (%.1f -> %.1f)",
                round_index,
                kind.value,
                previous_total,
                report.score,
            )
        logger.debug(
            "  round %d: %s score=%.1f attempts=%d improvements=%d in %.1fms",
            round_index,
            kind.value,
            report.score,
            attempts,
            improvements,
            report.elapsed_ms,
        )
        return report

    # ── driving ──

    @contextmanager
    def _executor(self) -> Iterator[Executor | None]:
        if self.config.workers <= 1:
            yield None
            return
        with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
            yield pool

    def run_streaming(self) -> Generator[dict[str, Any], None, None]:
        """Run the remaining rounds, yielding a progress dict after each commit."""
        total = self.config.shape_count
        with self._executor() as executor:
            while self.rounds_completed < total:
                report = self.step(executor)
                yield {
                    "index": report.index,
                    "total": total,
                    "kind": report.kind.value,
                    "score": report.score,
                    "rmse": self.context.rmse,
                    "attempts": report.attempts,
                    "improvements": report.improvements,
                    "elapsed_ms": report.elapsed_ms,
                    "status": "adverse" if report.adverse else "ok",
                }

    def run(self) -> ApproximationResult:
        """Run all ``shape_count`` rounds."""
        start = time.perf_counter()
        logger.info(
            "Optimizer: %d %s shapes on %dx%d (seed=%d, K=%d, max_age=%d, workers=%d)",
            self.config.shape_count,
            self.config.shape_type.value,
            self.target.width,
            self.target.height,
            self.seed,
            self.config.candidates,
            self.config.max_age,
            self.config.workers,
        )
        for _ in self.run_streaming():
            pass
        logger.info(
            "Optimizer complete: %d shapes, rmse %.3f in %.0fms",
            len(self.output),
            self.context.rmse,
            (time.perf_counter() - start) * 1000,
        )
        return self.result()

    def result(self) -> ApproximationResult:
        return ApproximationResult(
            width=self.target.width,
            height=self.target.height,
            background=self.output.background,
            seed=self.seed,
            shapes=list(self.output.records),
            total_error=self.context.total,
            rmse=self.context.rmse,
        )


def create_optimizer(target: PixelBuffer, config: OptimizerConfig | None = None) -> HillClimber:
    """Factory function for creating an optimizer instance."""
    return HillClimber(target, config=config)


def approximate(target: PixelBuffer, config: OptimizerConfig | None = None) -> ApproximationResult:
    """Run a full approximation of ``target``."""
    return create_optimizer(target, config).run()
