"""Benchmarking framework for puzzle analysis and difficulty variants."""

from __future__ import annotations
import json
import logging
import os
import time
import tracemalloc
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ProcessPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from tqdm import tqdm

from ..core.puzzle import Puzzle
from ..core.topology import SquareTopology, Topology
from ..analysis.analyzer import AnalyzerConfig, analyze_puzzle
from ..analysis.difficulty import PRESETS, Tier, calculate_difficulty_score
from ..generator import LevelGenerator

logger = logging.getLogger(__name__)


@dataclass
class BenchmarkResult:
    """Results from scoring one puzzle under one difficulty variant."""
    puzzle_id: int
    target: str
    variant: str
    solvable: bool
    score: int
    tier: str
    block_count: int
    search_mode: str
    states_explored: int
    solution_count: int
    time_seconds: float
    memory_bytes: int
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def on_target(self) -> bool:
        """Whether the scored tier matches the tier the puzzle was generated for."""
        return self.tier == self.target

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "puzzle_id": self.puzzle_id,
            "target": self.target,
            "variant": self.variant,
            "solvable": self.solvable,
            "score": self.score,
            "tier": self.tier,
            "on_target": self.on_target,
            "block_count": self.block_count,
            "search_mode": self.search_mode,
            "states_explored": self.states_explored,
            "solution_count": self.solution_count,
            "time_seconds": self.time_seconds,
            "memory_bytes": self.memory_bytes,
            "memory_mb": self.memory_bytes / (1024 * 1024),
            **self.extra
        }


def run_analysis_task(
    level: Dict[str, Any],
    puzzle_id: int,
    target: str,
    variants: List[str],
    config: Dict[str, Any],
    track_memory: bool = False
) -> List[Dict[str, Any]]:
    """
    Analyze one puzzle and score it under each variant.

    Runs in a worker process, so it takes and returns plain dicts.
    """
    puzzle = Puzzle.from_dict(level)

    if track_memory:
        tracemalloc.start()
    start_time = time.perf_counter()

    analysis = analyze_puzzle(puzzle, AnalyzerConfig.from_dict(config))

    elapsed = time.perf_counter() - start_time
    memory = 0
    if track_memory:
        _, memory = tracemalloc.get_traced_memory()
        tracemalloc.stop()

    results = []
    for variant in variants:
        breakdown = calculate_difficulty_score(analysis, variant)
        results.append(BenchmarkResult(
            puzzle_id=puzzle_id,
            target=target,
            variant=variant,
            solvable=analysis.solvable,
            score=breakdown.score,
            tier=breakdown.tier.value,
            block_count=analysis.block_count,
            search_mode=analysis.search_mode,
            states_explored=analysis.states_explored,
            solution_count=analysis.solution_count,
            time_seconds=elapsed,
            memory_bytes=memory,
        ).to_dict())
    return results


def _result_from_dict(data: Dict[str, Any]) -> BenchmarkResult:
    known = set(BenchmarkResult.__dataclass_fields__) - {"extra"}
    derived = {"on_target", "memory_mb"}
    return BenchmarkResult(
        **{k: v for k, v in data.items() if k in known},
        extra={k: v for k, v in data.items() if k not in known and k not in derived}
    )


class Benchmark:
    """
    Benchmark framework for the analysis pipeline.

    Generates puzzles per target tier, analyses each in a process pool and
    scores it under every selected difficulty variant.
    """

    def __init__(
        self,
        puzzles_per_tier: int = 10,
        tiers: Optional[List[Tier]] = None,
        variants: Optional[List[str]] = None,
        topology: Optional[Topology] = None,
        block_count: int = 20,
        config: Optional[AnalyzerConfig] = None,
        timeout_seconds: float = 60.0,
        max_workers: Optional[int] = None,
        track_memory: bool = False,
        seed: Optional[int] = None
    ):
        """
        Initialize the benchmark.

        Args:
            puzzles_per_tier: Number of puzzles to generate per target tier.
            tiers: Target tiers to generate for (default: all).
            variants: Difficulty variant names to score with (default: all).
            topology: Grid to generate on (default: 6x6 square).
            block_count: Blocks per generated puzzle.
            config: Analyzer limits passed to every worker.
            timeout_seconds: Maximum time to wait for one puzzle.
            max_workers: Process pool size (default: CPU count).
            track_memory: Record peak memory with tracemalloc.
            seed: Random seed for reproducibility.
        """
        self.puzzles_per_tier = puzzles_per_tier
        self.tiers = tiers or list(Tier)
        self.variants = variants or list(PRESETS)
        for variant in self.variants:
            if variant not in PRESETS:
                raise ValueError(f"Unknown difficulty variant: {variant}")
        self.topology = topology or SquareTopology(6, 6)
        self.block_count = block_count
        self.config = config or AnalyzerConfig(seed=seed)
        self.timeout_seconds = timeout_seconds
        self.max_workers = max_workers
        self.track_memory = track_memory
        self.seed = seed

        self.puzzles: Dict[str, List[Puzzle]] = {}
        self.results: List[BenchmarkResult] = []

    def generate_puzzles(self) -> None:
        """Generate all puzzles for benchmarking."""
        generator = LevelGenerator(self.topology, seed=self.seed)

        print("Generating puzzles...")
        for tier in tqdm(self.tiers, desc="Tiers"):
            self.puzzles[tier.value] = generator.generate_batch(
                self.puzzles_per_tier,
                self.block_count,
                tier
            )

    def run(self, show_progress: bool = True) -> List[BenchmarkResult]:
        """
        Run the full benchmark suite.

        Each worker takes one puzzle at a time, and a puzzle's deadline
        starts when it is handed to a worker. A puzzle still running at
        its deadline gets "Timeout" rows and its worker is left to finish
        in the background.

        Returns:
            List of BenchmarkResult objects.
        """
        if not self.puzzles:
            self.generate_puzzles()

        self.results = []
        config = self.config.to_dict()
        pending = deque(
            (puzzle_id, target, puzzle)
            for target, puzzles in self.puzzles.items()
            for puzzle_id, puzzle in enumerate(puzzles)
        )
        workers = self.max_workers or os.cpu_count() or 1

        # Future -> (task, deadline)
        running: Dict[Future, Tuple[Tuple[int, str, Puzzle], float]] = {}
        # Timed out futures still occupy a worker until they return
        abandoned: Set[Future] = set()

        executor = ProcessPoolExecutor(max_workers=workers)
        try:
            with tqdm(total=len(pending), desc="Benchmarking", disable=not show_progress) as pbar:
                while pending or running:
                    abandoned = {f for f in abandoned if not f.done()}
                    while pending and len(running) + len(abandoned) < workers:
                        task = pending.popleft()
                        puzzle_id, target, puzzle = task
                        future = executor.submit(
                            run_analysis_task, puzzle.to_dict(), puzzle_id, target,
                            self.variants, config, self.track_memory
                        )
                        running[future] = (task, time.perf_counter() + self.timeout_seconds)

                    if not running:
                        wait(abandoned, return_when=FIRST_COMPLETED)
                        continue

                    nearest = min(deadline for _, deadline in running.values())
                    done, _ = wait(
                        list(running),
                        timeout=max(0.0, nearest - time.perf_counter()),
                        return_when=FIRST_COMPLETED
                    )

                    for future in done:
                        (puzzle_id, target, puzzle), _ = running.pop(future)
                        try:
                            rows = future.result()
                            self.results.extend(_result_from_dict(r) for r in rows)
                        except Exception as e:
                            logger.exception("Analysis failed for %s puzzle %d", target, puzzle_id)
                            self.results.extend(self._failed(puzzle_id, target, puzzle, str(e)))
                        pbar.update(1)

                    now = time.perf_counter()
                    for future, ((puzzle_id, target, puzzle), deadline) in list(running.items()):
                        if now < deadline:
                            continue
                        del running[future]
                        abandoned.add(future)
                        logger.warning(
                            "Analysis of %s puzzle %d exceeded %.1fs", target, puzzle_id, self.timeout_seconds
                        )
                        self.results.extend(self._failed(puzzle_id, target, puzzle, "Timeout"))
                        pbar.update(1)
        finally:
            executor.shutdown(wait=all(f.done() for f in abandoned))

        self.results.sort(key=lambda r: (r.target, r.puzzle_id, r.variant))
        return self.results

    def _failed(self, puzzle_id: int, target: str, puzzle: Puzzle, error: str) -> List[BenchmarkResult]:
        return [
            BenchmarkResult(
                puzzle_id=puzzle_id,
                target=target,
                variant=variant,
                solvable=False,
                score=0,
                tier=Tier.EASY.value,
                block_count=puzzle.block_count,
                search_mode="failed",
                states_explored=0,
                solution_count=0,
                time_seconds=self.timeout_seconds,
                memory_bytes=0,
                extra={"error": error}
            )
            for variant in self.variants
        ]

    def get_summary(self) -> Dict[str, Any]:
        """Get summary statistics from benchmark results."""
        summary = {
            "total_puzzles": sum(len(p) for p in self.puzzles.values()),
            "variants_tested": list(self.variants),
            "tiers": [t.value for t in self.tiers],
            "results_by_variant": {},
            "results_by_tier": {}
        }

        for variant in self.variants:
            variant_results = [r for r in self.results if r.variant == variant]
            if variant_results:
                scores = [r.score for r in variant_results]
                times = [r.time_seconds for r in variant_results]
                on_target = [r for r in variant_results if r.on_target]

                summary["results_by_variant"][variant] = {
                    "tier_agreement": len(on_target) / len(variant_results) * 100,
                    "avg_score": sum(scores) / len(scores),
                    "max_score": max(scores),
                    "min_score": min(scores),
                    "avg_time_seconds": sum(times) / len(times),
                    "solvable": sum(1 for r in variant_results if r.solvable),
                    "total_tested": len(variant_results)
                }

        for tier in self.tiers:
            tier_results = [r for r in self.results if r.target == tier.value]
            if tier_results:
                summary["results_by_tier"][tier.value] = {}

                for variant in self.variants:
                    rows = [r for r in tier_results if r.variant == variant]
                    if rows:
                        summary["results_by_tier"][tier.value][variant] = {
                            "tier_agreement": sum(1 for r in rows if r.on_target) / len(rows) * 100,
                            "avg_score": sum(r.score for r in rows) / len(rows),
                            "avg_states_explored": sum(r.states_explored for r in rows) / len(rows),
                            "tested": len(rows)
                        }

        return summary

    def save_results(self, output_dir: str) -> None:
        """Save benchmark results and generated puzzles to files."""
        os.makedirs(output_dir, exist_ok=True)

        results_file = os.path.join(output_dir, "benchmark_results.json")
        with open(results_file, "w") as f:
            json.dump([r.to_dict() for r in self.results], f, indent=2)

        summary_file = os.path.join(output_dir, "benchmark_summary.json")
        with open(summary_file, "w") as f:
            json.dump(self.get_summary(), f, indent=2)

        puzzles_dir = os.path.join(output_dir, "puzzles")
        for target, puzzles in self.puzzles.items():
            LevelGenerator.save_to_folder(puzzles, os.path.join(puzzles_dir, target), prefix=f"level_{target}")

        print(f"Results and puzzles saved to {output_dir}")
