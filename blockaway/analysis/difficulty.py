"""Difficulty scoring (0-100) and tier classification from a puzzle analysis."""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .analyzer import PuzzleAnalysis


class Tier(Enum):
    """Difficulty tiers, easiest first."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    SUPER_HARD = "superHard"

    @property
    def rank(self) -> int:
        """1 for easy up to 4 for superHard."""
        return list(Tier).index(self) + 1


@dataclass(frozen=True)
class DifficultyWeights:
    """
    One versioned difficulty formula.

    Every preset shares the same component shape; a component with a zero
    weight contributes nothing. Thresholds are inclusive lower bounds for
    medium, hard and superHard.
    """
    name: str

    # Average blockers per block, linear and capped
    blockers_multiplier: float
    blockers_cap: float

    # Locked blocks: "fraction" scales locked/total against locked_threshold,
    # "count" awards one point per locked block
    locked_mode: str
    locked_max: float
    locked_threshold: float = 0.30

    # (1 - initial clearability) scaled by weight, optionally square-rooted
    clearability_weight: float = 0.0
    clearability_curve: str = "linear"

    # block_count / divisor, capped (0 disables)
    block_count_divisor: float = 0.0
    block_count_cap: float = 0.0

    # Small puzzles: (exclusive upper block count, adjustment), checked in order
    small_puzzle_bands: Tuple[Tuple[int, float], ...] = ()
    # Large puzzles: +1 per large_puzzle_step blocks above the start, capped
    large_puzzle_start: Optional[int] = None
    large_puzzle_step: float = 20.0
    large_puzzle_cap: float = 0.0

    direction_variety_weight: float = 0.0
    density_weight: float = 0.0

    tier_thresholds: Tuple[float, float, float] = (20, 40, 60)

    def tier_for(self, score: float) -> Tier:
        medium, hard, super_hard = self.tier_thresholds
        if score >= super_hard:
            return Tier.SUPER_HARD
        if score >= hard:
            return Tier.HARD
        if score >= medium:
            return Tier.MEDIUM
        return Tier.EASY


# Tuned against authored levels
AUTHORED = DifficultyWeights(
    name="authored",
    blockers_multiplier=10.0,
    blockers_cap=50.0,
    locked_mode="fraction",
    locked_max=25.0,
    locked_threshold=0.30,
    clearability_weight=25.0,
    small_puzzle_bands=((10, -25.0), (20, -20.0), (30, -15.0), (50, -10.0)),
    tier_thresholds=(20, 40, 60),
)

# Tuned against block-count scaling of real game levels:
#   34 blocks, 1.4 avg blockers, 41% clearable  -> ~19
#   229 blocks, 4.7 avg blockers, 12% clearable -> ~44
#   644 blocks, 8.6 avg blockers, 6.5% clearable -> ~80
CALIBRATED = DifficultyWeights(
    name="calibrated",
    blockers_multiplier=4.5,
    blockers_cap=45.0,
    locked_mode="count",
    locked_max=5.0,
    clearability_weight=20.0,
    block_count_divisor=40.0,
    block_count_cap=10.0,
    large_puzzle_start=400,
    large_puzzle_step=20.0,
    large_puzzle_cap=20.0,
    tier_thresholds=(25, 50, 75),
)

# Authored shape with softened clearability plus variety and density
HEX = DifficultyWeights(
    name="hex",
    blockers_multiplier=10.0,
    blockers_cap=50.0,
    locked_mode="fraction",
    locked_max=25.0,
    locked_threshold=0.30,
    clearability_weight=25.0,
    clearability_curve="sqrt",
    small_puzzle_bands=((10, -25.0), (20, -20.0), (30, -15.0), (50, -10.0)),
    direction_variety_weight=10.0,
    density_weight=10.0,
    tier_thresholds=(20, 40, 60),
)

PRESETS: Dict[str, DifficultyWeights] = {
    w.name: w for w in (AUTHORED, CALIBRATED, HEX)
}

DEFAULT_WEIGHTS = AUTHORED

COMPONENT_NAMES = (
    "blockers",
    "locked_percent",
    "clearability",
    "block_count",
    "direction_variety",
    "density",
    "size_bonus",
)


def get_weights(name: str) -> DifficultyWeights:
    """Look up a preset by name."""
    try:
        return PRESETS[name]
    except KeyError:
        available = ", ".join(PRESETS)
        raise ValueError(f"Unknown difficulty variant: {name}. Available: {available}") from None


@dataclass(frozen=True)
class DifficultyBreakdown:
    """Final score (0-100), the raw sum, the tier and each component's points."""
    score: int
    raw_score: float
    tier: Tier
    components: Dict[str, float] = field(default_factory=dict)
    variant: str = DEFAULT_WEIGHTS.name

    def to_dict(self) -> Dict[str, object]:
        return {
            "score": self.score,
            "raw_score": self.raw_score,
            "tier": self.tier.value,
            "components": dict(self.components),
            "variant": self.variant,
        }


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def size_adjustment(block_count: int, weights: DifficultyWeights) -> float:
    """Negative bonus for small puzzles, positive for very large ones."""
    for upper, adjustment in weights.small_puzzle_bands:
        if block_count < upper:
            return adjustment
    if weights.large_puzzle_start is not None and block_count > weights.large_puzzle_start:
        extra = (block_count - weights.large_puzzle_start) / weights.large_puzzle_step
        return min(extra, weights.large_puzzle_cap)
    return 0.0


def calculate_components(
    analysis: PuzzleAnalysis,
    weights: DifficultyWeights = DEFAULT_WEIGHTS
) -> Dict[str, float]:
    """Points contributed by each part of the formula."""
    block_count = analysis.block_count

    blockers = min(analysis.avg_blockers * weights.blockers_multiplier, weights.blockers_cap)

    if weights.locked_mode == "fraction":
        locked_fraction = analysis.locked_count / block_count
        locked = min(locked_fraction / weights.locked_threshold, 1.0) * weights.locked_max
    elif weights.locked_mode == "count":
        locked = float(min(analysis.locked_count, weights.locked_max))
    else:
        raise ValueError(f"Unknown locked mode: {weights.locked_mode!r}")

    blocked_share = max(0.0, 1.0 - analysis.initial_clearability)
    if weights.clearability_curve == "sqrt":
        blocked_share = math.sqrt(blocked_share)
    clearability = blocked_share * weights.clearability_weight

    block_count_points = 0.0
    if weights.block_count_divisor:
        block_count_points = min(block_count / weights.block_count_divisor, weights.block_count_cap)

    return {
        "blockers": blockers,
        "locked_percent": locked,
        "clearability": clearability,
        "block_count": block_count_points,
        "direction_variety": analysis.direction_variety * weights.direction_variety_weight,
        "density": analysis.density * weights.density_weight,
        "size_bonus": size_adjustment(block_count, weights),
    }


def calculate_difficulty_score(
    analysis: PuzzleAnalysis,
    weights: Union[DifficultyWeights, str] = DEFAULT_WEIGHTS
) -> DifficultyBreakdown:
    """
    Calculate difficulty score (0-100) from a puzzle analysis.

    Unsolvable and empty puzzles score 0 (easy) with every component at 0.

    Args:
        analysis: Result of analyze_puzzle.
        weights: A DifficultyWeights preset or its name.

    Returns:
        DifficultyBreakdown with the rounded, clamped score and its tier.
    """
    if isinstance(weights, str):
        weights = get_weights(weights)

    if not analysis.solvable or analysis.block_count == 0:
        return DifficultyBreakdown(
            score=0,
            raw_score=0.0,
            tier=Tier.EASY,
            components={name: 0.0 for name in COMPONENT_NAMES},
            variant=weights.name,
        )

    components = calculate_components(analysis, weights)
    raw_score = sum(components.values())
    score = round_half_up(max(0.0, min(100.0, raw_score)))

    return DifficultyBreakdown(
        score=score,
        raw_score=raw_score,
        tier=weights.tier_for(score),
        components=components,
        variant=weights.name,
    )
