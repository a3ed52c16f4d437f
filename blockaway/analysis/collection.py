"""Level collection metrics: sawtooth pacing, flow zones and play-time estimates."""

from __future__ import annotations
import math
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Tuple, Any

from .difficulty import Tier, round_half_up

# Expected tier for each position in a 10-level sawtooth cycle
SAWTOOTH_EXPECTED: Dict[int, Tier] = {
    1: Tier.EASY,
    2: Tier.EASY,
    3: Tier.MEDIUM,
    4: Tier.MEDIUM,
    5: Tier.HARD,
    6: Tier.MEDIUM,
    7: Tier.MEDIUM,
    8: Tier.HARD,
    9: Tier.HARD,
    10: Tier.SUPER_HARD,
}

SECONDS_PER_MOVE: Dict[Tier, Tuple[int, int]] = {
    Tier.EASY: (3, 4),
    Tier.MEDIUM: (4, 5),
    Tier.HARD: (5, 7),
    Tier.SUPER_HARD: (6, 8),
}

ATTEMPT_RANGES: Dict[Tier, Tuple[int, int]] = {
    Tier.EASY: (1, 3),
    Tier.MEDIUM: (4, 8),
    Tier.HARD: (9, 20),
    Tier.SUPER_HARD: (20, 35),
}

WIN_RATES: Dict[Tier, Tuple[int, int]] = {
    Tier.EASY: (70, 90),
    Tier.MEDIUM: (40, 60),
    Tier.HARD: (25, 40),
    Tier.SUPER_HARD: (20, 30),
}

# A failed attempt takes roughly this share of a full one
RETRY_MULTIPLIER = 0.6


class FlowZone(Enum):
    FLOW = "flow"
    BOREDOM = "boredom"
    FRUSTRATION = "frustration"


def sawtooth_position(level_number: int) -> int:
    """Position (1-10) of a level inside its sawtooth cycle."""
    return ((level_number - 1) % 10) + 1


def expected_tier(level_number: int) -> Tier:
    return SAWTOOTH_EXPECTED[sawtooth_position(level_number)]


def flow_zone(actual: Tier, level_number: int) -> FlowZone:
    """
    Compare a level's tier with the tier its slot in the cycle calls for.

    More than one tier harder than expected is frustration, more than one
    tier easier is boredom.
    """
    diff = actual.rank - expected_tier(level_number).rank
    if diff > 1:
        return FlowZone.FRUSTRATION
    if diff < -1:
        return FlowZone.BOREDOM
    return FlowZone.FLOW


def tier_from_clearability(clearability: float) -> Tier:
    """Legacy tier from the initially clearable fraction alone."""
    if clearability >= 0.5:
        return Tier.EASY
    if clearability >= 0.2:
        return Tier.MEDIUM
    if clearability >= 0.05:
        return Tier.HARD
    return Tier.SUPER_HARD


def buffer_percent(move_limit: int, optimal_moves: int) -> float:
    """Spare moves as a percentage of the optimal move count."""
    if optimal_moves <= 0:
        return 0.0
    return (move_limit - optimal_moves) / optimal_moves * 100


def tier_with_move_buffer(clearability: float, cell_count: int, move_buffer_percent: float) -> Tier:
    """
    Tier from clearability, shifted by how many spare moves the player gets.

    The move buffer dominates: a generous buffer makes any level easier,
    a tight one makes it harder, more so on larger levels.
    """
    tiers = list(Tier)
    base = tiers.index(tier_from_clearability(clearability))

    size_modifier = 1.0 if cell_count >= 30 else 0.5 if cell_count >= 15 else 0.0

    if move_buffer_percent >= 100:
        adjustment = -2
    elif move_buffer_percent >= 60:
        adjustment = -1
    elif move_buffer_percent >= 40:
        adjustment = 0
    elif move_buffer_percent >= 25:
        adjustment = 1
    elif move_buffer_percent >= 15:
        adjustment = 2
    elif move_buffer_percent >= 5:
        adjustment = 2 + round_half_up(size_modifier)
    else:
        adjustment = 3 + round_half_up(size_modifier)

    return tiers[max(0, min(len(tiers) - 1, base + adjustment))]


def format_duration(seconds: int) -> str:
    """Format seconds as '45s', '2m' or '2m 5s'."""
    if seconds < 60:
        return f"{seconds}s"
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}m {secs}s" if secs > 0 else f"{minutes}m"


@dataclass(frozen=True)
class LevelEstimation:
    """Expected time per attempt, total time including retries, and attempts."""
    min_time_per_attempt: int
    max_time_per_attempt: int
    avg_time_per_attempt: int
    min_total_time: int
    max_total_time: int
    avg_total_time: int
    min_attempts: int
    max_attempts: int
    avg_attempts: int
    target_win_rate: Tuple[int, int]

    @property
    def time_per_attempt_display(self) -> str:
        return f"{format_duration(self.min_time_per_attempt)} - {format_duration(self.max_time_per_attempt)}"

    @property
    def total_time_display(self) -> str:
        return f"{format_duration(self.min_total_time)} - {format_duration(self.max_total_time)}"

    @property
    def attempts_display(self) -> str:
        if self.min_attempts == self.max_attempts:
            return f"{self.min_attempts}"
        return f"{self.min_attempts}-{self.max_attempts}"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["time_per_attempt_display"] = self.time_per_attempt_display
        data["total_time_display"] = self.total_time_display
        data["attempts_display"] = self.attempts_display
        return data


def estimate_level(move_limit: int, tier: Tier, cell_count: int) -> LevelEstimation:
    """
    Estimate play time and attempts for a level.

    Args:
        move_limit: Moves allowed in the level.
        tier: Difficulty tier of the level.
        cell_count: Number of blocks; larger levels take longer per move.
    """
    min_sec, max_sec = SECONDS_PER_MOVE[tier]
    min_attempts, max_attempts = ATTEMPT_RANGES[tier]

    complexity = 1.2 if cell_count > 30 else 1.1 if cell_count > 20 else 1.0

    min_time = round_half_up(move_limit * min_sec * complexity)
    max_time = round_half_up(move_limit * max_sec * complexity)
    avg_time = round_half_up((min_time + max_time) / 2)

    # Geometric mean; attempt counts are roughly log-normal
    avg_attempts = round_half_up(math.sqrt(min_attempts * max_attempts))

    return LevelEstimation(
        min_time_per_attempt=min_time,
        max_time_per_attempt=max_time,
        avg_time_per_attempt=avg_time,
        min_total_time=round_half_up(min_time * (1 + (min_attempts - 1) * RETRY_MULTIPLIER)),
        max_total_time=round_half_up(max_time * (1 + (max_attempts - 1) * RETRY_MULTIPLIER)),
        avg_total_time=round_half_up(avg_time * (1 + (avg_attempts - 1) * RETRY_MULTIPLIER)),
        min_attempts=min_attempts,
        max_attempts=max_attempts,
        avg_attempts=avg_attempts,
        target_win_rate=WIN_RATES[tier],
    )
