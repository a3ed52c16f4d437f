"""Analysis module: puzzle metrics, difficulty scoring and collection pacing."""

from .analyzer import (
    AnalyzerConfig,
    PuzzleAnalysis,
    analyze_puzzle,
    solution_depth,
    SAMPLING_THRESHOLD,
)
from .difficulty import (
    Tier,
    DifficultyWeights,
    DifficultyBreakdown,
    AUTHORED,
    CALIBRATED,
    HEX,
    DEFAULT_WEIGHTS,
    PRESETS,
    get_weights,
    calculate_difficulty_score,
)
from .collection import (
    FlowZone,
    LevelEstimation,
    estimate_level,
    flow_zone,
    expected_tier,
    buffer_percent,
    tier_with_move_buffer,
)

__all__ = [
    "AnalyzerConfig",
    "PuzzleAnalysis",
    "analyze_puzzle",
    "solution_depth",
    "SAMPLING_THRESHOLD",
    "Tier",
    "DifficultyWeights",
    "DifficultyBreakdown",
    "AUTHORED",
    "CALIBRATED",
    "HEX",
    "DEFAULT_WEIGHTS",
    "PRESETS",
    "get_weights",
    "calculate_difficulty_score",
    "FlowZone",
    "LevelEstimation",
    "estimate_level",
    "flow_zone",
    "expected_tier",
    "buffer_percent",
    "tier_with_move_buffer",
]
