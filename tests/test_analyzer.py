"""Unit tests for the puzzle analyzer."""

import json

import pytest
from blockaway.core import Block, Puzzle, SquareTopology, HexTopology
from blockaway.analysis import AnalyzerConfig, analyze_puzzle, solution_depth, calculate_difficulty_score, Tier


def make_puzzle(specs, holes=(), rows=3, cols=3):
    """Build a puzzle from (row, col, direction[, locked]) tuples."""
    blocks = []
    for spec in specs:
        row, col, direction = spec[:3]
        locked = spec[3] if len(spec) > 3 else False
        blocks.append(Block(f"block-{row}-{col}", (row, col), direction, locked))
    return Puzzle(SquareTopology(rows, cols), blocks, holes)


TOP_ROW = [(0, 0, "N"), (0, 1, "N"), (0, 2, "N")]

OUTWARD_3X3 = [
    (0, 0, "N"), (0, 1, "N"), (0, 2, "N"),
    (1, 0, "W"), (1, 1, "N"), (1, 2, "E"),
    (2, 0, "S"), (2, 1, "S"), (2, 2, "S"),
]

INWARD_3X3 = [
    (0, 0, "S"), (0, 1, "S"), (0, 2, "S"),
    (1, 0, "E"), (1, 1, "S"), (1, 2, "W"),
    (2, 0, "N"), (2, 1, "N"), (2, 2, "N"),
]


class TestAnalyzePuzzle:
    """Tests for analyze_puzzle."""

    def test_empty_puzzle(self):
        """Test a puzzle without blocks is unsolvable and scores 0."""
        analysis = analyze_puzzle(make_puzzle([]))
        difficulty = calculate_difficulty_score(analysis)

        assert not analysis.solvable
        assert analysis.block_count == 0
        assert analysis.grid_size == 9
        assert difficulty.score == 0
        assert difficulty.tier == Tier.EASY

    def test_single_block(self):
        """Test the smallest solvable puzzle."""
        analysis = analyze_puzzle(make_puzzle([(0, 0, "N")]))

        assert analysis.solvable
        assert analysis.min_moves == 1
        assert analysis.initial_clearable == 1
        assert analysis.initial_clearability == 1.0
        assert analysis.solution_path == ("block-0-0",)
        assert calculate_difficulty_score(analysis).tier == Tier.EASY

    def test_simple_solvable_puzzle(self):
        """Test counts on three free blocks."""
        analysis = analyze_puzzle(make_puzzle(TOP_ROW))

        assert analysis.solvable
        assert analysis.block_count == 3
        assert analysis.initial_clearable == 3
        assert analysis.initial_clearability == 1.0
        assert analysis.solution_count == 1
        assert analysis.min_branching_factor == 1
        assert analysis.avg_branching_factor == pytest.approx(12 / 7)
        assert analysis.solution_depth == 1
        assert analysis.search_mode == "exact"

    def test_locked_count(self):
        """Test locked blocks are counted."""
        analysis = analyze_puzzle(make_puzzle([(0, 0, "N", True), (0, 1, "N"), (0, 2, "N", True)]))

        assert analysis.locked_count == 2

    def test_average_blockers(self):
        """Test blockers over two stacked blocks."""
        analysis = analyze_puzzle(make_puzzle([(0, 1, "N"), (1, 1, "N")]))

        assert analysis.total_blockers == 1
        assert analysis.avg_blockers == 0.5

    def test_density(self):
        """Test density is blocks over grid cells."""
        analysis = analyze_puzzle(make_puzzle(TOP_ROW))

        assert analysis.grid_size == 9
        assert analysis.density == pytest.approx(3 / 9)

    def test_direction_metrics(self):
        """Test direction variety and the bidirectional share."""
        uniform = analyze_puzzle(make_puzzle(TOP_ROW))
        mixed = analyze_puzzle(make_puzzle([(0, 0, "N"), (1, 0, "E_W"), (2, 2, "S")]))

        assert uniform.unique_directions == 1
        assert uniform.direction_variety == pytest.approx(1 / 6)
        assert uniform.bidirectional_ratio == 0.0
        assert mixed.unique_directions == 3
        assert mixed.bidirectional_ratio == pytest.approx(1 / 3)

    def test_bottleneck(self):
        """Test a reachable dead end marks a critical path."""
        analysis = analyze_puzzle(make_puzzle([(0, 0, "N"), (1, 0, "E"), (1, 2, "W")]))

        assert not analysis.solvable
        assert analysis.has_critical_path
        assert analysis.bottleneck_count == 1

    def test_idempotent(self):
        """Test exact analysis gives identical results on repeat."""
        puzzle = make_puzzle(INWARD_3X3)

        assert analyze_puzzle(puzzle) == analyze_puzzle(puzzle)

    def test_sampling_above_threshold(self):
        """Test large puzzles switch to sampling."""
        config = AnalyzerConfig(sampling_threshold=2, seed=1)
        analysis = analyze_puzzle(make_puzzle(TOP_ROW), config)

        assert analysis.search_mode == "sampling"
        assert analysis.solvable
        assert analysis.solution_count == 1

    def test_hex_puzzle(self):
        """Test analysis on a hex grid."""
        blocks = [Block("a", (0, 0), "E"), Block("b", (1, 0), "E")]
        analysis = analyze_puzzle(Puzzle(HexTopology(1), blocks))

        assert analysis.solvable
        assert analysis.grid_size == 7
        assert analysis.solution_count == 1
        assert analysis.solution_path == ("b", "a")
        assert analysis.direction_variety == pytest.approx(1 / 9)

    def test_to_dict(self):
        """Test the analysis converts to JSON-able data."""
        data = analyze_puzzle(make_puzzle(TOP_ROW)).to_dict()

        assert data["solution_path"] == ["block-0-0", "block-0-1", "block-0-2"]
        json.dumps(data)


class TestSolutionDepth:
    """Tests for wave counting."""

    def test_one_wave(self):
        """Test free blocks clear in one wave."""
        assert solution_depth(make_puzzle(TOP_ROW)) == 1

    def test_column(self):
        """Test a column of blocks needs one wave per block."""
        puzzle = make_puzzle([(0, 1, "N"), (1, 1, "N"), (2, 1, "N")])

        assert solution_depth(puzzle) == 3
        assert analyze_puzzle(puzzle).max_chain_length == 3

    def test_stops_at_deadlock(self):
        """Test waves stop when nothing can move."""
        assert solution_depth(make_puzzle([(0, 0, "N"), (1, 0, "E"), (1, 2, "W")])) == 1


class TestRealPuzzles:
    """Tests on hand-made layouts."""

    def test_outward_grid_is_easy(self):
        """Test a grid of blocks pointing out is easy."""
        analysis = analyze_puzzle(make_puzzle(OUTWARD_3X3))

        assert analysis.solvable
        assert analysis.initial_clearability > 0.5
        assert calculate_difficulty_score(analysis).tier == Tier.EASY

    def test_inward_grid_has_blockers(self):
        """Test a grid of blocks pointing in has blockers."""
        analysis = analyze_puzzle(make_puzzle(INWARD_3X3))

        assert analysis.avg_blockers > 0

    def test_locked_corners_score_higher(self):
        """Test locking blocks raises the locked component."""
        corners = [(0, 0, "N"), (0, 2, "E"), (2, 0, "W"), (2, 2, "S")]
        without = analyze_puzzle(make_puzzle(corners))
        with_locks = analyze_puzzle(make_puzzle([c + (True,) for c in corners]))

        assert without.solvable
        assert with_locks.solvable
        assert with_locks.locked_count == 4

        locked_without = calculate_difficulty_score(without).components["locked_percent"]
        locked_with = calculate_difficulty_score(with_locks).components["locked_percent"]
        assert locked_with > locked_without
        assert locked_with == 25

    def test_grid_size_scaling(self):
        """Test the same edge-facing pattern is easy on 3x3 and 5x5."""
        small = analyze_puzzle(make_puzzle(TOP_ROW))
        large = analyze_puzzle(make_puzzle([(0, c, "N") for c in range(5)], rows=5, cols=5))

        assert calculate_difficulty_score(small).tier == Tier.EASY
        assert calculate_difficulty_score(large).tier == Tier.EASY


class TestAnalyzerConfig:
    """Tests for analyzer settings."""

    def test_defaults(self):
        """Test default limits."""
        config = AnalyzerConfig()

        assert config.max_solutions == 1000
        assert config.max_states == 50000
        assert config.sampling_threshold == 25
        assert config.sample_count == 50

    def test_from_json(self, tmp_path):
        """Test loading settings from a file."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"max_states": 10, "seed": 3}))

        config = AnalyzerConfig.from_json(str(path))

        assert config.max_states == 10
        assert config.seed == 3
        assert config.max_solutions == 1000

    def test_unknown_setting(self):
        """Test unknown settings are rejected."""
        with pytest.raises(ValueError):
            AnalyzerConfig.from_dict({"max_depth": 4})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
