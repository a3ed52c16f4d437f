"""Unit tests for difficulty scoring."""

import pytest
from blockaway.analysis import PuzzleAnalysis, Tier, calculate_difficulty_score, get_weights
from blockaway.analysis.difficulty import AUTHORED, CALIBRATED, HEX, size_adjustment


def make_analysis(block_count=100, avg_blockers=0.0, locked_count=0, clearability=1.0, **overrides):
    """Build a solvable analysis with the fields the score reads."""
    fields = dict(
        solvable=True,
        block_count=block_count,
        hole_count=0,
        locked_count=locked_count,
        grid_size=max(block_count, 1),
        density=1.0,
        solution_count=1,
        min_moves=block_count,
        avg_branching_factor=1.0,
        min_branching_factor=1,
        forced_move_count=block_count,
        forced_move_ratio=1.0,
        solution_depth=block_count,
        max_chain_length=block_count,
        initial_clearable=round(block_count * clearability),
        initial_clearability=clearability,
        has_critical_path=False,
        bottleneck_count=0,
        total_blockers=round(avg_blockers * block_count),
        avg_blockers=avg_blockers,
    )
    fields.update(overrides)
    return PuzzleAnalysis(**fields)


class TestBlockersComponent:
    """Tests for the blockers component (0-50)."""

    @pytest.mark.parametrize("avg,points", [
        (0, 0), (1, 10), (2, 20), (3, 30), (4, 40), (5, 50), (10, 50),
    ])
    def test_linear_then_capped(self, avg, points):
        """Test 10 points per average blocker, capped at 50."""
        result = calculate_difficulty_score(make_analysis(block_count=10, avg_blockers=avg))

        assert result.components["blockers"] == points


class TestLockedComponent:
    """Tests for the locked component (0-25)."""

    def test_none_locked(self):
        """Test no locked blocks give no points."""
        result = calculate_difficulty_score(make_analysis(locked_count=0))

        assert result.components["locked_percent"] == 0

    def test_partial(self):
        """Test 10% locked against the 30% threshold."""
        result = calculate_difficulty_score(make_analysis(locked_count=10))

        assert result.components["locked_percent"] == pytest.approx(8.33, abs=0.01)

    @pytest.mark.parametrize("locked", [30, 50])
    def test_saturates(self, locked):
        """Test the component saturates at 30% locked."""
        result = calculate_difficulty_score(make_analysis(locked_count=locked))

        assert result.components["locked_percent"] == 25

    def test_monotone(self):
        """Test more locked blocks never lower the component."""
        points = [
            calculate_difficulty_score(make_analysis(locked_count=n)).components["locked_percent"]
            for n in range(0, 60, 5)
        ]

        assert points == sorted(points)


class TestClearabilityComponent:
    """Tests for the clearability component (0-25)."""

    @pytest.mark.parametrize("clearability,points", [(1.0, 0), (0.5, 12.5), (0.0, 25)])
    def test_linear(self, clearability, points):
        """Test points scale with the blocked share."""
        result = calculate_difficulty_score(make_analysis(clearability=clearability))

        assert result.components["clearability"] == pytest.approx(points)


class TestSizeBonus:
    """Tests for the small puzzle adjustment."""

    @pytest.mark.parametrize("blocks,bonus", [
        (5, -25), (9, -25), (10, -20), (19, -20), (20, -15), (29, -15), (30, -10), (49, -10), (50, 0),
    ])
    def test_bands(self, blocks, bonus):
        """Test each size band."""
        result = calculate_difficulty_score(make_analysis(block_count=blocks))

        assert result.components["size_bonus"] == bonus

    def test_reduces_score(self):
        """Test the bonus comes off the final score."""
        analysis = make_analysis(block_count=5, avg_blockers=3, locked_count=2, clearability=0.0)
        result = calculate_difficulty_score(analysis)

        # 30 + 25 + 25 - 25
        assert result.score == 55

    def test_never_below_zero(self):
        """Test small easy puzzles clamp at 0."""
        result = calculate_difficulty_score(make_analysis(block_count=5))

        assert result.raw_score == -25
        assert result.score == 0


class TestTiers:
    """Tests for tier classification."""

    def test_easy(self):
        """Test a score under 20 is easy."""
        result = calculate_difficulty_score(make_analysis())

        assert result.tier == Tier.EASY
        assert result.score < 20

    def test_medium(self):
        """Test 10 + 12.5 + 0 is medium."""
        result = calculate_difficulty_score(make_analysis(avg_blockers=1, locked_count=15))

        assert result.tier == Tier.MEDIUM
        assert 20 <= result.score < 40

    def test_hard(self):
        """Test 30 + 12.5 + 7.5 is hard."""
        result = calculate_difficulty_score(make_analysis(avg_blockers=3, locked_count=15, clearability=0.7))

        assert result.tier == Tier.HARD
        assert 40 <= result.score < 60

    def test_super_hard(self):
        """Test 40 + 25 + 0 is superHard."""
        result = calculate_difficulty_score(make_analysis(avg_blockers=4, locked_count=30))

        assert result.tier == Tier.SUPER_HARD
        assert result.score >= 60

    def test_max_score(self):
        """Test every component at its cap gives 100."""
        result = calculate_difficulty_score(make_analysis(avg_blockers=5, locked_count=30, clearability=0.0))

        assert result.score == 100
        assert result.tier == Tier.SUPER_HARD

    @pytest.mark.parametrize("score,tier", [
        (0, Tier.EASY), (19, Tier.EASY), (20, Tier.MEDIUM), (39, Tier.MEDIUM),
        (40, Tier.HARD), (59, Tier.HARD), (60, Tier.SUPER_HARD), (100, Tier.SUPER_HARD),
    ])
    def test_boundaries(self, score, tier):
        """Test thresholds are inclusive lower bounds."""
        assert AUTHORED.tier_for(score) == tier

    def test_rank(self):
        """Test tier ranks run from 1 to 4."""
        assert [t.rank for t in Tier] == [1, 2, 3, 4]
        assert Tier("superHard") == Tier.SUPER_HARD


class TestEdgeCases:
    """Tests for unsolvable and empty puzzles."""

    def test_unsolvable(self):
        """Test unsolvable puzzles score 0."""
        result = calculate_difficulty_score(make_analysis(avg_blockers=5, solvable=False))

        assert result.score == 0
        assert result.tier == Tier.EASY
        assert all(v == 0 for v in result.components.values())

    def test_empty(self):
        """Test empty puzzles score 0."""
        result = calculate_difficulty_score(make_analysis(block_count=0))

        assert result.score == 0
        assert result.tier == Tier.EASY


class TestScoreVerification:
    """Tests for the full sum."""

    def test_components_sum(self):
        """Test 25 + 12.5 + 12.5 + 0 gives 50 (hard)."""
        analysis = make_analysis(avg_blockers=2.5, locked_count=15, clearability=0.5)
        result = calculate_difficulty_score(analysis)

        assert result.components["blockers"] == pytest.approx(25)
        assert result.components["locked_percent"] == pytest.approx(12.5)
        assert result.components["clearability"] == pytest.approx(12.5)
        assert result.components["size_bonus"] == 0
        assert result.score == 50
        assert result.tier == Tier.HARD

    def test_round_half_up(self):
        """Test x.5 scores round up."""
        # 10 + 12.5 = 22.5
        result = calculate_difficulty_score(make_analysis(avg_blockers=1, locked_count=15))

        assert result.raw_score == pytest.approx(22.5)
        assert result.score == 23


class TestVariants:
    """Tests for the alternative formulas."""

    def test_lookup_by_name(self):
        """Test presets are found by name."""
        assert get_weights("calibrated") is CALIBRATED
        result = calculate_difficulty_score(make_analysis(), "hex")
        assert result.variant == "hex"

        with pytest.raises(ValueError):
            get_weights("legacy")

    @pytest.mark.parametrize("blocks,avg,clearability,score,tier", [
        (34, 1.4, 0.41, 19, Tier.EASY),
        (229, 4.7, 0.12, 44, Tier.MEDIUM),
        (644, 8.6, 0.065, 80, Tier.SUPER_HARD),
    ])
    def test_calibrated_levels(self, blocks, avg, clearability, score, tier):
        """Test the calibrated formula on reference level sizes."""
        analysis = make_analysis(block_count=blocks, avg_blockers=avg, clearability=clearability)
        result = calculate_difficulty_score(analysis, CALIBRATED)

        assert result.score == score
        assert result.tier == tier

    def test_calibrated_locked_count(self):
        """Test the calibrated formula counts locked blocks, capped at 5."""
        few = calculate_difficulty_score(make_analysis(locked_count=3), CALIBRATED)
        many = calculate_difficulty_score(make_analysis(locked_count=40), CALIBRATED)

        assert few.components["locked_percent"] == 3
        assert many.components["locked_percent"] == 5

    def test_calibrated_large_puzzle_bonus(self):
        """Test the bonus for very large puzzles."""
        assert size_adjustment(400, CALIBRATED) == 0
        assert size_adjustment(600, CALIBRATED) == 10
        assert size_adjustment(1000, CALIBRATED) == 20

    def test_hex_extra_components(self):
        """Test the hex formula rewards variety and density."""
        analysis = make_analysis(direction_variety=0.5, density=0.8, clearability=0.75)
        result = calculate_difficulty_score(analysis, HEX)

        assert result.components["direction_variety"] == pytest.approx(5)
        assert result.components["density"] == pytest.approx(8)
        assert result.components["clearability"] == pytest.approx(12.5)

    def test_to_dict(self):
        """Test the breakdown converts to plain data."""
        data = calculate_difficulty_score(make_analysis()).to_dict()

        assert data["tier"] == "easy"
        assert data["variant"] == "authored"
        assert set(data["components"]) >= {"blockers", "locked_percent", "clearability", "size_bonus"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
