"""Tests for the benchmark runner, charts and command line."""

import json
import os
import sys

import pytest
from blockaway.core import Block, Puzzle, SquareTopology
from blockaway.analysis import AnalyzerConfig, Tier
from blockaway.benchmark import Benchmark, BenchmarkResult, Visualizer
from blockaway.benchmark.benchmark import run_analysis_task
from blockaway import cli


LEVEL = {
    "topology": {"type": "square", "rows": 3, "cols": 3},
    "blocks": [
        {"id": "a", "coord": [0, 0], "direction": "N"},
        {"id": "b", "coord": [1, 0], "direction": "N"},
    ],
    "holes": [],
}


def make_result(target="easy", variant="authored", score=10, tier="easy", **overrides):
    fields = dict(
        puzzle_id=0,
        target=target,
        variant=variant,
        solvable=True,
        score=score,
        tier=tier,
        block_count=10,
        search_mode="exact",
        states_explored=20,
        solution_count=3,
        time_seconds=0.01,
        memory_bytes=0,
    )
    fields.update(overrides)
    return BenchmarkResult(**fields)


class TestBenchmarkResult:
    """Tests for result rows."""

    def test_on_target(self):
        """Test tier agreement per row."""
        assert make_result(target="hard", tier="hard").on_target
        assert not make_result(target="hard", tier="easy").on_target

    def test_to_dict(self):
        """Test extra fields are flattened into the row."""
        data = make_result(extra={"error": "Timeout"}).to_dict()

        assert data["error"] == "Timeout"
        assert data["memory_mb"] == 0


class TestRunAnalysisTask:
    """Tests for the worker function."""

    def test_scores_each_variant(self):
        """Test one row per variant from a single analysis."""
        rows = run_analysis_task(LEVEL, 3, "easy", ["authored", "calibrated"], AnalyzerConfig().to_dict())

        assert [r["variant"] for r in rows] == ["authored", "calibrated"]
        assert all(r["puzzle_id"] == 3 for r in rows)
        assert all(r["solvable"] for r in rows)
        assert rows[0]["solution_count"] == 1
        assert rows[0]["time_seconds"] == rows[1]["time_seconds"]


class TestBenchmark:
    """Tests for the benchmark runner."""

    def test_unknown_variant(self):
        """Test variants are checked up front."""
        with pytest.raises(ValueError):
            Benchmark(variants=["legacy"])

    def test_run_and_save(self, tmp_path):
        """Test a small end-to-end run."""
        benchmark = Benchmark(
            puzzles_per_tier=2,
            tiers=[Tier.EASY, Tier.HARD],
            variants=["authored"],
            topology=SquareTopology(4, 4),
            block_count=6,
            max_workers=1,
            seed=42,
        )
        results = benchmark.run(show_progress=False)

        assert len(results) == 4
        assert all(r.solvable for r in results)

        summary = benchmark.get_summary()
        assert summary["total_puzzles"] == 4
        assert summary["results_by_variant"]["authored"]["total_tested"] == 4
        assert set(summary["results_by_tier"]) == {"easy", "hard"}

        benchmark.save_results(str(tmp_path))
        assert os.path.exists(tmp_path / "benchmark_results.json")
        assert os.path.exists(tmp_path / "benchmark_summary.json")
        assert len(os.listdir(tmp_path / "puzzles" / "easy")) == 2

    def test_slow_puzzle_times_out(self):
        """Test a puzzle past its deadline gets Timeout rows without blocking the run."""
        # 18 independent blocks give 2^18 states to explore
        row = [Block(f"b{c}", (0, c), "N") for c in range(18)]
        slow = Puzzle(SquareTopology(1, 18), row)
        benchmark = Benchmark(
            variants=["authored", "calibrated"],
            config=AnalyzerConfig(max_states=300000),
            timeout_seconds=0.1,
            max_workers=1,
        )
        benchmark.puzzles = {"easy": [slow]}

        results = benchmark.run(show_progress=False)

        assert [r.variant for r in results] == ["authored", "calibrated"]
        assert all(r.extra["error"] == "Timeout" for r in results)
        assert all(r.search_mode == "failed" for r in results)
        assert benchmark.get_summary()["results_by_variant"]["authored"]["total_tested"] == 1


class TestVisualizer:
    """Tests for chart generation."""

    def test_generate_all(self, tmp_path):
        """Test every chart and the summary table are written."""
        results = [
            make_result("easy", "authored", 5, "easy"),
            make_result("easy", "calibrated", 12, "easy"),
            make_result("hard", "authored", 45, "hard"),
            make_result("hard", "calibrated", 30, "medium"),
        ]
        visualizer = Visualizer(results, str(tmp_path))

        charts = visualizer.generate_all()
        table = visualizer.generate_summary_table()

        assert len(charts) == 5
        assert all(os.path.exists(c) for c in charts)
        with open(table) as f:
            content = f.read()
        assert "| authored | 100.0% |" in content
        assert "| calibrated | 50.0% |" in content


class TestCli:
    """Tests for the command line."""

    def test_analyze(self, tmp_path, monkeypatch, capsys):
        """Test analyzing a level file."""
        path = tmp_path / "level.json"
        path.write_text(json.dumps(LEVEL))
        monkeypatch.setattr(sys, "argv", ["blockaway", "analyze", str(path), "--move-limit", "5"])

        cli.main()

        out = capsys.readouterr().out
        assert "Solvable" in out
        assert "Difficulty (authored)" in out
        assert "Time per attempt" in out
        # 3 spare moves over 2 optimal
        assert "Move buffer: 150% -> easy" in out

    def test_analyze_json(self, tmp_path, monkeypatch, capsys):
        """Test JSON output."""
        path = tmp_path / "level.json"
        path.write_text(json.dumps(LEVEL))
        monkeypatch.setattr(sys, "argv", ["blockaway", "analyze", str(path), "--json", "--variant", "calibrated"])

        cli.main()

        data = json.loads(capsys.readouterr().out)
        assert data["analysis"]["solvable"]
        assert data["difficulty"]["variant"] == "calibrated"

    def test_invalid_level(self, tmp_path, monkeypatch, capsys):
        """Test bad level data exits with status 1."""
        bad = dict(LEVEL, blocks=[{"id": "a", "coord": [9, 9], "direction": "N"}])
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(bad))
        monkeypatch.setattr(sys, "argv", ["blockaway", "analyze", str(path)])

        with pytest.raises(SystemExit) as exc:
            cli.main()

        assert exc.value.code == 1
        assert "Error" in capsys.readouterr().out

    def test_generate(self, tmp_path, monkeypatch, capsys):
        """Test generating levels into a folder."""
        out_dir = tmp_path / "levels"
        monkeypatch.setattr(sys, "argv", [
            "blockaway", "generate", "--count", "2", "--blocks", "6",
            "--rows", "4", "--cols", "4", "--seed", "1", "--output", str(out_dir),
        ])

        cli.main()

        assert len(os.listdir(out_dir)) == 2
        assert "Total levels generated: 2" in capsys.readouterr().out

    def test_no_command(self, monkeypatch):
        """Test running without a command prints help and exits."""
        monkeypatch.setattr(sys, "argv", ["blockaway"])

        with pytest.raises(SystemExit) as exc:
            cli.main()

        assert exc.value.code == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
