"""Command-line interface for the block puzzle analyzer."""

import argparse
import json
import logging
import os
import sys

from .core.puzzle import Puzzle
from .core.topology import HexTopology, SquareTopology
from .analysis import AnalyzerConfig, Tier, analyze_puzzle, calculate_difficulty_score, PRESETS
from .analysis.collection import estimate_level, flow_zone, buffer_percent, tier_with_move_buffer
from .generator import LevelGenerator
from .benchmark import Benchmark
from .benchmark.visualizer import Visualizer


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Block Puzzle Solvability & Difficulty Analyzer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyze a level file
  blockaway analyze level.json --variant calibrated

  # Generate 5 hard 6x6 levels
  blockaway generate --count 5 --tier hard --rows 6 --cols 6 --blocks 20

  # Run full benchmark
  blockaway benchmark --puzzles 10 --output results/
        """
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Analyze a level JSON file")
    analyze_parser.add_argument("level", type=str, help="Path to a level JSON file")
    analyze_parser.add_argument(
        "--variant", choices=sorted(PRESETS), default="authored",
        help="Difficulty formula (default: authored)"
    )
    analyze_parser.add_argument(
        "--config", "-c", type=str, default=None,
        help="Analyzer settings JSON file"
    )
    analyze_parser.add_argument(
        "--seed", "-s", type=int, default=None,
        help="Random seed for sampling search"
    )
    analyze_parser.add_argument(
        "--move-limit", type=int, default=None,
        help="Also estimate play time for this move limit"
    )
    analyze_parser.add_argument(
        "--level-number", type=int, default=None,
        help="Also report the flow zone for this position in a collection"
    )
    analyze_parser.add_argument(
        "--json", action="store_true",
        help="Print the full analysis as JSON"
    )

    # Generate command
    gen_parser = subparsers.add_parser("generate", help="Generate block puzzles")
    _add_topology_args(gen_parser)
    gen_parser.add_argument(
        "--count", "-n", type=int, default=5,
        help="Number of puzzles to generate (default: 5)"
    )
    gen_parser.add_argument(
        "--blocks", "-b", type=int, default=20,
        help="Blocks per puzzle (default: 20)"
    )
    gen_parser.add_argument(
        "--tier", "-t",
        choices=[t.value for t in Tier] + ["any"],
        default="any",
        help="Target tier (default: any)"
    )
    gen_parser.add_argument(
        "--smart-fill", action="store_true",
        help="Fill every cell instead of placing --blocks blocks"
    )
    gen_parser.add_argument(
        "--output", "-o", type=str, default="levels",
        help="Output directory for level files (default: levels)"
    )
    gen_parser.add_argument(
        "--seed", "-s", type=int, default=None,
        help="Random seed for reproducibility"
    )

    # Benchmark command
    bench_parser = subparsers.add_parser("benchmark", help="Run analysis benchmarks")
    _add_topology_args(bench_parser)
    bench_parser.add_argument(
        "--puzzles", "-n", type=int, default=10,
        help="Puzzles per tier (default: 10)"
    )
    bench_parser.add_argument(
        "--blocks", "-b", type=int, default=20,
        help="Blocks per puzzle (default: 20)"
    )
    bench_parser.add_argument(
        "--tier", "-t",
        choices=[t.value for t in Tier] + ["all"],
        default="all",
        help="Target tier to benchmark (default: all)"
    )
    bench_parser.add_argument(
        "--config", "-c", type=str, default=None,
        help="Analyzer settings JSON file"
    )
    bench_parser.add_argument(
        "--workers", "-w", type=int, default=None,
        help="Worker processes (default: CPU count)"
    )
    bench_parser.add_argument(
        "--timeout", type=float, default=60.0,
        help="Seconds allowed per puzzle (default: 60)"
    )
    bench_parser.add_argument(
        "--output", "-o", type=str, default="results",
        help="Output directory for results (default: results)"
    )
    bench_parser.add_argument(
        "--seed", "-s", type=int, default=42,
        help="Random seed for reproducibility (default: 42)"
    )
    bench_parser.add_argument(
        "--no-charts", action="store_true",
        help="Skip chart generation"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s"
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "analyze":
            cmd_analyze(args)
        elif args.command == "generate":
            cmd_generate(args)
        elif args.command == "benchmark":
            cmd_benchmark(args)
    except (ValueError, KeyError, OSError) as e:
        print(f"Error: {e}")
        sys.exit(1)


def _add_topology_args(parser):
    parser.add_argument(
        "--grid", choices=["square", "hex"], default="square",
        help="Grid topology (default: square)"
    )
    parser.add_argument("--rows", type=int, default=6, help="Square grid rows (default: 6)")
    parser.add_argument("--cols", type=int, default=6, help="Square grid columns (default: 6)")
    parser.add_argument("--radius", type=int, default=3, help="Hex grid radius (default: 3)")


def _topology(args):
    if args.grid == "hex":
        return HexTopology(args.radius)
    return SquareTopology(args.rows, args.cols)


def _load_config(args):
    config = AnalyzerConfig.from_json(args.config) if args.config else AnalyzerConfig()
    if args.seed is not None:
        config.seed = args.seed
    return config


def cmd_analyze(args):
    """Handle the analyze command."""
    try:
        with open(args.level, "r") as f:
            puzzle = Puzzle.from_dict(json.load(f))
    except json.JSONDecodeError as e:
        print(f"Error parsing level: {e}")
        sys.exit(1)

    analysis = analyze_puzzle(puzzle, _load_config(args))
    breakdown = calculate_difficulty_score(analysis, args.variant)

    if args.json:
        print(json.dumps({
            "analysis": analysis.to_dict(),
            "difficulty": breakdown.to_dict()
        }, indent=2))
        return

    print("Input level:")
    print(puzzle)
    print()

    if analysis.solvable:
        print(f"✓ Solvable ({analysis.search_mode} search, {analysis.states_explored:,} states)")
    else:
        print(f"✗ Not solvable ({analysis.search_mode} search)")

    print(f"  Blocks: {analysis.block_count} ({analysis.locked_count} locked, {analysis.hole_count} holes)")
    print(f"  Solutions: {analysis.solution_count:,}")
    print(f"  Initial clearable: {analysis.initial_clearable} ({analysis.initial_clearability:.0%})")
    print(f"  Avg branching: {analysis.avg_branching_factor:.2f} (min {analysis.min_branching_factor})")
    print(f"  Forced moves: {analysis.forced_move_count} ({analysis.forced_move_ratio:.0%})")
    print(f"  Waves: {analysis.solution_depth}")
    print(f"  Bottlenecks: {analysis.bottleneck_count}")
    print(f"  Avg blockers: {analysis.avg_blockers:.2f}")
    print()
    print(f"Difficulty ({breakdown.variant}): {breakdown.score} - {breakdown.tier.value}")
    for name, points in breakdown.components.items():
        if points:
            print(f"  {name}: {points:+.1f}")

    if args.move_limit is not None:
        estimate = estimate_level(args.move_limit, breakdown.tier, analysis.block_count)
        print()
        print(f"Time per attempt: {estimate.time_per_attempt_display}")
        print(f"Attempts: {estimate.attempts_display}")
        print(f"Total time: {estimate.total_time_display}")

        spare = buffer_percent(args.move_limit, analysis.min_moves)
        buffered = tier_with_move_buffer(analysis.initial_clearability, analysis.block_count, spare)
        print(f"Move buffer: {spare:.0f}% -> {buffered.value}")

    if args.level_number is not None:
        zone = flow_zone(breakdown.tier, args.level_number)
        print(f"Flow zone at level {args.level_number}: {zone.value}")


def cmd_generate(args):
    """Handle the generate command."""
    generator = LevelGenerator(_topology(args), seed=args.seed)
    target = None if args.tier == "any" else Tier(args.tier)

    puzzles = []
    for i in range(1, args.count + 1):
        if args.smart_fill:
            puzzle = generator.smart_fill()
        else:
            puzzle = generator.generate(args.blocks, target)
        puzzles.append(puzzle)

        breakdown = calculate_difficulty_score(analyze_puzzle(puzzle))
        print(f"\n--- Level {i} ({puzzle.block_count} blocks, "
              f"score {breakdown.score}, {breakdown.tier.value}) ---")
        print(puzzle)

    prefix = f"level_{args.tier}"
    LevelGenerator.save_to_folder(puzzles, args.output, prefix=prefix)
    print(f"\nLevels saved in the '{args.output}/' directory")
    print(f"Total levels generated: {len(puzzles)}")


def cmd_benchmark(args):
    """Handle the benchmark command."""
    if args.tier == "all":
        tiers = list(Tier)
    else:
        tiers = [Tier(args.tier)]

    config = _load_config(args)

    print("=" * 60)
    print("BLOCK PUZZLE ANALYSIS BENCHMARK")
    print("=" * 60)
    print(f"Puzzles per tier: {args.puzzles}")
    print(f"Tiers: {[t.value for t in tiers]}")

    benchmark = Benchmark(
        puzzles_per_tier=args.puzzles,
        tiers=tiers,
        topology=_topology(args),
        block_count=args.blocks,
        config=config,
        timeout_seconds=args.timeout,
        max_workers=args.workers,
        seed=args.seed
    )

    print(f"Variants: {', '.join(benchmark.variants)}")
    print(f"Output directory: {args.output}")
    print("=" * 60)

    results = benchmark.run()
    summary = benchmark.get_summary()

    print("\n" + "=" * 60)
    print("RESULTS SUMMARY")
    print("=" * 60)

    print("\nBy Variant:")
    print("-" * 50)
    for variant, stats in summary["results_by_variant"].items():
        print(f"\n{variant}:")
        print(f"  Tier agreement: {stats['tier_agreement']:.1f}%")
        print(f"  Avg score: {stats['avg_score']:.1f} ({stats['min_score']}-{stats['max_score']})")
        print(f"  Avg time: {stats['avg_time_seconds']:.4f}s")
        print(f"  Solvable: {stats['solvable']}/{stats['total_tested']}")

    benchmark.save_results(args.output)

    if not args.no_charts:
        print("\nGenerating charts...")
        visualizer = Visualizer(results, args.output)
        charts = visualizer.generate_all()
        visualizer.generate_summary_table()
        print(f"Charts saved to {args.output}/")
        for chart in charts:
            print(f"  - {os.path.basename(chart)}")

    print("\n" + "=" * 60)
    print("Benchmark complete!")


if __name__ == "__main__":
    main()
