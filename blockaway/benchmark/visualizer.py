"""Visualization utilities for benchmark results."""

from __future__ import annotations
import os
from typing import List

import matplotlib.pyplot as plt
import seaborn as sns
import numpy as np

from ..analysis.difficulty import Tier
from .benchmark import BenchmarkResult

TIER_ORDER = [t.value for t in Tier]


class Visualizer:
    """
    Visualization generator for benchmark results.

    Creates charts comparing difficulty variants across target tiers.
    """

    COLORS = {
        "authored": "#2ecc71",    # Green
        "calibrated": "#3498db",  # Blue
        "hex": "#9b59b6",         # Purple
    }

    def __init__(self, results: List[BenchmarkResult], output_dir: str = "results"):
        """
        Initialize the visualizer.

        Args:
            results: List of benchmark results.
            output_dir: Directory to save generated charts.
        """
        self.results = results
        self.output_dir = output_dir
        os.makedirs(output_dir, exist_ok=True)

        plt.style.use('seaborn-v0_8-whitegrid')
        sns.set_palette("husl")

    @property
    def variants(self) -> List[str]:
        return sorted(set(r.variant for r in self.results))

    @property
    def targets(self) -> List[str]:
        present = set(r.target for r in self.results)
        return [t for t in TIER_ORDER if t in present]

    def generate_all(self) -> List[str]:
        """
        Generate all charts.

        Returns:
            List of paths to generated chart files.
        """
        return [
            self.plot_score_by_tier(),
            self.plot_tier_agreement(),
            self.plot_score_distribution(),
            self.plot_time_by_tier(),
            self.plot_states_explored(),
        ]

    def _save(self, name: str) -> str:
        plt.tight_layout()
        path = os.path.join(self.output_dir, name)
        plt.savefig(path, dpi=150, bbox_inches='tight')
        plt.close()
        return path

    def _grouped_bars(self, ax, value_fn) -> None:
        variants = self.variants
        targets = self.targets
        x = np.arange(len(targets))
        width = 0.8 / max(len(variants), 1)

        for i, variant in enumerate(variants):
            values = []
            for target in targets:
                rows = [r for r in self.results if r.variant == variant and r.target == target]
                values.append(value_fn(rows) if rows else 0)

            offset = (i - len(variants) / 2 + 0.5) * width
            ax.bar(x + offset, values, width,
                   label=variant,
                   color=self.COLORS.get(variant, "#95a5a6"),
                   edgecolor='black', linewidth=0.5)

        ax.set_xticks(x)
        ax.set_xticklabels(targets)
        ax.legend(title='Variant')

    def plot_score_by_tier(self) -> str:
        """Create grouped bar chart of average score by target tier and variant."""
        fig, ax = plt.subplots(figsize=(12, 6))

        self._grouped_bars(ax, lambda rows: np.mean([r.score for r in rows]))

        ax.set_xlabel('Target Tier', fontsize=12)
        ax.set_ylabel('Average Score', fontsize=12)
        ax.set_title('Difficulty Score by Target Tier and Variant', fontsize=14, fontweight='bold')
        ax.set_ylim(0, 100)

        return self._save("score_by_tier.png")

    def plot_tier_agreement(self) -> str:
        """Create grouped bar chart of how often the scored tier matches the target."""
        fig, ax = plt.subplots(figsize=(12, 6))

        self._grouped_bars(ax, lambda rows: sum(1 for r in rows if r.on_target) / len(rows) * 100)

        ax.set_xlabel('Target Tier', fontsize=12)
        ax.set_ylabel('Tier Agreement (%)', fontsize=12)
        ax.set_title('Scored Tier vs Target Tier', fontsize=14, fontweight='bold')
        ax.set_ylim(0, 115)
        ax.axhline(y=100, color='gray', linestyle='--', alpha=0.3)

        return self._save("tier_agreement.png")

    def plot_score_distribution(self) -> str:
        """Create box plot of scores per target tier, one box per variant."""
        fig, ax = plt.subplots(figsize=(12, 6))

        data = {
            "target": [r.target for r in self.results],
            "score": [r.score for r in self.results],
            "variant": [r.variant for r in self.results],
        }
        sns.boxplot(x="target", y="score", hue="variant", data=data,
                    order=self.targets, hue_order=self.variants,
                    palette=self.COLORS, ax=ax)

        ax.set_xlabel('Target Tier', fontsize=12)
        ax.set_ylabel('Score', fontsize=12)
        ax.set_title('Score Distribution by Target Tier', fontsize=14, fontweight='bold')

        return self._save("score_distribution.png")

    def plot_time_by_tier(self) -> str:
        """Create bar chart of average analysis time per target tier."""
        fig, ax = plt.subplots(figsize=(10, 6))

        # Time is per puzzle, so one variant is enough
        variant = self.variants[0] if self.variants else None
        rows = [r for r in self.results if r.variant == variant]
        targets = self.targets
        avg_times = [
            np.mean([r.time_seconds for r in rows if r.target == t]) if any(r.target == t for r in rows) else 0
            for t in targets
        ]

        bars = ax.bar(targets, avg_times, color="#3498db", edgecolor='black', linewidth=0.5)

        for bar, elapsed in zip(bars, avg_times):
            height = bar.get_height()
            ax.annotate(f'{elapsed:.4f}s',
                        xy=(bar.get_x() + bar.get_width() / 2, height),
                        xytext=(0, 3),
                        textcoords="offset points",
                        ha='center', va='bottom', fontsize=10)

        ax.set_xlabel('Target Tier', fontsize=12)
        ax.set_ylabel('Average Time (seconds)', fontsize=12)
        ax.set_title('Average Analysis Time by Target Tier', fontsize=14, fontweight='bold')
        ax.set_ylim(bottom=0)

        return self._save("time_by_tier.png")

    def plot_states_explored(self) -> str:
        """Create bar chart of average search states explored per target tier."""
        fig, ax = plt.subplots(figsize=(10, 6))

        variant = self.variants[0] if self.variants else None
        rows = [r for r in self.results if r.variant == variant]
        targets = self.targets
        avg_states = [
            max(np.mean([r.states_explored for r in rows if r.target == t]), 1) if any(r.target == t for r in rows) else 1
            for t in targets
        ]

        ax.bar(targets, avg_states, color="#f39c12", edgecolor='black', linewidth=0.5)

        ax.set_xlabel('Target Tier', fontsize=12)
        ax.set_ylabel('Average States Explored (Log Scale)', fontsize=12)
        ax.set_title('Search Effort by Target Tier', fontsize=14, fontweight='bold')
        ax.set_yscale('log')

        return self._save("states_explored.png")

    def generate_summary_table(self) -> str:
        """Generate a markdown summary table."""
        lines = [
            "# Benchmark Summary\n",
            "| Variant | Tier Agreement | Avg Score | Avg Time | Avg States |",
            "|---------|----------------|-----------|----------|------------|"
        ]

        for variant in self.variants:
            rows = [r for r in self.results if r.variant == variant]

            agreement = sum(1 for r in rows if r.on_target) / len(rows) * 100
            avg_score = np.mean([r.score for r in rows])
            avg_time = np.mean([r.time_seconds for r in rows])
            avg_states = np.mean([r.states_explored for r in rows])

            lines.append(
                f"| {variant} | {agreement:.1f}% | {avg_score:.1f} | {avg_time:.4f}s | {int(avg_states):,} |"
            )

        content = "\n".join(lines)

        path = os.path.join(self.output_dir, "benchmark_summary.md")
        with open(path, "w") as f:
            f.write(content)

        return path
