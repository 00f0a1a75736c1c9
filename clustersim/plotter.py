"""
Visualization module for the Cluster Load Simulator.

This module plots how the cluster responds as the task arrival rate
grows, for each admission policy. The main figure shows average
utilization against spawn probability; the others show idle ticks and
the share of generated tasks that were admitted.

Expected Visualization Story:
    - At low load: Both policies keep up and utilization grows with load
    - As load increases: Head-of-line blocking leaves processors idle
      behind large tasks, so backfill reaches higher utilization
    - At saturation: The queue never drains and admission ratios fall
"""

import sys

import matplotlib.pyplot as plt
import numpy as np
from typing import Dict, List, Optional
from pathlib import Path

from clustersim.config import InvalidConfiguration, SimulationConfig
from clustersim.simulator import SimulationResults, sweep_spawn_probabilities


plt.rcParams.update({
    'font.family': 'serif',
    'font.size': 11,
    'axes.titlesize': 14,
    'axes.labelsize': 12,
    'legend.fontsize': 10,
    'figure.dpi': 150,
    'savefig.dpi': 300,
    'savefig.bbox': 'tight',
})

# Color palette (colorblind-friendly)
COLORS = {
    'head-of-line': '#E69F00',  # Orange
    'backfill': '#0072B2',      # Blue
    'grid': '#CCCCCC',          # Light gray
}

LABELS = {
    'head-of-line': 'Head-of-Line (Default)',
    'backfill': 'Backfill',
}


def _save(fig, output_path: str, show: bool) -> None:
    plt.tight_layout()
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path)
    print(f"Saved: {output_path}")

    if show:
        plt.show()
    plt.close(fig)


def plot_utilization_vs_load(
    results: Dict[str, Dict[float, SimulationResults]],
    probabilities: List[float],
    output_path: str = "utilization_vs_load.png",
    show: bool = False
) -> None:
    """
    Plot average cluster utilization against spawn probability.

    Args:
        results: Nested dict from sweep_spawn_probabilities
        probabilities: Spawn probabilities tested
        output_path: Where to save the figure
        show: Whether to display interactively
    """
    fig, ax = plt.subplots(figsize=(10, 6))

    for name, runs in results.items():
        utilization = [runs[p].average_utilization * 100 for p in probabilities]
        ax.plot(
            probabilities, utilization,
            color=COLORS.get(name, 'gray'),
            marker='o',
            markersize=7,
            linewidth=2.5,
            label=LABELS.get(name, name)
        )

    ax.set_xlabel('Task Spawn Probability (per tick)', fontweight='bold')
    ax.set_ylabel('Average Cluster Load (%)', fontweight='bold')
    ax.set_title('Cluster Utilization vs Arrival Rate', fontweight='bold', pad=15)
    ax.legend(loc='lower right', framealpha=0.9)
    ax.grid(True, alpha=0.3, color=COLORS['grid'])
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 100)

    _save(fig, output_path, show)


def plot_idle_ticks(
    results: Dict[str, Dict[float, SimulationResults]],
    probabilities: List[float],
    output_path: str = "idle_ticks.png",
    show: bool = False
) -> None:
    """Plot the number of fully idle ticks against spawn probability."""
    fig, ax = plt.subplots(figsize=(10, 6))

    for name, runs in results.items():
        idle = [runs[p].idle_ticks for p in probabilities]
        ax.plot(
            probabilities, idle,
            color=COLORS.get(name, 'gray'),
            marker='s',
            markersize=7,
            linewidth=2.5,
            label=LABELS.get(name, name)
        )

    ax.set_xlabel('Task Spawn Probability (per tick)', fontweight='bold')
    ax.set_ylabel('Idle Ticks', fontweight='bold')
    ax.set_title('Fully Idle Ticks vs Arrival Rate', fontweight='bold', pad=15)
    ax.legend(loc='upper right', framealpha=0.9)
    ax.grid(True, alpha=0.3, color=COLORS['grid'])
    ax.set_ylim(bottom=0)

    _save(fig, output_path, show)


def plot_completion_ratio(
    results: Dict[str, Dict[float, SimulationResults]],
    probabilities: List[float],
    output_path: str = "completion_ratio.png",
    show: bool = False
) -> None:
    """
    Bar chart of the share of generated tasks that were admitted.

    Tasks left in the queue at the end of a run count against the ratio,
    so this is where head-of-line starvation shows most clearly.
    """
    fig, ax = plt.subplots(figsize=(12, 5))

    names = list(results.keys())
    x = np.arange(len(probabilities))
    width = 0.8 / max(len(names), 1)

    for idx, name in enumerate(names):
        ratios = [results[name][p].completion_ratio * 100 for p in probabilities]
        offset = width * (idx - (len(names) - 1) / 2)
        ax.bar(
            x + offset, ratios, width,
            label=LABELS.get(name, name),
            color=COLORS.get(name, 'gray'),
            alpha=0.8
        )

    ax.set_xticks(x)
    ax.set_xticklabels([f'{p:.2f}' for p in probabilities])
    ax.set_xlabel('Task Spawn Probability (per tick)', fontweight='bold')
    ax.set_ylabel('Tasks Admitted (%)', fontweight='bold')
    ax.set_title('Admission Ratio by Policy', fontweight='bold', pad=15)
    ax.legend(loc='lower left', framealpha=0.9)
    ax.grid(True, alpha=0.3, axis='y', color=COLORS['grid'])
    ax.set_ylim(0, 105)

    _save(fig, output_path, show)


def generate_all_plots(
    results: Optional[Dict[str, Dict[float, SimulationResults]]] = None,
    probabilities: Optional[List[float]] = None,
    config: Optional[SimulationConfig] = None,
    output_dir: str = "results",
    seed: int = 42,
    show: bool = False
) -> None:
    """
    Generate all visualization plots.

    Args:
        results: Pre-computed sweep results (if None, runs the sweep)
        probabilities: Spawn probabilities to test
        config: Base configuration for the sweep
        output_dir: Directory to save plots
        seed: Base random seed for the sweep
        show: Whether to display plots interactively
    """
    if probabilities is None:
        probabilities = [round(p, 2) for p in np.linspace(0.05, 1.0, 20)]
    if config is None:
        config = SimulationConfig(processors=32)

    if results is None:
        print("Running sweep for plotting...")
        results = sweep_spawn_probabilities(config, probabilities, seed=seed)

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    print("\nGenerating plots...")

    plot_utilization_vs_load(
        results, probabilities,
        str(output_path / "utilization_vs_load.png"),
        show
    )
    plot_idle_ticks(
        results, probabilities,
        str(output_path / "idle_ticks.png"),
        show
    )
    plot_completion_ratio(
        results, probabilities,
        str(output_path / "completion_ratio.png"),
        show
    )

    print("\nAll plots generated successfully!")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for plotting with CLI arguments."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Generate utilization plots for admission policy comparison"
    )
    parser.add_argument(
        "--output-dir", "-o", type=str, default="results",
        help="Directory to save plots (default: results)"
    )
    parser.add_argument(
        "--processors", "-p", type=int, default=32,
        help="Cluster size (default: 32)"
    )
    parser.add_argument(
        "--ticks", "-t", type=int, default=1000,
        help="Ticks per simulation (default: 1000)"
    )
    parser.add_argument(
        "--seed", "-s", type=int, default=42,
        help="Random seed (default: 42)"
    )
    parser.add_argument(
        "--show", action="store_true",
        help="Display plots interactively"
    )

    args = parser.parse_args(argv)

    try:
        config = SimulationConfig(processors=args.processors, ticks=args.ticks)
    except InvalidConfiguration as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    generate_all_plots(config=config, output_dir=args.output_dir, seed=args.seed, show=args.show)
    return 0


if __name__ == "__main__":
    sys.exit(main())
