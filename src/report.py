# report.py

"""
Console and image output for a finished enhancement run.

Nothing here feeds back into the simulation: the table reads the rate
table, the plots read the aggregated views.
"""

from __future__ import annotations
import os
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from matplotlib import pyplot as plt

from data_structures import EnhanceRate
from aggregate import boxplot_data

PRECISION = 1
COLUMN_WIDTH = 1 + 5
LEVEL_WIDTH = 3
SEPARATOR = " | "

PLOT_X_LABEL = "Enhancement Level"
PLOT_Y_LABEL = "Total Attempts Taken To Reach (First Time)"


def format_percent(value: float, precision: int = PRECISION, width: int = COLUMN_WIDTH) -> str:
    number = f"{value * 100.0:.{precision}f}%"
    return f"{number:>{width}}"


def format_table_heading() -> str:
    cells = [f"{'LVL':<{LEVEL_WIDTH}}"]
    cells += [f"{name:<{COLUMN_WIDTH}}" for name in ("VALUE", "GAIN", "NONE", "LOSE", "HALVE", "RESET")]
    return SEPARATOR.join(cells) + "\n"


def format_table_row(rate: EnhanceRate) -> str:
    cells = [
        f"{rate.level:>{LEVEL_WIDTH}}",
        format_percent(rate.value),
        format_percent(rate.upgrade),
        format_percent(rate.no_change),
        format_percent(rate.downgrade),
        format_percent(rate.halve),
        format_percent(rate.reset),
    ]
    return SEPARATOR.join(cells) + "\n"


def format_rate_table(rates: Sequence[EnhanceRate]) -> str:
    return format_table_heading() + "".join(format_table_row(rate) for rate in rates)


def format_summary(rows: List[Dict[str, float]]) -> str:
    lines = [f"{'LVL':>3}  {'n':>6}  {'mean':>9}  {'std':>9}  {'p50':>7}  {'p90':>7}  {'p95':>7}  {'max':>7}"]
    for r in rows:
        lines.append(
            f"{r['level']:>3}  {r['n']:>6}  {r['mean']:>9.2f}  {r['std']:>9.2f}  "
            f"{r['p50']:>7.0f}  {r['p90']:>7.0f}  {r['p95']:>7.0f}  {r['max']:>7.0f}"
        )
    return "\n".join(lines) + "\n"


def jitter_x(points: Sequence[Tuple[int, int]], rng: np.random.Generator, max_offset: float = 0.25) -> np.ndarray:
    """Return an (N, 2) float array with x spread uniformly by up to +/- max_offset."""
    arr = np.asarray(points, dtype=float).reshape(-1, 2)
    arr[:, 0] += max_offset * (rng.random(arr.shape[0]) * 2.0 - 1.0)
    return arr


def draw_box_plot(
    distributions: Dict[int, List[int]],
    filename: str = "box.png",
    y_max: Optional[float] = None,
) -> str:
    data = boxplot_data(distributions)
    labels = [str(level) for level in sorted(distributions)]

    plt.figure(figsize=(10, 6))
    if data:
        plt.boxplot(data, patch_artist=True, boxprops=dict(facecolor="#808080"))
        plt.xticks(range(1, len(labels) + 1), labels)
    if y_max is not None:
        plt.ylim(0.0, y_max)
    plt.xlabel(PLOT_X_LABEL)
    plt.ylabel(PLOT_Y_LABEL)
    plt.grid(True, alpha=0.3)
    plt.savefig(filename)
    plt.close()
    return filename


def draw_scatter_plot(
    points: Sequence[Tuple[int, int]],
    filename: str = "scatter.png",
    rng: np.random.Generator | None = None,
    y_max: Optional[float] = None,
) -> str:
    rng = rng if rng is not None else np.random.default_rng()
    arr = jitter_x(points, rng)

    plt.figure(figsize=(10, 6))
    plt.scatter(arr[:, 0], arr[:, 1], marker="s", s=0.5, color="#19CEA5", alpha=0.25)
    if arr.shape[0]:
        plt.xlim(0.0, float(arr[:, 0].max()) + 1.0)
    if y_max is not None:
        plt.ylim(0.0, y_max)
    plt.xlabel(PLOT_X_LABEL)
    plt.ylabel(PLOT_Y_LABEL)
    plt.grid(True, alpha=0.3)
    plt.savefig(filename)
    plt.close()
    return filename


def save_plots(
    distributions: Dict[int, List[int]],
    points: Sequence[Tuple[int, int]],
    out_dir: str = ".",
    rng: np.random.Generator | None = None,
    y_max: Optional[float] = None,
) -> Tuple[str, str]:
    os.makedirs(out_dir, exist_ok=True)
    scatter = draw_scatter_plot(points, os.path.join(out_dir, "scatter.png"), rng=rng, y_max=y_max)
    box = draw_box_plot(distributions, os.path.join(out_dir, "box.png"), y_max=y_max)
    return box, scatter
