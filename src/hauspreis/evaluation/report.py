"""
Comparison report output.

Rich console tables for the comparison and per-method results, a
matplotlib chart of cross-validated and in-sample errors, and CSV
export of all tables.
"""

import re
from pathlib import Path
from typing import TYPE_CHECKING

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from rich.console import Console
from rich.table import Table

from hauspreis.utils.logging import get_logger

if TYPE_CHECKING:
    from hauspreis.evaluation.comparison import ComparisonResult
    from hauspreis.modeling.training import TrainedModel

log = get_logger(__name__)


def _format_value(value: object) -> str:
    if isinstance(value, float | np.floating):
        return "NaN" if np.isnan(value) else f"{value:.4g}"
    return str(value)


def print_comparison(table: pd.DataFrame, console: Console | None = None) -> None:
    """
    Print the comparison table, best cross-validated RMSE highlighted.

    Args:
        table: Comparison table from build_comparison.
        console: Rich console (default: new stdout console).
    """
    console = console or Console()
    best = table["cv_rmse"].idxmin()

    rich_table = Table(title="Model Comparison")
    rich_table.add_column("Method", style="cyan")
    rich_table.add_column("CV RMSE", style="green", justify="right")
    rich_table.add_column("CV RMSE SD", style="yellow", justify="right")
    rich_table.add_column("RMSLE (in-sample)", style="magenta", justify="right")

    for method, row in table.iterrows():
        rich_table.add_row(
            f"[bold]{method}[/bold]" if method == best else str(method),
            f"{row['cv_rmse']:.5f}",
            f"{row['cv_rmse_sd']:.5f}",
            f"{row['rmsle']:.5f}",
        )

    console.print(rich_table)


def print_results(model: "TrainedModel", console: Console | None = None) -> None:
    """Print one method's results table, selected row marked with '*'."""
    console = console or Console()

    rich_table = Table(title=f"{model.label}: cross-validation results")
    rich_table.add_column("", style="bold green")
    for column in model.results.columns:
        rich_table.add_column(str(column), justify="right")

    for i, (_, row) in enumerate(model.results.iterrows()):
        marker = "*" if i == model.best_index else ""
        rich_table.add_row(marker, *[_format_value(v) for v in row.to_numpy()])

    console.print(rich_table)


def print_table(frame: pd.DataFrame, title: str, console: Console | None = None) -> None:
    """Print any small DataFrame as a rich table."""
    console = console or Console()

    rich_table = Table(title=title)
    index_name = frame.index.name
    if index_name is not None:
        rich_table.add_column(str(index_name), style="cyan")
    for column in frame.columns:
        rich_table.add_column(str(column), justify="right")

    for index, row in frame.iterrows():
        cells = [_format_value(v) for v in row.to_numpy()]
        if index_name is not None:
            cells.insert(0, str(index))
        rich_table.add_row(*cells)

    console.print(rich_table)


def plot_comparison(table: pd.DataFrame, path: Path) -> Path:
    """
    Plot cross-validated RMSE (±1 SD) and in-sample RMSLE per method.

    Args:
        table: Comparison table from build_comparison.
        path: Output PNG path (parent directories are created).

    Returns:
        The written path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    methods = [str(m) for m in table.index]
    positions = np.arange(len(methods))

    fig, (ax_cv, ax_in) = plt.subplots(1, 2, figsize=(12, max(4, len(methods) * 0.6)))

    ax_cv.errorbar(
        table["cv_rmse"],
        positions,
        xerr=table["cv_rmse_sd"],
        fmt="o",
        color="steelblue",
        ecolor="gray",
        capsize=4,
    )
    ax_cv.set_yticks(positions)
    ax_cv.set_yticklabels(methods)
    ax_cv.set_xlabel("Cross-validated RMSE (±1 SD)")
    ax_cv.set_title("Cross-validation")
    ax_cv.grid(axis="x", alpha=0.3)

    ax_in.barh(positions, table["rmsle"], color="steelblue", edgecolor="none")
    ax_in.set_yticks(positions)
    ax_in.set_yticklabels(methods)
    ax_in.set_xlabel("RMSLE")
    ax_in.set_title("In-sample")
    ax_in.grid(axis="x", alpha=0.3)

    for ax in (ax_cv, ax_in):
        ax.invert_yaxis()

    plt.tight_layout()
    fig.savefig(path, format="png", dpi=150, bbox_inches="tight")
    plt.close(fig)

    log.info("Saved comparison plot", path=str(path))
    return path


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


def save_results(result: "ComparisonResult", output_dir: Path) -> list[Path]:
    """
    Write the comparison table and every results table as CSV.

    Held-out fold predictions are written too when they were kept.

    Args:
        result: Outcome of run_comparison.
        output_dir: Target directory (created if missing).

    Returns:
        Paths of all written files.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    comparison_path = output_dir / "comparison.csv"
    result.table.to_csv(comparison_path)
    written = [comparison_path]

    for name, model in result.models.items():
        results_path = output_dir / f"{_slug(name)}_cv_results.csv"
        model.results.to_csv(results_path, index_label="grid_index")
        written.append(results_path)

        if model.fold_predictions is not None:
            preds_path = output_dir / f"{_slug(name)}_fold_predictions.csv"
            model.fold_predictions.to_csv(preds_path, index=False)
            written.append(preds_path)

    log.info("Saved result tables", output_dir=str(output_dir), n_files=len(written))
    return written
