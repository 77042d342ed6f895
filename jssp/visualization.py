"""Gantt charts and search progress plots."""

from __future__ import annotations

import logging
import os
from typing import Sequence

import matplotlib

matplotlib.use("Agg")  # Must be set before importing pyplot
import matplotlib.pyplot as plt  # noqa: E402

from .graph import ScheduleGraph  # noqa: E402

logger = logging.getLogger("jssp.viz")


def _ensure_dir(path: str) -> None:
    if path:
        os.makedirs(path, exist_ok=True)


def plot_gantt(graph: ScheduleGraph, save_path: str, algo_name: str = "") -> str:
    """Draw one bar per operation on its machine row and save the figure.

    Adaptive figure size: width grows slowly with jobs, height with machines.
    The legend is only drawn for up to 40 jobs.

    Returns:
        ``save_path``.
    """
    problem = graph.problem
    machines = problem.machines
    row = {m: i for i, m in enumerate(machines)}
    n = problem.job_count
    cmax = graph.makespan()

    fig, ax = plt.subplots(
        figsize=(min(10 + n * 0.05, 18), min(0.5 * len(machines) + 2, 16)),
        constrained_layout=True,
    )
    cmap = plt.get_cmap("tab20")
    colors = [cmap(j % 20) for j in range(n)]
    for op in problem.operations:
        ax.barh(
            row[op.machine],
            op.duration,
            left=graph.start_time(op.id),
            height=0.8,
            color=colors[op.job],
            alpha=0.85,
            edgecolor="black",
            linewidth=0.6,
        )
    ax.set_xlabel("Time", fontsize=12)
    ax.set_ylabel("Machine", fontsize=12)
    title = f"Gantt Chart - Cmax = {cmax}"
    if algo_name:
        title = f"{algo_name}: {title}"
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.set_yticks(range(len(machines)))
    ax.set_yticklabels([f"M{m}" for m in machines])
    ax.grid(True, alpha=0.25, axis="x", linestyle="--", linewidth=0.7)
    ax.set_ylim(-0.5, len(machines) - 0.5)

    if n <= 40:
        legend_elements = [
            plt.Rectangle(
                (0, 0), 1, 1, facecolor=colors[j], alpha=0.85, edgecolor="black", label=f"Job {j}"
            )
            for j in range(n)
        ]
        ax.legend(
            handles=legend_elements,
            bbox_to_anchor=(1.02, 1),
            loc="upper left",
            borderaxespad=0.0,
            fontsize=8,
            frameon=False,
            ncol=1 if n <= 25 else 2,
        )

    _ensure_dir(os.path.dirname(save_path))
    fig.savefig(save_path, dpi=180)
    plt.close(fig)
    logger.info("Gantt chart saved as: %s", save_path)
    return save_path


def plot_progress(
    history: Sequence[int],
    save_path: str,
    current_history: Sequence[int] | None = None,
    title: str = "Convergence",
) -> str:
    """Plot best (and optionally current) makespan per iteration."""
    fig, ax = plt.subplots(figsize=(10, 6))
    iterations = list(range(len(history)))
    if current_history:
        ax.plot(
            list(range(len(current_history))),
            list(current_history),
            color="tab:gray",
            linewidth=1,
            alpha=0.6,
            label="current",
        )
    ax.plot(iterations, list(history), "b-", linewidth=2, label="best")

    ax.set_xlabel("Iteration", fontsize=12)
    ax.set_ylabel("Cmax", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.grid(True, alpha=0.3)
    ax.legend()

    if len(history) > 1:
        ax.annotate(
            f"Start: {history[0]}",
            xy=(iterations[0], history[0]),
            xytext=(10, 10),
            textcoords="offset points",
            bbox=dict(boxstyle="round,pad=0.3", facecolor="yellow", alpha=0.7),
            arrowprops=dict(arrowstyle="->", connectionstyle="arc3,rad=0"),
        )
        ax.annotate(
            f"Best: {history[-1]}",
            xy=(iterations[-1], history[-1]),
            xytext=(10, -20),
            textcoords="offset points",
            bbox=dict(boxstyle="round,pad=0.3", facecolor="lightgreen", alpha=0.7),
            arrowprops=dict(arrowstyle="->", connectionstyle="arc3,rad=0"),
        )

    fig.tight_layout()
    _ensure_dir(os.path.dirname(save_path))
    fig.savefig(save_path, dpi=150)
    plt.close(fig)
    logger.info("Progress plot saved as: %s", save_path)
    return save_path
