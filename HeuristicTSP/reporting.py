from __future__ import annotations

import pathlib
from typing import Sequence

import pandas as pd

from HeuristicTSP.core import IterationResult

HISTORY_COLUMNS = ["iteration", "best_distance", "current_distance"]


def history_frame(history: Sequence[IterationResult]) -> pd.DataFrame:
    """One row per iteration with best and current distances."""
    rows = [
        {
            "iteration": record.iteration,
            "best_distance": record.best_distance,
            "current_distance": record.current_distance,
        }
        for record in history
    ]
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)


def summarize_history(history: Sequence[IterationResult]) -> dict[str, float | int | None]:
    df = history_frame(history)
    if df.empty:
        return {"iterations": 0, "initial_best": None, "final_best": None, "improvement": None, "last_improvement": None}
    improved = df["best_distance"].diff().fillna(0.0) < 0
    last_improvement = int(df.loc[improved, "iteration"].max()) if improved.any() else None
    initial = float(df["best_distance"].iloc[0])
    final = float(df["best_distance"].iloc[-1])
    return {
        "iterations": int(len(df)),
        "initial_best": initial,
        "final_best": final,
        "improvement": initial - final,
        "last_improvement": last_improvement,
    }


def write_history_csv(history: Sequence[IterationResult], path: pathlib.Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    history_frame(history).to_csv(path, index=False)


def plot_convergence(history: Sequence[IterationResult], output: pathlib.Path, title: str = "") -> None:
    """Render best and current distance per iteration to a PNG."""
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    df = history_frame(history)
    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(df["iteration"], df["current_distance"], color="tab:gray", alpha=0.4, linewidth=0.8, label="current")
    ax.plot(df["iteration"], df["best_distance"], color="tab:blue", linewidth=1.6, label="best")
    ax.set_xlabel("Iteration")
    ax.set_ylabel("Tour length")
    ax.set_title(title or "Convergence")
    ax.legend()
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    output.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output, dpi=150)
    plt.close(fig)


__all__ = ["history_frame", "plot_convergence", "summarize_history", "write_history_csv"]
