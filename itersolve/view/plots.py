"""
plots.py

Графіки процесу мінімізації на matplotlib без GUI-бекенда.

Функції будують matplotlib.figure.Figure напряму (без pyplot), тому
працюють і в тестах, і в headless-середовищі. Дані беруться з траси
HistoryObserver (список IterationResult):
    - plot_cost_history(...)        – f(k) та найкраще f(k);
    - plot_contour_trajectory(...)  – рівні f(x1, x2) + траєкторія.
"""

from __future__ import annotations

from typing import Callable, List, Optional

import numpy as np
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from ..core.iteration_result import IterationResult

_ACCENT = "#5fb3f7"
_ACCENT_ALT = "#7dcfff"
_MUTED = "#9aa4b5"
_BORDER = "#2a3039"


def _resolve_axes(ax: Optional[Axes]) -> Axes:
    if ax is not None:
        return ax
    figure = Figure(figsize=(6.0, 4.5))
    return figure.add_subplot(111)


def _style_axes(ax: Axes) -> None:
    ax.grid(True, color=_BORDER, linestyle="--", linewidth=0.5, alpha=0.6)


def plot_cost_history(
    trace: List[IterationResult],
    ax: Optional[Axes] = None,
) -> Figure:
    """
    Графік f(k): поточне та найкраще значення на кожній ітерації.

    Нескінченні значення (метод ще не рахував f) пропускаються.
    """
    ax = _resolve_axes(ax)
    _style_axes(ax)

    if not trace:
        ax.text(0.5, 0.5, "Немає ітерацій", ha="center", va="center",
                transform=ax.transAxes, color=_MUTED)
        return ax.figure

    ks = np.array([rec.index for rec in trace], dtype=float)
    fs = np.array([rec.cost for rec in trace], dtype=float)
    best = np.array([rec.best_cost for rec in trace], dtype=float)

    finite = np.isfinite(fs)
    ax.plot(ks[finite], fs[finite], marker="o", linestyle="-", linewidth=1.5,
            markersize=4, color=_ACCENT, label="f(xₖ)")

    finite_best = np.isfinite(best)
    ax.step(ks[finite_best], best[finite_best], where="post", linewidth=1.2,
            color=_ACCENT_ALT, label="best f")

    ax.set_xlabel("k (номер ітерації)")
    ax.set_ylabel("f(xₖ)")
    ax.set_title("Графік f(k)")
    ax.legend(loc="upper right")
    return ax.figure


def plot_contour_trajectory(
    func: Callable[[np.ndarray], float],
    trace: List[IterationResult],
    levels: int = 18,
    padding: float = 0.5,
    grid_size: int = 120,
    ax: Optional[Axes] = None,
) -> Figure:
    """
    Контурні лінії f(x1, x2) разом із траєкторією параметрів.

    Працює лише для задач у R²; інакше — ValueError.
    """
    params = [rec.param for rec in trace if rec.param is not None]
    if not params:
        raise ValueError("Траса не містить параметрів для побудови траєкторії.")

    xs = np.array(params, dtype=float)
    if xs.ndim != 2 or xs.shape[1] != 2:
        raise ValueError("Контурний графік доступний лише для задачі в R².")

    ax = _resolve_axes(ax)

    x1_min, x1_max = xs[:, 0].min(), xs[:, 0].max()
    x2_min, x2_max = xs[:, 1].min(), xs[:, 1].max()

    if abs(x1_max - x1_min) < 1e-9:
        x1_min -= 1.0
        x1_max += 1.0
    if abs(x2_max - x2_min) < 1e-9:
        x2_min -= 1.0
        x2_max += 1.0

    x1_vals = np.linspace(x1_min - padding, x1_max + padding, grid_size)
    x2_vals = np.linspace(x2_min - padding, x2_max + padding, grid_size)
    X1, X2 = np.meshgrid(x1_vals, x2_vals)

    Z = np.zeros_like(X1)
    for i in range(grid_size):
        for j in range(grid_size):
            Z[i, j] = func(np.array([X1[i, j], X2[i, j]], dtype=float))

    _style_axes(ax)
    ax.contour(X1, X2, Z, levels=levels, colors=_MUTED, linewidths=0.8)
    ax.contourf(X1, X2, Z, levels=levels, cmap="magma", alpha=0.45)

    ax.plot(xs[:, 0], xs[:, 1], marker="o", linestyle="-", linewidth=1.2,
            markersize=4, color=_ACCENT)
    ax.scatter(xs[0, 0], xs[0, 1], color=_ACCENT_ALT, marker="s", s=50, zorder=5)
    ax.scatter(xs[-1, 0], xs[-1, 1], color=_ACCENT, marker="*", s=120, zorder=6)

    ax.set_xlabel("x₁")
    ax.set_ylabel("x₂")
    ax.set_title("Рівні функції та траєкторія")
    return ax.figure


__all__ = [
    "plot_cost_history",
    "plot_contour_trajectory",
]
