"""
results_summary.py

Зведена таблиця результатів кількох запусків оптимізації
(різні методи або різні стартові точки для однієї задачі).

Працює поверх OptimizationResult:
    - solver_name
    - best_param / best_cost
    - iterations / last_best_iter
    - termination_reason / termination_message
    - eval_counts
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from .result import OptimizationResult


@dataclass
class ResultsSummary:
    """
    Зведення результатів кількох запусків.

    Приклад використання:
        summary = ResultsSummary()
        summary.add_run(result_descent)
        summary.add_run(result_newton)
        rows = summary.as_rows()  # для pandas / CSV / друку
    """
    runs: List[OptimizationResult] = field(default_factory=list)

    def add_run(self, run: OptimizationResult) -> None:
        """Додати результат одного запуску до зведення."""
        self.runs.append(run)

    def __len__(self) -> int:
        return len(self.runs)

    # ------------------------------------------------------------------
    # Перетворення в "табличний" вигляд
    # ------------------------------------------------------------------

    def as_rows(self) -> List[Dict[str, Any]]:
        """
        Повернути список dict-рядків, придатних для:
            - створення pandas.DataFrame,
            - друку таблиці,
            - експорту в CSV.

        Поля рядка:
            - solver
            - best_param
            - best_cost
            - iterations
            - last_best_iter
            - termination
            - elapsed
            - <лічильники викликів: cost_count, gradient_count, ...>
        """
        rows: List[Dict[str, Any]] = []

        for run in self.runs:
            best_param = run.best_param
            if isinstance(best_param, np.ndarray):
                best_param = best_param.tolist()

            termination = run.termination_reason.text
            if run.termination_message:
                termination = f"{termination} ({run.termination_message})"

            row: Dict[str, Any] = {
                "solver": run.solver_name,
                "best_param": best_param,
                "best_cost": float(run.best_cost),
                "iterations": int(run.iterations),
                "last_best_iter": int(run.last_best_iter),
                "termination": termination,
                "elapsed": run.elapsed,
            }
            row.update(run.eval_counts)
            rows.append(row)

        return rows

    # ------------------------------------------------------------------
    # Вибір та впорядкування
    # ------------------------------------------------------------------

    def best(self) -> Optional[OptimizationResult]:
        """
        Повернути запуск з найменшим f (за порівнянням OptimizationResult).
        Якщо список порожній — None.
        """
        if not self.runs:
            return None
        return min(self.runs)

    def sorted_runs(self) -> List[OptimizationResult]:
        """Запуски від найкращого до найгіршого (стабільне сортування)."""
        return sorted(self.runs)

    def unique_runs(self) -> List[OptimizationResult]:
        """
        Відсортовані запуски без дублікатів: результати, рівні в межах
        машинного епсилону, залишаються в одному екземплярі (першому).
        """
        unique: List[OptimizationResult] = []
        for run in self.sorted_runs():
            if not unique or run != unique[-1]:
                unique.append(run)
        return unique

    # ------------------------------------------------------------------
    # Опційно: повернути pandas.DataFrame
    # ------------------------------------------------------------------

    def to_dataframe(self):
        """
        Повернути pandas.DataFrame зі зведеною таблицею.

        Вимога: встановлений пакет pandas (extra "pandas").
        """
        try:
            import pandas as pd  # type: ignore
        except ImportError as exc:  # pragma: no cover
            raise RuntimeError(
                "Для використання ResultsSummary.to_dataframe() "
                "потрібно встановити пакет 'pandas'."
            ) from exc

        return pd.DataFrame(self.as_rows())


__all__ = ["ResultsSummary"]
