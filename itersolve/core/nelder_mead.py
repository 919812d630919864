"""
nelder_mead.py

Реалізація методу Нелдера–Міда як стратегії Solver.

Метод працює тільки зі значеннями функції f(x) (без градієнтів і Гессіана)
і оперує симплексом з (n + 1) вершин у n-вимірному просторі. Симплекс
зберігається в стані як population — список пар (вершина, f(вершина)).

Основні кроки:
    1. Сортування вершин симплекса за значенням f.
    2. Обчислення центроїда всіх вершин, окрім найгіршої.
    3. Спроба відбиття (reflection).
    4. За потреби — розширення (expansion).
    5. Або контракт (contraction) / стиснення симплекса (shrink).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .errors import InvalidParameterError, OptimizationError
from .iteration_state import IterationState
from .problem import ProblemWrapper
from .solver_base import IterationDelta, Solver
from .termination import TerminationReason


class NelderMead(Solver):
    """
    Метод Нелдера–Міда.

    Налаштування (options):
        alpha                  : коефіцієнт відбиття (reflection), > 0, default: 1.0
        gamma                  : коефіцієнт розширення (expansion), > 1, default: 2.0
        rho                    : коефіцієнт контракту (contraction), (0, 0.5], default: 0.5
        sigma                  : коефіцієнт стиснення (shrink), (0, 1), default: 0.5
        initial_simplex_scale  : масштаб для побудови початкового симплекса (default: 0.05)
        sd_tolerance           : поріг діаметра симплекса для зупинки (default: 1e-8)
    """

    default_name = "Nelder-Mead simplex"

    def _validate_options(self) -> None:
        opts = self.options
        if float(opts.get("alpha", 1.0)) <= 0.0:
            raise InvalidParameterError("Nelder-Mead: alpha має бути > 0.")
        if float(opts.get("gamma", 2.0)) <= 1.0:
            raise InvalidParameterError("Nelder-Mead: gamma має бути > 1.")
        if not 0.0 < float(opts.get("rho", 0.5)) <= 0.5:
            raise InvalidParameterError("Nelder-Mead: rho має лежати в (0, 0.5].")
        if not 0.0 < float(opts.get("sigma", 0.5)) < 1.0:
            raise InvalidParameterError("Nelder-Mead: sigma має лежати в (0, 1).")
        if float(opts.get("initial_simplex_scale", 0.05)) == 0.0:
            raise InvalidParameterError("Nelder-Mead: initial_simplex_scale не може бути 0.")
        if float(opts.get("sd_tolerance", 1e-8)) < 0.0:
            raise InvalidParameterError("Nelder-Mead: sd_tolerance має бути >= 0.")

    # ------------------------------------------------------------------
    # Допоміжні функції
    # ------------------------------------------------------------------

    @staticmethod
    def _simplex_diameter(simplex: np.ndarray) -> float:
        """
        Оцінка "розміру" симплекса як максимальна відстань від кращої точки.
        """
        dists = np.linalg.norm(simplex - simplex[0], axis=1)
        return float(np.max(dists))

    @staticmethod
    def _sorted(simplex: np.ndarray, f_values: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        order = np.argsort(f_values, kind="stable")
        return simplex[order], f_values[order]

    @staticmethod
    def _to_population(simplex: np.ndarray, f_values: np.ndarray) -> List[Tuple[Any, float]]:
        return [(vertex.copy(), float(f)) for vertex, f in zip(simplex, f_values)]

    def _delta(
        self,
        simplex: np.ndarray,
        f_values: np.ndarray,
        meta: Optional[Dict[str, Any]] = None,
    ) -> IterationDelta:
        simplex, f_values = self._sorted(simplex, f_values)
        return IterationDelta(
            param=simplex[0].copy(),
            cost=float(f_values[0]),
            population=self._to_population(simplex, f_values),
            meta=dict(meta or {}),
        )

    # ------------------------------------------------------------------
    # Ініціалізація симплекса
    # ------------------------------------------------------------------

    def initialize(
        self,
        problem: ProblemWrapper,
        state: IterationState,
    ) -> Optional[IterationDelta]:
        """
        Побудова початкового симплекса навколо state.param.
        """
        if state.param is None:
            raise InvalidParameterError(
                "Nelder-Mead: потрібна початкова точка (initial_param)."
            )

        x0 = np.atleast_1d(np.asarray(state.param, dtype=float))
        n = x0.size
        scale = float(self.options.get("initial_simplex_scale", 0.05))

        simplex = np.zeros((n + 1, n), dtype=float)
        simplex[0] = x0

        # Для кожної координати додаємо маленьке зміщення
        for i in range(n):
            y = x0.copy()
            if y[i] != 0.0:
                y[i] = (1.0 + scale) * y[i]
            else:
                y[i] = scale
            simplex[i + 1] = y

        f_values = np.array([problem.evaluate_cost(v) for v in simplex], dtype=float)

        return self._delta(
            simplex,
            f_values,
            meta={"simplex_diameter": self._simplex_diameter(self._sorted(simplex, f_values)[0])},
        )

    # ------------------------------------------------------------------
    # Один крок методу Нелдера–Міда
    # ------------------------------------------------------------------

    def next_iteration(
        self,
        problem: ProblemWrapper,
        state: IterationState,
    ) -> IterationDelta:
        if not state.population:
            raise OptimizationError(
                "Nelder-Mead: симплекс не ініціалізовано (state.population порожній)."
            )

        alpha = float(self.options.get("alpha", 1.0))
        gamma = float(self.options.get("gamma", 2.0))
        rho = float(self.options.get("rho", 0.5))
        sigma = float(self.options.get("sigma", 0.5))
        sd_tolerance = float(self.options.get("sd_tolerance", 1e-8))

        simplex = np.array([np.asarray(v, dtype=float) for v, _ in state.population])
        f_values = np.array([f for _, f in state.population], dtype=float)
        simplex, f_values = self._sorted(simplex, f_values)

        n = simplex.shape[1]

        # 0 – найкраща, n – найгірша
        x_best = simplex[0].copy()
        x_worst = simplex[-1].copy()
        f_best = float(f_values[0])
        f_worst = float(f_values[-1])
        f_second_worst = float(f_values[-2])

        # Центроїд усіх, окрім найгіршої точки
        centroid = np.mean(simplex[:-1], axis=0)

        # 1. Reflection
        x_reflect = centroid + alpha * (centroid - x_worst)
        f_reflect = float(problem.evaluate_cost(x_reflect))
        step_type = "reflection"

        if f_best <= f_reflect < f_second_worst:
            simplex[-1] = x_reflect
            f_values[-1] = f_reflect

        elif f_reflect < f_best:
            # 2. Expansion
            x_expand = centroid + gamma * (x_reflect - centroid)
            f_expand = float(problem.evaluate_cost(x_expand))

            if f_expand < f_reflect:
                simplex[-1] = x_expand
                f_values[-1] = f_expand
                step_type = "expansion"
            else:
                simplex[-1] = x_reflect
                f_values[-1] = f_reflect

        else:
            # 3. Contraction
            if f_reflect < f_worst:
                x_contract = centroid + rho * (x_reflect - centroid)
                step_type = "outside_contraction"
            else:
                x_contract = centroid - rho * (centroid - x_worst)
                step_type = "inside_contraction"

            f_contract = float(problem.evaluate_cost(x_contract))

            if f_contract < min(f_reflect, f_worst):
                simplex[-1] = x_contract
                f_values[-1] = f_contract
            else:
                # 4. Shrink
                step_type = "shrink"
                for i in range(1, n + 1):
                    simplex[i] = x_best + sigma * (simplex[i] - x_best)
                    f_values[i] = problem.evaluate_cost(simplex[i])

        simplex, f_values = self._sorted(simplex, f_values)
        diameter = self._simplex_diameter(simplex)

        delta = self._delta(
            simplex,
            f_values,
            meta={
                "step_type": step_type,
                "simplex_diameter": diameter,
                "step_norm": float(np.linalg.norm(simplex[0] - x_best, ord=2)),
            },
        )

        if diameter < sd_tolerance:
            delta.terminate(
                TerminationReason.SOLVER_CONVERGED,
                "simplex diameter below tolerance",
            )
        return delta


__all__ = [
    "NelderMead",
]
