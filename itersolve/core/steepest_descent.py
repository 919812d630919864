"""
steepest_descent.py

Метод найшвидшого спуску (метод Коші) як стратегія Solver.

Ідея:
    x_{k+1} = x_k + α_k * p_k,
    де p_k = -∇f(x_k),
        α_k підбирається line search з core.line_search
        (за замовчуванням — backtracking з умовою Арміхо).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np

from .errors import InvalidParameterError
from .iteration_state import IterationState
from .line_search import (
    LINE_SEARCH_ARMIJO,
    LINE_SEARCH_GOLDEN_SECTION,
    LINE_SEARCH_METHODS,
    line_search_1d,
)
from .problem import ProblemWrapper
from .solver_base import IterationDelta, Solver
from .termination import TerminationReason


class SteepestDescent(Solver):
    """
    Метод найшвидшого спуску.

    Особливості:
        - рухаємося вздовж антиградієнта: p_k = -∇f(x_k);
        - крок α_k обирається line search;
        - використовує лише значення функції та градієнта;
        - у delta повертає param, cost і grad (градієнт у точці x_k).

    Налаштування (options):
        grad_tol              : поріг норми градієнта (default: 1e-8)
        line_search           : "armijo_backtracking" (default) або "golden_section"
        alpha0                : початковий крок Арміхо (default: 1.0)
        tau                   : множник зменшення кроку, 0 < tau < 1 (default: 0.5)
        c1                    : константа Арміхо, 0 < c1 < 1 (default: 1e-4)
        max_backtracking      : ліміт кроків backtracking (default: 20)
        min_alpha             : мінімально допустимий крок (default: 1e-12)
        line_search_max_step  : права межа [0, b] для золотого перерізу (default: 1.0)
        line_search_tol       : точність по α для золотого перерізу (default: 1e-6)
        line_search_max_iter  : ліміт ітерацій золотого перерізу (default: 100)
    """

    default_name = "Steepest descent"

    def _validate_options(self) -> None:
        opts = self.options

        if float(opts.get("grad_tol", 1e-8)) < 0.0:
            raise InvalidParameterError("SteepestDescent: grad_tol має бути >= 0.")
        if float(opts.get("alpha0", 1.0)) <= 0.0:
            raise InvalidParameterError("SteepestDescent: alpha0 має бути > 0.")
        if not 0.0 < float(opts.get("tau", 0.5)) < 1.0:
            raise InvalidParameterError("SteepestDescent: tau має лежати в (0, 1).")
        if not 0.0 < float(opts.get("c1", 1e-4)) < 1.0:
            raise InvalidParameterError("SteepestDescent: c1 має лежати в (0, 1).")
        if int(opts.get("max_backtracking", 20)) <= 0:
            raise InvalidParameterError("SteepestDescent: max_backtracking має бути > 0.")
        if float(opts.get("line_search_max_step", 1.0)) <= 0.0:
            raise InvalidParameterError("SteepestDescent: line_search_max_step має бути > 0.")

        method = opts.get("line_search", LINE_SEARCH_ARMIJO)
        if method not in LINE_SEARCH_METHODS:
            raise InvalidParameterError(
                f"SteepestDescent: невідомий метод лінійного пошуку '{method}'."
            )

    def initialize(
        self,
        problem: ProblemWrapper,
        state: IterationState,
    ) -> Optional[IterationDelta]:
        """
        Обчислити f(x0), щоб на першій ітерації не рахувати її повторно.
        """
        if state.param is None:
            raise InvalidParameterError(
                "SteepestDescent: потрібна початкова точка (initial_param)."
            )
        x0 = np.asarray(state.param, dtype=float)
        return IterationDelta(cost=problem.evaluate_cost(x0))

    def _line_search_options(self, f_k: float, directional_derivative: float) -> Dict[str, Any]:
        opts = self.options
        method = opts.get("line_search", LINE_SEARCH_ARMIJO)

        if method == LINE_SEARCH_GOLDEN_SECTION:
            return {
                "a": 0.0,
                "b": float(opts.get("line_search_max_step", 1.0)),
                "tol": float(opts.get("line_search_tol", 1e-6)),
                "max_iter": int(opts.get("line_search_max_iter", 100)),
            }

        return {
            "f0": f_k,
            "directional_derivative": directional_derivative,
            "alpha0": float(opts.get("alpha0", 1.0)),
            "tau": float(opts.get("tau", 0.5)),
            "c1": float(opts.get("c1", 1e-4)),
            "max_backtracking": int(opts.get("max_backtracking", 20)),
            "min_alpha": float(opts.get("min_alpha", 1e-12)),
        }

    def next_iteration(
        self,
        problem: ProblemWrapper,
        state: IterationState,
    ) -> IterationDelta:
        """
        Один крок найшвидшого спуску із точки x_k = state.param.
        """
        x_k = np.asarray(state.param, dtype=float)

        # f(x_k) уже є в стані після initialize() / попереднього кроку
        f_k = float(state.cost)
        if not np.isfinite(f_k):
            f_k = float(problem.evaluate_cost(x_k))

        g_k = np.asarray(problem.evaluate_gradient(x_k), dtype=float)
        grad_norm = float(np.linalg.norm(g_k, ord=2))
        grad_tol = float(self.options.get("grad_tol", 1e-8))

        if grad_norm < grad_tol:
            return IterationDelta(
                param=x_k.copy(),
                cost=f_k,
                grad=g_k,
                meta={"alpha": 0.0, "grad_norm": grad_norm},
            ).terminate(
                TerminationReason.SOLVER_CONVERGED,
                "gradient norm below tolerance",
            )

        # Напрямок спуску та φ'(0) = ∇f(x_k)^T p_k = -||g_k||^2 < 0
        p_k = -g_k
        directional_derivative = float(np.dot(g_k, p_k))

        def phi(alpha: float) -> float:
            return float(problem.evaluate_cost(x_k + alpha * p_k))

        method = self.options.get("line_search", LINE_SEARCH_ARMIJO)
        ls_result = line_search_1d(
            phi=phi,
            method=method,
            options=self._line_search_options(f_k, directional_derivative),
        )

        meta: Dict[str, Any] = {
            "alpha": ls_result.alpha,
            "grad_norm": grad_norm,
            "line_search_method": method,
            "line_search_iterations": ls_result.iterations,
            "line_search_evals": ls_result.func_evals,
        }

        if not ls_result.accepted or ls_result.phi_value > f_k:
            # Крок не знайдено, залишаємося в x_k
            meta["alpha"] = 0.0
            return IterationDelta(
                param=x_k.copy(),
                cost=f_k,
                grad=g_k,
                meta=meta,
            ).terminate(
                TerminationReason.SOLVER_EXIT,
                "line search failed to find a valid step",
            )

        x_new = x_k + ls_result.alpha * p_k
        meta["step_norm"] = float(np.linalg.norm(x_new - x_k, ord=2))

        return IterationDelta(
            param=x_new,
            cost=float(ls_result.phi_value),
            grad=g_k,
            meta=meta,
        )


__all__ = [
    "SteepestDescent",
]
