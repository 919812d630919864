"""
gauss_newton.py

Метод Гаусса–Ньютона для задач найменших квадратів.

Задача:
    min  f(x) = 1/2 * ||r(x)||^2,
    де r(x) — вектор залишків (Problem.operator), J(x) — його Якобіан.

Крок:
    p_k = (J^T J)^{-1} J^T r(x_k),
    x_{k+1} = x_k - γ * p_k,   0 < γ <= 1.

Зупинка: |f(x_{k-1}) - f(x_k)| < tol.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np

from .errors import InvalidParameterError, OptimizationError
from .iteration_state import IterationState
from .problem import ProblemWrapper
from .solver_base import IterationDelta, Solver
from .termination import TerminationReason

DEFAULT_TOL: float = float(np.sqrt(np.finfo(float).eps))


def _half_squared_norm(residuals: np.ndarray) -> float:
    return 0.5 * float(np.dot(residuals, residuals))


class GaussNewton(Solver):
    """
    Метод Гаусса–Ньютона.

    Налаштування (options):
        gamma : коефіцієнт кроку, 0 < gamma <= 1 (default: 1.0)
        tol   : поріг зміни f між ітераціями, > 0 (default: sqrt(eps))

    Значення f у delta — це 1/2 ||r||^2 у НОВІЙ точці; залишки в цій точці
    запам'ятовуються й використовуються на наступній ітерації.
    """

    default_name = "Gauss-Newton"

    def __init__(
        self,
        options: Optional[Dict[str, Any]] = None,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(options=options, name=name)
        self._cached_param: Optional[np.ndarray] = None
        self._cached_residuals: Optional[np.ndarray] = None

    def _validate_options(self) -> None:
        gamma = float(self.options.get("gamma", 1.0))
        if not 0.0 < gamma <= 1.0:
            raise InvalidParameterError("Gauss-Newton: gamma must be in (0, 1].")
        if float(self.options.get("tol", DEFAULT_TOL)) <= 0.0:
            raise InvalidParameterError("Gauss-Newton: tol must be > 0.")

    def _residuals_at(self, problem: ProblemWrapper, x: np.ndarray) -> np.ndarray:
        if self._cached_param is not None and np.array_equal(self._cached_param, x):
            return self._cached_residuals
        residuals = np.asarray(problem.evaluate_operator(x), dtype=float)
        self._cached_param = x.copy()
        self._cached_residuals = residuals
        return residuals

    def initialize(
        self,
        problem: ProblemWrapper,
        state: IterationState,
    ) -> Optional[IterationDelta]:
        if state.param is None:
            raise InvalidParameterError(
                "Gauss-Newton: потрібна початкова точка (initial_param)."
            )
        self._cached_param = None
        self._cached_residuals = None

        x0 = np.asarray(state.param, dtype=float)
        return IterationDelta(cost=_half_squared_norm(self._residuals_at(problem, x0)))

    def next_iteration(
        self,
        problem: ProblemWrapper,
        state: IterationState,
    ) -> IterationDelta:
        gamma = float(self.options.get("gamma", 1.0))

        x_k = np.asarray(state.param, dtype=float)
        r_k = self._residuals_at(problem, x_k)
        J_k = np.asarray(problem.evaluate_jacobian(x_k), dtype=float)

        jtj = J_k.T @ J_k
        jtr = J_k.T @ r_k
        try:
            p_k = np.linalg.solve(jtj, jtr)
        except np.linalg.LinAlgError as exc:
            raise OptimizationError(
                "Gauss-Newton: матриця J^T J вироджена, крок неможливий"
            ) from exc

        x_new = x_k - gamma * p_k
        r_new = self._residuals_at(problem, x_new)

        return IterationDelta(
            param=x_new,
            cost=_half_squared_norm(r_new),
            jacobian=J_k,
            meta={"step_norm": float(np.linalg.norm(x_new - x_k, ord=2))},
        )

    def terminate(self, state: IterationState) -> TerminationReason:
        tol = float(self.options.get("tol", DEFAULT_TOL))
        if abs(state.prev_cost - state.cost) < tol:
            return TerminationReason.SOLVER_CONVERGED
        return TerminationReason.NOT_TERMINATED


__all__ = [
    "DEFAULT_TOL",
    "GaussNewton",
]
