"""
newton.py

Метод Ньютона як стратегія Solver.

Ідея:
    x_{k+1} = x_k + γ * p_k,
    де p_k розв'язує систему
        H_k * p_k = -g_k,
    H_k = ∇²f(x_k), g_k = ∇f(x_k), 0 < γ <= 1 — фіксований коефіцієнт кроку.

Якщо в задачі задано cost, у delta потрапляє f(x_{k+1}). Без cost метод
повертає лише param, grad і hessian: cost у стані залишається +inf,
і найкращим вважається лише перший прийнятий стан, тож підсумкову точку
слід брати з state.param.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np

from .errors import InvalidParameterError
from .iteration_state import IterationState
from .problem import ProblemWrapper
from .solver_base import IterationDelta, Solver
from .termination import TerminationReason


class Newton(Solver):
    """
    Метод Ньютона з регуляризацією Гессіана.

    Налаштування (options):
        gamma          : коефіцієнт кроку, 0 < gamma <= 1 (default: 1.0)
        grad_tol       : поріг норми градієнта (default: 1e-8)
        reg_lambda     : початкове λ для (H_k + λ I) (default: 1e-6)
        max_reg_scale  : максимальний масштаб λ відносно reg_lambda (default: 1e6)
    """

    default_name = "Newton method"

    def _validate_options(self) -> None:
        gamma = float(self.options.get("gamma", 1.0))
        if not 0.0 < gamma <= 1.0:
            raise InvalidParameterError("Newton: gamma must be in (0, 1].")
        if float(self.options.get("grad_tol", 1e-8)) < 0.0:
            raise InvalidParameterError("Newton: grad_tol має бути >= 0.")
        if float(self.options.get("reg_lambda", 1e-6)) <= 0.0:
            raise InvalidParameterError("Newton: reg_lambda має бути > 0.")

    def initialize(
        self,
        problem: ProblemWrapper,
        state: IterationState,
    ) -> Optional[IterationDelta]:
        if state.param is None:
            raise InvalidParameterError(
                "Newton: потрібна початкова точка (initial_param)."
            )
        if not problem.provides("cost"):
            return None
        x0 = np.asarray(state.param, dtype=float)
        return IterationDelta(cost=problem.evaluate_cost(x0))

    @staticmethod
    def _compute_newton_direction(
        g_k: np.ndarray,
        H_k: np.ndarray,
        reg_lambda: float,
        max_reg_scale: float,
    ) -> Tuple[np.ndarray, float, bool]:
        """
        Обчислити напрямок Ньютона p_k.

        Спершу пробуємо розв'язати H_k p = -g без регуляризації; якщо матриця
        вироджена, додаємо λ I і збільшуємо λ в 10 разів, доки система
        не розв'яжеться або λ не перевищить reg_lambda * max_reg_scale.

        Повертає:
            p_k          - знайдений напрямок
            used_lambda  - фактичне λ (0.0, якщо регуляризація не знадобилась)
            fallback     - True, якщо довелося взяти антиградієнт
        """
        H_sym = 0.5 * (H_k + H_k.T)

        try:
            return -np.linalg.solve(H_sym, g_k), 0.0, False
        except np.linalg.LinAlgError:
            pass

        identity = np.eye(len(g_k), dtype=float)
        lam = reg_lambda
        while lam <= reg_lambda * max_reg_scale:
            try:
                p_k = -np.linalg.solve(H_sym + lam * identity, g_k)
                return p_k, lam, False
            except np.linalg.LinAlgError:
                lam *= 10.0

        return -g_k.copy(), lam, True

    def next_iteration(
        self,
        problem: ProblemWrapper,
        state: IterationState,
    ) -> IterationDelta:
        gamma = float(self.options.get("gamma", 1.0))
        grad_tol = float(self.options.get("grad_tol", 1e-8))
        reg_lambda = float(self.options.get("reg_lambda", 1e-6))
        max_reg_scale = float(self.options.get("max_reg_scale", 1e6))

        x_k = np.asarray(state.param, dtype=float)
        g_k = np.asarray(problem.evaluate_gradient(x_k), dtype=float)
        grad_norm = float(np.linalg.norm(g_k, ord=2))

        if grad_norm < grad_tol:
            return IterationDelta(
                param=x_k.copy(),
                grad=g_k,
                meta={"grad_norm": grad_norm, "step_norm": 0.0},
            ).terminate(
                TerminationReason.SOLVER_CONVERGED,
                "gradient norm below tolerance",
            )

        H_k = np.asarray(problem.evaluate_hessian(x_k), dtype=float)
        p_k, used_lambda, fallback = self._compute_newton_direction(
            g_k, H_k, reg_lambda, max_reg_scale
        )

        x_new = x_k + gamma * p_k
        cost = problem.evaluate_cost(x_new) if problem.provides("cost") else None

        meta: Dict[str, Any] = {
            "grad_norm": grad_norm,
            "lambda": used_lambda,
            "fallback_to_grad": fallback,
            "step_norm": float(np.linalg.norm(x_new - x_k, ord=2)),
        }

        return IterationDelta(
            param=x_new,
            cost=cost,
            grad=g_k,
            hessian=H_k,
            meta=meta,
        )


__all__ = [
    "Newton",
]
