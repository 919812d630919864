"""
result.py

Підсумок одного запуску Executor.

OptimizationResult володіє обгорткою задачі (з лічильниками викликів)
і фінальним станом ітерацій. Результати порівнюються за значенням f
з допуском машинного епсилону, тому їх можна сортувати й відкидати
дублікати після мультистарту.
"""

from __future__ import annotations

import copy
import functools
import math
from typing import Any, Dict, Optional

import numpy as np

from .iteration_state import IterationState
from .problem import ProblemWrapper
from .termination import TerminationReason


def _cost_difference(a: Any, b: Any) -> float:
    """
    Різниця a - b, де дві однакові нескінченності (або два NaN) дають 0.0.
    """
    if math.isnan(a) and math.isnan(b):
        return 0.0
    if math.isinf(a) and math.isinf(b) and a == b:
        return 0.0
    return float(a - b)


def _epsilon(a: Any, b: Any) -> float:
    # Епсилон ширшого з двох типів (float32 vs float64 -> float64)
    dtype = np.result_type(np.asarray(a).dtype, np.asarray(b).dtype)
    if not np.issubdtype(dtype, np.floating):
        dtype = np.dtype(np.float64)
    return float(np.finfo(dtype).eps)


@functools.total_ordering
class OptimizationResult:
    """
    Результат оптимізації: (problem, state) + назва методу.

    Атрибути лише для читання; стан після завершення запуску не змінюється.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(
        self,
        problem: ProblemWrapper,
        state: IterationState,
        solver_name: str = "",
    ) -> None:
        self._problem = problem
        self._state = state
        self._solver_name = solver_name

    # ------------------------------------------------------------------
    # Доступ до полів
    # ------------------------------------------------------------------

    @property
    def problem(self) -> ProblemWrapper:
        return self._problem

    @property
    def state(self) -> IterationState:
        """Копія фінального стану; зміни в ній не впливають на результат."""
        return copy.deepcopy(self._state)

    @property
    def solver_name(self) -> str:
        return self._solver_name

    @property
    def best_param(self) -> Optional[Any]:
        return self._state.best_param

    @property
    def best_cost(self) -> float:
        return self._state.best_cost

    @property
    def cost(self) -> float:
        return self._state.cost

    @property
    def iterations(self) -> int:
        return self._state.iter

    @property
    def last_best_iter(self) -> int:
        return self._state.last_best_iter

    @property
    def termination_reason(self) -> TerminationReason:
        return self._state.termination_reason

    @property
    def termination_message(self) -> Optional[str]:
        return self._state.termination_message

    @property
    def elapsed(self) -> Optional[float]:
        return self._state.elapsed

    @property
    def eval_counts(self) -> Dict[str, int]:
        return dict(self._state.eval_counts)

    # ------------------------------------------------------------------
    # Текстове представлення
    # ------------------------------------------------------------------

    def summary(self) -> str:
        state = self._state
        reason = state.termination_reason.text
        if state.termination_message:
            reason = f"{reason} ({state.termination_message})"

        lines = [
            "OptimizationResult:",
            f"    solver:           {self._solver_name or '<unknown>'}",
            f"    problem:          {self._problem.name}",
            f"    param (best):     {_format_param(state.best_param)}",
            f"    cost (best):      {state.best_cost}",
        ]
        # Метод без f: "найкращий" стан лишається стартовим
        if math.isinf(state.best_cost):
            lines.append(f"    param (current):  {_format_param(state.param)}")
        lines += [
            f"    iters (best):     {state.last_best_iter}",
            f"    iters (total):    {state.iter}",
            f"    termination:      {reason}",
        ]
        if state.elapsed is not None:
            lines.append(f"    time:             {state.elapsed:.6f} s")
        if state.eval_counts:
            counts = ", ".join(f"{k}={v}" for k, v in sorted(state.eval_counts.items()))
            lines.append(f"    evaluations:      {counts}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return (
            f"OptimizationResult(solver={self._solver_name!r}, "
            f"cost={self._state.cost!r}, iters={self._state.iter}, "
            f"termination={self._state.termination_reason.name})"
        )

    # ------------------------------------------------------------------
    # Порівняння за f з допуском
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OptimizationResult):
            return NotImplemented
        a, b = self._state.cost, other._state.cost
        return abs(_cost_difference(a, b)) < _epsilon(a, b)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, OptimizationResult):
            return NotImplemented
        if self == other:
            return False
        a, b = self._state.cost, other._state.cost
        # NaN завжди в кінці впорядкування
        if math.isnan(a):
            return False
        if math.isnan(b):
            return True
        return _cost_difference(a, b) < 0.0


def _format_param(param: Any) -> str:
    if param is None:
        return "None"
    if isinstance(param, np.ndarray):
        return np.array2string(param, precision=6)
    return repr(param)


__all__ = [
    "OptimizationResult",
]
