"""
problem.py

Опис задачі оптимізації та обгортка з лічильниками викликів.

Ідея:
    - Problem — набір (необов'язкових) функцій задачі: f(x), ∇f(x), H(x),
      J(x), вектор нев'язок r(x) та modify(x, extent) для методів, що
      збурюють точку;
    - ProblemWrapper обчислює їх на вимогу і рахує, скільки разів було
      викликано кожну операцію. Движок читає лише ці лічильники;
    - якщо аналітичної похідної немає, використовується чисельна
      (центральні різниці з core.functions), як і раніше в Optimizer.eval_grad.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import numpy as np

from .errors import EvaluationError
from .functions import (
    ArrayLike,
    MatrixFunction,
    ScalarFunction,
    VectorFunction,
    numerical_gradient,
    numerical_hessian,
    numerical_jacobian,
)

ModifyFunction = Callable[[ArrayLike, float], ArrayLike]

# Імена лічильників операцій
COST_COUNT = "cost_count"
GRADIENT_COUNT = "gradient_count"
HESSIAN_COUNT = "hessian_count"
JACOBIAN_COUNT = "jacobian_count"
OPERATOR_COUNT = "operator_count"
MODIFY_COUNT = "modify_count"


@dataclass(frozen=True)
class Problem:
    """
    Задача оптимізації.

    Атрибути:
        cost      - цільова функція f(x) -> float
        gradient  - градієнт ∇f(x)
        hessian   - Гессіан ∇²f(x)
        jacobian  - матриця Якобі нев'язок J(x)
        operator  - вектор нев'язок r(x) (для найменших квадратів)
        modify    - збурення точки modify(x, extent) (для популяційних методів)
        name      - людяна назва задачі
    """
    cost: Optional[ScalarFunction] = None
    gradient: Optional[VectorFunction] = None
    hessian: Optional[MatrixFunction] = None
    jacobian: Optional[MatrixFunction] = None
    operator: Optional[VectorFunction] = None
    modify: Optional[ModifyFunction] = None
    name: Optional[str] = None


class ProblemWrapper:
    """
    Обгортка над Problem з підрахунком викликів.

    Лічильник з'являється в operation_counts() лише після першого
    виклику відповідної операції. Кожен екземпляр має власні лічильники.

    Використання:
        wrapper = ProblemWrapper(problem)
        f = wrapper.evaluate_cost(x)
        wrapper.operation_counts()  # {"cost_count": 1}
    """

    def __init__(self, problem: Problem) -> None:
        self.problem = problem
        self.counts: Dict[str, int] = {}

    @property
    def name(self) -> str:
        return self.problem.name or "problem"

    def provides(self, operation: str) -> bool:
        """Чи задано в Problem функцію operation ("cost", "gradient", ...)."""
        return getattr(self.problem, operation, None) is not None

    # ------------------------------------------------------------------
    # Лічильники
    # ------------------------------------------------------------------

    def _count(self, key: str) -> None:
        self.counts[key] = self.counts.get(key, 0) + 1

    def operation_counts(self) -> Dict[str, int]:
        """Копія лічильників викликів за іменами операцій."""
        return dict(self.counts)

    def reset_counts(self) -> None:
        self.counts.clear()

    # ------------------------------------------------------------------
    # Виклик функції користувача
    # ------------------------------------------------------------------

    @staticmethod
    def _call(operation: str, func: Callable[..., Any], *args: Any) -> Any:
        """
        Викликати функцію задачі; будь-який виняток перетворюється
        на EvaluationError з ланцюжком причини.
        """
        try:
            return func(*args)
        except EvaluationError:
            raise
        except Exception as exc:
            raise EvaluationError(operation, f"{type(exc).__name__}: {exc}") from exc

    # ------------------------------------------------------------------
    # Обчислення
    # ------------------------------------------------------------------

    def evaluate_cost(self, param: ArrayLike) -> float:
        """Обчислити f(x)."""
        self._count(COST_COUNT)
        if self.problem.cost is None:
            raise EvaluationError("cost", "цільову функцію не задано")
        return self._call("cost", self.problem.cost, param)

    def evaluate_gradient(self, param: ArrayLike) -> np.ndarray:
        """
        Обчислити ∇f(x):
            - якщо задано аналітичний gradient, використати його;
            - інакше — чисельно через numerical_gradient(cost).
        """
        self._count(GRADIENT_COUNT)
        if self.problem.gradient is not None:
            return self._call("gradient", self.problem.gradient, param)
        if self.problem.cost is None:
            raise EvaluationError("gradient", "не задано ні градієнт, ні цільову функцію")
        return self._call("gradient", numerical_gradient, self.problem.cost, param)

    def evaluate_hessian(self, param: ArrayLike) -> np.ndarray:
        """
        Обчислити H(x); без аналітичного Гессіана — numerical_hessian(cost).
        """
        self._count(HESSIAN_COUNT)
        if self.problem.hessian is not None:
            return self._call("hessian", self.problem.hessian, param)
        if self.problem.cost is None:
            raise EvaluationError("hessian", "не задано ні Гессіан, ні цільову функцію")
        return self._call("hessian", numerical_hessian, self.problem.cost, param)

    def evaluate_jacobian(self, param: ArrayLike) -> np.ndarray:
        """
        Обчислити J(x); без аналітичної матриці — numerical_jacobian(operator).
        """
        self._count(JACOBIAN_COUNT)
        if self.problem.jacobian is not None:
            return self._call("jacobian", self.problem.jacobian, param)
        if self.problem.operator is None:
            raise EvaluationError("jacobian", "не задано ні Якобіан, ні вектор нев'язок")
        return self._call("jacobian", numerical_jacobian, self.problem.operator, param)

    def evaluate_operator(self, param: ArrayLike) -> np.ndarray:
        """Обчислити вектор нев'язок r(x)."""
        self._count(OPERATOR_COUNT)
        if self.problem.operator is None:
            raise EvaluationError("operator", "вектор нев'язок не задано")
        return self._call("operator", self.problem.operator, param)

    def evaluate_modify(self, param: ArrayLike, extent: float) -> ArrayLike:
        """Отримати збурену точку modify(x, extent)."""
        self._count(MODIFY_COUNT)
        if self.problem.modify is None:
            raise EvaluationError("modify", "функцію збурення не задано")
        return self._call("modify", self.problem.modify, param, extent)

    def __repr__(self) -> str:
        return f"ProblemWrapper(name={self.name!r}, counts={self.counts!r})"


__all__ = [
    "ModifyFunction",
    "COST_COUNT",
    "GRADIENT_COUNT",
    "HESSIAN_COUNT",
    "JACOBIAN_COUNT",
    "OPERATOR_COUNT",
    "MODIFY_COUNT",
    "Problem",
    "ProblemWrapper",
]
